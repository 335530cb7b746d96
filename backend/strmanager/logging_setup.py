import logging
import logging.handlers
from pathlib import Path

LOG_FILE = "strmanager.log"


def setup_logging(app) -> Path:
    """Rotating file log under LOG_DIR, shared by the root and app loggers."""
    log_dir = Path(app.config["LOG_DIR"]).expanduser()
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / LOG_FILE
    level = getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)

    # the factory runs once per test; keep a single file handler
    if not any(getattr(h, "baseFilename", "").endswith(LOG_FILE) for h in root.handlers):
        handler = logging.handlers.RotatingFileHandler(log_path, maxBytes=5_000_000, backupCount=3, encoding="utf-8")
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s - %(message)s"))
        handler.setLevel(level)
        root.addHandler(handler)

    app.logger.setLevel(level)
    return log_path
