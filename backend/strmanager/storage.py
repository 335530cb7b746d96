import logging
import re
import time
from pathlib import Path, PurePosixPath
from urllib.parse import quote

from flask import current_app
from werkzeug.utils import secure_filename

from .errors import StorageError

logger = logging.getLogger(__name__)

BUCKETS = ("warranty-attachments", "damage-report-photos", "asset-photos", "inventory-images")

_BUCKET_RE = re.compile(r"^[a-z0-9][a-z0-9-]{1,62}$")


class LocalFileStorage:
    """Bucket/path object store on the local filesystem."""

    def __init__(self, root, public_url):
        self.root = Path(root)
        self.public_url = public_url.rstrip("/")

    def _resolve(self, bucket, path):
        if not _BUCKET_RE.match(bucket or ""):
            raise StorageError(f"invalid bucket: {bucket!r}")
        rel = PurePosixPath(path)
        if rel.is_absolute() or ".." in rel.parts or not rel.parts:
            raise StorageError(f"invalid object path: {path!r}")
        return self.root / bucket / Path(*rel.parts)

    def upload(self, bucket, path, data: bytes):
        target = self._resolve(bucket, path)
        if target.exists():
            raise StorageError(f"object already exists: {bucket}/{path}")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as exc:
            raise StorageError(str(exc)) from exc
        logger.info("stored %s/%s (%d bytes)", bucket, path, len(data))

    def get_public_url(self, bucket, path) -> str:
        return f"{self.public_url}/{bucket}/{quote(path)}"

    def local_path(self, bucket, path) -> Path:
        return self._resolve(bucket, path)


def get_storage():
    return current_app.extensions["storage"]


def object_path(owner_id, filename):
    name = secure_filename(filename or "") or "upload"
    return f"{owner_id}/{int(time.time() * 1000)}_{name}"


def upload_files(bucket, owner_id, files):
    """
    Store each file in turn. A failed file is reported in `errors` and the
    rest of the batch still goes through.
    """
    storage = get_storage()
    urls, errors = [], []
    for f in files:
        path = object_path(owner_id, f.filename)
        try:
            storage.upload(bucket, path, f.read())
        except StorageError as exc:
            logger.warning("upload failed bucket=%s file=%s: %s", bucket, f.filename, exc)
            errors.append({"file": f.filename, "error": str(exc)})
            continue
        urls.append(storage.get_public_url(bucket, path))
    return urls, errors
