import os
import tempfile


def _int_env(name, default):
    try:
        return int(os.environ.get(name, default))
    except (TypeError, ValueError):
        return default


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY', 'devkey')
    JWT_SECRET_KEY = os.environ.get('JWT_SECRET_KEY', 'devjwt')
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL', 'sqlite:///data.sqlite')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # file storage
    STORAGE_ROOT = os.environ.get('STORAGE_ROOT', os.path.abspath('storage'))
    STORAGE_PUBLIC_URL = os.environ.get('STORAGE_PUBLIC_URL', 'http://localhost:5000/storage')
    MAX_CONTENT_LENGTH = 20 * 1024 * 1024

    # links in outbound mail
    APP_BASE_URL = os.environ.get('APP_BASE_URL', 'http://localhost:5173')

    # transactional email (Resend)
    RESEND_API_KEY = os.environ.get('RESEND_API_KEY', '')
    RESEND_API_URL = os.environ.get('RESEND_API_URL', 'https://api.resend.com/emails')
    EMAIL_FROM_INVITATIONS = os.environ.get('EMAIL_FROM_INVITATIONS', 'Property Management <onboarding@resend.dev>')
    EMAIL_FROM_INVENTORY = os.environ.get('EMAIL_FROM_INVENTORY', 'Inventory Management <onboarding@resend.dev>')
    EMAIL_FROM_WARRANTIES = os.environ.get('EMAIL_FROM_WARRANTIES', 'STR Manager <onboarding@resend.dev>')
    EMAIL_TIMEOUT = _int_env('EMAIL_TIMEOUT', 10)

    # per-process quotas on the mail endpoints
    RESTOCK_EMAILS_PER_HOUR = _int_env('RESTOCK_EMAILS_PER_HOUR', 10)
    WARRANTY_EMAILS_PER_HOUR = _int_env('WARRANTY_EMAILS_PER_HOUR', 10)

    INVITATION_TTL_DAYS = _int_env('INVITATION_TTL_DAYS', 7)

    LOG_DIR = os.environ.get('LOG_DIR', os.path.abspath('logs'))
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    JWT_SECRET_KEY = 'test-jwt-secret-key-with-enough-length'
    STORAGE_ROOT = os.path.join(tempfile.gettempdir(), 'strmanager-test-storage')
    LOG_DIR = os.path.join(tempfile.gettempdir(), 'strmanager-test-logs')
    RESTOCK_EMAILS_PER_HOUR = 3
    WARRANTY_EMAILS_PER_HOUR = 3
