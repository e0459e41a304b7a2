# Configuration settings
import os
from datetime import timedelta

from dotenv import load_dotenv

load_dotenv()


def _env_int(name, default):
    try:
        return int(os.getenv(name, default))
    except (TypeError, ValueError):
        return default


def _env_flag(name, default='0'):
    return os.getenv(name, default).strip().lower() in ('1', 'true', 'yes', 'on')


DEFAULT_CORS_ORIGINS = (
    'http://localhost:8080,http://127.0.0.1:8080,'
    'http://localhost:5500,http://127.0.0.1:5500,'
    'http://localhost:3000,http://127.0.0.1:3000,'
    'http://localhost:3001,http://127.0.0.1:3001'
)


class Config:
    SECRET_KEY = os.getenv('SECRET_KEY', 'pastelfeed-secret')

    # relative sqlite paths resolve against the instance folder
    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL', 'sqlite:///pastelfeed.sqlite')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # None means <instance>/uploads, filled in by create_app
    UPLOAD_FOLDER = os.getenv('UPLOAD_FOLDER') or None
    MAX_CONTENT_LENGTH = _env_int('MAX_CONTENT_LENGTH', 16 * 1024 * 1024)

    SESSION_COOKIE_NAME = 'pastelfeed.sid'
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'
    SESSION_COOKIE_SECURE = _env_flag('SESSION_COOKIE_SECURE')
    SESSION_REFRESH_EACH_REQUEST = True
    SESSION_LIFETIME_HOURS = _env_int('SESSION_LIFETIME_HOURS', 24)
    PERMANENT_SESSION_LIFETIME = timedelta(hours=SESSION_LIFETIME_HOURS)

    MESSAGE_LIMIT = _env_int('MESSAGE_LIMIT', 50)

    CORS_ORIGINS = [o.strip() for o in os.getenv('CORS_ORIGINS', DEFAULT_CORS_ORIGINS).split(',') if o.strip()]

    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()
