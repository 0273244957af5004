import os
from datetime import timedelta
from dotenv import load_dotenv


load_dotenv()


def _optional_int(name):
    value = os.getenv(name)
    return int(value) if value not in (None, "") else None


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY") or os.getenv("JWT_SECRET_KEY", "fallback-secret")
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "fallback-jwt")
    SQLALCHEMY_DATABASE_URI = os.getenv("SQLALCHEMY_DATABASE_URI", "sqlite:///attendance.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    REDIS_URL = os.getenv("REDIS_URL")
    RATELIMIT_STORAGE_URI = REDIS_URL or "memory://"
    RATELIMIT_ENABLED = True
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",")
    FLASK_ENV = os.getenv("FLASK_ENV", "development")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=8)  # one school day
    JWT_TOKEN_LOCATION = ["cookies", "headers"]
    JWT_COOKIE_SECURE = os.getenv("JWT_COOKIE_SECURE", "true").lower() in ("true", "1", "yes")
    JWT_COOKIE_SAMESITE = "Lax"
    JWT_COOKIE_CSRF_PROTECT = False

    # A "present" scan after this hour is stored as "late". None disables the rule.
    LATE_AFTER_HOUR = _optional_int("LATE_AFTER_HOUR")
    REPORT_LOW_ATTENDANCE_THRESHOLD = float(os.getenv("REPORT_LOW_ATTENDANCE_THRESHOLD", 75))

    QR_CODE_BOX_SIZE = 10
    QR_CODE_BORDER = 4


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    RATELIMIT_ENABLED = False
    RATELIMIT_STORAGE_URI = "memory://"
    JWT_COOKIE_SECURE = False
    JWT_SECRET_KEY = "test-jwt-secret-key-with-enough-length"
    SECRET_KEY = "test-secret"
    LATE_AFTER_HOUR = None
    LOG_LEVEL = "WARNING"
