import os
from dotenv import load_dotenv

load_dotenv()

BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


class Config:
    DEBUG = os.getenv("FLASK_DEBUG", "0") == "1"
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///" + os.path.join(BASE_DIR, "pos.db"))
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SECRET_KEY = os.getenv("SECRET_KEY", "change_me")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")

    # JWT
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "your-secret-key-change-in-production")
    REFRESH_SECRET_KEY = os.getenv("REFRESH_SECRET_KEY", "your-refresh-secret-key-change-in-production")
    ACCESS_TOKEN_EXPIRATION_HOURS = int(os.getenv("ACCESS_TOKEN_EXPIRATION_HOURS", "12"))
    REFRESH_TOKEN_EXPIRATION_DAYS = int(os.getenv("REFRESH_TOKEN_EXPIRATION_DAYS", "7"))

    # Point of sale
    CURRENCY = os.getenv("CURRENCY", "GHS")
    TRANSACTION_ID_PREFIX = os.getenv("TRANSACTION_ID_PREFIX", "TNX")
    PAYMENT_METHODS = ("cash", "card", "momo")
    DEFAULT_USER_PASSWORD = os.getenv("DEFAULT_USER_PASSWORD", "password")

    # Uploads (product images, CSV imports)
    UPLOAD_FOLDER = os.getenv("UPLOAD_FOLDER", os.path.join(BASE_DIR, "uploads"))
    MAX_CONTENT_LENGTH = 10 * 1024 * 1024

    # Company settings read-through cache, seconds
    SETTINGS_CACHE_TTL = int(os.getenv("SETTINGS_CACHE_TTL", "300"))

    # Sales targets (placeholder business rules, tune per store)
    MONTHLY_TARGET_BASE = float(os.getenv("MONTHLY_TARGET_BASE", "8000"))
    MONTHLY_TARGET_MULTIPLIERS = {11: 1.3, 12: 1.5}
    MONTHLY_TARGET_GROWTH = float(os.getenv("MONTHLY_TARGET_GROWTH", "1.1"))
    DAILY_TARGET_BASE = float(os.getenv("DAILY_TARGET_BASE", "1000"))
    DAILY_TARGET_WEEKEND = float(os.getenv("DAILY_TARGET_WEEKEND", "1.2"))


class TestConfig(Config):
    TESTING = True
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SECRET_KEY = "test-secret-key"
    JWT_SECRET_KEY = "test-jwt-secret"
    REFRESH_SECRET_KEY = "test-refresh-secret"
    SETTINGS_CACHE_TTL = 60
