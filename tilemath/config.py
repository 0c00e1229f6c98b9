# tilemath/config.py
import os


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret")

    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Lax"
    SESSION_COOKIE_SECURE = True

    # tick and state polling are exempt; this budget covers player intents
    RATELIMIT_DEFAULT = "3000 per hour; 240 per minute"
    RATELIMIT_STORAGE_URI = os.environ.get("RATELIMIT_STORAGE_URI", "memory://")
    RATELIMIT_ENABLED = True

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    LOG_FILE = os.environ.get("LOG_FILE")  # e.g. logs/tilemath.log

    # Round rules
    TILE_ROUND_SECONDS = int(os.environ.get("TILE_ROUND_SECONDS", "60"))
    TILE_BOARD_MIN = 4
    TILE_BOARD_MAX = 6
    TILE_POOL_COPIES = 3
    TILE_RESULT_LIMIT = 1000
    TILE_BONUS_STEP = 5


class DevelopmentConfig(Config):
    DEBUG = True
    SESSION_COOKIE_SECURE = False
    LOG_LEVEL = "DEBUG"


class ProductionConfig(Config):
    SESSION_COOKIE_SECURE = True


class TestingConfig(Config):
    TESTING = True
    SESSION_COOKIE_SECURE = False
    RATELIMIT_ENABLED = False
    LOG_LEVEL = "DEBUG"
