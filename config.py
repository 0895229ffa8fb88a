# config.py
import os
from datetime import timedelta

class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")
    JWT_SECRET_KEY = os.environ.get("JWT_SECRET_KEY", "dev-jwt-secret-change-me")

    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",
        "mysql+pymysql://root:@localhost/daily_challenge"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # JWT config (name-only signup still hands out a token for writes)
    JWT_TOKEN_LOCATION = ["headers"]
    JWT_HEADER_NAME = "Authorization"
    JWT_HEADER_TYPE = "Bearer"
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(days=30)

    # Calendar day used for progress date keys, on server and client alike
    APP_TIMEZONE = os.environ.get("APP_TIMEZONE", "UTC")

    # Client core
    API_BASE_URL = os.environ.get("API_BASE_URL", "http://localhost:5000")
    API_TIMEOUT_SECONDS = float(os.environ.get("API_TIMEOUT_SECONDS", "10"))
    STATS_SYNC_THROTTLE_SECONDS = float(os.environ.get("STATS_SYNC_THROTTLE_SECONDS", "1.0"))
    BADGE_REFRESH_DELAY_SECONDS = float(os.environ.get("BADGE_REFRESH_DELAY_SECONDS", "0.1"))


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    JWT_SECRET_KEY = "test-jwt-secret-at-least-32-bytes-long"
