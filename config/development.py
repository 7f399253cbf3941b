import os

from .config import (  # noqa: F401
    JWT_AUDIENCE,
    JWT_EXPIRATION_SECONDS,
    JWT_ISSUER,
    LOGIN_ATTEMPT_WINDOW_SECONDS,
    MAX_LOGIN_ATTEMPTS,
    db_config_from_env,
    env_flag,
    MAIL_HOST,
    MAIL_PASSWORD,
    MAIL_PORT,
    MAIL_SENDER,
    MAIL_USE_TLS,
    MAIL_USERNAME,
)

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")
JWT_SECRET = os.getenv("JWT_SECRET", "dev-jwt-secret-change-me-dev-jwt-secret-change-me-dev-jwt-secret-change-me")

DB_CONFIG = db_config_from_env(default_password="root")

# Codes are written to the log unless MAIL_BACKEND=smtp
MAIL_BACKEND = os.getenv("MAIL_BACKEND", "log")

CORS_ORIGIN = os.getenv("CORS_ORIGIN", "http://localhost:3000")

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = env_flag("AUTO_INIT_DB", "1")
# Optional: also seed demo data on startup
AUTO_SEED_DB = env_flag("AUTO_SEED_DB", "0")
