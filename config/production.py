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

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")
JWT_SECRET = os.getenv("JWT_SECRET", "")

DB_CONFIG = db_config_from_env()

MAIL_BACKEND = os.getenv("MAIL_BACKEND", "smtp")

CORS_ORIGIN = os.getenv("CORS_ORIGIN")

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = env_flag("AUTO_INIT_DB", "0")
AUTO_SEED_DB = env_flag("AUTO_SEED_DB", "0")
