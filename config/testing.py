import os

from .config import (  # noqa: F401
    JWT_AUDIENCE,
    JWT_EXPIRATION_SECONDS,
    JWT_ISSUER,
    db_config_from_env,
)

SECRET_KEY = "test-secret"
JWT_SECRET = "test-jwt-secret-0123456789abcdef-test-jwt-secret-0123456789abcdef"

DB_CONFIG = db_config_from_env(default_password="12345")

MAIL_BACKEND = "log"

MAX_LOGIN_ATTEMPTS = 3
LOGIN_ATTEMPT_WINDOW_SECONDS = 900

CORS_ORIGIN = "http://localhost:3000"

DEBUG = False
TESTING = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING")

AUTO_INIT_DB = False
AUTO_SEED_DB = False
