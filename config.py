import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.environ.get("CONFIG_FILE_PATH", os.path.join(ROOT_PATH, "env.yaml"))

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file) or dict()
else:
    data = dict()


def _get(key, default):
    """Environment variable first, then env.yaml, then the default."""
    raw = os.environ.get(key)
    if raw is None:
        return data.get(key, default)
    if isinstance(default, bool):
        return raw.strip().lower() in ("1", "true", "yes", "on")
    if isinstance(default, int):
        return int(raw)
    if isinstance(default, list):
        return [item.strip() for item in raw.split(",") if item.strip()]
    return raw


class ApplicationConfig:
    DB_URI = _get("DB_URI", "sqlite+aiosqlite:///./test.db")
    API_PORT = _get("API_PORT", 8000)
    API_HOST = _get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = _get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = bool(_get("CORS_ALLOW_CREDENTIALS", True))
    LOG_LEVEL = _get("LOG_LEVEL", "INFO")
    ENABLE_LOGGING_MIDDLEWARE = bool(_get("ENABLE_LOGGING_MIDDLEWARE", True))
    ENVIRONMENT = _get("ENVIRONMENT", "development")
    APP_NAME = _get("APP_NAME", "Inspecciones")

    # Token signing, one secret per token class
    JWT_ACCESS_SECRET = _get("JWT_ACCESS_SECRET", "dev-access-secret-change-in-production")
    JWT_REFRESH_SECRET = _get("JWT_REFRESH_SECRET", "dev-refresh-secret-change-in-production")
    JWT_TEMP_SECRET = _get("JWT_TEMP_SECRET", "dev-temp-secret-change-in-production")
    ACCESS_TOKEN_MINUTES = _get("ACCESS_TOKEN_MINUTES", 15)
    REFRESH_TOKEN_DAYS = _get("REFRESH_TOKEN_DAYS", 7)
    TEMP_TOKEN_MINUTES = _get("TEMP_TOKEN_MINUTES", 5)

    BCRYPT_ROUNDS = _get("BCRYPT_ROUNDS", 12)

    # Field device login (pre-shared key); empty disables the endpoint
    INSPECTOR_API_KEY = _get("INSPECTOR_API_KEY", "")
    INSPECTOR_USERNAME = _get("INSPECTOR_USERNAME", "inspector_tecnico")

    # Session reaper
    SESSION_CLEANUP_ENABLED = bool(_get("SESSION_CLEANUP_ENABLED", True))
    CRON_SESSION_CLEANUP = _get("CRON_SESSION_CLEANUP", "0 3 * * *")
    SESSION_REVOKED_RETENTION_DAYS = _get("SESSION_REVOKED_RETENTION_DAYS", 7)
    SESSION_INACTIVITY_DAYS = _get("SESSION_INACTIVITY_DAYS", 30)
