import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file)
else:
    data = dict()


class ApplicationConfig:
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./teller_iam.db")
    REDIS_URL = data.get("REDIS_URL", "redis://localhost:6379/0")
    API_PREFIX = data.get("API_PREFIX", "/api")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")

    # Session tokens
    JWT_SECRET = data.get("JWT_SECRET", "dev-secret-key-change-in-production")
    JWT_ALGORITHM = data.get("JWT_ALGORITHM", "HS256")
    ACCESS_TOKEN_TTL_MINUTES = int(data.get("ACCESS_TOKEN_TTL_MINUTES", 15))
    SESSION_MAX_AGE_MINUTES = int(data.get("SESSION_MAX_AGE_MINUTES", 30))
    SESSION_UPDATE_AGE_MINUTES = int(data.get("SESSION_UPDATE_AGE_MINUTES", 5))
    REFRESH_TOKEN_TTL_DAYS = int(data.get("REFRESH_TOKEN_TTL_DAYS", 7))
    ACCESS_TOKEN_COOKIE = data.get("ACCESS_TOKEN_COOKIE", "access_token")
    COOKIE_SECURE = bool(data.get("COOKIE_SECURE", False))

    # Credentials
    BCRYPT_ROUNDS = int(data.get("BCRYPT_ROUNDS", 12))
    MAX_FAILED_ATTEMPTS = int(data.get("MAX_FAILED_ATTEMPTS", 5))
    LOCKOUT_MINUTES = int(data.get("LOCKOUT_MINUTES", 15))

    # Invitations and portal pages
    APP_BASE_URL = data.get("APP_BASE_URL", "http://localhost:3000")
    INVITATION_TTL_HOURS = int(data.get("INVITATION_TTL_HOURS", 72))
    LOGIN_PATH = data.get("LOGIN_PATH", "/login")
    REGISTER_PATH = data.get("REGISTER_PATH", "/register")

    # Passkeys
    WEBAUTHN_RP_ID = data.get("WEBAUTHN_RP_ID", "localhost")
    WEBAUTHN_RP_NAME = data.get("WEBAUTHN_RP_NAME", "Global Remit Teller Portal")
    WEBAUTHN_ORIGIN = data.get("WEBAUTHN_ORIGIN", "http://localhost:3000")
    PASSKEY_CHALLENGE_TTL_SECONDS = int(data.get("PASSKEY_CHALLENGE_TTL_SECONDS", 300))
