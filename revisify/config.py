import os
from dotenv import load_dotenv

load_dotenv()


def _require_env(key: str) -> str:
    value = os.getenv(key)
    if not value:
        raise RuntimeError(f"Missing required environment variable: {key}")
    return value


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY")
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    BASE_URL = os.getenv("BASE_URL", "http://127.0.0.1:5000")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Hosted identity provider
    AUTH_URL = os.getenv("AUTH_URL")
    AUTH_JWT_SECRET = os.getenv("AUTH_JWT_SECRET")
    AUTH_JWT_AUDIENCE = os.getenv("AUTH_JWT_AUDIENCE", "authenticated")
    JWKS_CACHE_TTL = int(os.getenv("JWKS_CACHE_TTL", 3600))

    # Redis is optional; gates fall back to the conditional write alone
    REDIS_URL = os.getenv("REDIS_URL")
    GATE_LOCK_TIMEOUT = int(os.getenv("GATE_LOCK_TIMEOUT", 5))

    FREE_PROJECT_LIMIT = int(os.getenv("FREE_PROJECT_LIMIT", 1))

    # Paddle checkout + webhooks
    PADDLE_ENV = os.getenv("PADDLE_ENV", "sandbox")
    PADDLE_CLIENT_TOKEN = os.getenv("PADDLE_CLIENT_TOKEN")
    PADDLE_PRICE_ID = os.getenv("PADDLE_PRICE_ID")
    PADDLE_WEBHOOK_SECRET = os.getenv("PADDLE_WEBHOOK_SECRET")
    PADDLE_WEBHOOK_TOLERANCE = int(os.getenv("PADDLE_WEBHOOK_TOLERANCE", 300))

    @classmethod
    def validate(cls):
        """Fail fast when a production deployment is missing its secrets."""
        cls.SECRET_KEY = _require_env("SECRET_KEY")
        url = _require_env("DATABASE_URL")
        # Hosted providers still hand out postgres:// URLs
        if url.startswith("postgres://"):
            url = "postgresql://" + url[len("postgres://"):]
        cls.SQLALCHEMY_DATABASE_URI = url
        if not cls.AUTH_JWT_SECRET and not cls.AUTH_URL:
            raise RuntimeError(
                "Missing required environment variable: AUTH_JWT_SECRET or AUTH_URL"
            )


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = "test-secret-key"
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    AUTH_URL = None
    AUTH_JWT_SECRET = "test-auth-secret-with-enough-length-for-hs256"
    REDIS_URL = None
    FREE_PROJECT_LIMIT = 1
    PADDLE_ENV = "sandbox"
    PADDLE_CLIENT_TOKEN = "test_client_token"
    PADDLE_PRICE_ID = "pri_test_pro"
    PADDLE_WEBHOOK_SECRET = "pdl_ntfset_test_secret"
    PADDLE_WEBHOOK_TOLERANCE = 300
