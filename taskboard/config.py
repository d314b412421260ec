import os


class Config:
    """Base configuration. Shared across all environments."""

    # --- Required ---
    SECRET_KEY = os.environ.get("SECRET_KEY")

    # Handle DATABASE_URL: some PaaS providers (Render, Heroku) use
    # "postgres://" which SQLAlchemy 1.4+ doesn't accept.
    _db_url = os.environ.get("DATABASE_URL", "")
    if _db_url.startswith("postgres://"):
        _db_url = _db_url.replace("postgres://", "postgresql://", 1)
    SQLALCHEMY_DATABASE_URI = _db_url or None

    # --- JWT ---
    # Falls back to SECRET_KEY so a single secret is enough for local dev.
    JWT_SECRET_KEY = os.environ.get("JWT_SECRET_KEY") or SECRET_KEY
    JWT_ALGORITHM = os.environ.get("JWT_ALGORITHM", "HS256")
    JWT_EXPIRES_MINUTES = int(os.environ.get("JWT_EXPIRES_MINUTES", 60 * 24 * 7))

    # --- Listing ---
    BOARDS_PAGE_SIZE = int(os.environ.get("BOARDS_PAGE_SIZE", 10))
    BOARDS_MAX_PAGE_SIZE = 100

    # --- SQLAlchemy ---
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_pre_ping": True,
        "pool_recycle": 300,
    }

    # --- Rate limiting ---
    RATELIMIT_STORAGE_URI = os.environ.get("RATELIMIT_STORAGE_URI", "memory://")

    @staticmethod
    def validate():
        """Fail fast if required env vars are missing."""
        required = [
            "SECRET_KEY",
            "DATABASE_URL",
        ]
        missing = [v for v in required if not os.environ.get(v)]
        if missing:
            raise RuntimeError(
                f"Missing required environment variables: {', '.join(missing)}"
            )


class DevConfig(Config):
    """Local development."""

    DEBUG = True
    SQLALCHEMY_DATABASE_URI = Config.SQLALCHEMY_DATABASE_URI or "sqlite:///taskboard.db"
    SECRET_KEY = Config.SECRET_KEY or "dev-secret-key"
    JWT_SECRET_KEY = Config.JWT_SECRET_KEY or "dev-secret-key"


class TestConfig(Config):
    """Testing — in-memory SQLite, rate limits off."""

    TESTING = True
    DEBUG = True
    SECRET_KEY = "test-secret-key-not-for-production"
    JWT_SECRET_KEY = "test-jwt-secret-not-for-production"
    JWT_EXPIRES_MINUTES = 60
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    RATELIMIT_ENABLED = False  # disable rate limiting in tests
    SERVER_NAME = "localhost"

    @staticmethod
    def validate():
        """Skip validation in test mode — everything is hardcoded."""
        pass


class ProdConfig(Config):
    """Production on Render."""

    DEBUG = False


config_by_name = {
    "development": DevConfig,
    "production": ProdConfig,
    "testing": TestConfig,
}
