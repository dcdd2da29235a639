import os


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "super-secret-key")

    SQLALCHEMY_DATABASE_URI = os.getenv(
        "SQLALCHEMY_DATABASE_URI",
        "sqlite:///circulation.db"
    )

    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {"pool_pre_ping": True}

    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "jwt-super-secret-change-me-in-production")

    # Maintenance jobs (reservation sweep, inventory drift check)
    SCHEDULER_ENABLED = os.getenv("SCHEDULER_ENABLED", "1") == "1"
    RESERVATION_SWEEP_MINUTES = int(os.getenv("RESERVATION_SWEEP_MINUTES", "10"))
    INVENTORY_CHECK_MINUTES = int(os.getenv("INVENTORY_CHECK_MINUTES", "60"))


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    SQLALCHEMY_ENGINE_OPTIONS = {}
    JWT_SECRET_KEY = "test-jwt-secret-with-enough-bytes-for-hs256"
    SCHEDULER_ENABLED = False
