import os

BASE_DIR = os.path.abspath(os.path.dirname(__file__))


class Config:
    # Secrets
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-only-change-me")

    # SQLite database file stored next to the app as infrabook.db
    SQLALCHEMY_DATABASE_URI = os.getenv(
        "DATABASE_URL",
        "sqlite:///" + os.path.join(BASE_DIR, "infrabook.db")
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Trusted identity headers, set by the upstream session service
    ACTOR_ID_HEADER = "X-Actor-Id"
    ACTOR_EMAIL_HEADER = "X-Actor-Email"
    ACTOR_ROLE_HEADER = "X-Actor-Role"

    # "today" / "now" are evaluated in this zone
    BOOKING_TIMEZONE = os.getenv("BOOKING_TIMEZONE", "UTC")

    # Cancellation policy (end users only, staff bypass it)
    CANCEL_CUTOFF_HOURS = int(os.getenv("CANCEL_CUTOFF_HOURS", "24"))

    # Batch generation limits
    MAX_BATCH_DAYS = int(os.getenv("MAX_BATCH_DAYS", "366"))

    # Expiry sweeper
    SWEEPER_ENABLED = os.getenv("SWEEPER_ENABLED", "true").lower() == "true"
    SWEEP_INTERVAL_MINUTES = int(os.getenv("SWEEP_INTERVAL_MINUTES", "5"))
    SWEEP_BATCH_SIZE = int(os.getenv("SWEEP_BATCH_SIZE", "500"))

    # Email (SMTP)
    SMTP_HOST = os.getenv("SMTP_HOST")
    SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
    SMTP_USERNAME = os.getenv("SMTP_USERNAME")
    SMTP_PASSWORD = os.getenv("SMTP_PASSWORD")
    SMTP_FROM_EMAIL = os.getenv("SMTP_FROM_EMAIL")
    SMTP_USE_TLS = os.getenv("SMTP_USE_TLS", "true").lower() == "true"

    # Logging
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Basic app settings
    DEBUG = False


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    SWEEPER_ENABLED = False
    SWEEP_BATCH_SIZE = 2
    SMTP_HOST = None
