import os

BASE_DIR = os.path.abspath(os.path.dirname(__file__))

class Config:
    # Secrets
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-only-change-me")

    # SQLite database file stored next to the app as salonslot.db
    SQLALCHEMY_DATABASE_URI = os.getenv(
        "DATABASE_URL",
        "sqlite:///" + os.path.join(BASE_DIR, "salonslot.db")
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Create tables on startup instead of running migrations (local/tests only)
    AUTO_CREATE_TABLES = os.getenv("AUTO_CREATE_TABLES", "false").lower() == "true"

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Session cookie name for our auth token
    AUTH_COOKIE_NAME = "salonslot_session"
    CSRF_COOKIE_NAME = "csrf_token"
    CSRF_HEADER_NAME = "X-CSRF-Token"

    # 8 hours session lifetime
    SESSION_LIFETIME_SECONDS = 8 * 60 * 60

    # Idle timeout: 20 minutes
    IDLE_TIMEOUT_SECONDS = 20 * 60

    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Lax"
    SESSION_COOKIE_SECURE = False  # set True when using HTTPS

    PASSWORD_MIN_LENGTH = 8

    # Booking policy
    CAPACITY_MON_WED = int(os.getenv("CAPACITY_MON_WED", "2"))
    CAPACITY_THU_SUN = int(os.getenv("CAPACITY_THU_SUN", "3"))
    BOOKING_WINDOW_DAYS = int(os.getenv("BOOKING_WINDOW_DAYS", "90"))
    SAME_DAY_CUTOFF_HOURS = int(os.getenv("SAME_DAY_CUTOFF_HOURS", "2"))
    SLOT_DURATION_MINUTES = 40
    TIME_SLOTS = ("10:00", "10:40", "11:20", "12:00", "12:40", "13:20", "14:00", "14:20")

    # Seat/ticket collisions are retried this many times before giving up
    ADMISSION_MAX_ATTEMPTS = 5

    MAX_AVAILABILITY_RANGE_DAYS = 93
    MAX_REPORT_RANGE_DAYS = 366

    DEBUG = False
