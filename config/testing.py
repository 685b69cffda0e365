import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "attendance_tracker_test"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

TIMEZONE = "UTC"
WORK_START = "09:00"
LATE_GRACE_MINUTES = 0
HALF_DAY_HOURS = 4

EVENT_QUEUE_SIZE = 10
EVENT_KEEPALIVE_SECONDS = 0.05

AUTO_INIT_DB = False
AUTO_SEED_DB = False
