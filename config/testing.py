import os

SECRET_KEY = "test-secret"
JWT_SECRET = "test-jwt-secret"
JWT_EXPIRES_DAYS = 1

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "event_registration_test"),
}

DEBUG = False
TESTING = True

AUTO_INIT_DB = False
AUTO_SEED_DB = False

API_PREFIX = "/api"
UPLOAD_FOLDER = os.getenv("UPLOAD_FOLDER", "/tmp/event_registration_uploads")
MAX_UPLOAD_BYTES = 5 * 1024 * 1024

ENABLE_SCHEDULER = False
SWEEP_HOUR = 1
NOTIFICATIONS_ASYNC = False

LOG_LEVEL = "WARNING"
