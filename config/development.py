from .config import Config, env_flag

SECRET_KEY = Config.SECRET_KEY
JWT_SECRET = Config.JWT_SECRET
JWT_EXPIRES_DAYS = Config.JWT_EXPIRES_DAYS

DB_CONFIG = Config.db_config()

DEBUG = True
TESTING = False

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = env_flag("AUTO_INIT_DB", "1")
# Optional: also seed reference data and demo accounts on startup
AUTO_SEED_DB = env_flag("AUTO_SEED_DB", "0")

API_PREFIX = Config.API_PREFIX
UPLOAD_FOLDER = Config.UPLOAD_FOLDER
MAX_UPLOAD_BYTES = Config.MAX_UPLOAD_BYTES

ENABLE_SCHEDULER = env_flag("ENABLE_SCHEDULER", "1")
SWEEP_HOUR = Config.SWEEP_HOUR
NOTIFICATIONS_ASYNC = env_flag("NOTIFICATIONS_ASYNC", "0")

LOG_LEVEL = "DEBUG"
