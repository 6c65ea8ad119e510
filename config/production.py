import os

from .config import Config, env_flag

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")
JWT_SECRET = os.getenv("JWT_SECRET", SECRET_KEY)
JWT_EXPIRES_DAYS = Config.JWT_EXPIRES_DAYS

DB_CONFIG = Config.db_config()

DEBUG = False
TESTING = False

AUTO_INIT_DB = env_flag("AUTO_INIT_DB", "0")
AUTO_SEED_DB = env_flag("AUTO_SEED_DB", "0")

API_PREFIX = Config.API_PREFIX
UPLOAD_FOLDER = Config.UPLOAD_FOLDER
MAX_UPLOAD_BYTES = Config.MAX_UPLOAD_BYTES

ENABLE_SCHEDULER = env_flag("ENABLE_SCHEDULER", "1")
SWEEP_HOUR = Config.SWEEP_HOUR
NOTIFICATIONS_ASYNC = env_flag("NOTIFICATIONS_ASYNC", "1")

LOG_LEVEL = Config.LOG_LEVEL
