import os

from dotenv import load_dotenv

load_dotenv()

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
DEBUG = LOG_LEVEL == "DEBUG"

DATABASE_URL = os.getenv("DATABASE_URL")
if not DATABASE_URL:
    raise ValueError("DATABASE_URL must be set in the environment")

ALLOWED_ORIGINS_RAW = os.getenv("ALLOWED_ORIGINS")
if not ALLOWED_ORIGINS_RAW:
    raise ValueError("ALLOWED_ORIGINS must be set in the environment")

ALLOWED_ORIGINS: list[str] = [
    origin.strip() for origin in ALLOWED_ORIGINS_RAW.split(",")
]

# Reservation lifecycle
PENDING_EXPIRY_HOURS = int(os.getenv("PENDING_EXPIRY_HOURS", "48"))
MAX_STAY_NIGHTS = int(os.getenv("MAX_STAY_NIGHTS", "7"))
CAPACITY_ALLOWANCE = int(os.getenv("CAPACITY_ALLOWANCE", "2"))

# Dashboard presentation
DISPLAY_TIMEZONE = os.getenv("DISPLAY_TIMEZONE", "Asia/Manila")
RECENT_ITEMS_LIMIT = int(os.getenv("RECENT_ITEMS_LIMIT", "3"))
