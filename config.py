"""
Configuration for the booking API.
Values come from environment variables, with a local .env file loaded first.
"""
import os
from dotenv import load_dotenv

load_dotenv()


def get_bool(key: str, default: bool) -> bool:
    value = os.getenv(key)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def get_int(key: str, default: int) -> int:
    try:
        return int(os.getenv(key, default))
    except (TypeError, ValueError):
        return default


ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Database
MONGODB_URL = os.getenv("MONGODB_URL", "mongodb://localhost:27017")
MONGODB_DB = os.getenv("MONGODB_DB", "travel-booking")

# Auth
SECRET_KEY = os.getenv("SECRET_KEY", "your-secret-key-here")
ACCESS_TOKEN_EXPIRE_MINUTES = get_int("ACCESS_TOKEN_EXPIRE_MINUTES", 1440)  # 24 hours
GOOGLE_CLIENT_ID = os.getenv("GOOGLE_CLIENT_ID")

# CORS
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")
CORS_ORIGINS = [FRONTEND_URL] if ENVIRONMENT == "production" else ["http://localhost:3000"]

# Listings
DEFAULT_PAGE_LIMIT = get_int("DEFAULT_PAGE_LIMIT", 10)
MAX_PAGE_LIMIT = get_int("MAX_PAGE_LIMIT", 100)

# Business rules that are still open product decisions
REVENUE_INCLUDES_CANCELLED = get_bool("REVENUE_INCLUDES_CANCELLED", True)
STRICT_BOOKING_TRANSITIONS = get_bool("STRICT_BOOKING_TRANSITIONS", False)
