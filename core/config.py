# core/config.py
import os
from dotenv import load_dotenv

load_dotenv()

SECRET_KEY = os.getenv("SECRET_KEY", "change-me-in-production")
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///restaurant.db")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "1440"))
TOKEN_ALGORITHM = "HS256"

ADMIN_NAME = os.getenv("ADMIN_NAME", "Admin User")
ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@example.com")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "admin123")

# Reports refuse ranges wider than this many days
REPORT_MAX_RANGE_DAYS = int(os.getenv("REPORT_MAX_RANGE_DAYS", "366"))
REPORT_DEFAULT_DAYS = int(os.getenv("REPORT_DEFAULT_DAYS", "30"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
PORT = int(os.getenv("PORT", "8000"))

# Upper bounds on client-supplied numbers; larger values are rejected with 400
MAX_ITEM_PRICE = float(os.getenv("MAX_ITEM_PRICE", "100000"))
MAX_QUANTITY = int(os.getenv("MAX_QUANTITY", "999"))
