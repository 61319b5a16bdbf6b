import os
from pathlib import Path

from dotenv import load_dotenv


base_dir = Path(__file__).resolve().parent
load_dotenv(base_dir / ".env", override=False)


# Seconds. The last path segment of a request URL selects the bucket.
CONTENT_TTLS = {
    "hero": 300,
    "highlights": 300,
    "stadiums": 300,
    "stadiumSchedules": 300,
    "specialMatches": 300,
    "dailyImages": 300,
    "upcomingFightsBackground": 300,
}
DEFAULT_TTL = 60


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")
    # tickets.db lives beside the package unless DATABASE_URL says otherwise
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///" + str(base_dir / "tickets.db"))
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Apply pending migrations inside create_app; a failure aborts startup
    RUN_MIGRATIONS_ON_STARTUP = os.getenv("RUN_MIGRATIONS_ON_STARTUP", "true").lower() == "true"

    # Server-side response cache for the public read endpoints
    CACHE_DEFAULT_TTL = int(os.getenv("CACHE_DEFAULT_TTL", str(DEFAULT_TTL)))
    CACHE_MAX_ENTRIES = int(os.getenv("CACHE_MAX_ENTRIES", "512"))
    SERVER_CACHE_TTLS = dict(CONTENT_TTLS, tickets=30, bookings=10)

    # Email verification links
    VERIFICATION_TTL_MINUTES = int(os.getenv("VERIFICATION_TTL_MINUTES", "30"))

    # Payment gateway
    PAYMENT_MERCHANT_ID = os.getenv("PAYMENT_MERCHANT_ID", "")
    PAYMENT_EXPIRY_MINUTES = int(os.getenv("PAYMENT_EXPIRY_MINUTES", "15"))

    # Excel export path
    EXCEL_OUTPUT_PATH = os.getenv("EXCEL_OUTPUT_PATH", str(base_dir / "exports" / "payments.xlsx"))

    CORS_ORIGIN = os.getenv("CORS_ORIGIN", "http://localhost:5173")

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
