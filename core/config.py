import os

from dotenv import load_dotenv

from utils.datetime_helpers import resolve_timezone

# Load environment variables from .env file
load_dotenv()


def _build_database_url() -> str:
    # An explicit URL wins (SQLite for local runs, any SQLAlchemy URL in prod)
    database_url = os.getenv("DATABASE_URL")
    if database_url:
        return database_url

    required_vars = ["DB_HOST", "DB_NAME", "DB_USER", "DB_PASSWORD"]
    missing_vars = [var for var in required_vars if not os.getenv(var)]
    if missing_vars:
        raise ValueError(
            f"Missing required environment variables: {', '.join(missing_vars)} "
            "(or set DATABASE_URL)"
        )

    db_port = os.getenv("DB_PORT", "5432")  # Default PostgreSQL port
    return (
        f"postgresql+psycopg2://{os.getenv('DB_USER')}:{os.getenv('DB_PASSWORD')}"
        f"@{os.getenv('DB_HOST')}:{db_port}/{os.getenv('DB_NAME')}"
    )


DATABASE_URL = _build_database_url()
SQL_ECHO = os.getenv("SQL_ECHO", "False").lower() in ("true", "1", "t")

# Upper bound for any single ledger call (pool checkout, lock wait, statement)
LEDGER_TIMEOUT_SECONDS = float(os.getenv("LEDGER_TIMEOUT_SECONDS", "5"))

# Check-ins farther than this from the client's registered location get flagged
DISTANCE_WARNING_KM = float(os.getenv("DISTANCE_WARNING_KM", "0.5"))

# Calendar days in the daily summary are cut at midnight in this zone
REPORT_TIMEZONE = os.getenv("REPORT_TIMEZONE", "UTC")
resolve_timezone(REPORT_TIMEZONE)

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

DEV_DOMAIN = os.getenv("DEV_DOMAIN", "http://localhost:5173")
ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv("ALLOWED_ORIGINS", DEV_DOMAIN).split(",")
    if origin.strip()
]
