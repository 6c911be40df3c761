import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./rollcall.db")

# Connection pool (ignored for SQLite)
DB_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", "20"))
DB_MAX_OVERFLOW = int(os.getenv("DB_MAX_OVERFLOW", "30"))
DB_POOL_TIMEOUT = int(os.getenv("DB_POOL_TIMEOUT", "30"))
DB_POOL_RECYCLE = int(os.getenv("DB_POOL_RECYCLE", "300"))
DB_LOG_SLOW_QUERIES = os.getenv("DB_LOG_SLOW_QUERIES", "true").lower() == "true"
DB_SLOW_QUERY_THRESHOLD = float(os.getenv("DB_SLOW_QUERY_THRESHOLD", "1.0"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Frontend base URL (admin dashboard and public response pages)
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:5173")

# CORS - comma separated origins
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", f"{FRONTEND_URL},http://localhost:3000").split(",")

# Public endpoint throttling


def rate_limit_enabled() -> bool:
    """
    An explicit RATE_LIMIT_ENABLED wins; otherwise throttling is on only when
    REDIS_URL or REDIS_HOST is set.
    """
    default = "true" if (os.getenv("REDIS_URL") or os.getenv("REDIS_HOST")) else "false"
    return os.getenv("RATE_LIMIT_ENABLED", default).lower() == "true"


RATE_LIMIT_ENABLED = rate_limit_enabled()
PUBLIC_RESPONSE_RATE_LIMIT = int(os.getenv("PUBLIC_RESPONSE_RATE_LIMIT", "30"))
PUBLIC_RESPONSE_RATE_WINDOW = int(os.getenv("PUBLIC_RESPONSE_RATE_WINDOW", "60"))

# Redis (rate limit counters)
REDIS_URL = os.getenv("REDIS_URL")
REDIS_HOST = os.getenv("REDIS_HOST", "localhost")
REDIS_PORT = int(os.getenv("REDIS_PORT", "6379"))
REDIS_PASSWORD = os.getenv("REDIS_PASSWORD")
REDIS_DB = int(os.getenv("REDIS_DB", "0"))
REDIS_SSL = os.getenv("REDIS_SSL", "false").lower() == "true"
