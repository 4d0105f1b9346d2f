# farmledger/config.py
import logging
import os
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Resolve to the project root (one level up from farmledger/)
BASE_DIR = Path(__file__).resolve().parent.parent

DATABASE_URL = os.getenv(
    "DATABASE_URL",
    f"sqlite:///{(BASE_DIR / 'farmledger.db').as_posix()}",
)
SECRET_KEY = os.getenv("SECRET_KEY", "change-me-farmledger-dev-secret-key-0001")
TOKEN_TTL_MINUTES = int(os.getenv("TOKEN_TTL_MINUTES", "1440"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

SESSION_COOKIE = "farmledger_session"
RECENT_LIMIT = 5


def configure_logging(level: str = LOG_LEVEL) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
