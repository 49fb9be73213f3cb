"""
Settings read from the environment (and a local .env in dev).

APP_ENV              local | test | prod   (local auto-creates tables)
DATABASE_URL         SQLAlchemy URL, defaults to a SQLite file next to the app
CURDLE_MAX_GUESSES   guesses per day (default 6)
CURDLE_LOG_LEVEL     DEBUG / INFO / WARNING ...
CURDLE_CORS_ORIGINS  comma separated list, "*" allows everything
CURDLE_STORE         db | memory
"""

import logging
import os

from dotenv import load_dotenv

# dev convenience; in prod the platform injects env vars
load_dotenv()


class Config:
    APP_ENV = os.getenv("APP_ENV", "local")
    DATABASE_URL = os.getenv("DATABASE_URL") or "sqlite+pysqlite:///./curdle.db"
    MAX_GUESSES = int(os.getenv("CURDLE_MAX_GUESSES", "6"))
    LOG_LEVEL = os.getenv("CURDLE_LOG_LEVEL", "INFO").upper()
    CORS_ORIGINS = [o.strip() for o in os.getenv("CURDLE_CORS_ORIGINS", "*").split(",") if o.strip()]
    STORE = os.getenv("CURDLE_STORE", "db")


def configure_logging(level: str = Config.LOG_LEVEL) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
