"""
Single place to:
- Create a SQLAlchemy Engine from Config.DATABASE_URL
- Create a Session factory (SessionLocal) for per-request DB sessions
- Provide get_db() dependency for FastAPI routes
"""

from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase

from .config import Config

# SQLite needs check_same_thread=False because FastAPI runs sync routes in a threadpool
connect_args = {"check_same_thread": False} if Config.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(
    Config.DATABASE_URL,
    pool_pre_ping=True,
    echo=False,
    future=True,
    connect_args=connect_args,
)

SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


class Base(DeclarativeBase):
    pass


# One session per request, closed even if the route raises
def get_db() -> Generator:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
