"""
Database base configuration for SQLAlchemy models.

SQLAlchemy 2.0 style with DeclarativeBase. The selection engine only reads,
so a single synchronous engine and session factory are enough. Callers that
already own a session pass it to ``select_smart_random_questions`` directly.
Host applications without their own session handling open one with
``get_db()`` (for example as a framework dependency) or ``SessionLocal``.
"""

import os
from typing import Generator

from dotenv import load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from simulation_builder.core.config import settings

# Load environment variables
load_dotenv()

# An explicit DATABASE_URL in the environment wins over the settings default
DATABASE_URL = os.getenv("DATABASE_URL") or settings.DATABASE_URL

_engine_kwargs: dict = {
    "echo": settings.DEBUG,  # Only log SQL queries in debug mode
    "pool_pre_ping": settings.DB_POOL_PRE_PING,
}
if DATABASE_URL.startswith("sqlite"):
    # SQLite connections are used from the request thread that opened them
    _engine_kwargs["connect_args"] = {"check_same_thread": False}

engine = create_engine(DATABASE_URL, **_engine_kwargs)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class Base(DeclarativeBase):
    """
    SQLAlchemy 2.0 declarative base class with type annotation support.
    """

    pass


def get_db() -> Generator[Session, None, None]:
    """
    Yield a session for a host application and close it afterwards.

    Rolls back when the consuming block raises.
    """
    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
