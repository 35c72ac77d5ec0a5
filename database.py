# database.py
"""
Engine, session factory and session helpers for the ledger database.

Production runs on MS SQL Server through pymssql, built from the DB_*
variables. DATABASE_URL replaces the whole URL (sqlite:///./plots.db for
local work, sqlite:// in tests).

     from database import get_session

     @router.get("/plots")
     def list_plots(db: Session = Depends(get_session)):
          return db.query(Plot).all()
"""
import logging
import os
from contextlib import contextmanager
from typing import Generator
from urllib.parse import quote_plus

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import QueuePool
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)


def _mssql_url() -> str:
     user = quote_plus(os.getenv("DB_USER") or "")
     password = quote_plus(os.getenv("DB_PASS") or "")
     server = os.getenv("DB_SERVER")
     port = os.getenv("DB_PORT", "1433")
     return f"mssql+pymssql://{user}:{password}@{server}:{port}/{os.getenv('DB_NAME')}"


DATABASE_URL = os.getenv("DATABASE_URL") or _mssql_url()
SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() == "true"


def build_engine(url: str = DATABASE_URL) -> Engine:
     """SQLite gets a plain engine; server databases get a recycled QueuePool."""
     if url.startswith("sqlite"):
          return create_engine(url, connect_args={"check_same_thread": False}, echo=SQL_ECHO)
     return create_engine(
          url,
          poolclass=QueuePool,
          pool_size=int(os.getenv("DB_POOL_SIZE", "5")),
          max_overflow=10,
          pool_timeout=30,
          pool_recycle=1800,
          echo=SQL_ECHO,
     )


engine = build_engine()

# expire_on_commit=False: service results are serialized after atomic() commits
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


def get_session() -> Generator[Session, None, None]:
     """
     FastAPI dependency yielding one session per request.

     Services commit their own atomic units; anything still pending when the
     request ends is committed here, and an error rolls it back.
     """
     session = SessionLocal()
     try:
          yield session
          session.commit()
     except Exception:
          session.rollback()
          raise
     finally:
          session.close()


# Scripts and maintenance jobs: with get_session_context() as db: reconcile_all(SqlStores(db))
get_session_context = contextmanager(get_session)


def init_db() -> None:
     """Create missing tables directly from the models. Use Alembic outside development."""
     from models import Base
     Base.metadata.create_all(bind=engine)


def check_connection() -> bool:
     try:
          with engine.connect() as conn:
               conn.execute(text("SELECT 1"))
     except SQLAlchemyError as e:
          logger.error("Database connection failed: %s", e)
          return False
     return True
