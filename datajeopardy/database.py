from contextlib import contextmanager
import logging

from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, Session

from .config import settings
from .exceptions import DataJeopardyException, TransactionException

logger = logging.getLogger(__name__)

SQLALCHEMY_DATABASE_URL = settings.DATABASE_URL

# Configure engine - SQLite needs special args, Postgres does not
_connect_args = {}
if SQLALCHEMY_DATABASE_URL.startswith("sqlite"):
    _connect_args = {"check_same_thread": False, "timeout": 30}

engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args=_connect_args)

# Enable WAL mode ONLY for SQLite (Postgres handles concurrency natively)
if SQLALCHEMY_DATABASE_URL.startswith("sqlite"):
    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_conn, connection_record):
        """Configure SQLite for concurrent access and enforce foreign keys."""
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA synchronous=NORMAL")
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session, label: str = "write"):
    """
    All-or-nothing unit of work on ``db``.

    Commits when the block exits normally. Any error, including a
    cancellation, rolls the whole unit back. Domain errors propagate as-is;
    anything else surfaces as TransactionException.
    """
    try:
        yield db
        db.commit()
    except DataJeopardyException:
        db.rollback()
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"Transaction '{label}' rolled back: {e}")
        raise TransactionException(f"{label} failed", error_code="TRANSACTION_FAILED") from e
    except BaseException:
        db.rollback()
        raise
