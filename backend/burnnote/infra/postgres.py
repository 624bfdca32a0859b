import logging
from contextlib import contextmanager
from typing import Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from burnnote.core.errors import StoreError
from burnnote.models.base import Base
from burnnote.models.message import Message
from burnnote.models.secret_record import SecretRecord

logger = logging.getLogger(__name__)


# =========================
# ENGINE CONFIGURATION
# =========================

def build_engine(database_url: str) -> Engine:
    """
    Create the engine for a database URL.
    In-memory SQLite shares one connection so every session sees the same data.
    """
    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=False,
        )

    return create_engine(
        database_url,
        pool_pre_ping=True,  # Check connections before using them
        pool_size=5,         # Maintain 5 connections in the pool
        max_overflow=10,     # Allow 10 extra connections if needed
        pool_recycle=3600,   # Recycle connections every hour
        echo=False,
    )


# =========================
# DATABASE FUNCTIONS
# =========================

def init_db(engine: Engine) -> None:
    """Create all tables based on registered models."""
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables ready: %s", sorted(Base.metadata.tables))


def check_connection(engine: Engine) -> bool:
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        logger.info("Database connection successful")
        return True
    except SQLAlchemyError as e:
        logger.error("Database connection failed: %s", e)
        return False


# =========================
# MESSAGE STORE
# =========================

class SqlMessageStore:
    """
    Key-value view of the messages table. Each call is one short transaction,
    so a row is either fully written or not there at all.
    """

    def __init__(self, engine: Engine):
        self.engine = engine
        self.SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
            bind=engine,
        )

    @contextmanager
    def db_session(self):
        """
        Usage:
            with store.db_session() as db:
                db.get(Message, message_id)
        """
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.error("Store operation failed: %s", e)
            raise StoreError() from e
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def put(self, record: SecretRecord) -> None:
        with self.db_session() as db:
            db.add(Message.from_record(record))

    def get(self, message_id: str) -> Optional[SecretRecord]:
        with self.db_session() as db:
            row = db.get(Message, message_id)
            return row.to_record() if row is not None else None

    def delete(self, message_id: str) -> bool:
        """Delete-if-present. Returns False when the row was already gone."""
        with self.db_session() as db:
            deleted = db.query(Message).filter(Message.message_id == message_id).delete()
        return deleted > 0
