import logging
from contextlib import contextmanager

from fastapi import status
from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

from config.settings import DATABASE_URL
from utils.errors import ApiError

logger = logging.getLogger(__name__)

if DATABASE_URL.startswith("sqlite"):
    # SQLite connections are shared across the request threads; an in-memory
    # database only exists for the life of its single connection
    in_memory = DATABASE_URL in ("sqlite://", "sqlite:///:memory:")
    engine = create_engine(
        DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool if in_memory else None,
        echo=False,
    )
else:
    engine = create_engine(
        DATABASE_URL,
        poolclass=QueuePool,
        pool_size=10,
        max_overflow=20,
        pool_pre_ping=True,
        pool_recycle=3600,
        echo=False,
    )

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """Create all tables registered on Base"""
    # Import models so their tables are registered on the metadata
    import models  # noqa: F401

    Base.metadata.create_all(bind=engine)


@contextmanager
def transaction(db):
    """Commit everything written inside the block, or roll it all back"""
    try:
        yield db
        db.commit()
    except ApiError:
        db.rollback()
        raise
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Integrity error, transaction rolled back: {e}")
        raise ApiError(status.HTTP_409_CONFLICT, "The request conflicts with existing data")
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Database error, transaction rolled back: {e}")
        raise ApiError(status.HTTP_500_INTERNAL_SERVER_ERROR, "Database operation failed")
