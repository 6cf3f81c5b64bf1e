"""
Database configuration and session management
"""

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from .config import settings
from .core.logging import get_logger
from .models.base import Base
# Import all models to ensure they're registered with SQLAlchemy
from .models import user, item, swap, redemption, rating, points  # noqa: F401

logger = get_logger(__name__)


def build_engine(database_url: str, echo: bool = False):
    """Create an engine with the connection options each backend needs"""
    if database_url.startswith("sqlite"):
        # Sessions are handed across threads by the ASGI server
        return create_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
        )

    # For Cloud SQL, if host starts with /cloudsql/, use it as the Unix socket directory
    if settings.db_host.startswith('/cloudsql/'):
        unix_socket_path = '/cloudsql/' + settings.db_host.split('/cloudsql/')[1]
        return create_engine(
            database_url,
            echo=echo,
            pool_pre_ping=True,
            pool_recycle=300,
            connect_args={
                "host": unix_socket_path
            }
        )

    return create_engine(
        database_url,
        echo=echo,
        pool_pre_ping=True,
        pool_recycle=300,
    )


# Create database engine
engine = build_engine(settings.database_url, echo=(settings.log_verbosity == "full"))

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """
    Database dependency for FastAPI routes
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def atomic(db: Session) -> Iterator[Session]:
    """
    Run a block of mutations as one atomic unit.

    Commits when the block exits normally. Any exception rolls back every
    change issued inside the block and is re-raised to the caller.
    """
    try:
        yield db
        db.commit()
    except IntegrityError:
        # Constraint hits are expected race outcomes; callers translate and log them
        db.rollback()
        raise
    except SQLAlchemyError:
        db.rollback()
        logger.error("Storage failure, atomic unit rolled back", exc_info=True)
        raise
    except Exception:
        db.rollback()
        raise
