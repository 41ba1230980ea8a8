import logging
from contextlib import contextmanager
from typing import Iterator

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.declarative import declarative_base
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.orm.exc import StaleDataError

from resto_pos.config import Settings
from resto_pos.exceptions import ConflictError

logger = logging.getLogger(__name__)

# Base class for models
Base = declarative_base()


class Database:
    """Owns the engine and session factory for one application instance."""

    def __init__(self, url: str, **engine_kwargs):
        self.url = url
        self.engine = create_engine(url, **engine_kwargs)
        self._session_factory = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        engine_kwargs = {
            "pool_pre_ping": True,
            "echo": settings.DB_ECHO,
        }
        if settings.is_postgres:
            engine_kwargs["pool_timeout"] = settings.DB_POOL_TIMEOUT
            engine_kwargs["connect_args"] = {
                "options": f"-c timezone=UTC -c statement_timeout={settings.DB_STATEMENT_TIMEOUT_MS}"
            }
        return cls(settings.DATABASE_URL, **engine_kwargs)

    def session(self) -> Session:
        return self._session_factory()

    def create_all(self) -> None:
        # Import models so every table is registered on Base.metadata
        import resto_pos.models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)

    def dispose(self) -> None:
        logger.info("Disposing database engine for %s", self.engine.url.render_as_string(hide_password=True))
        self.engine.dispose()


def get_db(request: Request) -> Iterator[Session]:
    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """
    Unit of work for one logical operation.

    Yields the session as the transaction handle; commits when the block
    returns and rolls back on any error raised inside it.
    """
    try:
        yield db
        db.commit()
    except StaleDataError as exc:
        db.rollback()
        raise ConflictError("Record was modified by another request, reload and retry") from exc
    except IntegrityError as exc:
        db.rollback()
        logger.warning("Integrity error rolled back: %s", exc.orig)
        raise ConflictError("Conflicting write detected, please resubmit") from exc
    except Exception:
        db.rollback()
        raise
