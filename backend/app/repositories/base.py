# backend/app/repositories/base.py
"""
Repository foundation.

Repositories own every SQL statement the engine issues. They receive the
session explicitly and translate SQLAlchemy failures into engine errors:

- IntegrityError  → ConflictError (constraint rejected the write)
- SQLAlchemyError → DataAccessError (store unreachable / statement failed)
"""

import logging
from contextlib import contextmanager
from typing import Generic, Iterator, Optional, Type, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..errors import ConflictError, DataAccessError

T = TypeVar("T")


class BaseRepository(Generic[T]):
    """Session-bound data access for one model."""

    model: Type[T]

    def __init__(self, db: Session):
        self.db = db
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @contextmanager
    def reading(self, what: str) -> Iterator[None]:
        """Wrap read-only statements; failures surface as DataAccessError."""
        try:
            yield
        except SQLAlchemyError as exc:
            self.logger.exception(f"Failed to load {what}")
            raise DataAccessError(f"Could not load {what}") from exc

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """Commit on success; roll back and translate on any failure."""
        try:
            yield self.db
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            self.logger.warning(f"Write rejected by constraint: {exc.orig}")
            raise ConflictError("Write rejected by a storage constraint") from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            self.logger.exception("Repository transaction failed")
            raise DataAccessError("Storage write failed") from exc
        except Exception:
            self.db.rollback()
            raise

    def get(self, id: int) -> Optional[T]:
        with self.reading(f"{self.model.__tablename__} {id}"):
            return self.db.get(self.model, id)
