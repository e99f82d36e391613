"""
Shared plumbing for SQLAlchemy-backed repositories.
"""

import logging
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


class SQLAlchemyRepository:
    """Base class holding the session and the commit/rollback boundary."""

    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def _transaction(self):
        """Commit on success, roll back and re-raise on any database error."""
        try:
            yield self.db
            self.db.commit()
        except SQLAlchemyError as e:
            logger.error(f"{type(self).__name__}: database error, rolling back: {e}")
            self.db.rollback()
            raise
        except Exception:
            self.db.rollback()
            raise
