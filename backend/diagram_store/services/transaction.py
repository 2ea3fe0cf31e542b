"""Commit-or-rollback helper shared by the services."""

import logging
from contextlib import contextmanager
from typing import Iterator

import sqlalchemy.exc
from sqlalchemy.orm import Session

from ..exceptions import ConflictError, DatabaseError

logger = logging.getLogger(__name__)


def _is_unique_violation(exc: sqlalchemy.exc.IntegrityError) -> bool:
    message = str(exc.orig).lower()
    return "unique" in message or "duplicate" in message


@contextmanager
def atomic(db: Session, diagram_id: str = "", conflict_message: str = "Diagram already exists") -> Iterator[None]:
    """Run the enclosed block as one transaction.

    Commits when the block finishes, rolls back on any exception. Unique-key
    violations become ConflictError, other SQLAlchemy failures DatabaseError;
    everything else (StoreException included) propagates unchanged.
    """
    try:
        yield
        db.commit()
    except sqlalchemy.exc.IntegrityError as e:
        db.rollback()
        if _is_unique_violation(e):
            raise ConflictError(diagram_id, conflict_message) from e
        logger.error("Integrity error: %s", e.orig, extra={"diagram_id": diagram_id})
        raise DatabaseError("Database constraint violated", e) from e
    except sqlalchemy.exc.SQLAlchemyError as e:
        db.rollback()
        logger.error("Database error: %s", e, extra={"diagram_id": diagram_id})
        raise DatabaseError("Database operation failed", e) from e
    except Exception:
        db.rollback()
        raise
