import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from meetsync.services.errors import TransportError

logger = logging.getLogger(__name__)


@contextmanager
def gateway(db: Session, what: str) -> Iterator[None]:
    """
    Run database work, turning any SQLAlchemy failure into TransportError.

    The session is rolled back so it stays usable; nothing is retried.
    Service errors raised inside the block pass through untouched.
    """
    try:
        yield
    except SQLAlchemyError as e:
        logger.warning("Failed to %s: %s", what, e)
        try:
            db.rollback()
        except SQLAlchemyError:
            logger.warning("Rollback after failed %s also failed", what)
        raise TransportError(f"Could not {what}") from e
