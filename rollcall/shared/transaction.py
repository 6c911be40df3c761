import logging
from contextlib import contextmanager
from typing import Callable, Iterator, TypeVar

from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TransactionManager:
    """Runs a unit of work against one session: commit on success, rollback on failure"""

    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        try:
            yield self.db
            self.db.commit()
        except Exception:
            logger.warning("↩️ Rolling back transaction")
            self.db.rollback()
            raise

    def with_tx(self, fn: Callable[[Session], T]) -> T:
        with self.transaction() as db:
            return fn(db)
