"""
Shared plumbing for the ledger services.
"""
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.orm import Session

from ..logging_config import service_logger


class BaseService:
    """Holds the request session and the commit/rollback discipline.

    Services never commit piecemeal: every mutation runs inside
    ``unit_of_work()``, which commits once on success and rolls back
    everything on any exception.
    """

    def __init__(self, db: Session) -> None:
        self.db = db
        self.log = service_logger.bind(service=type(self).__name__)

    @contextmanager
    def unit_of_work(self) -> Iterator[Session]:
        try:
            yield self.db
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
