# core/services/base.py
import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy.orm import Session

from core.config import Settings, settings as default_settings
from core.exceptions import ValidationError
from core.sa.database import begin_immediate


def require_id(value, name: str) -> int:
    """Reject missing, non-integer and non-positive identifiers."""
    if value is None or isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValidationError(f"{name} is required and must be a positive integer")
    return value


class Service:
    """Common wiring for services: a session, settings and a logger.

    Services own the transaction boundary; repositories only flush.
    """

    def __init__(
        self,
        session: Session,
        settings: Optional[Settings] = None,
        logger: Optional[logging.Logger] = None
    ):
        self.session = session
        self.settings = settings or default_settings
        self.logger = logger or logging.getLogger(type(self).__module__)

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """Commit on success, roll back and re-raise on any error.

        The block runs under the store's write lock from its first statement,
        so checks made inside it still hold when its writes commit.
        """
        try:
            begin_immediate(self.session)
            yield self.session
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
