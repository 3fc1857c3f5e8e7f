import logging
from contextlib import contextmanager
from typing import Iterator

from notus.env import SRC_LOG_LEVELS
from notus.internal.db import Database
from notus.services.errors import LifecycleError, TransactionFailure
from sqlalchemy.orm import Session

log = logging.getLogger(__name__)
log.setLevel(SRC_LOG_LEVELS["DB"])


@contextmanager
def atomic(database: Database, action: str) -> Iterator[Session]:
    """
    Run a lifecycle step in one transaction. Lifecycle errors pass through
    untouched after rollback; anything else becomes ``TransactionFailure``.
    """
    try:
        with database.transaction() as db:
            yield db
    except LifecycleError:
        raise
    except Exception as e:
        log.exception(f"Transaction rolled back during {action}: {e}")
        raise TransactionFailure() from e
