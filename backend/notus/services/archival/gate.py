"""
Reactivation gate

Answers whether an email belongs to an archived account that can still be
reactivated. Expiry is enforced here, lazily: an archive found past its
``expires_at`` is purged on the spot together with its trashed documents.
"""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Optional

from notus.env import SRC_LOG_LEVELS
from notus.internal.db import Database
from notus.models.deleted_accounts import DeletedAccountModel, DeletedAccountsTable
from notus.services.transaction import atomic
from notus.services.trash import DocumentTrash
from sqlalchemy.orm import Session

log = logging.getLogger(__name__)
log.setLevel(SRC_LOG_LEVELS["ARCHIVAL"])


class GateStatus(str, Enum):
    NOT_FOUND = "not_found"
    ACTIVE = "active"
    EXPIRED = "expired"


@dataclass(frozen=True)
class GateResult:
    status: GateStatus
    expires_at: Optional[int] = None
    archive: Optional[DeletedAccountModel] = None

    @property
    def reactivatable(self) -> bool:
        return self.status == GateStatus.ACTIVE

    @property
    def found(self) -> bool:
        # An expired archive has already been purged: same as no archive
        return self.status == GateStatus.ACTIVE


class ReactivationGate:
    def __init__(
        self,
        database: Database,
        deleted_accounts: DeletedAccountsTable,
        trash: DocumentTrash,
        clock: Callable[[], float] = time.time,
    ):
        self.database = database
        self.deleted_accounts = deleted_accounts
        self.trash = trash
        self.clock = clock

    def peek(
        self, email: str, db: Optional[Session] = None
    ) -> Optional[DeletedAccountModel]:
        """Read the archive row for ``email`` without enforcing expiry."""
        return self.deleted_accounts.get_archive_by_email(email.strip().lower(), db=db)

    def check(self, email: str) -> GateResult:
        archive = self.peek(email)
        if not archive:
            return GateResult(status=GateStatus.NOT_FOUND)

        if not archive.is_expired(int(self.clock())):
            return GateResult(
                status=GateStatus.ACTIVE, expires_at=archive.expires_at, archive=archive
            )

        with atomic(self.database, "archive purge") as db:
            purged_documents = self.purge(archive, db)

        log.info(
            f"Purged expired archive {archive.id} for {archive.email} "
            f"(user {archive.original_user_id}, {purged_documents} trashed documents)"
        )
        return GateResult(status=GateStatus.EXPIRED, expires_at=archive.expires_at)

    def purge(self, archive: DeletedAccountModel, db: Session) -> int:
        """Delete an archive and its trashed documents inside ``db``."""
        purged_documents = self.trash.purge_for_user(archive.original_user_id, db)
        self.deleted_accounts.delete_archive(archive.id, db=db)
        return purged_documents

    def purge_expired(self) -> Dict[str, int]:
        """
        Purge every archive past its retention window.
        Invoked on demand by admins; there is no background sweep.
        """
        stats = {"checked": 0, "deleted": 0, "errors": 0}

        expired = self.deleted_accounts.get_expired_archives(int(self.clock()))
        stats["checked"] = len(expired)

        for archive in expired:
            try:
                with atomic(self.database, "archive purge") as db:
                    self.purge(archive, db)
                stats["deleted"] += 1
                log.info(f"Deleted expired archive {archive.id} for user {archive.email}")
            except Exception as e:
                log.error(f"Error deleting archive {archive.id}: {e}")
                stats["errors"] += 1

        return stats

    def purge_by_id(self, archive_id: int) -> bool:
        """Early purge of one archive, before its window elapses."""
        with atomic(self.database, "archive purge") as db:
            archive = self.deleted_accounts.get_archive_by_id(archive_id, db=db)
            if not archive:
                return False
            self.purge(archive, db)

        log.info(f"Purged archive {archive_id} for {archive.email} on request")
        return True
