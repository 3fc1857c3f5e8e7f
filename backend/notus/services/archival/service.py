"""
Account Archival Service

Moves a live user and everything they own into the archive in a single
transaction. The archive keeps a credential snapshot so the account can be
reactivated until ``expires_at``.
"""

import logging
import time
from typing import Callable, Optional

from notus.config import ACCOUNT_RETENTION_DAYS
from notus.constants import ERROR_MESSAGES
from notus.env import SRC_LOG_LEVELS
from notus.internal.db import Database
from notus.models.deleted_accounts import (
    AccountSnapshot,
    DeletedAccountModel,
    DeletedAccountsTable,
)
from notus.models.documents import DocumentsTable
from notus.models.folders import FoldersTable
from notus.models.users import UserModel, UsersTable
from notus.services.archival.gate import ReactivationGate
from notus.services.email.notifier import Notifier
from notus.services.errors import Conflict, NotFound
from notus.services.transaction import atomic
from notus.services.trash import DocumentTrash

log = logging.getLogger(__name__)
log.setLevel(SRC_LOG_LEVELS["ARCHIVAL"])

SECONDS_PER_DAY = 24 * 60 * 60


class AccountArchiver:
    def __init__(
        self,
        database: Database,
        users: UsersTable,
        documents: DocumentsTable,
        folders: FoldersTable,
        deleted_accounts: DeletedAccountsTable,
        trash: DocumentTrash,
        gate: ReactivationGate,
        notifier: Optional[Notifier] = None,
        retention_days: int = ACCOUNT_RETENTION_DAYS,
        clock: Callable[[], float] = time.time,
    ):
        self.database = database
        self.users = users
        self.documents = documents
        self.folders = folders
        self.deleted_accounts = deleted_accounts
        self.trash = trash
        self.gate = gate
        self.notifier = notifier
        self.retention_days = retention_days
        self.clock = clock

    def archive(
        self,
        user: UserModel,
        reason: Optional[str] = None,
        retention_days: Optional[int] = None,
    ) -> DeletedAccountModel:
        """
        Archive ``user`` and all of their documents.

        The caller has already authenticated the acting identity. Steps, in
        one transaction:
        1. Trash every document (shares and folder memberships removed first)
        2. Remove the user's folders
        3. Write the archive row with the credential snapshot and expiry
        4. Delete the user row
        """
        now = int(self.clock())
        days = self.retention_days if retention_days is None else retention_days
        expires_at = now + days * SECONDS_PER_DAY

        with atomic(self.database, "account archive") as db:
            current = self.users.get_user_by_id(user.id, db=db)
            if not current:
                raise NotFound(ERROR_MESSAGES.USER_NOT_FOUND)

            # An earlier archive for this email can only linger if it expired
            # without ever being checked.
            stale = self.deleted_accounts.get_archive_by_email(current.email, db=db)
            if stale:
                if not stale.is_expired(now):
                    raise Conflict()
                self.gate.purge(stale, db)
                log.info(f"Purged stale archive {stale.id} for {stale.email}")

            documents = self.documents.get_documents_by_user_id(current.id, db=db)
            trashed = self.trash.archive_documents(documents, db)
            self.folders.delete_folders_by_user_id(current.id, db=db)

            archive = self.deleted_accounts.insert_archive(
                current,
                AccountSnapshot.from_user(current),
                added_at=now,
                expires_at=expires_at,
                reason=reason,
                db=db,
            )
            self.users.delete_user_by_id(current.id, db=db)

        log.info(
            f"Archived user {current.id} ({current.email}) with "
            f"{len(trashed)} documents; reactivation possible until {expires_at}"
        )
        return archive

    async def notify_deleted(self, archive: DeletedAccountModel) -> bool:
        """
        Send the deletion confirmation. Best effort: a failure is logged and
        never undoes the archival.
        """
        if self.notifier is None:
            return False

        try:
            await self.notifier.send_deletion_confirmation(
                archive.email, archive.display_name
            )
            return True
        except Exception as e:
            log.error(f"Failed to send deletion confirmation to {archive.email}: {e}")
            return False
