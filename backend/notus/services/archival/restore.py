"""
Account reactivation

Recreates a live user from an archive row, keeping the original id and
username when they are still free, and moves the user's trashed documents
back as new documents. Everything happens in one transaction.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from notus.config import RESTORED_USERNAME_SUFFIX
from notus.constants import ERROR_MESSAGES
from notus.env import SRC_LOG_LEVELS
from notus.internal.db import Database
from notus.models.deleted_accounts import (
    AccountSnapshot,
    DeletedAccountModel,
    DeletedAccountsTable,
)
from notus.models.users import UserModel, UsersTable
from notus.services.email.notifier import Notifier
from notus.services.errors import (
    Conflict,
    Expired,
    IncorrectCredential,
    NotFound,
)
from notus.services.identity import IdentityResolver, Resolved, email_local_part
from notus.services.transaction import atomic
from notus.services.trash import DocumentTrash
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

log = logging.getLogger(__name__)
log.setLevel(SRC_LOG_LEVELS["ARCHIVAL"])


class CredentialVerifier(Protocol):
    def verify(self, provided_secret: str, stored_hash: str) -> bool: ...


@dataclass(frozen=True)
class ProviderIdentity:
    """Identity asserted by a sign-in provider at the call site."""

    provider: str
    provider_id: Optional[str] = None


class AccountRestorer:
    def __init__(
        self,
        database: Database,
        users: UsersTable,
        deleted_accounts: DeletedAccountsTable,
        trash: DocumentTrash,
        resolver: IdentityResolver,
        verifier: CredentialVerifier,
        notifier: Optional[Notifier] = None,
        restored_suffix: str = RESTORED_USERNAME_SUFFIX,
        clock: Callable[[], float] = time.time,
    ):
        self.database = database
        self.users = users
        self.deleted_accounts = deleted_accounts
        self.trash = trash
        self.resolver = resolver
        self.verifier = verifier
        self.notifier = notifier
        self.restored_suffix = restored_suffix
        self.clock = clock

    def restore(
        self,
        email: str,
        credential_proof: Optional[str] = None,
        provider_identity: Optional[ProviderIdentity] = None,
    ) -> UserModel:
        """
        Reactivate the archived account for ``email``.

        Either ``credential_proof`` (checked against the archived password
        hash) or ``provider_identity`` must be given. A provider identity is
        an assertion the caller has already verified with the sign-in
        provider; it is the only way to restore an archive without a
        password hash.
        """
        email = email.strip().lower()

        archive = self.deleted_accounts.get_archive_by_email(email)
        if not archive:
            raise NotFound(ERROR_MESSAGES.ARCHIVE_NOT_FOUND)
        if archive.is_expired(int(self.clock())):
            raise Expired()

        snapshot = archive.account_snapshot
        self._verify_credentials(snapshot, credential_proof, provider_identity)

        with atomic(self.database, "account restore") as db:
            # Re-read inside the transaction; a concurrent restore or purge
            # may have consumed the archive since the check above.
            current = self.deleted_accounts.get_archive_by_id(archive.id, db=db)
            if not current:
                if self.users.get_user_by_email(email, db=db):
                    raise Conflict(ERROR_MESSAGES.EMAIL_TAKEN)
                raise NotFound(ERROR_MESSAGES.ARCHIVE_NOT_FOUND)
            if self.users.get_user_by_email(email, db=db):
                raise Conflict(ERROR_MESSAGES.EMAIL_TAKEN)

            user = self._recreate_user(current, snapshot, provider_identity, db)
            documents = self.trash.restore_all_for_user(
                current.original_user_id, user.id, db
            )
            self.deleted_accounts.delete_archive(current.id, db=db)

        log.info(
            f"Reactivated {email} as user {user.id} ('{user.username}', "
            f"was {archive.original_user_id}) with {len(documents)} documents"
        )
        return user

    async def notify_restored(self, user: UserModel) -> bool:
        if self.notifier is None:
            return False

        try:
            await self.notifier.send_reactivation_confirmation(
                user.email, user.display_name
            )
            return True
        except Exception as e:
            log.error(f"Failed to send reactivation confirmation to {user.email}: {e}")
            return False

    def _verify_credentials(
        self,
        snapshot: AccountSnapshot,
        credential_proof: Optional[str],
        provider_identity: Optional[ProviderIdentity],
    ) -> None:
        if provider_identity is not None:
            return
        if not snapshot.has_password:
            raise IncorrectCredential(ERROR_MESSAGES.PROVIDER_REACTIVATION)
        if not credential_proof:
            raise IncorrectCredential(ERROR_MESSAGES.PASSWORD_REQUIRED)
        if not self.verifier.verify(credential_proof, snapshot.password_hash):
            raise IncorrectCredential()

    def _recreate_user(
        self,
        archive: DeletedAccountModel,
        snapshot: AccountSnapshot,
        provider_identity: Optional[ProviderIdentity],
        db: Session,
    ) -> UserModel:
        fields = dict(
            email=archive.email,
            first_name=archive.first_name,
            last_name=archive.last_name,
            password_hash=snapshot.password_hash,
            is_admin=archive.is_admin,
            is_banned=archive.is_banned,
            email_verified=snapshot.email_verified,
            provider=archive.provider,
            provider_id=archive.provider_id,
            profile_image=archive.profile_image,
            banner_image=archive.banner_image,
            created_at=snapshot.created_at,
            updated_at=int(self.clock()),
        )
        if provider_identity is not None:
            fields["provider"] = provider_identity.provider
            fields["provider_id"] = provider_identity.provider_id or archive.provider_id

        desired = archive.username or email_local_part(archive.email)

        # 1. Original id and username
        try:
            with db.begin_nested():
                return self.users.insert_new_user(
                    id=archive.original_user_id, username=desired, db=db, **fields
                )
        except IntegrityError:
            if not self._is_identity_collision(archive, desired, db):
                raise

        # 2. One retry with a derived username; keep the id if it is still free
        fallback_base = f"{email_local_part(archive.email)}{self.restored_suffix}"
        result = self.resolver.resolve(fallback_base, db=db)
        if not isinstance(result, Resolved):
            raise Conflict(ERROR_MESSAGES.USERNAME_TAKEN)

        keep_id = not self.users.id_exists(archive.original_user_id, db=db)
        log.info(
            f"Username '{desired}' or id {archive.original_user_id} is taken; "
            f"restoring {archive.email} as '{result.username}'"
        )

        try:
            with db.begin_nested():
                return self.users.insert_new_user(
                    id=archive.original_user_id if keep_id else None,
                    username=result.username,
                    db=db,
                    **fields,
                )
        except IntegrityError:
            if self.users.get_user_by_email(archive.email, db=db):
                raise Conflict(ERROR_MESSAGES.EMAIL_TAKEN)
            if self.users.username_exists(result.username, db=db):
                raise Conflict(ERROR_MESSAGES.USERNAME_TAKEN)
            raise

    def _is_identity_collision(
        self, archive: DeletedAccountModel, username: str, db: Session
    ) -> bool:
        """
        Decide whether a failed insert hit the username or id uniqueness
        constraint. An email collision means another request already
        reactivated this account.
        """
        if self.users.get_user_by_email(archive.email, db=db):
            raise Conflict(ERROR_MESSAGES.EMAIL_TAKEN)

        return self.users.username_exists(username, db=db) or self.users.id_exists(
            archive.original_user_id, db=db
        )
