"""
Authentication entry points that meet the account lifecycle.

Registration, sign-in and provider sign-in all consult the reactivation gate
before touching live users, so an archived email is always intercepted.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from notus.constants import ERROR_MESSAGES
from notus.env import SRC_LOG_LEVELS
from notus.internal.db import Database
from notus.models.users import UserModel, UsersTable
from notus.services.archival import (
    AccountRestorer,
    CredentialVerifier,
    GateResult,
    ProviderIdentity,
    ReactivationGate,
)
from notus.services.errors import Conflict, IncorrectCredential
from notus.services.identity import IdentityResolver, email_local_part
from notus.services.transaction import atomic
from notus.utils.misc import normalize_email
from sqlalchemy.exc import IntegrityError

log = logging.getLogger(__name__)
log.setLevel(SRC_LOG_LEVELS["AUTH"])

FALLBACK_USERNAME_BASE = "user"


@dataclass(frozen=True)
class SigninResult:
    gate: GateResult
    user: Optional[UserModel] = None

    @property
    def reactivation_available(self) -> bool:
        return self.user is None and self.gate.reactivatable


class AuthService:
    def __init__(
        self,
        database: Database,
        users: UsersTable,
        gate: ReactivationGate,
        restorer: AccountRestorer,
        resolver: IdentityResolver,
        verifier: CredentialVerifier,
        hasher: Callable[[str], str],
    ):
        self.database = database
        self.users = users
        self.gate = gate
        self.restorer = restorer
        self.resolver = resolver
        self.verifier = verifier
        self.hasher = hasher

    def register(
        self,
        email: str,
        password: str,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        username: Optional[str] = None,
        is_admin: bool = False,
    ) -> UserModel:
        email = normalize_email(email)

        gate = self.gate.check(email)
        if gate.reactivatable:
            raise Conflict(ERROR_MESSAGES.ACCOUNT_PENDING_REACTIVATION)

        return self._create_user(
            email,
            username=username,
            first_name=first_name,
            last_name=last_name,
            password_hash=self.hasher(password),
            is_admin=is_admin,
        )

    def authenticate(self, email: str, password: str) -> SigninResult:
        email = normalize_email(email)

        gate = self.gate.check(email)
        if gate.reactivatable:
            log.info(f"Sign-in for archived account {email}; offering reactivation")
            return SigninResult(gate=gate)

        user = self.users.get_user_by_email(email)
        if (
            user is None
            or not user.password_hash
            or not self.verifier.verify(password, user.password_hash)
        ):
            raise IncorrectCredential(ERROR_MESSAGES.INVALID_CRED)

        return SigninResult(gate=gate, user=user)

    def oauth_sign_in(
        self,
        email: str,
        provider: str,
        provider_id: Optional[str] = None,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
    ) -> UserModel:
        """
        Sign in through an external provider whose identity assertion has
        already been verified. Reactivates an archived account for the same
        email, or creates a new user on first sign-in.
        """
        email = normalize_email(email)

        user = self.users.get_user_by_email(email)
        if user:
            return user

        gate = self.gate.check(email)
        if gate.reactivatable:
            log.info(f"Provider sign-in for archived account {email}; reactivating")
            return self.restorer.restore(
                email,
                provider_identity=ProviderIdentity(
                    provider=provider, provider_id=provider_id
                ),
            )

        return self._create_user(
            email,
            first_name=first_name,
            last_name=last_name,
            provider=provider,
            provider_id=provider_id,
            email_verified=True,
        )

    def _create_user(
        self,
        email: str,
        username: Optional[str] = None,
        **fields,
    ) -> UserModel:
        with atomic(self.database, "user registration") as db:
            if self.users.get_user_by_email(email, db=db):
                raise Conflict(ERROR_MESSAGES.EMAIL_TAKEN)

            # Re-read inside the transaction: the account may have been
            # archived since the gate was consulted
            archive = self.gate.peek(email, db=db)
            if archive:
                if not archive.is_expired(int(self.gate.clock())):
                    raise Conflict(ERROR_MESSAGES.ACCOUNT_PENDING_REACTIVATION)
                self.gate.purge(archive, db)

            if username:
                if self.users.username_exists(username, db=db):
                    raise Conflict(ERROR_MESSAGES.USERNAME_TAKEN)
            else:
                username = self.resolver.resolve_username(
                    email_local_part(email), FALLBACK_USERNAME_BASE, db=db
                )

            try:
                with db.begin_nested():
                    user = self.users.insert_new_user(
                        email=email, username=username, db=db, **fields
                    )
            except IntegrityError:
                raise Conflict()

        log.info(f"Created user {user.id} ({email}) as '{user.username}'")
        return user
