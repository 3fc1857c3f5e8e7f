import logging
from typing import List, Optional

from notus.env import SRC_LOG_LEVELS
from notus.internal.db import Base, Database, IdType, flush_or_commit
from notus.models.users import UserModel
from pydantic import BaseModel, ConfigDict
from sqlalchemy import JSON, BigInteger, Boolean, Column, Index, String, Text, func
from sqlalchemy.orm import Session

log = logging.getLogger(__name__)
log.setLevel(SRC_LOG_LEVELS["MODELS"])

SNAPSHOT_VERSION = 1


####################
# Credential snapshot
####################


class AccountSnapshot(BaseModel):
    """
    Everything needed to recreate the credentials of an archived user.

    Stored as JSON on the archive row. ``from_data`` reads older or
    unknown versions by picking out the keys it knows.
    """

    version: int = SNAPSHOT_VERSION
    password_hash: Optional[str] = None
    email_verified: bool = False
    created_at: Optional[int] = None
    updated_at: Optional[int] = None

    @classmethod
    def from_user(cls, user: UserModel) -> "AccountSnapshot":
        return cls(
            password_hash=user.password_hash,
            email_verified=user.email_verified,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )

    @classmethod
    def from_data(cls, data: Optional[dict]) -> "AccountSnapshot":
        data = data or {}
        version = data.get("version")
        if version is not None and version != SNAPSHOT_VERSION:
            log.warning(
                f"Reading account snapshot version {version} "
                f"(current is {SNAPSHOT_VERSION})"
            )

        return cls(
            version=SNAPSHOT_VERSION,
            password_hash=data.get("password_hash") or None,
            # Archives written before verification was recorded count as verified
            email_verified=bool(data.get("email_verified", True)),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )

    @property
    def has_password(self) -> bool:
        return bool(self.password_hash)


####################
# DeletedAccount DB Schema
####################


class DeletedAccount(Base):
    __tablename__ = "deleted_account"

    id = Column(IdType, primary_key=True, autoincrement=True)

    # Original user identifiers
    original_user_id = Column(BigInteger, nullable=False)
    email = Column(String(255), nullable=False, unique=True)
    username = Column(String(64), nullable=True)

    first_name = Column(Text, nullable=True)
    last_name = Column(Text, nullable=True)
    provider = Column(String(50), nullable=True)
    provider_id = Column(String(255), nullable=True)
    profile_image = Column(Text, nullable=True)
    banner_image = Column(Text, nullable=True)
    is_admin = Column(Boolean, nullable=False, default=False)
    is_banned = Column(Boolean, nullable=False, default=False)

    reason = Column(Text, nullable=True)

    # The frozen credential snapshot
    snapshot = Column(JSON, nullable=False)

    # Retention window
    added_at = Column(BigInteger, nullable=False)
    expires_at = Column(BigInteger, nullable=False)

    __table_args__ = (
        Index("deleted_account_original_user_id_idx", "original_user_id"),
        Index("deleted_account_expires_at_idx", "expires_at"),
        {"sqlite_autoincrement": True},
    )


class DeletedAccountModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    original_user_id: int
    email: str
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    provider: Optional[str] = None
    provider_id: Optional[str] = None
    profile_image: Optional[str] = None
    banner_image: Optional[str] = None
    is_admin: bool = False
    is_banned: bool = False
    reason: Optional[str] = None
    snapshot: dict
    added_at: int
    expires_at: int

    @property
    def account_snapshot(self) -> AccountSnapshot:
        return AccountSnapshot.from_data(self.snapshot)

    @property
    def display_name(self) -> str:
        return self.first_name or self.username or "User"

    def is_expired(self, now: int) -> bool:
        return now >= self.expires_at


class DeletedAccountSummaryModel(BaseModel):
    """Lightweight model for list views (excludes the snapshot)"""

    model_config = ConfigDict(from_attributes=True)

    id: int
    original_user_id: int
    email: str
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    provider: Optional[str] = None
    reason: Optional[str] = None
    added_at: int
    expires_at: int


####################
# Table Operations
####################


class DeletedAccountsTable:
    def __init__(self, database: Database):
        self.database = database

    def insert_archive(
        self,
        user: UserModel,
        snapshot: AccountSnapshot,
        added_at: int,
        expires_at: int,
        reason: Optional[str] = None,
        db: Optional[Session] = None,
    ) -> DeletedAccountModel:
        with self.database.session(db) as session:
            archive = DeletedAccount(
                original_user_id=user.id,
                email=user.email.lower(),
                username=user.username or None,
                first_name=user.first_name,
                last_name=user.last_name,
                provider=user.provider,
                provider_id=user.provider_id,
                profile_image=user.profile_image,
                banner_image=user.banner_image,
                is_admin=user.is_admin,
                is_banned=user.is_banned,
                reason=reason,
                snapshot=snapshot.model_dump(),
                added_at=added_at,
                expires_at=expires_at,
            )
            session.add(archive)
            flush_or_commit(session, db)
            return DeletedAccountModel.model_validate(archive)

    def get_archive_by_id(
        self, id: int, db: Optional[Session] = None
    ) -> Optional[DeletedAccountModel]:
        with self.database.session(db) as session:
            archive = session.get(DeletedAccount, id)
            return DeletedAccountModel.model_validate(archive) if archive else None

    def get_archive_by_email(
        self, email: str, db: Optional[Session] = None
    ) -> Optional[DeletedAccountModel]:
        with self.database.session(db) as session:
            archive = (
                session.query(DeletedAccount)
                .filter(func.lower(DeletedAccount.email) == email.lower())
                .first()
            )
            return DeletedAccountModel.model_validate(archive) if archive else None

    def get_archives(
        self,
        skip: int = 0,
        limit: int = 50,
        search: Optional[str] = None,
        db: Optional[Session] = None,
    ) -> List[DeletedAccountSummaryModel]:
        with self.database.session(db) as session:
            query = session.query(DeletedAccount)

            if search:
                search_term = f"%{search}%"
                query = query.filter(
                    (DeletedAccount.email.ilike(search_term))
                    | (DeletedAccount.username.ilike(search_term))
                )

            archives = (
                query.order_by(DeletedAccount.added_at.desc(), DeletedAccount.id.desc())
                .offset(skip)
                .limit(limit)
                .all()
            )
            return [DeletedAccountSummaryModel.model_validate(a) for a in archives]

    def get_expired_archives(
        self, now: int, db: Optional[Session] = None
    ) -> List[DeletedAccountModel]:
        with self.database.session(db) as session:
            archives = (
                session.query(DeletedAccount)
                .filter(DeletedAccount.expires_at <= now)
                .all()
            )
            return [DeletedAccountModel.model_validate(a) for a in archives]

    def delete_archive(self, id: int, db: Optional[Session] = None) -> bool:
        with self.database.session(db) as session:
            deleted = session.query(DeletedAccount).filter_by(id=id).delete()
            flush_or_commit(session, db)
            return deleted > 0

    def count_archives(self, db: Optional[Session] = None) -> int:
        with self.database.session(db) as session:
            return session.query(DeletedAccount).count()
