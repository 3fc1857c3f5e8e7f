import logging
import time
from typing import Optional

from notus.env import SRC_LOG_LEVELS
from notus.internal.db import Base, Database, IdType, flush_or_commit
from pydantic import BaseModel, ConfigDict
from sqlalchemy import BigInteger, Boolean, Column, String, Text, func
from sqlalchemy.orm import Session

log = logging.getLogger(__name__)
log.setLevel(SRC_LOG_LEVELS["MODELS"])

####################
# User DB Schema
####################


class User(Base):
    __tablename__ = "user"

    id = Column(IdType, primary_key=True, autoincrement=True)
    email = Column(String(255), nullable=False, unique=True)
    username = Column(String(64), nullable=False, unique=True)

    first_name = Column(Text, nullable=True)
    last_name = Column(Text, nullable=True)

    # NULL for accounts created through a sign-in provider
    password_hash = Column(Text, nullable=True)

    is_admin = Column(Boolean, nullable=False, default=False)
    is_banned = Column(Boolean, nullable=False, default=False)
    email_verified = Column(Boolean, nullable=False, default=False)

    provider = Column(String(50), nullable=True)
    provider_id = Column(String(255), nullable=True)

    profile_image = Column(Text, nullable=True)
    banner_image = Column(Text, nullable=True)

    created_at = Column(BigInteger, nullable=False)
    updated_at = Column(BigInteger, nullable=False)

    __table_args__ = {"sqlite_autoincrement": True}


class UserModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    username: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    password_hash: Optional[str] = None
    is_admin: bool = False
    is_banned: bool = False
    email_verified: bool = False
    provider: Optional[str] = None
    provider_id: Optional[str] = None
    profile_image: Optional[str] = None
    banner_image: Optional[str] = None
    created_at: int
    updated_at: int

    @property
    def display_name(self) -> str:
        return self.first_name or self.username or "User"


####################
# Forms
####################


class UserResponse(BaseModel):
    id: int
    email: str
    username: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    is_admin: bool = False
    provider: Optional[str] = None
    profile_image: Optional[str] = None
    banner_image: Optional[str] = None
    email_verified: bool = False
    created_at: int


####################
# Table Operations
####################


class UsersTable:
    def __init__(self, database: Database):
        self.database = database

    def insert_new_user(
        self,
        email: str,
        username: str,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        password_hash: Optional[str] = None,
        is_admin: bool = False,
        is_banned: bool = False,
        email_verified: bool = False,
        provider: Optional[str] = None,
        provider_id: Optional[str] = None,
        profile_image: Optional[str] = None,
        banner_image: Optional[str] = None,
        id: Optional[int] = None,
        created_at: Optional[int] = None,
        updated_at: Optional[int] = None,
        db: Optional[Session] = None,
    ) -> UserModel:
        """
        Insert a user row. ``id`` and the timestamps are only given when an
        existing identity is being recreated. Uniqueness violations surface
        as ``IntegrityError`` for the caller to handle.
        """
        now = int(time.time())
        with self.database.session(db) as session:
            user = User(
                id=id,
                email=email.lower(),
                username=username,
                first_name=first_name,
                last_name=last_name,
                password_hash=password_hash,
                is_admin=is_admin,
                is_banned=is_banned,
                email_verified=email_verified,
                provider=provider,
                provider_id=provider_id,
                profile_image=profile_image,
                banner_image=banner_image,
                created_at=created_at if created_at is not None else now,
                updated_at=updated_at if updated_at is not None else now,
            )
            session.add(user)
            flush_or_commit(session, db)
            return UserModel.model_validate(user)

    def get_user_by_id(self, id: int, db: Optional[Session] = None) -> Optional[UserModel]:
        with self.database.session(db) as session:
            user = session.get(User, id)
            return UserModel.model_validate(user) if user else None

    def get_user_by_email(
        self, email: str, db: Optional[Session] = None
    ) -> Optional[UserModel]:
        with self.database.session(db) as session:
            user = (
                session.query(User)
                .filter(func.lower(User.email) == email.lower())
                .first()
            )
            return UserModel.model_validate(user) if user else None

    def get_user_by_username(
        self, username: str, db: Optional[Session] = None
    ) -> Optional[UserModel]:
        with self.database.session(db) as session:
            user = session.query(User).filter_by(username=username).first()
            return UserModel.model_validate(user) if user else None

    def username_exists(self, username: str, db: Optional[Session] = None) -> bool:
        with self.database.session(db) as session:
            return (
                session.query(User.id).filter_by(username=username).first() is not None
            )

    def id_exists(self, id: int, db: Optional[Session] = None) -> bool:
        with self.database.session(db) as session:
            return session.query(User.id).filter_by(id=id).first() is not None

    def update_user_by_id(
        self, id: int, updated: dict, db: Optional[Session] = None
    ) -> Optional[UserModel]:
        with self.database.session(db) as session:
            user = session.get(User, id)
            if not user:
                return None
            for key, value in updated.items():
                setattr(user, key, value)
            user.updated_at = int(time.time())
            flush_or_commit(session, db)
            return UserModel.model_validate(user)

    def delete_user_by_id(self, id: int, db: Optional[Session] = None) -> bool:
        with self.database.session(db) as session:
            deleted = session.query(User).filter_by(id=id).delete()
            flush_or_commit(session, db)
            return deleted > 0

    def get_num_users(self, db: Optional[Session] = None) -> int:
        with self.database.session(db) as session:
            return session.query(User).count()
