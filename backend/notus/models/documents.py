import logging
import time
from typing import List, Optional

from notus.env import SRC_LOG_LEVELS
from notus.internal.db import Base, Database, IdType, flush_or_commit
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import JSON, BigInteger, Boolean, Column, ForeignKey, Index, Text
from sqlalchemy.orm import Session

log = logging.getLogger(__name__)
log.setLevel(SRC_LOG_LEVELS["MODELS"])

####################
# Document DB Schema
####################


class Document(Base):
    __tablename__ = "document"

    id = Column(IdType, primary_key=True, autoincrement=True)
    user_id = Column(IdType, ForeignKey("user.id"), nullable=False)

    title = Column(Text, nullable=False)
    content = Column(Text, nullable=False, default="")
    tags = Column(JSON, nullable=False, default=list)
    is_favorite = Column(Boolean, nullable=False, default=False)

    created_at = Column(BigInteger, nullable=False)
    updated_at = Column(BigInteger, nullable=False)

    __table_args__ = (
        Index("document_user_id_idx", "user_id"),
        {"sqlite_autoincrement": True},
    )


class DocumentModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    title: str
    content: str = ""
    tags: List[str] = Field(default_factory=list)
    is_favorite: bool = False
    created_at: int
    updated_at: int


####################
# Forms
####################


class DocumentForm(BaseModel):
    title: str
    content: str = ""
    tags: List[str] = Field(default_factory=list)


class DocumentUpdateForm(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None
    tags: Optional[List[str]] = None
    is_favorite: Optional[bool] = None


class DocumentIdsForm(BaseModel):
    ids: List[int]


####################
# Table Operations
####################


class DocumentsTable:
    def __init__(self, database: Database):
        self.database = database

    def insert_new_document(
        self,
        user_id: int,
        title: str,
        content: str = "",
        tags: Optional[List[str]] = None,
        is_favorite: bool = False,
        created_at: Optional[int] = None,
        updated_at: Optional[int] = None,
        db: Optional[Session] = None,
    ) -> DocumentModel:
        now = int(time.time())
        with self.database.session(db) as session:
            document = Document(
                user_id=user_id,
                title=title,
                content=content,
                tags=list(tags or []),
                is_favorite=is_favorite,
                created_at=created_at if created_at is not None else now,
                updated_at=updated_at if updated_at is not None else now,
            )
            session.add(document)
            flush_or_commit(session, db)
            return DocumentModel.model_validate(document)

    def get_document_by_id(
        self, id: int, db: Optional[Session] = None
    ) -> Optional[DocumentModel]:
        with self.database.session(db) as session:
            document = session.get(Document, id)
            return DocumentModel.model_validate(document) if document else None

    def get_documents_by_user_id(
        self,
        user_id: int,
        skip: int = 0,
        limit: Optional[int] = None,
        db: Optional[Session] = None,
    ) -> List[DocumentModel]:
        with self.database.session(db) as session:
            query = (
                session.query(Document)
                .filter_by(user_id=user_id)
                .order_by(Document.updated_at.desc(), Document.id.desc())
                .offset(skip)
            )
            if limit is not None:
                query = query.limit(limit)
            return [DocumentModel.model_validate(d) for d in query.all()]

    def get_documents_by_ids(
        self, ids: List[int], db: Optional[Session] = None
    ) -> List[DocumentModel]:
        if not ids:
            return []
        with self.database.session(db) as session:
            documents = (
                session.query(Document)
                .filter(Document.id.in_(ids))
                .order_by(Document.id)
                .all()
            )
            return [DocumentModel.model_validate(d) for d in documents]

    def get_owned_document_ids(
        self, ids: List[int], user_id: int, db: Optional[Session] = None
    ) -> set[int]:
        if not ids:
            return set()
        with self.database.session(db) as session:
            rows = (
                session.query(Document.id)
                .filter(Document.id.in_(ids), Document.user_id == user_id)
                .all()
            )
            return {row[0] for row in rows}

    def update_document_by_id(
        self, id: int, form_data: DocumentUpdateForm, db: Optional[Session] = None
    ) -> Optional[DocumentModel]:
        with self.database.session(db) as session:
            document = session.get(Document, id)
            if not document:
                return None

            for key, value in form_data.model_dump(exclude_none=True).items():
                setattr(document, key, value)
            document.updated_at = int(time.time())

            flush_or_commit(session, db)
            return DocumentModel.model_validate(document)

    def delete_documents_by_ids(
        self, ids: List[int], db: Optional[Session] = None
    ) -> int:
        if not ids:
            return 0
        with self.database.session(db) as session:
            deleted = (
                session.query(Document)
                .filter(Document.id.in_(ids))
                .delete(synchronize_session=False)
            )
            flush_or_commit(session, db)
            return deleted

    def count_documents_by_user_id(
        self, user_id: int, db: Optional[Session] = None
    ) -> int:
        with self.database.session(db) as session:
            return session.query(Document).filter_by(user_id=user_id).count()
