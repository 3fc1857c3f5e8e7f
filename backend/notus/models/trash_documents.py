import logging
from typing import List, Optional

from notus.env import SRC_LOG_LEVELS
from notus.internal.db import Base, Database, IdType, flush_or_commit
from notus.models.documents import DocumentModel
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import JSON, BigInteger, Column, Index, Text
from sqlalchemy.orm import Session

log = logging.getLogger(__name__)
log.setLevel(SRC_LOG_LEVELS["MODELS"])

####################
# TrashDocument DB Schema
####################


class TrashDocument(Base):
    __tablename__ = "trash_document"

    id = Column(IdType, primary_key=True, autoincrement=True)
    original_id = Column(BigInteger, nullable=True)

    # No foreign key: the owner may itself be archived
    user_id = Column(BigInteger, nullable=False)

    title = Column(Text, nullable=False)
    content = Column(Text, nullable=False, default="")
    tags = Column(JSON, nullable=False, default=list)

    created_at = Column(BigInteger, nullable=False)
    updated_at = Column(BigInteger, nullable=False)
    deleted_at = Column(BigInteger, nullable=False)

    __table_args__ = (
        Index("trash_document_user_id_idx", "user_id"),
        Index("trash_document_deleted_at_idx", "deleted_at"),
        {"sqlite_autoincrement": True},
    )


class TrashDocumentModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    original_id: Optional[int] = None
    user_id: int
    title: str
    content: str = ""
    tags: List[str] = Field(default_factory=list)
    created_at: int
    updated_at: int
    deleted_at: int


####################
# Table Operations
####################


class TrashDocumentsTable:
    def __init__(self, database: Database):
        self.database = database

    def insert_from_documents(
        self,
        documents: List[DocumentModel],
        deleted_at: int,
        db: Optional[Session] = None,
    ) -> List[TrashDocumentModel]:
        """Copy live documents into the trash, keeping their timestamps."""
        if not documents:
            return []
        with self.database.session(db) as session:
            rows = [
                TrashDocument(
                    original_id=document.id,
                    user_id=document.user_id,
                    title=document.title,
                    content=document.content,
                    tags=list(document.tags),
                    created_at=document.created_at,
                    updated_at=document.updated_at,
                    deleted_at=deleted_at,
                )
                for document in documents
            ]
            session.add_all(rows)
            flush_or_commit(session, db)
            return [TrashDocumentModel.model_validate(row) for row in rows]

    def get_trash_document_by_id(
        self, id: int, db: Optional[Session] = None
    ) -> Optional[TrashDocumentModel]:
        with self.database.session(db) as session:
            row = session.get(TrashDocument, id)
            return TrashDocumentModel.model_validate(row) if row else None

    def get_trash_documents_by_user_id(
        self,
        user_id: int,
        skip: int = 0,
        limit: Optional[int] = None,
        db: Optional[Session] = None,
    ) -> List[TrashDocumentModel]:
        with self.database.session(db) as session:
            query = (
                session.query(TrashDocument)
                .filter_by(user_id=user_id)
                .order_by(TrashDocument.deleted_at.desc(), TrashDocument.id.desc())
                .offset(skip)
            )
            if limit is not None:
                query = query.limit(limit)
            return [TrashDocumentModel.model_validate(row) for row in query.all()]

    def delete_trash_document_by_id(
        self, id: int, db: Optional[Session] = None
    ) -> bool:
        with self.database.session(db) as session:
            deleted = session.query(TrashDocument).filter_by(id=id).delete()
            flush_or_commit(session, db)
            return deleted > 0

    def delete_trash_documents_by_user_id(
        self, user_id: int, db: Optional[Session] = None
    ) -> int:
        with self.database.session(db) as session:
            deleted = (
                session.query(TrashDocument)
                .filter_by(user_id=user_id)
                .delete(synchronize_session=False)
            )
            flush_or_commit(session, db)
            return deleted

    def count_trash_documents_by_user_id(
        self, user_id: int, db: Optional[Session] = None
    ) -> int:
        with self.database.session(db) as session:
            return session.query(TrashDocument).filter_by(user_id=user_id).count()
