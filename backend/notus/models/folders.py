import time
from typing import List, Optional

from notus.internal.db import Base, Database, IdType, flush_or_commit
from pydantic import BaseModel, ConfigDict
from sqlalchemy import BigInteger, Column, ForeignKey, Text, UniqueConstraint
from sqlalchemy.orm import Session

####################
# Folder DB Schema
####################


class Folder(Base):
    __tablename__ = "folder"

    id = Column(IdType, primary_key=True, autoincrement=True)
    user_id = Column(IdType, ForeignKey("user.id"), nullable=False, index=True)
    name = Column(Text, nullable=False)

    created_at = Column(BigInteger, nullable=False)
    updated_at = Column(BigInteger, nullable=False)

    __table_args__ = {"sqlite_autoincrement": True}


class FolderDocument(Base):
    __tablename__ = "folder_document"

    id = Column(IdType, primary_key=True, autoincrement=True)
    folder_id = Column(IdType, ForeignKey("folder.id"), nullable=False, index=True)
    document_id = Column(IdType, ForeignKey("document.id"), nullable=False, index=True)

    __table_args__ = (
        UniqueConstraint("folder_id", "document_id", name="uq_folder_document"),
        {"sqlite_autoincrement": True},
    )


class FolderModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    name: str
    created_at: int
    updated_at: int


####################
# Table Operations
####################


class FoldersTable:
    def __init__(self, database: Database):
        self.database = database

    def insert_new_folder(
        self, user_id: int, name: str, db: Optional[Session] = None
    ) -> FolderModel:
        now = int(time.time())
        with self.database.session(db) as session:
            folder = Folder(user_id=user_id, name=name, created_at=now, updated_at=now)
            session.add(folder)
            flush_or_commit(session, db)
            return FolderModel.model_validate(folder)

    def add_document(
        self, folder_id: int, document_id: int, db: Optional[Session] = None
    ) -> None:
        with self.database.session(db) as session:
            session.add(FolderDocument(folder_id=folder_id, document_id=document_id))
            flush_or_commit(session, db)

    def get_document_ids_by_folder_id(
        self, folder_id: int, db: Optional[Session] = None
    ) -> List[int]:
        with self.database.session(db) as session:
            rows = (
                session.query(FolderDocument.document_id)
                .filter_by(folder_id=folder_id)
                .all()
            )
            return [row[0] for row in rows]

    def get_folders_by_user_id(
        self, user_id: int, db: Optional[Session] = None
    ) -> List[FolderModel]:
        with self.database.session(db) as session:
            folders = session.query(Folder).filter_by(user_id=user_id).all()
            return [FolderModel.model_validate(f) for f in folders]

    def remove_documents_from_folders(
        self, document_ids: List[int], db: Optional[Session] = None
    ) -> int:
        if not document_ids:
            return 0
        with self.database.session(db) as session:
            deleted = (
                session.query(FolderDocument)
                .filter(FolderDocument.document_id.in_(document_ids))
                .delete(synchronize_session=False)
            )
            flush_or_commit(session, db)
            return deleted

    def delete_folders_by_user_id(
        self, user_id: int, db: Optional[Session] = None
    ) -> int:
        with self.database.session(db) as session:
            folder_ids = [
                row[0]
                for row in session.query(Folder.id).filter_by(user_id=user_id).all()
            ]
            if not folder_ids:
                return 0

            session.query(FolderDocument).filter(
                FolderDocument.folder_id.in_(folder_ids)
            ).delete(synchronize_session=False)
            deleted = (
                session.query(Folder)
                .filter(Folder.id.in_(folder_ids))
                .delete(synchronize_session=False)
            )
            flush_or_commit(session, db)
            return deleted
