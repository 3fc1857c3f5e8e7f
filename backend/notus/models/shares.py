import time
from typing import List, Optional

from notus.internal.db import Base, Database, IdType, flush_or_commit
from pydantic import BaseModel, ConfigDict
from sqlalchemy import BigInteger, Column, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Session

####################
# Share DB Schema
####################


class Share(Base):
    __tablename__ = "share"

    id = Column(IdType, primary_key=True, autoincrement=True)
    document_id = Column(IdType, ForeignKey("document.id"), nullable=False, index=True)
    email = Column(String(255), nullable=False, index=True)
    permission = Column(String(20), nullable=False, default="read")
    created_at = Column(BigInteger, nullable=False)

    __table_args__ = (
        UniqueConstraint("document_id", "email", name="uq_share_document_email"),
        {"sqlite_autoincrement": True},
    )


class ShareModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    document_id: int
    email: str
    permission: str
    created_at: int


####################
# Table Operations
####################


class SharesTable:
    def __init__(self, database: Database):
        self.database = database

    def insert_new_share(
        self,
        document_id: int,
        email: str,
        permission: str = "read",
        db: Optional[Session] = None,
    ) -> ShareModel:
        with self.database.session(db) as session:
            share = Share(
                document_id=document_id,
                email=email.lower(),
                permission=permission,
                created_at=int(time.time()),
            )
            session.add(share)
            flush_or_commit(session, db)
            return ShareModel.model_validate(share)

    def get_shares_by_document_id(
        self, document_id: int, db: Optional[Session] = None
    ) -> List[ShareModel]:
        with self.database.session(db) as session:
            shares = session.query(Share).filter_by(document_id=document_id).all()
            return [ShareModel.model_validate(s) for s in shares]

    def delete_shares_by_document_ids(
        self, document_ids: List[int], db: Optional[Session] = None
    ) -> int:
        if not document_ids:
            return 0
        with self.database.session(db) as session:
            deleted = (
                session.query(Share)
                .filter(Share.document_id.in_(document_ids))
                .delete(synchronize_session=False)
            )
            flush_or_commit(session, db)
            return deleted
