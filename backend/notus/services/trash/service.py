"""
Document trash

Per-document archive and restore. Trashed documents keep their content,
tags and timestamps; a restore creates a new document row with a fresh id.
Trashed documents have no expiry of their own.
"""

import logging
import time
from typing import Callable, List, Optional

from notus.constants import ERROR_MESSAGES
from notus.env import SRC_LOG_LEVELS
from notus.internal.db import Database
from notus.models.documents import DocumentModel, DocumentsTable
from notus.models.folders import FoldersTable
from notus.models.shares import SharesTable
from notus.models.trash_documents import TrashDocumentModel, TrashDocumentsTable
from notus.services.errors import NotFound, Unauthorized
from notus.services.transaction import atomic
from sqlalchemy.orm import Session

log = logging.getLogger(__name__)
log.setLevel(SRC_LOG_LEVELS["TRASH"])


class DocumentTrash:
    def __init__(
        self,
        database: Database,
        documents: DocumentsTable,
        trash_documents: TrashDocumentsTable,
        folders: FoldersTable,
        shares: SharesTable,
        clock: Callable[[], float] = time.time,
    ):
        self.database = database
        self.documents = documents
        self.trash_documents = trash_documents
        self.folders = folders
        self.shares = shares
        self.clock = clock

    ####################
    # Ownership
    ####################

    def is_owner(self, document_id: int, user_id: int) -> bool:
        return bool(self.documents.get_owned_document_ids([document_id], user_id))

    def ensure_owned(
        self, document_ids: List[int], user_id: int, db: Optional[Session] = None
    ) -> List[DocumentModel]:
        """
        Load the documents and check every one belongs to ``user_id``.
        Missing ids raise ``NotFound``; foreign ones raise ``Unauthorized``.
        """
        ids = list(dict.fromkeys(document_ids))
        if not ids:
            raise NotFound(ERROR_MESSAGES.NO_DOCUMENTS_SELECTED)

        documents = self.documents.get_documents_by_ids(ids, db=db)
        if len(documents) != len(ids):
            raise NotFound(ERROR_MESSAGES.DOCUMENT_NOT_FOUND)
        if any(document.user_id != user_id for document in documents):
            raise Unauthorized(ERROR_MESSAGES.NOT_DOCUMENT_OWNER)
        return documents

    ####################
    # Archive
    ####################

    def archive_documents(
        self, documents: List[DocumentModel], db: Session
    ) -> List[TrashDocumentModel]:
        """
        Move ``documents`` into the trash inside the caller's transaction.
        Shares and folder memberships go first, then the document rows.
        """
        if not documents:
            return []

        ids = [document.id for document in documents]
        trashed = self.trash_documents.insert_from_documents(
            documents, deleted_at=int(self.clock()), db=db
        )
        self.shares.delete_shares_by_document_ids(ids, db=db)
        self.folders.remove_documents_from_folders(ids, db=db)
        self.documents.delete_documents_by_ids(ids, db=db)
        return trashed

    def archive_one(self, document: DocumentModel) -> TrashDocumentModel:
        return self.archive_many([document])[0]

    def archive_many(self, documents: List[DocumentModel]) -> List[TrashDocumentModel]:
        with atomic(self.database, "document archive") as db:
            trashed = self.archive_documents(documents, db)

        log.info(
            f"Moved {len(trashed)} document(s) to trash: "
            f"{[t.original_id for t in trashed]}"
        )
        return trashed

    def archive_by_ids(
        self, document_ids: List[int], user_id: int
    ) -> List[TrashDocumentModel]:
        """Ownership check and archive in one transaction."""
        with atomic(self.database, "document archive") as db:
            documents = self.ensure_owned(document_ids, user_id, db=db)
            trashed = self.archive_documents(documents, db)

        log.info(f"User {user_id} moved {len(trashed)} document(s) to trash")
        return trashed

    ####################
    # Restore
    ####################

    def list_trash(
        self, user_id: int, skip: int = 0, limit: Optional[int] = 20
    ) -> List[TrashDocumentModel]:
        return self.trash_documents.get_trash_documents_by_user_id(
            user_id, skip=skip, limit=limit
        )

    def restore(self, trash_id: int, user_id: int) -> DocumentModel:
        with atomic(self.database, "document restore") as db:
            trashed = self.trash_documents.get_trash_document_by_id(trash_id, db=db)
            if not trashed:
                raise NotFound(ERROR_MESSAGES.TRASH_ITEM_NOT_FOUND)
            if trashed.user_id != user_id:
                raise Unauthorized(ERROR_MESSAGES.NOT_DOCUMENT_OWNER)

            document = self._recreate(trashed, user_id, db)
            self.trash_documents.delete_trash_document_by_id(trashed.id, db=db)

        log.info(
            f"Restored trashed document {trash_id} (was {trashed.original_id}) "
            f"as {document.id} for user {user_id}"
        )
        return document

    def restore_all_for_user(
        self, original_user_id: int, new_user_id: int, db: Session
    ) -> List[DocumentModel]:
        """
        Recreate every trashed document of ``original_user_id`` for
        ``new_user_id`` inside the caller's transaction.
        """
        trashed = self.trash_documents.get_trash_documents_by_user_id(
            original_user_id, db=db
        )
        # Oldest first so restored ids follow the original order
        trashed.sort(key=lambda t: (t.original_id or 0, t.id))

        restored = [self._recreate(t, new_user_id, db) for t in trashed]
        self.trash_documents.delete_trash_documents_by_user_id(original_user_id, db=db)
        return restored

    def purge_for_user(self, original_user_id: int, db: Session) -> int:
        return self.trash_documents.delete_trash_documents_by_user_id(
            original_user_id, db=db
        )

    def _recreate(
        self, trashed: TrashDocumentModel, user_id: int, db: Session
    ) -> DocumentModel:
        return self.documents.insert_new_document(
            user_id=user_id,
            title=trashed.title,
            content=trashed.content,
            tags=trashed.tags,
            created_at=trashed.created_at,
            updated_at=trashed.updated_at,
            db=db,
        )
