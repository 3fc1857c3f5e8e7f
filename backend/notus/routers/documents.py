import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from pydantic import BaseModel

from notus.constants import ERROR_MESSAGES
from notus.env import SRC_LOG_LEVELS
from notus.models.documents import (
    DocumentForm,
    DocumentIdsForm,
    DocumentModel,
    DocumentUpdateForm,
)
from notus.models.trash_documents import TrashDocumentModel
from notus.models.users import UserModel
from notus.services.errors import LifecycleError
from notus.utils.auth import get_verified_user
from notus.utils.errors import to_http_exception

log = logging.getLogger(__name__)
log.setLevel(SRC_LOG_LEVELS["TRASH"])

router = APIRouter()


class TrashResponse(BaseModel):
    items: List[TrashDocumentModel]
    total: int


class ArchiveDocumentsResponse(BaseModel):
    success: bool
    trashed: List[int]


def _get_owned_document(request: Request, id: int, user: UserModel) -> DocumentModel:
    document = request.app.state.documents.get_document_by_id(id)
    if not document:
        raise HTTPException(
            status.HTTP_404_NOT_FOUND, detail=ERROR_MESSAGES.DOCUMENT_NOT_FOUND
        )
    if document.user_id != user.id:
        raise HTTPException(
            status.HTTP_403_FORBIDDEN, detail=ERROR_MESSAGES.NOT_DOCUMENT_OWNER
        )
    return document


############################
# Documents
############################


@router.get("/", response_model=List[DocumentModel])
async def get_documents(
    request: Request,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
    user: UserModel = Depends(get_verified_user),
):
    return request.app.state.documents.get_documents_by_user_id(
        user.id, skip=skip, limit=limit
    )


@router.post("/", response_model=DocumentModel)
async def create_document(
    request: Request,
    form_data: DocumentForm,
    user: UserModel = Depends(get_verified_user),
):
    return request.app.state.documents.insert_new_document(
        user_id=user.id,
        title=form_data.title,
        content=form_data.content,
        tags=form_data.tags,
    )


############################
# Trash
############################


@router.get("/trash", response_model=TrashResponse)
async def get_trash(
    request: Request,
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    user: UserModel = Depends(get_verified_user),
):
    items = request.app.state.trash.list_trash(user.id, skip=skip, limit=limit)
    total = request.app.state.trash_documents.count_trash_documents_by_user_id(user.id)
    return TrashResponse(items=items, total=total)


@router.post("/trash/{trash_id}/restore", response_model=DocumentModel)
async def restore_trashed_document(
    request: Request,
    trash_id: int,
    user: UserModel = Depends(get_verified_user),
):
    try:
        return request.app.state.trash.restore(trash_id, user.id)
    except LifecycleError as e:
        raise to_http_exception(e)


@router.post("/delete", response_model=ArchiveDocumentsResponse)
async def delete_documents(
    request: Request,
    form_data: DocumentIdsForm,
    user: UserModel = Depends(get_verified_user),
):
    """Move several documents to the trash. All of them or none."""
    try:
        trashed = request.app.state.trash.archive_by_ids(form_data.ids, user.id)
    except LifecycleError as e:
        raise to_http_exception(e)

    return ArchiveDocumentsResponse(
        success=True, trashed=[t.original_id for t in trashed]
    )


############################
# Single Document
############################


@router.get("/{id}", response_model=DocumentModel)
async def get_document(
    request: Request, id: int, user: UserModel = Depends(get_verified_user)
):
    return _get_owned_document(request, id, user)


@router.post("/{id}", response_model=DocumentModel)
async def update_document(
    request: Request,
    id: int,
    form_data: DocumentUpdateForm,
    user: UserModel = Depends(get_verified_user),
):
    _get_owned_document(request, id, user)
    document = request.app.state.documents.update_document_by_id(id, form_data)
    if not document:
        raise HTTPException(
            status.HTTP_404_NOT_FOUND, detail=ERROR_MESSAGES.DOCUMENT_NOT_FOUND
        )
    return document


@router.delete("/{id}", response_model=TrashDocumentModel)
async def delete_document(
    request: Request, id: int, user: UserModel = Depends(get_verified_user)
):
    document = _get_owned_document(request, id, user)
    try:
        return request.app.state.trash.archive_one(document)
    except LifecycleError as e:
        raise to_http_exception(e)
