"""
Deleted Accounts API Router

Admin endpoints for inspecting archived accounts and purging them before
their reactivation window ends.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from pydantic import BaseModel

from notus.constants import ERROR_MESSAGES
from notus.env import SRC_LOG_LEVELS
from notus.models.deleted_accounts import DeletedAccountSummaryModel
from notus.utils.auth import get_admin_user

log = logging.getLogger(__name__)
log.setLevel(SRC_LOG_LEVELS["ARCHIVAL"])

router = APIRouter()


####################
# Response Models
####################


class ArchiveListResponse(BaseModel):
    items: List[DeletedAccountSummaryModel]
    total: int


class ArchiveDetailResponse(DeletedAccountSummaryModel):
    trashed_documents: int
    has_password: bool


class PurgeExpiredResponse(BaseModel):
    checked: int
    deleted: int
    errors: int


####################
# Endpoints
####################


@router.get("/", response_model=ArchiveListResponse)
async def get_archives(
    request: Request,
    response: Response,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
    search: Optional[str] = Query(None),
    user=Depends(get_admin_user),
):
    """
    List archived accounts, newest first.

    - Requires admin role
    - Expired archives stay listed until something purges them
    """
    # Prevent caching to ensure fresh data
    response.headers["Cache-Control"] = "no-store, no-cache, must-revalidate"

    deleted_accounts = request.app.state.deleted_accounts
    items = deleted_accounts.get_archives(skip=skip, limit=limit, search=search)
    return ArchiveListResponse(items=items, total=deleted_accounts.count_archives())


@router.post("/purge-expired", response_model=PurgeExpiredResponse)
async def purge_expired_archives(request: Request, user=Depends(get_admin_user)):
    stats = request.app.state.gate.purge_expired()
    log.info(f"Admin {user.id} purged expired archives: {stats}")
    return PurgeExpiredResponse(**stats)


@router.get("/{archive_id}", response_model=ArchiveDetailResponse)
async def get_archive(
    request: Request,
    archive_id: int,
    user=Depends(get_admin_user),
):
    """Archive details. The credential snapshot itself is never returned."""
    archive = request.app.state.deleted_accounts.get_archive_by_id(archive_id)
    if not archive:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=ERROR_MESSAGES.ARCHIVE_NOT_FOUND,
        )

    trashed = request.app.state.trash_documents.count_trash_documents_by_user_id(
        archive.original_user_id
    )
    return ArchiveDetailResponse(
        **DeletedAccountSummaryModel.model_validate(archive).model_dump(),
        trashed_documents=trashed,
        has_password=archive.account_snapshot.has_password,
    )


@router.delete("/{archive_id}")
async def delete_archive(
    request: Request,
    archive_id: int,
    user=Depends(get_admin_user),
):
    """
    Purge an archive now, together with the account's trashed documents.
    The account can no longer be reactivated afterwards.
    """
    if not request.app.state.gate.purge_by_id(archive_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=ERROR_MESSAGES.ARCHIVE_NOT_FOUND,
        )

    log.info(f"Admin {user.id} purged archive {archive_id}")
    return {"success": True}
