import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request, status
from pydantic import BaseModel

from notus.constants import ERROR_MESSAGES
from notus.env import SRC_LOG_LEVELS
from notus.models.users import UserModel, UserResponse
from notus.services.archival import GateStatus
from notus.services.errors import LifecycleError
from notus.utils.auth import (
    create_token,
    get_current_user,
    validate_password,
    verify_password,
)
from notus.utils.errors import to_http_exception
from notus.utils.misc import normalize_email, validate_email_format

log = logging.getLogger(__name__)
log.setLevel(SRC_LOG_LEVELS["MAIN"])

router = APIRouter()


############################
# Forms
############################


class SignupForm(BaseModel):
    email: str
    password: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    username: Optional[str] = None


class SigninForm(BaseModel):
    email: str
    password: str


class EmailForm(BaseModel):
    email: str


class ReactivateForm(BaseModel):
    email: str
    password: str


class DeleteAccountForm(BaseModel):
    password: Optional[str] = None
    reason: Optional[str] = None


class SigninResponse(BaseModel):
    token: str
    token_type: str
    user: UserResponse


class ArchivedCheckResponse(BaseModel):
    found: bool
    expired: bool
    expires_at: Optional[int] = None


class DeleteAccountResponse(BaseModel):
    success: bool
    expires_at: int


def _signin_response(user: UserModel) -> SigninResponse:
    return SigninResponse(
        token=create_token(data={"id": user.id}),
        token_type="Bearer",
        user=UserResponse(**user.model_dump()),
    )


def _validate_email(email: str) -> str:
    email = normalize_email(email)
    if not validate_email_format(email):
        raise HTTPException(
            status.HTTP_400_BAD_REQUEST, detail=ERROR_MESSAGES.INVALID_EMAIL_FORMAT
        )
    return email


############################
# SignUp
############################


@router.post("/signup", response_model=SigninResponse)
async def signup(request: Request, form_data: SignupForm):
    email = _validate_email(form_data.email)

    try:
        validate_password(form_data.password)
    except Exception as e:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, detail=str(e))

    users = request.app.state.users
    try:
        user = request.app.state.auth.register(
            email,
            form_data.password,
            first_name=form_data.first_name,
            last_name=form_data.last_name,
            username=form_data.username,
            # The first account becomes the admin
            is_admin=users.get_num_users() == 0,
        )
    except LifecycleError as e:
        raise to_http_exception(e)

    return _signin_response(user)


############################
# SignIn
############################


@router.post("/signin", response_model=SigninResponse)
async def signin(request: Request, form_data: SigninForm):
    email = _validate_email(form_data.email)

    try:
        result = request.app.state.auth.authenticate(email, form_data.password)
    except LifecycleError as e:
        raise to_http_exception(e)

    if result.reactivation_available:
        raise HTTPException(
            status.HTTP_409_CONFLICT,
            detail={
                "reactivation_available": True,
                "expires_at": result.gate.expires_at,
                "message": ERROR_MESSAGES.ACCOUNT_PENDING_REACTIVATION,
            },
        )

    if result.user.is_banned:
        raise HTTPException(status.HTTP_403_FORBIDDEN, detail=ERROR_MESSAGES.USER_BANNED)

    return _signin_response(result.user)


############################
# Archived Accounts
############################


@router.post("/archived/check", response_model=ArchivedCheckResponse)
async def check_archived_account(request: Request, form_data: EmailForm):
    result = request.app.state.gate.check(normalize_email(form_data.email))
    return ArchivedCheckResponse(
        found=result.found,
        expired=result.status == GateStatus.EXPIRED,
        expires_at=result.expires_at,
    )


@router.post("/reactivate", response_model=SigninResponse)
async def reactivate_account(
    request: Request, form_data: ReactivateForm, background_tasks: BackgroundTasks
):
    restorer = request.app.state.restorer
    try:
        user = restorer.restore(
            normalize_email(form_data.email), credential_proof=form_data.password
        )
    except LifecycleError as e:
        raise to_http_exception(e)

    if user.is_banned:
        log.info(f"Reactivated banned account {user.id}; no session issued")
        raise HTTPException(status.HTTP_403_FORBIDDEN, detail=ERROR_MESSAGES.USER_BANNED)

    background_tasks.add_task(restorer.notify_restored, user)
    return _signin_response(user)


@router.post("/delete", response_model=DeleteAccountResponse)
async def delete_account(
    request: Request,
    form_data: DeleteAccountForm,
    background_tasks: BackgroundTasks,
    user: UserModel = Depends(get_current_user),
):
    if user.password_hash:
        if not form_data.password:
            raise HTTPException(
                status.HTTP_401_UNAUTHORIZED, detail=ERROR_MESSAGES.PASSWORD_REQUIRED
            )
        if not verify_password(form_data.password, user.password_hash):
            raise HTTPException(
                status.HTTP_401_UNAUTHORIZED, detail=ERROR_MESSAGES.INCORRECT_PASSWORD
            )

    archiver = request.app.state.archiver
    try:
        archive = archiver.archive(
            user,
            reason=form_data.reason,
            retention_days=request.app.state.config.ACCOUNT_RETENTION_DAYS,
        )
    except LifecycleError as e:
        raise to_http_exception(e)

    background_tasks.add_task(archiver.notify_deleted, archive)
    return DeleteAccountResponse(success=True, expires_at=archive.expires_at)
