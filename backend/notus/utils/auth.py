import logging
import time
from typing import Optional

import bcrypt
import jwt
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from notus.constants import ERROR_MESSAGES
from notus.env import BCRYPT_ROUNDS, JWT_EXPIRES_IN, NOTUS_SECRET_KEY, SRC_LOG_LEVELS
from notus.models.users import UserModel

log = logging.getLogger(__name__)
log.setLevel(SRC_LOG_LEVELS["AUTH"])

ALGORITHM = "HS256"

bearer_security = HTTPBearer(auto_error=False)

##############
# Auth Utils
##############


def get_password_hash(password: str, rounds: int = BCRYPT_ROUNDS) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds)).decode(
        "utf-8"
    )


def verify_password(plain_password: str, hashed_password: str) -> bool:
    if not plain_password or not hashed_password:
        return False
    try:
        return bcrypt.checkpw(
            plain_password.encode("utf-8"), hashed_password.encode("utf-8")
        )
    except ValueError:
        # Malformed stored hash
        log.warning("Stored password hash could not be parsed")
        return False


def validate_password(password: str) -> bool:
    if len(password.encode("utf-8")) > 72:
        raise Exception("Password is too long. Maximum length is 72 bytes.")
    if len(password) < 8:
        raise Exception("Password must be at least 8 characters long.")
    return True


class PasswordVerifier:
    """bcrypt-backed credential check used by the lifecycle services."""

    def verify(self, provided_secret: str, stored_hash: str) -> bool:
        return verify_password(provided_secret, stored_hash)


def create_token(
    data: dict, expires_in: Optional[int] = JWT_EXPIRES_IN, secret: str = NOTUS_SECRET_KEY
) -> str:
    payload = data.copy()
    if expires_in:
        payload["exp"] = int(time.time()) + expires_in
    return jwt.encode(payload, secret, algorithm=ALGORITHM)


def decode_token(token: str, secret: str = NOTUS_SECRET_KEY) -> Optional[dict]:
    try:
        return jwt.decode(token, secret, algorithms=[ALGORITHM])
    except jwt.PyJWTError:
        return None


def get_current_user(
    request: Request,
    auth_token: Optional[HTTPAuthorizationCredentials] = Depends(bearer_security),
) -> UserModel:
    if auth_token is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=ERROR_MESSAGES.UNAUTHORIZED,
        )

    data = decode_token(auth_token.credentials)
    if data is None or "id" not in data:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=ERROR_MESSAGES.INVALID_TOKEN,
        )

    # Always re-read: an archived account's token must stop working at once
    user = request.app.state.users.get_user_by_id(data["id"])
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=ERROR_MESSAGES.INVALID_TOKEN,
        )
    return user


def get_verified_user(user: UserModel = Depends(get_current_user)) -> UserModel:
    if user.is_banned:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=ERROR_MESSAGES.USER_BANNED,
        )
    return user


def get_admin_user(user: UserModel = Depends(get_verified_user)) -> UserModel:
    if not user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=ERROR_MESSAGES.ACCESS_PROHIBITED,
        )
    return user
