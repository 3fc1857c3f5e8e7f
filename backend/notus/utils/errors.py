from fastapi import HTTPException, status

from notus.services.errors import (
    Conflict,
    Expired,
    IncorrectCredential,
    LifecycleError,
    NotFound,
    TransactionFailure,
    Unauthorized,
)

STATUS_BY_ERROR = {
    NotFound: status.HTTP_404_NOT_FOUND,
    Expired: status.HTTP_410_GONE,
    IncorrectCredential: status.HTTP_401_UNAUTHORIZED,
    Unauthorized: status.HTTP_403_FORBIDDEN,
    Conflict: status.HTTP_409_CONFLICT,
    TransactionFailure: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def to_http_exception(error: LifecycleError) -> HTTPException:
    for error_type, status_code in STATUS_BY_ERROR.items():
        if isinstance(error, error_type):
            return HTTPException(status_code=status_code, detail=error.message)
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST, detail=error.message
    )
