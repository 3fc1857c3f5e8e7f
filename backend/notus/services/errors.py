"""
Errors raised by the account and document lifecycle services.

Routers translate them into HTTP responses; nothing here knows about HTTP.
"""

from typing import Optional

from notus.constants import ERROR_MESSAGES


class LifecycleError(Exception):
    default_message: str = str(ERROR_MESSAGES.DEFAULT())

    def __init__(self, message: Optional[str] = None):
        self.message = str(message) if message is not None else self.default_message
        super().__init__(self.message)


class Unauthorized(LifecycleError):
    default_message = str(ERROR_MESSAGES.ACCESS_PROHIBITED)


class NotFound(LifecycleError):
    default_message = str(ERROR_MESSAGES.NOT_FOUND)


class Expired(LifecycleError):
    default_message = str(ERROR_MESSAGES.ARCHIVE_EXPIRED)


class IncorrectCredential(LifecycleError):
    default_message = str(ERROR_MESSAGES.INCORRECT_PASSWORD)


class Conflict(LifecycleError):
    default_message = str(ERROR_MESSAGES.IDENTITY_CONFLICT)


class TransactionFailure(LifecycleError):
    default_message = str(ERROR_MESSAGES.TRANSACTION_FAILED)
