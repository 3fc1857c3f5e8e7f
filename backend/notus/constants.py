from enum import Enum


class ERROR_MESSAGES(str, Enum):
    def __str__(self) -> str:
        return super().__str__()

    DEFAULT = lambda err="": f'{"Something went wrong :/" if err == "" else "[ERROR: " + str(err) + "]"}'
    UNAUTHORIZED = "401 Unauthorized"
    ACCESS_PROHIBITED = "You do not have permission to access this resource."
    INVALID_TOKEN = "Your session has expired or the token is invalid. Please sign in again."
    INVALID_CRED = "The email or password provided is incorrect."
    INCORRECT_PASSWORD = "Incorrect password."
    PASSWORD_REQUIRED = "Your password is required to confirm this action."
    INVALID_EMAIL_FORMAT = "The email format you entered is invalid."
    EMAIL_TAKEN = "Uh-oh! This email is already registered."
    USERNAME_TAKEN = "This username is already taken."
    USER_NOT_FOUND = "We could not find what you're looking for :/"
    USER_BANNED = "This account has been suspended."
    NOT_FOUND = "We could not find what you're looking for :/"
    DOCUMENT_NOT_FOUND = "Document not found."
    TRASH_ITEM_NOT_FOUND = "Item not found in trash."
    NOT_DOCUMENT_OWNER = "You are not authorized to modify this document."
    NO_DOCUMENTS_SELECTED = "No valid document ID provided."
    ARCHIVE_NOT_FOUND = "No deleted account was found for this email."
    ARCHIVE_EXPIRED = "The reactivation period for this account has expired."
    ACCOUNT_PENDING_REACTIVATION = (
        "This account was deleted recently and can still be reactivated."
    )
    PROVIDER_REACTIVATION = (
        "This account was created with a sign-in provider. Sign in with that provider to reactivate it."
    )
    IDENTITY_CONFLICT = "A user with this identity already exists."
    TRANSACTION_FAILED = "The operation could not be completed. No changes were made."
