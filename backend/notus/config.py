import logging
import os

from notus.env import SRC_LOG_LEVELS

log = logging.getLogger(__name__)
log.setLevel(SRC_LOG_LEVELS["MAIN"])


def _env_bool(name: str, default: str = "False") -> bool:
    return os.environ.get(name, default).lower() == "true"


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.environ.get(name, str(default)))
    except ValueError:
        log.warning(f"Invalid integer for {name}, using {default}")
        return default


####################################
# Account lifecycle
####################################

ACCOUNT_RETENTION_DAYS = _env_int("ACCOUNT_RETENTION_DAYS", 30)
USERNAME_RESOLVE_MAX_ATTEMPTS = _env_int("USERNAME_RESOLVE_MAX_ATTEMPTS", 10)
RESTORED_USERNAME_SUFFIX = os.environ.get("RESTORED_USERNAME_SUFFIX", "_restored")

####################################
# Email
####################################

ENABLE_ACCOUNT_EMAILS = _env_bool("ENABLE_ACCOUNT_EMAILS")
EMAIL_FROM_ADDRESS = os.environ.get("EMAIL_FROM_ADDRESS", "")
EMAIL_GRAPH_TENANT_ID = os.environ.get("EMAIL_GRAPH_TENANT_ID", "")
EMAIL_GRAPH_CLIENT_ID = os.environ.get("EMAIL_GRAPH_CLIENT_ID", "")
EMAIL_GRAPH_CLIENT_SECRET = os.environ.get("EMAIL_GRAPH_CLIENT_SECRET", "")

DEFAULT_LOCALE = os.environ.get("DEFAULT_LOCALE", "en")

CORS_ALLOW_ORIGIN = os.environ.get("CORS_ALLOW_ORIGIN", "*").split(";")


class AppConfig:
    """
    Runtime settings exposed on ``app.state.config``.

    Values start from the environment and may be changed by admins at runtime.
    Nothing here is persisted.
    """

    def __init__(self, **overrides):
        self.ACCOUNT_RETENTION_DAYS = ACCOUNT_RETENTION_DAYS
        self.USERNAME_RESOLVE_MAX_ATTEMPTS = USERNAME_RESOLVE_MAX_ATTEMPTS
        self.RESTORED_USERNAME_SUFFIX = RESTORED_USERNAME_SUFFIX
        self.ENABLE_ACCOUNT_EMAILS = ENABLE_ACCOUNT_EMAILS
        self.EMAIL_FROM_ADDRESS = EMAIL_FROM_ADDRESS
        self.DEFAULT_LOCALE = DEFAULT_LOCALE

        for key, value in overrides.items():
            if not hasattr(self, key):
                raise AttributeError(f"Unknown config key: {key}")
            setattr(self, key, value)
