import logging
import os
import sys
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

load_dotenv(find_dotenv(usecwd=True))

####################################
# Load .env file
####################################

BACKEND_DIR = Path(__file__).parent.parent
DATA_DIR = Path(os.environ.get("DATA_DIR", BACKEND_DIR / "data")).resolve()
DATA_DIR.mkdir(parents=True, exist_ok=True)

####################################
# LOGGING
####################################

GLOBAL_LOG_LEVEL = os.environ.get("GLOBAL_LOG_LEVEL", "").upper()
if GLOBAL_LOG_LEVEL in logging.getLevelNamesMapping():
    logging.basicConfig(stream=sys.stdout, level=GLOBAL_LOG_LEVEL, force=True)
else:
    GLOBAL_LOG_LEVEL = "INFO"

log = logging.getLogger(__name__)
log.info(f"GLOBAL_LOG_LEVEL: {GLOBAL_LOG_LEVEL}")

log_sources = [
    "DB",
    "MODELS",
    "ARCHIVAL",
    "TRASH",
    "AUTH",
    "EMAIL",
    "MAIN",
]

SRC_LOG_LEVELS = {}

for source in log_sources:
    log_env_var = source + "_LOG_LEVEL"
    SRC_LOG_LEVELS[source] = os.environ.get(log_env_var, "").upper()
    if SRC_LOG_LEVELS[source] not in logging.getLevelNamesMapping():
        SRC_LOG_LEVELS[source] = GLOBAL_LOG_LEVEL
    log.info(f"{log_env_var}: {SRC_LOG_LEVELS[source]}")

log.setLevel(SRC_LOG_LEVELS["MAIN"])

####################################
# DATABASE
####################################

DATABASE_URL = os.environ.get("DATABASE_URL", f"sqlite:///{DATA_DIR}/notus.db")

# Replace the postgres:// with postgresql://
if "postgres://" in DATABASE_URL:
    DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql://")

DATABASE_POOL_SIZE = os.environ.get("DATABASE_POOL_SIZE", "")
try:
    DATABASE_POOL_SIZE = int(DATABASE_POOL_SIZE) if DATABASE_POOL_SIZE else None
except ValueError:
    DATABASE_POOL_SIZE = None

DATABASE_ECHO = os.environ.get("DATABASE_ECHO", "False").lower() == "true"

####################################
# AUTH
####################################

NOTUS_SECRET_KEY = os.environ.get(
    "NOTUS_SECRET_KEY", "notus-development-secret-change-me-in-production"
)

try:
    JWT_EXPIRES_IN = int(os.environ.get("JWT_EXPIRES_IN", str(7 * 24 * 60 * 60)))
except ValueError:
    JWT_EXPIRES_IN = 7 * 24 * 60 * 60

BCRYPT_ROUNDS = int(os.environ.get("BCRYPT_ROUNDS", "12"))
