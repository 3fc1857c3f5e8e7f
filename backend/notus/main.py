import logging
import time
from contextlib import asynccontextmanager
from typing import Callable, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from notus.config import (
    CORS_ALLOW_ORIGIN,
    EMAIL_GRAPH_CLIENT_ID,
    EMAIL_GRAPH_CLIENT_SECRET,
    EMAIL_GRAPH_TENANT_ID,
    AppConfig,
)
from notus.env import SRC_LOG_LEVELS
from notus.internal.db import Database
from notus.models.deleted_accounts import DeletedAccountsTable
from notus.models.documents import DocumentsTable
from notus.models.folders import FoldersTable
from notus.models.shares import SharesTable
from notus.models.trash_documents import TrashDocumentsTable
from notus.models.users import UsersTable
from notus.routers import archives, auths, documents
from notus.services.archival import (
    AccountArchiver,
    AccountRestorer,
    ReactivationGate,
)
from notus.services.auth import AuthService
from notus.services.email.auth import GraphTokenProvider
from notus.services.email.graph_mail_client import GraphMailClient
from notus.services.email.notifier import EmailNotifier, Notifier, NullNotifier
from notus.services.identity import IdentityResolver
from notus.services.trash import DocumentTrash
from notus.utils.auth import PasswordVerifier, get_password_hash

log = logging.getLogger(__name__)
log.setLevel(SRC_LOG_LEVELS["MAIN"])


def build_notifier(config: AppConfig) -> Notifier:
    if not config.ENABLE_ACCOUNT_EMAILS:
        return NullNotifier()

    token_provider = GraphTokenProvider(
        tenant_id=EMAIL_GRAPH_TENANT_ID,
        client_id=EMAIL_GRAPH_CLIENT_ID,
        client_secret=EMAIL_GRAPH_CLIENT_SECRET,
    )
    if not token_provider.configured or not config.EMAIL_FROM_ADDRESS:
        log.warning("Account emails are enabled but Graph mail is not configured")
        return NullNotifier()

    return EmailNotifier(
        GraphMailClient(token_provider, from_address=config.EMAIL_FROM_ADDRESS),
        locale=config.DEFAULT_LOCALE,
        retention_days=config.ACCOUNT_RETENTION_DAYS,
    )


def create_app(
    database: Optional[Database] = None,
    config: Optional[AppConfig] = None,
    notifier: Optional[Notifier] = None,
    clock: Callable[[], float] = time.time,
) -> FastAPI:
    database = database or Database()
    config = config or AppConfig()
    notifier = notifier or build_notifier(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        database.create_all()
        yield
        database.dispose()

    app = FastAPI(title="Notus", lifespan=lifespan)
    app.state.config = config
    app.state.database = database

    ####################
    # Tables
    ####################

    app.state.users = UsersTable(database)
    app.state.documents = DocumentsTable(database)
    app.state.folders = FoldersTable(database)
    app.state.shares = SharesTable(database)
    app.state.deleted_accounts = DeletedAccountsTable(database)
    app.state.trash_documents = TrashDocumentsTable(database)

    ####################
    # Lifecycle services
    ####################

    verifier = PasswordVerifier()
    app.state.resolver = IdentityResolver(
        app.state.users,
        max_attempts=config.USERNAME_RESOLVE_MAX_ATTEMPTS,
        clock=clock,
    )
    app.state.trash = DocumentTrash(
        database,
        app.state.documents,
        app.state.trash_documents,
        app.state.folders,
        app.state.shares,
        clock=clock,
    )
    app.state.gate = ReactivationGate(
        database, app.state.deleted_accounts, app.state.trash, clock=clock
    )
    app.state.archiver = AccountArchiver(
        database,
        app.state.users,
        app.state.documents,
        app.state.folders,
        app.state.deleted_accounts,
        app.state.trash,
        app.state.gate,
        notifier=notifier,
        retention_days=config.ACCOUNT_RETENTION_DAYS,
        clock=clock,
    )
    app.state.restorer = AccountRestorer(
        database,
        app.state.users,
        app.state.deleted_accounts,
        app.state.trash,
        app.state.resolver,
        verifier,
        notifier=notifier,
        restored_suffix=config.RESTORED_USERNAME_SUFFIX,
        clock=clock,
    )
    app.state.auth = AuthService(
        database,
        app.state.users,
        app.state.gate,
        app.state.restorer,
        app.state.resolver,
        verifier,
        hasher=get_password_hash,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ALLOW_ORIGIN,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(auths.router, prefix="/api/v1/auths", tags=["auths"])
    app.include_router(documents.router, prefix="/api/v1/documents", tags=["documents"])
    app.include_router(archives.router, prefix="/api/v1/archives", tags=["archives"])

    @app.get("/health")
    async def healthcheck():
        return {"status": True}

    return app


app = create_app()
