import random

import pytest

from notus.internal.db import Database
from notus.models.deleted_accounts import DeletedAccountsTable
from notus.models.documents import DocumentsTable
from notus.models.folders import FoldersTable
from notus.models.shares import SharesTable
from notus.models.trash_documents import TrashDocumentsTable
from notus.models.users import UsersTable
from notus.services.archival import AccountArchiver, AccountRestorer, ReactivationGate
from notus.services.auth import AuthService
from notus.services.identity import IdentityResolver
from notus.services.trash import DocumentTrash
from notus.utils.auth import PasswordVerifier, get_password_hash

DAY = 24 * 60 * 60
START = 1_700_000_000


class FakeClock:
    def __init__(self, now: float = START):
        self.now = float(now)

    def __call__(self) -> float:
        return self.now

    def advance(self, days: float = 0, seconds: float = 0) -> None:
        self.now += days * DAY + seconds


class RecordingNotifier:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent = []

    async def send_deletion_confirmation(self, email, display_name):
        if self.fail:
            raise RuntimeError("mail relay unavailable")
        self.sent.append(("deleted", email, display_name))

    async def send_reactivation_confirmation(self, email, display_name):
        if self.fail:
            raise RuntimeError("mail relay unavailable")
        self.sent.append(("reactivated", email, display_name))


def hash_password(password: str) -> str:
    return get_password_hash(password, rounds=4)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def database(tmp_path):
    database = Database(url=f"sqlite:///{tmp_path / 'notus.db'}")
    database.create_all()
    yield database
    database.dispose()


@pytest.fixture
def users(database):
    return UsersTable(database)


@pytest.fixture
def documents(database):
    return DocumentsTable(database)


@pytest.fixture
def folders(database):
    return FoldersTable(database)


@pytest.fixture
def shares(database):
    return SharesTable(database)


@pytest.fixture
def deleted_accounts(database):
    return DeletedAccountsTable(database)


@pytest.fixture
def trash_documents(database):
    return TrashDocumentsTable(database)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def resolver(users, clock):
    return IdentityResolver(users, max_attempts=10, clock=clock, rng=random.Random(7))


@pytest.fixture
def trash(database, documents, trash_documents, folders, shares, clock):
    return DocumentTrash(
        database, documents, trash_documents, folders, shares, clock=clock
    )


@pytest.fixture
def gate(database, deleted_accounts, trash, clock):
    return ReactivationGate(database, deleted_accounts, trash, clock=clock)


@pytest.fixture
def archiver(
    database, users, documents, folders, deleted_accounts, trash, gate, notifier, clock
):
    return AccountArchiver(
        database,
        users,
        documents,
        folders,
        deleted_accounts,
        trash,
        gate,
        notifier=notifier,
        retention_days=30,
        clock=clock,
    )


@pytest.fixture
def restorer(database, users, deleted_accounts, trash, resolver, notifier, clock):
    return AccountRestorer(
        database,
        users,
        deleted_accounts,
        trash,
        resolver,
        PasswordVerifier(),
        notifier=notifier,
        clock=clock,
    )


@pytest.fixture
def auth_service(database, users, gate, restorer, resolver):
    return AuthService(
        database,
        users,
        gate,
        restorer,
        resolver,
        PasswordVerifier(),
        hasher=hash_password,
    )


@pytest.fixture
def make_user(users):
    def _make_user(email, username=None, password="correct-horse", **fields):
        return users.insert_new_user(
            email=email,
            username=username or email.split("@")[0],
            password_hash=hash_password(password) if password else None,
            **fields,
        )

    return _make_user


@pytest.fixture
def make_document(documents):
    def _make_document(user_id, title="Untitled", content="", tags=None, **fields):
        return documents.insert_new_document(
            user_id=user_id, title=title, content=content, tags=tags, **fields
        )

    return _make_document
