import asyncio

import pytest

from notus.services.archival import ProviderIdentity
from notus.services.errors import (
    Conflict,
    Expired,
    IncorrectCredential,
    NotFound,
    TransactionFailure,
)

DAY = 24 * 60 * 60
PASSWORD = "correct-horse"


class TestRestore:
    """Tests for AccountRestorer.restore."""

    def test_round_trip_keeps_identity(
        self, archiver, restorer, users, make_user, clock
    ):
        """A reactivated account gets its id, username and password back."""
        alice = make_user(
            "alice@example.com", first_name="Alice", is_admin=True, email_verified=True
        )
        archiver.archive(alice)
        clock.advance(days=3)

        restored = restorer.restore("alice@example.com", credential_proof=PASSWORD)

        assert restored.id == alice.id
        assert restored.username == "alice"
        assert restored.password_hash == alice.password_hash
        assert restored.first_name == "Alice"
        assert restored.is_admin is True
        assert restored.email_verified is True
        assert restored.created_at == alice.created_at
        assert users.get_user_by_email("alice@example.com").id == alice.id

    def test_documents_come_back(
        self,
        archiver,
        restorer,
        documents,
        trash_documents,
        deleted_accounts,
        make_user,
        make_document,
    ):
        """Trashed documents are recreated and the archive is consumed."""
        alice = make_user("alice@example.com")
        make_document(alice.id, title="One", content="first", tags=["a"])
        make_document(alice.id, title="Two", content="second")
        archiver.archive(alice)

        restored = restorer.restore("alice@example.com", credential_proof=PASSWORD)

        titles = sorted(
            d.title for d in documents.get_documents_by_user_id(restored.id)
        )
        assert titles == ["One", "Two"]
        assert trash_documents.count_trash_documents_by_user_id(alice.id) == 0
        assert deleted_accounts.get_archive_by_email("alice@example.com") is None

    def test_taken_username_falls_back_to_restored_suffix(
        self, archiver, restorer, make_user
    ):
        """Another user holding the handle gives the local part plus _restored."""
        bob = make_user("bob@example.com", username="bob")
        archiver.archive(bob)
        make_user("bob@elsewhere.com", username="bob")

        restored = restorer.restore("bob@example.com", credential_proof=PASSWORD)

        assert restored.username == "bob_restored"
        assert restored.email == "bob@example.com"

    def test_taken_fallback_is_decorated(self, archiver, restorer, make_user, clock):
        bob = make_user("bob@example.com", username="bob")
        archiver.archive(bob)
        make_user("bob@elsewhere.com", username="bob")
        make_user("bob@third.com", username="bob_restored")

        restored = restorer.restore("bob@example.com", credential_proof=PASSWORD)

        assert restored.username == f"bob_restored_{int(clock() * 1000)}"

    def test_wrong_password(self, archiver, restorer, deleted_accounts, make_user):
        archiver.archive(make_user("alice@example.com"))

        with pytest.raises(IncorrectCredential):
            restorer.restore("alice@example.com", credential_proof="wrong-password")
        assert deleted_accounts.get_archive_by_email("alice@example.com") is not None

    def test_missing_password(self, archiver, restorer, make_user):
        archiver.archive(make_user("alice@example.com"))

        with pytest.raises(IncorrectCredential):
            restorer.restore("alice@example.com")

    def test_unknown_email(self, restorer):
        with pytest.raises(NotFound):
            restorer.restore("nobody@example.com", credential_proof=PASSWORD)

    def test_expired_archive(self, archiver, restorer, users, make_user, clock):
        """Past expires_at nothing is restored."""
        archiver.archive(make_user("alice@example.com"))
        clock.advance(days=30)

        with pytest.raises(Expired):
            restorer.restore("alice@example.com", credential_proof=PASSWORD)
        assert users.get_user_by_email("alice@example.com") is None

    def test_failure_leaves_archive_intact(
        self,
        archiver,
        restorer,
        trash,
        users,
        deleted_accounts,
        trash_documents,
        make_user,
        make_document,
        monkeypatch,
    ):
        """A failure half way rolls back the recreated user."""
        alice = make_user("alice@example.com")
        make_document(alice.id, title="Precious")
        archiver.archive(alice)

        def broken_restore(*args, **kwargs):
            raise RuntimeError("connection reset")

        monkeypatch.setattr(trash, "restore_all_for_user", broken_restore)

        with pytest.raises(TransactionFailure):
            restorer.restore("alice@example.com", credential_proof=PASSWORD)

        assert users.get_user_by_email("alice@example.com") is None
        assert deleted_accounts.get_archive_by_email("alice@example.com") is not None
        assert trash_documents.count_trash_documents_by_user_id(alice.id) == 1

    def test_losing_a_concurrent_restore_conflicts(
        self, archiver, restorer, users, make_user, monkeypatch
    ):
        """If the email is claimed after the checks, the restore backs off."""
        alice = make_user("alice@example.com")
        archiver.archive(alice)
        verify = restorer._verify_credentials

        def verify_then_race(*args, **kwargs):
            verify(*args, **kwargs)
            users.insert_new_user(email="alice@example.com", username="winner")

        monkeypatch.setattr(restorer, "_verify_credentials", verify_then_race)

        with pytest.raises(Conflict):
            restorer.restore("alice@example.com", credential_proof=PASSWORD)
        assert users.get_user_by_email("alice@example.com").username == "winner"


class TestProviderRestore:
    """Accounts created through a sign-in provider have no password."""

    def test_requires_provider_identity(self, archiver, restorer, make_user):
        archiver.archive(
            make_user("carol@example.com", password=None, provider="google")
        )

        with pytest.raises(IncorrectCredential):
            restorer.restore("carol@example.com", credential_proof="anything")

    def test_restores_with_provider_identity(self, archiver, restorer, make_user):
        carol = make_user(
            "carol@example.com", password=None, provider="google", provider_id="g-1"
        )
        archiver.archive(carol)

        restored = restorer.restore(
            "carol@example.com",
            provider_identity=ProviderIdentity(provider="google", provider_id="g-2"),
        )

        assert restored.id == carol.id
        assert restored.password_hash is None
        assert restored.provider_id == "g-2"


class TestNotifyRestored:
    def test_notice_is_sent(self, archiver, restorer, notifier, make_user):
        archiver.archive(make_user("alice@example.com", first_name="Alice"))
        restored = restorer.restore("alice@example.com", credential_proof=PASSWORD)

        assert asyncio.run(restorer.notify_restored(restored)) is True
        assert ("reactivated", "alice@example.com", "Alice") in notifier.sent
