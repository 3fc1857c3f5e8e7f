from notus.models.deleted_accounts import SNAPSHOT_VERSION, AccountSnapshot


class TestAccountSnapshot:
    """Tests for reading stored credential snapshots."""

    def test_current_version_round_trip(self):
        snapshot = AccountSnapshot(
            password_hash="$2b$04$hash", email_verified=True, created_at=10, updated_at=20
        )

        parsed = AccountSnapshot.from_data(snapshot.model_dump())

        assert parsed == snapshot
        assert parsed.has_password is True

    def test_legacy_blob_without_version(self):
        """Blobs written before versioning default to a verified email."""
        parsed = AccountSnapshot.from_data({"password_hash": "$2b$04$hash"})

        assert parsed.version == SNAPSHOT_VERSION
        assert parsed.email_verified is True
        assert parsed.created_at is None

    def test_unknown_keys_are_ignored(self):
        parsed = AccountSnapshot.from_data(
            {"version": 7, "password_hash": "h", "email_verified": False, "mfa": "x"}
        )

        assert parsed.password_hash == "h"
        assert parsed.email_verified is False

    def test_empty_hash_means_no_password(self):
        assert AccountSnapshot.from_data({"password_hash": ""}).has_password is False
        assert AccountSnapshot.from_data(None).has_password is False
