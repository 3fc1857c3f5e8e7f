import pytest

from notus.services.errors import NotFound, TransactionFailure, Unauthorized


class TestArchiveDocuments:
    """Tests for moving documents into the trash."""

    def test_archive_one(self, trash, documents, trash_documents, make_user, make_document):
        alice = make_user("alice@example.com")
        document = make_document(alice.id, title="Draft", content="hello", tags=["x"])

        trashed = trash.archive_one(document)

        assert documents.get_document_by_id(document.id) is None
        assert trashed.original_id == document.id
        assert trashed.title == "Draft"
        assert trashed.content == "hello"
        assert trashed.tags == ["x"]
        assert trash_documents.count_trash_documents_by_user_id(alice.id) == 1

    def test_archive_many_is_atomic(
        self, trash, shares, documents, make_user, make_document, monkeypatch
    ):
        """A failing step leaves every document live."""
        alice = make_user("alice@example.com")
        first = make_document(alice.id, title="One")
        second = make_document(alice.id, title="Two")

        def broken_delete(*args, **kwargs):
            raise RuntimeError("lock timeout")

        monkeypatch.setattr(shares, "delete_shares_by_document_ids", broken_delete)

        with pytest.raises(TransactionFailure):
            trash.archive_many([first, second])
        assert documents.count_documents_by_user_id(alice.id) == 2

    def test_archive_by_ids(self, trash, documents, make_user, make_document):
        alice = make_user("alice@example.com")
        ids = [make_document(alice.id, title=t).id for t in ("a", "b", "c")]

        trashed = trash.archive_by_ids(ids[:2], alice.id)

        assert sorted(t.original_id for t in trashed) == sorted(ids[:2])
        assert [d.id for d in documents.get_documents_by_user_id(alice.id)] == [ids[2]]

    def test_foreign_document_fails_whole_batch(
        self, trash, documents, make_user, make_document
    ):
        """One document owned by someone else rejects the entire request."""
        alice = make_user("alice@example.com")
        bob = make_user("bob@example.com")
        mine = make_document(alice.id, title="Mine")
        theirs = make_document(bob.id, title="Theirs")

        with pytest.raises(Unauthorized):
            trash.archive_by_ids([mine.id, theirs.id], alice.id)
        assert documents.get_document_by_id(mine.id) is not None
        assert documents.get_document_by_id(theirs.id) is not None

    def test_missing_document(self, trash, make_user, make_document):
        alice = make_user("alice@example.com")
        document = make_document(alice.id)

        with pytest.raises(NotFound):
            trash.archive_by_ids([document.id, 12345], alice.id)

    def test_empty_selection(self, trash, make_user):
        alice = make_user("alice@example.com")

        with pytest.raises(NotFound):
            trash.archive_by_ids([], alice.id)


class TestTrashListing:
    def test_newest_first(self, trash, make_user, make_document, clock):
        alice = make_user("alice@example.com")
        older = make_document(alice.id, title="Older")
        newer = make_document(alice.id, title="Newer")
        trash.archive_one(older)
        clock.advance(seconds=60)
        trash.archive_one(newer)

        items = trash.list_trash(alice.id)

        assert [t.title for t in items] == ["Newer", "Older"]
        assert [t.title for t in trash.list_trash(alice.id, skip=1, limit=1)] == [
            "Older"
        ]

    def test_only_own_items(self, trash, make_user, make_document):
        alice = make_user("alice@example.com")
        bob = make_user("bob@example.com")
        trash.archive_one(make_document(bob.id))

        assert trash.list_trash(alice.id) == []


class TestRestore:
    """Tests for restoring a single trashed document."""

    def test_restore_creates_new_document(
        self, trash, documents, trash_documents, make_user, make_document
    ):
        """The restored copy has a new id and the original timestamps."""
        alice = make_user("alice@example.com")
        document = make_document(
            alice.id, title="Notes", content="body", created_at=100, updated_at=200
        )
        trashed = trash.archive_one(document)

        restored = trash.restore(trashed.id, alice.id)

        assert restored.id != document.id
        assert restored.title == "Notes"
        assert restored.content == "body"
        assert restored.created_at == 100
        assert restored.updated_at == 200
        assert trash_documents.get_trash_document_by_id(trashed.id) is None
        assert documents.get_document_by_id(restored.id) is not None

    def test_restore_foreign_item(self, trash, make_user, make_document):
        alice = make_user("alice@example.com")
        bob = make_user("bob@example.com")
        trashed = trash.archive_one(make_document(bob.id))

        with pytest.raises(Unauthorized):
            trash.restore(trashed.id, alice.id)

    def test_restore_unknown_item(self, trash, make_user):
        alice = make_user("alice@example.com")

        with pytest.raises(NotFound):
            trash.restore(404, alice.id)


class TestOwnership:
    def test_is_owner(self, trash, make_user, make_document):
        alice = make_user("alice@example.com")
        bob = make_user("bob@example.com")
        document = make_document(alice.id)

        assert trash.is_owner(document.id, alice.id) is True
        assert trash.is_owner(document.id, bob.id) is False
        assert trash.is_owner(999, alice.id) is False
