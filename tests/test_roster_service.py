"""Tests for the roster domain operations."""

import io
import json
import re
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import Mock

import pytest

from photo_roster.exceptions import NotFoundError, ReadError, ValidationError, WriteError
from photo_roster.repositories import InMemoryDocumentStore
from photo_roster.services import RosterService, StagedUpload
from photo_roster.storage import BlobRef, BlobStore


def _disk_snapshot(document_store):
    if not document_store.path.exists():
        return None
    return json.loads(document_store.path.read_text(encoding="utf-8"))


class TestClients:
    """Client creation and deletion."""

    def test_first_client_gets_id_one(self, roster):
        client = roster.create_client("Alice")

        assert client.id == 1
        assert client.name == "Alice"
        assert client.email is None
        assert client.phone is None

    def test_ids_follow_current_maximum(self, roster):
        ids = [roster.create_client(name).id for name in ["Alice", "Bob", "Carol"]]
        assert ids == [1, 2, 3]

        roster.delete_client(3)
        assert roster.create_client("Dave").id == 3

        roster.delete_client(1)
        assert roster.create_client("Erin").id == 4

    def test_optional_fields_are_stored(self, roster, document_store):
        roster.create_client("Alice", email="alice@example.com", phone="555-0100")

        stored = _disk_snapshot(document_store)["clients"][0]
        assert stored == {"id": 1, "name": "Alice", "email": "alice@example.com", "phone": "555-0100"}

    @pytest.mark.parametrize("name", [None, ""])
    def test_name_is_required(self, roster, document_store, name):
        with pytest.raises(ValidationError, match="Client name is required"):
            roster.create_client(name)
        assert _disk_snapshot(document_store) is None

    def test_delete_cascades_to_photos(self, roster, staged, blob_store):
        alice = roster.create_client("Alice")
        bob = roster.create_client("Bob")
        alice_photos = roster.upload_photos(alice.id, [staged("a1.jpg"), staged("a2.jpg")])
        bob_photos = roster.upload_photos(bob.id, [staged("b1.jpg")])

        roster.delete_client(alice.id)

        document = roster.list_data()
        assert [c.name for c in document.clients] == ["Bob"]
        assert [p.id for p in document.photos] == [p.id for p in bob_photos]
        for photo in alice_photos:
            assert not (blob_store.uploads_root / photo.url.rsplit("/", 1)[-1]).exists()
        assert (blob_store.uploads_root / bob_photos[0].url.rsplit("/", 1)[-1]).exists()

    def test_delete_client_with_missing_files(self, roster, staged, blob_store):
        alice = roster.create_client("Alice")
        photos = roster.upload_photos(alice.id, [staged()])
        (blob_store.uploads_root / photos[0].url.rsplit("/", 1)[-1]).unlink()

        roster.delete_client(alice.id)

        assert roster.list_data().photos == []

    def test_delete_unknown_client(self, roster, document_store):
        roster.create_client("Alice")
        before = _disk_snapshot(document_store)

        with pytest.raises(NotFoundError, match="Client not found"):
            roster.delete_client(99)
        assert _disk_snapshot(document_store) == before

    @pytest.mark.parametrize("raw_id", ["abc", "1_0", "+1", "1.0", "\u0661", ""])
    def test_delete_client_non_integer_id(self, roster, document_store, raw_id):
        for i in range(10):
            roster.create_client(f"client-{i}")
        before = _disk_snapshot(document_store)

        with pytest.raises(NotFoundError):
            roster.delete_client(raw_id)
        assert _disk_snapshot(document_store) == before

    def test_delete_client_accepts_string_id(self, roster):
        roster.create_client("Alice")
        roster.delete_client("1")
        assert roster.list_data().clients == []

    def test_delete_client_keeps_unowned_legacy_photos(self, document_store):
        document_store.path.write_text(
            json.dumps({
                "clients": [{"id": 1, "name": "Alice"}, {"id": 2, "name": 5}],
                "photos": [
                    {"id": 1, "clientId": None, "url": "/uploads/a.jpg"},
                    {"id": 2, "clientId": 1, "url": "/uploads/b.jpg"},
                ],
            }),
            encoding="utf-8",
        )
        roster = RosterService(document_store, Mock(spec=BlobStore))

        roster.delete_client(1)

        roster.blob_store.delete.assert_called_once_with("/uploads/b.jpg")
        stored = _disk_snapshot(document_store)
        assert stored["clients"] == [{"id": 2, "name": 5}]
        assert [p["id"] for p in stored["photos"]] == [1]
        assert stored["photos"][0]["clientId"] is None


class TestPhotos:
    """Photo upload, deletion and favorites."""

    def test_upload_batch_ids_and_defaults(self, roster, staged):
        photos = roster.upload_photos("2", [staged("a.jpg"), staged("b.jpg"), staged("c.jpg")])

        assert [p.id for p in photos] == [1, 2, 3]
        assert all(p.client_id == 2 for p in photos)
        assert all(p.favorite is False for p in photos)
        assert [p.name for p in photos] == ["a.jpg", "b.jpg", "c.jpg"]
        assert len({p.uploaded for p in photos}) == 1
        assert re.fullmatch(r"\d{4}-\d\d-\d\dT\d\d:\d\d:\d\d\.\d{3}Z", photos[0].uploaded)

    def test_upload_continues_from_max_id(self, roster, staged):
        roster.upload_photos(1, [staged(), staged()])
        roster.delete_photo(1)

        photos = roster.upload_photos(1, [staged()])
        assert photos[0].id == 3

    def test_upload_records_file_size_and_url(self, roster, staged, blob_store, jpeg):
        photo = roster.upload_photos(1, [staged("x.jpg", seed=3)])[0]

        assert photo.url.startswith("/uploads/photos-")
        assert photo.url.endswith(".jpg")
        assert photo.size == len(jpeg(seed=3))
        stored = blob_store.uploads_root / photo.url.rsplit("/", 1)[-1]
        assert stored.stat().st_size == photo.size

    def test_upload_does_not_check_client_exists(self, roster, staged):
        photos = roster.upload_photos(42, [staged()])
        assert photos[0].client_id == 42

    @pytest.mark.parametrize("client_id, files", [
        (None, ["one"]),
        ("", ["one"]),
        ("1", []),
        ("1", None),
    ])
    def test_upload_requires_client_id_and_files(self, roster, staged, blob_store, client_id, files):
        uploads = [staged() for _ in files] if files else files

        with pytest.raises(ValidationError, match="Client ID and files are required"):
            roster.upload_photos(client_id, uploads)
        assert list(blob_store.uploads_root.iterdir()) == []

    @pytest.mark.parametrize("client_id", ["abc", "1_0", "+1", "2.5"])
    def test_upload_rejects_non_integer_client_id(self, roster, staged, blob_store, client_id):
        with pytest.raises(ValidationError, match="must be an integer"):
            roster.upload_photos(client_id, [staged()])
        assert list(blob_store.uploads_root.iterdir()) == []

    def test_upload_removes_files_when_save_fails(self, blob_store, staged):
        store = InMemoryDocumentStore()
        store.save = Mock(side_effect=WriteError("Failed to write document"))
        roster = RosterService(store, blob_store)

        with pytest.raises(WriteError):
            roster.upload_photos(1, [staged(), staged()])
        assert list(blob_store.uploads_root.iterdir()) == []

    def test_delete_photo(self, roster, staged, blob_store):
        photos = roster.upload_photos(1, [staged(), staged()])
        stored = blob_store.uploads_root / photos[0].url.rsplit("/", 1)[-1]

        roster.delete_photo(photos[0].id)

        assert [p.id for p in roster.list_data().photos] == [photos[1].id]
        assert not stored.exists()

    def test_delete_photo_with_missing_file(self, roster, staged, blob_store):
        photo = roster.upload_photos(1, [staged()])[0]
        (blob_store.uploads_root / photo.url.rsplit("/", 1)[-1]).unlink()

        roster.delete_photo(photo.id)
        assert roster.list_data().photos == []

    def test_delete_photo_without_url(self, document_store):
        document_store.path.write_text(
            json.dumps({"clients": [], "photos": [{"id": 4, "clientId": None, "url": None}]}),
            encoding="utf-8",
        )
        roster = RosterService(document_store, Mock(spec=BlobStore))

        roster.delete_photo(4)

        roster.blob_store.delete.assert_not_called()
        assert roster.list_data().photos == []

    def test_delete_unknown_photo(self, roster, staged, document_store):
        roster.upload_photos(1, [staged()])
        before = _disk_snapshot(document_store)

        with pytest.raises(NotFoundError, match="Photo not found"):
            roster.delete_photo(5)
        assert _disk_snapshot(document_store) == before

    def test_toggle_favorite_is_an_involution(self, roster, staged):
        roster.upload_photos(1, [staged(), staged()])

        assert roster.toggle_favorite(2).favorite is True
        assert roster.list_data().photos[1].favorite is True
        assert roster.toggle_favorite(2).favorite is False
        assert roster.list_data().photos[1].favorite is False
        assert roster.list_data().photos[0].favorite is False

    def test_toggle_unknown_photo(self, roster):
        with pytest.raises(NotFoundError):
            roster.toggle_favorite(1)


class TestDocumentAccess:
    """Behaviour shared by every operation."""

    def test_list_never_writes(self, roster, document_store):
        roster.create_client("Alice")
        before = document_store.path.stat().st_mtime_ns

        first = roster.list_data()
        second = roster.list_data()

        assert first == second
        assert document_store.path.stat().st_mtime_ns == before

    def test_list_surfaces_read_errors(self, roster, document_store):
        document_store.path.write_text("garbage", encoding="utf-8")

        with pytest.raises(ReadError):
            roster.list_data()

    def test_blob_delete_errors_never_propagate(self, staged):
        """A blob store that logs its own failures cannot block deletes."""
        blob_store = Mock(spec=BlobStore)
        blob_store.finalize.return_value = BlobRef(filename="f.jpg", size=1)
        blob_store.url_for.side_effect = lambda name: f"/uploads/{name}"
        roster = RosterService(InMemoryDocumentStore(), blob_store)

        roster.upload_photos(1, [staged()])
        roster.delete_photo(1)

        blob_store.delete.assert_called_once_with("/uploads/f.jpg")
        assert roster.list_data().photos == []

    def test_concurrent_creates_do_not_lose_updates(self, roster):
        names = [f"client-{i}" for i in range(40)]

        with ThreadPoolExecutor(max_workers=8) as pool:
            created = list(pool.map(roster.create_client, names))

        ids = sorted(c.id for c in created)
        assert ids == list(range(1, 41))
        assert len(roster.list_data().clients) == 40

    def test_concurrent_uploads_get_distinct_ids(self, roster):
        def upload(i):
            upload = StagedUpload(stream=io.BytesIO(b"x" * i), filename=f"{i}.jpg")
            return roster.upload_photos(1, [upload])[0].id

        with ThreadPoolExecutor(max_workers=8) as pool:
            ids = list(pool.map(upload, range(1, 21)))

        assert sorted(ids) == list(range(1, 21))
