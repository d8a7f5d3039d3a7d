# tests/test_store.py

from __future__ import annotations

import pytest
import requests

from resource_toolkit.core.exceptions import AttachError, DownloadError, RecordNotFound, ValidationError
from resource_toolkit.store import HttpFileFetcher, SnapshotDatastore, extract_filename, sanitize_url
from resource_toolkit.store.snapshot import RESOURCE, TRASH


def test_find_by_external_id_ignores_trash_and_other_types(store):
    live = store.add_record(RESOURCE, "Live", {"resource_original_id": "1"})
    store.add_record(RESOURCE, "Trashed", {"resource_original_id": "2"}, status=TRASH)
    store.add_record("consultant", "Jane", {"resource_original_id": "3"})

    assert store.find_by_external_id(["1", "2", "3", ""]) == {"1": live}


def test_create_update_and_errors(store):
    with pytest.raises(ValidationError):
        store.create({"title": "   "})

    record_id = store.create({"title": "Guide", "resource_status": "waiting"})
    assert store.get_title(record_id) == "Guide"
    assert store.get_field(record_id, "title") is None

    store.update(record_id, {"resource_status": "active"})
    assert store.get_field(record_id, "resource_status") == "active"

    with pytest.raises(RecordNotFound):
        store.update(9999, {"x": 1})


def test_ids_are_shared_and_survive_reload(tmp_path):
    store = SnapshotDatastore()
    term = store.add_term("Health")
    record = store.add_record(RESOURCE, "Guide")
    assert record == term + 1

    path = store.save(tmp_path / "snap.json")
    reopened = SnapshotDatastore.open(path)
    assert reopened.add_record(RESOURCE, "Next") == record + 1
    assert [t.name for t in reopened.load_terms()] == ["Health"]


def test_counter_is_kept_ahead_of_existing_ids():
    store = SnapshotDatastore({"records": {"50": {"type": RESOURCE, "title": "x", "status": "publish"}}})
    assert store.add_record(RESOURCE, "y") == 51


def test_attach_moves_file_into_media_dir(tmp_path):
    store = SnapshotDatastore(media_dir=tmp_path / "media")
    record = store.add_record(RESOURCE, "Guide")
    download = tmp_path / "tmp.bin"
    download.write_bytes(b"x")

    attachment_id = store.attach(download, record, "guide.pdf")
    stored = tmp_path / "media" / f"{attachment_id}-guide.pdf"
    assert stored.exists()
    assert not download.exists()

    with pytest.raises(AttachError):
        store.attach(tmp_path / "missing.bin", record, "x.pdf")
    with pytest.raises(AttachError):
        store.attach(stored, 9999, "x.pdf")


def test_list_candidates_only_published_consultants(store):
    jane = store.add_record("consultant", "Doe, Jane, MD", {"email": "Jane@X.org"})
    store.add_record("consultant", "Draft Person", status="draft")
    store.add_record(RESOURCE, "Guide")

    candidates = store.list_candidates("consultant")
    assert [(c.id, c.normalized_name, c.email) for c in candidates] == [(jane, "jane doe", "jane@x.org")]


def test_url_helpers():
    assert sanitize_url("https://x.org/files/My File é.pdf") == "https://x.org/files/My%20File%20%C3%A9.pdf"
    assert sanitize_url("https://x.org/files/a%20b.pdf") == "https://x.org/files/a%20b.pdf"
    assert extract_filename("https://x.org/files/My%20File.pdf?x=1") == "My-File.pdf"
    assert extract_filename("https://x.org/") == "download"


class FakeResponse:
    def __init__(self, chunks, status_error=None):
        self.chunks = chunks
        self.status_error = status_error
        self.closed = False

    def raise_for_status(self):
        if self.status_error is not None:
            raise self.status_error

    def iter_content(self, chunk_size):
        yield from self.chunks

    def close(self):
        self.closed = True


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def get(self, url, stream, timeout):
        self.calls.append((url, stream, timeout))
        if self.error is not None:
            raise self.error
        return self.response


def test_fetcher_streams_to_temp_file(tmp_path):
    response = FakeResponse([b"ab", b"", b"cd"])
    session = FakeSession(response)
    fetcher = HttpFileFetcher(timeout=5, download_dir=tmp_path, session=session)

    path = fetcher.download("https://x.org/a b.pdf")
    assert path.read_bytes() == b"abcd"
    assert path.suffix == ".pdf"
    assert session.calls == [("https://x.org/a%20b.pdf", True, 5)]
    assert response.closed


def test_fetcher_wraps_request_errors(tmp_path):
    fetcher = HttpFileFetcher(download_dir=tmp_path, session=FakeSession(error=requests.Timeout("slow")))
    with pytest.raises(DownloadError):
        fetcher.download("https://x.org/a.pdf")

    bad_status = FakeResponse([], status_error=requests.HTTPError("404"))
    fetcher = HttpFileFetcher(download_dir=tmp_path, session=FakeSession(bad_status))
    with pytest.raises(DownloadError):
        fetcher.download("https://x.org/a.pdf")
    assert list(tmp_path.iterdir()) == []


def test_fetcher_from_config():
    class Cfg:
        downloads = {"timeout": 30, "chunk_size": 1024}

    fetcher = HttpFileFetcher.from_config(Cfg())
    assert fetcher.timeout == 30.0
    assert fetcher.chunk_size == 1024
