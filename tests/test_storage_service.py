from unittest.mock import MagicMock

import pytest

from smart_health.services.storage_service import ReportStorage, StorageError

BUCKET = "medical-reports"
URL = "https://project.supabase.co/storage/v1/object/sign/medical-reports/p/lab.pdf?token=t"


@pytest.fixture
def client():
    return MagicMock()


@pytest.fixture
def storage(client):
    return ReportStorage(None, None, BUCKET, client=client)


def _bucket(client):
    return client.storage.from_.return_value


def test_upload_returns_stored_path(client, storage):
    _bucket(client).upload.return_value = MagicMock(path="patient-1/general/1_lab.pdf")

    assert storage.upload("patient-1/general/1_lab.pdf", b"%PDF", "application/pdf") == "patient-1/general/1_lab.pdf"
    client.storage.from_.assert_called_with(BUCKET)
    _bucket(client).upload.assert_called_once_with(
        path="patient-1/general/1_lab.pdf",
        file=b"%PDF",
        file_options={"content-type": "application/pdf", "upsert": "false"},
    )


def test_upload_without_path_in_result(client, storage):
    _bucket(client).upload.return_value = object()
    assert storage.upload("p/lab.pdf", b"%PDF", "application/pdf") == "p/lab.pdf"


@pytest.mark.parametrize("key", ["signedURL", "signedUrl"])
def test_signed_url_reads_either_key(client, storage, key):
    _bucket(client).create_signed_url.return_value = {key: URL}

    assert storage.signed_url("p/lab.pdf", 3600) == URL
    _bucket(client).create_signed_url.assert_called_once_with("p/lab.pdf", 3600)


def test_signed_url_missing_in_reply(client, storage):
    _bucket(client).create_signed_url.return_value = {"error": "Object not found"}
    with pytest.raises(StorageError, match="Failed to generate signed URL"):
        storage.signed_url("p/lab.pdf", 3600)


@pytest.mark.parametrize("method, call, message", [
    ("upload", lambda s: s.upload("p/lab.pdf", b"%PDF", "application/pdf"), "File upload failed"),
    ("create_signed_url", lambda s: s.signed_url("p/lab.pdf", 60), "Failed to generate signed URL"),
    ("remove", lambda s: s.remove("p/lab.pdf"), "File delete failed"),
])
def test_sdk_errors_become_storage_errors(client, storage, method, call, message):
    getattr(_bucket(client), method).side_effect = RuntimeError("bucket not found")
    with pytest.raises(StorageError, match=message):
        call(storage)


def test_remove_passes_a_list(client, storage):
    storage.remove("p/lab.pdf")
    _bucket(client).remove.assert_called_once_with(["p/lab.pdf"])


def test_unconfigured_storage():
    storage = ReportStorage(None, None, BUCKET)
    assert storage.configured is False
    with pytest.raises(StorageError, match="Missing Supabase credentials"):
        storage.upload("p/lab.pdf", b"%PDF", "application/pdf")


def test_client_created_once_on_first_use(monkeypatch):
    create_client = MagicMock()
    monkeypatch.setattr("smart_health.services.storage_service.create_client", create_client)
    storage = ReportStorage("https://project.supabase.co", "service-key", BUCKET)
    assert storage.configured is True
    create_client.assert_not_called()

    storage.remove("a")
    storage.remove("b")
    create_client.assert_called_once_with("https://project.supabase.co", "service-key")
