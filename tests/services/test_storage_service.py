import pytest

from pte_api.core.config import settings
from pte_api.services import storage_service
from pte_api.services.storage_service import LocalStorageBackend, S3StorageBackend

pytestmark = pytest.mark.anyio


async def test_local_backend_writes_nested_keys(tmp_path):
    backend = LocalStorageBackend(base_path=str(tmp_path))

    key = await backend.store_bytes(key="pte/speaking/read_aloud/q1/a.webm", data=b"audio")

    assert key == "pte/speaking/read_aloud/q1/a.webm"
    assert (tmp_path / "pte/speaking/read_aloud/q1/a.webm").read_bytes() == b"audio"
    assert await backend.get_presigned_url(key=key) is None


async def test_local_backend_rejects_keys_outside_base(tmp_path):
    backend = LocalStorageBackend(base_path=str(tmp_path / "uploads"))

    with pytest.raises(ValueError):
        await backend.store_bytes(key="../escape.webm", data=b"x")


def test_incomplete_s3_credentials_fall_back_to_local(monkeypatch, tmp_path):
    monkeypatch.setattr(settings, "STORAGE_BACKEND", "s3")
    monkeypatch.setattr(settings, "S3_BUCKET_NAME", "pte-audio")
    monkeypatch.setattr(settings, "S3_ACCESS_KEY_ID", None)
    monkeypatch.setattr(settings, "LOCAL_STORAGE_PATH", str(tmp_path))
    storage_service.reset_storage_backend()
    try:
        backend = storage_service.get_storage_backend()
        assert isinstance(backend, LocalStorageBackend)
        assert storage_service.get_storage_backend() is backend
    finally:
        storage_service.reset_storage_backend()


def test_s3_public_url_uses_configured_base(monkeypatch):
    monkeypatch.setattr(settings, "S3_PUBLIC_BASE_URL", "https://cdn.example.com/")
    backend = S3StorageBackend(
        bucket="pte-audio",
        endpoint_url=None,
        region="us-east-1",
        access_key="AKIATEST",
        secret_key="secret",
    )

    assert backend.public_url(key="pte/a.wav") == "https://cdn.example.com/pte/a.wav"
