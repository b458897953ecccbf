"""Tests for the photo blob store."""
from unittest.mock import MagicMock, patch

from heart.utils import storage


def _settings(**overrides):
    settings = MagicMock()
    settings.GCS_BUCKET_NAME = ""
    settings.GCP_PROJECT_ID = ""
    settings.MEDIA_ROOT = "images"
    for key, value in overrides.items():
        setattr(settings, key, value)
    return settings


class TestStoreBlob:

    def test_local_store_writes_file(self, tmp_path):
        with patch("heart.utils.storage.get_settings", return_value=_settings(MEDIA_ROOT=str(tmp_path))):
            reference = storage.store_blob(b"png-bytes", "image/png")

        assert reference.endswith(".png")
        assert (tmp_path / reference).read_bytes() == b"png-bytes"

    def test_jpeg_gets_jpg_extension(self, tmp_path):
        with patch("heart.utils.storage.get_settings", return_value=_settings(MEDIA_ROOT=str(tmp_path))):
            reference = storage.store_blob(b"jpeg-bytes", "image/jpeg")
        assert reference.endswith(".jpg")

    def test_gcs_store_when_bucket_configured(self):
        with patch("heart.utils.storage.get_settings", return_value=_settings(GCS_BUCKET_NAME="heart-media")), \
                patch("heart.utils.storage.upload_file", return_value="gs://heart-media/photos/x.png") as upload:
            reference = storage.store_blob(b"png-bytes", "image/png")

        assert reference == "gs://heart-media/photos/x.png"
        path, data = upload.call_args.args
        assert path.startswith("photos/") and path.endswith(".png")
        assert data == b"png-bytes"
        assert upload.call_args.kwargs == {"content_type": "image/png"}


class TestPublicUrl:

    def test_local_reference(self):
        assert storage.public_url("abc.png") == "/images/abc.png"

    def test_gcs_reference(self):
        assert (
            storage.public_url("gs://heart-media/photos/abc.png")
            == "https://storage.googleapis.com/heart-media/photos/abc.png"
        )
