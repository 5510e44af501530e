"""Tests for the files resource."""

import io

import httpx
import pytest

from gravixlayer import GravixLayerBadRequestError, GravixLayerServerError
from gravixlayer.models.files import FilePurpose

FILES_URL = "https://api.gravixlayer.test/v1/files"

UPLOADED = {"message": "file uploaded", "file_name": "data.jsonl", "purpose": "batch"}


@pytest.fixture
def data_file(tmp_path):
    path = tmp_path / "data.jsonl"
    path.write_bytes(b'{"prompt": "hi"}\n')
    return path


class TestFileUpload:
    """Tests for Files.create and Files.upload."""

    def test_upload_path(self, client, mock_api, data_file):
        route = mock_api.post(FILES_URL).mock(
            return_value=httpx.Response(200, json=UPLOADED)
        )

        result = client.files.create(str(data_file), purpose="batch", expires_after=60)

        assert result.file_name == "data.jsonl"
        assert result.purpose == "batch"
        request = route.calls.last.request
        assert request.headers["Content-Type"].startswith("multipart/form-data")
        body = request.content
        assert b'name="purpose"' in body
        assert b'name="expires_after"' in body
        assert b"60" in body
        assert b'filename="data.jsonl"' in body
        assert b'{"prompt": "hi"}' in body

    def test_upload_bytes_with_default_name(self, client, mock_api):
        route = mock_api.post(FILES_URL).mock(return_value=httpx.Response(200, json={}))

        result = client.files.upload(b"raw", purpose=FilePurpose.FINE_TUNE)

        assert result.message == "file uploaded"
        assert result.purpose == "fine-tune"
        assert b'filename="uploaded_file"' in route.calls.last.request.content

    def test_upload_file_object(self, client, mock_api):
        route = mock_api.post(FILES_URL).mock(return_value=httpx.Response(200, json={}))

        client.files.create(io.BytesIO(b"abc"), purpose="vision", filename="img.png")

        assert b'filename="img.png"' in route.calls.last.request.content

    @pytest.mark.parametrize(
        "purpose, message",
        [("", "purpose is required"), ("training", "Invalid purpose")],
    )
    def test_invalid_purpose(self, client, mock_api, data_file, purpose, message):
        with pytest.raises(GravixLayerBadRequestError, match=message):
            client.files.create(data_file, purpose=purpose)
        assert not mock_api.calls

    def test_missing_file(self, client, tmp_path):
        with pytest.raises(GravixLayerBadRequestError, match="File not found"):
            client.files.create(tmp_path / "missing.txt", purpose="batch")

    def test_empty_file(self, client, tmp_path):
        path = tmp_path / "empty.txt"
        path.write_bytes(b"")
        with pytest.raises(GravixLayerBadRequestError, match="between 1 byte"):
            client.files.create(path, purpose="batch")

    def test_file_required(self, client):
        with pytest.raises(GravixLayerBadRequestError, match="file is required"):
            client.files.create(None, purpose="batch")

    @pytest.mark.parametrize("expires_after", [0, -5, True, "60"])
    def test_invalid_expires_after(self, client, data_file, expires_after):
        with pytest.raises(GravixLayerBadRequestError, match="expires_after"):
            client.files.create(data_file, purpose="batch", expires_after=expires_after)


class TestFileManagement:
    """Tests for listing, retrieving, downloading and deleting files."""

    def test_list(self, client, mock_api):
        mock_api.get(FILES_URL).mock(
            return_value=httpx.Response(
                200,
                json={"data": [{"id": "file-1", "filename": "a.txt", "bytes": 3}, {}]},
            )
        )

        result = client.files.list()

        assert [f.id for f in result.data] == ["file-1", ""]
        assert result.data[1].object == "file"

    def test_retrieve(self, client, mock_api):
        mock_api.get(f"{FILES_URL}/file-1").mock(
            return_value=httpx.Response(
                200, json={"id": "file-1", "purpose": "batch", "created_at": 5}
            )
        )

        result = client.files.retrieve("file-1")

        assert result.purpose == "batch"
        assert result.created_at == 5

    def test_retrieve_requires_id(self, client):
        with pytest.raises(GravixLayerBadRequestError, match="file ID required"):
            client.files.retrieve("")

    def test_content(self, client, mock_api):
        mock_api.get(f"{FILES_URL}/file-1/content").mock(
            return_value=httpx.Response(200, content=b"\x00\x01binary")
        )

        assert client.files.content("file-1") == b"\x00\x01binary"

    def test_content_not_found(self, client, mock_api):
        mock_api.get(f"{FILES_URL}/gone/content").mock(
            return_value=httpx.Response(404, text="missing")
        )

        with pytest.raises(GravixLayerBadRequestError) as exc_info:
            client.files.content("gone")

        assert str(exc_info.value) == "file not found"
        assert exc_info.value.status_code == 404

    def test_content_storage_error(self, client, mock_api):
        mock_api.get(f"{FILES_URL}/broken/content").mock(
            return_value=httpx.Response(500, text="s3 unavailable")
        )

        with pytest.raises(GravixLayerBadRequestError, match="storage error"):
            client.files.content("broken")

    def test_content_gateway_error_is_not_remapped(self, client, mock_api, no_sleep):
        mock_api.get(f"{FILES_URL}/slow/content").mock(
            return_value=httpx.Response(503, text="unavailable")
        )

        with pytest.raises(GravixLayerServerError):
            client.files.content("slow")

    def test_delete(self, client, mock_api):
        route = mock_api.delete(f"{FILES_URL}/file-1").mock(
            return_value=httpx.Response(
                200,
                json={
                    "message": "deleted",
                    "file_id": "file-1",
                    "file_name": "a.txt",
                },
            )
        )

        result = client.files.delete("file-1")

        assert route.called
        assert result.file_id == "file-1"
        assert result.file_name == "a.txt"

    def test_delete_requires_id(self, client):
        with pytest.raises(GravixLayerBadRequestError, match="File ID is required"):
            client.files.delete("")
