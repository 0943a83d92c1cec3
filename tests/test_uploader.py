"""Cloudinary uploader and multipart helpers, with ``requests`` mocked out."""

import io
from unittest.mock import MagicMock, patch

import pytest
import requests
from fastapi import UploadFile
from starlette.datastructures import Headers

from selfanypay.errors import UploadError, ValidationError
from selfanypay.utils.uploader import (
    MAX_FILES,
    MAX_IMAGES,
    CloudinaryUploader,
    PendingFile,
    collect_pending_files,
    upload_gallery,
)


def ok_response(url):
    response = MagicMock()
    response.ok = True
    response.json.return_value = {"secure_url": url}
    return response


def upload_file(name, content_type="image/png", content=b"data"):
    return UploadFile(file=io.BytesIO(content), filename=name, headers=Headers({"content-type": content_type}))


class TestCloudinaryUploader:
    def test_upload_posts_unsigned_preset(self):
        uploader = CloudinaryUploader("demo", "unsigned", timeout=5)
        pending = PendingFile("a.png", "image/png", b"png")

        with patch("selfanypay.utils.uploader.requests.post", return_value=ok_response("https://cdn/a.png")) as post:
            url = uploader.upload(pending)

        assert url == "https://cdn/a.png"
        args, kwargs = post.call_args
        assert args[0] == "https://api.cloudinary.com/v1_1/demo/auto/upload"
        assert kwargs["data"] == {"upload_preset": "unsigned"}
        assert kwargs["files"]["file"] == ("a.png", b"png", "image/png")
        assert kwargs["timeout"] == 5

    def test_missing_configuration(self):
        with pytest.raises(UploadError, match="Missing Cloudinary"):
            CloudinaryUploader(None, "unsigned").upload(PendingFile("a", "image/png", b""))

    def test_urls_keep_input_order(self):
        uploader = CloudinaryUploader("demo", "unsigned")
        responses = [ok_response("https://cdn/1"), ok_response("https://cdn/2")]

        with patch("selfanypay.utils.uploader.requests.post", side_effect=responses):
            urls = uploader.upload_many([PendingFile("1", "image/png", b""), PendingFile("2", "image/png", b"")])

        assert urls == ["https://cdn/1", "https://cdn/2"]

    def test_one_failure_fails_the_batch(self):
        uploader = CloudinaryUploader("demo", "unsigned")
        failed = MagicMock(ok=False, text="Upload preset not found")

        with patch("selfanypay.utils.uploader.requests.post", side_effect=[ok_response("https://cdn/1"), failed]):
            with pytest.raises(UploadError, match="Upload preset not found"):
                uploader.upload_many([PendingFile("1", "image/png", b""), PendingFile("2", "image/png", b"")])

    def test_network_error(self):
        uploader = CloudinaryUploader("demo", "unsigned")
        with patch("selfanypay.utils.uploader.requests.post", side_effect=requests.Timeout("slow")):
            with pytest.raises(UploadError):
                uploader.upload(PendingFile("a", "image/png", b""))

    def test_response_without_url(self):
        uploader = CloudinaryUploader("demo", "unsigned")
        response = MagicMock(ok=True)
        response.json.return_value = {"error": "nope"}
        with patch("selfanypay.utils.uploader.requests.post", return_value=response):
            with pytest.raises(UploadError, match="no secure_url"):
                uploader.upload(PendingFile("a", "image/png", b""))


class TestMultipartHelpers:
    def test_collect_reads_images_then_files(self):
        pending = collect_pending_files(
            [upload_file("a.png")],
            [upload_file("b.pdf", "application/pdf", b"%PDF")],
        )
        assert [(p.filename, p.content_type) for p in pending] == [
            ("a.png", "image/png"),
            ("b.pdf", "application/pdf"),
        ]
        assert pending[1].content == b"%PDF"

    def test_limits(self):
        with pytest.raises(ValidationError):
            collect_pending_files([upload_file(f"{i}.png") for i in range(MAX_IMAGES + 1)], None)
        with pytest.raises(ValidationError):
            collect_pending_files(None, [upload_file(f"{i}.bin") for i in range(MAX_FILES + 1)])

    def test_upload_gallery_pairs_urls_with_types(self):
        uploader = MagicMock(spec=CloudinaryUploader)
        uploader.upload_many.return_value = ["https://cdn/1", "https://cdn/2"]
        pending = [PendingFile("1", "image/png", b""), PendingFile("2", "video/mp4", b"")]

        assert upload_gallery(uploader, pending) == [
            {"url": "https://cdn/1", "file_type": "image/png"},
            {"url": "https://cdn/2", "file_type": "video/mp4"},
        ]

    def test_nothing_to_upload(self):
        uploader = MagicMock(spec=CloudinaryUploader)
        assert upload_gallery(uploader, []) == []
        uploader.upload_many.assert_not_called()
