import asyncio
import base64

import pytest
from PIL import Image

from kanalyze.upload_capture import capture_bytes, capture_upload, sniff_media_type


class FakeUploadFile:
    def __init__(self, filename, data, content_type):
        self.filename = filename
        self.content_type = content_type
        self._data = data
        self.read_count = 0

    async def read(self):
        self.read_count += 1
        return self._data


def test_data_url_and_payload(png_bytes):
    upload = capture_bytes("cat.png", png_bytes, "image/png")

    assert upload.media_type == "image/png"
    assert upload.data_url.startswith("data:image/png;base64,")
    assert upload.data_url == f"data:image/png;base64,{upload.base64_payload}"
    assert base64.b64decode(upload.base64_payload) == png_bytes
    assert upload.size == len(png_bytes)


def test_declared_type_is_trusted(png_bytes):
    # No validation: a PNG declared as JPEG stays JPEG
    assert capture_bytes("cat.jpg", png_bytes, "image/jpeg").media_type == "image/jpeg"


@pytest.mark.parametrize("content_type", [None, "", "application/octet-stream"])
def test_missing_type_is_sniffed(png_bytes, content_type):
    assert capture_bytes("cat", png_bytes, content_type).media_type == "image/png"


def test_unrecognized_bytes_keep_generic_type():
    upload = capture_bytes("notes.txt", b"hello", None)
    assert upload.media_type == "application/octet-stream"
    assert sniff_media_type(b"hello") is None


def test_non_image_content_is_not_rejected():
    upload = capture_bytes("notes.txt", b"hello", "text/plain")
    assert upload.data_url == "data:text/plain;base64,aGVsbG8="


def test_size_mb():
    upload = capture_bytes("big.bin", b"\0" * (3 * 1024 * 1024), "image/png")
    assert upload.size_mb == pytest.approx(3.0)


def test_only_first_file_is_read(png_bytes):
    first = FakeUploadFile("first.png", png_bytes, "image/png")
    second = FakeUploadFile("second.png", b"other", "image/png")

    upload = asyncio.run(capture_upload([first, second]))

    assert upload.name == "first.png"
    assert first.read_count == 1
    assert second.read_count == 0


def test_no_files_is_an_error():
    with pytest.raises(ValueError):
        asyncio.run(capture_upload([]))


def test_missing_filename_gets_placeholder(png_bytes):
    upload = asyncio.run(capture_upload([FakeUploadFile(None, png_bytes, "image/png")]))
    assert upload.name == "upload"


def test_oversized_image_is_not_sniffed(png_bytes, monkeypatch):
    # Pillow refuses images above twice MAX_IMAGE_PIXELS
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 10)

    assert sniff_media_type(png_bytes) is None
    assert capture_bytes("huge", png_bytes, None).media_type == "application/octet-stream"
