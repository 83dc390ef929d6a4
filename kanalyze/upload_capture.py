"""
Upload Capture

Turns an uploaded image into the two artifacts the rest of the app needs:
a data URL for preview and history, and the bare base64 payload that is
sent to Gemini.
"""

import base64
import io
import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

GENERIC_MEDIA_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class CapturedUpload:
    """
    A single uploaded file, fully read into memory.

    Attributes:
        name: Original filename as sent by the browser
        media_type: Declared (or sniffed) MIME type
        data: Raw file bytes
        data_url: "data:<media_type>;base64,<payload>" for previews
        base64_payload: The data URL with its header stripped
    """
    name: str
    media_type: str
    data: bytes
    data_url: str
    base64_payload: str

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def size_mb(self) -> float:
        return self.size / (1024 * 1024)


def sniff_media_type(data: bytes) -> Optional[str]:
    """Guess an image MIME type from its bytes, or None if Pillow can't tell."""
    try:
        img = Image.open(io.BytesIO(data))
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError):
        return None
    return f"image/{img.format.lower()}" if img.format else None


def capture_bytes(name: str, data: bytes, content_type: Optional[str] = None) -> CapturedUpload:
    """
    Build a CapturedUpload from raw bytes.

    The declared content type wins; Pillow is only consulted when the browser
    sent nothing useful. No type or size validation happens here.
    """
    media_type = content_type or GENERIC_MEDIA_TYPE
    if media_type == GENERIC_MEDIA_TYPE:
        media_type = sniff_media_type(data) or GENERIC_MEDIA_TYPE
        logger.debug(f"No declared type for '{name}', using {media_type}")

    data_url = f"data:{media_type};base64,{base64.b64encode(data).decode('utf-8')}"
    base64_payload = data_url.split(",", 1)[1]

    return CapturedUpload(
        name=name,
        media_type=media_type,
        data=data,
        data_url=data_url,
        base64_payload=base64_payload,
    )


async def capture_upload(files: Sequence) -> CapturedUpload:
    """
    Read the first of the uploaded files.

    Multi-file drops are not an error: everything after the first file is
    ignored.

    Args:
        files: Starlette/FastAPI UploadFile objects (anything with
            filename, content_type and an async read())

    Returns:
        CapturedUpload for the first file

    Raises:
        ValueError: If no file was provided
    """
    if not files:
        raise ValueError("No file provided")

    if len(files) > 1:
        logger.info(f"Received {len(files)} files, keeping only the first")

    upload = files[0]
    data = await upload.read()
    return capture_bytes(upload.filename or "upload", data, upload.content_type)
