from __future__ import annotations

import base64
import binascii
import io
import logging
import mimetypes
import re
from pathlib import Path
from typing import Optional, Tuple

from PIL import Image, UnidentifiedImageError

from .errors import TransportFailure
from .schema import ImagePart, ImageSource

logger = logging.getLogger(__name__)

_MIME_RE = re.compile(r":(.*?);")

# multi-picture JPEG from phone cameras; the first frame is a plain JPEG
_MIME_OVERRIDES = {"MPO": "image/jpeg"}


def file_to_part(source: ImageSource) -> ImagePart:
    """Turn a local image into an inline part for the model request.

    ``source`` may be a filesystem path, raw bytes, a binary file object or an
    already-encoded ``data:`` URL.
    """
    if isinstance(source, str) and source.startswith("data:"):
        return part_from_data_url(source)
    data, name = read_source(source)
    mime = _sniff_mime(data, name)
    data_url = f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"
    return part_from_data_url(data_url)


def part_from_data_url(data_url: str) -> ImagePart:
    arr = data_url.split(",", 1)
    if len(arr) < 2:
        raise TransportFailure("Invalid data URL")
    mime_match = _MIME_RE.search(arr[0])
    if not mime_match or not mime_match.group(1):
        raise TransportFailure("Could not parse MIME type from data URL")
    decode_payload(arr[1])
    return ImagePart(mime_type=mime_match.group(1), data=arr[1])


def data_url_to_bytes(data_url: str) -> Tuple[bytes, str]:
    part = part_from_data_url(data_url)
    return decode_payload(part.data), part.mime_type


def decode_payload(data: str) -> bytes:
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise TransportFailure(f"Malformed base64 image payload: {e}") from e


def extension_for(mime_type: str) -> str:
    if mime_type == "image/jpeg":
        return ".jpg"
    return mimetypes.guess_extension(mime_type) or ".png"


def read_source(source: ImageSource) -> Tuple[bytes, Optional[str]]:
    if isinstance(source, str) and source.startswith("data:"):
        return data_url_to_bytes(source)[0], None
    try:
        if isinstance(source, (bytes, bytearray)):
            return bytes(source), None
        if isinstance(source, (str, Path)):
            p = Path(source)
            return p.read_bytes(), p.name
        if hasattr(source, "read"):
            data = source.read()
            if not isinstance(data, (bytes, bytearray)):
                raise TransportFailure("Image source must be opened in binary mode")
            return bytes(data), getattr(source, "name", None)
    except OSError as e:
        logger.error(f"Failed to read image source {source!r}: {e}")
        raise TransportFailure(f"Could not read image: {e}") from e
    raise TransportFailure(f"Unsupported image source type: {type(source).__name__}")


def _sniff_mime(data: bytes, name: Optional[str]) -> str:
    try:
        with Image.open(io.BytesIO(data)) as img:
            fmt = img.format or ""
            mime = _MIME_OVERRIDES.get(fmt) or Image.MIME.get(fmt)
        if mime:
            return mime
    except UnidentifiedImageError:
        logger.debug("Pillow could not identify image; guessing MIME type from name")
    if name:
        guessed, _ = mimetypes.guess_type(str(name))
        if guessed:
            return guessed
    return "application/octet-stream"
