import base64
import binascii
import mimetypes
import os
import re
from typing import Protocol

from forexvolcano.exceptions.base import InputValidationError

__all__ = [
    "BlobHost",
    "LocalBlobHost",
    "InvalidImageError",
    "decode_image",
]

DATA_URL_RE = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(;[^,]*)?;base64,(?P<data>.*)$", re.S)
DEFAULT_IMAGE_MIME = "image/jpeg"


class InvalidImageError(InputValidationError):
    def __init__(self):
        super().__init__("Image must be a base64 string or a base64 data URL.")


class BlobHost(Protocol):
    def upload(self, path: str, payload: bytes) -> str:
        """Store ``payload`` at ``path`` and return a public URL for it."""
        ...


def decode_image(image: str) -> tuple[bytes, str]:
    """
    Decode an image sent as a data URL or as a bare base64 string.

    Returns:
        tuple[bytes, str]: The raw bytes and the file extension, with its dot.
    Raises:
        InvalidImageError: If the payload is not valid base64, or the data URL
            declares a media type other than an image.
    """
    mime = DEFAULT_IMAGE_MIME
    data = image.strip()
    match = DATA_URL_RE.match(data)
    if match:
        mime = (match.group("mime") or DEFAULT_IMAGE_MIME).lower()
        data = match.group("data")
    if not mime.startswith("image/"):
        raise InvalidImageError()
    try:
        payload = base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidImageError() from e
    if not payload:
        raise InvalidImageError()
    extension = mimetypes.guess_extension(mime) or ".bin"
    return payload, extension


class LocalBlobHost:
    """Writes blobs below a directory that is served under ``base_url``."""

    def __init__(self, root: str, base_url: str) -> None:
        self.root = os.path.abspath(root)
        self.base_url = base_url.rstrip("/")

    def upload(self, path: str, payload: bytes) -> str:
        target = os.path.abspath(os.path.join(self.root, path))
        if os.path.commonpath([self.root, target]) != self.root:
            raise ValueError(f"Blob path escapes the media root: {path}")
        os.makedirs(os.path.dirname(target), exist_ok=True)
        with open(target, "wb") as f:
            f.write(payload)
        return f"{self.base_url}/{path.lstrip('/')}"
