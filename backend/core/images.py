# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Image helpers (Pillow).

Images arrive either as base64 text (optionally with a
``data:image/<ext>;base64,`` prefix) or as raw upload bytes.  Both paths go
through ``load_image`` which decodes, checks the format against the allowed
extensions, and downscales anything larger than the configured bound while
keeping the aspect ratio.
"""

import base64
import binascii
import io
import re

from PIL import Image, UnidentifiedImageError

from core.config import settings

_DATA_URI = re.compile(r"^data:image/(?P<ext>[A-Za-z0-9.+-]+);base64,", re.IGNORECASE)

# Pillow format name → the extensions it satisfies
_FORMAT_EXTENSIONS = {
    "JPEG": {"jpg", "jpeg"},
    "PNG": {"png"},
    "GIF": {"gif"},
}


class ImageError(ValueError):
    """The payload is not an acceptable image."""


def strip_data_uri(data: str) -> str:
    return _DATA_URI.sub("", data.strip(), count=1)


def decode_base64(data: str) -> bytes:
    try:
        return base64.b64decode(strip_data_uri(data), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ImageError("Image is not valid base64 data") from exc


def _allowed(fmt: str | None) -> bool:
    allowed = {ext.lower() for ext in settings.allowed_image_extensions}
    return bool(_FORMAT_EXTENSIONS.get(fmt or "", set()) & allowed)


def load_image(raw: bytes) -> tuple[Image.Image, bool]:
    """
    Decode *raw* and enforce the allowed formats.

    Returns ``(image, resized)`` – *resized* is True when the image exceeded
    ``image_max_width`` x ``image_max_height`` and was scaled down to fit.
    """
    try:
        # open() only reads the header; pixels are decoded by load()
        img = Image.open(io.BytesIO(raw))
    except Image.DecompressionBombError as exc:
        raise ImageError("Image dimensions are too large") from exc
    except (UnidentifiedImageError, OSError) as exc:
        raise ImageError("Image data could not be decoded") from exc

    if not _allowed(img.format):
        raise ImageError("Only JPG, PNG or GIF images are allowed")

    if img.width * img.height > settings.max_image_pixels:
        raise ImageError("Image dimensions are too large")

    try:
        img.load()
    except (Image.DecompressionBombError, OSError) as exc:
        raise ImageError("Image data could not be decoded") from exc

    bound = (settings.image_max_width, settings.image_max_height)
    if img.width <= bound[0] and img.height <= bound[1]:
        return img, False

    # thumbnail() resizes in place and keeps the aspect ratio
    img.thumbnail(bound, Image.Resampling.BICUBIC)
    return img, True


def _png_bytes(img: Image.Image) -> bytes:
    if img.mode not in ("RGB", "RGBA", "L", "LA", "P"):
        img = img.convert("RGB")
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def normalize_base64_image(data: str) -> str:
    """
    Validate a base64 image and return it as a PNG data URI, downscaled to
    the configured bound if needed.  Raises ``ImageError``.
    """
    if not isinstance(data, str) or not data.strip():
        raise ImageError("Image is not Base64 data")
    img, _ = load_image(decode_base64(data))
    return "data:image/png;base64," + base64.b64encode(_png_bytes(img)).decode("ascii")


def process_upload(raw: bytes) -> tuple[bytes, str]:
    """
    Process an uploaded file.  Returns ``(bytes, media_type)``: the original
    bytes when within bounds, otherwise the downscaled image as PNG.
    """
    img, resized = load_image(raw)
    if not resized:
        return raw, Image.MIME.get(img.format or "", "application/octet-stream")
    return _png_bytes(img), "image/png"
