# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Validation helpers shared by the routers.

Every ``validate_*`` function returns an error string, or None when the
value is acceptable – the same contract as the password check the auth
router has always used.  ``resolve_comment_body`` returns a tagged result
instead, because the caller needs the normalised value back.
"""

import re
import secrets
import string
from dataclasses import dataclass
from typing import Optional, Union
from urllib.parse import urlparse

from core.config import settings
from core.images import ImageError, normalize_base64_image

# Characters a password may consist of
_PASSWORD_SYMBOLS = "#?!@$%&-"


def password_pattern(min_length: int) -> re.Pattern:
    return re.compile(
        rf"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)[a-zA-Z\d{re.escape(_PASSWORD_SYMBOLS)}]{{{min_length},}}$"
    )


def validate_password(pw: str) -> str | None:
    """
    Policy: >= ``min_password_length`` chars, at least one uppercase, one
    lowercase and one digit; only letters, digits and ``#?!@$%&-``.
    """
    if len(pw) < settings.min_password_length:
        return f"Password must be at least {settings.min_password_length} characters"
    if not password_pattern(settings.min_password_length).match(pw):
        return (
            "Password must contain an uppercase letter, a lowercase letter and a digit, "
            f"and may only use letters, digits and {_PASSWORD_SYMBOLS}"
        )
    return None


def generate_password(length: int = 16) -> str:
    """Random password that satisfies the policy above."""
    length = max(length, settings.min_password_length, 3)
    charset = string.ascii_letters + string.digits + _PASSWORD_SYMBOLS

    # One character from each mandatory class, then fill from the full set
    chars = [
        secrets.choice(string.ascii_uppercase),
        secrets.choice(string.ascii_lowercase),
        secrets.choice(string.digits),
    ]
    chars += [secrets.choice(charset) for _ in range(length - 3)]
    secrets.SystemRandom().shuffle(chars)
    return "".join(chars)


def validate_length(field: str, value: Optional[str]) -> str | None:
    if value is not None and len(value) > settings.max_user_field_length:
        return f"Field '{field}' must be at most {settings.max_user_field_length} characters"
    return None


def validate_url(value: Optional[str]) -> str | None:
    if value is None:
        return None
    parsed = urlparse(value)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        return "Home page must be an http(s) URL"
    return None


def is_text_within_limit(text: str) -> bool:
    return len(text.encode("utf-8")) <= settings.max_comment_text_bytes


# ---------------------------------------------------------------------------
# Comment body: text XOR image
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TextBody:
    text: str


@dataclass(frozen=True)
class ImageBody:
    image: str  # normalised PNG data URI


@dataclass(frozen=True)
class InvalidBody:
    message: str
    # 400 for shape errors, 422 for undecodable images
    code: int = 400


CommentBody = Union[TextBody, ImageBody, InvalidBody]


def resolve_comment_body(text: Optional[str], image: Optional[str]) -> CommentBody:
    """
    Decide what a comment carries.  Exactly one of *text* / *image* must be
    non-empty; text must fit ``max_comment_text_bytes``; image must decode to
    an allowed format (it is normalised and downscaled here).
    """
    has_text = bool(text)
    has_image = bool(image)

    if has_text and has_image:
        return InvalidBody("Only text or image is allowed, not both")
    if not has_text and not has_image:
        return InvalidBody("Either text or image is required")

    if has_text:
        if not is_text_within_limit(text):
            return InvalidBody("Text is too large")
        return TextBody(text)

    try:
        return ImageBody(normalize_base64_image(image))
    except ImageError as exc:
        return InvalidBody(str(exc), code=422)
