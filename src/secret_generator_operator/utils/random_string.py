"""
Cryptographically secure random value generation.

Values are drawn from the operating system CSPRNG and rendered in one of the
supported text encodings. A requested length is either the number of
characters of the final text or, when flagged as a byte length, the number
of random bytes to encode.
"""

import base64
import logging
import secrets

from ..constants import (
    ENCODING_BASE32,
    ENCODING_BASE64_URL,
    ENCODING_HEX,
    ENCODING_RAW,
)
from ..errors import EntropyError, ValidationError

logger = logging.getLogger(__name__)


def _encode(raw: bytes, encoding: str) -> str:
    if encoding == ENCODING_BASE64_URL:
        return base64.urlsafe_b64encode(raw).decode("ascii")
    if encoding == ENCODING_BASE32:
        return base64.b32encode(raw).decode("ascii")
    if encoding == ENCODING_HEX:
        return raw.hex()
    return base64.b64encode(raw).decode("ascii")


def generate_random_string(
    length: int, encoding: str, is_byte_length: bool = False
) -> bytes:
    """
    Generate a random value of the given length and encoding.

    Every encoding expands its input, so ``length`` random bytes always
    encode to at least ``length`` characters; the text is truncated to
    exactly that many unless ``is_byte_length`` is set.

    Args:
        length: Character count of the result, or byte count if is_byte_length
        encoding: One of base64, base64url, base32, hex, raw (default base64)
        is_byte_length: Return the full encoding of ``length`` random bytes

    Returns:
        The encoded value as bytes; for ``raw`` the random bytes themselves

    Raises:
        ValidationError: If length is negative
        EntropyError: If the random source is unavailable
    """
    if length < 0:
        raise ValidationError(f"length must not be negative, got {length}", field="length")

    try:
        raw = secrets.token_bytes(length)
    except (OSError, NotImplementedError) as e:
        logger.error(f"Failed to read {length} bytes from the random source: {e}")
        raise EntropyError(f"could not read random bytes: {e}", cause=e) from e

    if encoding == ENCODING_RAW:
        return raw

    encoded = _encode(raw, encoding)
    if is_byte_length:
        return encoded.encode("ascii")

    return encoded[:length].encode("ascii")
