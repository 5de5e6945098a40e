"""Typed lookups of generation directives from Secret annotations."""

import re
from collections.abc import Mapping

from ..constants import (
    ANNOTATION_BASIC_AUTH_USERNAME,
    ANNOTATION_SECRET_AUTOGENERATE,
    ANNOTATION_SECRET_ENCODING,
    ANNOTATION_SECRET_LENGTH,
    ANNOTATION_SECRET_TEMPLATE,
    BYTE_LENGTH_SUFFIX,
)
from ..errors import ValidationError

LENGTH_PATTERN = re.compile(rf"([0-9]+)({re.escape(BYTE_LENGTH_SUFFIX)}?)")


def get_length_from_annotation(fallback: int, annotations: Mapping[str, str]) -> str:
    """Return the raw length annotation, or the fallback rendered as text."""
    if ANNOTATION_SECRET_LENGTH in annotations:
        return annotations[ANNOTATION_SECRET_LENGTH]
    return str(fallback)


def get_encoding_from_annotation(fallback: str, annotations: Mapping[str, str]) -> str:
    return annotations.get(ANNOTATION_SECRET_ENCODING, fallback)


def get_template_from_annotation(fallback: str, annotations: Mapping[str, str]) -> str:
    return annotations.get(ANNOTATION_SECRET_TEMPLATE, fallback)


def get_username_from_annotation(fallback: str, annotations: Mapping[str, str]) -> str:
    # An empty username is as good as none
    return annotations.get(ANNOTATION_BASIC_AUTH_USERNAME) or fallback


def parse_byte_length(length: str) -> tuple[int, bool]:
    """
    Parse a length annotation value.

    The value is a plain decimal integer; a trailing ``b`` marks it as a raw
    byte count.

    Args:
        length: Annotation value such as ``"32"`` or ``"32b"``

    Returns:
        Tuple of (parsed length, whether it is a byte length)

    Raises:
        ValidationError: If the value is not a non-negative integer
    """
    match = LENGTH_PATTERN.fullmatch(length)
    if match is None:
        raise ValidationError(f"'{length}' is not a valid length", field="length")

    return int(match.group(1)), bool(match.group(2))


def split_field_list(value: str) -> list[str]:
    """Split a comma-separated field annotation, dropping blank entries."""
    return [item.strip() for item in value.split(",") if item.strip()]


def has_autogenerate_annotation(annotations: Mapping[str, str]) -> bool:
    return ANNOTATION_SECRET_AUTOGENERATE in annotations
