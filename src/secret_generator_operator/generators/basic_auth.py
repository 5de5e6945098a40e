"""
Basic-auth credential generator.

Stores a username, a random password and an htpasswd-style ``auth`` line
(``username:bcrypt-hash``) usable by ingress controllers.
"""

import bcrypt

from ..constants import (
    BCRYPT_MAX_PASSWORD_BYTES,
    BCRYPT_ROUNDS,
    DEFAULT_BASIC_AUTH_USERNAME,
    FIELD_BASIC_AUTH_INGRESS,
    FIELD_BASIC_AUTH_PASSWORD,
    FIELD_BASIC_AUTH_USERNAME,
)
from ..errors import ValidationError
from ..models import SecretResource, SecretType
from ..utils.annotations import (
    get_encoding_from_annotation,
    get_username_from_annotation,
)
from ..utils.random_string import generate_random_string
from .base import Generator


def hash_password(password: bytes) -> bytes:
    """
    Hash a password with bcrypt.

    Raises:
        ValidationError: If bcrypt rejects the password (too long, NUL bytes)
    """
    if len(password) > BCRYPT_MAX_PASSWORD_BYTES:
        raise ValidationError(
            f"generated password of {len(password)} bytes exceeds the bcrypt limit "
            f"of {BCRYPT_MAX_PASSWORD_BYTES}",
            field=FIELD_BASIC_AUTH_PASSWORD,
            user_action="Use a shorter length",
        )
    try:
        return bcrypt.hashpw(password, bcrypt.gensalt(rounds=BCRYPT_ROUNDS))
    except ValueError as e:
        raise ValidationError(
            f"generated password cannot be hashed: {e}",
            field=FIELD_BASIC_AUTH_PASSWORD,
            user_action="Use a shorter length or a text encoding",
        ) from e


class BasicAuthGenerator(Generator):
    """Generates basic-auth credentials into fixed fields."""

    secret_type = SecretType.BASIC_AUTH

    def generate_data(self, resource: SecretResource) -> None:
        regenerate = self.should_regenerate(resource)

        if resource.data.get(FIELD_BASIC_AUTH_INGRESS) and not regenerate:
            return

        length, is_byte_length = self.resolve_length(resource, self.config.secret_length)
        encoding = get_encoding_from_annotation(
            self.config.secret_encoding, resource.annotations
        )
        username = get_username_from_annotation(
            DEFAULT_BASIC_AUTH_USERNAME, resource.annotations
        ).encode("utf-8")

        password = generate_random_string(length, encoding, is_byte_length)
        password_hash = hash_password(password)

        resource.data[FIELD_BASIC_AUTH_INGRESS] = username + b":" + password_hash
        resource.data[FIELD_BASIC_AUTH_USERNAME] = username
        resource.data[FIELD_BASIC_AUTH_PASSWORD] = password
        self.mark_secure(resource)

        self.logger.info(
            f"Generated basic-auth credentials for secret {resource.key}",
            extra=self._log_extra(resource, encoding=encoding, generated_count=3),
        )
