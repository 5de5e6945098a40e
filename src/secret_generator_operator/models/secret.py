"""
Models describing Secrets under generation and the generation policy.

This module defines:
- SecretType: the variant declared by the type annotation
- GeneratorConfig: process-wide generation policy handed to generators
- SecretResource: decoded, mutable view of a Kubernetes Secret
- ReconcileOutcome: terminal result of one reconciliation pass
"""

import base64
import copy
from dataclasses import dataclass, field
from enum import StrEnum

from kubernetes import client
from pydantic import BaseModel, Field

from ..constants import (
    DEFAULT_SECRET_ENCODING,
    DEFAULT_SECRET_LENGTH,
    DEFAULT_SSH_KEY_LENGTH,
    SECRET_TYPE_BASIC_AUTH,
    SECRET_TYPE_SSH_KEYPAIR,
    SECRET_TYPE_STRING,
)


class SecretType(StrEnum):
    """Secret variant declared through the type annotation."""

    STRING = SECRET_TYPE_STRING
    SSH_KEYPAIR = SECRET_TYPE_SSH_KEYPAIR
    BASIC_AUTH = SECRET_TYPE_BASIC_AUTH

    @classmethod
    def parse(cls, value: str | None) -> "SecretType | None":
        """
        Parse an annotation value into a secret type.

        Args:
            value: Raw annotation value, possibly missing

        Returns:
            The matching SecretType, or None when unset or unknown
        """
        if not value:
            return None
        try:
            return cls(value)
        except ValueError:
            return None


class ReconcileOutcome(StrEnum):
    """How a reconciliation pass ended."""

    NOT_FOUND = "not_found"
    UNMANAGED = "unmanaged"
    UNCHANGED = "unchanged"
    UPDATED = "updated"
    DRY_RUN = "dry_run"


class GeneratorConfig(BaseModel):
    """Process-wide generation policy."""

    model_config = {"frozen": True}

    regenerate_insecure: bool = Field(
        False,
        description="Regenerate every field of secrets lacking the secure marker",
    )
    secret_length: int = Field(
        DEFAULT_SECRET_LENGTH, ge=0, description="Default generated value length"
    )
    secret_encoding: str = Field(
        DEFAULT_SECRET_ENCODING, description="Default encoding of generated values"
    )
    ssh_key_length: int = Field(
        DEFAULT_SSH_KEY_LENGTH, ge=1024, description="Default RSA key size in bits"
    )


@dataclass
class SecretResource:
    """
    Decoded view of a Kubernetes Secret.

    ``data`` holds raw bytes rather than the base64 transport form used by
    the API, so generators and diffs work on actual secret content. ``body``
    keeps the API object for a full write-back.
    """

    name: str
    namespace: str
    annotations: dict[str, str] = field(default_factory=dict)
    data: dict[str, bytes] = field(default_factory=dict)
    body: client.V1Secret | None = None

    @classmethod
    def from_v1_secret(cls, secret: client.V1Secret) -> "SecretResource":
        """Build a resource from an API object, decoding its data."""
        metadata = secret.metadata or client.V1ObjectMeta()
        return cls(
            name=metadata.name or "",
            namespace=metadata.namespace or "",
            annotations=dict(metadata.annotations or {}),
            data={
                key: base64.b64decode(value) for key, value in (secret.data or {}).items()
            },
            body=secret,
        )

    def to_v1_secret(self) -> client.V1Secret:
        """Render the resource back into an API object for a full replace."""
        secret = copy.deepcopy(self.body) if self.body else client.V1Secret()
        if secret.metadata is None:
            secret.metadata = client.V1ObjectMeta(
                name=self.name, namespace=self.namespace
            )
        secret.metadata.annotations = dict(self.annotations)
        secret.data = {
            key: base64.b64encode(value).decode("ascii")
            for key, value in self.data.items()
        }
        return secret

    def deep_copy(self) -> "SecretResource":
        """Return an independent copy safe to mutate."""
        return SecretResource(
            name=self.name,
            namespace=self.namespace,
            annotations=dict(self.annotations),
            data=dict(self.data),
            body=self.body,
        )

    @property
    def key(self) -> str:
        """Namespaced identity used in log messages."""
        return f"{self.namespace}/{self.name}"
