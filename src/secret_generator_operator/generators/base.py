"""
Base generator class providing the shared regeneration policy.

Every secret variant implements ``generate_data``; this module holds the
rules common to all of them: reading length directives, detecting values
produced before the operator marked secrets secure, and consuming explicit
regeneration requests.
"""

import logging
from abc import ABC, abstractmethod

from ..constants import (
    ANNOTATION_SECRET_REGENERATE,
    ANNOTATION_SECRET_SECURE,
    SECURE_MARKER_VALUE,
)
from ..models import GeneratorConfig, SecretResource, SecretType
from ..utils.annotations import get_length_from_annotation, parse_byte_length


class Generator(ABC):
    """
    Base class for all secret generators.

    A generator mutates the SecretResource it is handed in place. Callers
    pass a copy and diff it against the observed Secret afterwards.
    """

    secret_type: SecretType

    def __init__(self, config: GeneratorConfig, logger: logging.Logger | None = None):
        """
        Initialize generator.

        Args:
            config: Process-wide generation policy
            logger: Logger to report through, defaults to the module logger
        """
        self.config = config
        self.logger = logger or logging.getLogger(self.__class__.__module__)

    @abstractmethod
    def generate_data(self, resource: SecretResource) -> None:
        """
        Generate missing or requested values into ``resource``.

        Args:
            resource: Secret to mutate

        Raises:
            ValidationError: If the directives on the secret are invalid
            EntropyError: If a value could not be generated
        """

    def _log_extra(self, resource: SecretResource, **kwargs) -> dict:
        return {
            "resource_name": resource.name,
            "namespace": resource.namespace,
            "secret_type": str(self.secret_type),
            **kwargs,
        }

    def is_insecure(self, resource: SecretResource) -> bool:
        """Whether existing values must be treated as weak and replaced."""
        return (
            ANNOTATION_SECRET_SECURE not in resource.annotations
            and self.config.regenerate_insecure
        )

    def pop_regenerate_request(self, resource: SecretResource) -> str | None:
        """Remove and return the regenerate annotation, if present."""
        if ANNOTATION_SECRET_REGENERATE not in resource.annotations:
            return None

        self.logger.info(
            f"Removing regenerate annotation from secret {resource.key}",
            extra=self._log_extra(resource),
        )
        return resource.annotations.pop(ANNOTATION_SECRET_REGENERATE)

    def should_regenerate(self, resource: SecretResource) -> bool:
        """
        Decide whether a single-payload secret is regenerated this pass.

        Used by variants whose fields are produced together, so any
        regenerate request value means "all".
        """
        if self.is_insecure(resource):
            self.logger.info(
                f"Secret {resource.key} was generated by a cryptographically insecure PRNG",
                extra=self._log_extra(resource),
            )
            return True
        return self.pop_regenerate_request(resource) is not None

    def resolve_length(
        self, resource: SecretResource, fallback: int
    ) -> tuple[int, bool]:
        """Read the length annotation, returning (length, is_byte_length)."""
        length = get_length_from_annotation(fallback, resource.annotations)
        return parse_byte_length(length)

    def mark_secure(self, resource: SecretResource) -> None:
        resource.annotations[ANNOTATION_SECRET_SECURE] = SECURE_MARKER_VALUE
