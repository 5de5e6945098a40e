"""
Random string generator.

Fills the fields named by the autogenerate annotation with random values in
the requested encoding, optionally wrapped in a template. Fields that already
hold a value are kept unless regeneration was requested for them or the
secret predates the secure marker and insecure regeneration is enabled.
"""

from ..constants import (
    ANNOTATION_SECRET_AUTOGENERATE,
    REGENERATE_ALL_VALUE,
    TEMPLATE_PLACEHOLDER,
)
from ..errors import DuplicateFieldError, EntropyError
from ..models import SecretResource, SecretType
from ..utils.annotations import (
    get_encoding_from_annotation,
    get_template_from_annotation,
    split_field_list,
)
from ..utils.random_string import generate_random_string
from .base import Generator


def ensure_uniqueness(fields: list[str]) -> None:
    """
    Ensure no field is listed twice.

    Raises:
        DuplicateFieldError: On the first repeated field
    """
    seen: set[str] = set()
    for field_name in fields:
        if field_name in seen:
            raise DuplicateFieldError(field_name)
        seen.add(field_name)


def apply_template(template: str, value: bytes) -> bytes:
    """Substitute ``value`` for every placeholder occurrence in ``template``."""
    return template.encode("utf-8").replace(TEMPLATE_PLACEHOLDER.encode("utf-8"), value)


class StringGenerator(Generator):
    """Generates random string fields."""

    secret_type = SecretType.STRING

    def generate_data(self, resource: SecretResource) -> None:
        fields = split_field_list(
            resource.annotations.get(ANNOTATION_SECRET_AUTOGENERATE, "")
        )
        ensure_uniqueness(fields)

        length, is_byte_length = self.resolve_length(resource, self.config.secret_length)
        encoding = get_encoding_from_annotation(
            self.config.secret_encoding, resource.annotations
        )
        template = get_template_from_annotation(
            TEMPLATE_PLACEHOLDER, resource.annotations
        )

        regenerate = self._regeneration_set(resource, fields)

        generated_count = 0
        for field_name in fields:
            if resource.data.get(field_name) and field_name not in regenerate:
                # keep existing value unless queued for regeneration
                continue

            try:
                value = generate_random_string(length, encoding, is_byte_length)
            except EntropyError:
                self.logger.error(
                    f"Could not generate new random string for {resource.key}",
                    extra=self._log_extra(resource, field=field_name),
                    exc_info=True,
                )
                raise

            resource.data[field_name] = apply_template(template, value)
            generated_count += 1

            self.logger.info(
                f"Set field {field_name} of secret {resource.key} to new random value",
                extra=self._log_extra(
                    resource,
                    field=field_name,
                    encoding=encoding,
                    value_size=len(resource.data[field_name]),
                ),
            )

        self.logger.info(
            f"Generated {generated_count} field(s) for secret {resource.key}",
            extra=self._log_extra(resource, generated_count=generated_count),
        )

        if fields and generated_count == len(fields):
            # every field now holds a value produced by this operator
            self.mark_secure(resource)

    def _regeneration_set(
        self, resource: SecretResource, fields: list[str]
    ) -> set[str]:
        if self.is_insecure(resource):
            self.logger.info(
                f"Secret {resource.key} was generated by a cryptographically insecure PRNG",
                extra=self._log_extra(resource),
            )
            return set(fields)

        request = self.pop_regenerate_request(resource)
        if request is None:
            return set()
        if request == REGENERATE_ALL_VALUE:
            return set(fields)
        return set(split_field_list(request))
