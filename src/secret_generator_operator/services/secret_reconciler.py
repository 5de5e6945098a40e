"""
Secret reconciler implementing one annotation-driven generation pass.

A pass fetches the Secret, resolves its declared type, lets the matching
generator mutate a copy, and writes the copy back only when annotations or
data differ from what was observed. Running a pass again on an unchanged
Secret is a no-op, so redundant invocations are safe.
"""

import asyncio
import time
from collections.abc import Callable
from datetime import UTC, datetime

from ..constants import (
    ANNOTATION_SECRET_AUTOGENERATED_AT,
    ANNOTATION_SECRET_TYPE,
    GENERATED_AT_FORMAT,
)
from ..errors import OperatorError, TemporaryError
from ..generators import get_generator
from ..models import GeneratorConfig, ReconcileOutcome, SecretResource, SecretType
from ..observability.logging import OperatorLogger
from ..observability.metrics import metrics_collector
from ..utils.annotations import has_autogenerate_annotation
from ..utils.kubernetes import SecretClient

RESOURCE_TYPE = "secret"


def resolve_secret_type(resource: SecretResource) -> SecretType | None:
    """
    Resolve the type a secret is generated as.

    Secrets without a valid type but with an autogenerate annotation are
    treated as string secrets and get the type annotation written.

    Returns:
        The resolved type, or None if the secret is not managed
    """
    secret_type = SecretType.parse(resource.annotations.get(ANNOTATION_SECRET_TYPE))
    if secret_type is not None:
        return secret_type

    if not has_autogenerate_annotation(resource.annotations):
        return None

    resource.annotations[ANNOTATION_SECRET_TYPE] = SecretType.STRING.value
    return SecretType.STRING


def count_changed_fields(before: SecretResource, after: SecretResource) -> int:
    return sum(1 for key, value in after.data.items() if before.data.get(key) != value)


class SecretReconciler:
    """
    Reconciles Secrets carrying generation annotations.

    Holds no per-secret state; every pass starts from a fresh read.
    """

    def __init__(
        self,
        config: GeneratorConfig,
        secret_client: SecretClient | None = None,
        dry_run: bool = False,
        clock: Callable[[], datetime] | None = None,
    ):
        """
        Initialize secret reconciler.

        Args:
            config: Generation policy passed to every generator
            secret_client: Client used to fetch and persist secrets
            dry_run: Compute changes but never write them
            clock: Source of the generated-at timestamp, defaults to UTC now
        """
        self.config = config
        self.secret_client = secret_client or SecretClient()
        self.dry_run = dry_run
        self.clock = clock or (lambda: datetime.now(UTC))
        self.logger = OperatorLogger(self.__class__.__name__)

    async def reconcile(self, name: str, namespace: str) -> ReconcileOutcome:
        """
        Run one reconciliation pass for a secret.

        Args:
            name: Secret name
            namespace: Secret namespace

        Returns:
            How the pass ended

        Raises:
            OperatorError: If the pass failed; ``retryable`` and ``delay``
                describe whether and when to retry
        """
        start_time = time.time()
        self.logger.log_reconciliation_start(
            resource_type=RESOURCE_TYPE, resource_name=name, namespace=namespace
        )

        async with metrics_collector.track_reconciliation(namespace=namespace):
            try:
                outcome = await self.do_reconcile(name, namespace)
            except OperatorError as e:
                self.logger.log_reconciliation_error(
                    resource_type=RESOURCE_TYPE,
                    resource_name=name,
                    namespace=namespace,
                    error=e,
                    duration=time.time() - start_time,
                )
                raise
            except Exception as e:
                # Wrap unexpected errors as temporary to allow retry
                error = TemporaryError(
                    f"Unexpected error during reconciliation: {str(e)}"
                )
                self.logger.log_reconciliation_error(
                    resource_type=RESOURCE_TYPE,
                    resource_name=name,
                    namespace=namespace,
                    error=error,
                    duration=time.time() - start_time,
                )
                raise error from e

        self.logger.log_reconciliation_success(
            resource_type=RESOURCE_TYPE,
            resource_name=name,
            namespace=namespace,
            outcome=str(outcome),
            duration=time.time() - start_time,
        )
        return outcome

    async def do_reconcile(self, name: str, namespace: str) -> ReconcileOutcome:
        instance = await self.secret_client.get_secret(name, namespace)
        if instance is None:
            # Deleted after the event was queued
            self.logger.debug(
                f"Secret {namespace}/{name} no longer exists",
                resource_name=name,
                namespace=namespace,
            )
            return ReconcileOutcome.NOT_FOUND

        desired = instance.deep_copy()

        secret_type = resolve_secret_type(desired)
        if secret_type is None:
            self.logger.debug(
                f"Secret {desired.key} declares no valid type, skipping",
                resource_name=name,
                namespace=namespace,
            )
            return ReconcileOutcome.UNMANAGED

        self.logger.info(
            f"Secret {desired.key} is autogenerated",
            resource_name=name,
            namespace=namespace,
            secret_type=str(secret_type),
        )

        generator = get_generator(secret_type, self.config)
        # RSA and bcrypt work runs off the event loop
        await asyncio.to_thread(generator.generate_data, desired)

        if (
            desired.annotations == instance.annotations
            and desired.data == instance.data
        ):
            self.logger.debug(
                f"Secret {desired.key} is up to date",
                resource_name=name,
                namespace=namespace,
            )
            return ReconcileOutcome.UNCHANGED

        desired.annotations[ANNOTATION_SECRET_AUTOGENERATED_AT] = self.clock().strftime(
            GENERATED_AT_FORMAT
        )
        generated_fields = count_changed_fields(instance, desired)

        if self.dry_run:
            self.logger.info(
                f"Dry run: not updating secret {desired.key}",
                resource_name=name,
                namespace=namespace,
                generated_count=generated_fields,
            )
            return ReconcileOutcome.DRY_RUN

        self.logger.info(
            f"Updating secret {desired.key}",
            resource_name=name,
            namespace=namespace,
            generated_count=generated_fields,
        )
        await self.secret_client.update_secret(desired)
        metrics_collector.record_secret_update(
            namespace=namespace,
            secret_type=str(secret_type),
            generated_fields=generated_fields,
        )
        return ReconcileOutcome.UPDATED
