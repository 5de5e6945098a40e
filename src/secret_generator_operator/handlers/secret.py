"""
Secret handlers - Drive generation passes from Secret events.

Every watch event for a Secret carrying a type or autogenerate annotation
runs one reconciliation pass. Event handlers store no handling state on the
Secret, so none of its data is ever copied into annotations. The operator's
own update produces one more event whose pass is a no-op.
"""

import asyncio
import logging
from typing import Any

import kopf

from secret_generator_operator.constants import (
    ANNOTATION_SECRET_AUTOGENERATE,
    ANNOTATION_SECRET_TYPE,
    GENERATION_RETRY_ATTEMPTS,
)
from secret_generator_operator.errors import OperatorError
from secret_generator_operator.services import SecretReconciler
from secret_generator_operator.settings import settings as operator_settings

logger = logging.getLogger(__name__)


def is_generated_secret(annotations: dict[str, str], **_: Any) -> bool:
    """Whether a Secret declares any generation directive."""
    return ANNOTATION_SECRET_TYPE in annotations or ANNOTATION_SECRET_AUTOGENERATE in annotations


def get_reconciler(memo: kopf.Memo) -> SecretReconciler:
    """Return the reconciler stored in memo, creating it on first use."""
    reconciler = memo.get("secret_reconciler")
    if reconciler is None:
        reconciler = SecretReconciler(
            config=operator_settings.generator_config(),
            dry_run=operator_settings.dry_run,
        )
        memo["secret_reconciler"] = reconciler
    return reconciler


@kopf.on.event("v1", "secrets", when=is_generated_secret)
async def reconcile_secret(
    event: kopf.RawEvent,
    name: str,
    namespace: str,
    memo: kopf.Memo,
    **kwargs: Any,
) -> None:
    """
    Run a generation pass for a Secret.

    kopf does not retry failed event handlers, so retryable failures are
    retried here after the delay the error carries. Events arriving for the
    same Secret meanwhile are batched by kopf and handled afterwards.

    Args:
        event: Raw watch event
        name: Name of the Secret
        namespace: Namespace of the Secret
        memo: Operator-wide memo holding the reconciler

    Raises:
        kopf.PermanentError: If the Secret's directives are invalid
        kopf.TemporaryError: If retryable failures persisted for every attempt
    """
    if event.get("type") == "DELETED":
        return

    logger.debug(f"Handler invoked for secret {namespace}/{name}")

    reconciler = get_reconciler(memo)
    for attempt in range(1, GENERATION_RETRY_ATTEMPTS + 1):
        try:
            await reconciler.reconcile(name=name, namespace=namespace)
            return
        except OperatorError as e:
            if not e.retryable or attempt == GENERATION_RETRY_ATTEMPTS:
                raise e.as_kopf_error() from e

            logger.warning(
                f"Pass for secret {namespace}/{name} failed "
                f"(attempt {attempt}/{GENERATION_RETRY_ATTEMPTS}), "
                f"retrying in {e.delay}s: {e}"
            )
            await asyncio.sleep(e.delay)
