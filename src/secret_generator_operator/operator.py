#!/usr/bin/env python3
"""
Secret Generator Operator - Main entry point for the Kopf-based operator.

The operator fills and rotates Secret fields declared through annotations:
- Random strings in a selectable encoding, optionally templated
- SSH keypairs
- Basic-auth credentials with an htpasswd line

Usage:
    python -m secret_generator_operator.operator
    # Or with kopf directly:
    kopf run -m secret_generator_operator.operator --all-namespaces

Environment Variables:
    WATCH_NAMESPACES: Comma-separated list of namespaces to watch
    REGENERATE_INSECURE: Regenerate secrets not marked secure
    SECRET_LENGTH / SECRET_ENCODING / SSH_KEY_LENGTH: Generation defaults
    LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)
    DRY_RUN: Set to 'true' for dry-run mode
"""

import logging
import sys

import kopf

# Importing handler modules registers their decorators with kopf
from secret_generator_operator.constants import OPERATOR_NAME
from secret_generator_operator.handlers import secret  # noqa: F401
from secret_generator_operator.observability.logging import setup_structured_logging
from secret_generator_operator.observability.metrics import MetricsServer
from secret_generator_operator.services import SecretReconciler
from secret_generator_operator.settings import settings as operator_settings
from secret_generator_operator.utils.kubernetes import SecretClient, get_kubernetes_client

# Global reference to metrics server for cleanup
_global_metrics_server: MetricsServer | None = None


def configure_logging() -> None:
    """Configure structured logging for the operator based on operator_settings."""
    setup_structured_logging(
        log_level=operator_settings.log_level.upper(),
        enable_json_formatting=operator_settings.json_logs,
        correlation_id_enabled=operator_settings.correlation_ids,
    )


@kopf.on.startup()
async def startup_handler(
    settings: kopf.OperatorSettings, memo: kopf.Memo, **_
) -> None:
    """
    Operator startup configuration.

    Configures kopf, loads the Kubernetes configuration, starts the metrics
    server and builds the reconciler shared by all handler invocations.
    """
    logging.info("Starting Secret Generator Operator...")

    settings.watching.reconnect_backoff = 1.0
    settings.peering.standalone = True
    settings.posting.level = logging.WARNING

    watched_namespaces = operator_settings.watched_namespaces
    if watched_namespaces:
        logging.info(f"Watching namespaces: {', '.join(watched_namespaces)}")
    else:
        logging.info("Watching all namespaces (cluster-wide mode)")

    if operator_settings.dry_run:
        logging.info("Running in DRY-RUN mode - no secrets will be updated")

    generator_config = operator_settings.generator_config()
    logging.info(
        f"Generation defaults: length={generator_config.secret_length}, "
        f"encoding={generator_config.secret_encoding}, "
        f"ssh_key_length={generator_config.ssh_key_length}, "
        f"regenerate_insecure={generator_config.regenerate_insecure}"
    )
    memo.secret_reconciler = SecretReconciler(
        config=generator_config,
        secret_client=SecretClient(get_kubernetes_client()),
        dry_run=operator_settings.dry_run,
    )

    try:
        metrics_server = MetricsServer(
            port=operator_settings.metrics_port, host=operator_settings.metrics_host
        )
        await metrics_server.start()

        global _global_metrics_server
        _global_metrics_server = metrics_server
    except OSError as e:
        # Don't fail operator startup if metrics server fails
        logging.error(f"Failed to start metrics server: {e}")
        logging.warning("Continuing without metrics server")


@kopf.on.cleanup()
async def cleanup_handler(**_) -> None:
    """Stop the metrics server on shutdown."""
    logging.info("Shutting down Secret Generator Operator...")

    global _global_metrics_server
    if _global_metrics_server:
        await _global_metrics_server.stop()
        _global_metrics_server = None


@kopf.on.probe(id="status")
async def health_check(**_) -> dict[str, str]:
    """Liveness probe payload."""
    return {"status": "healthy", "operator": OPERATOR_NAME}


def main() -> None:
    """
    Main entry point for the operator.

    Configures logging and runs kopf for the configured namespace scope.
    """
    configure_logging()

    watched_namespaces = operator_settings.watched_namespaces

    try:
        if watched_namespaces:
            kopf.run(
                namespaces=watched_namespaces,
                liveness_endpoint="http://0.0.0.0:8080/healthz",
            )
        else:
            kopf.run(
                clusterwide=True,
                liveness_endpoint="http://0.0.0.0:8080/healthz",
            )
    except KeyboardInterrupt:
        logging.info("Received shutdown signal")
        sys.exit(0)
    except Exception as e:
        logging.error(f"Operator failed with error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
