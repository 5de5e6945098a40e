"""
Service layer for the secret generator operator.

This module provides the reconciler service that handles the business logic
of secret generation, separated from the kopf handler layer.
"""

from .secret_reconciler import SecretReconciler

__all__ = ["SecretReconciler"]
