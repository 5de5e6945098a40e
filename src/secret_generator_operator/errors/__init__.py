"""
Error handling module for the secret generator operator.

This module provides an error hierarchy that integrates with kopf
and provides clear categorization for different types of failures.
"""

from .operator_errors import (
    DuplicateFieldError,
    EntropyError,
    ExternalServiceError,
    KubernetesAPIError,
    OperatorError,
    SecretTypeNotSpecifiedError,
    TemporaryError,
    ValidationError,
)

__all__ = [
    "OperatorError",
    "ValidationError",
    "DuplicateFieldError",
    "TemporaryError",
    "EntropyError",
    "SecretTypeNotSpecifiedError",
    "ExternalServiceError",
    "KubernetesAPIError",
]
