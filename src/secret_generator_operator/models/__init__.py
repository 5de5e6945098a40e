"""
Models package - Typed representations used during secret generation.

Defines data models for:
- Secret types and decoded Secret resources
- Generation policy configuration
"""

from .secret import GeneratorConfig, ReconcileOutcome, SecretResource, SecretType

__all__ = ["GeneratorConfig", "ReconcileOutcome", "SecretResource", "SecretType"]
