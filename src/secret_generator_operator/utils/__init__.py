"""
Utils package - Utility modules for secret generation.

Contains helper modules for:
- Cryptographically secure random value generation
- Annotation directive lookups
- Kubernetes client configuration and Secret fetch/persist
"""

from secret_generator_operator.utils.random_string import generate_random_string

__all__ = ["generate_random_string"]
