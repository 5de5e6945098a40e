"""
Generators package - One generator per secret type.

Contains:
- string.py: Random string fields named by the autogenerate annotation
- ssh_keypair.py: RSA private key and OpenSSH public key
- basic_auth.py: Username, password and htpasswd ``auth`` line
"""

import logging

from ..errors import SecretTypeNotSpecifiedError
from ..models import GeneratorConfig, SecretType
from .base import Generator
from .basic_auth import BasicAuthGenerator
from .ssh_keypair import SSHKeypairGenerator
from .string import StringGenerator


def get_generator(
    secret_type: SecretType,
    config: GeneratorConfig,
    logger: logging.Logger | None = None,
) -> Generator:
    """
    Select the generator for a secret type.

    Args:
        secret_type: Resolved type of the secret
        config: Generation policy passed to the generator
        logger: Optional logger for the generator

    Returns:
        Generator instance for the type

    Raises:
        SecretTypeNotSpecifiedError: If ``secret_type`` is not a SecretType
    """
    match secret_type:
        case SecretType.STRING:
            return StringGenerator(config, logger)
        case SecretType.SSH_KEYPAIR:
            return SSHKeypairGenerator(config, logger)
        case SecretType.BASIC_AUTH:
            return BasicAuthGenerator(config, logger)
        case _:
            raise SecretTypeNotSpecifiedError(secret_type)


__all__ = [
    "Generator",
    "StringGenerator",
    "SSHKeypairGenerator",
    "BasicAuthGenerator",
    "get_generator",
]
