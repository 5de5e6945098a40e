"""Unit tests for generator selection."""

import pytest

from secret_generator_operator.errors import SecretTypeNotSpecifiedError
from secret_generator_operator.generators import (
    BasicAuthGenerator,
    SSHKeypairGenerator,
    StringGenerator,
    get_generator,
)
from secret_generator_operator.models import SecretType


@pytest.mark.parametrize(
    "secret_type,expected",
    [
        (SecretType.STRING, StringGenerator),
        (SecretType.SSH_KEYPAIR, SSHKeypairGenerator),
        (SecretType.BASIC_AUTH, BasicAuthGenerator),
    ],
)
def test_selects_generator_for_type(config, secret_type, expected):
    generator = get_generator(secret_type, config)

    assert isinstance(generator, expected)
    assert generator.config is config


def test_unknown_type_rejected(config):
    with pytest.raises(SecretTypeNotSpecifiedError):
        get_generator("opaque", config)
