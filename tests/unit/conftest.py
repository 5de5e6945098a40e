"""Shared fixtures for unit tests."""

import base64

import pytest
from kubernetes import client

from secret_generator_operator.models import GeneratorConfig, SecretResource


def make_secret(
    annotations: dict[str, str] | None = None,
    data: dict[str, bytes] | None = None,
    name: str = "test-secret",
    namespace: str = "test-ns",
) -> SecretResource:
    """Build a decoded secret resource backed by a V1Secret body."""
    annotations = dict(annotations or {})
    data = dict(data or {})
    body = client.V1Secret(
        metadata=client.V1ObjectMeta(
            name=name,
            namespace=namespace,
            annotations=dict(annotations),
            resource_version="1",
        ),
        data={key: base64.b64encode(value).decode() for key, value in data.items()},
        type="Opaque",
    )
    return SecretResource(
        name=name,
        namespace=namespace,
        annotations=annotations,
        data=data,
        body=body,
    )


@pytest.fixture
def config() -> GeneratorConfig:
    """Default generation policy with insecure regeneration disabled."""
    return GeneratorConfig(secret_length=40, secret_encoding="base64")


@pytest.fixture
def insecure_config() -> GeneratorConfig:
    """Generation policy that regenerates secrets lacking the secure marker."""
    return GeneratorConfig(regenerate_insecure=True)


@pytest.fixture
def secret_factory():
    """Factory building secret resources from annotations and data."""
    return make_secret
