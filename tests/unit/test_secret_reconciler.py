"""Unit tests for the secret reconciler."""

import asyncio
import base64
import logging
import threading
import time
from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from secret_generator_operator.constants import (
    ANNOTATION_SECRET_AUTOGENERATE,
    ANNOTATION_SECRET_AUTOGENERATED_AT,
    ANNOTATION_SECRET_SECURE,
    ANNOTATION_SECRET_TYPE,
    FIELD_BASIC_AUTH_INGRESS,
)
from secret_generator_operator.errors import (
    DuplicateFieldError,
    EntropyError,
    KubernetesAPIError,
    TemporaryError,
)
from secret_generator_operator.models import ReconcileOutcome
from secret_generator_operator.services.secret_reconciler import (
    SecretReconciler,
    count_changed_fields,
    resolve_secret_type,
)

FIXED_NOW = datetime(2024, 5, 1, 12, 30, 45, tzinfo=UTC)


@pytest.fixture
def secret_client():
    """Secret client whose fetch and persist calls are mocked."""
    mock_client = MagicMock()
    mock_client.get_secret = AsyncMock()
    mock_client.update_secret = AsyncMock()
    return mock_client


@pytest.fixture
def reconciler(config, secret_client):
    return SecretReconciler(
        config=config, secret_client=secret_client, clock=lambda: FIXED_NOW
    )


class TestResolveSecretType:
    def test_declared_type(self, secret_factory):
        secret = secret_factory({ANNOTATION_SECRET_TYPE: "basic-auth"})
        assert resolve_secret_type(secret) == "basic-auth"

    def test_autogenerate_without_type_defaults_to_string(self, secret_factory):
        secret = secret_factory({ANNOTATION_SECRET_AUTOGENERATE: "a"})
        assert resolve_secret_type(secret) == "string"
        assert secret.annotations[ANNOTATION_SECRET_TYPE] == "string"

    def test_invalid_type_with_autogenerate_defaults_to_string(self, secret_factory):
        secret = secret_factory(
            {ANNOTATION_SECRET_TYPE: "bogus", ANNOTATION_SECRET_AUTOGENERATE: "a"}
        )
        assert resolve_secret_type(secret) == "string"

    def test_unmanaged(self, secret_factory):
        assert resolve_secret_type(secret_factory({})) is None
        assert resolve_secret_type(secret_factory({ANNOTATION_SECRET_TYPE: "bogus"})) is None


class TestReconcile:
    """Fetch, type resolution, diff and persist decisions."""

    @pytest.mark.asyncio
    async def test_not_found_is_success(self, reconciler, secret_client):
        secret_client.get_secret.return_value = None

        outcome = await reconciler.reconcile("missing", "test-ns")

        assert outcome == ReconcileOutcome.NOT_FOUND
        secret_client.update_secret.assert_not_called()

    @pytest.mark.asyncio
    async def test_fetch_error_propagates(self, reconciler, secret_client):
        secret_client.get_secret.side_effect = KubernetesAPIError(
            "Failed to read secret", reason="InternalError"
        )

        with pytest.raises(KubernetesAPIError):
            await reconciler.reconcile("test-secret", "test-ns")

    @pytest.mark.asyncio
    async def test_unmanaged_secret_is_left_alone(
        self, reconciler, secret_client, secret_factory, caplog
    ):
        secret_client.get_secret.return_value = secret_factory(
            {"unrelated": "x"}, data={"a": b"1"}
        )

        with caplog.at_level(logging.DEBUG, logger="SecretReconciler"):
            outcome = await reconciler.reconcile("test-secret", "test-ns")

        assert outcome == ReconcileOutcome.UNMANAGED
        secret_client.update_secret.assert_not_called()
        assert "declares no valid type" in caplog.text

    @pytest.mark.asyncio
    async def test_generates_and_persists(
        self, reconciler, secret_client, secret_factory
    ):
        observed = secret_factory({ANNOTATION_SECRET_AUTOGENERATE: "password"})
        secret_client.get_secret.return_value = observed

        outcome = await reconciler.reconcile("test-secret", "test-ns")

        assert outcome == ReconcileOutcome.UPDATED
        secret_client.update_secret.assert_awaited_once()
        desired = secret_client.update_secret.call_args[0][0]
        assert len(desired.data["password"]) == 40
        assert desired.annotations[ANNOTATION_SECRET_TYPE] == "string"
        assert desired.annotations[ANNOTATION_SECRET_SECURE] == "yes"
        assert desired.annotations[ANNOTATION_SECRET_AUTOGENERATED_AT] == (
            "2024-05-01T12:30:45Z"
        )
        # observed snapshot is not mutated
        assert observed.data == {}
        assert ANNOTATION_SECRET_TYPE not in observed.annotations

    @pytest.mark.asyncio
    async def test_persisted_annotations_hold_no_secret_values(
        self, reconciler, secret_client, secret_factory
    ):
        secret_client.get_secret.return_value = secret_factory(
            {ANNOTATION_SECRET_TYPE: "basic-auth"}
        )

        await reconciler.reconcile("test-secret", "test-ns")

        body = secret_client.update_secret.call_args[0][0].to_v1_secret()
        annotation_text = "".join(body.metadata.annotations.values())
        for field_name, encoded in body.data.items():
            raw = base64.b64decode(encoded).decode("utf-8")
            assert encoded not in annotation_text, field_name
            assert raw not in annotation_text, field_name

    @pytest.mark.asyncio
    async def test_unchanged_secret_is_not_persisted(
        self, reconciler, secret_client, secret_factory
    ):
        secret_client.get_secret.return_value = secret_factory(
            {
                ANNOTATION_SECRET_TYPE: "string",
                ANNOTATION_SECRET_AUTOGENERATE: "password",
                ANNOTATION_SECRET_SECURE: "yes",
            },
            data={"password": b"already-there"},
        )

        outcome = await reconciler.reconcile("test-secret", "test-ns")

        assert outcome == ReconcileOutcome.UNCHANGED
        secret_client.update_secret.assert_not_called()

    @pytest.mark.asyncio
    async def test_second_pass_is_a_noop(
        self, reconciler, secret_client, secret_factory
    ):
        secret_client.get_secret.return_value = secret_factory(
            {ANNOTATION_SECRET_AUTOGENERATE: "a,b"}
        )
        await reconciler.reconcile("test-secret", "test-ns")
        persisted = secret_client.update_secret.call_args[0][0]

        secret_client.get_secret.return_value = persisted
        outcome = await reconciler.reconcile("test-secret", "test-ns")

        assert outcome == ReconcileOutcome.UNCHANGED
        assert secret_client.update_secret.await_count == 1

    @pytest.mark.asyncio
    async def test_dispatches_by_type(
        self, reconciler, secret_client, secret_factory
    ):
        secret_client.get_secret.return_value = secret_factory(
            {ANNOTATION_SECRET_TYPE: "basic-auth"}
        )

        outcome = await reconciler.reconcile("test-secret", "test-ns")

        assert outcome == ReconcileOutcome.UPDATED
        desired = secret_client.update_secret.call_args[0][0]
        assert desired.data[FIELD_BASIC_AUTH_INGRESS].startswith(b"admin:")

    @pytest.mark.asyncio
    async def test_duplicate_fields_fail_without_persisting(
        self, reconciler, secret_client, secret_factory
    ):
        secret_client.get_secret.return_value = secret_factory(
            {ANNOTATION_SECRET_AUTOGENERATE: "a,a"}
        )

        with pytest.raises(DuplicateFieldError):
            await reconciler.reconcile("test-secret", "test-ns")

        secret_client.update_secret.assert_not_called()

    @pytest.mark.asyncio
    async def test_entropy_failure_requests_delayed_retry(
        self, reconciler, secret_client, secret_factory
    ):
        secret_client.get_secret.return_value = secret_factory(
            {ANNOTATION_SECRET_AUTOGENERATE: "a,b"}
        )

        with patch(
            "secret_generator_operator.generators.string.generate_random_string",
            side_effect=[b"first", EntropyError("no entropy")],
        ):
            with pytest.raises(EntropyError) as exc_info:
                await reconciler.reconcile("test-secret", "test-ns")

        assert exc_info.value.delay == 30
        secret_client.update_secret.assert_not_called()

    @pytest.mark.asyncio
    async def test_persist_error_propagates(
        self, reconciler, secret_client, secret_factory
    ):
        secret_client.get_secret.return_value = secret_factory(
            {ANNOTATION_SECRET_AUTOGENERATE: "a"}
        )
        secret_client.update_secret.side_effect = KubernetesAPIError(
            "Failed to update secret", reason="Conflict"
        )

        with pytest.raises(KubernetesAPIError) as exc_info:
            await reconciler.reconcile("test-secret", "test-ns")

        assert exc_info.value.retryable is True

    @pytest.mark.asyncio
    async def test_unexpected_error_is_wrapped(self, reconciler, secret_client):
        secret_client.get_secret.side_effect = RuntimeError("boom")

        with pytest.raises(TemporaryError, match="boom"):
            await reconciler.reconcile("test-secret", "test-ns")

    @pytest.mark.asyncio
    async def test_dry_run_skips_persist(self, config, secret_client, secret_factory):
        reconciler = SecretReconciler(
            config=config, secret_client=secret_client, dry_run=True
        )
        secret_client.get_secret.return_value = secret_factory(
            {ANNOTATION_SECRET_AUTOGENERATE: "a"}
        )

        outcome = await reconciler.reconcile("test-secret", "test-ns")

        assert outcome == ReconcileOutcome.DRY_RUN
        secret_client.update_secret.assert_not_called()


class TestCountChangedFields:
    def test_counts_new_and_modified(self, secret_factory):
        before = secret_factory(data={"a": b"1", "b": b"2"})
        after = secret_factory(data={"a": b"1", "b": b"3", "c": b"4"})
        assert count_changed_fields(before, after) == 2


class TestEventLoopOffload:
    """Generation runs in a worker thread so the event loop keeps serving."""

    @pytest.mark.asyncio
    async def test_slow_generation_does_not_stall_loop(
        self, reconciler, secret_client, secret_factory
    ):
        secret_client.get_secret.return_value = secret_factory(
            {ANNOTATION_SECRET_TYPE: "string", ANNOTATION_SECRET_AUTOGENERATE: "a"}
        )
        loop_thread = threading.get_ident()
        generation_threads = []

        def slow_generate(resource):
            generation_threads.append(threading.get_ident())
            time.sleep(0.3)
            resource.data["a"] = b"value"

        generator = MagicMock()
        generator.generate_data.side_effect = slow_generate

        max_gap = 0.0
        done = asyncio.Event()

        async def ticker():
            nonlocal max_gap
            last = time.monotonic()
            while not done.is_set():
                await asyncio.sleep(0.01)
                now = time.monotonic()
                max_gap = max(max_gap, now - last)
                last = now

        ticker_task = asyncio.create_task(ticker())
        with patch(
            "secret_generator_operator.services.secret_reconciler.get_generator",
            return_value=generator,
        ):
            outcome = await reconciler.reconcile("test-secret", "test-ns")
        done.set()
        await ticker_task

        assert outcome == ReconcileOutcome.UPDATED
        assert generation_threads and loop_thread not in generation_threads
        assert max_gap < 0.2
