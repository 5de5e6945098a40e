"""Unit tests for the operator error hierarchy."""

import kopf

from secret_generator_operator.errors import (
    DuplicateFieldError,
    EntropyError,
    KubernetesAPIError,
    OperatorError,
    SecretTypeNotSpecifiedError,
    TemporaryError,
    ValidationError,
)


class TestKopfConversion:
    def test_retryable_becomes_temporary(self):
        error = TemporaryError("try later", delay=12)

        kopf_error = error.as_kopf_error()

        assert isinstance(kopf_error, kopf.TemporaryError)
        assert kopf_error.delay == 12

    def test_non_retryable_becomes_permanent(self):
        assert isinstance(ValidationError("bad").as_kopf_error(), kopf.PermanentError)


class TestErrorTypes:
    def test_validation_error_names_field(self):
        error = ValidationError("not a number", field="length")
        assert "Validation error in field 'length'" in str(error)
        assert error.category == "validation"
        assert error.retryable is False

    def test_user_action_is_appended(self):
        error = OperatorError("broken", category="test", user_action="Fix it")
        assert str(error) == "broken\nAction required: Fix it"

    def test_duplicate_field(self):
        error = DuplicateFieldError("password")
        assert isinstance(error, ValidationError)
        assert error.field_name == "password"
        assert "duplicate element password found" in str(error)

    def test_entropy_error(self):
        cause = OSError("getrandom failed")
        error = EntropyError("no entropy", cause=cause)
        assert error.retryable is True
        assert error.delay == 30
        assert error.category == "generation"
        assert error.cause is cause

    def test_secret_type_not_specified(self):
        error = SecretTypeNotSpecifiedError("weird")
        assert "SecretTypeNotSpecified" in str(error)
        assert error.retryable is True

    def test_kubernetes_api_error_reasons(self):
        assert KubernetesAPIError("x", reason="Conflict").retryable is True
        assert KubernetesAPIError("x", reason="Forbidden").retryable is False
        assert KubernetesAPIError("x", reason="Unauthorized").retryable is False
        assert KubernetesAPIError("x", reason="Invalid").retryable is False
        assert "(reason: Conflict)" in str(KubernetesAPIError("x", reason="Conflict"))
