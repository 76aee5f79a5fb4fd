"""Tests for error sanitization utilities."""

from __future__ import annotations

from kubernetes.client.exceptions import ApiException

from cluster_secret_operator.utils.errors import is_not_found, sanitize_error_message, sanitize_exception


class TestSanitizeErrorMessage:
    """Test cases for sanitize_error_message function."""

    def test_sanitize_bearer_token(self):
        """Test that bearer tokens are sanitized."""
        message = "request failed: Bearer eyJhbGciOiJSUzI1NiJ9.payload.sig"
        result = sanitize_error_message(message)
        assert "eyJhbGciOiJSUzI1NiJ9" not in result
        assert "Bearer [REDACTED]" in result

    def test_sanitize_password(self):
        """Test that passwords are sanitized."""
        result = sanitize_error_message("login failed, password: hunter2")
        assert "hunter2" not in result
        assert "[REDACTED]" in result

    def test_sanitize_client_secret(self):
        """Test that client secrets are sanitized."""
        result = sanitize_error_message('client_secret="s3cr3t" rejected')
        assert "s3cr3t" not in result

    def test_plain_message_unchanged(self):
        """Test that ordinary messages pass through."""
        message = "namespace a not found"
        assert sanitize_error_message(message) == message


class TestSanitizeException:
    """Test cases for sanitize_exception function."""

    def test_api_exception_reduced_to_status(self):
        """Test that API exception bodies are dropped."""
        error = ApiException(status=403, reason="Forbidden")
        error.body = '{"message": "token: abc"}'
        assert sanitize_exception(error) == "(403) Forbidden"

    def test_generic_exception(self):
        """Test that other exceptions use their message."""
        assert sanitize_exception(ValueError("token: abc")) == "token: [REDACTED]"


class TestIsNotFound:
    """Test cases for is_not_found function."""

    def test_not_found(self):
        """Test a 404."""
        assert is_not_found(ApiException(status=404, reason="Not Found"))

    def test_other_status(self):
        """Test other API failures."""
        assert not is_not_found(ApiException(status=500, reason="Internal Error"))

    def test_other_exception(self):
        """Test non-API exceptions."""
        assert not is_not_found(KeyError("x"))
