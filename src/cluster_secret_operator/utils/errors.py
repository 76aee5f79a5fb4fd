"""Error sanitization utilities to keep credentials out of logs and events."""

import re

from kubernetes.client.exceptions import ApiException


# Patterns that might expose credentials carried in API error bodies
SENSITIVE_PATTERNS = [
    r"(bearer)\s+[A-Za-z0-9\-_\.=]+",
    r"(authorization)[:\s]+[^\s,;\)]+",
    r"(client[_\-\s]?secret)[:\s\"=]+[^\s,;\)\"]+",
]

# Fields to redact completely
SENSITIVE_FIELDS = {
    "password",
    "token",
    "secret_key",
    "api_key",
    "private_key",
}


def sanitize_error_message(message: str) -> str:
    """Sanitize error message to remove sensitive information.

    Args:
        message: Original error message

    Returns:
        Sanitized error message with sensitive data redacted
    """
    sanitized = message

    for pattern in SENSITIVE_PATTERNS:
        sanitized = re.sub(pattern, r"\1 [REDACTED]", sanitized, flags=re.IGNORECASE)

    for field in SENSITIVE_FIELDS:
        sanitized = re.sub(
            rf"{field}[:\s]+([^\s,;\)]+)",
            rf"{field}: [REDACTED]",
            sanitized,
            flags=re.IGNORECASE,
        )

    return sanitized


def sanitize_exception(error: Exception) -> str:
    """Sanitize exception message.

    API exceptions are reduced to their status and reason; their bodies may
    echo request payloads.
    """
    if isinstance(error, ApiException):
        return sanitize_error_message(f"({error.status}) {error.reason}")
    return sanitize_error_message(str(error))


def is_not_found(error: Exception) -> bool:
    """Return True if *error* is a Kubernetes 404."""
    return isinstance(error, ApiException) and error.status == 404
