"""
FluidSDK harness logging utilities.

Provides configurable logging for lifecycle narration, HTTP/JSON-RPC traffic
and signing operations. Ensures no sensitive data (private keys, JWTs,
feedback authorization tokens) is logged.
"""

import logging
import re
from typing import Any

# Create harness-specific loggers
_harness_logger = logging.getLogger("fluidharness")
_http_logger = logging.getLogger("fluidharness.http")
_signing_logger = logging.getLogger("fluidharness.signing")

# Handler installed by configure_logging, replaced on reconfiguration
_installed_handler: logging.Handler | None = None

# Patterns for sensitive data that should be masked
_SENSITIVE_PATTERNS = [
    # JWTs (header.payload.signature, base64url)
    (re.compile(r"eyJ[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+"), "[JWT_REDACTED]"),
    # Named secrets
    (re.compile(r"(private_key|secret|token|password|jwt|api_key)['\"]?\s*[:=]\s*['\"][^'\"]+['\"]", re.IGNORECASE), r"\1: [REDACTED]"),
    # Raw 32-byte private keys in hex (exactly 64 hex chars, optional 0x)
    (re.compile(r"\b(0x)?[a-fA-F0-9]{64}\b"), "[PRIVATE_KEY_REDACTED]"),
    # Long hex blobs (signatures, feedback auth tokens)
    (re.compile(r"0x[a-fA-F0-9]{130,}"), "[SIGNATURE_REDACTED]"),
]

_SIGNATURE_PREVIEW_LENGTH = 8

_DEFAULT_SENSITIVE_KEYS = {
    "signature",
    "private_key",
    "secret",
    "token",
    "password",
    "api_key",
    "jwt",
    "feedback_auth",
    "feedbackauth",
}


def configure_logging(
    level: int = logging.INFO,
    http_level: int | None = None,
    signing_level: int | None = None,
    handler: logging.Handler | None = None,
    format_string: str | None = None,
) -> None:
    """
    Configure harness logging.

    Args:
        level: Default log level for all harness loggers (default: INFO)
        http_level: Log level for HTTP request/response logging (default: same as level)
        signing_level: Log level for signing operations (default: same as level)
        handler: Custom handler to use (default: StreamHandler to stderr)
        format_string: Custom format string (default: includes timestamp, level, logger name)

    Example:
        ```python
        import logging
        from fluidharness.logging import configure_logging

        # Show JSON-RPC traffic while running the lifecycle
        configure_logging(level=logging.INFO, http_level=logging.DEBUG)
        ```
    """
    global _installed_handler

    if format_string is None:
        format_string = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    formatter = logging.Formatter(format_string)

    if handler is None:
        handler = logging.StreamHandler()

    handler.setFormatter(formatter)

    if _installed_handler is not None:
        _harness_logger.removeHandler(_installed_handler)
    _installed_handler = handler

    _harness_logger.setLevel(level)
    _harness_logger.addHandler(handler)

    _http_logger.setLevel(http_level if http_level is not None else level)
    _signing_logger.setLevel(signing_level if signing_level is not None else level)


def get_logger(name: str | None = None) -> logging.Logger:
    """
    Get a harness logger.

    Args:
        name: Logger name suffix (e.g., "lifecycle", "mcp"). If None, returns main logger.

    Returns:
        Logger instance
    """
    if name is None:
        return _harness_logger
    return logging.getLogger(f"fluidharness.{name}")


def mask_sensitive_data(text: str) -> str:
    """
    Mask sensitive data in a string.

    Replaces private keys, JWTs, long signatures and named secrets
    with redacted placeholders.
    """
    result = text
    for pattern, replacement in _SENSITIVE_PATTERNS:
        result = pattern.sub(replacement, result)
    return result


def truncate_signature(signature: str) -> str:
    """
    Truncate a signature for safe logging.

    Shows only the first and last few characters of a signature.

    Args:
        signature: Full signature string

    Returns:
        Truncated signature like "0x1234ab...9f8e7d6c"
    """
    if len(signature) <= _SIGNATURE_PREVIEW_LENGTH * 2:
        return "[SIGNATURE_REDACTED]"

    return f"{signature[:_SIGNATURE_PREVIEW_LENGTH]}...{signature[-_SIGNATURE_PREVIEW_LENGTH:]}"


def safe_log_dict(data: dict[str, Any], sensitive_keys: set[str] | None = None) -> dict[str, Any]:
    """
    Create a copy of a dictionary with sensitive values masked.

    Args:
        data: Dictionary that may contain sensitive values
        sensitive_keys: Set of keys to mask (default: signature, private_key, jwt,
            feedback_auth, secret, token, password, api_key)

    Returns:
        Dictionary with sensitive values replaced with "[REDACTED]"
    """
    if sensitive_keys is None:
        sensitive_keys = _DEFAULT_SENSITIVE_KEYS

    result: dict[str, Any] = {}
    for key, value in data.items():
        key_lower = key.lower()
        if key_lower in sensitive_keys or any(sk in key_lower for sk in sensitive_keys):
            if isinstance(value, str) and key_lower in ("signature", "feedback_auth", "feedbackauth"):
                result[key] = truncate_signature(value)
            else:
                result[key] = "[REDACTED]"
        elif isinstance(value, dict):
            result[key] = safe_log_dict(value, sensitive_keys)
        elif isinstance(value, list):
            result[key] = [
                safe_log_dict(item, sensitive_keys) if isinstance(item, dict) else item
                for item in value
            ]
        else:
            result[key] = value

    return result


def log_http_request(
    method: str,
    url: str,
    body: dict[str, Any] | None = None,
) -> None:
    """Log an HTTP request at DEBUG level with sensitive data masked."""
    if not _http_logger.isEnabledFor(logging.DEBUG):
        return

    log_parts = [f"{method} {url}"]

    if body:
        log_parts.append(f"body={safe_log_dict(body)}")

    _http_logger.debug(" | ".join(log_parts))


def log_http_response(
    status_code: int,
    url: str,
    body: dict[str, Any] | None = None,
    elapsed_ms: float | None = None,
) -> None:
    """Log an HTTP response at DEBUG level with sensitive data masked."""
    if not _http_logger.isEnabledFor(logging.DEBUG):
        return

    log_parts = [f"Response {status_code} from {url}"]

    if elapsed_ms is not None:
        log_parts.append(f"elapsed={elapsed_ms:.2f}ms")

    if body:
        log_parts.append(f"body={safe_log_dict(body)}")

    _http_logger.debug(" | ".join(log_parts))


def log_signing_operation(
    operation: str,
    address: str,
    subject: str,
    digest: str | None = None,
) -> None:
    """
    Log a signing or transaction operation at DEBUG level.

    Args:
        operation: Operation type (e.g., "sign_message", "give_feedback")
        address: Signer address
        subject: What is being signed or submitted (agent id, message kind)
        digest: Signature or tx hash (optional, truncated)
    """
    if not _signing_logger.isEnabledFor(logging.DEBUG):
        return

    log_parts = [f"{operation}: address={address}, subject={subject}"]

    if digest:
        log_parts.append(f"digest={truncate_signature(digest)}")

    _signing_logger.debug(" | ".join(log_parts))


__all__ = [
    "configure_logging",
    "get_logger",
    "mask_sensitive_data",
    "truncate_signature",
    "safe_log_dict",
    "log_http_request",
    "log_http_response",
    "log_signing_operation",
]
