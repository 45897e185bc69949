"""
adopr-helper logging utilities.

Provides configurable logging for HTTP traffic and credential handling.
Ensures no token material (raw PATs, Basic auth headers, encrypted blobs)
reaches a log record.
"""

import logging
import re
from typing import Any

_root_logger = logging.getLogger("adopr_helper")
_http_logger = logging.getLogger("adopr_helper.http")
_vault_logger = logging.getLogger("adopr_helper.vault")

# Patterns for sensitive data that should be masked
_SENSITIVE_PATTERNS = [
    # Basic / Bearer authorization header values
    (re.compile(r"(Basic|Bearer)\s+[A-Za-z0-9+/=._-]+"), r"\1 [REDACTED]"),
    # Stored credential blobs: three base64 segments joined by dots
    (
        re.compile(r"[A-Za-z0-9+/]{20,}={0,2}\.[A-Za-z0-9+/]{16,}={0,2}\.[A-Za-z0-9+/]+={0,2}"),
        "[ENCRYPTED_PAT_REDACTED]",
    ),
    # Secret/token patterns
    (
        re.compile(r"(secret|token|password|pat)['\"]?\s*[:=]\s*['\"][^'\"]+['\"]", re.IGNORECASE),
        r"\1: [REDACTED]",
    ),
]

_DEFAULT_SENSITIVE_KEYS = {"authorization", "token", "pat", "password", "secret"}


def configure_logging(
    level: int = logging.INFO,
    http_level: int | None = None,
    vault_level: int | None = None,
    handler: logging.Handler | None = None,
    format_string: str | None = None,
) -> None:
    """
    Configure adopr-helper logging.

    Args:
        level: Default log level for all package loggers (default: INFO)
        http_level: Log level for HTTP request/response logging (default: same as level)
        vault_level: Log level for credential vault events (default: same as level)
        handler: Custom handler to use (default: StreamHandler to stderr)
        format_string: Custom format string (default: includes timestamp, level, logger name)

    Example:
        ```python
        import logging
        from adopr_helper.logging import configure_logging

        # Trace every request made during a download
        configure_logging(level=logging.INFO, http_level=logging.DEBUG)
        ```
    """
    if format_string is None:
        format_string = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    formatter = logging.Formatter(format_string)

    if handler is None:
        handler = logging.StreamHandler()

    handler.setFormatter(formatter)

    _root_logger.setLevel(level)
    _root_logger.addHandler(handler)

    _http_logger.setLevel(http_level if http_level is not None else level)
    _vault_logger.setLevel(vault_level if vault_level is not None else level)


def get_logger(name: str | None = None) -> logging.Logger:
    """
    Get an adopr-helper logger.

    Args:
        name: Logger name suffix (e.g., "http", "vault"). If None, returns the package logger.

    Returns:
        Logger instance
    """
    if name is None:
        return _root_logger
    return logging.getLogger(f"adopr_helper.{name}")


def mask_sensitive_data(text: str) -> str:
    """
    Mask sensitive data in a string.

    Args:
        text: Text that may contain tokens or authorization headers

    Returns:
        Text with sensitive data masked
    """
    result = text
    for pattern, replacement in _SENSITIVE_PATTERNS:
        result = pattern.sub(replacement, result)
    return result


def safe_log_dict(data: dict[str, Any], sensitive_keys: set[str] | None = None) -> dict[str, Any]:
    """
    Create a copy of a dictionary with sensitive values masked.

    Args:
        data: Dictionary that may contain sensitive values (headers, settings, ...)
        sensitive_keys: Keys to mask, matched case-insensitively as substrings
            (default: authorization, token, pat, password, secret)

    Returns:
        Dictionary with sensitive values replaced with "[REDACTED]"
    """
    if sensitive_keys is None:
        sensitive_keys = _DEFAULT_SENSITIVE_KEYS

    result: dict[str, Any] = {}
    for key, value in data.items():
        key_lower = str(key).lower()
        if any(sk in key_lower for sk in sensitive_keys):
            result[key] = "[REDACTED]"
        elif isinstance(value, dict):
            result[key] = safe_log_dict(value, sensitive_keys)
        elif isinstance(value, list):
            result[key] = [
                safe_log_dict(item, sensitive_keys) if isinstance(item, dict) else item
                for item in value
            ]
        elif isinstance(value, str):
            result[key] = mask_sensitive_data(value)
        else:
            result[key] = value

    return result


def log_http_request(
    method: str,
    url: str,
    headers: dict[str, str] | None = None,
) -> None:
    """
    Log an HTTP request at DEBUG level with credentials masked.

    Args:
        method: HTTP method (GET, POST, etc.)
        url: Request URL
        headers: Request headers (optional)
    """
    if not _http_logger.isEnabledFor(logging.DEBUG):
        return

    log_parts = [f"{method} {url}"]

    if headers:
        log_parts.append(f"headers={safe_log_dict(headers)}")

    _http_logger.debug(" | ".join(log_parts))


def log_http_response(
    status_code: int,
    url: str,
    elapsed_ms: float | None = None,
    size: int | None = None,
) -> None:
    """
    Log an HTTP response at DEBUG level.

    Args:
        status_code: HTTP status code
        url: Request URL
        elapsed_ms: Request duration in milliseconds (optional)
        size: Response body size in bytes (optional)
    """
    if not _http_logger.isEnabledFor(logging.DEBUG):
        return

    log_parts = [f"Response {status_code} from {url}"]

    if elapsed_ms is not None:
        log_parts.append(f"elapsed={elapsed_ms:.2f}ms")

    if size is not None:
        log_parts.append(f"size={size}")

    _http_logger.debug(" | ".join(log_parts))


def log_vault_operation(operation: str, detail: str | None = None) -> None:
    """
    Log a credential vault operation at DEBUG level.

    Only the operation name and a non-secret detail are recorded.

    Args:
        operation: Operation type (e.g., "encrypt", "decrypt", "clear")
        detail: Optional non-secret context
    """
    if not _vault_logger.isEnabledFor(logging.DEBUG):
        return

    message = operation if detail is None else f"{operation}: {mask_sensitive_data(detail)}"
    _vault_logger.debug(message)


__all__ = [
    "configure_logging",
    "get_logger",
    "mask_sensitive_data",
    "safe_log_dict",
    "log_http_request",
    "log_http_response",
    "log_vault_operation",
]
