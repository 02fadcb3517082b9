"""Exception hierarchy for itemfetch.

All exceptions inherit from :class:`ItemfetchError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`itemfetch.exit_codes`.
The top-level error handler in :func:`itemfetch.app.main` catches
``ItemfetchError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Subclass hierarchy::

    ItemfetchError (exit 1)
    +-- InvalidArgumentError    (exit 2)
    +-- TransportFailure        (exit 6)
    +-- MalformedResponseError  (exit 7)
    +-- RetriesExhaustedError   (exit 8)
    +-- ConfigError             (exit 1)

:class:`TransportFailure` and :class:`MalformedResponseError` describe a
single failed attempt.  The request orchestrator retries on them and only
surfaces :class:`RetriesExhaustedError` to its caller.
"""

from __future__ import annotations

from typing import Optional

from itemfetch.exit_codes import (
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_ARGUMENT,
    EXIT_MALFORMED_RESPONSE,
    EXIT_RETRIES_EXHAUSTED,
    EXIT_TRANSPORT_FAILURE,
)


class ItemfetchError(Exception):
    """Base exception for all itemfetch errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidArgumentError(ItemfetchError):
    """Raised for an empty cache key, a non-positive TTL, or a bad CLI value."""

    exit_code = EXIT_INVALID_ARGUMENT


class TransportFailure(ItemfetchError):
    """Raised when one attempt fails at the transport level.

    Covers timeouts, connection errors and non-success HTTP statuses alike;
    the retry loop does not distinguish between them.

    Args:
        message: Description of the failure.
        status_code: The HTTP status when the server answered, else ``None``.
    """

    exit_code = EXIT_TRANSPORT_FAILURE

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class MalformedResponseError(ItemfetchError):
    """Raised when a successful response body does not match the expected shape."""

    exit_code = EXIT_MALFORMED_RESPONSE


class RetriesExhaustedError(ItemfetchError):
    """Raised when every attempt in the retry budget failed.

    Args:
        path: The request path that could not be resolved.
        attempts: Number of attempts performed.
        last_error: The failure from the final attempt.
    """

    exit_code = EXIT_RETRIES_EXHAUSTED

    def __init__(self, path: str, attempts: int, last_error: Optional[Exception] = None):
        message = f"Request to {path} failed after {attempts} attempt(s)"
        if last_error is not None:
            message = f"{message}: {last_error}"
        super().__init__(message)
        self.path = path
        self.attempts = attempts
        self.last_error = last_error


class ConfigError(ItemfetchError):
    """Raised for configuration problems (invalid JSON, bad overrides)."""

    exit_code = EXIT_GENERIC_FAILURE
