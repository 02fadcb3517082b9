"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~itemfetch.exceptions.ItemfetchError` subclass.
Shell wrappers can inspect the exit code to tell a transport outage from
a malformed payload without parsing stderr.

Example::

    $ itemfetch load --live
    $ echo $?
    8   # EXIT_RETRIES_EXHAUSTED -- every attempt failed
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_ARGUMENT = 2
"""An argument was rejected (bad cache key, non-positive TTL, bad CLI value)."""

EXIT_TRANSPORT_FAILURE = 6
"""A network-level error, timeout, or non-success HTTP status."""

EXIT_MALFORMED_RESPONSE = 7
"""The endpoint answered but the body did not have the expected shape."""

EXIT_RETRIES_EXHAUSTED = 8
"""Every attempt in the retry budget failed."""
