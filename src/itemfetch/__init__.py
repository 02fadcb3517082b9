"""itemfetch -- fetch, cache and summarise an items list.

This package fetches a list of items from an HTTP endpoint (or an in-process
mock of it), keeps responses in an in-memory TTL cache, retries failed
attempts under a per-attempt timeout, and derives a filtered, formatted view
of the items for display.

Typical use::

    itemfetch load              # mock endpoint, two runs, second from cache
    itemfetch load --live -v    # real endpoint, with cache/retry diagnostics

Modules:
    app: Typer application and CLI entry point.
    cache: In-memory TTL cache and cache-key derivation.
    client: Retrying, caching request orchestrator over httpx.
    loader: Drives a load and records it in a RuntimeState.
    derive: Pure item filtering, sorting, formatting and summary helpers.
    models: Pydantic models shared across the package.
    config: XDG-aware configuration and precedence resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "1.1.0"
