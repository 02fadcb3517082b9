"""Canonical Pydantic models shared across all itemfetch modules.

This is the single source of truth for data shapes in the project. The
models fall into three groups:

**Configuration models** -- serialised as JSON in the user's config directory
and frozen once built:
    :class:`RequestConfig`, :class:`CacheConfig`, and :class:`AppConfig`.

**Payload models** -- validate what the items endpoint returns:
    :class:`Item` and :class:`ItemsResponse`.

**Derived/runtime models** -- produced by the loader for display:
    :class:`ItemSummary` and :class:`RuntimeState`.

All models use Pydantic v2. Configuration models are ``frozen`` so that a
running client can never observe a half-updated config; replacing a config
means building a new value with ``model_copy(update=...)``.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


# --- Configuration ---


class RequestConfig(BaseModel):
    """Settings applied to every request made by :class:`~itemfetch.client.AsyncClient`."""

    model_config = ConfigDict(frozen=True)

    base_url: str = Field(
        default="https://api.example.com/v2", description="Base URL prepended to request paths"
    )
    timeout: float = Field(default=2.0, gt=0, description="Per-attempt timeout in seconds")
    retry_count: int = Field(default=2, ge=1, description="Total attempts per request")
    cache_enabled: bool = Field(default=True, description="Serve and store responses in the cache")


class CacheConfig(BaseModel):
    """In-memory response cache settings."""

    model_config = ConfigDict(frozen=True)

    ttl_seconds: float = Field(default=3.0, gt=0, description="Cache TTL in seconds")


class AppConfig(BaseModel):
    """Top-level configuration, resolved once per run.

    Built by :func:`~itemfetch.config.resolve_config` from the user file,
    the project file, environment variables and CLI flags.
    """

    model_config = ConfigDict(frozen=True)

    app_name: str = "DiffTester"
    request: RequestConfig = Field(default_factory=RequestConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)


# --- Payload ---


class Item(BaseModel):
    """A single entry in the items list.

    Only ``id``, ``name`` and ``active`` are required. Unknown fields are
    kept in ``model_extra``.
    """

    model_config = ConfigDict(extra="allow")

    id: int
    name: str
    active: bool
    score: Optional[float] = None


class ItemsResponse(BaseModel):
    """Expected shape of the items endpoint body.

    Used as the ``response_model`` for
    :meth:`~itemfetch.client.AsyncClient.request`; a body without an
    ``items`` list of valid :class:`Item` objects is a malformed response.
    """

    model_config = ConfigDict(extra="allow")

    items: list[Item]
    url: Optional[str] = None
    meta: dict[str, Any] = Field(default_factory=dict)
    fetched_at: Optional[str] = None


# --- Derived / runtime ---


class ItemSummary(BaseModel):
    """Aggregate counts over an item list."""

    total: int
    active_count: int
    max_score: Optional[float] = None


class RuntimeState(BaseModel):
    """Consumer-side state mutated by :meth:`~itemfetch.loader.ItemLoader.load_items`.

    ``loading`` is always cleared once a load reaches a terminal outcome;
    on failure ``error`` holds the message and ``data`` keeps whatever the
    previous successful load produced.
    """

    loading: bool = False
    error: Optional[str] = None
    data: list[str] = Field(default_factory=list)
    summary: Optional[ItemSummary] = None
    last_updated: Optional[str] = None
