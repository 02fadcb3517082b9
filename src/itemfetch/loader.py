"""One-shot item loading that records its outcome in a :class:`RuntimeState`."""

from __future__ import annotations

from typing import Any, Optional

from itemfetch.client import AsyncClient
from itemfetch.derive import filter_active_items, format_item_names, sort_by_score_desc, summarize
from itemfetch.exceptions import ItemfetchError
from itemfetch.models import ItemsResponse, RuntimeState
from itemfetch.output import get_output

DEFAULT_PARAMS: dict[str, Any] = {"limit": 5, "sort": "score"}


class ItemLoader:
    """Fetches items through an :class:`AsyncClient` and derives the view.

    The loader owns the only write path into its :class:`RuntimeState`.
    Failures surface as ``state.error``; ``state.loading`` is cleared on
    every outcome.

    Args:
        client: An entered :class:`AsyncClient`.
        state: State to mutate. A fresh one is created when omitted.
        min_score: Items must score strictly above this to be shown.
            ``None`` disables the threshold.

    Attributes:
        last_error: The typed error behind ``state.error`` for the most
            recent load, or ``None`` after a success.
    """

    def __init__(
        self,
        client: AsyncClient,
        state: Optional[RuntimeState] = None,
        min_score: Optional[float] = 3,
    ) -> None:
        self.client = client
        self.state = state if state is not None else RuntimeState()
        self.min_score = min_score
        self.last_error: Optional[ItemfetchError] = None

    async def load_items(
        self,
        path: str = "/items",
        params: Optional[dict[str, Any]] = None,
    ) -> RuntimeState:
        """Load, derive and store the item view.

        Args:
            path: Items endpoint path.
            params: Query parameters; defaults to :data:`DEFAULT_PARAMS`.

        Returns:
            The mutated state.
        """
        state = self.state
        state.loading = True
        state.error = None
        self.last_error = None
        output = get_output()

        try:
            body = await self.client.get_items(
                path, params=DEFAULT_PARAMS if params is None else params
            )
            response = ItemsResponse.model_validate(body)

            ranked = sort_by_score_desc(response.items)
            visible = filter_active_items(ranked, min_score=self.min_score)
            state.data = format_item_names(visible)
            state.summary = summarize(response.items)
            state.last_updated = response.fetched_at

            output.info(f"Loaded items: {', '.join(state.data) or '(none)'}")
        except ItemfetchError as exc:
            self.last_error = exc
            state.error = str(exc)
        finally:
            state.loading = False

        return state
