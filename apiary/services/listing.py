"""Cursor-paginated listings with a ``next`` link.

Thin orchestration over ``EntityStore.list_page``: the store decides what is
on the page and whether another page exists; the lister turns the opaque next
cursor into a link built from the request's own base URL.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar
from urllib.parse import urlencode

from apiary.db.models import Base
from apiary.db.store import EntityStore
from apiary.results import Failure, Result

T = TypeVar("T", bound=Base)


@dataclass
class Listing(Generic[T]):
    """A page of entities ready to render."""

    items: list[T]
    total: int
    next: str | None = None


def next_link(base_url: str, cursor: str) -> str:
    """Return ``<base_url>?cursor=<cursor>`` (any query string on base_url is dropped)."""
    return f"{base_url.split('?', 1)[0]}?{urlencode({'cursor': cursor})}"


class PaginatedLister(Generic[T]):
    """Produces pages of one entity kind."""

    def __init__(self, store: EntityStore[T]) -> None:
        self.store = store

    async def list(
        self,
        filters: dict[str, Any],
        page_size: int,
        cursor: str | None,
        base_url: str,
    ) -> Result[Listing[T]]:
        """Return one page of entities matching *filters*.

        ``total`` is the full filtered count on every page; ``next`` is only
        set when the store reports more results after this page.
        """
        page = await self.store.list_page(filters, page_size, cursor)
        if isinstance(page, Failure):
            return page

        listing = Listing(items=page.items, total=page.total)
        if page.next_cursor is not None:
            listing.next = next_link(base_url, page.next_cursor)
        return listing
