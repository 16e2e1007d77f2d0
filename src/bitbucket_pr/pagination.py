"""
Lazy traversal of paginated Bitbucket API responses.

Bitbucket list endpoints return one page at a time. Each page carries a
'next' URL pointing at the following page; the last page has none. The
walker follows those cursors on demand, normalizing each page as it is
consumed, and stops at the first page whose 'next' is empty.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Any, TypeVar

from bitbucket_pr.models import Page
from bitbucket_pr.normalizer import decode

PageT = TypeVar("PageT", bound=Page)

# Fetches the raw JSON payload a continuation cursor points to.
FetchRawPage = Callable[[str], Any]


def iter_pages(first_page: PageT, fetch_raw: FetchRawPage) -> Iterator[PageT]:
    """
    Yield first_page and every page that follows it.

    Pages after the first are fetched only when the consumer asks for them,
    and are decoded into the same page type as first_page. The iterator is
    forward-only; call iter_pages again (with a freshly fetched first page)
    to start over.

    Args:
        first_page: Already decoded first page of the result set.
        fetch_raw: Callable returning the raw payload for a 'next' cursor.

    Yields:
        Decoded pages, in server order.

    Raises:
        TransportError: If fetching a continuation page fails. Pages yielded
            before the failure stay with the consumer.
        DecodeError: If a continuation page has an unexpected shape.
    """
    page_type = type(first_page)
    current_page = first_page

    yield current_page

    while current_page.next:
        raw_page = fetch_raw(current_page.next)
        current_page = decode(page_type, raw_page)
        yield current_page


def iter_values(first_page: Page, fetch_raw: FetchRawPage) -> Iterator[Any]:
    """Yield every entity across all pages, page order then within-page order."""
    for page in iter_pages(first_page, fetch_raw):
        yield from page.values  # type: ignore[attr-defined]


def collect_values(first_page: Page, fetch_raw: FetchRawPage) -> list[Any]:
    """Fetch every remaining page and return all entities as one list."""
    return list(iter_values(first_page, fetch_raw))
