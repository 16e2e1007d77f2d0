from typing import Any

import pytest

from bitbucket_pr.errors import DecodeError, TransportError
from bitbucket_pr.models import ListPullRequests
from bitbucket_pr.normalizer import decode_pull_requests
from bitbucket_pr.pagination import collect_values, iter_pages, iter_values
from tests.fakes import page_payload, pull_request_payload

PAGE_2 = "https://api.bitbucket.org/2.0/repositories/acme/widgets/pullrequests?page=2"
PAGE_3 = "https://api.bitbucket.org/2.0/repositories/acme/widgets/pullrequests?page=3"


class RecordingFetcher:
    def __init__(self, pages: dict[str, Any]) -> None:
        self._pages = pages
        self.requested: list[str] = []

    def __call__(self, cursor: str) -> Any:
        self.requested.append(cursor)
        page = self._pages[cursor]
        if isinstance(page, Exception):
            raise page
        return page


def _three_pages() -> tuple[ListPullRequests, RecordingFetcher]:
    first_page = decode_pull_requests(
        page_payload([pull_request_payload(1), pull_request_payload(2)], next_url=PAGE_2)
    )
    fetcher = RecordingFetcher(
        {
            PAGE_2: page_payload([pull_request_payload(3)], next_url=PAGE_3, page=2),
            PAGE_3: page_payload([pull_request_payload(4), pull_request_payload(5)], page=3),
        }
    )
    return first_page, fetcher


def test_single_page_is_returned_as_is() -> None:
    first_page = decode_pull_requests(page_payload([pull_request_payload(1)]))
    fetcher = RecordingFetcher({})

    assert list(iter_pages(first_page, fetcher)) == [first_page]
    assert fetcher.requested == []


def test_collects_values_across_pages_in_order() -> None:
    first_page, fetcher = _three_pages()

    pull_requests = collect_values(first_page, fetcher)

    assert [pull_request.id for pull_request in pull_requests] == [1, 2, 3, 4, 5]
    assert fetcher.requested == [PAGE_2, PAGE_3]


def test_pages_are_decoded_into_the_first_page_type() -> None:
    first_page, fetcher = _three_pages()

    pages = list(iter_pages(first_page, fetcher))

    assert [type(page) for page in pages] == [ListPullRequests] * 3
    assert [page.page for page in pages] == [1, 2, 3]


def test_pages_are_fetched_lazily() -> None:
    first_page, fetcher = _three_pages()

    pages = iter_pages(first_page, fetcher)
    assert next(pages) is first_page
    assert fetcher.requested == []

    next(pages)
    assert fetcher.requested == [PAGE_2]


def test_fetch_failure_propagates_after_yielded_values() -> None:
    first_page = decode_pull_requests(
        page_payload([pull_request_payload(1)], next_url=PAGE_2)
    )
    fetcher = RecordingFetcher({PAGE_2: TransportError(500, "boom")})

    consumed = []
    with pytest.raises(TransportError):
        for pull_request in iter_values(first_page, fetcher):
            consumed.append(pull_request.id)

    assert consumed == [1]


def test_malformed_continuation_page_raises_decode_error() -> None:
    first_page = decode_pull_requests(
        page_payload([pull_request_payload(1)], next_url=PAGE_2)
    )
    fetcher = RecordingFetcher({PAGE_2: {"values": "not a list"}})

    with pytest.raises(DecodeError):
        collect_values(first_page, fetcher)
