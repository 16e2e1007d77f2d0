"""
HTTP transport for the Bitbucket Cloud REST API v2.

Authenticates using Bitbucket Cloud API tokens via HTTP Basic Auth,
where the username is the Atlassian account email and the password
is the API token.

See: https://support.atlassian.com/bitbucket-cloud/docs/api-tokens/

The pull request core never talks HTTP itself. It calls a Transport with a
method, a resource path and a RequestOptions bag, and receives the decoded
JSON payload back. HttpxTransport is the production implementation; tests
substitute an in-memory fake.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Protocol

import httpx

from bitbucket_pr.auth import BitbucketCredentials
from bitbucket_pr.errors import DecodeError, TransportError

BITBUCKET_API_BASE_URL = "https://api.bitbucket.org/2.0"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RequestOptions:
    """
    Structured request parameters, translated to the wire by the transport.

    Only the fields relevant to a given endpoint are set; everything else
    keeps its empty default and is left out of the request.
    """

    query: str = ""
    states: tuple[str, ...] = ()
    cursor: str = ""
    include: str = ""
    exclude: str = ""
    title: str = ""
    description: str = ""
    source_branch: str = ""
    destination_branch: str = ""
    reviewers: tuple[str, ...] = ()
    close_source_branch: bool | None = None
    merge_strategy: str = ""
    message: str = ""


class Transport(Protocol):
    def request(self, method: str, resource_path: str, options: RequestOptions) -> Any:
        """
        Issue one API request and return the decoded JSON payload.

        Raises:
            TransportError: On network failure or a non-2xx response.
            DecodeError: If the response body is not JSON.
        """
        ...


def _build_query_params(options: RequestOptions) -> list[tuple[str, str]]:
    # The API accepts 'state' repeatedly to select several states at once.
    query_params: list[tuple[str, str]] = [("state", state) for state in options.states]

    if options.query:
        query_params.append(("q", options.query))
    if options.include:
        query_params.append(("include", options.include))
    if options.exclude:
        query_params.append(("exclude", options.exclude))

    return query_params


def _build_json_body(options: RequestOptions) -> dict[str, Any] | None:
    body: dict[str, Any] = {}

    if options.title:
        body["title"] = options.title
    if options.description:
        body["description"] = options.description
    if options.source_branch:
        body["source"] = {"branch": {"name": options.source_branch}}
    if options.destination_branch:
        body["destination"] = {"branch": {"name": options.destination_branch}}
    if options.reviewers:
        body["reviewers"] = [{"uuid": reviewer} for reviewer in options.reviewers]
    if options.close_source_branch is not None:
        body["close_source_branch"] = options.close_source_branch
    if options.merge_strategy:
        body["merge_strategy"] = options.merge_strategy
    if options.message:
        body["message"] = options.message

    return body or None


class HttpxTransport:
    """
    Transport backed by a synchronous httpx.Client.

    Use as a context manager so the underlying connection pool is closed:

        with HttpxTransport(credentials) as transport:
            service = PullRequestService(transport)
    """

    def __init__(
        self,
        credentials: BitbucketCredentials,
        base_url: str = BITBUCKET_API_BASE_URL,
        timeout: float = 30.0,
    ) -> None:
        # Bitbucket Cloud API tokens authenticate via HTTP Basic Auth:
        # username = Atlassian account email, password = API token.
        auth = httpx.BasicAuth(
            username=credentials.email,
            password=credentials.api_token,
        )
        self._http_client = httpx.Client(base_url=base_url, auth=auth, timeout=timeout)

    def request(self, method: str, resource_path: str, options: RequestOptions) -> Any:
        # A cursor is the absolute 'next' URL from a previous page. It already
        # carries the query string, so it is requested verbatim.
        if options.cursor:
            url = options.cursor
            query_params: Sequence[tuple[str, str]] = []
        else:
            url = resource_path
            query_params = _build_query_params(options)

        json_body = _build_json_body(options)

        logger.debug("%s %s params=%s", method, url, query_params)

        try:
            response = self._http_client.request(
                method,
                url,
                params=query_params or None,
                json=json_body,
            )
        except httpx.RequestError as network_error:
            raise TransportError(None, str(network_error)) from network_error

        logger.debug("%s %s -> HTTP %d", method, url, response.status_code)

        if not response.is_success:
            raise TransportError(
                status_code=response.status_code,
                response_body=response.text,
            )

        if response.status_code == 204 or not response.content:
            return {}

        try:
            return response.json()
        except ValueError as json_error:
            raise DecodeError(
                f"Response from {url} is not valid JSON: {json_error}"
            ) from json_error

    def close(self) -> None:
        self._http_client.close()

    def __enter__(self) -> HttpxTransport:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        self.close()
