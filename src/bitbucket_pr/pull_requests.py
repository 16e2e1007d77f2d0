"""
Public pull request operations.

PullRequestService is what a presentation layer talks to. Each operation
builds RequestOptions, delegates to the injected Transport and normalizes the
payload it gets back. Transport errors propagate unchanged; nothing is
retried here.
"""

from __future__ import annotations

import builtins
from collections.abc import Iterable, Iterator, Sequence
from typing import Any

from bitbucket_pr.content import default_title_and_body
from bitbucket_pr.endpoints import commits_path, pull_request_path, pull_requests_path
from bitbucket_pr.models import Commits, ListPullRequests, PullRequest, Statuses
from bitbucket_pr.normalizer import (
    decode_commits,
    decode_pull_request,
    decode_pull_requests,
    decode_statuses,
)
from bitbucket_pr.pagination import collect_values, iter_pages
from bitbucket_pr.resolver import PullRequestResolver
from bitbucket_pr.transport import RequestOptions, Transport
from bitbucket_pr.vcs import RepositoryRef


class PullRequestService:
    def __init__(self, transport: Transport) -> None:
        self._transport = transport
        self._resolver = PullRequestResolver(transport)

    def _fetch_cursor(self, cursor: str) -> Any:
        return self._transport.request("GET", cursor, RequestOptions(cursor=cursor))

    def list(
        self,
        repo: RepositoryRef,
        states: Iterable[str] = (),
    ) -> ListPullRequests:
        """
        Fetch the first page of pull requests.

        With no states the API applies its own default, which is OPEN only.
        """
        payload = self._transport.request(
            "GET",
            pull_requests_path(repo),
            RequestOptions(states=tuple(states)),
        )
        return decode_pull_requests(payload)

    def iter_list_pages(
        self,
        repo: RepositoryRef,
        states: Iterable[str] = (),
    ) -> Iterator[ListPullRequests]:
        """Lazily yield every page of pull requests, fetching on demand."""
        return iter_pages(self.list(repo, states), self._fetch_cursor)

    def list_all(
        self,
        repo: RepositoryRef,
        states: Iterable[str] = (),
    ) -> builtins.list[PullRequest]:
        """Fetch every page of pull requests and return them as one list."""
        return collect_values(self.list(repo, states), self._fetch_cursor)

    def view(self, repo: RepositoryRef, pull_request_id: int) -> PullRequest:
        payload = self._transport.request(
            "GET",
            pull_request_path(repo, pull_request_id),
            RequestOptions(),
        )
        return decode_pull_request(payload)

    def resolve(
        self,
        repo: RepositoryRef,
        explicit_id: int | None = None,
        source_branch: str | None = None,
    ) -> PullRequest:
        return self._resolver.resolve(repo, explicit_id, source_branch)

    def resolve_by_source_branch(
        self,
        repo: RepositoryRef,
        source_branch: str,
    ) -> ListPullRequests:
        return self._resolver.find_by_source_branch(repo, source_branch)

    def create(
        self,
        repo: RepositoryRef,
        source_branch: str,
        destination_branch: str,
        title: str,
        body: str = "",
        reviewers: Sequence[str] = (),
        close_source_branch: bool = False,
    ) -> PullRequest:
        """
        Open a pull request from source_branch into destination_branch.

        Args:
            repo: Repository to open the pull request in.
            source_branch: Branch holding the changes.
            destination_branch: Branch to merge into.
            title: Pull request title.
            body: Pull request description (markdown).
            reviewers: Reviewer account UUIDs.
            close_source_branch: Delete the source branch once merged.

        Returns:
            The created pull request, as echoed back by the API.
        """
        options = RequestOptions(
            title=title,
            description=body,
            source_branch=source_branch,
            destination_branch=destination_branch,
            reviewers=tuple(reviewers),
            close_source_branch=close_source_branch,
        )
        payload = self._transport.request("POST", pull_requests_path(repo), options)
        return decode_pull_request(payload)

    def merge(
        self,
        repo: RepositoryRef,
        pull_request_id: int,
        merge_strategy: str = "",
        close_source_branch: bool | None = None,
        message: str = "",
    ) -> PullRequest:
        options = RequestOptions(
            merge_strategy=merge_strategy,
            close_source_branch=close_source_branch,
            message=message,
        )
        payload = self._transport.request(
            "POST",
            f"{pull_request_path(repo, pull_request_id)}/merge",
            options,
        )
        return decode_pull_request(payload)

    def decline(self, repo: RepositoryRef, pull_request_id: int) -> PullRequest:
        payload = self._transport.request(
            "POST",
            f"{pull_request_path(repo, pull_request_id)}/decline",
            RequestOptions(),
        )
        return decode_pull_request(payload)

    def statuses(self, repo: RepositoryRef, pull_request_id: int) -> Statuses:
        payload = self._transport.request(
            "GET",
            f"{pull_request_path(repo, pull_request_id)}/statuses",
            RequestOptions(),
        )
        return decode_statuses(payload)

    def commits(self, repo: RepositoryRef, pull_request_id: int) -> Commits:
        payload = self._transport.request(
            "GET",
            f"{pull_request_path(repo, pull_request_id)}/commits",
            RequestOptions(),
        )
        return decode_commits(payload)

    def branch_commits(
        self,
        repo: RepositoryRef,
        source_branch: str,
        destination_branch: str,
    ) -> Commits:
        """Commits reachable from source_branch but not from destination_branch."""
        payload = self._transport.request(
            "GET",
            commits_path(repo),
            RequestOptions(include=source_branch, exclude=destination_branch),
        )
        return decode_commits(payload)

    def default_title_and_body(
        self,
        repo: RepositoryRef,
        source_branch: str,
        destination_branch: str,
    ) -> tuple[str, str]:
        """
        Suggest a title and body for a pull request from source_branch.

        Only the first page of branch commits is considered, matching what the
        API returns for a single request.
        """
        commits = self.branch_commits(repo, source_branch, destination_branch)
        return default_title_and_body(commits.values, source_branch)
