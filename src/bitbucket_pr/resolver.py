"""
Resolution of user input to the single pull request to act on.

Users either name a pull request by ID or expect the tool to pick the one
opened from the branch they have checked out. Branch lookup uses the
Bitbucket query language on source.branch.name and, when several pull
requests share the branch, takes the first one in server order.
"""

from __future__ import annotations

from bitbucket_pr.endpoints import pull_request_path, pull_requests_path
from bitbucket_pr.errors import NotFoundError, TransportError
from bitbucket_pr.models import ListPullRequests, PullRequest
from bitbucket_pr.normalizer import decode_pull_request, decode_pull_requests
from bitbucket_pr.transport import RequestOptions, Transport
from bitbucket_pr.vcs import RepositoryRef


def source_branch_query(source_branch: str) -> str:
    """
    Build the query filter selecting pull requests opened from source_branch.

    The branch name is quoted as a literal but not escaped. A branch name
    containing a double quote produces a malformed filter.
    """
    return f'source.branch.name = "{source_branch}"'


class PullRequestResolver:
    def __init__(self, transport: Transport) -> None:
        self._transport = transport

    def fetch(self, repo: RepositoryRef, pull_request_id: int) -> PullRequest:
        """
        Fetch one pull request by ID.

        Raises:
            NotFoundError: If the API answers 404 for this ID.
            TransportError: For any other request failure.
            DecodeError: If the payload has an unexpected shape.
        """
        try:
            payload = self._transport.request(
                "GET",
                pull_request_path(repo, pull_request_id),
                RequestOptions(),
            )
        except TransportError as transport_error:
            if transport_error.is_not_found:
                raise NotFoundError(
                    f"Pull request #{pull_request_id} not found in {repo.full_name}"
                ) from transport_error
            raise

        return decode_pull_request(payload)

    def find_by_source_branch(
        self,
        repo: RepositoryRef,
        source_branch: str,
    ) -> ListPullRequests:
        """Return the first page of pull requests opened from source_branch."""
        payload = self._transport.request(
            "GET",
            pull_requests_path(repo),
            RequestOptions(query=source_branch_query(source_branch)),
        )
        return decode_pull_requests(payload)

    def resolve(
        self,
        repo: RepositoryRef,
        explicit_id: int | None = None,
        source_branch: str | None = None,
    ) -> PullRequest:
        """
        Determine the pull request to act on.

        An explicit ID always wins. Otherwise the pull requests opened from
        source_branch are listed and the first one, in the order the server
        returned them, is fetched in full. No attempt is made to pick the
        "right" one when several match; callers that need certainty should
        ask for an explicit ID.

        Args:
            repo: Repository to search.
            explicit_id: Pull request ID given by the user, if any.
            source_branch: Branch to look up when no ID is given.

        Returns:
            The resolved pull request.

        Raises:
            NotFoundError: If the ID does not exist or no pull request was
                opened from source_branch.
            ValueError: If neither explicit_id nor source_branch is given.
        """
        if explicit_id is not None:
            return self.fetch(repo, explicit_id)

        if not source_branch:
            raise ValueError("Either explicit_id or source_branch is required")

        matches = self.find_by_source_branch(repo, source_branch)
        if not matches.values:
            raise NotFoundError(f"No pull request on branch '{source_branch}'")

        return self.fetch(repo, matches.values[0].id)
