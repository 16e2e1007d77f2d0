"""Resource paths of the Bitbucket Cloud API v2 endpoints used by this package."""

from __future__ import annotations

from bitbucket_pr.vcs import RepositoryRef


def repository_path(repo: RepositoryRef) -> str:
    return f"repositories/{repo.workspace}/{repo.slug}"


def pull_requests_path(repo: RepositoryRef) -> str:
    return f"{repository_path(repo)}/pullrequests"


def pull_request_path(repo: RepositoryRef, pull_request_id: int) -> str:
    return f"{pull_requests_path(repo)}/{pull_request_id}"


def commits_path(repo: RepositoryRef) -> str:
    return f"{repository_path(repo)}/commits"
