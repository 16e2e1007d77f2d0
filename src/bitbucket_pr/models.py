"""
Pydantic models for Bitbucket Cloud pull request API responses.

These models map directly to the Bitbucket Cloud REST API v2 response shapes.
See: https://developer.atlassian.com/cloud/bitbucket/rest/api-group-pullrequests/

Every field is optional on the wire. An absent (or null) field decodes to the
zero value of its type: "" for strings, 0 for numbers, False for booleans,
an empty list or mapping for collections, and a zero-value instance for
nested objects. Unknown keys are ignored. A value of the wrong type is a
validation error, never silently coerced.
"""

from __future__ import annotations

import enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class PullRequestState(str, enum.Enum):
    """
    Enum of the pull request states Bitbucket Cloud documents.

    PullRequest.state is kept as a plain string so that states added by the
    service later pass through untouched. The str mixin lets members compare
    equal to those raw strings.
    """

    OPEN = "OPEN"
    MERGED = "MERGED"
    DECLINED = "DECLINED"
    SUPERSEDED = "SUPERSEDED"


class WireModel(BaseModel):
    """Immutable, strictly typed base for every decoded API object."""

    model_config = ConfigDict(strict=True, frozen=True, extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def drop_null_fields(cls, data: Any) -> Any:
        # Bitbucket sends explicit nulls (e.g. "merge_commit": null) for
        # fields that have no value yet. Treat them exactly like absent keys.
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data


class Link(WireModel):
    """A single link object, e.g. the value under links["html"]."""

    href: str = ""
    name: str = ""


class Account(WireModel):
    """Display identity of a pull request author or reviewer."""

    display_name: str = ""
    nickname: str = ""
    uuid: str = ""
    account_id: str = ""
    type: str = ""
    links: dict[str, Link] = Field(default_factory=dict)


class Branch(WireModel):
    name: str = ""


class Commit(WireModel):
    hash: str = ""
    message: str = ""
    date: str = ""
    type: str = ""
    links: dict[str, Link] = Field(default_factory=dict)

    @property
    def summary(self) -> str:
        """First line of the commit message."""
        return self.message.split("\n", 1)[0]


class Repository(WireModel):
    full_name: str = ""
    name: str = ""
    uuid: str = ""
    type: str = ""


class Resource(WireModel):
    """
    One side (source or destination) of a pull request.

    The branch may be a zero-value Branch when the source branch was deleted
    after the pull request was merged or declined.
    """

    branch: Branch = Field(default_factory=Branch)
    commit: Commit = Field(default_factory=Commit)
    repository: Repository = Field(default_factory=Repository)


class PullRequest(WireModel):
    """
    A single pull request as returned by the Bitbucket Cloud API.

    Maps to GET /2.0/repositories/{workspace}/{repo_slug}/pullrequests/{id}
    and to the objects in the 'values' array of the list endpoint. The list
    endpoint returns a partial projection (no reviewers, for instance), which
    decodes fine thanks to the zero-value defaults.
    """

    id: int = 0
    title: str = ""
    state: str = ""
    type: str = ""
    source: Resource = Field(default_factory=Resource)
    destination: Resource = Field(default_factory=Resource)
    description: str = ""
    author: Account = Field(default_factory=Account)
    created_on: str = ""
    updated_on: str = ""
    close_source_branch: bool = False
    comment_count: int = 0
    task_count: int = 0
    merge_commit: Commit = Field(default_factory=Commit)
    reviewers: list[Account] = Field(default_factory=list)
    links: dict[str, Link] = Field(default_factory=dict)

    @property
    def html_url(self) -> str:
        """Web URL of the pull request, or "" when the API omitted it."""
        html_link = self.links.get("html")
        return html_link.href if html_link is not None else ""


class Status(WireModel):
    """A build or check status reported against a pull request's commits."""

    type: str = ""
    uuid: str = ""
    key: str = ""
    refname: str = ""
    url: str = ""
    state: str = ""
    name: str = ""
    description: str = ""
    created_on: str = ""
    updated_on: str = ""
    links: dict[str, Link] = Field(default_factory=dict)


class Page(WireModel):
    """
    Fields shared by every paginated response wrapper.

    The 'next' field contains the URL for the next page of results.
    When 'next' is empty, there are no more pages to fetch.
    """

    size: int = 0
    page: int = 0
    pagelen: int = 0
    next: str = ""
    previous: str = ""


class ListPullRequests(Page):
    values: list[PullRequest] = Field(default_factory=list)


class Commits(Page):
    values: list[Commit] = Field(default_factory=list)


class Statuses(Page):
    values: list[Status] = Field(default_factory=list)
