import pytest

from bitbucket_pr.errors import DecodeError, TransportError
from bitbucket_pr.models import PullRequestState
from bitbucket_pr.pull_requests import PullRequestService
from bitbucket_pr.transport import RequestOptions
from bitbucket_pr.vcs import RepositoryRef
from tests.fakes import (
    PULL_REQUESTS_PATH,
    FakeTransport,
    page_payload,
    pull_request_payload,
)

COMMITS_PATH = "repositories/acme/widgets/commits"
NEXT_PAGE = "https://api.bitbucket.org/2.0/repositories/acme/widgets/pullrequests?page=2"


def test_list_passes_states(transport: FakeTransport, repo: RepositoryRef) -> None:
    transport.add("GET", PULL_REQUESTS_PATH, page_payload([pull_request_payload(1)]))

    page = PullRequestService(transport).list(
        repo, [PullRequestState.OPEN.value, PullRequestState.MERGED.value]
    )

    assert [pull_request.id for pull_request in page.values] == [1]
    assert transport.calls == [
        ("GET", PULL_REQUESTS_PATH, RequestOptions(states=("OPEN", "MERGED")))
    ]


def test_list_all_follows_next_cursor(transport: FakeTransport, repo: RepositoryRef) -> None:
    transport.add(
        "GET",
        PULL_REQUESTS_PATH,
        page_payload([pull_request_payload(1)], next_url=NEXT_PAGE),
    )
    transport.add("GET", NEXT_PAGE, page_payload([pull_request_payload(2)], page=2))

    pull_requests = PullRequestService(transport).list_all(repo)

    assert [pull_request.id for pull_request in pull_requests] == [1, 2]
    assert transport.calls[1] == ("GET", NEXT_PAGE, RequestOptions(cursor=NEXT_PAGE))


def test_iter_list_pages_fetches_first_page_only_until_consumed(
    transport: FakeTransport,
    repo: RepositoryRef,
) -> None:
    transport.add(
        "GET",
        PULL_REQUESTS_PATH,
        page_payload([pull_request_payload(1)], next_url=NEXT_PAGE),
    )
    transport.add("GET", NEXT_PAGE, page_payload([pull_request_payload(2)], page=2))

    pages = PullRequestService(transport).iter_list_pages(repo)
    next(pages)

    assert len(transport.calls) == 1
    assert [page.page for page in pages] == [2]


def test_view_decodes_pull_request(transport: FakeTransport, repo: RepositoryRef) -> None:
    transport.add("GET", f"{PULL_REQUESTS_PATH}/4", pull_request_payload(4, title="Hello"))

    assert PullRequestService(transport).view(repo, 4).title == "Hello"


def test_view_surfaces_transport_error_unchanged(
    transport: FakeTransport,
    repo: RepositoryRef,
) -> None:
    error = TransportError(401, "Unauthorized")
    transport.add("GET", f"{PULL_REQUESTS_PATH}/4", error)

    with pytest.raises(TransportError) as exc_info:
        PullRequestService(transport).view(repo, 4)

    assert exc_info.value is error


def test_view_surfaces_decode_error(transport: FakeTransport, repo: RepositoryRef) -> None:
    transport.add("GET", f"{PULL_REQUESTS_PATH}/4", pull_request_payload(4, comment_count="2"))

    with pytest.raises(DecodeError):
        PullRequestService(transport).view(repo, 4)


def test_resolve_by_source_branch(transport: FakeTransport, repo: RepositoryRef) -> None:
    transport.add("GET", PULL_REQUESTS_PATH, page_payload([pull_request_payload(6)]))

    page = PullRequestService(transport).resolve_by_source_branch(repo, "feature/x")

    assert page.values[0].id == 6
    assert transport.calls[0][2].query == 'source.branch.name = "feature/x"'


def test_create_sends_all_fields(transport: FakeTransport, repo: RepositoryRef) -> None:
    transport.add("POST", PULL_REQUESTS_PATH, pull_request_payload(10, title="New"))

    pull_request = PullRequestService(transport).create(
        repo,
        source_branch="feature/x",
        destination_branch="main",
        title="New",
        body="Body",
        reviewers=["{uuid-1}", "{uuid-2}"],
        close_source_branch=True,
    )

    assert pull_request.id == 10
    assert transport.calls == [
        (
            "POST",
            PULL_REQUESTS_PATH,
            RequestOptions(
                title="New",
                description="Body",
                source_branch="feature/x",
                destination_branch="main",
                reviewers=("{uuid-1}", "{uuid-2}"),
                close_source_branch=True,
            ),
        )
    ]


def test_merge_posts_to_merge_endpoint(transport: FakeTransport, repo: RepositoryRef) -> None:
    transport.add("POST", f"{PULL_REQUESTS_PATH}/10/merge", pull_request_payload(10, state="MERGED"))

    merged = PullRequestService(transport).merge(repo, 10, merge_strategy="squash")

    assert merged.state == PullRequestState.MERGED
    assert transport.calls[0][2] == RequestOptions(merge_strategy="squash")


def test_decline_posts_to_decline_endpoint(transport: FakeTransport, repo: RepositoryRef) -> None:
    transport.add(
        "POST", f"{PULL_REQUESTS_PATH}/10/decline", pull_request_payload(10, state="DECLINED")
    )

    assert PullRequestService(transport).decline(repo, 10).state == "DECLINED"


def test_statuses(transport: FakeTransport, repo: RepositoryRef) -> None:
    transport.add(
        "GET",
        f"{PULL_REQUESTS_PATH}/10/statuses",
        page_payload([{"state": "FAILED", "name": "lint", "key": "lint"}]),
    )

    statuses = PullRequestService(transport).statuses(repo, 10)

    assert [(status.state, status.name) for status in statuses.values] == [("FAILED", "lint")]


def test_commits(transport: FakeTransport, repo: RepositoryRef) -> None:
    transport.add(
        "GET",
        f"{PULL_REQUESTS_PATH}/10/commits",
        page_payload([{"hash": "abc", "message": "One"}, {"hash": "def", "message": "Two"}]),
    )

    commits = PullRequestService(transport).commits(repo, 10)

    assert [commit.hash for commit in commits.values] == ["abc", "def"]


def test_default_title_and_body_from_branch_commits(
    transport: FakeTransport,
    repo: RepositoryRef,
) -> None:
    transport.add(
        "GET",
        COMMITS_PATH,
        page_payload([{"message": "Add X\nwith details"}, {"message": "Add Y"}]),
    )

    title, body = PullRequestService(transport).default_title_and_body(
        repo, "feature/x", "main"
    )

    assert (title, body) == ("feature/x", "- Add X\n- Add Y\n")
    assert transport.calls[0][2] == RequestOptions(include="feature/x", exclude="main")
