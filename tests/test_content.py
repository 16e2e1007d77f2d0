import pytest

from bitbucket_pr.content import default_title_and_body
from bitbucket_pr.models import Commit


def _commits(*messages: str) -> list[Commit]:
    return [Commit(hash=f"h{index}", message=message) for index, message in enumerate(messages)]


def test_no_commits_uses_branch_name() -> None:
    assert default_title_and_body([], "feature/x") == ("feature/x", "")


def test_single_commit_splits_headline_and_body() -> None:
    assert default_title_and_body(_commits("Fix bug\n\nDetails here"), "feature/x") == (
        "Fix bug",
        "Details here",
    )


def test_single_one_line_commit_has_empty_body() -> None:
    assert default_title_and_body(_commits("Fix bug"), "feature/x") == ("Fix bug", "")


def test_single_commit_body_is_stripped() -> None:
    title, body = default_title_and_body(_commits("Fix bug\n\n  line one\nline two\n\n"), "b")

    assert title == "Fix bug"
    assert body == "line one\nline two"


def test_several_commits_list_first_lines() -> None:
    assert default_title_and_body(_commits("Add X\nmore about X", "Add Y"), "feature/x") == (
        "feature/x",
        "- Add X\n- Add Y\n",
    )


@pytest.mark.parametrize("count", [2, 3, 5])
def test_several_commits_keep_given_order(count: int) -> None:
    messages = [f"Commit {index}\n\nbody {index}" for index in range(count)]

    title, body = default_title_and_body(_commits(*messages), "topic")

    assert title == "topic"
    assert body.splitlines() == [f"- Commit {index}" for index in range(count)]
