"""
Default title and body for a new pull request, derived from commit history.
"""

from __future__ import annotations

from collections.abc import Sequence

from bitbucket_pr.models import Commit


def default_title_and_body(
    commits: Sequence[Commit],
    source_branch: str,
) -> tuple[str, str]:
    """
    Derive a default pull request title and body from the branch's commits.

    - No commits: the branch name is the title and the body is empty.
    - One commit: its first line is the title, the rest of the message
      (stripped) is the body.
    - Several commits: the branch name is the title and the body lists the
      first line of every commit, in the given order, as "- " bullets.

    Args:
        commits: Commits on the source branch that are not on the destination.
        source_branch: Name of the branch the pull request is opened from.

    Returns:
        (title, body) tuple.
    """
    if not commits:
        return source_branch, ""

    if len(commits) == 1:
        headline, _, rest = commits[0].message.partition("\n")
        return headline, rest.strip()

    body = "".join(f"- {commit.summary}\n" for commit in commits)
    return source_branch, body
