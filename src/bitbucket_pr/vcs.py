"""
Local git lookups: current branch and Bitbucket repository identity.

Shells out to the git binary of the current working directory. Every
failure (git missing, not a repository, detached HEAD, remote not hosted on
bitbucket.org) is raised as VcsError.
"""

from __future__ import annotations

import re
import subprocess
from dataclasses import dataclass

from bitbucket_pr.errors import VcsError

BITBUCKET_HOST = "bitbucket.org"

# Matches the three remote URL flavours Bitbucket hands out:
#   git@bitbucket.org:workspace/slug.git
#   ssh://git@bitbucket.org/workspace/slug.git
#   https://user@bitbucket.org/workspace/slug.git
_REMOTE_URL_PATTERN = re.compile(
    r"^(?:(?:ssh|https?|git)://)?(?:[^@/]+@)?(?P<host>[^:/]+)(?::\d+)?[:/]"
    r"(?P<workspace>[^/]+)/(?P<slug>[^/]+?)(?:\.git)?/?$"
)


@dataclass(frozen=True)
class RepositoryRef:
    """Identifies a Bitbucket repository by workspace and repository slug."""

    workspace: str
    slug: str

    @property
    def full_name(self) -> str:
        return f"{self.workspace}/{self.slug}"

    @classmethod
    def from_full_name(cls, full_name: str) -> RepositoryRef:
        """Parse a 'workspace/slug' string, as accepted by --repository."""
        workspace, separator, slug = full_name.partition("/")
        if not separator or not workspace or not slug or "/" in slug:
            raise VcsError(
                f"Invalid repository '{full_name}'. Expected 'workspace/slug'."
            )
        return cls(workspace=workspace, slug=slug)


def parse_remote_url(url: str) -> RepositoryRef:
    """
    Extract the workspace and slug from a Bitbucket git remote URL.

    Raises:
        VcsError: If the URL cannot be parsed or does not point at bitbucket.org.
    """
    match = _REMOTE_URL_PATTERN.match(url.strip())
    if match is None:
        raise VcsError(f"Cannot parse git remote URL '{url}'")

    host = match.group("host").lower()
    if host != BITBUCKET_HOST:
        raise VcsError(
            f"Remote '{url}' is hosted on {host}, not {BITBUCKET_HOST}. "
            "Are you sure this is a Bitbucket repository?"
        )

    return RepositoryRef(workspace=match.group("workspace"), slug=match.group("slug"))


def _run_git(*args: str) -> str:
    try:
        completed = subprocess.run(
            ["git", *args],
            capture_output=True,
            text=True,
            check=False,
        )
    except FileNotFoundError as missing_git:
        raise VcsError("git executable not found") from missing_git

    if completed.returncode != 0:
        raise VcsError(f"git {' '.join(args)} failed: {completed.stderr.strip()}")

    return completed.stdout.strip()


def current_branch_name() -> str:
    branch_name = _run_git("rev-parse", "--abbrev-ref", "HEAD")
    if branch_name == "HEAD":
        raise VcsError("HEAD is detached; check out a branch first")
    return branch_name


def remote_url(remote: str = "origin") -> str:
    return _run_git("remote", "get-url", remote)


def current_repository(remote: str = "origin") -> RepositoryRef:
    """Identify the Bitbucket repository the given remote points to."""
    return parse_remote_url(remote_url(remote))
