"""
Error kinds raised by the pull request core and its collaborators.

The core never retries or logs. Each operation raises the first error it
encounters and leaves the decision to retry, abort or prompt to the caller.
"""

from __future__ import annotations


class BitbucketPrError(Exception):
    """Base class for every error raised by this package."""


class TransportError(BitbucketPrError):
    """
    Raised when a request to the Bitbucket API fails.

    Covers both non-2xx HTTP responses (status_code is set) and network-level
    failures such as DNS errors or refused connections (status_code is None).
    """

    def __init__(self, status_code: int | None, response_body: str) -> None:
        self.status_code = status_code
        self.response_body = response_body
        if status_code is None:
            message = f"Bitbucket API request failed: {response_body}"
        else:
            message = f"Bitbucket API error (HTTP {status_code}): {response_body}"
        super().__init__(message)

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404


class DecodeError(BitbucketPrError):
    """Raised when a response payload does not match the expected shape."""


class NotFoundError(BitbucketPrError):
    """Raised when no pull request matches an identifier or source branch."""


class VcsError(BitbucketPrError):
    """Raised when the local branch or repository identity is unavailable."""


class ConfigError(BitbucketPrError):
    """Raised when the configuration file cannot be read or is invalid."""
