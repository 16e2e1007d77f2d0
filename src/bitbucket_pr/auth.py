"""
Credential resolution for Bitbucket Cloud API authentication.

Bitbucket Cloud API tokens are the modern replacement for app passwords.
They use HTTP Basic Auth with the Atlassian account email as the username
and the API token as the password.

See: https://support.atlassian.com/bitbucket-cloud/docs/api-tokens/

Resolves credentials using a priority chain: CLI arguments take precedence
over environment variables, which take precedence over the configuration
file. Raises CredentialError with actionable messages when credentials
cannot be resolved.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from bitbucket_pr.config import Settings
from bitbucket_pr.errors import BitbucketPrError

BITBUCKET_EMAIL_ENV_VAR = "BITBUCKET_EMAIL"
BITBUCKET_API_TOKEN_ENV_VAR = "BITBUCKET_API_TOKEN"


class CredentialError(BitbucketPrError):
    """
    Raised when Bitbucket credentials cannot be resolved.

    The message includes actionable instructions for the user to provide
    credentials via CLI arguments, environment variables or the config file.
    """


@dataclass(frozen=True)
class BitbucketCredentials:
    """Immutable container for Bitbucket Cloud API token credentials."""

    email: str
    api_token: str


def resolve_credentials(
    cli_email: str | None,
    cli_api_token: str | None,
    settings: Settings | None = None,
) -> BitbucketCredentials:
    """
    Resolve Bitbucket credentials from CLI arguments, environment or config.

    Priority order:
        1. CLI arguments (--email, --api-token)
        2. Environment variables (BITBUCKET_EMAIL, BITBUCKET_API_TOKEN)
        3. Configuration file keys (email, api_token)

    Each value is resolved independently, so the email may come from the
    config file while the token comes from the environment.

    Args:
        cli_email: Atlassian account email provided via CLI --email flag, or None.
        cli_api_token: API token provided via CLI --api-token flag, or None.
        settings: Loaded configuration file settings, or None.

    Returns:
        BitbucketCredentials with resolved email and api_token.

    Raises:
        CredentialError: If either email or api_token cannot be resolved
            from any source.
    """
    config_email = settings.email if settings is not None else None
    config_api_token = settings.api_token if settings is not None else None

    email = cli_email or os.environ.get(BITBUCKET_EMAIL_ENV_VAR) or config_email
    api_token = (
        cli_api_token or os.environ.get(BITBUCKET_API_TOKEN_ENV_VAR) or config_api_token
    )

    missing_fields: list[str] = []

    if not email:
        missing_fields.append("email")
    if not api_token:
        missing_fields.append("API token")

    if missing_fields:
        missing_description = " and ".join(missing_fields)
        raise CredentialError(
            f"Missing Bitbucket {missing_description}. "
            f"Provide credentials via CLI flags (--email, --api-token), "
            f"environment variables ({BITBUCKET_EMAIL_ENV_VAR}, {BITBUCKET_API_TOKEN_ENV_VAR}) "
            f"or the configuration file (email, api_token)."
        )

    # At this point both values are guaranteed to be non-empty strings.
    assert email is not None
    assert api_token is not None

    return BitbucketCredentials(email=email, api_token=api_token)
