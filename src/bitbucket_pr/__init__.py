"""
Bitbucket Cloud pull request client.

Resolves the pull request for the current branch, synthesizes default
titles and bodies from commit history, and normalizes Bitbucket Cloud
REST API v2 payloads into immutable pydantic models.
"""

__version__ = "0.1.0"
