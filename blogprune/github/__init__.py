"""GitHub REST access."""

from .http import GitHubHttpClient, GitHubHttpConfig

__all__ = ["GitHubHttpClient", "GitHubHttpConfig"]
