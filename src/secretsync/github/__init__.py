"""GitHub Actions secrets API transport."""

from secretsync.github.client import GitHubClient

__all__ = ["GitHubClient"]
