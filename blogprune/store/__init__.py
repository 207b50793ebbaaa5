"""Storage backends for the deletion transaction."""

from .base import VersionStore
from .github import GitHubStore
from .memory import MemoryStore

__all__ = [
    "GitHubStore",
    "MemoryStore",
    "VersionStore",
]
