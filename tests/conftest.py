"""Pytest configuration and fixtures."""

from __future__ import annotations

import pytest

from blogprune.config import ArtifactLayout, SiteConfig
from blogprune.progress import ProgressEvent
from blogprune.secrets import Credential
from blogprune.store.memory import MemoryStore

TOKEN = "test-token"


class RecordingProgress:
    """Progress sink that keeps every event."""

    def __init__(self) -> None:
        self.events: list[ProgressEvent] = []

    def notify(self, event: ProgressEvent) -> None:
        self.events.append(event)

    @property
    def phases(self) -> list[str]:
        return [e.phase for e in self.events]


@pytest.fixture
def credential() -> Credential:
    return Credential(token=TOKEN, ref="test")


@pytest.fixture
def layout() -> ArtifactLayout:
    return ArtifactLayout()


@pytest.fixture
def site_config(layout: ArtifactLayout) -> SiteConfig:
    return SiteConfig(owner="alice", repo="blog", branch="main", layout=layout)


@pytest.fixture
def store() -> MemoryStore:
    """Store with `main` holding two posts and an unrelated file."""
    s = MemoryStore(accepted_tokens={TOKEN})
    s.commit_files(
        "main",
        {
            "README.md": "site readme",
            "content/post-a.md": "# A",
            "content/post-a.mdx": "# A (mdx)",
            "media/post-a/img.png": b"\x89PNG a",
            "content/post-b.md": "# B",
            "content/post-c.md": "# C",
            "media/post-c/cover.jpg": b"jpg c",
            "media/post-c/gallery/1.jpg": b"jpg c1",
            "media/post-cc/keep.png": b"other post",
        },
        message="seed",
    )
    return s


@pytest.fixture
def progress() -> RecordingProgress:
    return RecordingProgress()
