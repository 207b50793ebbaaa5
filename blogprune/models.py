"""Data models for posts, artifacts and the deletion transaction."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Iterator, Literal

# Kinds of physical artifact owned by a post
ArtifactKind = Literal["content", "media"]


@dataclass(frozen=True, order=True)
class Artifact:
    """A single tree path that must be removed when its post is deleted."""

    path: str
    kind: ArtifactKind = "content"


@dataclass(frozen=True)
class MutationEntry:
    """One tree instruction. `sha=None` deletes the path."""

    path: str
    sha: str | None = None

    @property
    def is_deletion(self) -> bool:
        return self.sha is None


@dataclass
class MutationSet:
    """
    Ordered collection of tree instructions.

    Paths are unique within a set; the underlying tree primitive treats
    duplicate entries as a contract violation, so `add` refuses them.
    """

    entries: list[MutationEntry] = field(default_factory=list)
    _paths: set[str] = field(init=False, default_factory=set, repr=False, compare=False)

    def __post_init__(self) -> None:
        seen: set[str] = set()
        for entry in self.entries:
            if entry.path in seen:
                raise ValueError(f"Duplicate path in mutation set: {entry.path}")
            seen.add(entry.path)
        self._paths = seen

    def add(self, entry: MutationEntry) -> None:
        if entry.path in self._paths:
            raise ValueError(f"Duplicate path in mutation set: {entry.path}")
        self.entries.append(entry)
        self._paths.add(entry.path)

    def delete(self, path: str) -> bool:
        """Append a deletion for `path`; returns False if it is already present."""
        if path in self._paths:
            return False
        self.add(MutationEntry(path=path))
        return True

    def __contains__(self, path: object) -> bool:
        return path in self._paths

    def __iter__(self) -> Iterator[MutationEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def paths(self) -> list[str]:
        return [e.path for e in self.entries]


@dataclass(frozen=True)
class BaseReference:
    """The (branch, commit) pair a transaction assumes as its starting point."""

    branch: str
    commit: str


@dataclass(frozen=True)
class Commit:
    """An immutable commit record."""

    sha: str
    tree: str
    parents: tuple[str, ...]
    message: str


class AdvanceOutcome(str, Enum):
    """Result of a conditional branch update."""

    SUCCESS = "success"
    CONFLICT = "conflict"


@dataclass
class Post:
    """A post as listed in the archive view."""

    slug: str
    title: str
    pub_date: datetime
    path: Path
    description: str | None = None

    @property
    def year(self) -> int:
        return self.pub_date.year

    @property
    def month(self) -> int:
        return self.pub_date.month
