"""
Storage protocol for content-addressed tree/commit stores.

Stores provide the primitives the deletion transaction is built from.
Every call receives the caller's credential explicitly. Failures are
raised as `StorageError` (or `StorageAuthError`); a conditional ref update
that loses the race is a normal `AdvanceOutcome.CONFLICT` result, not an
error.
"""

from __future__ import annotations

from typing import Iterable, Protocol, Sequence, runtime_checkable

from ..models import AdvanceOutcome, MutationEntry
from ..secrets import Credential


@runtime_checkable
class VersionStore(Protocol):
    """Primitive operations on a branch-based object store."""

    def read_branch_head(self, credential: Credential, branch: str) -> str:
        """Return the commit hash the branch currently points at."""
        ...

    def list_paths(self, credential: Credential, root_prefix: str, at_commit: str) -> Iterable[str]:
        """
        List every file path under `root_prefix/` in the tree of `at_commit`.

        Returns an empty iterable when the prefix does not exist; never None.
        """
        ...

    def create_tree(
        self,
        credential: Credential,
        deletions: Sequence[MutationEntry],
        base_commit: str,
    ) -> str:
        """
        Create a tree from the tree of `base_commit` with `deletions` applied.

        Deleting a path absent from the base tree is a no-op.
        """
        ...

    def create_commit(
        self,
        credential: Credential,
        tree: str,
        parents: Sequence[str],
        message: str,
    ) -> str:
        """Create a commit object and return its hash."""
        ...

    def update_branch_head(
        self,
        credential: Credential,
        branch: str,
        expected_old: str,
        new: str,
    ) -> AdvanceOutcome:
        """Move `branch` to `new` only if it currently points at `expected_old`."""
        ...
