"""
In-process content-addressed tree/commit store.

Objects are keyed by the sha256 of their canonical serialization, so equal
content dedupes to the same id. Trees are flat `path -> blob id` mappings.
Only branch pointers are mutable, and they change solely through the
compare-and-swap in `update_branch_head`.

Used for tests and for exercising the transaction without a remote.
"""

from __future__ import annotations

import hashlib
import itertools
import json
import threading
from typing import Any, Iterable, Mapping, Sequence

from ..errors import StorageAuthError, StorageError
from ..models import AdvanceOutcome, Commit, MutationEntry
from ..secrets import Credential


def compute_hash(content: bytes | str | dict[str, Any]) -> str:
    """
    Compute sha256 hash of content.

    Dicts are hashed via canonical JSON for deterministic ids.
    """
    if isinstance(content, dict):
        content = json.dumps(content, sort_keys=True, separators=(",", ":"))
    if isinstance(content, str):
        content = content.encode("utf-8")
    return hashlib.sha256(content).hexdigest()


def validate_path(path: str) -> None:
    """Reject paths the tree primitive cannot represent."""
    if not path or not isinstance(path, str):
        raise StorageError("Invalid tree path: empty", status=422)
    if path.startswith("/") or path.endswith("/"):
        raise StorageError(f"Invalid tree path: {path!r}", status=422)
    for segment in path.split("/"):
        if segment in ("", ".", ".."):
            raise StorageError(f"Invalid tree path: {path!r}", status=422)


class MemoryStore:
    """
    Content-addressed store with named branches.

    Args:
        accepted_tokens: If given, only credentials carrying one of these
            tokens are accepted; anything else fails with a 401.
    """

    def __init__(self, *, accepted_tokens: Iterable[str] | None = None):
        self._blobs: dict[str, bytes] = {}
        self._trees: dict[str, dict[str, str]] = {}
        self._commits: dict[str, Commit] = {}
        self._refs: dict[str, str] = {}
        self._lock = threading.Lock()
        self._seq = itertools.count(1)
        self._accepted = set(accepted_tokens) if accepted_tokens is not None else None
        self.calls: list[str] = []

        # The empty tree always exists
        self._empty_tree = self._put_tree({})

    # -------------------------------------------------------------------------
    # Object primitives
    # -------------------------------------------------------------------------

    def _put_tree(self, entries: Mapping[str, str]) -> str:
        mapping = dict(sorted(entries.items()))
        tree_id = compute_hash({"type": "tree", "entries": mapping})
        self._trees.setdefault(tree_id, mapping)
        return tree_id

    def _check(self, credential: Credential | None) -> None:
        if self._accepted is None:
            return
        if credential is None or credential.token not in self._accepted:
            raise StorageAuthError("Bad credentials", status=401)

    def _tree_of(self, commit: str) -> dict[str, str]:
        found = self._commits.get(commit)
        if found is None:
            raise StorageError(f"Commit not found: {commit}", status=404)
        return self._trees[found.tree]

    def write_blob(self, data: bytes | str) -> str:
        """Store blob content and return its id (idempotent)."""
        if isinstance(data, str):
            data = data.encode("utf-8")
        blob_id = compute_hash(data)
        self._blobs.setdefault(blob_id, data)
        return blob_id

    # -------------------------------------------------------------------------
    # Seeding and inspection (no credential; local helpers)
    # -------------------------------------------------------------------------

    def commit_files(
        self,
        branch: str,
        files: Mapping[str, bytes | str],
        message: str = "seed",
        *,
        remove: Iterable[str] = (),
    ) -> str:
        """
        Commit `files` on top of the current head of `branch` and advance it.

        Creates the branch if it does not exist. Returns the new commit id.
        """
        with self._lock:
            parent = self._refs.get(branch)
            base = dict(self._tree_of(parent)) if parent else {}
            for path in remove:
                base.pop(path, None)
            for path, data in files.items():
                validate_path(path)
                base[path] = self.write_blob(data)
            tree_id = self._put_tree(base)
            commit_id = self._new_commit(tree_id, (parent,) if parent else (), message)
            self._refs[branch] = commit_id
            return commit_id

    def head(self, branch: str) -> str | None:
        return self._refs.get(branch)

    def get_commit(self, commit: str) -> Commit | None:
        return self._commits.get(commit)

    def paths_at(self, commit: str) -> set[str]:
        return set(self._tree_of(commit))

    def tree_entries(self, tree: str) -> dict[str, str]:
        return dict(self._trees[tree])

    def is_reachable(self, branch: str, commit: str) -> bool:
        """True if `commit` is the head of `branch` or one of its ancestors."""
        pending = [self._refs[branch]] if branch in self._refs else []
        seen: set[str] = set()
        while pending:
            current = pending.pop()
            if current == commit:
                return True
            if current in seen:
                continue
            seen.add(current)
            found = self._commits.get(current)
            if found is not None:
                pending.extend(found.parents)
        return False

    def _new_commit(self, tree: str, parents: tuple[str, ...], message: str) -> str:
        # seq stands in for the author timestamp: identical trees and parents
        # still yield distinct commits
        commit_id = compute_hash(
            {
                "type": "commit",
                "tree": tree,
                "parents": list(parents),
                "message": message,
                "seq": next(self._seq),
            }
        )
        self._commits[commit_id] = Commit(sha=commit_id, tree=tree, parents=parents, message=message)
        return commit_id

    # -------------------------------------------------------------------------
    # VersionStore
    # -------------------------------------------------------------------------

    def read_branch_head(self, credential: Credential, branch: str) -> str:
        self.calls.append("read_branch_head")
        self._check(credential)
        head = self._refs.get(branch)
        if head is None:
            raise StorageError(f"Branch not found: {branch}", status=404)
        return head

    def list_paths(self, credential: Credential, root_prefix: str, at_commit: str) -> list[str]:
        self.calls.append("list_paths")
        self._check(credential)
        prefix = root_prefix.strip("/") + "/"
        return sorted(p for p in self._tree_of(at_commit) if p.startswith(prefix))

    def create_tree(
        self,
        credential: Credential,
        deletions: Sequence[MutationEntry],
        base_commit: str,
    ) -> str:
        self.calls.append("create_tree")
        self._check(credential)
        if base_commit not in self._commits:
            raise StorageError(f"Base commit not found: {base_commit}", status=422)

        entries = dict(self._tree_of(base_commit))
        seen: set[str] = set()
        for entry in deletions:
            validate_path(entry.path)
            if entry.path in seen:
                raise StorageError(f"Duplicate tree path: {entry.path}", status=422)
            seen.add(entry.path)
            if entry.sha is None:
                entries.pop(entry.path, None)
            elif entry.sha in self._blobs:
                entries[entry.path] = entry.sha
            else:
                raise StorageError(f"Blob not found: {entry.sha}", status=422)

        with self._lock:
            return self._put_tree(entries)

    def create_commit(
        self,
        credential: Credential,
        tree: str,
        parents: Sequence[str],
        message: str,
    ) -> str:
        self.calls.append("create_commit")
        self._check(credential)
        if tree not in self._trees:
            raise StorageError(f"Tree not found: {tree}", status=422)
        for parent in parents:
            if parent not in self._commits:
                raise StorageError(f"Parent commit not found: {parent}", status=422)
        with self._lock:
            return self._new_commit(tree, tuple(parents), message)

    def update_branch_head(
        self,
        credential: Credential,
        branch: str,
        expected_old: str,
        new: str,
    ) -> AdvanceOutcome:
        self.calls.append("update_branch_head")
        self._check(credential)
        if new not in self._commits:
            raise StorageError(f"Commit not found: {new}", status=422)
        with self._lock:
            if self._refs.get(branch) != expected_old:
                return AdvanceOutcome.CONFLICT
            self._refs[branch] = new
            return AdvanceOutcome.SUCCESS
