"""
VersionStore backed by the GitHub Git Data API.

Notes on GitHub semantics:
- Creating a tree with `sha: null` for a path missing from the base tree is
  rejected by the API, so absent paths are pruned before submission.
- `PATCH git/refs` has no expected-old-value parameter. The conditional
  update re-reads the ref and refuses to move it if it differs, then sends a
  non-forced update; GitHub's fast-forward check rejects a ref that moved
  in between (422 "Update is not a fast forward"), which is reported as a
  conflict. Any other 422 is an ordinary storage error.
"""

from __future__ import annotations

import logging
import posixpath
from typing import Any, Sequence

from ..errors import StorageError
from ..github.http import GitHubHttpClient, GitHubHttpConfig
from ..models import AdvanceOutcome, MutationEntry
from ..secrets import Credential

logger = logging.getLogger(__name__)

BLOB_MODE = "100644"

# GitHub's 422 message for a non-forced update that would lose commits
NON_FAST_FORWARD = "not a fast forward"


class GitHubStore:
    """Git Data API implementation of the `VersionStore` protocol."""

    def __init__(self, client: GitHubHttpClient):
        self.client = client

    @classmethod
    def from_config(cls, owner: str, repo: str, *, api_url: str, timeout_s: float) -> "GitHubStore":
        return cls(GitHubHttpClient(GitHubHttpConfig(owner=owner, repo=repo, api_url=api_url, timeout_s=timeout_s)))

    # -------------------------------------------------------------------------
    # Tree walking
    # -------------------------------------------------------------------------

    def _root_tree(self, token: str, commit: str) -> str:
        payload = self.client.get_commit(token, commit)
        try:
            return str(payload["tree"]["sha"])
        except (KeyError, TypeError) as e:
            raise StorageError(f"Malformed commit payload for {commit}") from e

    def _entries(self, token: str, tree_sha: str, *, recursive: bool) -> tuple[list[dict[str, Any]], bool]:
        payload = self.client.get_tree(token, tree_sha, recursive=recursive)
        entries = payload.get("tree") or []
        return [e for e in entries if isinstance(e, dict)], bool(payload.get("truncated"))

    def _subtree_sha(self, token: str, root_tree: str, directory: str) -> str | None:
        """Walk one level at a time down to `directory`; None if it does not exist."""
        current = root_tree
        for segment in [s for s in directory.split("/") if s]:
            entries, _ = self._entries(token, current, recursive=False)
            match = next(
                (e for e in entries if e.get("path") == segment and e.get("type") == "tree"),
                None,
            )
            if match is None:
                return None
            current = str(match["sha"])
        return current

    def _blob_paths(self, token: str, tree_sha: str, base: str) -> list[str]:
        """All blob paths below `tree_sha`, prefixed with `base`."""
        entries, truncated = self._entries(token, tree_sha, recursive=True)
        if not truncated:
            return [
                posixpath.join(base, str(e["path"])) if base else str(e["path"])
                for e in entries
                if e.get("type") == "blob"
            ]

        # Recursive listing was cut off; walk level by level instead
        logger.debug("Tree %s truncated; walking %s level by level", tree_sha, base or "/")
        paths: list[str] = []
        pending = [(tree_sha, base)]
        while pending:
            sha, prefix = pending.pop()
            level, _ = self._entries(token, sha, recursive=False)
            for e in level:
                full = posixpath.join(prefix, str(e["path"])) if prefix else str(e["path"])
                if e.get("type") == "blob":
                    paths.append(full)
                elif e.get("type") == "tree":
                    pending.append((str(e["sha"]), full))
        return paths

    def _present(self, token: str, root_tree: str, paths: list[str]) -> set[str]:
        """Subset of `paths` that exist as blobs in `root_tree`."""
        present: set[str] = set()
        by_dir: dict[str, set[str]] = {}
        for path in paths:
            by_dir.setdefault(posixpath.dirname(path), set()).add(posixpath.basename(path))

        for directory, names in sorted(by_dir.items()):
            sub = self._subtree_sha(token, root_tree, directory)
            if sub is None:
                continue
            entries, _ = self._entries(token, sub, recursive=False)
            for e in entries:
                if e.get("type") == "blob" and e.get("path") in names:
                    present.add(posixpath.join(directory, str(e["path"])) if directory else str(e["path"]))
        return present

    # -------------------------------------------------------------------------
    # VersionStore
    # -------------------------------------------------------------------------

    def read_branch_head(self, credential: Credential, branch: str) -> str:
        payload = self.client.get_ref(credential.token, branch)
        try:
            return str(payload["object"]["sha"])
        except (KeyError, TypeError) as e:
            raise StorageError(f"Malformed ref payload for heads/{branch}") from e

    def list_paths(self, credential: Credential, root_prefix: str, at_commit: str) -> list[str]:
        token = credential.token
        prefix = root_prefix.strip("/")
        root = self._root_tree(token, at_commit)
        sub = self._subtree_sha(token, root, prefix)
        if sub is None:
            return []
        return sorted(self._blob_paths(token, sub, prefix))

    def create_tree(
        self,
        credential: Credential,
        deletions: Sequence[MutationEntry],
        base_commit: str,
    ) -> str:
        token = credential.token
        root = self._root_tree(token, base_commit)

        delete_paths = [e.path for e in deletions if e.sha is None]
        present = self._present(token, root, delete_paths)
        items: list[dict[str, Any]] = []
        for entry in deletions:
            if entry.sha is None and entry.path not in present:
                logger.debug("Skipping absent path %s", entry.path)
                continue
            items.append({"path": entry.path, "mode": BLOB_MODE, "type": "blob", "sha": entry.sha})

        if not items:
            # Nothing to remove: the base tree already is the result
            return root

        payload = self.client.create_tree(token, root, items)
        try:
            return str(payload["sha"])
        except (KeyError, TypeError) as e:
            raise StorageError("Malformed tree payload") from e

    def create_commit(
        self,
        credential: Credential,
        tree: str,
        parents: Sequence[str],
        message: str,
    ) -> str:
        payload = self.client.create_commit(credential.token, message, tree, list(parents))
        try:
            return str(payload["sha"])
        except (KeyError, TypeError) as e:
            raise StorageError("Malformed commit payload") from e

    def update_branch_head(
        self,
        credential: Credential,
        branch: str,
        expected_old: str,
        new: str,
    ) -> AdvanceOutcome:
        current = self.read_branch_head(credential, branch)
        if current != expected_old:
            return AdvanceOutcome.CONFLICT
        try:
            self.client.update_ref(credential.token, branch, new, force=False)
        except StorageError as e:
            if e.status == 422 and NON_FAST_FORWARD in e.message.lower():
                logger.debug("Ref update for %s rejected as non-fast-forward: %s", branch, e)
                return AdvanceOutcome.CONFLICT
            raise
        return AdvanceOutcome.SUCCESS
