"""Create the single deletion commit on top of a base reference."""

from __future__ import annotations

import logging
from typing import Sequence

from ..errors import AuthError, CommitConstructionError, StorageAuthError, StorageError
from ..models import BaseReference, Commit, MutationSet
from ..secrets import Credential
from ..store.base import VersionStore

logger = logging.getLogger(__name__)


def commit_message(slugs: Sequence[str]) -> str:
    """Singular message for one post, aggregate count for several."""
    if len(slugs) == 1:
        return f"Delete post: {slugs[0]}"
    return f"Delete {len(slugs)} posts"


class TransactionCommitter:
    """Build the tree and commit for a MutationSet. Never touches refs."""

    def __init__(self, store: VersionStore, credential: Credential):
        self.store = store
        self.credential = credential

    def create_tree(self, base: BaseReference, mutations: MutationSet) -> str:
        try:
            return self.store.create_tree(self.credential, list(mutations), base.commit)
        except StorageAuthError as e:
            raise AuthError(str(e)) from e
        except StorageError as e:
            raise CommitConstructionError(f"Tree creation failed: {e}") from e

    def create_commit(self, base: BaseReference, tree: str, message: str) -> Commit:
        parents = (base.commit,)
        try:
            sha = self.store.create_commit(self.credential, tree, list(parents), message)
        except StorageAuthError as e:
            raise AuthError(str(e)) from e
        except StorageError as e:
            raise CommitConstructionError(f"Commit creation failed: {e}") from e
        logger.info("Created commit %s (tree %s, parent %s)", sha, tree, base.commit)
        return Commit(sha=sha, tree=tree, parents=parents, message=message)

    def commit(self, base: BaseReference, mutations: MutationSet, message: str) -> Commit:
        """
        Apply every deletion against the tree of `base.commit` and commit it.

        The resulting commit's sole parent is `base.commit`.

        Raises:
            CommitConstructionError: If the store rejects the tree or commit
            AuthError: If the store rejects the credential
        """
        tree = self.create_tree(base, mutations)
        return self.create_commit(base, tree, message)
