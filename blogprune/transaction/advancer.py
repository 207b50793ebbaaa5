"""Conditional branch update: the transaction's only visibility point."""

from __future__ import annotations

import logging

from ..errors import AuthError, ReferenceUpdateError, StorageAuthError, StorageError
from ..models import AdvanceOutcome
from ..secrets import Credential
from ..store.base import VersionStore

logger = logging.getLogger(__name__)


class ReferenceAdvancer:
    """Compare-and-swap a branch pointer."""

    def __init__(self, store: VersionStore, credential: Credential):
        self.store = store
        self.credential = credential

    def advance(self, branch: str, expected_old: str, new_commit: str) -> AdvanceOutcome:
        """
        Move `branch` to `new_commit` only if it still points at `expected_old`.

        On CONFLICT the branch is unchanged and `new_commit` stays unreachable.

        Raises:
            ReferenceUpdateError: On any non-conflict failure; the ref state is unknown
            AuthError: If the store rejects the credential
        """
        try:
            outcome = self.store.update_branch_head(self.credential, branch, expected_old, new_commit)
        except StorageAuthError as e:
            raise AuthError(str(e)) from e
        except StorageError as e:
            raise ReferenceUpdateError(f"Updating heads/{branch} failed: {e}") from e

        if outcome == AdvanceOutcome.CONFLICT:
            logger.warning("heads/%s moved away from %s; %s left orphaned", branch, expected_old, new_commit)
        else:
            logger.info("heads/%s: %s -> %s", branch, expected_old, new_commit)
        return AdvanceOutcome(outcome)
