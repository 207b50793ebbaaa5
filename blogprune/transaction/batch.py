"""
Batch deletion transaction.

Orchestrates: read ref -> resolve -> build -> [re-read ref] -> create tree
-> create commit -> conditional ref update.

Key invariants:
- Nothing is written before every slug has been resolved
- Exactly one commit is created, whose sole parent is the base commit
- The conditional ref update is the only point where the deletion becomes
  visible; on conflict the branch is untouched
- No retries here: callers re-run the whole pipeline if they want to
"""

from __future__ import annotations

import logging
from typing import Sequence

from ..config import ArtifactLayout
from ..errors import (
    AuthError,
    BatchDeleteError,
    InputError,
    ReferenceConflict,
    ResolutionError,
    StorageAuthError,
    StorageError,
)
from ..models import AdvanceOutcome, Artifact, BaseReference
from ..planning import BatchDeleteResult, DeletePlan
from ..progress import NullProgress, Phase, ProgressEvent, ProgressSink
from ..secrets import Credential
from ..store.base import VersionStore
from .advancer import ReferenceAdvancer
from .builder import build_mutations
from .committer import TransactionCommitter, commit_message
from .resolver import ArtifactResolver, validate_slug

logger = logging.getLogger(__name__)


def _normalize_slugs(slugs: Sequence[str] | None) -> list[str]:
    if not slugs:
        raise InputError("No slugs given")
    ordered: list[str] = []
    for slug in slugs:
        validate_slug(slug)
        if slug not in ordered:
            ordered.append(slug)
    return ordered


class BatchDeleter:
    """
    Delete several posts from a branch in one commit.

    Args:
        store: Storage backend
        branch: Branch to delete from
        layout: Where post artifacts live in the tree
        progress: Sink for phase notifications
        max_workers: Parallel media listings during resolution (1 = sequential)
    """

    def __init__(
        self,
        store: VersionStore,
        *,
        branch: str = "main",
        layout: ArtifactLayout | None = None,
        progress: ProgressSink | None = None,
        max_workers: int = 1,
    ):
        self.store = store
        self.branch = branch
        self.layout = layout or ArtifactLayout()
        self.progress = progress or NullProgress()
        self.max_workers = max(1, int(max_workers))

    def _emit(self, phase: Phase, message: str, slug: str | None = None) -> None:
        self.progress.notify(ProgressEvent(phase=phase, message=message, slug=slug))

    def _read_base(self, credential: Credential) -> BaseReference:
        try:
            head = self.store.read_branch_head(credential, self.branch)
        except StorageAuthError as e:
            raise AuthError(str(e)) from e
        except StorageError as e:
            raise ResolutionError(f"Reading heads/{self.branch} failed: {e}") from e
        return BaseReference(branch=self.branch, commit=head)

    @staticmethod
    def _require_credential(credential: Credential | None) -> Credential:
        if credential is None or not credential:
            raise AuthError("No credential available")
        return credential

    # -------------------------------------------------------------------------
    # Read-only phase
    # -------------------------------------------------------------------------

    def plan(self, slugs: Sequence[str], credential: Credential | None) -> DeletePlan:
        """
        Read the branch head, resolve every slug and build the MutationSet.

        Makes no writes; used directly for dry runs.
        """
        ordered = _normalize_slugs(slugs)
        credential = self._require_credential(credential)

        self._emit("resolving_ref", f"Reading branch {self.branch}...")
        base = self._read_base(credential)
        logger.info("Base for %d post(s): heads/%s @ %s", len(ordered), base.branch, base.commit)

        resolver = ArtifactResolver(self.store, credential, self.layout, max_workers=self.max_workers)
        resolved: dict[str, frozenset[Artifact]]
        if self.max_workers > 1:
            for slug in ordered:
                self._emit("processing", f"Processing: {slug}...", slug=slug)
            resolved = resolver.resolve_many(ordered, base.commit)
        else:
            resolved = {}
            for slug in ordered:
                self._emit("processing", f"Processing: {slug}...", slug=slug)
                resolved[slug] = resolver.resolve(slug, base.commit)

        mutations = build_mutations(resolved)
        return DeletePlan(
            base=base,
            slugs=ordered,
            mutations=mutations,
            message=commit_message(ordered),
            artifacts=resolved,
        )

    # -------------------------------------------------------------------------
    # Side-effecting phase
    # -------------------------------------------------------------------------

    def execute(self, plan: DeletePlan, credential: Credential | None) -> BatchDeleteResult:
        """
        Commit `plan` and advance the branch.

        Raises:
            ReferenceConflict: If the branch moved since `plan.base` was read
            CommitConstructionError: If the store rejects the tree or commit
            ReferenceUpdateError: If the ref update fails for another reason
        """
        credential = self._require_credential(credential)
        committer = TransactionCommitter(self.store, credential)
        advancer = ReferenceAdvancer(self.store, credential)

        self._emit("creating_tree", "Creating tree...")
        current = self._read_base(credential)
        if current.commit != plan.base.commit:
            raise ReferenceConflict(
                f"heads/{self.branch} moved from {plan.base.commit} to {current.commit} during resolution",
                branch=self.branch,
                expected=plan.base.commit,
            )
        tree = committer.create_tree(plan.base, plan.mutations)

        self._emit("creating_commit", "Creating commit...")
        commit = committer.create_commit(plan.base, tree, plan.message)

        self._emit("updating_ref", f"Updating branch {self.branch}...")
        outcome = advancer.advance(self.branch, plan.base.commit, commit.sha)
        if outcome == AdvanceOutcome.CONFLICT:
            raise ReferenceConflict(
                f"heads/{self.branch} is no longer at {plan.base.commit}",
                branch=self.branch,
                expected=plan.base.commit,
                orphan_commit=commit.sha,
            )

        return BatchDeleteResult(plan=plan, commit=commit)

    def batch_delete(self, slugs: Sequence[str], credential: Credential | None) -> BatchDeleteResult:
        """
        Delete every artifact of every post in `slugs` in one commit.

        Emits a progress event per stage and a final success/failure event.
        Every failure is raised as a `BatchDeleteError` subclass.
        """
        try:
            plan = self.plan(slugs, credential)
            result = self.execute(plan, credential)
        except BatchDeleteError as e:
            logger.warning("Batch delete failed (%s): %s", e.kind, e.message)
            self._emit("failed", e.user_message)
            raise

        count = len(result.plan.slugs)
        self._emit(
            "succeeded",
            f"Deleted {count} post{'s' if count != 1 else ''}. Refresh the site once it has redeployed.",
        )
        return result


def batch_delete(
    store: VersionStore,
    slugs: Sequence[str],
    credential: Credential | None,
    *,
    branch: str = "main",
    layout: ArtifactLayout | None = None,
    progress: ProgressSink | None = None,
    max_workers: int = 1,
) -> BatchDeleteResult:
    """Convenience wrapper around `BatchDeleter.batch_delete`."""
    deleter = BatchDeleter(store, branch=branch, layout=layout, progress=progress, max_workers=max_workers)
    return deleter.batch_delete(slugs, credential)
