"""
Plan/result types separating the read-only phase of a batch delete from
the side-effecting phase.

A `DeletePlan` is what a dry run shows: the base reference, the commit
message and every path that would be removed. Executing it produces a
`BatchDeleteResult`.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .models import Artifact, BaseReference, Commit, MutationSet


@dataclass
class DeletePlan:
    """Read-only outcome of resolving and building a batch delete."""

    base: BaseReference
    slugs: list[str]
    mutations: MutationSet
    message: str
    artifacts: dict[str, frozenset[Artifact]] = field(default_factory=dict)

    @property
    def media_count(self) -> int:
        return sum(1 for arts in self.artifacts.values() for a in arts if a.kind == "media")

    def summary(self) -> str:
        """Human-readable summary of what would be done."""
        lines = [
            "Batch Delete Plan",
            f"  Branch: {self.base.branch} @ {self.base.commit[:12]}",
            f"  Commit message: {self.message}",
            f"  Posts: {len(self.slugs)}",
            f"  Paths to delete: {len(self.mutations)} ({self.media_count} media)",
        ]
        for path in self.mutations.paths:
            lines.append(f"    - {path}")
        return "\n".join(lines)


@dataclass
class BatchDeleteResult:
    """Result of an applied batch delete."""

    plan: DeletePlan
    commit: Commit

    @property
    def branch(self) -> str:
        return self.plan.base.branch

    @property
    def previous_head(self) -> str:
        return self.plan.base.commit
