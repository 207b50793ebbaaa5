"""Accumulate per-artifact deletions into a single MutationSet."""

from __future__ import annotations

import logging
from typing import Iterable, Mapping

from ..models import Artifact, MutationSet

logger = logging.getLogger(__name__)


def build_mutations(resolved: Mapping[str, Iterable[Artifact]]) -> MutationSet:
    """
    One deletion per artifact path, ordered by slug then path.

    Slug order is the mapping's iteration order. A path shared by two posts
    is emitted once, for the first post that owns it.
    """
    mutations = MutationSet()
    for slug, artifacts in resolved.items():
        for path in sorted({a.path for a in artifacts}):
            if not mutations.delete(path):
                logger.warning("Path %s of %s already scheduled for deletion", path, slug)
    return mutations
