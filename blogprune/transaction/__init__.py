"""
Batch deletion transaction: resolve -> build -> commit -> advance.
"""

from __future__ import annotations

from .advancer import ReferenceAdvancer
from .batch import BatchDeleter, batch_delete
from .builder import build_mutations
from .committer import TransactionCommitter, commit_message
from .resolver import ArtifactResolver, validate_slug

__all__ = [
    # Components
    "ArtifactResolver",
    "ReferenceAdvancer",
    "TransactionCommitter",
    "build_mutations",
    "commit_message",
    "validate_slug",
    # Orchestration
    "BatchDeleter",
    "batch_delete",
]
