"""
Failure taxonomy for batch deletion.

Every failure a caller can observe from `BatchDeleter.batch_delete` is a
`BatchDeleteError` subclass with a stable `kind` and a distinct
human-readable `user_message`. Store adapters raise `StorageError`; the
transaction components translate those into the taxonomy.
"""

from __future__ import annotations


class BatchDeleteError(Exception):
    """Base exception for batch deletion failures."""

    kind = "error"
    user_message = "Batch delete failed."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.user_message)
        self.message = message or self.user_message

    def __str__(self) -> str:
        return f"{self.kind}: {self.message}"


class InputError(BatchDeleteError):
    """Rejected before any network call (empty slug list, invalid slug)."""

    kind = "input"
    user_message = "Nothing to delete: select at least one valid post."


class AuthError(BatchDeleteError):
    """No usable credential; obtain one and re-run the whole operation."""

    kind = "auth"
    user_message = "Authentication required: provide a valid token and try again."


class ResolutionError(BatchDeleteError):
    """Reading the branch head or listing artifacts failed; nothing was committed."""

    kind = "resolution"
    user_message = "Could not read the repository state; nothing was deleted."


class CommitConstructionError(BatchDeleteError):
    """Tree or commit creation was rejected; the branch is untouched."""

    kind = "commit_construction"
    user_message = "The repository rejected the deletion commit; the branch was not changed."


class ReferenceConflict(BatchDeleteError):
    """
    The branch moved since the base reference was read.

    The branch is untouched; `orphan_commit` (if any) was created but never
    made reachable. Re-running the whole pipeline is safe.
    """

    kind = "reference_conflict"
    user_message = "The branch changed while deleting; nothing was applied. Retry to delete again."

    def __init__(
        self,
        message: str | None = None,
        *,
        branch: str | None = None,
        expected: str | None = None,
        orphan_commit: str | None = None,
    ) -> None:
        super().__init__(message)
        self.branch = branch
        self.expected = expected
        self.orphan_commit = orphan_commit


class ReferenceUpdateError(BatchDeleteError):
    """The ref update failed for a reason other than a conflict; its state is unknown."""

    kind = "reference_update"
    user_message = "Updating the branch failed; check the branch state before retrying."


class StorageError(Exception):
    """Raised by store adapters when a storage call fails."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status = status

    def __str__(self) -> str:
        if self.status is not None:
            return f"{self.status}: {self.message}"
        return self.message


class StorageAuthError(StorageError):
    """The store refused the credential (HTTP 401)."""


FAILURE_KINDS = (
    InputError,
    AuthError,
    ResolutionError,
    CommitConstructionError,
    ReferenceConflict,
    ReferenceUpdateError,
)
