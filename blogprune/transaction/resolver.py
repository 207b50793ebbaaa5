"""
Artifact resolution: which tree paths belong to a post.

A post owns its canonical content files (one per configured extension,
included whether or not they exist) plus every file under its media
directory. Resolution only reads from the store.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Sequence

from ..config import ArtifactLayout
from ..errors import AuthError, InputError, ResolutionError, StorageAuthError, StorageError
from ..models import Artifact
from ..secrets import Credential
from ..store.base import VersionStore

logger = logging.getLogger(__name__)


def validate_slug(slug: object) -> str:
    """Return `slug` if it is usable as a path component, else raise InputError."""
    if not isinstance(slug, str) or not slug.strip():
        raise InputError(f"Invalid slug: {slug!r}")
    if slug != slug.strip() or "/" in slug or "\\" in slug or slug in (".", ".."):
        raise InputError(f"Invalid slug: {slug!r}")
    return slug


class ArtifactResolver:
    """Enumerate the artifacts of posts at a given commit."""

    def __init__(
        self,
        store: VersionStore,
        credential: Credential,
        layout: ArtifactLayout | None = None,
        *,
        max_workers: int = 1,
    ):
        self.store = store
        self.credential = credential
        self.layout = layout or ArtifactLayout()
        self.max_workers = max(1, int(max_workers))

    def resolve(self, slug: str, at_commit: str) -> frozenset[Artifact]:
        """
        Resolve every artifact of `slug` in the tree of `at_commit`.

        Raises:
            InputError: If the slug is empty or would escape its namespace
            AuthError: If the store rejects the credential
            ResolutionError: If listing the media directory fails
        """
        validate_slug(slug)
        artifacts = {Artifact(path=p, kind="content") for p in self.layout.content_paths(slug)}

        prefix = self.layout.media_prefix(slug)
        try:
            media = list(self.store.list_paths(self.credential, prefix, at_commit))
        except StorageAuthError as e:
            raise AuthError(str(e)) from e
        except StorageError as e:
            raise ResolutionError(f"Listing {prefix} failed: {e}") from e

        artifacts.update(Artifact(path=p, kind="media") for p in media)
        logger.debug("Resolved %s: %d media file(s)", slug, len(media))
        return frozenset(artifacts)

    def resolve_many(self, slugs: Sequence[str], at_commit: str) -> dict[str, frozenset[Artifact]]:
        """
        Resolve all `slugs`; the result preserves input order.

        Any failure aborts the whole call.
        """
        for slug in slugs:
            validate_slug(slug)

        if self.max_workers == 1 or len(slugs) < 2:
            return {slug: self.resolve(slug, at_commit) for slug in slugs}

        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(slugs))) as pool:
            futures = [pool.submit(self.resolve, slug, at_commit) for slug in slugs]
            # result() re-raises the first failure in input order
            return {slug: fut.result() for slug, fut in zip(slugs, futures)}
