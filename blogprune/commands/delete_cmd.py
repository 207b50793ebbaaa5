"""Delete and connectivity commands (caller-side policy around the transaction)."""

from __future__ import annotations

import logging
from typing import Callable, Sequence

from rich.console import Console

from ..config import SiteConfig
from ..errors import AuthError, BatchDeleteError, ReferenceConflict, StorageAuthError, StorageError
from ..progress import ConsoleProgress
from ..secrets import Credential
from ..store.base import VersionStore
from ..store.github import GitHubStore
from ..transaction import BatchDeleter

logger = logging.getLogger(__name__)

TokenPrompt = Callable[[], Credential | None]


def build_store(cfg: SiteConfig) -> VersionStore:
    """GitHub store for the configured repository."""
    if not cfg.owner or not cfg.repo:
        raise ValueError("github.owner and github.repo must be configured")
    return GitHubStore.from_config(cfg.owner, cfg.repo, api_url=cfg.api_url, timeout_s=cfg.timeout_s)


def run_delete(
    cfg: SiteConfig,
    slugs: Sequence[str],
    *,
    credential: Credential | None,
    store: VersionStore | None = None,
    dry_run: bool = False,
    retries: int = 0,
    workers: int = 1,
    prompt_token: TokenPrompt | None = None,
) -> int:
    """
    Run a batch delete and report the outcome.

    Policies applied here, never inside the transaction:
    - AuthError: ask `prompt_token` once for a credential, then re-run
      the whole transaction
    - ReferenceConflict: re-run from a fresh base up to `retries` times
    """
    console = Console(stderr=True)
    store = store or build_store(cfg)
    deleter = BatchDeleter(
        store,
        branch=cfg.branch,
        layout=cfg.layout,
        progress=ConsoleProgress(console),
        max_workers=workers,
    )

    if dry_run:
        try:
            plan = deleter.plan(slugs, credential)
        except BatchDeleteError as e:
            console.print(e.user_message, style="red")
            console.print(f"  {e.message}", style="dim")
            return 1
        console.print("\n[bold]DRY RUN[/bold] - No changes", style="yellow")
        print(plan.summary())
        return 0

    prompted = False
    conflicts = 0
    while True:
        try:
            result = deleter.batch_delete(slugs, credential)
        except AuthError as e:
            if prompt_token is None or prompted:
                console.print(f"  {e.message}", style="dim")
                return 1
            prompted = True
            credential = prompt_token()
            if credential is None:
                console.print("Aborted.", style="dim")
                return 1
            continue
        except ReferenceConflict as e:
            if conflicts < retries:
                conflicts += 1
                logger.info("Conflict on heads/%s; retry %d of %d", cfg.branch, conflicts, retries)
                console.print(f"Retrying from a fresh branch head ({conflicts}/{retries})...", style="yellow")
                continue
            if e.orphan_commit:
                console.print(f"  Unreferenced commit: {e.orphan_commit}", style="dim")
            return 1
        except BatchDeleteError as e:
            console.print(f"  {e.message}", style="dim")
            return 1
        break

    console.print(f"commit: {result.commit.sha}", style="bold cyan")
    console.print(f"heads/{result.branch}: {result.previous_head[:12]} -> {result.commit.sha[:12]}", style="dim")
    return 0


def run_ping(cfg: SiteConfig, *, credential: Credential | None, store: VersionStore | None = None) -> int:
    """Read the branch head to check connectivity and credentials (non-destructive)."""
    console = Console(stderr=True)
    if credential is None:
        console.print(AuthError.user_message, style="red")
        return 1

    store = store or build_store(cfg)
    try:
        head = store.read_branch_head(credential, cfg.branch)
    except StorageAuthError as e:
        console.print(AuthError.user_message, style="red")
        console.print(f"  {e}", style="dim")
        return 1
    except StorageError as e:
        console.print(str(e), style="red")
        return 1

    console.print(f"{cfg.repo_slug}: heads/{cfg.branch} @ {head}", style="green")
    return 0
