"""
Tests for the delete and ping command functions.

These call `run_delete` / `run_ping` directly; the click wiring is covered
in test_cli.py.
"""

from __future__ import annotations

import pytest

from blogprune.commands.delete_cmd import build_store, run_delete, run_ping
from blogprune.config import SiteConfig
from blogprune.secrets import Credential
from blogprune.store.github import GitHubStore
from blogprune.store.memory import MemoryStore


class ConflictingStore(MemoryStore):
    """Moves `main` after each of the first `races` commits is created."""

    def __init__(self, races: int, **kwargs):
        super().__init__(**kwargs)
        self.races = races

    def create_commit(self, credential, tree, parents, message):
        sha = super().create_commit(credential, tree, parents, message)
        if self.races > 0:
            self.races -= 1
            self.commit_files("main", {f"content/late-{self.races}.md": "# late"}, message="concurrent edit")
        return sha


def test_delete_success(site_config, store, credential, capsys) -> None:
    base = store.head("main")

    result = run_delete(site_config, ["post-a"], credential=credential, store=store)

    assert result == 0
    captured = capsys.readouterr()
    assert "Processing: post-a..." in captured.err
    assert store.head("main") in captured.err
    assert store.get_commit(store.head("main")).parents == (base,)


def test_dry_run_prints_plan(site_config, store, credential, capsys) -> None:
    base = store.head("main")

    result = run_delete(site_config, ["post-a", "post-c"], credential=credential, store=store, dry_run=True)

    assert result == 0
    captured = capsys.readouterr()
    assert "Batch Delete Plan" in captured.out
    assert "Paths to delete: 7 (3 media)" in captured.out
    assert "DRY RUN" in captured.err
    assert store.head("main") == base


def test_dry_run_reports_errors(site_config, store, capsys) -> None:
    result = run_delete(site_config, [], credential=Credential(token="x"), store=store, dry_run=True)

    assert result == 1
    assert "Nothing to delete" in capsys.readouterr().err


def test_prompt_is_used_once(site_config, store, credential) -> None:
    calls = []

    def prompt():
        calls.append(1)
        return credential

    result = run_delete(site_config, ["post-a"], credential=None, store=store, prompt_token=prompt)

    assert result == 0
    assert calls == [1]


def test_prompt_returning_bad_token_gives_up(site_config, store) -> None:
    calls = []

    def prompt():
        calls.append(1)
        return Credential(token="still-wrong")

    base = store.head("main")
    result = run_delete(site_config, ["post-a"], credential=Credential(token="wrong"), store=store, prompt_token=prompt)

    assert result == 1
    assert calls == [1]
    assert store.head("main") == base


def test_cancelled_prompt(site_config, store, capsys) -> None:
    result = run_delete(site_config, ["post-a"], credential=None, store=store, prompt_token=lambda: None)

    assert result == 1
    assert "Aborted." in capsys.readouterr().err
    assert store.calls == []


@pytest.mark.parametrize("races,retries,expected", [(1, 0, 1), (1, 1, 0), (2, 1, 1), (2, 2, 0)])
def test_conflict_retries(site_config, credential, races, retries, expected) -> None:
    store = ConflictingStore(races, accepted_tokens={credential.token})
    store.commit_files("main", {"content/post-a.md": "# A"})

    result = run_delete(site_config, ["post-a"], credential=credential, store=store, retries=retries)

    assert result == expected
    remaining = store.paths_at(store.head("main"))
    assert ("content/post-a.md" in remaining) == (expected == 1)


def test_conflict_reports_orphan(site_config, credential, capsys) -> None:
    store = ConflictingStore(1, accepted_tokens={credential.token})
    store.commit_files("main", {"content/post-a.md": "# A"})

    assert run_delete(site_config, ["post-a"], credential=credential, store=store) == 1
    assert "Unreferenced commit:" in capsys.readouterr().err


def test_build_store_requires_repo() -> None:
    with pytest.raises(ValueError):
        build_store(SiteConfig())


def test_build_store(site_config) -> None:
    store = build_store(site_config)
    assert isinstance(store, GitHubStore)
    assert store.client.repo_url == "https://api.github.com/repos/alice/blog"


def test_ping(site_config, store, credential, capsys) -> None:
    assert run_ping(site_config, credential=credential, store=store) == 0
    assert "alice/blog" in capsys.readouterr().err


def test_ping_rejected_token(site_config, store, capsys) -> None:
    assert run_ping(site_config, credential=Credential(token="nope"), store=store) == 1
    assert "Authentication required" in capsys.readouterr().err


def test_ping_missing_branch(store, credential) -> None:
    cfg = SiteConfig(owner="alice", repo="blog", branch="gone")
    assert run_ping(cfg, credential=credential, store=store) == 1
