"""CLI tests using click's CliRunner with an injected in-memory store."""

from __future__ import annotations

import pytest
from click.testing import CliRunner

from blogprune.cli import cli
from blogprune.store.memory import MemoryStore

TOKEN_ENV = "BLOGPRUNE_TEST_TOKEN"


class ConcurrentWriterStore(MemoryStore):
    """Moves `main` once, right after the first commit is created."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.raced = False

    def create_commit(self, credential, tree, parents, message):
        sha = super().create_commit(credential, tree, parents, message)
        if not self.raced:
            self.raced = True
            self.commit_files("main", {"content/late.md": "# late"}, message="concurrent edit")
        return sha


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def token_env(monkeypatch, credential):
    monkeypatch.setenv(TOKEN_ENV, credential.token)
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)


def _invoke(runner, args, site_config, store, **kwargs):
    return runner.invoke(cli, args, obj={"config": site_config, "store": store}, **kwargs)


# -----------------------------------------------------------------------------
# delete
# -----------------------------------------------------------------------------


def test_delete_with_yes(runner, site_config, store, token_env):
    base = store.head("main")

    result = _invoke(runner, ["delete", "post-a", "--yes", "--token-ref", f"env:{TOKEN_ENV}"], site_config, store)

    assert result.exit_code == 0, result.output
    head = store.head("main")
    assert head != base
    assert head in result.output
    assert "content/post-a.md" not in store.paths_at(head)


def test_delete_confirmation_declined(runner, site_config, store, token_env):
    base = store.head("main")

    result = _invoke(runner, ["delete", "post-a", "--token-ref", f"env:{TOKEN_ENV}"], site_config, store, input="n\n")

    assert result.exit_code == 1
    assert "Aborted." in result.output
    assert store.head("main") == base
    assert store.calls == []


def test_delete_confirmation_accepted(runner, site_config, store, token_env):
    result = _invoke(
        runner, ["delete", "post-a", "post-b", "--token-ref", f"env:{TOKEN_ENV}"], site_config, store, input="y\n"
    )

    assert result.exit_code == 0, result.output
    assert store.get_commit(store.head("main")).message == "Delete 2 posts"


def test_dry_run_makes_no_writes(runner, site_config, store, token_env):
    base = store.head("main")

    result = _invoke(runner, ["delete", "post-a", "--dry-run", "--token-ref", f"env:{TOKEN_ENV}"], site_config, store)

    assert result.exit_code == 0, result.output
    assert "Batch Delete Plan" in result.output
    assert "media/post-a/img.png" in result.output
    assert store.head("main") == base
    assert "create_tree" not in store.calls


def test_missing_token_prompts_once(runner, site_config, store, token_env, credential):
    result = _invoke(runner, ["delete", "post-a"], site_config, store, input=f"y\n{credential.token}\n")

    assert result.exit_code == 0, result.output
    assert "content/post-a.md" not in store.paths_at(store.head("main"))


def test_missing_token_with_empty_prompt_aborts(runner, site_config, store, token_env):
    base = store.head("main")

    result = _invoke(runner, ["delete", "post-a", "--yes"], site_config, store, input="\n")

    assert result.exit_code == 1
    assert store.head("main") == base
    assert store.calls == []


def test_no_prompt_fails_without_calls(runner, site_config, store, token_env):
    result = _invoke(runner, ["delete", "post-a", "--yes", "--no-prompt"], site_config, store)

    assert result.exit_code == 1
    assert store.calls == []


def test_rejected_token_reprompts_then_fails(runner, site_config, store, monkeypatch):
    monkeypatch.setenv(TOKEN_ENV, "revoked")
    base = store.head("main")

    result = _invoke(
        runner, ["delete", "post-a", "--yes", "--token-ref", f"env:{TOKEN_ENV}"], site_config, store, input="also-bad\n"
    )

    assert result.exit_code == 1
    assert store.head("main") == base


def test_conflict_without_retries_fails(runner, site_config, credential, token_env):
    store = ConcurrentWriterStore(accepted_tokens={credential.token})
    store.commit_files("main", {"content/post-a.md": "# A"})

    result = _invoke(runner, ["delete", "post-a", "--yes", "--token-ref", f"env:{TOKEN_ENV}"], site_config, store)

    assert result.exit_code == 1
    assert "content/post-a.md" in store.paths_at(store.head("main"))
    assert "content/late.md" in store.paths_at(store.head("main"))


def test_conflict_with_retry_succeeds(runner, site_config, credential, token_env):
    store = ConcurrentWriterStore(accepted_tokens={credential.token})
    store.commit_files("main", {"content/post-a.md": "# A"})

    result = _invoke(
        runner,
        ["delete", "post-a", "--yes", "--retries", "1", "--token-ref", f"env:{TOKEN_ENV}"],
        site_config,
        store,
    )

    assert result.exit_code == 0, result.output
    remaining = store.paths_at(store.head("main"))
    assert "content/post-a.md" not in remaining
    assert "content/late.md" in remaining


def test_invalid_slug_fails(runner, site_config, store, token_env):
    result = _invoke(runner, ["delete", "../x", "--yes", "--token-ref", f"env:{TOKEN_ENV}"], site_config, store)

    assert result.exit_code == 1
    assert store.calls == []


# -----------------------------------------------------------------------------
# ping / archive / config
# -----------------------------------------------------------------------------


def test_ping(runner, site_config, store, token_env):
    result = _invoke(runner, ["ping", "--token-ref", f"env:{TOKEN_ENV}"], site_config, store)

    assert result.exit_code == 0, result.output
    assert "heads/main" in result.output
    assert store.head("main") in result.output


def test_ping_without_token(runner, site_config, store, token_env):
    result = _invoke(runner, ["ping"], site_config, store)

    assert result.exit_code == 1
    assert store.calls == []


def test_archive(runner, site_config, tmp_path):
    posts = tmp_path / "posts"
    posts.mkdir()
    (posts / "hello.md").write_text("---\ntitle: Hello\npubDate: 2024-05-01\n---\nBody\n", encoding="utf-8")

    result = runner.invoke(cli, ["archive", "--content-dir", str(posts)], obj={"config": site_config})

    assert result.exit_code == 0, result.output
    assert "hello" in result.output
    assert "May 2024" in result.output


def test_archive_missing_directory(runner, site_config, tmp_path):
    result = runner.invoke(cli, ["archive", "--content-dir", str(tmp_path / "nope")], obj={"config": site_config})

    assert result.exit_code == 1


def test_invalid_config_file(runner, tmp_path):
    bad = tmp_path / "blogprune.yaml"
    bad.write_text("github:\n  timeout_s: -1\n", encoding="utf-8")

    result = runner.invoke(cli, ["-c", str(bad), "archive", "--content-dir", str(tmp_path)])

    assert result.exit_code == 1
    assert "timeout_s" in result.output


def test_delete_without_repo_configured(runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv(TOKEN_ENV, "tok")

    result = runner.invoke(cli, ["delete", "post-a", "--yes", "--token-ref", f"env:{TOKEN_ENV}"])

    assert result.exit_code == 1
    assert "github.owner" in result.output
