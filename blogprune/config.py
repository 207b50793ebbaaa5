"""
Site configuration.

Loaded from a YAML file (`blogprune.yaml`) with environment overrides:

    github:
      owner: alice
      repo: blog
      branch: main
      token_ref: env:GITHUB_TOKEN
    layout:
      content_root: src/content/blog
      content_extensions: [".md", ".mdx"]
      media_root: public/images
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import yaml

CONFIG_FILENAME = "blogprune.yaml"

# Environment variable -> SiteConfig field
ENV_OVERRIDES = {
    "BLOGPRUNE_OWNER": "owner",
    "BLOGPRUNE_REPO": "repo",
    "BLOGPRUNE_BRANCH": "branch",
    "BLOGPRUNE_API_URL": "api_url",
}


@dataclass(frozen=True)
class ArtifactLayout:
    """Where a post's physical artifacts live in the repository tree."""

    content_root: str = "content"
    content_extensions: tuple[str, ...] = (".md", ".mdx")
    media_root: str = "media"

    def content_paths(self, slug: str) -> list[str]:
        return [_join(self.content_root, f"{slug}{ext}") for ext in self.content_extensions]

    def media_prefix(self, slug: str) -> str:
        return _join(self.media_root, slug)


@dataclass(frozen=True)
class SiteConfig:
    """Repository coordinates and artifact layout."""

    owner: str = ""
    repo: str = ""
    branch: str = "main"
    api_url: str = "https://api.github.com"
    timeout_s: float = 10.0
    token_ref: str | None = "env:GITHUB_TOKEN"
    layout: ArtifactLayout = field(default_factory=ArtifactLayout)

    @property
    def repo_slug(self) -> str:
        return f"{self.owner}/{self.repo}"


def _join(root: str, name: str) -> str:
    root = root.strip("/")
    return f"{root}/{name}" if root else name


def _coerce_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _parse_layout(raw: dict[str, Any]) -> ArtifactLayout:
    defaults = ArtifactLayout()

    content_root = str(raw.get("content_root", defaults.content_root)).strip()
    media_root = str(raw.get("media_root", defaults.media_root)).strip()
    if not media_root.strip("/"):
        raise ValueError("layout.media_root must not be empty")

    exts_raw = raw.get("content_extensions", list(defaults.content_extensions))
    if isinstance(exts_raw, str):
        exts_raw = [exts_raw]
    if not isinstance(exts_raw, list) or not exts_raw:
        raise ValueError("layout.content_extensions must be a non-empty list")
    extensions: list[str] = []
    for ext in exts_raw:
        ext = str(ext).strip()
        if not ext:
            continue
        if not ext.startswith("."):
            ext = f".{ext}"
        if ext not in extensions:
            extensions.append(ext)
    if not extensions:
        raise ValueError("layout.content_extensions must be a non-empty list")

    return ArtifactLayout(
        content_root=content_root,
        content_extensions=tuple(extensions),
        media_root=media_root,
    )


def parse_config(data: dict[str, Any]) -> SiteConfig:
    """Build a `SiteConfig` from parsed YAML data."""
    github = _coerce_dict(data.get("github"))
    defaults = SiteConfig()

    try:
        timeout_s = float(github.get("timeout_s", defaults.timeout_s))
    except (TypeError, ValueError) as e:
        raise ValueError("github.timeout_s must be a number") from e
    if timeout_s <= 0:
        raise ValueError("github.timeout_s must be positive")

    branch = str(github.get("branch", defaults.branch)).strip()
    if not branch:
        raise ValueError("github.branch must not be empty")

    token_ref = github.get("token_ref", defaults.token_ref)

    return SiteConfig(
        owner=str(github.get("owner", "")).strip(),
        repo=str(github.get("repo", "")).strip(),
        branch=branch,
        api_url=str(github.get("api_url", defaults.api_url)).strip().rstrip("/"),
        timeout_s=timeout_s,
        token_ref=str(token_ref).strip() if token_ref else None,
        layout=_parse_layout(_coerce_dict(data.get("layout"))),
    )


def apply_env_overrides(cfg: SiteConfig, environ: dict[str, str] | None = None) -> SiteConfig:
    """Return `cfg` with BLOGPRUNE_* environment variables applied."""
    environ = dict(os.environ) if environ is None else environ
    changes = {
        attr: environ[var].strip()
        for var, attr in ENV_OVERRIDES.items()
        if environ.get(var, "").strip()
    }
    return replace(cfg, **changes) if changes else cfg


def load_config(path: str | Path, environ: dict[str, str] | None = None) -> SiteConfig:
    """
    Load configuration from YAML.

    Raises:
        FileNotFoundError: If the config file does not exist
        ValueError: If the YAML is malformed or a value is invalid
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"Failed to parse config YAML: {e}") from e
    if not isinstance(data, dict):
        raise ValueError("Config root must be a mapping")

    return apply_env_overrides(parse_config(data), environ)


def find_config(start: Path) -> Path | None:
    """Find `blogprune.yaml` by walking up from `start`."""
    cur = start.resolve()
    for p in (cur, *cur.parents):
        candidate = p / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None
