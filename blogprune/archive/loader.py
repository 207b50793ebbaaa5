"""Load posts from a local checkout of the site."""

from __future__ import annotations

import logging
from datetime import date, datetime
from pathlib import Path
from typing import Any, Sequence

import frontmatter
import yaml

from ..models import Post

logger = logging.getLogger(__name__)


def parse_pub_date(value: Any) -> datetime | None:
    """Coerce a front matter `pubDate` into a datetime; None if unusable."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            return None
    return None


def load_post(path: Path) -> Post | None:
    """Load a single post file and parse its front matter."""
    post = frontmatter.load(path)
    fm = post.metadata

    pub_date = parse_pub_date(fm.get("pubDate") or fm.get("date"))
    if pub_date is None:
        logger.warning("Skipping %s: missing or invalid pubDate", path)
        return None

    description = fm.get("description")
    return Post(
        slug=path.stem,
        title=str(fm.get("title") or path.stem),
        pub_date=pub_date,
        path=path,
        description=str(description) if description else None,
    )


def load_posts(content_dir: Path, extensions: Sequence[str] = (".md", ".mdx")) -> list[Post]:
    """
    Load every post directly under `content_dir`.

    When a slug exists with several extensions, the first extension in
    `extensions` wins.
    """
    if not content_dir.is_dir():
        raise FileNotFoundError(f"Content directory not found: {content_dir}")

    by_slug: dict[str, Post] = {}
    for ext in extensions:
        for path in sorted(content_dir.glob(f"*{ext}")):
            if not path.is_file() or path.stem in by_slug:
                continue
            try:
                loaded = load_post(path)
            except (yaml.YAMLError, ValueError, OSError) as e:
                logger.warning("Failed to load %s: %s", path, e)
                continue
            if loaded is not None:
                by_slug[loaded.slug] = loaded

    return list(by_slug.values())
