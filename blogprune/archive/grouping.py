"""Group posts into the archive timeline (year -> month -> posts)."""

from __future__ import annotations

from collections import defaultdict
from typing import Iterable

from ..models import Post


def group_by_year_month(posts: Iterable[Post]) -> list[tuple[int, list[tuple[int, list[Post]]]]]:
    """
    Years newest first, months newest first within a year.

    Posts keep their input order inside a month.
    """
    groups: dict[int, dict[int, list[Post]]] = defaultdict(lambda: defaultdict(list))
    for post in posts:
        groups[post.year][post.month].append(post)

    return [
        (year, [(month, groups[year][month]) for month in sorted(groups[year], reverse=True)])
        for year in sorted(groups, reverse=True)
    ]
