"""Archive listing command."""

from __future__ import annotations

import calendar
from pathlib import Path
from typing import Sequence

from rich.console import Console
from rich.table import Table

from ..archive import group_by_year_month, load_posts


def run_archive(
    content_dir: Path,
    *,
    extensions: Sequence[str] = (".md", ".mdx"),
    date_format: str = "%Y-%m-%d",
) -> int:
    console = Console()
    try:
        posts = load_posts(content_dir, extensions)
    except FileNotFoundError as e:
        Console(stderr=True).print(str(e), style="red")
        return 1

    if not posts:
        console.print("No posts found.", style="yellow")
        return 0

    console.print(f"[bold]Archive[/bold] ({len(posts)} post{'s' if len(posts) != 1 else ''})")
    for year, months in group_by_year_month(posts):
        for month, month_posts in months:
            table = Table(title=f"{calendar.month_name[month]} {year} ({len(month_posts)})")
            table.add_column("date", style="dim", no_wrap=True)
            table.add_column("slug", style="cyan", no_wrap=True)
            table.add_column("title")
            table.add_column("description", style="dim")
            for post in month_posts:
                table.add_row(
                    post.pub_date.strftime(date_format),
                    post.slug,
                    post.title,
                    post.description or "",
                )
            console.print(table)
    return 0
