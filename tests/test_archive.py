"""Tests for the archive view: loading, grouping and selection."""

from __future__ import annotations

from datetime import date, datetime, timezone
from pathlib import Path

import pytest

from blogprune.archive import SelectionState, group_by_year_month, load_posts, parse_pub_date
from blogprune.models import Post


def _write_post(directory: Path, name: str, pub_date: str | None, title: str = "T", **extra: str) -> Path:
    lines = ["---", f"title: {title}"]
    if pub_date is not None:
        lines.append(f"pubDate: {pub_date}")
    for key, value in extra.items():
        lines.append(f"{key}: {value}")
    lines += ["---", "", "Body text."]
    path = directory / name
    path.write_text("\n".join(lines), encoding="utf-8")
    return path


def _post(slug: str, y: int, m: int, d: int = 1) -> Post:
    return Post(slug=slug, title=slug, pub_date=datetime(y, m, d), path=Path(f"{slug}.md"))


# -----------------------------------------------------------------------------
# Loader
# -----------------------------------------------------------------------------


@pytest.mark.parametrize(
    "value,expected",
    [
        (datetime(2024, 3, 5, 12, 0), datetime(2024, 3, 5, 12, 0)),
        (date(2024, 3, 5), datetime(2024, 3, 5)),
        ("2024-03-05", datetime(2024, 3, 5)),
        ("2024-03-05T10:00:00Z", datetime(2024, 3, 5, 10, 0, tzinfo=timezone.utc)),
        ("not a date", None),
        ("", None),
        (None, None),
        (20240305, None),
    ],
)
def test_parse_pub_date(value, expected):
    assert parse_pub_date(value) == expected


def test_load_posts(tmp_path):
    _write_post(tmp_path, "hello.md", "2024-01-10", title="Hello", description="First post")
    _write_post(tmp_path, "second.mdx", "2024-02-01", title="Second")
    _write_post(tmp_path, "notes.txt", "2024-02-01")

    posts = {p.slug: p for p in load_posts(tmp_path)}

    assert set(posts) == {"hello", "second"}
    assert posts["hello"].title == "Hello"
    assert posts["hello"].description == "First post"
    assert posts["hello"].pub_date == datetime(2024, 1, 10)
    assert posts["second"].description is None


def test_first_extension_wins(tmp_path):
    _write_post(tmp_path, "dup.md", "2024-01-01", title="From md")
    _write_post(tmp_path, "dup.mdx", "2024-01-01", title="From mdx")

    assert [p.title for p in load_posts(tmp_path, (".mdx", ".md"))] == ["From mdx"]


def test_posts_without_date_are_skipped(tmp_path):
    _write_post(tmp_path, "undated.md", None)
    _write_post(tmp_path, "dated.md", "2023-06-01")

    assert [p.slug for p in load_posts(tmp_path)] == ["dated"]


def test_malformed_front_matter_is_skipped(tmp_path):
    _write_post(tmp_path, "good.md", "2024-01-01")
    (tmp_path / "bad.md").write_text("---\ntitle: [unclosed\n---\nBody\n", encoding="utf-8")
    (tmp_path / "binary.md").write_bytes(b"\xff\xfe\x00garbage")

    assert [p.slug for p in load_posts(tmp_path)] == ["good"]


def test_missing_directory(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_posts(tmp_path / "missing")


# -----------------------------------------------------------------------------
# Grouping
# -----------------------------------------------------------------------------


def test_group_by_year_month_is_newest_first():
    posts = [
        _post("a", 2023, 1),
        _post("b", 2024, 3),
        _post("c", 2024, 11),
        _post("d", 2023, 12),
        _post("e", 2024, 3, 20),
    ]

    grouped = group_by_year_month(posts)

    assert [year for year, _ in grouped] == [2024, 2023]
    assert [month for month, _ in grouped[0][1]] == [11, 3]
    assert [month for month, _ in grouped[1][1]] == [12, 1]
    assert [p.slug for p in grouped[0][1][1][1]] == ["b", "e"]


def test_group_empty():
    assert group_by_year_month([]) == []


# -----------------------------------------------------------------------------
# Selection
# -----------------------------------------------------------------------------


class TestSelectionState:
    def test_toggle_outside_edit_mode_is_ignored(self):
        state = SelectionState().toggle("a")
        assert state.count == 0

    def test_toggle_in_edit_mode(self):
        state = SelectionState().toggle_edit_mode().toggle("a").toggle("b")
        assert state.is_selected("a")
        assert state.count == 2

        state = state.toggle("a")
        assert not state.is_selected("a")
        assert state.count == 1

    def test_leaving_edit_mode_clears_selection(self):
        state = SelectionState().toggle_edit_mode().toggle("a").toggle_edit_mode()
        assert not state.edit_mode
        assert state.count == 0

    def test_clear_keeps_edit_mode(self):
        state = SelectionState().toggle_edit_mode().toggle("a").clear()
        assert state.edit_mode
        assert state.count == 0

    def test_ordered_follows_view_order(self):
        state = SelectionState().toggle_edit_mode().toggle("c").toggle("a")
        assert state.ordered(["a", "b", "c"]) == ["a", "c"]

    def test_transitions_do_not_mutate(self):
        original = SelectionState(edit_mode=True)
        original.toggle("a")
        assert original.count == 0
