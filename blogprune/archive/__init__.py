"""Archive view: post loading, timeline grouping and selection state."""

from .grouping import group_by_year_month
from .loader import load_post, load_posts, parse_pub_date
from .selection import SelectionState

__all__ = [
    "SelectionState",
    "group_by_year_month",
    "load_post",
    "load_posts",
    "parse_pub_date",
]
