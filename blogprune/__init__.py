"""blogprune - atomic batch deletion of posts from a Git-backed site."""

__version__ = "0.1.0"
