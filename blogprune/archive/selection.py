"""Edit-mode selection state for the archive view, as immutable transitions."""

from __future__ import annotations

from dataclasses import dataclass, field, replace


@dataclass(frozen=True)
class SelectionState:
    edit_mode: bool = False
    selected: frozenset[str] = field(default_factory=frozenset)

    @property
    def count(self) -> int:
        return len(self.selected)

    def toggle_edit_mode(self) -> "SelectionState":
        # Entering or leaving edit mode always starts from an empty selection
        return SelectionState(edit_mode=not self.edit_mode)

    def toggle(self, slug: str) -> "SelectionState":
        if not self.edit_mode:
            return self
        if slug in self.selected:
            return replace(self, selected=self.selected - {slug})
        return replace(self, selected=self.selected | {slug})

    def clear(self) -> "SelectionState":
        return replace(self, selected=frozenset())

    def is_selected(self, slug: str) -> bool:
        return slug in self.selected

    def ordered(self, slugs_in_view: list[str]) -> list[str]:
        """Selected slugs in view order, for a stable deletion request."""
        return [s for s in slugs_in_view if s in self.selected]
