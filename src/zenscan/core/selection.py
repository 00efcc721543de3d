"""Selection state over scan results."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Protocol


class Selectable(Protocol):
    """A result row the user can tick."""

    @property
    def path(self) -> Path: ...

    @property
    def size_bytes(self) -> int: ...

    @property
    def selected(self) -> bool: ...

    @property
    def is_original(self) -> bool: ...


class Selection:
    """Tracks which rows are selected.

    Rows are copied in and keyed by path; their own ``selected`` value is
    only the starting state. Rows flagged ``is_original`` can never be
    selected.
    """

    def __init__(self, rows: Iterable[Selectable] = ()) -> None:
        self._rows: dict[Path, Selectable] = {}
        self._selected: dict[Path, bool] = {}
        self.reset(rows)

    def reset(self, rows: Iterable[Selectable]) -> None:
        """Replace all rows, e.g. with the result of a fresh scan."""
        self._rows = {row.path: row for row in rows}
        self._selected = {path: row.selected and not row.is_original for path, row in self._rows.items()}

    def __len__(self) -> int:
        return len(self._rows)

    def __contains__(self, row: Selectable) -> bool:
        return row.path in self._rows

    def is_selected(self, row: Selectable) -> bool:
        return self._selected.get(row.path, False)

    def toggle(self, row: Selectable) -> bool:
        """Flip the selection of *row* and return its new state."""
        current = self._rows.get(row.path)
        if current is None or current.is_original:
            return False
        self._selected[row.path] = not self._selected[row.path]
        return self._selected[row.path]

    def select_all(self) -> None:
        for path, row in self._rows.items():
            self._selected[path] = not row.is_original

    def deselect_all(self) -> None:
        for path in self._selected:
            self._selected[path] = False

    def selected_items(self) -> list[Selectable]:
        return [row for path, row in self._rows.items() if self._selected[path]]

    def selected_total(self) -> int:
        """Total size in bytes of the selected rows."""
        return sum(row.size_bytes for row in self.selected_items())
