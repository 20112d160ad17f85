"""
Plain-text tables for reports and raw listings.

Columns are separated by two spaces and padded to the widest cell. The
header is repeated under the closing rule so long tables stay readable.
"""

from enum import Enum
from typing import List, Optional, Sequence


class Alignment(str, Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


class Table:
    """A fixed-column text table"""

    def __init__(self, headers: Sequence[str], alignments: Optional[Sequence[Alignment]] = None):
        self.headers = [str(h) for h in headers]
        self.alignments = list(alignments) if alignments else [Alignment.LEFT] * len(self.headers)
        if len(self.alignments) != len(self.headers):
            raise ValueError("one alignment per column is required")
        self.rows: List[List[str]] = []
        self.widths = [len(h) for h in self.headers]

    def row(self, cells: Sequence[str]) -> "Table":
        cells = [str(c) for c in cells]
        if len(cells) != len(self.headers):
            raise ValueError(f"expected {len(self.headers)} cells, got {len(cells)}")
        self.widths = [max(w, len(c)) for w, c in zip(self.widths, cells)]
        self.rows.append(cells)
        return self

    def blank_row(self) -> "Table":
        return self.row([""] * len(self.headers))

    def _format_row(self, cells: Sequence[str]) -> str:
        parts = []
        for cell, width, alignment in zip(cells, self.widths, self.alignments):
            if alignment == Alignment.RIGHT:
                parts.append(cell.rjust(width))
            elif alignment == Alignment.CENTER:
                parts.append(cell.center(width))
            else:
                parts.append(cell.ljust(width))
        return "  ".join(parts).rstrip()

    def render(self) -> str:
        rule = "  ".join("-" * w for w in self.widths)
        lines = [self._format_row(self.headers), rule]
        lines.extend(self._format_row(r) for r in self.rows)
        lines.extend([rule, self._format_row(self.headers)])
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.render()
