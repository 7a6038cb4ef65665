import os
import re
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np


MARKED = '@'
UNMARKED = '.'

Cell = Tuple[int, int]  # (row, col)


@dataclass(eq=False)
class Field:
    """An R x C grid of marked cells plus its optional cardinality bound.

    `marks` is a boolean array; weights of sub-rectangles are answered in
    constant time from a 2-D prefix sum built once at construction.
    """
    marks: np.ndarray
    max_rectangles: Optional[int] = None
    _prefix: np.ndarray = field(init=False, repr=False)

    def __post_init__(self) -> None:
        marks = np.array(self.marks, dtype=bool)
        if marks.ndim != 2 or marks.shape[0] == 0 or marks.shape[1] == 0:
            raise ValueError(f"Field must be a non-empty 2-D grid, got shape {marks.shape}")
        marks.flags.writeable = False
        self.marks = marks
        prefix = np.zeros((marks.shape[0] + 1, marks.shape[1] + 1), dtype=np.int64)
        prefix[1:, 1:] = marks.cumsum(axis=0).cumsum(axis=1)
        self._prefix = prefix

    @classmethod
    def from_rows(cls, rows: Sequence[str], max_rectangles: Optional[int] = None) -> 'Field':
        if not rows:
            raise ValueError("Field has no rows")
        width = len(rows[0])
        grid = []
        for i, line in enumerate(rows):
            if len(line) != width:
                raise ValueError(f"Row {i} has {len(line)} columns, expected {width}")
            bad = set(line) - {MARKED, UNMARKED}
            if bad:
                raise ValueError(f"Row {i} contains unexpected characters: {''.join(sorted(bad))!r}")
            grid.append([c == MARKED for c in line])
        return cls(np.array(grid, dtype=bool), max_rectangles=max_rectangles)

    @classmethod
    def from_cells(cls, n_rows: int, n_cols: int, cells: Iterable[Cell],
                   max_rectangles: Optional[int] = None) -> 'Field':
        marks = np.zeros((n_rows, n_cols), dtype=bool)
        for r, c in cells:
            if not (0 <= r < n_rows and 0 <= c < n_cols):
                raise ValueError(f"Cell {(r, c)} is outside a {n_rows} x {n_cols} field")
            marks[r, c] = True
        return cls(marks, max_rectangles=max_rectangles)

    @property
    def n_rows(self) -> int:
        return self.marks.shape[0]

    @property
    def n_cols(self) -> int:
        return self.marks.shape[1]

    @property
    def n_marked(self) -> int:
        return int(self._prefix[-1, -1])

    def marked_cells(self) -> List[Cell]:
        rows, cols = np.nonzero(self.marks)
        return [(int(r), int(c)) for r, c in zip(rows, cols)]

    def weight(self, top: int, left: int, bottom: int, right: int) -> int:
        """Number of marked cells inside the inclusive bounds."""
        p = self._prefix
        return int(p[bottom + 1, right + 1] - p[top, right + 1] - p[bottom + 1, left] + p[top, left])

    def chain_weights(self, top: int, left: int, right: int) -> np.ndarray:
        """Weights of (top, left, bottom, right) for bottom = top .. n_rows - 1."""
        p = self._prefix
        return (p[top + 1:, right + 1] - p[top, right + 1]) - (p[top + 1:, left] - p[top, left])


def parse_fields(lines: Iterable[str]) -> List[Field]:
    """Parse the text stream format into fields.

    Fields are blocks of `@`/`.` rows separated by blank lines. A line
    starting with a digit sets the cardinality bound of the field being read
    (or of the next one) from its leading digits; anything after them is
    ignored. Each field starts unconstrained.
    """
    fields: List[Field] = []
    rows: List[str] = []
    bound: Optional[int] = None
    for raw in lines:
        line = raw.rstrip('\r\n').strip()
        if not line:
            if rows:
                fields.append(Field.from_rows(rows, max_rectangles=bound))
                rows = []
                bound = None
            continue
        if line[0].isdigit():
            bound = int(re.match(r"\d+", line).group(0))
            continue
        rows.append(line)
    if rows:
        fields.append(Field.from_rows(rows, max_rectangles=bound))
    return fields


def load_fields(path: str) -> List[Field]:
    """Load every field from a text file."""
    if not os.path.isfile(path):
        raise FileNotFoundError(f"Input file not found: {path}")
    with open(path, 'r') as f:
        fields = parse_fields(f)
    if not fields:
        raise ValueError(f"No fields found in {path}")
    return fields
