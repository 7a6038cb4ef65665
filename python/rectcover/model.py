import string
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from .data import Field


Bounds = Tuple[int, int, int, int]  # (top, left, bottom, right), inclusive


@dataclass(frozen=True)
class Params:
    # Fixed cost charged per rectangle on top of its area
    overhead: int = 10
    # Rendering
    empty_marker: str = '.'
    fallback_label: str = '0'
    labels: str = string.ascii_uppercase + string.ascii_lowercase

    def __post_init__(self) -> None:
        if self.overhead < 0:
            raise ValueError(f"Overhead must be non-negative, got {self.overhead}")


DEFAULT_PARAMS = Params()


def max_candidates(n_rows: int, n_cols: int) -> int:
    """Upper bound on the number of candidates generated for an n_rows x n_cols field."""
    m, n = n_rows, n_cols
    return (m * n + 1) * (m * n) // 2 - (m * (m - 1)) * (n * (n - 1)) // 4


class Rectangle:
    """Axis-aligned sub-rectangle of a field.

    Geometry, weight, cost and ratio are fixed at construction. The span
    (boolean mask over the whole field) is built on first use and is
    read-only afterwards; only the label changes once the result is final.
    """

    def __init__(self, field: Field, top: int, left: int, bottom: int, right: int,
                 weight: Optional[int] = None, params: Optional[Params] = None):
        n_rows = bottom - top + 1
        n_cols = right - left + 1
        assert n_rows > 0 and n_cols > 0, f"degenerate rectangle {(top, left, bottom, right)}"
        self.field = field
        self.params = params or DEFAULT_PARAMS
        self.top = top
        self.left = left
        self.bottom = bottom
        self.right = right
        self.area = n_rows * n_cols
        self.weight = field.weight(top, left, bottom, right) if weight is None else int(weight)
        self.cost = self.params.overhead + self.area
        self.ratio = self.weight / self.cost
        self.label: Optional[str] = None
        self._span: Optional[np.ndarray] = None

    @property
    def bounds(self) -> Bounds:
        return (self.top, self.left, self.bottom, self.right)

    def compute_span(self) -> np.ndarray:
        if self._span is None:
            span = np.zeros((self.field.n_rows, self.field.n_cols), dtype=bool)
            span[self.top:self.bottom + 1, self.left:self.right + 1] = True
            span.flags.writeable = False
            self._span = span
        return self._span

    @property
    def span(self) -> np.ndarray:
        return self.compute_span()

    def intersects(self, other: 'Rectangle') -> bool:
        return bool(np.any(self.span & other.span))

    def is_subset_of(self, other: 'Rectangle') -> bool:
        return not np.any(self.span & ~other.span)

    def __lt__(self, other: 'Rectangle') -> bool:
        return self.ratio < other.ratio

    def __repr__(self) -> str:
        return (f"Rectangle({self.top}, {self.left}, {self.bottom}, {self.right}, "
                f"weight={self.weight}, cost={self.cost}, label={self.label!r})")


def bounding_join(r1: Rectangle, r2: Rectangle) -> Rectangle:
    """Return the smallest rectangle containing two disjoint rectangles."""
    assert not r1.intersects(r2), f"cannot join intersecting rectangles {r1!r} and {r2!r}"
    join = Rectangle(
        r1.field,
        min(r1.top, r2.top),
        min(r1.left, r2.left),
        max(r1.bottom, r2.bottom),
        max(r1.right, r2.right),
        params=r1.params,
    )
    join.compute_span()
    return join


def hull_of(field: Field, params: Optional[Params] = None) -> Rectangle:
    """Bounding box of every marked cell of the field."""
    rows, cols = np.nonzero(field.marks)
    if rows.size == 0:
        raise ValueError("Field has no marked cells")
    hull = Rectangle(field, int(rows.min()), int(cols.min()), int(rows.max()), int(cols.max()),
                     weight=int(rows.size), params=params)
    hull.compute_span()
    return hull
