"""Intersection classification and merge proposals for local search.

For a join J of two result rectangles and another result rectangle R, the
slice of R with respect to J is R minus J:

- VOID:           R does not meet J
- DECREASING:     R lies inside J (R joins the envelope)
- NON_INCREASING: R minus J is a single rectangle (R joins the penumbra)
- INCREASING:     R minus J needs more than one rectangle

A Shade bundles a pair, its join, the envelope and the penumbra. Pairs with
any INCREASING slice never produce a Shade.
"""
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Dict, Iterable, List, Optional

import numpy as np

from .model import Bounds, Rectangle, bounding_join


class IntersectionKind(IntEnum):
    VOID = -2
    DECREASING = -1
    NON_INCREASING = 0
    INCREASING = 1


@dataclass
class Slice:
    original: Rectangle
    kind: IntersectionKind
    bounds: Optional[Bounds] = None  # residual rectangle, NON_INCREASING only


def classify_slice(other: Rectangle, join: Rectangle) -> Slice:
    """Classify what removing `join` from `other` leaves behind."""
    if not other.intersects(join):
        return Slice(other, IntersectionKind.VOID)
    if other.is_subset_of(join):
        return Slice(other, IntersectionKind.DECREASING)

    leftover = other.span & ~join.span
    rows, cols = np.nonzero(leftover)
    if rows.size == 0:
        raise AssertionError(f"empty leftover for {other!r} outside {join!r}")
    top, bottom = int(rows.min()), int(rows.max())
    left, right = int(cols.min()), int(cols.max())
    if leftover[top:bottom + 1, left:right + 1].all():
        return Slice(other, IntersectionKind.NON_INCREASING, (top, left, bottom, right))
    return Slice(other, IntersectionKind.INCREASING)


@dataclass
class Shade:
    r1: Rectangle
    r2: Rectangle
    join: Rectangle
    envelope: List[Rectangle] = field(default_factory=list)
    # original rectangle -> its residual slice; keyed by identity
    penumbra: Dict[Rectangle, Rectangle] = field(default_factory=dict)

    @property
    def penalty(self) -> int:
        """Cost delta of replacing the pair, envelope and penumbra by the join.

        Negative or zero means the move does not increase the total cost.
        """
        envelope_cost = sum(r.cost for r in self.envelope)
        penumbra_cost = sum(original.area - piece.area for original, piece in self.penumbra.items())
        return self.join.cost - (self.r1.cost + self.r2.cost + envelope_cost + penumbra_cost)

    def sort_key(self):
        # Equal penalties favour the smaller envelope
        return (self.penalty, len(self.envelope))

    def __lt__(self, other: 'Shade') -> bool:
        return self.sort_key() < other.sort_key()


def build_shade(r1: Rectangle, r2: Rectangle, others: Iterable[Rectangle]) -> Optional[Shade]:
    """Propose merging r1 and r2; None when some other rectangle would fragment."""
    join = bounding_join(r1, r2)
    shade = Shade(r1, r2, join)
    for other in others:
        piece = classify_slice(other, join)
        if piece.kind == IntersectionKind.INCREASING:
            return None
        if piece.kind == IntersectionKind.DECREASING:
            shade.envelope.append(other)
        elif piece.kind == IntersectionKind.NON_INCREASING:
            residual = Rectangle(join.field, *piece.bounds, params=join.params)
            residual.compute_span()
            shade.penumbra[other] = residual
    return shade
