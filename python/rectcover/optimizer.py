import logging
import time
from dataclasses import dataclass
from itertools import combinations
from operator import attrgetter
from typing import Dict, List, Optional, Sequence

import numpy as np

from .data import Field
from .model import DEFAULT_PARAMS, Params, Rectangle, hull_of, max_candidates
from .shade import Shade, build_shade


logger = logging.getLogger(__name__)


def is_disjoint(rectangles: Sequence[Rectangle]) -> bool:
    return not any(a.intersects(b) for a, b in combinations(rectangles, 2))


@dataclass
class Covering:
    """Final labeled result of one optimizer run."""
    field: Field
    rectangles: List[Rectangle]
    params: Params = DEFAULT_PARAMS

    @property
    def cost(self) -> int:
        return sum(r.cost for r in self.rectangles)

    @property
    def cardinality(self) -> int:
        return len(self.rectangles)

    def render(self) -> List[str]:
        """Grid rows with every covered cell replaced by its rectangle's label."""
        grid = np.full((self.field.n_rows, self.field.n_cols), self.params.empty_marker, dtype='<U1')
        for r in self.rectangles:
            grid[r.span] = r.label
        return [''.join(row) for row in grid]

    def to_dict(self) -> Dict:
        return {
            'n_rows': self.field.n_rows,
            'n_cols': self.field.n_cols,
            'n_marked': self.field.n_marked,
            'max_rectangles': self.field.max_rectangles,
            'cardinality': self.cardinality,
            'cost': self.cost,
            'rectangles': [
                {
                    'label': r.label,
                    'top': r.top,
                    'left': r.left,
                    'bottom': r.bottom,
                    'right': r.right,
                    'area': r.area,
                    'weight': r.weight,
                    'cost': r.cost,
                }
                for r in self.rectangles
            ],
        }


class Optimizer:
    """Rectangle covering heuristic for a single field.

    Pipeline: generate candidates, greedily pick a disjoint covering, then
    merge pairs while a merge lowers the cost or the covering still has more
    rectangles than the field's bound allows. A bound of 1 short-cuts to the
    bounding box of the marked cells.
    """

    def __init__(self, field: Field, params: Optional[Params] = None):
        if field.max_rectangles is not None and field.max_rectangles < 1:
            raise ValueError(f"Cardinality bound must be at least 1, got {field.max_rectangles}")
        self.field = field
        self.params = params or DEFAULT_PARAMS
        self.max_rectangles = field.max_rectangles

    def generate(self) -> List[Rectangle]:
        """Candidates along every (top, left, right) chain, sorted by ascending ratio.

        Within a chain the bottom edge walks down and a rectangle is kept only
        if it holds more marked cells than the previous one.
        """
        n_rows, n_cols = self.field.n_rows, self.field.n_cols
        candidates: List[Rectangle] = []
        capacity = max_candidates(n_rows, n_cols)
        for top in range(n_rows):
            for left in range(n_cols):
                for right in range(left, n_cols):
                    weights = self.field.chain_weights(top, left, right)
                    steps = np.diff(weights, prepend=0)
                    for offset in np.flatnonzero(steps > 0):
                        candidates.append(Rectangle(self.field, top, left, top + int(offset), right,
                                                    weight=int(weights[offset]), params=self.params))
        candidates.sort(key=attrgetter('ratio'))
        logger.debug("generated %d candidates (capacity %d)", len(candidates), capacity)
        return candidates

    def greedy_match(self, candidates: List[Rectangle]) -> List[Rectangle]:
        """Consume candidates from the high-ratio end into a disjoint covering."""
        unmatched = self.field.marks.copy()
        covering = np.zeros_like(unmatched)
        result: List[Rectangle] = []
        while unmatched.any():
            chosen = None
            while candidates:
                r = candidates.pop()
                if not np.any(covering & r.span):
                    chosen = r
                    break
            if chosen is None:
                raise RuntimeError("candidate pool exhausted before every marked cell was covered")
            result.append(chosen)
            covering |= chosen.span
            unmatched &= ~chosen.span
        candidates.clear()
        assert is_disjoint(result), "greedy covering is not disjoint"
        logger.debug("greedy covering: %d rectangles, cost %d", len(result), sum(r.cost for r in result))
        return result

    def best_shade(self, result: Sequence[Rectangle]) -> Optional[Shade]:
        """Lowest-penalty feasible merge over all pairs, or None."""
        best: Optional[Shade] = None
        for i, j in combinations(range(len(result)), 2):
            others = [r for k, r in enumerate(result) if k != i and k != j]
            shade = build_shade(result[i], result[j], others)
            if shade is None:
                continue
            if best is None or shade < best:
                best = shade
        return best

    def apply_shade(self, result: List[Rectangle], shade: Shade) -> List[Rectangle]:
        absorbed = {id(shade.r1), id(shade.r2)} | {id(r) for r in shade.envelope}
        updated = []
        for r in result:
            if id(r) in absorbed:
                continue
            updated.append(shade.penumbra.get(r, r))
        updated.append(shade.join)
        return updated

    def _over_bound(self, result: Sequence[Rectangle]) -> bool:
        return self.max_rectangles is not None and len(result) > self.max_rectangles

    def local_search(self, result: List[Rectangle]) -> List[Rectangle]:
        """Apply the best merge until none is cheaper and the bound is met."""
        while len(result) >= 2:
            shade = self.best_shade(result)
            if shade is None:
                break
            penalty = shade.penalty
            if penalty > 0 and not self._over_bound(result):
                break
            result = self.apply_shade(result, shade)
            logger.debug("merged %r and %r (penalty %d, envelope %d, penumbra %d) -> %d rectangles",
                         shade.r1.bounds, shade.r2.bounds, penalty,
                         len(shade.envelope), len(shade.penumbra), len(result))
        if self._over_bound(result):
            logger.warning("no feasible merge left; %d rectangles exceed the bound of %d",
                           len(result), self.max_rectangles)
        return result

    def convex_hull(self) -> List[Rectangle]:
        return [hull_of(self.field, self.params)]

    def label(self, result: List[Rectangle]) -> List[Rectangle]:
        """Sort by descending ratio and assign labels in that order."""
        ordered = sorted(result, key=attrgetter('ratio'), reverse=True)
        labels = self.params.labels
        for i, r in enumerate(ordered):
            r.label = labels[i] if i < len(labels) else self.params.fallback_label
        return ordered

    def run(self) -> Covering:
        if self.field.n_marked == 0:
            raise ValueError("Field has no marked cells")
        start = time.perf_counter()
        if self.max_rectangles == 1:
            result = self.convex_hull()
        else:
            result = self.greedy_match(self.generate())
            result = self.local_search(result)
        covering = Covering(self.field, self.label(result), self.params)
        logger.info("optimized %d X %d field of %d marked cells in %.6f seconds",
                    self.field.n_rows, self.field.n_cols, self.field.n_marked,
                    time.perf_counter() - start)
        return covering


def optimize_fields(fields: Sequence[Field], params: Optional[Params] = None) -> List[Covering]:
    """Optimize each field to completion, in order."""
    return [Optimizer(f, params).run() for f in fields]
