"""Stroke order solving.

The walker emits strokes in raster-scan seed order, which has nothing to do
with how the signature was written. This module rebuilds a plausible
writing order.

Design Patterns:
    Chaining cost is a Strategy. OrderCost subclasses decide how expensive
    it is to jump from the end of the chain to a candidate endpoint, and
    solve_order() runs the same greedy chaining with whichever cost it is
    given. StrokeOrderSolver evaluates two costs and keeps the better
    sequence under a shared score.

Algorithm Overview:
    1. Decoration detection: wide, low, flat strokes (underlines) are set
       aside and appended untouched after the ordered main strokes.
    2. Greedy chaining: sort by leftmost x, seed with the leftmost stroke,
       then repeatedly take the nearest remaining endpoint (start or end)
       to the chain's current end, reversing the stroke when its end was
       the nearer one.
    3. Hypothesis selection: NeutralCost and BiasedCost sequences are scored
       by score_sequence(). The biased sequence is kept unless it ties the
       neutral one or scores at least SCORE_MARGIN times worse.

Both hypotheses run on the same input list; solve_order() never mutates the
strokes it is given.

Example usage::

    from signature_lib.ordering.solver import StrokeOrderSolver

    ordered = StrokeOrderSolver().order(raw_strokes)
"""

from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod
from typing import Sequence

from ..config import (
    BACKWARD_MARGIN,
    BACKWARD_MIN_DIST_SQ,
    BACKWARD_PENALTY,
    DECORATION_MIN_FLATNESS,
    DECORATION_MIN_LOW_RATIO,
    DECORATION_MIN_WIDTH_RATIO,
    REGRESSION_PENALTY,
    REGRESSION_STEP,
    SCORE_MARGIN,
    VERTICAL_PENALTY,
    TracerConfig,
)
from ..domain.geometry import RawPoint, Stroke, StrokeMeta

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Chaining costs (Strategy Pattern)
# ---------------------------------------------------------------------------

class OrderCost(ABC):
    """Cost of chaining a candidate stroke endpoint after the current stroke.

    Subclasses must implement cost().
    """

    @abstractmethod
    def cost(self, current: StrokeMeta, candidate: StrokeMeta,
             endpoint: RawPoint) -> float:
        """Cost of moving from current.end to endpoint.

        Args:
            current: Meta of the last stroke in the chain, in its final
                orientation.
            candidate: Meta of a stroke still in the pool.
            endpoint: candidate.start or candidate.end; the point the pen
                would land on.

        Returns:
            Non-negative cost; lower is better.
        """
        pass

    @property
    def name(self) -> str:
        """Return the cost name for logging/debugging."""
        return self.__class__.__name__


class NeutralCost(OrderCost):
    """Squared Euclidean distance only."""

    def cost(self, current: StrokeMeta, candidate: StrokeMeta,
             endpoint: RawPoint) -> float:
        return current.end.distance_sq_to(endpoint)


class BiasedCost(OrderCost):
    """Distance cost that discourages backward jumps and line skipping.

    Attributes:
        backward_margin: A candidate whose centroid lies this far left of
            the chain end is a backward jump.
        backward_min_dist_sq: Backward jumps shorter than this are free.
        backward_penalty: Multiplier applied to backward jumps.
        vertical_penalty: Cost added per unit of centroid y difference.
    """

    def __init__(self, backward_margin: float = BACKWARD_MARGIN,
                 backward_min_dist_sq: float = BACKWARD_MIN_DIST_SQ,
                 backward_penalty: float = BACKWARD_PENALTY,
                 vertical_penalty: float = VERTICAL_PENALTY):
        self.backward_margin = backward_margin
        self.backward_min_dist_sq = backward_min_dist_sq
        self.backward_penalty = backward_penalty
        self.vertical_penalty = vertical_penalty

    def cost(self, current: StrokeMeta, candidate: StrokeMeta,
             endpoint: RawPoint) -> float:
        dist_sq = current.end.distance_sq_to(endpoint)
        cost = dist_sq
        is_backward = candidate.cx < current.end.x - self.backward_margin
        if is_backward and dist_sq > self.backward_min_dist_sq:
            cost *= self.backward_penalty
        return cost + abs(candidate.cy - current.cy) * self.vertical_penalty


# ---------------------------------------------------------------------------
# Decorations
# ---------------------------------------------------------------------------

def detect_decorations(strokes: Sequence[Stroke],
                       min_width_ratio: float = DECORATION_MIN_WIDTH_RATIO,
                       min_low_ratio: float = DECORATION_MIN_LOW_RATIO,
                       min_flatness: float = DECORATION_MIN_FLATNESS) -> set[int]:
    """Indices of strokes that look like underlines.

    A decoration is wider than min_width_ratio of the whole drawing, has its
    centroid in the bottom (1 - min_low_ratio) of the drawing, and is more
    than min_flatness times wider than tall.
    """
    if not strokes:
        return set()

    metas = [s.meta() for s in strokes]
    total = metas[0].bbox
    for m in metas[1:]:
        total = total.union(m.bbox)

    decorations = set()
    for i, m in enumerate(metas):
        is_wide = m.width > total.width * min_width_ratio
        is_low = m.cy > total.y_min + total.height * min_low_ratio
        is_flat = m.width > m.height * min_flatness
        if is_wide and is_low and is_flat:
            decorations.add(i)
    return decorations


# ---------------------------------------------------------------------------
# Greedy chaining and scoring
# ---------------------------------------------------------------------------

def solve_order(strokes: Sequence[Stroke], cost: OrderCost) -> list[Stroke]:
    """Chain strokes greedily by nearest endpoint under a cost.

    Args:
        strokes: Strokes to order. Not modified.
        cost: Chaining cost strategy.

    Returns:
        New list holding a copy of every stroke once, each in its chosen
        direction.
    """
    pool = sorted(((s.meta(), s.copy()) for s in strokes), key=lambda ms: ms[0].bbox.x_min)
    if not pool:
        return []

    current_meta, current = pool.pop(0)
    if current_meta.end.x < current_meta.start.x and current_meta.width > current_meta.height:
        current = current.reversed()
        current_meta = current.meta()
    result = [current]

    while pool:
        best_idx = -1
        best_cost = math.inf
        reverse_best = False

        for i, (cand_meta, _) in enumerate(pool):
            cost_start = cost.cost(current_meta, cand_meta, cand_meta.start)
            cost_end = cost.cost(current_meta, cand_meta, cand_meta.end)
            if cost_start < best_cost:
                best_cost = cost_start
                best_idx = i
                reverse_best = False
            if cost_end < best_cost:
                best_cost = cost_end
                best_idx = i
                reverse_best = True

        if best_idx < 0:
            # Only reachable with NaN costs
            break

        current_meta, current = pool.pop(best_idx)
        if reverse_best:
            current = current.reversed()
            current_meta = current.meta()
        result.append(current)

    return result


def score_sequence(strokes: Sequence[Stroke],
                   regression_step: float = REGRESSION_STEP,
                   regression_penalty: float = REGRESSION_PENALTY) -> float:
    """Total pen travel between consecutive strokes plus regression penalties.

    A transition whose landing point is more than regression_step left of
    the previous stroke's end costs regression_penalty on top of its
    distance.
    """
    score = 0.0
    for prev, nxt in zip(strokes, strokes[1:]):
        p1 = prev.end
        p2 = nxt.start
        score += p1.distance_to(p2)
        if p2.x < p1.x - regression_step:
            score += regression_penalty
    return score


class StrokeOrderSolver:
    """Order raw strokes into a plausible writing sequence.

    Attributes:
        neutral: Cost used for the neutral hypothesis.
        biased: Cost used for the biased hypothesis.
        score_margin: The biased sequence is dropped when it scores at
            least this many times the neutral one.
    """

    def __init__(self, neutral: OrderCost | None = None,
                 biased: OrderCost | None = None,
                 score_margin: float = SCORE_MARGIN,
                 regression_step: float = REGRESSION_STEP,
                 regression_penalty: float = REGRESSION_PENALTY,
                 decoration_min_width_ratio: float = DECORATION_MIN_WIDTH_RATIO,
                 decoration_min_low_ratio: float = DECORATION_MIN_LOW_RATIO,
                 decoration_min_flatness: float = DECORATION_MIN_FLATNESS):
        self.neutral = neutral or NeutralCost()
        self.biased = biased or BiasedCost()
        self.score_margin = score_margin
        self.regression_step = regression_step
        self.regression_penalty = regression_penalty
        self.decoration_min_width_ratio = decoration_min_width_ratio
        self.decoration_min_low_ratio = decoration_min_low_ratio
        self.decoration_min_flatness = decoration_min_flatness

    @classmethod
    def from_config(cls, config: TracerConfig) -> StrokeOrderSolver:
        return cls(
            biased=BiasedCost(
                backward_margin=config.backward_margin,
                backward_min_dist_sq=config.backward_min_dist_sq,
                backward_penalty=config.backward_penalty,
                vertical_penalty=config.vertical_penalty,
            ),
            score_margin=config.score_margin,
            regression_step=config.regression_step,
            regression_penalty=config.regression_penalty,
            decoration_min_width_ratio=config.decoration_min_width_ratio,
            decoration_min_low_ratio=config.decoration_min_low_ratio,
            decoration_min_flatness=config.decoration_min_flatness,
        )

    def score(self, strokes: Sequence[Stroke]) -> float:
        return score_sequence(strokes, self.regression_step, self.regression_penalty)

    def order(self, strokes: Sequence[Stroke]) -> list[Stroke]:
        """Return main strokes in writing order followed by decorations.

        Args:
            strokes: Raw strokes in any order. Not modified.

        Returns:
            New list: ordered (possibly reversed) main strokes, then
            decoration strokes in their input order.
        """
        if not strokes:
            return []

        decoration_idx = detect_decorations(
            strokes,
            self.decoration_min_width_ratio,
            self.decoration_min_low_ratio,
            self.decoration_min_flatness,
        )
        main = [s for i, s in enumerate(strokes) if i not in decoration_idx]
        decorations = [s.copy() for i, s in enumerate(strokes) if i in decoration_idx]

        neutral_seq = solve_order(main, self.neutral)
        biased_seq = solve_order(main, self.biased)
        neutral_score = self.score(neutral_seq)
        biased_score = self.score(biased_seq)

        keep_neutral = (biased_score == neutral_score
                        or biased_score >= neutral_score * self.score_margin)
        chosen = neutral_seq if keep_neutral else biased_seq

        logger.debug("Order solver: %d main, %d decorations, scores %s=%.1f %s=%.1f, kept %s",
                     len(main), len(decorations),
                     self.neutral.name, neutral_score, self.biased.name, biased_score,
                     self.neutral.name if keep_neutral else self.biased.name)
        return chosen + decorations
