"""Stroke order solving.

StrokeOrderSolver: Decoration split plus two-hypothesis greedy chaining.
OrderCost, NeutralCost, BiasedCost: Chaining cost strategies.
detect_decorations, solve_order, score_sequence: The solver's building blocks.
"""

from .solver import (
    BiasedCost,
    NeutralCost,
    OrderCost,
    StrokeOrderSolver,
    detect_decorations,
    score_sequence,
    solve_order,
)

__all__ = [
    'StrokeOrderSolver', 'OrderCost', 'NeutralCost', 'BiasedCost',
    'detect_decorations', 'solve_order', 'score_sequence',
]
