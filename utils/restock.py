"""
Restock condition rules for the processing table.

The condition stored in the sheet is never trusted; it is recomputed from the
quantities every time the table is read.
"""

from typing import Dict, Iterable, List

from constants.schemas import CurrentStockItem
from constants.sheet_columns import (
    CONDITION_DANGER,
    CONDITION_LOW,
    CONDITION_NORMAL,
    CONDITION_ORDER,
)

# Stock at or below half of par is dangerous
DANGER_PAR_RATIO = 0.5


def evaluate_condition(par_qty: float, current_qty: float, min_restock: float) -> str:
    """
    Map quantities to 'bahaya', 'low' or '-'.

    The danger check runs first and only applies when a par quantity is set.
    Both comparisons are inclusive.
    """
    if par_qty and par_qty > 0 and current_qty <= par_qty * DANGER_PAR_RATIO:
        return CONDITION_DANGER
    if current_qty <= min_restock:
        return CONDITION_LOW
    return CONDITION_NORMAL


def urgency_rank(condition: str) -> int:
    return CONDITION_ORDER.get(condition, CONDITION_ORDER[CONDITION_NORMAL])


def sort_by_urgency(items: Iterable[CurrentStockItem]) -> List[CurrentStockItem]:
    """bahaya first, then low, then the rest; ties keep their sheet order."""
    return sorted(items, key=lambda i: urgency_rank(i.condition))


def needs_restock(item: CurrentStockItem) -> bool:
    """Used for the vendor broadcast."""
    return item.current_qty <= item.min_restock


def needs_attention(item: CurrentStockItem) -> bool:
    """Used for the supplier contact view. Broader than needs_restock."""
    return item.current_qty < item.par_qty or item.condition != CONDITION_NORMAL


def condition_counts(items: Iterable[CurrentStockItem]) -> Dict[str, int]:
    counts = {CONDITION_DANGER: 0, CONDITION_LOW: 0, CONDITION_NORMAL: 0}
    for item in items:
        counts[item.condition] = counts.get(item.condition, 0) + 1
    return counts
