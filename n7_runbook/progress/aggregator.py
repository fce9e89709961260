"""
Progress Aggregator.

Pure functions over a StatusSet; nothing here is cached, callers recompute on
every state change.
"""

import math
from typing import Dict, Iterable, List

from pydantic import BaseModel

from ..catalog.catalog import StepCatalog
from ..schemas.step import Category, Status, StepState


def _percent(part: int, whole: int) -> int:
    if whole <= 0:
        return 0
    # Half-up rounding: 12.5 -> 13
    return math.floor(100 * part / whole + 0.5)


def percent_complete(states: Iterable[StepState]) -> int:
    """
    Share of steps completed, 0..100. Skipped and pending steps both count
    as not complete. An empty StatusSet yields 0.
    """
    states = list(states)
    completed = sum(1 for s in states if s.status is Status.COMPLETED)
    return _percent(completed, len(states))


class ProgressSummary(BaseModel):
    percent: int
    total: int
    completed: int
    skipped: int
    pending: int
    critical_remaining: List[str]
    by_category: Dict[Category, int]


def progress_summary(catalog: StepCatalog, states: Iterable[StepState]) -> ProgressSummary:
    """Breakdown of progress for the sidebar: counts, open critical steps and per-phase percentages."""
    by_id = {s.id: s for s in states}
    counts = {status: 0 for status in Status}
    category_totals: Dict[Category, int] = {}
    category_done: Dict[Category, int] = {}
    critical_remaining = []

    for step in catalog:
        status = by_id[step.id].status
        counts[status] += 1
        category_totals[step.category] = category_totals.get(step.category, 0) + 1
        if status is Status.COMPLETED:
            category_done[step.category] = category_done.get(step.category, 0) + 1
        elif step.critical:
            critical_remaining.append(step.id)

    return ProgressSummary(
        percent=_percent(counts[Status.COMPLETED], len(catalog)),
        total=len(catalog),
        completed=counts[Status.COMPLETED],
        skipped=counts[Status.SKIPPED],
        pending=counts[Status.PENDING],
        critical_remaining=critical_remaining,
        by_category={
            category: _percent(category_done.get(category, 0), total)
            for category, total in category_totals.items()
        },
    )
