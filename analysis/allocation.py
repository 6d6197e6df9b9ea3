"""
Allocation reconciler — makes a batch of AI-suggested allocation percentages
either sum to 100 or disappear entirely.

Three tolerance tiers on |sum - 100|:
  ≤ 0.1        pass through unchanged
  ≤ 5          rescale by 100/sum, one decimal place
  > 5          clear every allocation (caller falls back to equal weighting)

A batch where any stock lacks a non-negative allocation is cleared too.
Clearing and rescaling are reported through the warnings sink, never raised.
"""
from __future__ import annotations

import logging
import math
from typing import Optional

from state.models import StockRecommendation

logger = logging.getLogger(__name__)

ALLOCATION_PASS_TOLERANCE    = 0.1
ALLOCATION_RESCALE_TOLERANCE = 5.0

_TENTHS_TOTAL = 1000    # 100.0% expressed in tenths of a percent


def _clear(recs: list[StockRecommendation]) -> list[StockRecommendation]:
    return [r.model_copy(update={"allocation_percentage": None}) for r in recs]


def _rescale(values: list[float], total: float) -> list[float]:
    """
    Scale values to sum to 100 at one-decimal precision.

    Largest-remainder over tenths: floor every scaled value, then hand the
    leftover tenths to the largest fractional parts. Matches plain rounding
    whenever plain rounding already lands on 100.0.
    """
    factor = _TENTHS_TOTAL / total
    scaled = [round(v * factor, 6) for v in values]
    tenths = [math.floor(s) for s in scaled]

    leftover = _TENTHS_TOTAL - sum(tenths)
    by_remainder = sorted(range(len(values)), key=lambda i: scaled[i] - tenths[i], reverse=True)
    for i in by_remainder[:leftover]:
        tenths[i] += 1

    return [t / 10 for t in tenths]


def reconcile_allocations(
    recommendations: list[StockRecommendation],
    warnings: Optional[list[str]] = None,
) -> list[StockRecommendation]:
    """
    Return a reconciled copy of the batch. The input list and its models are
    left untouched.
    """
    sink = warnings if warnings is not None else []

    if not recommendations:
        return list(recommendations)

    pcts = [r.allocation_percentage for r in recommendations]
    if any(p is None or p < 0 for p in pcts):
        msg = "Not all stocks have valid allocation percentages — cleared for equal distribution."
        logger.warning(msg)
        sink.append(msg)
        return _clear(recommendations)

    # Decimal inputs like 33.3 x3 carry float noise; compare at 6 places
    total = round(sum(pcts), 6)
    drift = round(abs(total - 100), 6)

    if drift > ALLOCATION_RESCALE_TOLERANCE:
        msg = (f"Total allocation ({total:g}%) is far from 100% — "
               f"cleared for equal distribution.")
        logger.warning(msg)
        sink.append(msg)
        return _clear(recommendations)

    if drift > ALLOCATION_PASS_TOLERANCE:
        msg = f"Normalized allocation percentages (original sum: {total:g}%)."
        logger.info(msg)
        sink.append(msg)
        rescaled = _rescale(pcts, total)
        return [
            r.model_copy(update={"allocation_percentage": pct})
            for r, pct in zip(recommendations, rescaled)
        ]

    return list(recommendations)
