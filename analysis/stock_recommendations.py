"""
Stock recommendation extractor — body of a "StockRecommendations" section
→ list[StockRecommendation].

Expected micro-format (one block per stock, labels may carry a leading "- "):

    - Ticker: 005930.KS
    - CompanyName: Samsung Electronics
    - Rationale: Memory pricing recovery. Fits a growth strategy.
    - ConfidenceScore: 75
    - AllocationPercentage: 30

Each field has its own pattern and is matched independently within the
block, first match wins. Blocks missing ticker, company name or rationale
are dropped (partial results are fine). Allocation reconciliation is a
separate step — see analysis/allocation.py.
"""
from __future__ import annotations

import logging
import re
from typing import Optional

from state.models import StockRecommendation

logger = logging.getLogger(__name__)

TICKER_MARKER = "- Ticker:"

# ── Field patterns ────────────────────────────────────────────────────────────

# Ticker may sit on the next line; a field label such as "CompanyName:" is not a ticker
_TICKER_RE       = re.compile(r"^[ \t]*(?:\r?\n[ \t]*)?(?P<ticker>\w[\w.-]*)(?![\w.-]|[ \t]*:)")
_COMPANY_RE      = re.compile(r"CompanyName:[ \t]*(?P<company>[^\n]*)")
_RATIONALE_RE    = re.compile(
    r"Rationale:[ \t]*(?P<rationale>.*?)"
    r"(?=^[ \t]*(?:-[ \t]*)?(?:ConfidenceScore|AllocationPercentage):|\Z)",
    re.DOTALL | re.MULTILINE,
)
_CONFIDENCE_RE   = re.compile(r"ConfidenceScore:[ \t]*(?P<score>\d+)")
_ALLOCATION_RE   = re.compile(r"AllocationPercentage:[ \t]*(?P<pct>\d+(?:\.\d*)?)")


def _match(pattern: re.Pattern, chunk: str, group: str) -> Optional[str]:
    m = pattern.search(chunk)
    if not m:
        return None
    value = m.group(group).strip()
    return value or None


# ── Extractor ─────────────────────────────────────────────────────────────────

def extract_stock_recommendations(
    body: str,
    warnings: Optional[list[str]] = None,
) -> list[StockRecommendation]:
    """
    Parse a StockRecommendations section body.

    Args:
        body:     section text (preamble before the first "- Ticker:" is ignored)
        warnings: optional sink; one human-readable line per dropped block/field

    Returns:
        recommendations in order of appearance, allocations NOT yet reconciled
    """
    sink = warnings if warnings is not None else []
    recommendations: list[StockRecommendation] = []

    for chunk in body.split(TICKER_MARKER)[1:]:
        ticker    = _match(_TICKER_RE, chunk, "ticker")
        company   = _match(_COMPANY_RE, chunk, "company")
        rationale = _match(_RATIONALE_RE, chunk, "rationale")

        if not (ticker and company and rationale):
            missing = [
                name for name, val in
                (("ticker", ticker), ("company name", company), ("rationale", rationale))
                if not val
            ]
            msg = f"Skipped stock block '{chunk.strip()[:40]}' — missing {', '.join(missing)}."
            logger.warning(msg)
            sink.append(msg)
            continue

        confidence: Optional[int] = None
        raw_score = _match(_CONFIDENCE_RE, chunk, "score")
        if raw_score is not None:
            confidence = int(raw_score)
            if confidence > 100:
                msg = f"{ticker}: confidence score {confidence} out of range — ignored."
                logger.warning(msg)
                sink.append(msg)
                confidence = None

        allocation: Optional[float] = None
        raw_pct = _match(_ALLOCATION_RE, chunk, "pct")
        if raw_pct is not None:
            allocation = float(raw_pct)

        recommendations.append(StockRecommendation(
            ticker=ticker,
            company_name=company,
            rationale=rationale,
            confidence_score=confidence,
            allocation_percentage=allocation,
        ))

    return recommendations
