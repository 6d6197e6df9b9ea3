"""
Agent 3 — Market Data (mock)

Serves the dashboard's economic indicators and volatility alerts. No live
feed: indicators come from mock_data.py and each volatility index value is
drawn at random within its preset range, then graded by quartile:

  value < 25% of range   → low
  value < 50%            → moderate
  value < 75%            → high
  otherwise              → extreme

Produces: state["economic_indicators"], state["volatility"]
"""
from __future__ import annotations

import random
from datetime import datetime, timezone
from typing import Optional

from mock_data import MOCK_ECONOMIC_INDICATORS, VOLATILITY_PRESETS
from state.models import EconomicIndicator, VolatilityAlert

_LEVEL_MESSAGES = {
    "low":      "{index} is at a stable level; market volatility is low.",
    "moderate": "{index} has risen somewhat, but market volatility is moderate.",
    "high":     "{index} is elevated and market volatility is widening. Invest with care.",
    "extreme":  "{index} is very high and market volatility is extreme. Exercise great caution.",
}


def fetch_economic_indicators() -> list[EconomicIndicator]:
    return list(MOCK_ECONOMIC_INDICATORS)


def classify_volatility(value: float, min_val: float, max_val: float) -> str:
    span = max_val - min_val
    if value < min_val + span * 0.25:
        return "low"
    if value < min_val + span * 0.5:
        return "moderate"
    if value < min_val + span * 0.75:
        return "high"
    return "extreme"


def generate_volatility(
    id: str,
    market: str,
    index_name: str,
    min_val: float,
    max_val: float,
    rng: Optional[random.Random] = None,
) -> VolatilityAlert:
    """Draw an index value uniformly from [min_val, max_val) and grade it."""
    rng = rng or random.Random()
    value = round(rng.random() * (max_val - min_val) + min_val, 2)
    level = classify_volatility(value, min_val, max_val)

    return VolatilityAlert(
        id=id,
        market=market,
        index_name=index_name,
        index_value=value,
        level=level,
        message=_LEVEL_MESSAGES[level].format(index=index_name),
        timestamp=datetime.now(tz=timezone.utc).isoformat(),
    )


def fetch_volatility(preset_id: str, rng: Optional[random.Random] = None) -> VolatilityAlert:
    """preset_id: "vix" (international) or "vkospi" (domestic)."""
    market, index_name, min_val, max_val = VOLATILITY_PRESETS[preset_id]
    return generate_volatility(preset_id, market, index_name, min_val, max_val, rng=rng)


# ── LangGraph node ────────────────────────────────────────────────────────────

def run(state: dict) -> dict:
    """LangGraph node — fills the mock side-panel data."""
    indicators = fetch_economic_indicators()
    volatility = [fetch_volatility(preset_id) for preset_id in VOLATILITY_PRESETS]

    print(f"\n[Agent 3] {len(indicators)} economic indicators (mock)")
    for alert in volatility:
        print(f"[Agent 3] {alert.index_name} {alert.index_value:.2f} — {alert.level.upper()}")

    return {**state, "economic_indicators": indicators, "volatility": volatility}
