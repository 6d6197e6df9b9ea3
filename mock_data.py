"""
Hardcoded mock market data for the dashboard side panels.

Economic indicators are static. Volatility presets define the range each
index value is drawn from (see agents/agent_03_market_data.py).
"""
from state.models import EconomicIndicator

MOCK_ECONOMIC_INDICATORS: list[EconomicIndicator] = [
    EconomicIndicator(
        id="1",
        name="Inflation rate (CPI YoY)",
        value="2.8",
        unit="%",
        trend="down",
        last_updated="2024-07-15",
    ),
    EconomicIndicator(
        id="2",
        name="Unemployment rate",
        value="3.9",
        unit="%",
        trend="neutral",
        last_updated="2024-07-05",
    ),
    EconomicIndicator(
        id="3",
        name="GDP growth (QoQ)",
        value="0.5",
        unit="%",
        trend="up",
        last_updated="2024-06-28",
    ),
    EconomicIndicator(
        id="4",
        name="Policy rate (central bank)",
        value="5.25",
        unit="%",
        trend="neutral",
        last_updated="2024-07-20",
    ),
]

# id → (display title, index name, min value, max value)
VOLATILITY_PRESETS: dict[str, tuple[str, str, float, float]] = {
    "vix":    ("Global market volatility (VIX)",     "VIX",    10.0, 40.0),
    "vkospi": ("Domestic market volatility (VKOSPI)", "VKOSPI", 10.0, 45.0),
}
