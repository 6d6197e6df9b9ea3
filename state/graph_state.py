"""
LangGraph state for the dashboard pipeline.
"""
from __future__ import annotations

from typing import Optional
from typing_extensions import TypedDict

from state.models import (
    EconomicIndicator,
    FinancialSnapshot,
    NewsArticle,
    PortfolioResult,
    StockAnalysis,
    UserProfile,
    VolatilityAlert,
)


class DashboardState(TypedDict, total=False):
    # Input: CLI flags or the saved profile
    profile: UserProfile

    # Detail view, set when --ticker is given
    ticker: Optional[str]
    company_name: Optional[str]

    # Agent 3 output (mock side panels)
    economic_indicators: list[EconomicIndicator]
    volatility: list[VolatilityAlert]

    # Agent 2 output
    portfolio: Optional[PortfolioResult]

    # Agent 5 output
    news: list[NewsArticle]
    stock_news: list[NewsArticle]

    # Agent 6 / Agent 7 output (detail view)
    financials: Optional[FinancialSnapshot]
    stock_analysis: Optional[StockAnalysis]
