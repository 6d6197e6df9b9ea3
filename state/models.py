"""
Pydantic models for the dashboard: user profile, parsed AI output, mock market data.

All records are built fresh per API call and replaced wholesale on the next
one — nothing here is mutated after construction.
"""
from __future__ import annotations

from enum import Enum
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# ── Profile enums ─────────────────────────────────────────────────────────────

class InvestmentGoal(str, Enum):
    LONG_TERM_GROWTH     = "Long-term growth"
    SHORT_TERM_GAINS     = "Short-term gains"
    DIVIDEND_INCOME      = "Dividend income"
    CAPITAL_PRESERVATION = "Capital preservation"
    BALANCED             = "Balanced portfolio"


class RiskAppetite(str, Enum):
    LOW       = "Low"
    MEDIUM    = "Medium"
    HIGH      = "High"
    VERY_HIGH = "Very high"


class MarketPreference(str, Enum):
    US   = "US stocks"
    KR   = "Korean stocks"
    BOTH = "Both (US and Korea)"


class InvestmentStrategy(str, Enum):
    VALUE           = "Value investing"
    GROWTH          = "Growth investing"
    DIVIDEND        = "Dividend investing"
    INDEX_TRACKING  = "Index tracking"
    ESG             = "ESG investing"
    MOMENTUM        = "Momentum investing"
    CONTRARIAN      = "Contrarian investing"
    SMALL_CAP       = "Small-cap investing"
    SECTOR_ROTATION = "Sector rotation"
    UNDEFINED       = "No specific strategy"


class NewsCategory(str, Enum):
    TECHNOLOGY      = "technology"
    FINANCE         = "finance"
    GLOBAL_ECONOMY  = "global_economy"
    INDUSTRY_TRENDS = "industry_trends"
    MARKET_ANALYSIS = "market_analysis"
    REAL_ESTATE     = "real_estate"
    ENERGY          = "energy"
    COMPANY_NEWS    = "company_news"
    OTHER           = "other"           # fallback for anything unrecognised

    @classmethod
    def normalize(cls, raw: object) -> "NewsCategory":
        """Map a model-supplied label onto a member; unknown or missing → OTHER."""
        if not isinstance(raw, str):
            return cls.OTHER
        key = raw.strip().lower().replace("-", "_").replace(" ", "_")
        for member in cls:
            if member.value == key:
                return member
        return cls.OTHER


class UserProfile(BaseModel):
    investment_goal:     InvestmentGoal
    risk_appetite:       RiskAppetite
    market_preference:   MarketPreference
    investment_strategy: InvestmentStrategy = InvestmentStrategy.UNDEFINED


# ── Parsed AI output ──────────────────────────────────────────────────────────

class CitationSource(BaseModel):
    title: str
    uri: str


class StockRecommendation(BaseModel):
    ticker: str
    company_name: str
    rationale: str
    confidence_score: Optional[int] = Field(None, ge=0, le=100)
    # Raw model values may exceed 100 before reconciliation; see analysis/allocation.py
    allocation_percentage: Optional[float] = Field(None, ge=0)


class KeyInsight(BaseModel):
    insight: str = Field(..., min_length=1)
    source_details: Optional[str] = None


class PortfolioResult(BaseModel):
    summary: str = ""
    recommendations: list[StockRecommendation] = Field(default_factory=list)
    insights: list[KeyInsight] = Field(default_factory=list)
    sources: list[CitationSource] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)   # degraded-path diagnostics


class NewsArticle(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    summary: str = ""
    url: str = "#"
    source_name: str = Field("unknown", alias="sourceName")
    published_date_text: str = Field("recent", alias="publishedDateText")
    category: NewsCategory = NewsCategory.OTHER


class FinancialIndicator(BaseModel):
    id: str
    name: str
    value: Union[str, int, float]
    notes: Optional[str] = None


class FinancialSnapshot(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    indicators: list[FinancialIndicator] = Field(..., min_length=1)
    data_as_of: Optional[str] = Field(None, alias="dataAsOf")
    data_comment: Optional[str] = Field(None, alias="dataComment")
    sources: list[CitationSource] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class StockAnalysis(BaseModel):
    ticker: str
    company_name: str
    analysis: str
    sections: dict[str, str] = Field(default_factory=dict)   # first body per section name
    sources: list[CitationSource] = Field(default_factory=list)


# ── Mock market data ──────────────────────────────────────────────────────────

class EconomicIndicator(BaseModel):
    id: str
    name: str
    value: Union[str, float]
    trend: Literal["up", "down", "neutral"]
    last_updated: str       # ISO date
    unit: Optional[str] = None


class VolatilityAlert(BaseModel):
    id: str
    market: str             # display title, e.g. "Global market volatility (VIX)"
    index_name: str         # e.g. "VIX", "VKOSPI"
    index_value: float
    level: Literal["low", "moderate", "high", "extreme"]
    message: str
    timestamp: str          # ISO 8601, UTC
