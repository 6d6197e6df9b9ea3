"""
Agent 7 — Detailed Stock Analysis

Asks Gemini (with Google Search grounding) for a structured qualitative
analysis of one company. The raw text is kept for display; the sections are
also split out by name for callers that render them separately.
"""
from __future__ import annotations

import time

from analysis.payloads import parse_stock_analysis_text
from state.models import StockAnalysis
from tools.gemini_client import GeminiClient

ANALYSIS_SECTIONS = (
    "FinancialHealthSummary",
    "GrowthPotential",
    "RiskFactors",
    "AnalystSentimentOverview",
    "RecentNewsImpact",
)


def _build_prompt(ticker: str, company_name: str) -> str:
    return f"""\
You are a professional financial analyst AI. Provide a detailed analysis of {company_name} \
(ticker: {ticker}).
Focus on information you can find through Google Search and structure the answer clearly.
Do not use markdown code fences such as ```json.

SECTION: FinancialHealthSummary
[Brief overview of the company's financial health: general trends in revenue, profitability and \
debt from publicly available information. Do not invent specific figures unless found via search.]

SECTION: GrowthPotential
[Potential growth drivers (new products, market expansion, competitive advantages) based on recent \
news or announcements.]

SECTION: RiskFactors
[Main risk factors: industry risks, company-specific challenges, market volatility. Reference \
recent developments.]

SECTION: AnalystSentimentOverview
[General summary of analyst sentiment if identifiable from recent search results (e.g. "generally \
optimistic", "mixed", "cautious after recent events"). Avoid specific price targets unless widely \
reported.]

SECTION: RecentNewsImpact
[Briefly summarise the potential impact of 1-2 important recent news items specifically about \
{company_name} from the last few months.]

---END OF RESPONSE---
"""


def fetch(ticker: str, company_name: str, client: GeminiClient) -> StockAnalysis:
    """
    Raises:
        CredentialError, BackendError
    """
    completion = client.complete(_build_prompt(ticker, company_name), enable_retrieval=True)
    analysis = parse_stock_analysis_text(ticker, company_name, completion.text)
    return analysis.model_copy(update={"sources": completion.citations})


def run(state: dict, client: GeminiClient) -> dict:
    """LangGraph node — adds state["stock_analysis"] for state["ticker"]."""
    ticker, company = state["ticker"], state["company_name"]

    print("\n" + "="*70)
    print(f"AGENT 7 — Detailed Analysis: {company} ({ticker})")
    print("="*70)

    t0 = time.time()
    analysis = fetch(ticker, company, client)
    print(f"Done in {time.time() - t0:.1f}s — "
          f"{sum(name in analysis.sections for name in ANALYSIS_SECTIONS)}/{len(ANALYSIS_SECTIONS)} "
          f"sections, {len(analysis.sources)} sources")

    return {**state, "stock_analysis": analysis}
