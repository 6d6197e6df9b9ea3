"""
Agent 2 — Portfolio Recommendations

Asks Gemini (with Google Search grounding) for a portfolio summary, 3-5 stock
picks with allocation percentages, and the market insights behind them,
tailored to the user's profile.

Data pipeline:
  _build_prompt(profile)               →  SECTION-marked prompt
  tools/gemini_client.complete()       →  Completion(text, citations)
  analysis/payloads.parse_portfolio_text()  →  PortfolioResult
  state["portfolio"]                   →  PortfolioResult (+ grounding sources)
"""
from __future__ import annotations

import time
import warnings

from analysis.payloads import parse_portfolio_text
from errors import EmptyResultWarning
from state.models import InvestmentStrategy, MarketPreference, PortfolioResult, UserProfile
from tools.gemini_client import GeminiClient

# ── Prompt builder ────────────────────────────────────────────────────────────

_MARKET_INSTRUCTIONS = {
    MarketPreference.US: (
        "Recommend mainly stocks listed on US markets (NYSE, NASDAQ).",
        "AAPL, MSFT (US stocks)",
    ),
    MarketPreference.KR: (
        "Recommend mainly stocks listed on Korean markets (KOSPI, KOSDAQ).",
        "005930.KS, 035720.KS (Korean stocks)",
    ),
    MarketPreference.BOTH: (
        "Recommend a mix of US and Korean listed stocks.",
        "AAPL (US stock), 005930.KS (Korean stock)",
    ),
}


def _strategy_instruction(strategy: InvestmentStrategy) -> str:
    if strategy == InvestmentStrategy.UNDEFINED:
        return ("The user has not chosen a specific investment strategy. Base the picks on "
                "overall market conditions and the user's profile.")
    return (f"The user's main investment strategy is '{strategy.value}'. Prefer stocks that fit "
            f"this strategy and mention the fit in each rationale.")


def _build_prompt(profile: UserProfile) -> str:
    market_instruction, ticker_example = _MARKET_INSTRUCTIONS[profile.market_preference]

    return f"""\
You are InsightPick, an expert financial advisory AI.
User profile:
- Investment goal: {profile.investment_goal.value}
- Risk appetite: {profile.risk_appetite.value}
- Market preference: {profile.market_preference.value}
- Investment strategy: {profile.investment_strategy.value}

{market_instruction}
{_strategy_instruction(profile.investment_strategy)}
Base your answer on the latest economic indicators, market trends and financial news (via Google Search).

Label every section exactly as shown below. Do not use markdown code fences such as ```json.

SECTION: PortfolioSummary
[A short overall summary of the portfolio strategy (max 3 sentences) and why it suits the user's \
goal, risk appetite and strategy.]

SECTION: StockRecommendations
[3-5 stock recommendations matching the market preference and strategy. Each one must start with \
"- Ticker:". Give every stock an AllocationPercentage; all AllocationPercentage values must add up \
to 100. If you cannot suggest an allocation for a stock, omit the field or set it to 0.]
- Ticker: [ticker symbol, e.g. {ticker_example}]
- CompanyName: [full company name]
- Rationale: [concise rationale tied to current conditions, news and the user's strategy. Max 2 sentences.]
- ConfidenceScore: [a number from 0 to 100, if you can estimate one]
- AllocationPercentage: [share of the portfolio for this stock, e.g. 30 means 30%]

SECTION: KeyInsights
[2-3 key market insights or news snippets that drove these recommendations:]
- Insight: [the insight or news summary]
- (Optional) SourceDetails: [brief mention of the source if taken from search results]

---END OF RESPONSE---
"""


# ── Standalone entry point (testable without LangGraph) ───────────────────────

def fetch(profile: UserProfile, client: GeminiClient) -> PortfolioResult:
    """
    Request and parse portfolio recommendations for a user profile.

    Raises:
        CredentialError, BackendError  from the completion call
    """
    completion = client.complete(_build_prompt(profile), enable_retrieval=True)
    result = parse_portfolio_text(completion.text)

    if not result.recommendations:
        warnings.warn(
            "Model response contained no usable stock recommendations.",
            EmptyResultWarning,
            stacklevel=2,
        )

    return result.model_copy(update={"sources": completion.citations})


# ── LangGraph node ────────────────────────────────────────────────────────────

def run(state: dict, client: GeminiClient) -> dict:
    """
    LangGraph node — adds state["portfolio"] = PortfolioResult.
    client is injected from main.py.
    """
    profile: UserProfile = state["profile"]

    print("\n" + "="*70)
    print("AGENT 2 — Portfolio Recommendations")
    print("="*70)
    print(f"Profile: {profile.investment_goal.value} | risk {profile.risk_appetite.value} | "
          f"{profile.market_preference.value} | {profile.investment_strategy.value}")

    t0 = time.time()
    portfolio = fetch(profile, client)
    elapsed = time.time() - t0

    print(f"Done in {elapsed:.1f}s — {len(portfolio.recommendations)} picks, "
          f"{len(portfolio.insights)} insights, {len(portfolio.sources)} sources")
    for w in portfolio.warnings:
        print(f"  [warn] {w}")

    return {**state, "portfolio": portfolio}
