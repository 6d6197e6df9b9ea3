#!/usr/bin/env python3
"""
InsightPick Dashboard — Runner
==============================
User profile
  → Agent 3  (mock economic indicators + volatility alerts)
  → Agent 2  (Gemini portfolio recommendations, grounded in Google Search)
  → Agent 5  (Gemini market news)
  → with --ticker: Agent 7 (detailed analysis), Agent 6 (financial indicators),
                   Agent 5 (company news)

Usage:
  ./venv/bin/python3 main.py                                  # saved profile (or defaults)
  ./venv/bin/python3 main.py --goal dividend_income --risk low --market kr --save-profile
  ./venv/bin/python3 main.py --ticker 005930.KS --company "Samsung Electronics"
  ./venv/bin/python3 main.py --no-news --model gemini-2.5-pro

Needs GEMINI_API_KEY in the environment or .env.
"""
import argparse
import logging
import os
import sys
import time
from functools import partial

from dotenv import load_dotenv
from langgraph.graph import END, START, StateGraph

from agents import (
    agent_02_portfolio_recommendations,
    agent_03_market_data,
    agent_05_news,
    agent_06_financial_indicators,
    agent_07_stock_analysis,
)
from cache import profile_store
from errors import DashboardError
from state.graph_state import DashboardState
from state.models import (
    InvestmentGoal,
    InvestmentStrategy,
    MarketPreference,
    PortfolioResult,
    RiskAppetite,
    UserProfile,
)
from tools.gemini_client import GeminiClient, GeminiConfig

load_dotenv()

DEFAULT_PROFILE = UserProfile(
    investment_goal=InvestmentGoal.LONG_TERM_GROWTH,
    risk_appetite=RiskAppetite.MEDIUM,
    market_preference=MarketPreference.US,
    investment_strategy=InvestmentStrategy.UNDEFINED,
)


def build_graph(client: GeminiClient, ticker: str | None = None, include_news: bool = True):
    graph = StateGraph(DashboardState)
    graph.add_node("agent_03", agent_03_market_data.run)
    graph.add_node("agent_02", partial(agent_02_portfolio_recommendations.run, client=client))
    graph.add_edge(START, "agent_03")
    graph.add_edge("agent_03", "agent_02")
    last = "agent_02"

    steps = []
    if include_news:
        steps.append(("agent_05", agent_05_news.run))
    if ticker:
        steps += [
            ("agent_07", agent_07_stock_analysis.run),
            ("agent_06", agent_06_financial_indicators.run),
            ("agent_05_stock", agent_05_news.run_stock_news),
        ]
    for name, node in steps:
        graph.add_node(name, partial(node, client=client))
        graph.add_edge(last, name)
        last = name

    graph.add_edge(last, END)
    return graph.compile()


def _choices(enum_cls) -> list[str]:
    return [m.name.lower() for m in enum_cls]


def _resolve_profile(args: argparse.Namespace) -> UserProfile:
    """Saved profile (or defaults), overridden by any profile flags given."""
    stored = profile_store.load()
    if stored:
        profile, saved_at = stored
        print(f"Using saved profile (saved {saved_at})")
    else:
        profile = DEFAULT_PROFILE

    overrides = {}
    if args.goal:
        overrides["investment_goal"] = InvestmentGoal[args.goal.upper()]
    if args.risk:
        overrides["risk_appetite"] = RiskAppetite[args.risk.upper()]
    if args.market:
        overrides["market_preference"] = MarketPreference[args.market.upper()]
    if args.strategy:
        overrides["investment_strategy"] = InvestmentStrategy[args.strategy.upper()]
    return profile.model_copy(update=overrides)


def _print_portfolio(portfolio: PortfolioResult) -> None:
    print(f"\n{'='*70}")
    print("PORTFOLIO")
    print(f"{'='*70}")
    print(portfolio.summary or "(no summary)")
    print()

    recs = portfolio.recommendations
    equal_weight = 100 / len(recs) if recs else 0.0
    for r in recs:
        if r.allocation_percentage is not None:
            alloc = f"{r.allocation_percentage:>5.1f}%"
        else:
            alloc = f"{equal_weight:>5.1f}%*"
        conf = f"{r.confidence_score:>3d}" if r.confidence_score is not None else "  -"
        print(f"  {r.ticker:<12} {r.company_name:<36} {alloc}  conf {conf}")
        print(f"      {r.rationale}")
    if recs and recs[0].allocation_percentage is None:
        print("  * no reliable allocation from the model — equal weighting shown")

    if portfolio.insights:
        print("\nKey insights:")
        for i in portfolio.insights:
            src = f"  [{i.source_details}]" if i.source_details else ""
            print(f"  - {i.insight}{src}")

    if portfolio.sources:
        print("\nSources:")
        for s in portfolio.sources:
            print(f"  {s.title} — {s.uri}")


def main() -> int:
    parser = argparse.ArgumentParser(description="InsightPick Dashboard")
    parser.add_argument("--goal",     choices=_choices(InvestmentGoal))
    parser.add_argument("--risk",     choices=_choices(RiskAppetite))
    parser.add_argument("--market",   choices=_choices(MarketPreference))
    parser.add_argument("--strategy", choices=_choices(InvestmentStrategy))
    parser.add_argument("--save-profile", action="store_true",
                        help="Remember this profile for the next run")
    parser.add_argument("--reset-profile", action="store_true",
                        help="Forget the saved profile and exit")
    parser.add_argument("--ticker",  help="Also fetch the detail view for this ticker")
    parser.add_argument("--company", help="Company name for --ticker (defaults to the ticker)")
    parser.add_argument("--no-news", action="store_true", help="Skip the market news agent")
    parser.add_argument("--model",   help="Gemini model name (overrides GEMINI_MODEL)")
    args = parser.parse_args()

    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "WARNING").upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if args.reset_profile:
        profile_store.clear()
        print("Saved profile cleared.")
        return 0

    config = GeminiConfig.from_env()
    if args.model:
        config = config.model_copy(update={"model": args.model})
    client = GeminiClient(config)
    if not client.has_credential:
        print("GEMINI_API_KEY is missing or invalid — set it in the environment or .env.")
        return 1

    profile = _resolve_profile(args)
    if args.save_profile:
        profile_store.save(profile)

    print("\n=== InsightPick Dashboard ===")
    print(f"Model: {config.model}  |  News: {'off' if args.no_news else 'on'}  |  "
          f"Detail: {args.ticker or 'off'}")

    initial_state: DashboardState = {
        "profile": profile,
        "ticker": args.ticker,
        "company_name": args.company or args.ticker,
    }

    app = build_graph(client, ticker=args.ticker, include_news=not args.no_news)
    t0 = time.time()
    try:
        final = app.invoke(initial_state)
    except DashboardError as e:
        print(f"\n[error] {type(e).__name__}: {e}")
        return 1

    _print_portfolio(final["portfolio"])
    analysis = final.get("stock_analysis")
    if analysis:
        print(f"\n{'='*70}")
        print(f"ANALYSIS — {analysis.company_name} ({analysis.ticker})")
        print(f"{'='*70}")
        print(analysis.analysis)

    print(f"\nCompleted in {time.time() - t0:.1f}s\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
