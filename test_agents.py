"""
Tests for the Gemini-backed agents and the LangGraph pipeline in main.py.
Responses are scripted with FakeMessagesListChatModel — no network.
"""
import pytest
from langchain_core.language_models.fake_chat_models import FakeMessagesListChatModel
from langchain_core.messages import AIMessage

from agents import (
    agent_02_portfolio_recommendations as agent_02,
    agent_03_market_data as agent_03,
    agent_05_news as agent_05,
    agent_06_financial_indicators as agent_06,
    agent_07_stock_analysis as agent_07,
)
from errors import BackendError, CredentialError, EmptyResultWarning, MalformedPayloadError
from state.models import (
    InvestmentGoal,
    InvestmentStrategy,
    MarketPreference,
    NewsCategory,
    RiskAppetite,
    UserProfile,
)
from tools.gemini_client import GeminiClient, GeminiConfig

CITATIONS = [
    {"uri": "https://news.test/1", "title": "news.test"},
    {"uri": "https://wire.test/2", "title": "wire.test"},
]

PROFILE = UserProfile(
    investment_goal=InvestmentGoal.DIVIDEND_INCOME,
    risk_appetite=RiskAppetite.LOW,
    market_preference=MarketPreference.KR,
    investment_strategy=InvestmentStrategy.DIVIDEND,
)

PORTFOLIO_TEXT = """\
SECTION: PortfolioSummary
Income first.
SECTION: StockRecommendations
- Ticker: 005930.KS
- CompanyName: Samsung Electronics
- Rationale: Reliable payout.
- ConfidenceScore: 75
- AllocationPercentage: 50
- Ticker: 055550.KS
- CompanyName: Shinhan Financial Group
- Rationale: High yield.
- AllocationPercentage: 50
SECTION: KeyInsights
- Insight: Banks raise dividends.
---END OF RESPONSE---
"""

NEWS_TEXT = '[{"title": "Rates steady", "category": "finance"}, {"title": "Oil dips", "category": "energy"}]'
FINANCIAL_TEXT = '{"indicators": [{"id": "pe_ratio", "name": "P/E ratio", "value": "12.1"}], "dataAsOf": "latest"}'
ANALYSIS_TEXT = "SECTION: FinancialHealthSummary\nSolid balance sheet.\nSECTION: RiskFactors\nMemory cycle."


def _client(*texts, citations=CITATIONS):
    responses = [AIMessage(content=t, response_metadata={"citations": citations}) for t in texts]
    return GeminiClient(
        GeminiConfig(api_key="test-key"),
        model_factory=lambda key: FakeMessagesListChatModel(responses=responses),
    )


# ── Agent 2 ───────────────────────────────────────────────────────────────────

def test_portfolio_prompt_reflects_profile():
    prompt = agent_02._build_prompt(PROFILE)
    assert "Dividend income" in prompt
    assert "005930.KS" in prompt
    assert "'Dividend investing'" in prompt
    assert "SECTION: StockRecommendations" in prompt


def test_portfolio_prompt_without_strategy():
    profile = PROFILE.model_copy(update={"investment_strategy": InvestmentStrategy.UNDEFINED})
    assert "has not chosen a specific investment strategy" in agent_02._build_prompt(profile)


def test_portfolio_fetch_attaches_sources():
    result = agent_02.fetch(PROFILE, _client(PORTFOLIO_TEXT))

    assert result.summary == "Income first."
    assert [r.ticker for r in result.recommendations] == ["005930.KS", "055550.KS"]
    assert [r.allocation_percentage for r in result.recommendations] == [50.0, 50.0]
    assert [s.uri for s in result.sources] == ["https://news.test/1", "https://wire.test/2"]


def test_portfolio_fetch_warns_on_empty_result():
    with pytest.warns(EmptyResultWarning):
        result = agent_02.fetch(PROFILE, _client("Markets are closed today."))
    assert result.recommendations == []
    assert result.warnings


def test_portfolio_fetch_without_key():
    with pytest.raises(CredentialError):
        agent_02.fetch(PROFILE, GeminiClient())


def test_portfolio_backend_failure_propagates():
    class Broken:
        def invoke(self, messages, **kwargs):
            raise ConnectionError("network unreachable")

    client = GeminiClient(GeminiConfig(api_key="k"), model_factory=lambda key: Broken())
    with pytest.raises(BackendError, match="network unreachable"):
        agent_02.fetch(PROFILE, client)


# ── Agent 5 ───────────────────────────────────────────────────────────────────

def test_market_news():
    articles = agent_05.fetch_market_news(_client(NEWS_TEXT))
    assert [a.category for a in articles] == [NewsCategory.FINANCE, NewsCategory.ENERGY]
    assert all(a.id.startswith("news-") for a in articles)


def test_stock_news_forces_company_category():
    articles = agent_05.fetch_stock_news("AAPL", "Apple Inc.", _client(NEWS_TEXT))
    assert {a.category for a in articles} == {NewsCategory.COMPANY_NEWS}
    assert all(a.id.startswith("stock-news-AAPL-") for a in articles)


def test_stock_news_empty_array_warns():
    with pytest.warns(EmptyResultWarning):
        assert agent_05.fetch_stock_news("AAPL", "Apple Inc.", _client("[]")) == []


def test_market_news_malformed_payload():
    with pytest.raises(MalformedPayloadError):
        agent_05.fetch_market_news(_client("No news, sorry."))


# ── Agent 6 / Agent 7 ─────────────────────────────────────────────────────────

def test_financial_indicators():
    snapshot = agent_06.fetch("005930.KS", "Samsung Electronics", _client(FINANCIAL_TEXT))
    assert [i.id for i in snapshot.indicators] == ["pe_ratio"]
    assert snapshot.data_as_of == "latest"
    assert len(snapshot.sources) == 2


def test_stock_analysis():
    analysis = agent_07.fetch("005930.KS", "Samsung Electronics", _client(ANALYSIS_TEXT))
    assert analysis.sections["RiskFactors"] == "Memory cycle."
    assert set(analysis.sections) <= set(agent_07.ANALYSIS_SECTIONS)
    assert analysis.sources[0].title == "news.test"


def test_stock_prompts_name_the_company():
    assert "Samsung Electronics (ticker: 005930.KS)" in agent_06._build_prompt("005930.KS", "Samsung Electronics")
    assert "Samsung Electronics (ticker: 005930.KS)" in agent_07._build_prompt("005930.KS", "Samsung Electronics")


# ── LangGraph nodes and pipeline ──────────────────────────────────────────────

def test_portfolio_node_keeps_existing_state():
    state = agent_02.run({"profile": PROFILE, "ticker": None}, client=_client(PORTFOLIO_TEXT))
    assert state["profile"] is PROFILE
    assert len(state["portfolio"].recommendations) == 2


def test_market_data_node():
    state = agent_03.run({"profile": PROFILE})
    assert len(state["economic_indicators"]) == 4
    assert [v.index_name for v in state["volatility"]] == ["VIX", "VKOSPI"]


def test_pipeline_without_ticker():
    import main

    app = main.build_graph(_client(PORTFOLIO_TEXT, NEWS_TEXT))
    final = app.invoke({"profile": PROFILE, "ticker": None, "company_name": None})

    assert len(final["portfolio"].recommendations) == 2
    assert len(final["news"]) == 2
    assert "stock_analysis" not in final


def test_pipeline_with_ticker_and_no_news():
    import main

    client = _client(PORTFOLIO_TEXT, ANALYSIS_TEXT, FINANCIAL_TEXT, NEWS_TEXT)
    app = main.build_graph(client, ticker="005930.KS", include_news=False)
    final = app.invoke({
        "profile": PROFILE, "ticker": "005930.KS", "company_name": "Samsung Electronics",
    })

    assert "news" not in final
    assert final["stock_analysis"].ticker == "005930.KS"
    assert final["financials"].indicators[0].name == "P/E ratio"
    assert {a.category for a in final["stock_news"]} == {NewsCategory.COMPANY_NEWS}
