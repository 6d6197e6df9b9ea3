"""
Agent 5 — Financial News

Asks Gemini (with Google Search grounding) for recent news as a JSON array
and maps it onto NewsArticle records.

  fetch_market_news()   5 market-wide articles from the last 24-48h,
                        categorised from NewsCategory (unknown → "other")
  fetch_stock_news()    2-3 articles about one company from the last 3 months,
                        category forced to "company_news"

Data pipeline:
  prompt → tools/gemini_client.complete() → analysis/payloads.parse_news_json()
  state["news"] / state["stock_news"] → list[NewsArticle]
"""
from __future__ import annotations

import time
import warnings

from analysis.payloads import parse_news_json
from errors import EmptyResultWarning
from state.models import NewsArticle, NewsCategory
from tools.gemini_client import GeminiClient

_MARKET_CATEGORIES = ", ".join(
    c.value for c in NewsCategory if c not in (NewsCategory.COMPANY_NEWS, NewsCategory.OTHER)
)

_JSON_RULES = """\
Respond with a **perfectly valid JSON array** and nothing else — from the first character to the \
last. **Escape any double quote inside a JSON string value with a backslash.** Do not use code \
block fences (e.g. ```json ... ```)."""


# ── Prompt builders ───────────────────────────────────────────────────────────

def _market_news_prompt() -> str:
    return f"""\
You are a financial news aggregator AI. Use Google Search to find the 5 most important financial \
news articles from the last 24-48 hours.
{_JSON_RULES}
[
  {{
    "title": "article title",
    "summary": "short summary of the article (2-3 sentences)",
    "url": "the real article URL from the Google Search results",
    "sourceName": "publisher or website name (e.g. 'Reuters', 'Bloomberg')",
    "category": "one of: {_MARKET_CATEGORIES}",
    "publishedDateText": "publication date, or 'recent' if the exact date is unknown"
  }}
]
Every URL must be a real, reachable URL confirmed through Google Search.
"""


def _stock_news_prompt(ticker: str, company_name: str) -> str:
    return f"""\
You are a news aggregation AI. Use Google Search to find 2-3 news articles about {company_name} \
(ticker: {ticker}) from the last 3 months.
Each object must contain "title", "summary" (2-3 sentences), "url" (from the search results), \
"sourceName" and "publishedDateText". Always set "category" to "{NewsCategory.COMPANY_NEWS.value}".
{_JSON_RULES}
Example:
[
  {{
    "title": "{company_name} unveils new product",
    "summary": "{company_name} announced the launch of an innovative new product today...",
    "url": "https://example.com/news/article1",
    "sourceName": "Example News Provider",
    "publishedDateText": "2024-07-28",
    "category": "{NewsCategory.COMPANY_NEWS.value}"
  }}
]
If no specific news can be found, return an empty array [].
"""


# ── Standalone entry points (testable without LangGraph) ──────────────────────

def fetch_market_news(client: GeminiClient) -> list[NewsArticle]:
    """
    Raises:
        CredentialError, BackendError, MalformedPayloadError
    """
    completion = client.complete(_market_news_prompt(), enable_retrieval=True)
    articles = parse_news_json(completion.text, id_prefix="news")
    if not articles:
        warnings.warn("Model returned no usable news articles.", EmptyResultWarning, stacklevel=2)
    return articles


def fetch_stock_news(ticker: str, company_name: str, client: GeminiClient) -> list[NewsArticle]:
    """
    Raises:
        CredentialError, BackendError, MalformedPayloadError
    """
    completion = client.complete(_stock_news_prompt(ticker, company_name), enable_retrieval=True)
    articles = parse_news_json(
        completion.text,
        id_prefix=f"stock-news-{ticker}",
        forced_category=NewsCategory.COMPANY_NEWS,
    )
    if not articles:
        warnings.warn(f"No usable news articles for {ticker}.", EmptyResultWarning, stacklevel=2)
    return articles


# ── LangGraph nodes ───────────────────────────────────────────────────────────

def run(state: dict, client: GeminiClient) -> dict:
    """LangGraph node — adds state["news"] = list[NewsArticle]."""
    print("\n" + "="*70)
    print("AGENT 5 — Financial News")
    print("="*70)

    t0 = time.time()
    news = fetch_market_news(client)
    print(f"Done in {time.time() - t0:.1f}s — {len(news)} articles")
    for a in news:
        print(f"  [{a.category.value}] \"{a.title}\" ({a.source_name}, {a.published_date_text})")

    return {**state, "news": news}


def run_stock_news(state: dict, client: GeminiClient) -> dict:
    """LangGraph node — adds state["stock_news"] for state["ticker"]."""
    ticker, company = state["ticker"], state["company_name"]
    print(f"\n[Agent 5] Fetching company news for {company} ({ticker})")

    t0 = time.time()
    news = fetch_stock_news(ticker, company, client)
    print(f"[Agent 5] {len(news)} articles ({time.time() - t0:.1f}s)")

    return {**state, "stock_news": news}
