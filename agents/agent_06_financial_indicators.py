"""
Agent 6 — Financial Indicators

Asks Gemini (with Google Search grounding) for the latest key financial
indicators of one company (P/E, EPS, market cap, dividend yield, ...) as a
JSON object and maps it onto a FinancialSnapshot.

Data pipeline:
  prompt → tools/gemini_client.complete() → analysis/payloads.parse_financial_json()
  state["financials"] → FinancialSnapshot (+ grounding sources)
"""
from __future__ import annotations

import time

from analysis.payloads import parse_financial_json
from state.models import FinancialSnapshot
from tools.gemini_client import GeminiClient


def _build_prompt(ticker: str, company_name: str) -> str:
    return f"""\
You are a financial data analysis AI. Use Google Search to find the latest key financial \
indicators for {company_name} (ticker: {ticker}).
For each indicator give 'id', 'name', 'value' and, where possible, 'notes' (e.g. TTM, latest \
quarter). **Escape any double quote inside a JSON string value with a backslash.**

Respond with a **perfectly valid JSON object** in exactly this format. **Do not use code block \
fences (e.g. ```json ... ```); the response must contain only the JSON object from start to end:**
{{
  "indicators": [
    {{ "id": "pe_ratio", "name": "P/E ratio", "value": "value", "notes": "extra detail" }},
    {{ "id": "eps", "name": "Earnings per share (EPS)", "value": "value USD", "notes": "extra detail" }},
    {{ "id": "market_cap", "name": "Market capitalization", "value": "value", "notes": "extra detail" }},
    {{ "id": "dividend_yield", "name": "Dividend yield", "value": "value", "notes": "extra detail" }}
  ],
  "dataAsOf": "YYYY-MM-DD or 'latest available'",
  "dataComment": "Figures are based on the most recent information found via Google Search and may \
differ slightly from exchange data. (optional comment)"
}}
All figures should reflect the latest available information. Indicators with no data may be omitted.
"""


# ── Standalone entry point (testable without LangGraph) ───────────────────────

def fetch(ticker: str, company_name: str, client: GeminiClient) -> FinancialSnapshot:
    """
    Raises:
        CredentialError, BackendError
        MalformedPayloadError  bad JSON, wrong shape, or no usable indicators
    """
    completion = client.complete(_build_prompt(ticker, company_name), enable_retrieval=True)
    snapshot = parse_financial_json(completion.text)
    return snapshot.model_copy(update={"sources": completion.citations})


# ── LangGraph node ────────────────────────────────────────────────────────────

def run(state: dict, client: GeminiClient) -> dict:
    """LangGraph node — adds state["financials"] for state["ticker"]."""
    ticker, company = state["ticker"], state["company_name"]

    print("\n" + "="*70)
    print(f"AGENT 6 — Financial Indicators: {company} ({ticker})")
    print("="*70)

    t0 = time.time()
    snapshot = fetch(ticker, company, client)
    print(f"Done in {time.time() - t0:.1f}s — {len(snapshot.indicators)} indicators "
          f"(as of {snapshot.data_as_of or 'n/a'})")
    for ind in snapshot.indicators:
        notes = f"  ({ind.notes})" if ind.notes else ""
        print(f"  {ind.name:<32} {ind.value}{notes}")

    return {**state, "financials": snapshot}
