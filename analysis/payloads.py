"""
Pure parsers: raw model text → typed results.

  parse_portfolio_text()       SECTION-marked text  → PortfolioResult
  parse_stock_analysis_text()  SECTION-marked text  → StockAnalysis
  parse_news_json()            JSON array           → list[NewsArticle]
  parse_financial_json()       JSON object          → FinancialSnapshot

No network, no side effects beyond logging. Citations are attached by the
agents afterwards — they come from a separate metadata channel.
"""
from __future__ import annotations

import json
import logging
import re
import time
from typing import Any, Optional

from analysis.allocation import reconcile_allocations
from analysis.json_envelope import extract_json_envelope, looks_like_json
from analysis.key_insights import extract_key_insights
from analysis.sections import first_section, split_sections
from analysis.stock_recommendations import extract_stock_recommendations
from errors import MalformedPayloadError
from state.models import (
    FinancialIndicator,
    FinancialSnapshot,
    KeyInsight,
    NewsArticle,
    NewsCategory,
    PortfolioResult,
    StockAnalysis,
    StockRecommendation,
)

logger = logging.getLogger(__name__)

_DECODER = json.JSONDecoder()

NO_ANALYSIS_TEXT = "No analysis was returned."


# ── Helpers ───────────────────────────────────────────────────────────────────

def _text(value: Any) -> Optional[str]:
    """Stripped string, or None for non-strings and blanks."""
    if isinstance(value, str):
        return value.strip() or None
    return None


def _slug(name: str) -> str:
    return re.sub(r"[^a-z0-9]+", "_", name.lower()).strip("_")


def _decode(raw_text: str, what: str) -> tuple[Any, str]:
    """
    Isolate and decode the JSON payload. Returns (value, payload).

    raw_decode() stops at the end of the first complete JSON value, so prose
    the model appends after the payload is tolerated.
    """
    payload = extract_json_envelope(raw_text)
    if not looks_like_json(payload):
        raise MalformedPayloadError(
            f"No JSON {what} found in model response.",
            attempted=payload, reason="no_payload",
        )
    try:
        value, end = _DECODER.raw_decode(payload)
    except json.JSONDecodeError as e:
        logger.error(f"{what} JSON parse failed: {e}\nAttempted: {payload[:500]}")
        raise MalformedPayloadError(
            f"Could not parse {what} JSON from model response: {e}",
            attempted=payload, reason="invalid_json", cause=e,
        ) from e

    if payload[end:].strip():
        logger.info(f"Ignored {len(payload[end:].strip())} chars of text after the {what} JSON.")
    return value, payload


# ── SECTION-marked text ───────────────────────────────────────────────────────

def parse_portfolio_text(text: str) -> PortfolioResult:
    """
    Parse a portfolio-recommendation response.

    Uses the first PortfolioSummary / StockRecommendations / KeyInsights
    section. Never raises for missing content — an empty result with a
    warnings entry comes back instead.
    """
    warnings: list[str] = []
    sections = split_sections(text)
    if not sections:
        warnings.append("No SECTION markers found in model response.")
        return PortfolioResult(warnings=warnings)

    summary = first_section(sections, "PortfolioSummary") or ""

    recommendations: list[StockRecommendation] = []
    stocks_body = first_section(sections, "StockRecommendations")
    if stocks_body:
        recommendations = extract_stock_recommendations(stocks_body, warnings)
        recommendations = reconcile_allocations(recommendations, warnings)
    if not recommendations:
        warnings.append("No usable stock recommendations in model response.")

    insights: list[KeyInsight] = []
    insights_body = first_section(sections, "KeyInsights")
    if insights_body:
        insights = extract_key_insights(insights_body)

    return PortfolioResult(
        summary=summary,
        recommendations=recommendations,
        insights=insights,
        warnings=warnings,
    )


def parse_stock_analysis_text(ticker: str, company_name: str, text: str) -> StockAnalysis:
    sections: dict[str, str] = {}
    for s in split_sections(text):
        sections.setdefault(s.name, s.body)

    return StockAnalysis(
        ticker=ticker,
        company_name=company_name,
        analysis=(text or "").strip() or NO_ANALYSIS_TEXT,
        sections=sections,
    )


# ── JSON payloads ─────────────────────────────────────────────────────────────

def parse_news_json(
    text: str,
    id_prefix: str = "news",
    forced_category: Optional[NewsCategory] = None,
    warnings: Optional[list[str]] = None,
) -> list[NewsArticle]:
    """
    Parse a JSON array of news items.

    Args:
        text:            raw model response
        id_prefix:       prefix for generated ids ("<prefix>-<epoch ms>-<index>")
        forced_category: set every article to this category (stock-specific news)
        warnings:        optional sink for dropped items

    Raises:
        MalformedPayloadError  no JSON, bad JSON, or top level is not an array
    """
    sink = warnings if warnings is not None else []
    data, payload = _decode(text, "news")

    if not isinstance(data, list):
        raise MalformedPayloadError(
            f"Expected a JSON array of news items, got {type(data).__name__}.",
            attempted=payload, reason="wrong_shape",
        )

    stamp = int(time.time() * 1000)
    articles: list[NewsArticle] = []

    for index, item in enumerate(data):
        if not isinstance(item, dict):
            msg = f"Skipped news item {index}: not a JSON object."
            logger.warning(msg)
            sink.append(msg)
            continue

        title = _text(item.get("title"))
        if not title:
            msg = f"Skipped news item {index}: missing title."
            logger.warning(msg)
            sink.append(msg)
            continue

        articles.append(NewsArticle(
            id=f"{id_prefix}-{stamp}-{index}",
            title=title,
            summary=_text(item.get("summary")) or "",
            url=_text(item.get("url")) or "#",
            source_name=_text(item.get("sourceName")) or "unknown",
            published_date_text=_text(item.get("publishedDateText")) or "recent",
            category=forced_category or NewsCategory.normalize(item.get("category")),
        ))

    return articles


def parse_financial_json(text: str, warnings: Optional[list[str]] = None) -> FinancialSnapshot:
    """
    Parse a JSON object of the form
        {"indicators": [{"id", "name", "value", "notes"?}, ...], "dataAsOf"?, "dataComment"?}

    Raises:
        MalformedPayloadError  no JSON, bad JSON, not an object, or no usable indicators
    """
    sink = warnings if warnings is not None else []
    data, payload = _decode(text, "financial indicators")

    if not isinstance(data, dict) or not isinstance(data.get("indicators"), list):
        raise MalformedPayloadError(
            "Expected a JSON object with an 'indicators' array.",
            attempted=payload, reason="wrong_shape",
        )

    indicators: list[FinancialIndicator] = []
    for index, item in enumerate(data["indicators"]):
        if not isinstance(item, dict):
            msg = f"Skipped indicator {index}: not a JSON object."
            logger.warning(msg)
            sink.append(msg)
            continue

        name  = _text(item.get("name"))
        value = item.get("value")
        if isinstance(value, str):
            value = value.strip() or None
        elif isinstance(value, bool) or not isinstance(value, (int, float)):
            value = None

        if not name or value is None:
            msg = f"Skipped indicator {index}: missing name or value."
            logger.warning(msg)
            sink.append(msg)
            continue

        indicators.append(FinancialIndicator(
            id=_text(item.get("id")) or _slug(name) or f"indicator_{index}",
            name=name,
            value=value,
            notes=_text(item.get("notes")),
        ))

    if not indicators:
        raise MalformedPayloadError(
            "Response contained no usable financial indicators.",
            attempted=payload, reason="wrong_shape",
        )

    return FinancialSnapshot(
        indicators=indicators,
        data_as_of=_text(data.get("dataAsOf")),
        data_comment=_text(data.get("dataComment")),
        warnings=sink,
    )
