"""
Section splitter for marked-up model responses.

The portfolio and stock-analysis prompts ask the model to label each block:

    SECTION: PortfolioSummary
    ...
    SECTION: StockRecommendations
    ...

split_sections() turns that into an ordered list of Section(name, body).
It is name-agnostic: duplicate names are kept in order and callers decide
whether to take the first or concatenate.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

_SECTION_RE = re.compile(r"SECTION:[ \t]*(\w+)")

# Outer ```json fence around the whole response
_OUTER_FENCE_RE = re.compile(r"^\s*```(?:json)?\s*|\s*```\s*$", re.IGNORECASE)


@dataclass(frozen=True)
class Section:
    name: str
    body: str


def split_sections(text: str) -> list[Section]:
    """
    Split text on `SECTION: <Name>` markers.

    Text before the first marker is discarded. Bodies are whitespace-trimmed.
    Returns [] when no marker is present — that means "no usable content",
    not an error.
    """
    if not text:
        return []

    clean = _OUTER_FENCE_RE.sub("", text)
    parts = _SECTION_RE.split(clean)

    # re.split with one group → [preamble, name1, body1, name2, body2, ...]
    return [
        Section(name=parts[i].strip(), body=parts[i + 1].strip())
        for i in range(1, len(parts) - 1, 2)
    ]


def first_section(sections: list[Section], name: str) -> Optional[str]:
    """Body of the first section called `name`, or None."""
    for s in sections:
        if s.name == name:
            return s.body
    return None
