"""
Key insight extractor — body of a "KeyInsights" section → list[KeyInsight].

    - Insight: Fed signals two cuts before year end.
    - (Optional) SourceDetails: Source: reuters.com, "Fed holds rates"

    ---END OF RESPONSE---
"""
from __future__ import annotations

import re

from state.models import KeyInsight

INSIGHT_MARKER = "- Insight:"
END_OF_RESPONSE = "---END OF RESPONSE---"

_SOURCE_LABEL_RE = re.compile(r"(?:-[ \t]*)?(?:\(Optional\)[ \t]*)?SourceDetails:")


def extract_key_insights(body: str) -> list[KeyInsight]:
    """Parse a KeyInsights section body; blocks with no insight text are dropped."""
    insights: list[KeyInsight] = []

    for chunk in body.split(INSIGHT_MARKER)[1:]:
        end = chunk.find(END_OF_RESPONSE)
        if end != -1:
            chunk = chunk[:end]

        label = _SOURCE_LABEL_RE.search(chunk)
        if label:
            text   = chunk[:label.start()].strip()
            source = chunk[label.end():].strip() or None
        else:
            text, source = chunk.strip(), None

        if text:
            insights.append(KeyInsight(insight=text, source_details=source))

    return insights
