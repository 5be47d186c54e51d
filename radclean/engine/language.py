"""Sentences shared by the organ narratives."""

from collections.abc import Sequence

from radclean.engine.common import collapse_whitespace, ensure_terminator
from radclean.models import DdxItem, Likelihood, OutputStyle, Recommendation

__all__ = [
    "collapse_whitespace",
    "ensure_terminator",
    "probability_sentence",
    "recommendation_sentence",
]


def probability_sentence(ddx: Sequence[DdxItem], style: OutputStyle) -> str:
    """Group differential names by likelihood into one sentence.

    The "less likely" clause is only written in Detailed style.
    Returns '' when there is nothing to say.
    """
    high = [d.name for d in ddx if d.likelihood == Likelihood.HIGH]
    medium = [d.name for d in ddx if d.likelihood == Likelihood.MEDIUM]
    low = [d.name for d in ddx if d.likelihood == Likelihood.LOW]

    parts: list[str] = []
    if high:
        parts.append(f"Primarily {', '.join(high)}")
    if medium:
        parts.append(f"differential includes {', '.join(medium)}")
    if low and style == OutputStyle.DETAILED:
        parts.append(f"less likely {', '.join(low)}")
    if not parts:
        return ""
    sentence = "; ".join(parts)
    return ensure_terminator(sentence[0].upper() + sentence[1:])


def recommendation_sentence(recs: Sequence[Recommendation], limit: int) -> str:
    """'Recommendation: Emergent: T (d1; d2) | Priority: U.' or '' when empty."""
    chunks: list[str] = []
    for rec in list(recs)[: max(limit, 0)]:
        chunk = f"{rec.urgency.value}: {rec.text}" if rec.urgency else rec.text
        if rec.details:
            chunk += f" ({'; '.join(rec.details)})"
        chunks.append(chunk)
    if not chunks:
        return ""
    return ensure_terminator("Recommendation: " + " | ".join(chunks))
