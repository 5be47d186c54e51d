"""Deduplication, ordering and capping of differentials and recommendations."""

from collections.abc import Iterable, Sequence
from typing import TypeVar

from radclean.models import DdxItem, Recommendation

T = TypeVar("T")


def dedupe_differentials(items: Iterable[DdxItem]) -> list[DdxItem]:
    """Collapse entries sharing a name to the one with the highest likelihood.

    Ties keep the first entry. The result keeps the first-seen order of names.
    """
    best: dict[str, DdxItem] = {}
    for item in items:
        current = best.get(item.name)
        if current is None or item.likelihood.rank > current.likelihood.rank:
            best[item.name] = item
    return list(best.values())


def sort_differentials(items: Iterable[DdxItem]) -> list[DdxItem]:
    """Stable sort: High before Medium before Low, higher score first within a level."""
    return sorted(
        items,
        key=lambda d: (-d.likelihood.rank, -(d.score if d.score is not None else 0)),
    )


def dedupe_recommendations(items: Iterable[Recommendation]) -> list[Recommendation]:
    seen: set[str] = set()
    out: list[Recommendation] = []
    for rec in items:
        if rec.text in seen:
            continue
        seen.add(rec.text)
        out.append(rec)
    return out


def sort_recommendations(items: Iterable[Recommendation]) -> list[Recommendation]:
    """Stable sort by urgency; entries without urgency go last."""
    return sorted(items, key=lambda r: r.urgency.rank if r.urgency is not None else 99)


def cap(items: Sequence[T], limit: int) -> list[T]:
    if limit < 0:
        return list(items)
    return list(items[:limit])


def finalize_differentials(items: Iterable[DdxItem], limit: int) -> list[DdxItem]:
    return cap(sort_differentials(dedupe_differentials(items)), limit)
