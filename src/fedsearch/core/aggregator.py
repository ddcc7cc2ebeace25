"""Aggregator — merges per-source results into one ranked result set."""

from __future__ import annotations

import contextlib
from collections.abc import Iterable

from fedsearch.models.result import AggregateResult, NormalizedRecord, SourceResult


def score_of(record: NormalizedRecord) -> float:
    """Sort key: the record's ``score`` as a float, 0.0 if missing or non-numeric."""
    score = record.get("score")
    with contextlib.suppress(TypeError, ValueError):
        return float(score)  # type: ignore[arg-type]
    return 0.0


def aggregate(sources: Iterable[SourceResult | None]) -> AggregateResult:
    """Sum totals and merge records, highest score first.

    ``None`` entries (dropped sources) contribute nothing. The sort is
    stable, so records with equal scores keep source order, then their order
    within the source.
    """
    total = 0
    records: list[NormalizedRecord] = []
    for source in sources:
        if source is None:
            continue
        total += source.total
        records.extend(source.records)

    records.sort(key=score_of, reverse=True)
    return AggregateResult(total=total, results=records)
