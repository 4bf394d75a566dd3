"""
Factor 5: Familiarity
Experience with this exact series+track, decayed by how long ago the last race was.
With no exact match, experience in the same series or at the same track counts
for up to half marks.

The recency step reads the injected `now`; identical inputs scored at
different times can differ here and only here.
"""
from __future__ import annotations

from datetime import datetime, timezone

import config
from raceselect.models import FactorResult, RacingOpportunity, UserHistory
from raceselect.analysis.context import (
    HistoryMatch,
    clamp,
    finite_or_default,
    related_history,
    round_score,
)


def compute(
    opportunity: RacingOpportunity,
    history: UserHistory,
    match: HistoryMatch,
    now: datetime,
) -> FactorResult:
    if match.has_at_least(1):
        race_count = match.race_count
        base = min(100.0, race_count * config.FAMILIARITY_POINTS_PER_RACE)
        days = days_since(match.record.last_race_date, now)
        recency = recency_multiplier(days)
        score = round_score(
            base * (config.FAMILIARITY_RECENCY_BASE + config.FAMILIARITY_RECENCY_SHARE * recency)
        )
        last_raced = f"{days} days ago" if days is not None else "date unknown"
        return FactorResult(
            name="familiarity",
            score=int(clamp(score, 0, 100)),
            evidence=[
                f"{race_count} races at this series/track",
                f"Last raced {last_raced} → recency x{recency:.1f}",
            ],
            data={"source": "exact", "race_count": race_count, "days_since": days, "recency": recency},
        )

    related = related_history(opportunity, history)
    if related:
        counts = [finite_or_default(r.race_count, 0.0) for r in related]
        avg_races = sum(counts) / len(counts)
        score = round_score(
            min(config.FAMILIARITY_RELATED_CAP, avg_races * config.FAMILIARITY_RELATED_POINTS_PER_RACE)
        )
        return FactorResult(
            name="familiarity",
            score=int(clamp(score, 0, 100)),
            evidence=[
                f"No races at this combination; {len(related)} related series/track "
                f"records averaging {avg_races:.1f} races"
            ],
            data={"source": "related", "related_records": len(related), "avg_race_count": avg_races},
            confidence=0.5,
        )

    return FactorResult(
        name="familiarity",
        score=0,
        evidence=["No experience with this series or track"],
        data={"source": "none"},
        confidence=0.0,
    )


def days_since(last_race: datetime | None, now: datetime) -> int | None:
    if last_race is None:
        return None
    # Naive timestamps from the data layer are UTC
    if last_race.tzinfo is None:
        last_race = last_race.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return (now - last_race).days


def recency_multiplier(days: int | None) -> float:
    """1.0 within a week, 0.8 within a month, 0.5 within a quarter, else 0.3."""
    if days is None:
        return config.FAMILIARITY_RECENCY_STALE
    for max_days, multiplier in config.FAMILIARITY_RECENCY_STEPS:
        if days <= max_days:
            return multiplier
    return config.FAMILIARITY_RECENCY_STALE
