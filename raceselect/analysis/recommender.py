"""
Recommender: the caller side of the scoring engine.
Filters to races the user is licensed for, scores them, ranks, and
summarises the user's experience. The engine itself never sorts or
filters; all eligibility and ordering policy lives here.
"""
from __future__ import annotations

import functools
import logging
import time
from dataclasses import dataclass, field

import pandas as pd

import config
from raceselect.licenses import is_eligible
from raceselect.models import (
    Category,
    ConfidenceLevel,
    Mode,
    RacingOpportunity,
    ScoredOpportunity,
    UserHistory,
)
from raceselect.analysis import engine
from raceselect.analysis.scorer import parse_mode

logger = logging.getLogger(__name__)


@dataclass
class RecommendationResult:
    recommendations: list[ScoredOpportunity]
    mode: Mode
    metadata: dict = field(default_factory=dict)


def filter_eligible(
    opportunities: list[RacingOpportunity],
    history: UserHistory,
) -> list[RacingOpportunity]:
    """
    Races the user holds a high enough license for, judged by their best
    license in the race's category. No licenses at all means nothing is eligible.
    """
    if not history.license_classes:
        logger.debug("User %s holds no licenses, no eligible opportunities", history.user_id)
        return []
    return [o for o in opportunities if is_eligible(o, history)]


def score_all(
    opportunities: list[RacingOpportunity],
    history: UserHistory,
    mode: Mode | str,
    clock: engine.Clock | None = None,
) -> list[ScoredOpportunity]:
    """Score every opportunity against one history, in input order."""
    mode = parse_mode(mode)
    # One timestamp for the whole batch so recency is consistent across rows
    now = (clock or engine.utc_now)()
    pinned = engine.fixed_clock(now)
    return [
        ScoredOpportunity(opportunity=opp, score=engine.score(opp, history, mode, clock=pinned))
        for opp in opportunities
    ]


def _compare_ranked(a: ScoredOpportunity, b: ScoredOpportunity) -> int:
    priority_gap = b.score.priority_score - a.score.priority_score
    if abs(priority_gap) > config.PRIORITY_RANK_BAND:
        return priority_gap
    return b.score.overall - a.score.overall


def rank(scored: list[ScoredOpportunity]) -> list[ScoredOpportunity]:
    """
    Familiar combinations first, but only when the priority gap is larger than
    PRIORITY_RANK_BAND; closer than that, the higher overall score wins.
    Ties keep input order.
    """
    return sorted(scored, key=functools.cmp_to_key(_compare_ranked))


def recommend(
    opportunities: list[RacingOpportunity],
    history: UserHistory,
    mode: Mode | str = config.DEFAULT_MODE,
    category: Category | None = None,
    min_score: float | None = None,
    max_results: int | None = None,
    clock: engine.Clock | None = None,
) -> RecommendationResult:
    started = time.perf_counter()
    mode = parse_mode(mode)
    threshold = config.MIN_SCORE if min_score is None else min_score
    limit = config.MAX_RESULTS if max_results is None else max_results
    if limit < 1:
        raise ValueError(f"max_results must be at least 1, got {limit}")

    candidates = filter_eligible(opportunities, history)
    eligible_count = len(candidates)
    if category is not None:
        candidates = [o for o in candidates if o.category == category]

    scored = score_all(candidates, history, mode, clock=clock)
    above_threshold = [s for s in scored if s.score.overall >= threshold]
    ranked = rank(above_threshold)[:limit]

    logger.info(
        "Recommended %d of %d opportunities (%d eligible) for %s (%s, min score %s)",
        len(ranked), len(opportunities), eligible_count, history.user_id, mode.value, threshold,
    )

    metadata = _metadata(ranked, len(opportunities), started)
    metadata["eligible_opportunities"] = eligible_count
    return RecommendationResult(recommendations=ranked, mode=mode, metadata=metadata)


def compare_modes(
    opportunities: list[RacingOpportunity],
    history: UserHistory,
    clock: engine.Clock | None = None,
    top_n: int = config.COMPARE_TOP_N,
) -> dict[Mode, list[ScoredOpportunity]]:
    """The same eligible races ranked under every mode, top `top_n` each."""
    eligible = filter_eligible(opportunities, history)
    now = (clock or engine.utc_now)()
    pinned = engine.fixed_clock(now)
    return {
        mode: rank(score_all(eligible, history, mode, clock=pinned))[:top_n]
        for mode in Mode
    }


def _metadata(ranked: list[ScoredOpportunity], total: int, started: float) -> dict:
    counts = {level: 0 for level in ConfidenceLevel}
    for s in ranked:
        counts[s.score.data_confidence.performance] += 1
    return {
        "total_opportunities": total,
        "returned": len(ranked),
        "high_confidence_count": counts[ConfidenceLevel.HIGH],
        "estimated_count": counts[ConfidenceLevel.ESTIMATED],
        "no_data_count": counts[ConfidenceLevel.NO_DATA],
        "processing_time_ms": round((time.perf_counter() - started) * 1000, 2),
    }


# ---------------------------------------------------------------------------
# Tabular views
# ---------------------------------------------------------------------------

FRAME_COLUMNS = [
    "series_id", "series_name", "track_id", "track_name", "category",
    "race_length", "overall", "priority_score", "irating_risk", "safety_rating_risk",
    *config.FACTOR_NAMES,
    "performance_confidence",
]


def to_frame(scored: list[ScoredOpportunity]) -> pd.DataFrame:
    """One row per scored opportunity, one column per factor."""
    rows = []
    for s in scored:
        opp, sc = s.opportunity, s.score
        row = {
            "series_id": opp.series_id,
            "series_name": opp.series_name,
            "track_id": opp.track_id,
            "track_name": opp.track_name,
            "category": opp.category.value,
            "race_length": opp.race_length,
            "overall": sc.overall,
            "priority_score": sc.priority_score,
            "irating_risk": sc.irating_risk.value,
            "safety_rating_risk": sc.safety_rating_risk.value,
            "performance_confidence": sc.data_confidence.performance.value,
        }
        row.update(sc.factors.as_dict())
        rows.append(row)
    return pd.DataFrame(rows, columns=FRAME_COLUMNS)


def experience_summary(history: UserHistory, top_n: int = config.EXPERIENCE_TOP_N) -> dict:
    """
    Totals plus the most-raced series and tracks, from the series+track records.
    Every record counts towards the distinct series and track totals, even one
    with zero races. Names aren't part of the history, so entries are keyed by id.
    """
    df = pd.DataFrame(
        [
            {"series_id": h.series_id, "track_id": h.track_id, "race_count": h.race_count}
            for h in history.series_track_history
        ],
        columns=["series_id", "track_id", "race_count"],
    )

    by_series = (
        df.groupby("series_id")["race_count"].sum()
        .sort_values(ascending=False, kind="stable")
        .head(top_n)
    )
    by_track = (
        df.groupby("track_id")["race_count"].sum()
        .sort_values(ascending=False, kind="stable")
        .head(top_n)
    )

    return {
        "total_races": history.overall_stats.total_races,
        "series_with_experience": int(df["series_id"].nunique()),
        "tracks_with_experience": int(df["track_id"].nunique()),
        "most_raced_series": [
            {"series_id": int(sid), "race_count": int(n)} for sid, n in by_series.items()
        ],
        "most_raced_tracks": [
            {"track_id": int(tid), "race_count": int(n)} for tid, n in by_track.items()
        ],
    }
