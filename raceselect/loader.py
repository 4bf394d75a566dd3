"""
JSON-shaped records ↔ dataclasses.

Inputs arrive camelCase from the schedule and analytics layers (snake_case is
accepted too). Missing or malformed numbers become NaN and are handled by each
factor's fallback; missing identifiers are structural errors.
"""
from __future__ import annotations

import json
import logging
import math
import re
from datetime import datetime
from typing import Any

import pandas as pd

from raceselect.licenses import normalize_license
from raceselect.models import (
    Category,
    FactorResult,
    GlobalStats,
    LicenseClass,
    RacingOpportunity,
    Score,
    ScoredOpportunity,
    SeriesTrackHistory,
    TimeSlot,
    UserHistory,
    UserOverallStats,
)

logger = logging.getLogger(__name__)


class OpportunityDataError(ValueError):
    """A record is missing a field the engine cannot do without."""


def _snake(key: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", key).lower()


def _get(d: dict, key: str, default: Any = None) -> Any:
    """Look up a camelCase key, falling back to its snake_case spelling."""
    if key in d:
        return d[key]
    return d.get(_snake(key), default)


def _require(d: dict, key: str, record: str) -> Any:
    value = _get(d, key)
    if value is None:
        raise OpportunityDataError(f"{record}: missing required field '{key}'")
    return value


def _require_id(d: dict, key: str, record: str) -> int:
    value = _require(d, key, record)
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        raise OpportunityDataError(f"{record}: '{key}' must be an integer, got {value!r}") from None


def _num(d: dict, key: str) -> float:
    value = _get(d, key)
    if value is None or isinstance(value, bool):
        return math.nan
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


def _int(d: dict, key: str, default: int = 0) -> int:
    value = _num(d, key)
    if not math.isfinite(value):
        return default
    return int(value)


def _category(value: Any, record: str) -> Category:
    try:
        return value if isinstance(value, Category) else Category(str(value).strip().lower())
    except ValueError:
        raise OpportunityDataError(f"{record}: unknown category {value!r}") from None


def _date(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    try:
        ts = pd.to_datetime(value, utc=True)
    except (ValueError, TypeError, OverflowError):
        logger.debug("Unparseable lastRaceDate %r, treating as unknown", value)
        return None
    if pd.isna(ts):
        return None
    return ts.to_pydatetime()


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------

def opportunity_from_dict(d: dict) -> RacingOpportunity:
    record = "opportunity"
    series_id = _require_id(d, "seriesId", record)
    track_id = _require_id(d, "trackId", record)
    record = f"opportunity {series_id}/{track_id}"

    stats = _get(d, "globalStats") or {}
    slots = _get(d, "timeSlots") or []

    return RacingOpportunity(
        series_id=series_id,
        series_name=str(_get(d, "seriesName", "")),
        track_id=track_id,
        track_name=str(_get(d, "trackName", "")),
        license_required=normalize_license(_get(d, "licenseRequired")),
        category=_category(_require(d, "category", record), record),
        season_year=_int(d, "seasonYear"),
        season_quarter=_int(d, "seasonQuarter"),
        race_week_num=_int(d, "raceWeekNum"),
        race_length=_num(d, "raceLength"),
        has_open_setup=bool(_get(d, "hasOpenSetup", False)),
        time_slots=[
            TimeSlot(
                hour=_int(s, "hour"),
                day_of_week=_int(s, "dayOfWeek"),
                strength_of_field=_num(s, "strengthOfField"),
                participant_count=_int(s, "participantCount"),
            )
            for s in slots
        ],
        global_stats=GlobalStats(
            avg_incidents_per_race=_num(stats, "avgIncidentsPerRace"),
            avg_finish_position_std_dev=_num(stats, "avgFinishPositionStdDev"),
            avg_strength_of_field=_num(stats, "avgStrengthOfField"),
            strength_of_field_variability=_num(stats, "strengthOfFieldVariability"),
            attrition_rate=_num(stats, "attritionRate"),
            avg_race_length=_num(stats, "avgRaceLength"),
        ),
    )


def history_from_dict(d: dict) -> UserHistory:
    overall = _get(d, "overallStats") or {}
    return UserHistory(
        user_id=str(_get(d, "userId", "")),
        series_track_history=[
            SeriesTrackHistory(
                series_id=_require_id(h, "seriesId", "seriesTrackHistory"),
                track_id=_require_id(h, "trackId", "seriesTrackHistory"),
                race_count=max(0, _int(h, "raceCount")),
                avg_starting_position=_num(h, "avgStartingPosition"),
                avg_finishing_position=_num(h, "avgFinishingPosition"),
                avg_position_delta=_num(h, "avgPositionDelta"),
                avg_incidents=_num(h, "avgIncidents"),
                finish_position_std_dev=_num(h, "finishPositionStdDev"),
                last_race_date=_date(_get(h, "lastRaceDate")),
            )
            for h in (_get(d, "seriesTrackHistory") or [])
        ],
        overall_stats=UserOverallStats(
            total_races=max(0, _int(overall, "totalRaces")),
            avg_incidents_per_race=_num(overall, "avgIncidentsPerRace"),
            avg_position_delta=_num(overall, "avgPositionDelta"),
            overall_consistency=_num(overall, "overallConsistency"),
        ),
        license_classes=[
            LicenseClass(
                category=_category(_require(lc, "category", "licenseClasses"), "licenseClasses"),
                level=normalize_license(_get(lc, "level")),
                safety_rating=_num(lc, "safetyRating"),
                irating=_num(lc, "iRating") if "iRating" in lc else _num(lc, "irating"),
            )
            for lc in (_get(d, "licenseClasses") or [])
        ],
    )


def load_json(path: str) -> Any:
    with open(path) as f:
        return json.load(f)


def load_opportunities(path: str) -> list[RacingOpportunity]:
    """A file holding either one opportunity object or a list of them."""
    data = load_json(path)
    if isinstance(data, dict):
        data = [data]
    return [opportunity_from_dict(d) for d in data]


def load_history(path: str) -> UserHistory:
    return history_from_dict(load_json(path))


# ---------------------------------------------------------------------------
# Outputs
# ---------------------------------------------------------------------------

def _factor_to_dict(f: FactorResult) -> dict:
    return {
        "name": f.name,
        "score": f.score,
        "evidence": f.evidence,
        "confidence": round(f.confidence, 2),
    }


def score_to_dict(score: Score, include_breakdown: bool = False) -> dict:
    f = score.factors
    dc = score.data_confidence
    out = {
        "overall": score.overall,
        "factors": {
            "performance": f.performance,
            "safety": f.safety,
            "consistency": f.consistency,
            "predictability": f.predictability,
            "familiarity": f.familiarity,
            "fatigueRisk": f.fatigue_risk,
            "attritionRisk": f.attrition_risk,
            "timeVolatility": f.time_volatility,
        },
        "iRatingRisk": score.irating_risk.value,
        "safetyRatingRisk": score.safety_rating_risk.value,
        "reasoning": list(score.reasoning),
        "dataConfidence": {
            "performance": dc.performance.value,
            "safety": dc.safety.value,
            "consistency": dc.consistency.value,
            "familiarity": dc.familiarity.value,
            "globalStats": dc.global_stats.value,
        },
        "priorityScore": score.priority_score,
    }
    if include_breakdown:
        out["breakdown"] = [_factor_to_dict(b) for b in score.breakdown]
    return out


def scored_to_dict(scored: ScoredOpportunity, include_breakdown: bool = False) -> dict:
    opp = scored.opportunity
    return {
        "seriesId": opp.series_id,
        "seriesName": opp.series_name,
        "trackId": opp.track_id,
        "trackName": opp.track_name,
        "category": opp.category.value,
        "licenseRequired": opp.license_required.value,
        "raceLength": opp.race_length if math.isfinite(opp.race_length) else None,
        "score": score_to_dict(scored.score, include_breakdown=include_breakdown),
    }
