"""
Factor 2: Safety
Expected incidents per race, inverted onto 0–100 (fewer incidents = higher).

Personal series+track history (3+ races) is used as-is; it already reflects
this race's usual length. Every other estimate is scaled by race length.
"""
from __future__ import annotations

import logging
import math

import config
from raceselect.models import FactorResult, RacingOpportunity, UserHistory
from raceselect.analysis.context import (
    HistoryMatch,
    clamp,
    round_score,
    effective_race_length,
    find_license,
    is_finite,
)

logger = logging.getLogger(__name__)

# How much of the estimate rests on the user's own results
_SOURCE_CONFIDENCE: dict[str, float] = {
    "personal":     1.0,
    "cross_series": config.SAFETY_PERSONAL_WEIGHT,
    "global":       0.0,
    "fallback":     0.0,
}


def race_length_multiplier(race_length: float) -> float:
    """
    Incident multiplier relative to a 20-minute baseline.
    Short races floor at 0.8x; longer races grow logarithmically
    (40 min ≈ 1.5x, 60 min ≈ 1.8x) up to a 2.0x cap.
    """
    baseline = config.RACE_LENGTH_BASELINE_MINUTES
    if race_length <= baseline:
        return max(config.RACE_LENGTH_MIN_MULTIPLIER, race_length / baseline)
    growth = 1 + math.log2(race_length / baseline) * config.RACE_LENGTH_LOG_SCALE
    return min(config.RACE_LENGTH_MAX_MULTIPLIER, growth)


def safety_rating_discount(safety_rating: float) -> float:
    """Fraction of expected incidents removed for a clean record: 0 at SR ≤ 2.0, 30% at SR 5.0."""
    sr_factor = min(1.0, max(0.0, safety_rating - config.SAFETY_RATING_FLOOR) / config.SAFETY_RATING_SPAN)
    return sr_factor * config.SAFETY_RATING_DISCOUNT_WEIGHT


def compute(
    opportunity: RacingOpportunity,
    history: UserHistory,
    match: HistoryMatch,
) -> FactorResult:
    evidence: list[str] = []
    global_incidents = opportunity.global_stats.avg_incidents_per_race
    multiplier = None

    if match.has_at_least(config.MIN_PERSONAL_RACES):
        source = "personal"
        expected_incidents = match.record.avg_incidents
        evidence.append(
            f"Personal avg {expected_incidents:.1f} incidents over {match.race_count} races here"
        )
    else:
        race_length = effective_race_length(opportunity)
        multiplier = race_length_multiplier(race_length)
        license_class = find_license(opportunity, history)
        overall = history.overall_stats

        if overall.total_races >= config.MIN_OVERALL_RACES and license_class is not None:
            source = "cross_series"
            blended = (
                overall.avg_incidents_per_race * config.SAFETY_PERSONAL_WEIGHT
                + global_incidents * (1 - config.SAFETY_PERSONAL_WEIGHT)
            )
            discount = safety_rating_discount(license_class.safety_rating)
            expected_incidents = blended * (1 - discount) * multiplier
            evidence.append(
                f"Your {overall.avg_incidents_per_race:.1f} inc/race blended with series "
                f"{global_incidents:.1f}, SR {license_class.safety_rating:.2f} → -{discount:.0%}"
            )
        else:
            source = "global"
            expected_incidents = global_incidents * multiplier
            evidence.append(f"Series average {global_incidents:.1f} incidents/race")

        evidence.append(f"{race_length:.0f} min race → x{multiplier:.2f} incidents")

    if not is_finite(expected_incidents):
        logger.debug(
            "Non-finite incident estimate for series %s track %s (%s), using fallback",
            opportunity.series_id, opportunity.track_id, source,
        )
        source = "fallback"
        expected_incidents = config.SAFETY_FALLBACK_INCIDENTS
        evidence.append(f"Incident data unavailable — assuming {expected_incidents:.0f} per race")

    low, high = config.SAFETY_INCIDENT_RANGE
    normalized = clamp(expected_incidents, low, high)
    score = round_score((1 - normalized / high) * 100)

    return FactorResult(
        name="safety",
        score=int(clamp(score, 0, 100)),
        evidence=evidence,
        data={
            "source": source,
            "expected_incidents": expected_incidents,
            "length_multiplier": multiplier,
        },
        confidence=_SOURCE_CONFIDENCE[source],
    )
