"""
Factor 1: Performance
Expected position delta (start minus finish) mapped onto 0–100.

Three sources, best first:
  1. Personal series+track history (3+ races)       → confidence 1.0
  2. Overall delta adjusted for iRating vs field SOF → confidence ≤ 0.8
  3. License level alone                            → confidence 0.3
The mapped score is blended toward neutral (50) by confidence.
"""
from __future__ import annotations

import logging

import config
from raceselect.licenses import license_bonus
from raceselect.models import FactorResult, RacingOpportunity, UserHistory
from raceselect.analysis.context import (
    HistoryMatch,
    clamp,
    find_license,
    is_finite,
    round_score,
)

logger = logging.getLogger(__name__)


def compute(
    opportunity: RacingOpportunity,
    history: UserHistory,
    match: HistoryMatch,
) -> FactorResult:
    evidence: list[str] = []
    license_class = find_license(opportunity, history)
    overall = history.overall_stats

    if match.has_at_least(config.MIN_PERSONAL_RACES):
        source = "personal"
        expected_delta = match.record.avg_position_delta
        confidence = 1.0
        evidence.append(
            f"Personal avg delta {expected_delta:+.1f} over {match.race_count} races here"
        )
    elif overall.total_races >= config.MIN_OVERALL_RACES and license_class is not None:
        source = "cross_series"
        sof = opportunity.global_stats.avg_strength_of_field
        sof_adjustment = (license_class.irating - sof) / config.SOF_ADJUSTMENT_DIVISOR
        # clamp() would swallow a NaN, so only clamp real numbers
        if is_finite(sof_adjustment):
            sof_adjustment = clamp(
                sof_adjustment, -config.SOF_ADJUSTMENT_CAP, config.SOF_ADJUSTMENT_CAP
            )
        expected_delta = overall.avg_position_delta + sof_adjustment
        confidence = min(
            overall.total_races / config.CROSS_SERIES_CONFIDENCE_DIVISOR,
            config.CROSS_SERIES_CONFIDENCE_CAP,
        )
        evidence.append(
            f"Overall avg delta {overall.avg_position_delta:+.1f}, "
            f"iRating {license_class.irating:.0f} vs SOF {sof:.0f} → {sof_adjustment:+.1f}"
        )
    else:
        # No usable history: the user's license, or the one this race requires
        source = "license"
        level = license_class.level if license_class is not None else opportunity.license_required
        expected_delta = license_bonus(level)
        confidence = config.LICENSE_ONLY_CONFIDENCE
        evidence.append(f"Limited history — estimate from {level.value} license ({expected_delta:+d})")

    if not is_finite(expected_delta):
        logger.debug(
            "Non-finite performance delta for series %s track %s (%s), using fallback",
            opportunity.series_id, opportunity.track_id, source,
        )
        expected_delta = config.PERFORMANCE_FALLBACK_DELTA
        confidence = config.PERFORMANCE_FALLBACK_CONFIDENCE
        evidence.append("Position data unavailable — using neutral estimate")

    low, high = config.PERFORMANCE_DELTA_RANGE
    normalized = clamp(expected_delta, low, high)
    base_score = (normalized - low) / (high - low) * 100
    score = round_score(base_score * confidence + config.NEUTRAL_SCORE * (1 - confidence))

    if confidence < 1.0:
        evidence.append(f"Blended toward neutral at {confidence:.0%} confidence")

    return FactorResult(
        name="performance",
        score=int(clamp(score, 0, 100)),
        evidence=evidence,
        data={
            "source": source,
            "expected_delta": expected_delta,
            "base_score": base_score,
        },
        confidence=confidence,
    )
