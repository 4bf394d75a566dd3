"""
Scoring engine: scores one racing opportunity for one user in one mode.
Runs the 8 factors, then aggregates, classifies risk, writes reasoning,
assesses data confidence and computes the priority score.

Pure and synchronous: safe to fan out over threads or a process pool.
The only outside input is the clock used by the familiarity recency step;
pass `clock` to pin it.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable

from raceselect.models import (
    Mode,
    RacingOpportunity,
    Score,
    ScoringFactors,
    UserHistory,
)
from raceselect.analysis.context import find_series_track_history
from raceselect.analysis.factors import (
    performance,
    safety,
    consistency,
    predictability,
    familiarity,
    fatigue_risk,
    attrition_risk,
    time_volatility,
)
from raceselect.analysis.scorer import (
    classify_irating_risk,
    classify_safety_rating_risk,
    compute_overall,
    generate_reasoning,
    get_mode_weights,
)
from raceselect.analysis.confidence import assess_data_confidence, compute_priority_score

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def fixed_clock(moment: datetime) -> Clock:
    """A clock that always returns `moment`, for tests and reproducible runs."""
    return lambda: moment


def score(
    opportunity: RacingOpportunity,
    history: UserHistory,
    mode: Mode | str,
    clock: Clock | None = None,
) -> Score:
    """
    Raises InvalidModeError for an unknown mode. Bad numbers in the inputs never
    raise; each factor falls back to its own default.
    """
    # Resolve weights first so an invalid mode fails before any work is done
    weights = get_mode_weights(mode)
    now = (clock or utc_now)()

    # --- History lookup ---
    match = find_series_track_history(opportunity, history)

    # --- Factors ---
    f_performance = performance.compute(opportunity, history, match)
    f_safety = safety.compute(opportunity, history, match)
    f_consistency = consistency.compute(opportunity, match)
    f_predictability = predictability.compute(opportunity)
    f_familiarity = familiarity.compute(opportunity, history, match, now)
    f_fatigue = fatigue_risk.compute(opportunity)
    f_attrition = attrition_risk.compute(opportunity)
    f_time = time_volatility.compute(opportunity)

    breakdown = [
        f_performance,
        f_safety,
        f_consistency,
        f_predictability,
        f_familiarity,
        f_fatigue,
        f_attrition,
        f_time,
    ]
    factors = ScoringFactors(**{f.name: f.score for f in breakdown})

    overall = compute_overall(factors, weights)
    logger.debug(
        "Scored %s @ %s for %s: overall=%d factors=%s",
        opportunity.series_name, opportunity.track_name, history.user_id,
        overall, factors.as_dict(),
    )

    return Score(
        overall=overall,
        factors=factors,
        irating_risk=classify_irating_risk(factors),
        safety_rating_risk=classify_safety_rating_risk(factors),
        reasoning=generate_reasoning(factors),
        data_confidence=assess_data_confidence(match),
        priority_score=compute_priority_score(match),
        breakdown=breakdown,
    )
