"""
Factor 8: Time Volatility (inverted, more sessions = easier to fit in)
Step function on the number of scheduled time slots this week.
"""
from __future__ import annotations

import config
from raceselect.models import FactorResult, RacingOpportunity


def compute(opportunity: RacingOpportunity) -> FactorResult:
    slot_count = len(opportunity.time_slots)

    score = config.TIME_VOLATILITY_FEW_SLOTS_SCORE
    for min_slots, step_score in config.TIME_VOLATILITY_STEPS:
        if slot_count >= min_slots:
            score = step_score
            break

    return FactorResult(
        name="time_volatility",
        score=int(score),
        evidence=[f"{slot_count} scheduled session{'s' if slot_count != 1 else ''}"],
        data={"slot_count": slot_count},
    )
