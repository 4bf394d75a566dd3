"""
Factor 6: Fatigue Risk (inverted, higher = less fatiguing)
Step function on race length.
"""
from __future__ import annotations

import config
from raceselect.models import FactorResult, RacingOpportunity
from raceselect.analysis.context import effective_race_length


def compute(opportunity: RacingOpportunity) -> FactorResult:
    race_length = effective_race_length(opportunity)

    score = config.FATIGUE_LONG_RACE_SCORE
    for max_minutes, step_score in config.FATIGUE_STEPS:
        if race_length <= max_minutes:
            score = step_score
            break

    evidence = [f"{race_length:.0f} minute race"]
    if score <= config.FATIGUE_LONG_RACE_SCORE:
        evidence.append("Long race — plan for fatigue")

    return FactorResult(
        name="fatigue_risk",
        score=int(score),
        evidence=evidence,
        data={"race_length": race_length},
    )
