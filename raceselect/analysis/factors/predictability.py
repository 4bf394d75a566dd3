"""
Factor 4: Predictability
How much the strength of field swings between sessions. A steady field
means the expected result is more likely to hold.
"""
from __future__ import annotations

import config
from raceselect.models import FactorResult, RacingOpportunity
from raceselect.analysis.context import clamp, finite_or_default, round_score


def compute(opportunity: RacingOpportunity) -> FactorResult:
    variability = finite_or_default(
        opportunity.global_stats.strength_of_field_variability,
        config.PREDICTABILITY_FALLBACK_VARIABILITY,
    )
    low, high = config.PREDICTABILITY_VARIABILITY_RANGE
    normalized = clamp(variability, low, high)
    score = round_score((1 - (normalized - low) / (high - low)) * 100)

    return FactorResult(
        name="predictability",
        score=int(clamp(score, 0, 100)),
        evidence=[f"SOF varies by ±{variability:.0f} between sessions"],
        data={"sof_variability": variability},
    )
