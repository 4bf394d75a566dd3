"""
Factor 7: Attrition Risk (inverted, higher = fewer DNFs)
"""
from __future__ import annotations

import config
from raceselect.models import FactorResult, RacingOpportunity
from raceselect.analysis.context import clamp, finite_or_default, round_score


def compute(opportunity: RacingOpportunity) -> FactorResult:
    rate = finite_or_default(opportunity.global_stats.attrition_rate, config.ATTRITION_FALLBACK_RATE)
    low, high = config.ATTRITION_RATE_RANGE
    normalized = clamp(rate, low, high)
    score = round_score((1 - normalized / high) * 100)

    return FactorResult(
        name="attrition_risk",
        score=int(clamp(score, 0, 100)),
        evidence=[f"{rate:.0f}% of starters do not finish"],
        data={"attrition_rate": rate},
    )
