"""
Factor 3: Consistency
Finish-position standard deviation mapped onto 0–100 (lower spread = higher).
Personal series+track spread when there are 3+ races, else the series' global spread.
"""
from __future__ import annotations

import config
from raceselect.models import FactorResult, RacingOpportunity
from raceselect.analysis.context import HistoryMatch, clamp, is_finite, round_score


def compute(opportunity: RacingOpportunity, match: HistoryMatch) -> FactorResult:
    if match.has_at_least(config.MIN_PERSONAL_RACES):
        source = "personal"
        std_dev = match.record.finish_position_std_dev
        evidence = [f"Your finish spread here: ±{std_dev:.1f} positions ({match.race_count} races)"]
    else:
        source = "global"
        std_dev = opportunity.global_stats.avg_finish_position_std_dev
        evidence = [f"Series finish spread: ±{std_dev:.1f} positions"]

    if not is_finite(std_dev):
        source = "fallback"
        std_dev = config.CONSISTENCY_FALLBACK_STDDEV
        evidence = [f"Finish spread unavailable — assuming ±{std_dev:.0f} positions"]

    low, high = config.CONSISTENCY_STDDEV_RANGE
    normalized = clamp(std_dev, low, high)
    score = round_score((1 - (normalized - low) / (high - low)) * 100)

    return FactorResult(
        name="consistency",
        score=int(clamp(score, 0, 100)),
        evidence=evidence,
        data={"source": source, "std_dev": std_dev},
        confidence=1.0 if source == "personal" else 0.0,
    )
