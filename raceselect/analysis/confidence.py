"""
Data confidence labels and priority score.
Both depend only on how many races the user has at this exact series+track.
"""
from __future__ import annotations

import config
from raceselect.models import ConfidenceLevel, DataConfidence, GlobalStatsConfidence
from raceselect.analysis.context import HistoryMatch


def history_confidence(race_count: int) -> ConfidenceLevel:
    if race_count >= config.CONFIDENCE_HIGH_MIN_RACES:
        return ConfidenceLevel.HIGH
    if race_count >= config.CONFIDENCE_ESTIMATED_MIN_RACES:
        return ConfidenceLevel.ESTIMATED
    return ConfidenceLevel.NO_DATA


def assess_data_confidence(match: HistoryMatch) -> DataConfidence:
    """
    Performance, safety and consistency share one threshold ladder.
    Familiarity is "high" as soon as a single race exists, a lower bar than the
    others. Global stats carry no sample size yet, so they are always "high".
    """
    level = history_confidence(match.race_count)
    familiarity = (
        ConfidenceLevel.HIGH
        if match.has_at_least(config.FAMILIARITY_CONFIDENCE_MIN_RACES)
        else ConfidenceLevel.NO_DATA
    )
    return DataConfidence(
        performance=level,
        safety=level,
        consistency=level,
        familiarity=familiarity,
        global_stats=GlobalStatsConfidence.HIGH,
    )


def compute_priority_score(match: HistoryMatch) -> int:
    """Refresh/display priority, 5 points per race here, capped at 100."""
    if not match.found:
        return 0
    return max(0, min(100, match.race_count * config.PRIORITY_POINTS_PER_RACE))
