"""
Shared lookups and numeric guards used by every factor.

The history lookup returns an explicit found / not-found HistoryMatch so
factors branch on `match.found` instead of passing None around.
"""
from __future__ import annotations

import math
from dataclasses import dataclass

import config

from raceselect.models import (
    LicenseClass,
    RacingOpportunity,
    SeriesTrackHistory,
    UserHistory,
)


@dataclass(frozen=True)
class HistoryMatch:
    found: bool
    record: SeriesTrackHistory | None = None

    @property
    def race_count(self) -> int:
        if not self.found:
            return 0
        return self.record.race_count

    def has_at_least(self, races: int) -> bool:
        return self.found and self.record.race_count >= races


NOT_FOUND = HistoryMatch(found=False)


def finite_or_default(value: float | None, default: float) -> float:
    """Return value unless it is None, NaN or ±inf, in which case return default."""
    if value is None:
        return default
    try:
        value = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(value) or math.isinf(value):
        return default
    return value


def is_finite(value: float | None) -> bool:
    return value is not None and math.isfinite(value)


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def round_score(value: float) -> int:
    """Round half up (2.5 → 3), unlike the built-in banker's rounding."""
    return int(math.floor(value + 0.5))


def effective_race_length(opportunity: RacingOpportunity) -> float:
    """Scheduled length, else the series' average length, else the 20-minute baseline."""
    fallback = finite_or_default(
        opportunity.global_stats.avg_race_length, config.RACE_LENGTH_BASELINE_MINUTES
    )
    return finite_or_default(opportunity.race_length, fallback)


def find_series_track_history(
    opportunity: RacingOpportunity,
    history: UserHistory,
) -> HistoryMatch:
    """The user's record for exactly this series+track pair, if any."""
    for record in history.series_track_history:
        if record.series_id == opportunity.series_id and record.track_id == opportunity.track_id:
            return HistoryMatch(found=True, record=record)
    return NOT_FOUND


def find_license(opportunity: RacingOpportunity, history: UserHistory) -> LicenseClass | None:
    """The user's license for the opportunity's category."""
    for license_class in history.license_classes:
        if license_class.category == opportunity.category:
            return license_class
    return None


def related_history(
    opportunity: RacingOpportunity,
    history: UserHistory,
) -> list[SeriesTrackHistory]:
    """Records sharing the series OR the track, excluding the exact pair."""
    return [
        record
        for record in history.series_track_history
        if (record.series_id == opportunity.series_id) != (record.track_id == opportunity.track_id)
    ]
