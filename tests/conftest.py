"""
Shared builders for tests. Import them directly: `from conftest import make_opportunity`.
"""
from datetime import datetime, timedelta, timezone

import pytest

from raceselect.models import (
    Category,
    GlobalStats,
    LicenseClass,
    LicenseLevel,
    RacingOpportunity,
    SeriesTrackHistory,
    TimeSlot,
    UserHistory,
    UserOverallStats,
)
from raceselect.analysis.engine import fixed_clock

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


def make_slots(count: int) -> list[TimeSlot]:
    return [
        TimeSlot(hour=h % 24, day_of_week=h % 7, strength_of_field=2000, participant_count=20)
        for h in range(count)
    ]


def make_opportunity(
    series_id: int = 100,
    track_id: int = 50,
    license_required: LicenseLevel = LicenseLevel.C,
    category: Category = Category.SPORTS_CAR,
    race_length: float = 20,
    slot_count: int = 6,
    avg_incidents_per_race: float = 4.0,
    avg_finish_position_std_dev: float = 5.0,
    avg_strength_of_field: float = 2000,
    strength_of_field_variability: float = 200,
    attrition_rate: float = 10,
    avg_race_length: float = 20,
) -> RacingOpportunity:
    """Helper to create opportunities with sensible defaults."""
    return RacingOpportunity(
        series_id=series_id,
        series_name=f"Series {series_id}",
        track_id=track_id,
        track_name=f"Track {track_id}",
        license_required=license_required,
        category=category,
        season_year=2025,
        season_quarter=2,
        race_week_num=5,
        race_length=race_length,
        has_open_setup=False,
        time_slots=make_slots(slot_count),
        global_stats=GlobalStats(
            avg_incidents_per_race=avg_incidents_per_race,
            avg_finish_position_std_dev=avg_finish_position_std_dev,
            avg_strength_of_field=avg_strength_of_field,
            strength_of_field_variability=strength_of_field_variability,
            attrition_rate=attrition_rate,
            avg_race_length=avg_race_length,
        ),
    )


def make_record(
    series_id: int = 100,
    track_id: int = 50,
    race_count: int = 10,
    avg_position_delta: float = 3.0,
    avg_incidents: float = 1.8,
    finish_position_std_dev: float = 3.2,
    days_ago: int | None = 3,
) -> SeriesTrackHistory:
    return SeriesTrackHistory(
        series_id=series_id,
        track_id=track_id,
        race_count=race_count,
        avg_starting_position=12.0,
        avg_finishing_position=12.0 - avg_position_delta,
        avg_position_delta=avg_position_delta,
        avg_incidents=avg_incidents,
        finish_position_std_dev=finish_position_std_dev,
        last_race_date=NOW - timedelta(days=days_ago) if days_ago is not None else None,
    )


def make_license(
    category: Category = Category.SPORTS_CAR,
    level: LicenseLevel = LicenseLevel.C,
    safety_rating: float = 3.5,
    irating: float = 2000,
) -> LicenseClass:
    return LicenseClass(category=category, level=level, safety_rating=safety_rating, irating=irating)


def make_history(
    records: list[SeriesTrackHistory] | None = None,
    licenses: list[LicenseClass] | None = None,
    total_races: int = 0,
    avg_incidents_per_race: float = 2.0,
    avg_position_delta: float = 1.0,
    overall_consistency: float = 4.0,
) -> UserHistory:
    return UserHistory(
        user_id="user-1",
        series_track_history=records or [],
        overall_stats=UserOverallStats(
            total_races=total_races,
            avg_incidents_per_race=avg_incidents_per_race,
            avg_position_delta=avg_position_delta,
            overall_consistency=overall_consistency,
        ),
        license_classes=licenses or [],
    )


def opportunity_json(**overrides) -> dict:
    """camelCase record as the schedule layer sends it."""
    record = {
        "seriesId": 100,
        "seriesName": "Global Mazda MX-5 Cup",
        "trackId": 50,
        "trackName": "Laguna Seca",
        "licenseRequired": "Rookie",
        "category": "sports_car",
        "seasonYear": 2025,
        "seasonQuarter": 2,
        "raceWeekNum": 5,
        "raceLength": 20,
        "hasOpenSetup": False,
        "timeSlots": [
            {"hour": h, "dayOfWeek": 6, "strengthOfField": 1800, "participantCount": 20}
            for h in range(0, 24, 2)
        ],
        "globalStats": {
            "avgIncidentsPerRace": 4.0,
            "avgFinishPositionStdDev": 5.0,
            "avgStrengthOfField": 2000,
            "strengthOfFieldVariability": 200,
            "attritionRate": 10,
            "avgRaceLength": 20,
        },
    }
    record.update(overrides)
    return record


def history_json(**overrides) -> dict:
    record = {
        "userId": "user-1",
        "seriesTrackHistory": [
            {
                "seriesId": 100,
                "trackId": 50,
                "raceCount": 10,
                "avgStartingPosition": 12,
                "avgFinishingPosition": 9,
                "avgPositionDelta": 3,
                "avgIncidents": 1.8,
                "finishPositionStdDev": 3.2,
                "lastRaceDate": "2025-05-29T20:00:00Z",
            }
        ],
        "overallStats": {
            "totalRaces": 40,
            "avgIncidentsPerRace": 2.5,
            "avgPositionDelta": 1.0,
            "overallConsistency": 4.0,
        },
        "licenseClasses": [
            {"category": "sports_car", "level": "B", "safetyRating": 3.5, "iRating": 2100},
            {"category": "oval", "level": "D", "safetyRating": 2.8, "iRating": 1500},
        ],
    }
    record.update(overrides)
    return record


@pytest.fixture
def clock():
    return fixed_clock(NOW)
