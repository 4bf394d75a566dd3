from __future__ import annotations
from dataclasses import dataclass, field, fields
from datetime import datetime
from enum import Enum


class Mode(Enum):
    """Optimisation goal chosen by the user."""
    BALANCED = "balanced"
    IRATING_PUSH = "irating_push"
    SAFETY_RECOVERY = "safety_recovery"


class Category(Enum):
    OVAL = "oval"
    SPORTS_CAR = "sports_car"
    FORMULA_CAR = "formula_car"
    DIRT_OVAL = "dirt_oval"
    DIRT_ROAD = "dirt_road"


class LicenseLevel(Enum):
    ROOKIE = "Rookie"
    D = "D"
    C = "C"
    B = "B"
    A = "A"
    PRO = "Pro"


class RiskLevel(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ConfidenceLevel(Enum):
    HIGH = "high"
    ESTIMATED = "estimated"
    NO_DATA = "no_data"


class GlobalStatsConfidence(Enum):
    HIGH = "high"
    MODERATE = "moderate"
    DEFAULT = "default"


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TimeSlot:
    hour: int                   # 0-23 UTC
    day_of_week: int            # 0-6, Sunday = 0
    strength_of_field: float
    participant_count: int


@dataclass(frozen=True)
class GlobalStats:
    avg_incidents_per_race: float
    avg_finish_position_std_dev: float
    avg_strength_of_field: float
    strength_of_field_variability: float
    attrition_rate: float       # percent of starters who don't finish
    avg_race_length: float      # minutes


@dataclass(frozen=True)
class RacingOpportunity:
    series_id: int
    series_name: str
    track_id: int
    track_name: str
    license_required: LicenseLevel
    category: Category
    season_year: int
    season_quarter: int
    race_week_num: int
    race_length: float          # minutes
    has_open_setup: bool
    time_slots: list[TimeSlot]
    global_stats: GlobalStats


@dataclass(frozen=True)
class SeriesTrackHistory:
    series_id: int
    track_id: int
    race_count: int
    avg_starting_position: float
    avg_finishing_position: float
    avg_position_delta: float   # start minus finish, positive = gained
    avg_incidents: float
    finish_position_std_dev: float
    last_race_date: datetime | None


@dataclass(frozen=True)
class UserOverallStats:
    total_races: int
    avg_incidents_per_race: float
    avg_position_delta: float
    overall_consistency: float  # lower is better


@dataclass(frozen=True)
class LicenseClass:
    category: Category
    level: LicenseLevel
    safety_rating: float
    irating: float


@dataclass(frozen=True)
class UserHistory:
    user_id: str
    series_track_history: list[SeriesTrackHistory]
    overall_stats: UserOverallStats
    license_classes: list[LicenseClass]


# ---------------------------------------------------------------------------
# Outputs
# ---------------------------------------------------------------------------

@dataclass
class FactorResult:
    name: str               # "performance", "safety", etc.
    score: int              # 0 – 100, higher is better
    evidence: list[str]     # Human-readable bullet points for display
    data: dict              # Raw inputs behind the score
    confidence: float = 1.0  # 0.0–1.0, lowered when a fallback was used


@dataclass(frozen=True)
class ScoringFactors:
    """The 8 sub-scores. All are higher-is-better, including the *_risk ones."""
    performance: int
    safety: int
    consistency: int
    predictability: int
    familiarity: int
    fatigue_risk: int
    attrition_risk: int
    time_volatility: int

    def as_dict(self) -> dict[str, int]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class ModeWeights:
    performance: float
    safety: float
    consistency: float
    predictability: float
    familiarity: float
    fatigue_risk: float
    attrition_risk: float
    time_volatility: float

    def as_dict(self) -> dict[str, float]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class DataConfidence:
    performance: ConfidenceLevel
    safety: ConfidenceLevel
    consistency: ConfidenceLevel
    familiarity: ConfidenceLevel
    global_stats: GlobalStatsConfidence


@dataclass(frozen=True)
class Score:
    overall: int                        # 0–100 weighted composite
    factors: ScoringFactors
    irating_risk: RiskLevel
    safety_rating_risk: RiskLevel
    reasoning: list[str]
    data_confidence: DataConfidence
    priority_score: int                 # 0–100, refresh/display ordering only
    breakdown: list[FactorResult] = field(default_factory=list)


@dataclass(frozen=True)
class ScoredOpportunity:
    opportunity: RacingOpportunity
    score: Score
