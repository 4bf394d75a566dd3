"""
Central configuration: mode weights, factor thresholds, fallbacks, labels.
All tunable parameters live here; nothing is hardcoded in modules.
"""
import os
from dotenv import load_dotenv

load_dotenv()


# ---------------------------------------------------------------------------
# Recommendation modes
# ---------------------------------------------------------------------------
DEFAULT_MODE: str = os.getenv("RACESELECT_DEFAULT_MODE", "balanced")

FACTOR_NAMES: tuple[str, ...] = (
    "performance",
    "safety",
    "consistency",
    "predictability",
    "familiarity",
    "fatigue_risk",
    "attrition_risk",
    "time_volatility",
)

# ---------------------------------------------------------------------------
# Factor weights per mode, each set must sum to 1.0
# ---------------------------------------------------------------------------
MODE_WEIGHTS: dict[str, dict[str, float]] = {
    "balanced": {
        "performance":      0.15,
        "safety":           0.15,
        "consistency":      0.15,
        "predictability":   0.10,
        "familiarity":      0.15,
        "fatigue_risk":     0.10,
        "attrition_risk":   0.10,
        "time_volatility":  0.10,
    },
    "irating_push": {
        "performance":      0.25,   # Position gain is the whole point
        "safety":           0.10,
        "consistency":      0.10,
        "predictability":   0.15,
        "familiarity":      0.20,
        "fatigue_risk":     0.05,
        "attrition_risk":   0.10,
        "time_volatility":  0.05,
    },
    "safety_recovery": {
        "performance":      0.05,
        "safety":           0.30,   # Clean races first
        "consistency":      0.20,
        "predictability":   0.10,
        "familiarity":      0.15,
        "fatigue_risk":     0.10,
        "attrition_risk":   0.05,
        "time_volatility":  0.05,
    },
}

for _mode, _weights in MODE_WEIGHTS.items():
    assert set(_weights) == set(FACTOR_NAMES), f"{_mode}: weights must cover all 8 factors"
    assert all(w >= 0 for w in _weights.values()), f"{_mode}: weights must be non-negative"
    assert abs(sum(_weights.values()) - 1.0) < 0.001, f"{_mode}: weights must sum to 1.0"

# ---------------------------------------------------------------------------
# History thresholds
# ---------------------------------------------------------------------------
MIN_PERSONAL_RACES: int = 3        # series+track races before personal data is used directly
MIN_OVERALL_RACES: int = 5         # total races before cross-series estimates are trusted

NEUTRAL_SCORE: float = 50.0        # low-confidence scores are blended toward this

# ---------------------------------------------------------------------------
# Performance factor
# ---------------------------------------------------------------------------
PERFORMANCE_DELTA_RANGE: tuple[float, float] = (-10.0, 10.0)   # positions gained/lost
SOF_ADJUSTMENT_DIVISOR: float = 200.0                          # iRating points per position
SOF_ADJUSTMENT_CAP: float = 5.0                                # ± positions
CROSS_SERIES_CONFIDENCE_DIVISOR: float = 10.0                  # totalRaces / 10
CROSS_SERIES_CONFIDENCE_CAP: float = 0.8
LICENSE_ONLY_CONFIDENCE: float = 0.3
LICENSE_BONUS_OFFSET: int = 3                                  # Rookie(1) → -2 … Pro(6) → +3
PERFORMANCE_FALLBACK_DELTA: float = 0.0
PERFORMANCE_FALLBACK_CONFIDENCE: float = 0.2

# ---------------------------------------------------------------------------
# Safety factor
# ---------------------------------------------------------------------------
SAFETY_INCIDENT_RANGE: tuple[float, float] = (0.0, 20.0)   # widened to absorb the 2x length multiplier
SAFETY_PERSONAL_WEIGHT: float = 0.6                        # overall incident rate vs global 0.4
SAFETY_RATING_FLOOR: float = 2.0                           # SR below this earns no discount
SAFETY_RATING_SPAN: float = 3.0                            # SR 5.0 → full discount
SAFETY_RATING_DISCOUNT_WEIGHT: float = 0.3                 # max 30% fewer expected incidents
SAFETY_FALLBACK_INCIDENTS: float = 4.0

# Race length adjustment
RACE_LENGTH_BASELINE_MINUTES: float = 20.0
RACE_LENGTH_MIN_MULTIPLIER: float = 0.8
RACE_LENGTH_MAX_MULTIPLIER: float = 2.0
RACE_LENGTH_LOG_SCALE: float = 0.5

# ---------------------------------------------------------------------------
# Consistency / predictability / attrition
# ---------------------------------------------------------------------------
CONSISTENCY_STDDEV_RANGE: tuple[float, float] = (1.0, 15.0)
CONSISTENCY_FALLBACK_STDDEV: float = 5.0

PREDICTABILITY_VARIABILITY_RANGE: tuple[float, float] = (50.0, 500.0)   # SOF points
PREDICTABILITY_FALLBACK_VARIABILITY: float = 300.0

ATTRITION_RATE_RANGE: tuple[float, float] = (0.0, 50.0)                 # percent DNF
ATTRITION_FALLBACK_RATE: float = 15.0

# ---------------------------------------------------------------------------
# Familiarity factor
# ---------------------------------------------------------------------------
FAMILIARITY_POINTS_PER_RACE: float = 10.0
FAMILIARITY_RECENCY_BASE: float = 0.7          # score = base * (0.7 + 0.3 * recency)
FAMILIARITY_RECENCY_SHARE: float = 0.3

# (max days since last race, recency multiplier), first match wins
FAMILIARITY_RECENCY_STEPS: list[tuple[int, float]] = [
    (7,  1.0),
    (30, 0.8),
    (90, 0.5),
]
FAMILIARITY_RECENCY_STALE: float = 0.3

FAMILIARITY_RELATED_POINTS_PER_RACE: float = 5.0   # same series OR same track
FAMILIARITY_RELATED_CAP: float = 50.0

# ---------------------------------------------------------------------------
# Step-function factors: (threshold, score), first match wins
# ---------------------------------------------------------------------------
FATIGUE_STEPS: list[tuple[float, float]] = [    # race length ≤ minutes
    (20, 90.0),
    (40, 70.0),
    (60, 50.0),
]
FATIGUE_LONG_RACE_SCORE: float = 30.0

TIME_VOLATILITY_STEPS: list[tuple[int, float]] = [   # time slots ≥ count
    (12, 90.0),
    (6,  70.0),
    (3,  50.0),
]
TIME_VOLATILITY_FEW_SLOTS_SCORE: float = 30.0

# ---------------------------------------------------------------------------
# Risk classification
# ---------------------------------------------------------------------------
IRATING_RISK_LOW_PERFORMANCE: float = 60.0
IRATING_RISK_LOW_FAMILIARITY: float = 40.0
IRATING_RISK_MEDIUM_PERFORMANCE: float = 40.0

SR_RISK_LOW_SAFETY: float = 70.0
SR_RISK_LOW_CONSISTENCY: float = 60.0
SR_RISK_MEDIUM_SAFETY: float = 50.0

# ---------------------------------------------------------------------------
# Reasoning
# ---------------------------------------------------------------------------
REASON_FAMILIARITY_EXPERIENCED: float = 50.0
REASON_SAFETY_GOOD: float = 70.0
REASON_SAFETY_POOR: float = 50.0
REASON_PERFORMANCE_GOOD: float = 60.0
REASON_PERFORMANCE_POOR: float = 40.0

REASONS: dict[str, str] = {
    "experienced":        "You have experience at this series/track combination",
    "some_familiarity":   "Some familiarity with this series or track",
    "new_combination":    "New series/track combination - consider practice first",
    "low_incidents":      "Low incident rate expected",
    "high_incidents":     "Higher incident risk - proceed with caution",
    "good_performance":   "Good position gain potential",
    "hard_field":         "Challenging field for your current form",
}

# ---------------------------------------------------------------------------
# Data confidence
# ---------------------------------------------------------------------------
CONFIDENCE_HIGH_MIN_RACES: int = 3
CONFIDENCE_ESTIMATED_MIN_RACES: int = 1
FAMILIARITY_CONFIDENCE_MIN_RACES: int = 1

CONFIDENCE_BADGES: dict[str, str] = {
    "high":      "High Confidence",
    "estimated": "Estimated",
    "no_data":   "No Personal Data",
}

# ---------------------------------------------------------------------------
# Priority
# ---------------------------------------------------------------------------
PRIORITY_POINTS_PER_RACE: int = 5

# ---------------------------------------------------------------------------
# Overall score labels
# ---------------------------------------------------------------------------
SCORE_LABELS: list[tuple[float, str]] = [
    (90.0, "Checkered Flag"),
    (75.0, "Green Flag"),
    (50.0, "Yellow Flag"),
    (0.0,  "Black Flag"),
]

# ---------------------------------------------------------------------------
# Recommender defaults
# ---------------------------------------------------------------------------
MAX_RESULTS: int = int(os.getenv("RACESELECT_MAX_RESULTS", "20"))
MIN_SCORE: float = float(os.getenv("RACESELECT_MIN_SCORE", "0"))
EXPERIENCE_TOP_N: int = 5
COMPARE_TOP_N: int = 10            # races kept per mode when comparing modes
PRIORITY_RANK_BAND: int = 5        # priority gaps at or below this fall through to the overall score

# ---------------------------------------------------------------------------
# Misc
# ---------------------------------------------------------------------------
LOG_LEVEL: str = os.getenv("RACESELECT_LOG_LEVEL", "WARNING")
