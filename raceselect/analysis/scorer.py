"""
Score compositor.
Mode weight lookup, weighted overall score, risk bands and reasoning lines.
Everything here works on the 8 factor scores only.
"""
from __future__ import annotations

from types import MappingProxyType

import config
from raceselect.models import Mode, ModeWeights, RiskLevel, ScoringFactors
from raceselect.analysis.context import clamp, round_score


class InvalidModeError(ValueError):
    """Raised for a mode outside the three supported optimisation goals."""


_WEIGHT_TABLE: MappingProxyType = MappingProxyType({
    Mode(name): ModeWeights(**weights) for name, weights in config.MODE_WEIGHTS.items()
})

assert set(_WEIGHT_TABLE) == set(Mode), "Every mode needs a weight set"


def parse_mode(mode: Mode | str) -> Mode:
    if isinstance(mode, Mode):
        return mode
    try:
        return Mode(str(mode).strip().lower())
    except ValueError:
        valid = ", ".join(m.value for m in Mode)
        raise InvalidModeError(f"Unknown mode {mode!r} (expected one of: {valid})") from None


def get_mode_weights(mode: Mode | str) -> ModeWeights:
    return _WEIGHT_TABLE[parse_mode(mode)]


def compute_overall(factors: ScoringFactors, weights: ModeWeights) -> int:
    """
    Weighted sum of the 8 factors. Weights sum to 1.0 and factors are 0–100,
    so the result is already 0–100.
    """
    scores = factors.as_dict()
    total = sum(scores[name] * weight for name, weight in weights.as_dict().items())
    return int(clamp(round_score(total), 0, 100))


def classify_irating_risk(factors: ScoringFactors) -> RiskLevel:
    if (
        factors.performance >= config.IRATING_RISK_LOW_PERFORMANCE
        and factors.familiarity >= config.IRATING_RISK_LOW_FAMILIARITY
    ):
        return RiskLevel.LOW
    if factors.performance >= config.IRATING_RISK_MEDIUM_PERFORMANCE:
        return RiskLevel.MEDIUM
    return RiskLevel.HIGH


def classify_safety_rating_risk(factors: ScoringFactors) -> RiskLevel:
    if (
        factors.safety >= config.SR_RISK_LOW_SAFETY
        and factors.consistency >= config.SR_RISK_LOW_CONSISTENCY
    ):
        return RiskLevel.LOW
    if factors.safety >= config.SR_RISK_MEDIUM_SAFETY:
        return RiskLevel.MEDIUM
    return RiskLevel.HIGH


def generate_reasoning(factors: ScoringFactors) -> list[str]:
    """Familiarity line always; safety and performance lines only at the extremes."""
    reasons = config.REASONS
    reasoning: list[str] = []

    if factors.familiarity >= config.REASON_FAMILIARITY_EXPERIENCED:
        reasoning.append(reasons["experienced"])
    elif factors.familiarity > 0:
        reasoning.append(reasons["some_familiarity"])
    else:
        reasoning.append(reasons["new_combination"])

    if factors.safety >= config.REASON_SAFETY_GOOD:
        reasoning.append(reasons["low_incidents"])
    elif factors.safety < config.REASON_SAFETY_POOR:
        reasoning.append(reasons["high_incidents"])

    if factors.performance >= config.REASON_PERFORMANCE_GOOD:
        reasoning.append(reasons["good_performance"])
    elif factors.performance < config.REASON_PERFORMANCE_POOR:
        reasoning.append(reasons["hard_field"])

    return reasoning


def label_overall(score: float) -> str:
    for threshold, label in config.SCORE_LABELS:
        if score >= threshold:
            return label
    return config.SCORE_LABELS[-1][1]
