"""
License level helpers.
Normalises the many spellings the data layer hands us (enum, name, "Class B",
iRacing license-group numbers) onto LicenseLevel.
"""
from __future__ import annotations

import logging

import config
from raceselect.models import Category, LicenseLevel, RacingOpportunity, UserHistory

logger = logging.getLogger(__name__)

# iRacing license groups are 1-based: 1=Rookie … 6=Pro
_NUMERIC_VALUES: dict[LicenseLevel, int] = {
    LicenseLevel.ROOKIE: 1,
    LicenseLevel.D: 2,
    LicenseLevel.C: 3,
    LicenseLevel.B: 4,
    LicenseLevel.A: 5,
    LicenseLevel.PRO: 6,
}
_FROM_GROUP: dict[int, LicenseLevel] = {v: k for k, v in _NUMERIC_VALUES.items()}

_ALIASES: dict[str, LicenseLevel] = {
    "rookie": LicenseLevel.ROOKIE, "r": LicenseLevel.ROOKIE,
    "d": LicenseLevel.D,
    "c": LicenseLevel.C,
    "b": LicenseLevel.B,
    "a": LicenseLevel.A,
    "pro": LicenseLevel.PRO, "professional": LicenseLevel.PRO, "p": LicenseLevel.PRO,
}


def normalize_license(value: LicenseLevel | str | int | None) -> LicenseLevel:
    """
    Accepts a LicenseLevel, a name ("Rookie", "Class C", "pro"), or a
    license-group number (1–6, also as a string). Unknown input → Rookie.
    """
    if isinstance(value, LicenseLevel):
        return value
    if value is None:
        return LicenseLevel.ROOKIE

    if isinstance(value, int) and not isinstance(value, bool):
        level = _FROM_GROUP.get(value)
    else:
        text = str(value).strip().lower()
        if text.startswith("class "):
            text = text[len("class "):].strip()
        level = _FROM_GROUP.get(int(text)) if text.isdigit() else _ALIASES.get(text)

    if level is None:
        logger.warning("Unknown license level %r, defaulting to Rookie", value)
        return LicenseLevel.ROOKIE
    return level


def numeric_value(level: LicenseLevel) -> int:
    """Rookie → 1 … Pro → 6."""
    return _NUMERIC_VALUES[level]


def license_bonus(level: LicenseLevel) -> int:
    """Expected position delta for a driver with nothing but a license: Rookie -2 … Pro +3."""
    return numeric_value(level) - config.LICENSE_BONUS_OFFSET


def compare(a: LicenseLevel, b: LicenseLevel) -> int:
    """-1 if a < b, 0 if equal, 1 if a > b."""
    av, bv = numeric_value(a), numeric_value(b)
    return (av > bv) - (av < bv)


def meets_requirement(held: LicenseLevel, required: LicenseLevel) -> bool:
    return compare(held, required) >= 0


def highest_license(history: UserHistory, category: Category) -> LicenseLevel | None:
    """The user's best license level in `category`, or None if they hold none there."""
    levels = [lc.level for lc in history.license_classes if lc.category == category]
    if not levels:
        return None
    return max(levels, key=numeric_value)


def is_eligible(opportunity: RacingOpportunity, history: UserHistory) -> bool:
    held = highest_license(history, opportunity.category)
    return held is not None and meets_requirement(held, opportunity.license_required)
