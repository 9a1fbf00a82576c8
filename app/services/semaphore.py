# app/services/semaphore.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple


class Tier(str, Enum):
    RED = "red"
    ORANGE = "orange"
    YELLOW = "yellow"
    GREEN = "green"
    NONE = "none"


# Outer list ordering: most severe first, "none" last
TIER_PRIORITY = {
    Tier.RED: 0,
    Tier.ORANGE: 1,
    Tier.YELLOW: 2,
    Tier.GREEN: 3,
    Tier.NONE: 4,
}

LABEL_EXPIRED = "Expired"
LABEL_CRITICAL = "Critical"
LABEL_DUE_SOON = "Due soon"
LABEL_CURRENT = "Current"


@dataclass(frozen=True)
class ThresholdPolicy:
    """
    Urgency cut-points in days. Expected yellow >= orange >= red >= 0;
    that is checked where the policy is written, not here.
    """

    yellow_days: int = 60
    orange_days: int = 30
    red_days: int = 15

    @classmethod
    def from_obj(cls, obj) -> "ThresholdPolicy":
        """Build from a dict, ORM row or schema (anything with the three fields)."""
        if obj is None:
            return DEFAULT_POLICY
        if isinstance(obj, ThresholdPolicy):
            return obj
        get = obj.get if isinstance(obj, dict) else lambda k: getattr(obj, k, None)

        def pick(name: str) -> int:
            v = get(name)
            return int(getattr(DEFAULT_POLICY, name) if v is None else v)

        return cls(
            yellow_days=pick("yellow_days"),
            orange_days=pick("orange_days"),
            red_days=pick("red_days"),
        )


DEFAULT_POLICY = ThresholdPolicy()


def classify(days_remaining: float, policy: ThresholdPolicy) -> Tuple[Tier, str]:
    """
    Map a distance in days to (tier, label).
    days_remaining <= 0 is always Expired, whatever the policy says.
    """
    if days_remaining <= 0:
        return Tier.RED, LABEL_EXPIRED
    if days_remaining <= policy.red_days:
        return Tier.RED, LABEL_CRITICAL
    if days_remaining <= policy.orange_days:
        return Tier.ORANGE, LABEL_DUE_SOON
    if days_remaining <= policy.yellow_days:
        return Tier.YELLOW, LABEL_DUE_SOON
    return Tier.GREEN, LABEL_CURRENT


def tier_priority(tier: Tier | str | None) -> int:
    if tier is None:
        return TIER_PRIORITY[Tier.NONE]
    try:
        return TIER_PRIORITY[Tier(tier)]
    except ValueError:
        return TIER_PRIORITY[Tier.NONE]
