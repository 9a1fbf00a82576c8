import pytest

from app.services.semaphore import (
    DEFAULT_POLICY,
    ThresholdPolicy,
    Tier,
    classify,
    tier_priority,
)

SEVERITY = {Tier.RED: 3, Tier.ORANGE: 2, Tier.YELLOW: 1, Tier.GREEN: 0}


@pytest.mark.parametrize(
    "days, tier, label",
    [
        (-5, Tier.RED, "Expired"),
        (0, Tier.RED, "Expired"),
        (0.5, Tier.RED, "Critical"),
        (15, Tier.RED, "Critical"),
        (15.01, Tier.ORANGE, "Due soon"),
        (30, Tier.ORANGE, "Due soon"),
        (31, Tier.YELLOW, "Due soon"),
        (60, Tier.YELLOW, "Due soon"),
        (60.5, Tier.GREEN, "Current"),
        (400, Tier.GREEN, "Current"),
    ],
)
def test_classify_boundaries_default_policy(days, tier, label):
    assert classify(days, DEFAULT_POLICY) == (tier, label)


@pytest.mark.parametrize("red", [0, 1, 15, 100])
def test_expired_is_not_configurable(red):
    policy = ThresholdPolicy(yellow_days=max(red, 60), orange_days=max(red, 30), red_days=red)
    assert classify(0, policy) == (Tier.RED, "Expired")
    assert classify(-5, policy) == (Tier.RED, "Expired")


def test_zero_red_days_still_expires_at_zero():
    policy = ThresholdPolicy(yellow_days=10, orange_days=5, red_days=0)
    assert classify(0, policy)[0] == Tier.RED
    assert classify(1, policy) == (Tier.ORANGE, "Due soon")


def test_classify_is_monotone_in_days():
    days = [x / 2 for x in range(-20, 200)]
    severities = [SEVERITY[classify(d, DEFAULT_POLICY)[0]] for d in days]
    assert severities == sorted(severities, reverse=True)


def test_inverted_policy_is_not_corrected():
    # invalid configuration: no exception, orange band is simply unreachable
    policy = ThresholdPolicy(yellow_days=10, orange_days=20, red_days=5)
    assert classify(8, policy) == (Tier.ORANGE, "Due soon")
    assert classify(15, policy) == (Tier.ORANGE, "Due soon")
    assert classify(25, policy) == (Tier.GREEN, "Current")


def test_tier_priority_order():
    tiers = ["none", "green", "red", "yellow", "orange"]
    assert sorted(tiers, key=tier_priority) == ["red", "orange", "yellow", "green", "none"]
    assert tier_priority(None) == tier_priority(Tier.NONE)
    assert tier_priority("bogus") == tier_priority(Tier.NONE)


def test_policy_from_obj():
    assert ThresholdPolicy.from_obj(None) == DEFAULT_POLICY
    assert ThresholdPolicy.from_obj(
        {"yellow_days": 90, "orange_days": 45, "red_days": 7}
    ) == ThresholdPolicy(90, 45, 7)
    assert ThresholdPolicy.from_obj({"red_days": 3}) == ThresholdPolicy(60, 30, 3)


def test_policy_from_obj_null_values_use_defaults():
    assert ThresholdPolicy.from_obj({"red_days": None}) == DEFAULT_POLICY
    assert ThresholdPolicy.from_obj(
        {"yellow_days": 90, "orange_days": None, "red_days": 7}
    ) == ThresholdPolicy(90, 30, 7)
