"""Domain enumerations and the fixed rule-evaluation order."""

import enum


class PricingRule(str, enum.Enum):
    BASE_FARE = "BASE_FARE"
    DISTANCE_STEP_CALC = "DISTANCE_STEP_CALC"
    MINIMUM_CHECK = "MINIMUM_CHECK"
    NIGHT_MULTIPLIER = "NIGHT_MULTIPLIER"


# Evaluation order is owned by the engine, never by the order a profile
# lists its enabled rules in.  The floor must run before the surcharge.
RULE_ORDER: tuple[PricingRule, ...] = (
    PricingRule.BASE_FARE,
    PricingRule.DISTANCE_STEP_CALC,
    PricingRule.MINIMUM_CHECK,
    PricingRule.NIGHT_MULTIPLIER,
)


class PricingStrategy(str, enum.Enum):
    METERED = "METERED"
    FIXED_ZONE = "FIXED_ZONE"
    HYBRID = "HYBRID"
