"""
Fare Pricing Engine  (Strategy Pattern)
=======================================

Pipeline
--------
Each pricing rule is a strategy object; the engine walks them in a fixed
order and every step checks its own membership in ``enabled_rules``::

    BASE_FARE -> DISTANCE_STEP_CALC -> MINIMUM_CHECK -> NIGHT_MULTIPLIER

* **Distance** is charged per started step:
  ``ceil(distance_m / distance_step_meters) * price_per_step``.
* **Minimum floor** lifts the running total to ``minimum_fare``.
* **Night surcharge** is a percentage of the *floor-adjusted* total, so
  "Day 6.00 -> floor 7.50 -> night 7.50 x 1.5 = 11.25", never
  "6.00 x 1.5 = 9.00, then floored".

The night window may wrap past midnight (e.g. 20 -> 6).

Complexity: O(1) per price calculation.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Optional

from .entities import FareBreakdown, FareQuote
from .enums import RULE_ORDER, PricingRule
from .pricing_config import PricingRuleConfig

_CENT = Decimal("0.01")


def round_half_up(amount: float) -> float:
    """Round half-up to 2 decimal places."""
    return float(Decimal(amount).quantize(_CENT, rounding=ROUND_HALF_UP))


def is_night_hour(hour: int, start: int, end: int) -> bool:
    """True when *hour* falls in the [start, end) night window.

    A window with ``start > end`` crosses midnight.  ``start == end`` is an
    empty window.
    """
    if start > end:
        return hour >= start or hour < end
    return start <= hour < end


@dataclass
class FareState:
    """Running total and breakdown for a single evaluation."""

    total: float = 0.0
    base_fare: float = 0.0
    distance_fare: float = 0.0
    night_surcharge: float = 0.0
    minimum_fare_adjustment: Optional[float] = None

    def to_breakdown(self) -> FareBreakdown:
        return FareBreakdown(
            base_fare=self.base_fare,
            distance_fare=self.distance_fare,
            night_surcharge=self.night_surcharge,
            minimum_fare_adjustment=self.minimum_fare_adjustment,
        )


# ── Strategy hierarchy ────────────────────────────────────────────────


class RuleStep(ABC):
    rule: PricingRule

    @abstractmethod
    def apply(
        self,
        state: FareState,
        config: PricingRuleConfig,
        distance_meters: int,
        is_night: bool,
    ) -> None: ...


class BaseFareStep(RuleStep):
    rule = PricingRule.BASE_FARE

    def apply(self, state, config, distance_meters, is_night):
        state.total += config.base_fare
        state.base_fare = config.base_fare


class DistanceStepCharge(RuleStep):
    rule = PricingRule.DISTANCE_STEP_CALC

    def apply(self, state, config, distance_meters, is_night):
        steps = math.ceil(distance_meters / config.distance_step_meters)
        cost = steps * config.price_per_step
        state.total += cost
        state.distance_fare = round_half_up(cost)


class MinimumFareFloor(RuleStep):
    rule = PricingRule.MINIMUM_CHECK

    def apply(self, state, config, distance_meters, is_night):
        if state.total < config.minimum_fare:
            state.minimum_fare_adjustment = round_half_up(
                config.minimum_fare - state.total
            )
            state.total = config.minimum_fare


class NightSurcharge(RuleStep):
    rule = PricingRule.NIGHT_MULTIPLIER

    def apply(self, state, config, distance_meters, is_night):
        if not is_night:
            return
        surcharge = state.total * (config.night_surcharge_percent / 100)
        state.night_surcharge = round_half_up(surcharge)
        state.total += surcharge


_STEPS: dict[PricingRule, RuleStep] = {
    step.rule: step
    for step in (
        BaseFareStep(),
        DistanceStepCharge(),
        MinimumFareFloor(),
        NightSurcharge(),
    )
}

RULE_PIPELINE: tuple[RuleStep, ...] = tuple(_STEPS[r] for r in RULE_ORDER)


# ── Engine facade ─────────────────────────────────────────────────────


class PricingEngine:
    """Pure fare calculator; holds no per-request state."""

    def __init__(self, clock: Callable[[], datetime] = datetime.now):
        self.clock = clock

    @staticmethod
    def resolve_night(
        config: PricingRuleConfig,
        travel_time: Optional[datetime],
        night_override: Optional[bool] = None,
    ) -> bool:
        """Night flag for the request; an explicit override always wins."""
        if night_override is not None:
            return night_override
        if not config.is_enabled(PricingRule.NIGHT_MULTIPLIER):
            return False
        return is_night_hour(
            travel_time.hour, config.night_start_hour, config.night_end_hour
        )

    def price(
        self,
        distance_meters: int,
        config: PricingRuleConfig,
        travel_time: Optional[datetime] = None,
        night_override: Optional[bool] = None,
    ) -> FareQuote:
        if night_override is None and travel_time is None:
            travel_time = self.clock()
        is_night = self.resolve_night(config, travel_time, night_override)

        # The override feeds the whole pipeline, so the floor and the
        # surcharge are always computed against the same night flag.
        state = FareState()
        for step in RULE_PIPELINE:
            if config.is_enabled(step.rule):
                step.apply(state, config, distance_meters, is_night)

        return FareQuote(
            total=round_half_up(state.total),
            breakdown=state.to_breakdown(),
            is_night_fare=is_night,
        )
