"""
Typed pricing-rule configuration.

Profiles store their rules as a JSON document.  It is loaded into a frozen
``PricingRuleConfig`` once, at lookup time, so a malformed document fails
before any fare is computed rather than half-way through the pipeline.
"""

from __future__ import annotations

from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_serializer,
)

from .enums import RULE_ORDER, PricingRule
from .errors import InvalidPricingConfig


class PricingRuleConfig(BaseModel):
    base_fare: float = Field(..., ge=0)
    minimum_fare: float = Field(..., ge=0)
    distance_step_meters: int = Field(..., gt=0)
    price_per_step: float = Field(..., ge=0)
    night_surcharge_percent: float = Field(..., ge=0)
    night_start_hour: int = Field(..., ge=0, le=23)
    night_end_hour: int = Field(..., ge=0, le=23)
    enabled_rules: frozenset[PricingRule] = frozenset()

    model_config = ConfigDict(
        frozen=True, extra="forbid", allow_inf_nan=False
    )

    @classmethod
    def from_rules_config(cls, raw: dict[str, Any]) -> "PricingRuleConfig":
        """Load a stored ``rules_config`` document, rejecting bad shapes."""
        try:
            return cls.model_validate(raw)
        except ValidationError as exc:
            raise InvalidPricingConfig(str(exc)) from exc

    def is_enabled(self, rule: PricingRule) -> bool:
        return rule in self.enabled_rules

    @field_serializer("enabled_rules")
    def _serialize_rules(self, rules: frozenset[PricingRule]) -> list[str]:
        return [r.value for r in RULE_ORDER if r in rules]

    def to_rules_config(self) -> dict[str, Any]:
        """Inverse of :meth:`from_rules_config` (JSON-safe)."""
        return self.model_dump(mode="json")
