from collections.abc import Mapping
from types import MappingProxyType

from pydantic import ConfigDict, Field, field_validator, model_validator

from mallpark.schemas.common import BaseSchema
from mallpark.utils.constants import RateClass


class RateSchedule(BaseSchema):
    """Read-only tariff shared by every fee calculation."""

    model_config = ConfigDict(frozen=True)

    base_fee: int = Field(ge=0)
    base_window_hours: int = Field(gt=0)
    hourly_rates: Mapping[RateClass, int]
    daily_fee: int = Field(ge=0)
    hours_per_day: int = Field(default=24, gt=0)
    continuous_gap_max_hours: float = Field(default=1, ge=0)

    @field_validator("hourly_rates")
    @classmethod
    def freeze_hourly_rates(cls, v: Mapping[RateClass, int]) -> Mapping[RateClass, int]:
        # Read-only view; get_rate_schedule() hands one instance to every caller
        return MappingProxyType(dict(v))

    @model_validator(mode="after")
    def validate_hourly_rates(self) -> "RateSchedule":
        missing = [c.value for c in RateClass if c not in self.hourly_rates]
        if missing:
            raise ValueError(f"Missing hourly rate for: {', '.join(missing)}")
        for rate_class, rate in self.hourly_rates.items():
            if rate <= 0:
                raise ValueError(f"Hourly rate for {rate_class.value} must be positive")
        return self

    def hourly_rate(self, rate_class: RateClass) -> int:
        return self.hourly_rates[rate_class]

    def classes_by_rate(self) -> list[RateClass]:
        """Rate classes, most expensive first; equal rates keep declaration order."""
        declared = list(RateClass)
        return sorted(
            self.hourly_rates,
            key=lambda c: (-self.hourly_rates[c], declared.index(c)),
        )
