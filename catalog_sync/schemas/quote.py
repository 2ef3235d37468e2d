"""Quote simulation schemas."""

from typing import Tuple

from pydantic import BaseModel, Field, model_validator


class ProviderProfile(BaseModel):
    """Fixed characteristics of a simulated provider."""

    name: str
    multiplier: float = Field(..., gt=0)
    variance: float = Field(..., ge=0, lt=1)
    delivery_days: Tuple[int, int]
    reliability: Tuple[float, float]
    latency_ms: Tuple[float, float]

    @model_validator(mode="after")
    def check_ranges(self):
        """Every range must be ordered low to high."""
        for label in ("delivery_days", "reliability", "latency_ms"):
            low, high = getattr(self, label)
            if low > high:
                raise ValueError(f"{label} range is inverted: {low} > {high}")
        return self


class Quote(BaseModel):
    """One provider's quote."""

    provider_name: str
    price: float
    delivery_days: int
    reliability_score: float
    response_time: int
