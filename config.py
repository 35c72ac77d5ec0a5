# config.py
"""
Application configuration loaded from environment variables.

Commission rates, the payment threshold that turns a booking into a sale and
the cancellation lock are data, not code:

     COMMISSION_LEVEL_RATES=6,2,0.5         # percent of total plot amount, index 0 = direct seller
     COMMISSION_TRIGGER_PERCENTAGE=50       # paid % at which a booked plot is sold
     BOOKING_CANCEL_LOCK_PERCENTAGE=50      # paid % from which a booking can no longer be cancelled
"""
import os
from decimal import Decimal
from functools import lru_cache
from typing import List

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

# Load environment variables
load_dotenv()

DEFAULT_LEVEL_RATES = "6,2,0.5"


class CommissionPolicy(BaseModel):
     """Rates per level plus the payment gates used by the plot lifecycle."""

     level_rates: List[Decimal] = Field(
          default_factory=lambda: [Decimal("6"), Decimal("2"), Decimal("0.5")],
          min_length=1,
          description="Commission percent per level; index 0 is the selling broker",
     )
     trigger_percentage: Decimal = Field(default=Decimal("50"), gt=0, le=100)
     cancellation_lock_percentage: Decimal = Field(default=Decimal("50"), gt=0, le=100)

     @field_validator("level_rates")
     @classmethod
     def _rates_not_negative(cls, rates: List[Decimal]) -> List[Decimal]:
          if any(rate < 0 for rate in rates):
               raise ValueError("commission rates must not be negative")
          return rates

     @property
     def max_upline_depth(self) -> int:
          return len(self.level_rates) - 1

     def rate_for_level(self, level: int) -> Decimal:
          return self.level_rates[level]


def parse_rates(raw: str) -> List[Decimal]:
     return [Decimal(part.strip()) for part in raw.split(",") if part.strip()]


@lru_cache
def get_commission_policy() -> CommissionPolicy:
     """Build the policy once from the environment."""
     return CommissionPolicy(
          level_rates=parse_rates(os.getenv("COMMISSION_LEVEL_RATES", DEFAULT_LEVEL_RATES)),
          trigger_percentage=Decimal(os.getenv("COMMISSION_TRIGGER_PERCENTAGE", "50")),
          cancellation_lock_percentage=Decimal(os.getenv("BOOKING_CANCEL_LOCK_PERCENTAGE", "50")),
     )
