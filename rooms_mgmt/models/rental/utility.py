"""Utility usage model for monthly electricity and water readings."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from rooms_mgmt.models.base import BillingPeriod


@dataclass
class UtilityUsage:
    """One room's consumption and cost for a billing period."""

    utility_id: str
    room_id: str
    month: str
    year: int
    electric_usage: Decimal  # kWh
    water_usage: Decimal  # m3
    electric_cost: Decimal
    water_cost: Decimal
    created_at: datetime

    @property
    def period(self) -> BillingPeriod:
        return BillingPeriod(self.month, self.year)

    @property
    def total_cost(self) -> Decimal:
        return self.electric_cost + self.water_cost
