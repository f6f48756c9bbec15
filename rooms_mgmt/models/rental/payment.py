"""Rent payment model."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from rooms_mgmt.models.base import BillingPeriod


@dataclass
class Payment:
    """Rent due for one room and billing period, and whether it was paid."""

    payment_id: str
    room_id: str
    month: str
    year: int
    amount: Decimal
    is_paid: bool
    created_at: datetime
    paid_at: datetime | None = None

    @property
    def period(self) -> BillingPeriod:
        return BillingPeriod(self.month, self.year)
