"""Domain models for rental bookkeeping."""

from rooms_mgmt.models.base import BillingPeriod, Tenant
from rooms_mgmt.models.months import MONTHS, Month, month_index

__all__ = ["BillingPeriod", "MONTHS", "Month", "Tenant", "month_index"]
