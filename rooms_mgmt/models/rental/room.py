"""Room model: a rentable unit inside a branch."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from rooms_mgmt.models.base import Tenant


@dataclass
class Room:
    """Rentable unit with its current tenant."""

    room_id: str
    branch_id: str
    name: str  # Room name or number, e.g. "101"
    tenant: Tenant
    monthly_rent: Decimal
    created_at: datetime
    updated_at: datetime
