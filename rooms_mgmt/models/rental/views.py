"""Joined read views over rooms and branches."""

from dataclasses import dataclass, field
from decimal import Decimal

from rooms_mgmt.models.rental.branch import Branch
from rooms_mgmt.models.rental.payment import Payment
from rooms_mgmt.models.rental.room import Room
from rooms_mgmt.models.rental.utility import UtilityUsage


@dataclass
class RoomWithDetails:
    """A room with its full utility and payment history, newest period first."""

    room: Room
    utilities: list[UtilityUsage] = field(default_factory=list)
    payments: list[Payment] = field(default_factory=list)

    @property
    def total_utility_cost(self) -> Decimal:
        return sum((u.total_cost for u in self.utilities), Decimal("0"))

    @property
    def outstanding_rent(self) -> Decimal:
        """Sum of payment amounts not yet marked paid."""
        return sum((p.amount for p in self.payments if not p.is_paid), Decimal("0"))


@dataclass
class BranchWithRooms:
    """A branch with its rooms in insertion order."""

    branch: Branch
    rooms: list[Room] = field(default_factory=list)
