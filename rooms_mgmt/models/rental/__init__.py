"""Rental domain models."""

from rooms_mgmt.models.rental.branch import Branch
from rooms_mgmt.models.rental.payment import Payment
from rooms_mgmt.models.rental.room import Room
from rooms_mgmt.models.rental.settings import AppSettings
from rooms_mgmt.models.rental.utility import UtilityUsage
from rooms_mgmt.models.rental.views import BranchWithRooms, RoomWithDetails

__all__ = [
    "AppSettings",
    "Branch",
    "BranchWithRooms",
    "Payment",
    "Room",
    "RoomWithDetails",
    "UtilityUsage",
]
