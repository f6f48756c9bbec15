"""Sample data generators."""

from rooms_mgmt.generators.base import BaseGenerator
from rooms_mgmt.generators.rental import RentalGenerator, recent_periods

__all__ = ["BaseGenerator", "RentalGenerator", "recent_periods"]
