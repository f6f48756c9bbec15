"""Base models shared across the rental entities."""

from dataclasses import dataclass
from datetime import date

from rooms_mgmt.models.months import MONTHS, month_index


@dataclass
class Tenant:
    """Occupant contact details embedded in a room.

    ``id_card_image`` is a local file reference returned by the device
    image picker; it is stored as-is and never opened here.
    """

    name: str
    phone: str = ""
    address: str = ""
    id_card_image: str | None = None


@dataclass(frozen=True)
class BillingPeriod:
    """A (month name, year) pair identifying one calendar month of billing."""

    month: str
    year: int

    @classmethod
    def from_date(cls, value: date) -> "BillingPeriod":
        """Billing period containing ``value`` (a date or datetime)."""
        return cls(month=MONTHS[value.month - 1], year=value.year)

    @property
    def sort_key(self) -> tuple[int, int]:
        """Ordering key; unknown month names sort before January."""
        return (self.year, month_index(self.month))

    def __str__(self) -> str:
        return f"{self.month} {self.year}"
