"""Application-wide utility prices."""

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal

CENTS = Decimal("0.01")


@dataclass
class AppSettings:
    """Price per unit used to suggest utility costs."""

    water_price: Decimal = field(default_factory=lambda: Decimal("0"))  # per m3
    electric_price: Decimal = field(default_factory=lambda: Decimal("0"))  # per kWh

    def electric_cost(self, usage: Decimal) -> Decimal:
        """Suggested electricity cost for ``usage`` kWh, rounded to cents."""
        return (usage * self.electric_price).quantize(CENTS, rounding=ROUND_HALF_UP)

    def water_cost(self, usage: Decimal) -> Decimal:
        """Suggested water cost for ``usage`` m3, rounded to cents."""
        return (usage * self.water_price).quantize(CENTS, rounding=ROUND_HALF_UP)
