"""Sample data generator for branches, rooms, utilities and payments."""

import logging
from datetime import date
from decimal import Decimal

from rooms_mgmt.generators.base import BaseGenerator
from rooms_mgmt.models import MONTHS, BillingPeriod, Tenant
from rooms_mgmt.models.rental import AppSettings
from rooms_mgmt.store.rental import RentalDataStore

logger = logging.getLogger(__name__)


def recent_periods(count: int, today: date) -> list[BillingPeriod]:
    """The ``count`` billing periods ending with the one containing ``today``, oldest first."""
    periods = []
    year, month = today.year, today.month
    for _ in range(count):
        periods.append(BillingPeriod(MONTHS[month - 1], year))
        month -= 1
        if month == 0:
            month, year = 12, year - 1
    return list(reversed(periods))


class RentalGenerator(BaseGenerator):
    """Generate plausible landlord data for demos and manual testing."""

    BRANCH_SUFFIXES = ["Residence", "Apartments", "House", "Court", "Lodge"]

    # Monthly rent range per room (whole currency units)
    RENT_RANGE = (250, 1200)

    # Monthly consumption ranges
    ELECTRIC_RANGE = (40, 400)  # kWh
    WATER_RANGE = (2, 30)  # m3

    PAID_RATE = 0.85
    CURRENT_PERIOD_PAID_RATE = 0.5

    def generate_branch(self) -> tuple[str, str]:
        """Generate a branch name and street address."""
        name = f"{self.fake.street_name()} {self.random.choice(self.BRANCH_SUFFIXES)}"
        return name, self.fake.street_address()

    def generate_tenant(self) -> Tenant:
        """Generate tenant contact details; no ID card image is attached."""
        return Tenant(
            name=self.fake.name(),
            phone=self.fake.phone_number(),
            address=self.fake.address().replace("\n", ", "),
        )

    def generate_rent(self) -> Decimal:
        # Rents are quoted in steps of 10
        low, high = self.RENT_RANGE
        return Decimal(self.random.randint(low // 10, high // 10) * 10)

    def generate_usage(self) -> tuple[Decimal, Decimal]:
        """Generate electricity (kWh) and water (m3) usage for one month."""
        electric = Decimal(self.random.randint(*self.ELECTRIC_RANGE))
        water = Decimal(str(round(self.random.uniform(*self.WATER_RANGE), 1)))
        return electric, water

    def generate_settings(self) -> AppSettings:
        return AppSettings(
            water_price=Decimal(str(round(self.random.uniform(0.5, 3.0), 2))),
            electric_price=Decimal(str(round(self.random.uniform(0.1, 0.4), 2))),
        )

    def populate(
        self,
        store: RentalDataStore,
        num_branches: int = 2,
        rooms_per_branch: int = 4,
        months: int = 3,
        today: date | None = None,
    ) -> dict[str, int]:
        """Write a complete sample dataset through ``store``.

        Parameters
        ----------
        store : RentalDataStore
            Destination store; existing records are kept.
        num_branches : int
            Number of branches to create.
        rooms_per_branch : int
            Rooms created in every branch.
        months : int
            Billing periods of history per room, ending with the current one.
        today : date | None
            Reference date for the current billing period (default: the
            store clock's date).

        Returns
        -------
        dict[str, int]
            Store summary after population.
        """
        today = today or store.today()
        periods = recent_periods(months, today)
        store.save_settings(self.generate_settings())

        for _ in range(num_branches):
            name, address = self.generate_branch()
            branch = store.create_branch(name=name, address=address)

            for number in range(1, rooms_per_branch + 1):
                room = store.create_room(
                    branch_id=branch.branch_id,
                    name=f"{100 + number}",
                    tenant=self.generate_tenant(),
                    monthly_rent=self.generate_rent(),
                )
                for i, period in enumerate(periods):
                    electric, water = self.generate_usage()
                    store.record_utility(room.room_id, period.month, period.year, electric, water)

                    is_current = i == len(periods) - 1
                    paid_rate = self.CURRENT_PERIOD_PAID_RATE if is_current else self.PAID_RATE
                    store.record_payment(
                        room.room_id,
                        period.month,
                        period.year,
                        amount=room.monthly_rent,
                        is_paid=self.random.random() < paid_rate,
                    )

            logger.info(
                "Generated branch %s with %d rooms",
                branch.name,
                rooms_per_branch,
                extra={"extra": {"branch_id": branch.branch_id, "rooms": rooms_per_branch}},
            )

        return store.summary(today)
