"""Rental data store: the persistence façade over a key-value backend.

Each entity type lives as one JSON array under a fixed key. Every mutation
loads the whole collection, changes it in memory and writes it back, so
concurrent writers to the same collection lose updates (last write wins).
"""

import logging
import secrets
import time
from dataclasses import dataclass, fields, replace
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Callable, TypeVar

from rooms_mgmt.backends.base import KeyValueStore
from rooms_mgmt.exceptions import DeserializationError, InvalidEntityStateError, StorageError
from rooms_mgmt.models import BillingPeriod, Tenant, month_index
from rooms_mgmt.models.rental import (
    AppSettings,
    Branch,
    BranchWithRooms,
    Payment,
    Room,
    RoomWithDetails,
    UtilityUsage,
)
from rooms_mgmt.store.serialization import (
    coerce_fields,
    decode_collection,
    decode_object,
    encode_collection,
    encode_object,
)

logger = logging.getLogger(__name__)

E = TypeVar("E")

ID_FIELDS: dict[type, str] = {
    Branch: "branch_id",
    Room: "room_id",
    UtilityUsage: "utility_id",
    Payment: "payment_id",
}


def new_id() -> str:
    """Millisecond timestamp plus a random suffix, e.g. ``1718000000000-1a2b3c4d``."""
    return f"{time.time_ns() // 1_000_000}-{secrets.token_hex(4)}"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class StoreKeys:
    """Key names of the persisted collections."""

    branches: str
    rooms: str
    utilities: str
    payments: str
    settings: str

    @classmethod
    def with_prefix(cls, prefix: str = "@rooms_mgmt_") -> "StoreKeys":
        return cls(
            branches=f"{prefix}branches",
            rooms=f"{prefix}rooms",
            utilities=f"{prefix}utilities",
            payments=f"{prefix}payments",
            settings=f"{prefix}settings",
        )


@dataclass
class WriteResult:
    """Outcome of writing one collection to the backend."""

    key: str
    ok: bool = True
    error: StorageError | None = None

    def __bool__(self) -> bool:
        return self.ok


class RentalDataStore:
    """Sole mediator between rental entities and the key-value backend.

    Parameters
    ----------
    backend : KeyValueStore
        Where the collections are persisted.
    keys : StoreKeys | None
        Collection key names (default ``@rooms_mgmt_*``).
    strict : bool
        Raise ``StorageError`` on unreadable collections and failed writes
        instead of logging them and carrying on.
    clock : Callable[[], datetime]
        Source of timestamps.
    id_factory : Callable[[], str]
        Source of new entity ids.
    """

    def __init__(
        self,
        backend: KeyValueStore,
        keys: StoreKeys | None = None,
        strict: bool = False,
        clock: Callable[[], datetime] = utc_now,
        id_factory: Callable[[], str] = new_id,
    ) -> None:
        self.backend = backend
        self.keys = keys or StoreKeys.with_prefix()
        self.strict = strict
        self._clock = clock
        self._new_id = id_factory

    # Branches
    def get_branches(self) -> list[Branch]:
        return self._load(self.keys.branches, Branch)

    def save_branches(self, branches: list[Branch]) -> WriteResult:
        return self._save(self.keys.branches, branches)

    def get_branch(self, branch_id: str) -> Branch | None:
        return self._find(self.get_branches(), branch_id)

    def create_branch(self, name: str, address: str) -> Branch:
        """Create and persist a new branch."""
        now = self._clock()
        branch = Branch(
            branch_id=self._new_id(),
            name=name,
            address=address,
            created_at=now,
            updated_at=now,
        )
        self.save_branches([*self.get_branches(), branch])
        logger.debug("Created branch %s (%s)", branch.branch_id, name)
        return branch

    def update_branch(self, branch_id: str, **changes: Any) -> Branch | None:
        """Merge ``changes`` into a branch; None if it does not exist."""
        return self._update(self.keys.branches, Branch, branch_id, changes, touch=True)

    def delete_branch(self, branch_id: str) -> bool:
        """Delete a branch together with its rooms and their records."""
        room_ids = {r.room_id for r in self.get_rooms_by_branch(branch_id)}
        if room_ids:
            self._delete_rooms(room_ids)

        branches = self.get_branches()
        self.save_branches([b for b in branches if b.branch_id != branch_id])
        logger.debug("Deleted branch %s and %d rooms", branch_id, len(room_ids))
        return True

    # Rooms
    def get_rooms(self) -> list[Room]:
        return self._load(self.keys.rooms, Room)

    def save_rooms(self, rooms: list[Room]) -> WriteResult:
        return self._save(self.keys.rooms, rooms)

    def get_room(self, room_id: str) -> Room | None:
        return self._find(self.get_rooms(), room_id)

    def get_rooms_by_branch(self, branch_id: str) -> list[Room]:
        return [r for r in self.get_rooms() if r.branch_id == branch_id]

    def create_room(
        self,
        branch_id: str,
        name: str,
        tenant: Tenant,
        monthly_rent: Decimal | int | float | str,
    ) -> Room:
        """Create and persist a new room.

        The branch is not checked for existence; callers pick it from
        ``get_branches()``.
        """
        now = self._clock()
        room = Room(
            room_id=self._new_id(),
            branch_id=branch_id,
            name=name,
            tenant=tenant,
            monthly_rent=Decimal(str(monthly_rent)),
            created_at=now,
            updated_at=now,
        )
        self.save_rooms([*self.get_rooms(), room])
        logger.debug("Created room %s (%s) in branch %s", room.room_id, name, branch_id)
        return room

    def update_room(self, room_id: str, **changes: Any) -> Room | None:
        """Merge ``changes`` into a room; None if it does not exist."""
        return self._update(self.keys.rooms, Room, room_id, changes, touch=True)

    def delete_room(self, room_id: str) -> bool:
        """Delete a room together with its utility and payment records."""
        self._delete_rooms({room_id})
        logger.debug("Deleted room %s", room_id)
        return True

    # Utilities
    def get_utilities(self) -> list[UtilityUsage]:
        return self._load(self.keys.utilities, UtilityUsage)

    def save_utilities(self, utilities: list[UtilityUsage]) -> WriteResult:
        return self._save(self.keys.utilities, utilities)

    def get_utilities_by_room(self, room_id: str) -> list[UtilityUsage]:
        """Usage records of a room, most recent billing period first."""
        return _newest_first(u for u in self.get_utilities() if u.room_id == room_id)

    def get_utility_for_month(self, room_id: str, month: str, year: int) -> UtilityUsage | None:
        return next(
            (u for u in self.get_utilities() if u.room_id == room_id and u.month == month and u.year == year),
            None,
        )

    def create_utility(
        self,
        room_id: str,
        month: str,
        year: int,
        electric_usage: Decimal | int | float | str,
        water_usage: Decimal | int | float | str,
        electric_cost: Decimal | int | float | str,
        water_cost: Decimal | int | float | str,
    ) -> UtilityUsage:
        """Create and persist a utility usage record."""
        values = coerce_fields(
            UtilityUsage,
            {
                "year": year,
                "electric_usage": electric_usage,
                "water_usage": water_usage,
                "electric_cost": electric_cost,
                "water_cost": water_cost,
            },
        )
        utility = UtilityUsage(
            utility_id=self._new_id(),
            room_id=room_id,
            month=month,
            created_at=self._clock(),
            **values,
        )
        self.save_utilities([*self.get_utilities(), utility])
        return utility

    def update_utility(self, utility_id: str, **changes: Any) -> UtilityUsage | None:
        return self._update(self.keys.utilities, UtilityUsage, utility_id, changes, touch=False)

    def delete_utility(self, utility_id: str) -> bool:
        utilities = self.get_utilities()
        self.save_utilities([u for u in utilities if u.utility_id != utility_id])
        return True

    # Payments
    def get_payments(self) -> list[Payment]:
        return self._load(self.keys.payments, Payment)

    def save_payments(self, payments: list[Payment]) -> WriteResult:
        return self._save(self.keys.payments, payments)

    def get_payments_by_room(self, room_id: str) -> list[Payment]:
        """Payments of a room, most recent billing period first."""
        return _newest_first(p for p in self.get_payments() if p.room_id == room_id)

    def get_payment_for_month(self, room_id: str, month: str, year: int) -> Payment | None:
        return next(
            (p for p in self.get_payments() if p.room_id == room_id and p.month == month and p.year == year),
            None,
        )

    def create_payment(
        self,
        room_id: str,
        month: str,
        year: int,
        amount: Decimal | int | float | str,
        is_paid: bool = False,
        paid_at: datetime | None = None,
    ) -> Payment:
        """Create and persist a payment record.

        A paid payment without ``paid_at`` is stamped with the current time.
        """
        now = self._clock()
        if is_paid and paid_at is None:
            paid_at = now
        payment = Payment(
            payment_id=self._new_id(),
            room_id=room_id,
            month=month,
            year=int(year),
            amount=Decimal(str(amount)),
            is_paid=is_paid,
            created_at=now,
            paid_at=paid_at if is_paid else None,
        )
        self.save_payments([*self.get_payments(), payment])
        return payment

    def update_payment(self, payment_id: str, **changes: Any) -> Payment | None:
        """Merge ``changes`` into a payment; None if it does not exist.

        Marking a payment paid stamps ``paid_at`` unless one is given or it
        was already paid; marking it unpaid clears ``paid_at``.
        """

        def keep_paid_at_consistent(before: Payment, after: Payment) -> Payment:
            if "paid_at" in changes:
                return after
            if after.is_paid and not before.is_paid:
                return replace(after, paid_at=self._clock())
            if not after.is_paid:
                return replace(after, paid_at=None)
            return after

        return self._update(
            self.keys.payments,
            Payment,
            payment_id,
            changes,
            touch=False,
            adjust=keep_paid_at_consistent,
        )

    def delete_payment(self, payment_id: str) -> bool:
        payments = self.get_payments()
        self.save_payments([p for p in payments if p.payment_id != payment_id])
        return True

    def record_payment(
        self,
        room_id: str,
        month: str,
        year: int,
        amount: Decimal | int | float | str,
        is_paid: bool,
    ) -> Payment:
        """Create or update the payment of a room for one billing period."""
        existing = self.get_payment_for_month(room_id, month, year)
        if existing is None:
            return self.create_payment(room_id, month, year, amount, is_paid=is_paid)

        paid_at = self._clock() if is_paid else None
        updated = self.update_payment(existing.payment_id, amount=amount, is_paid=is_paid, paid_at=paid_at)
        # The record was just read; only a concurrent delete can make this None
        return updated if updated is not None else existing

    # Settings
    def get_settings(self) -> AppSettings:
        """Configured utility prices; zero prices when none are stored."""
        try:
            raw = self.backend.get(self.keys.settings)
            if raw is None:
                return AppSettings()
            return decode_object(AppSettings, raw)
        except StorageError:
            if self.strict:
                raise
            logger.exception("Error getting settings", extra={"extra": {"key": self.keys.settings}})
            return AppSettings()

    def save_settings(self, settings: AppSettings) -> WriteResult:
        return self._write(self.keys.settings, encode_object(settings))

    def suggest_utility_costs(
        self,
        electric_usage: Decimal | int | float | str,
        water_usage: Decimal | int | float | str,
    ) -> tuple[Decimal, Decimal]:
        """Electricity and water cost for the given usage at the stored prices."""
        settings = self.get_settings()
        return (
            settings.electric_cost(Decimal(str(electric_usage))),
            settings.water_cost(Decimal(str(water_usage))),
        )

    def record_utility(
        self,
        room_id: str,
        month: str,
        year: int,
        electric_usage: Decimal | int | float | str,
        water_usage: Decimal | int | float | str,
        electric_cost: Decimal | int | float | str | None = None,
        water_cost: Decimal | int | float | str | None = None,
    ) -> UtilityUsage:
        """Create a usage record, filling missing costs from the stored prices."""
        suggested_electric, suggested_water = self.suggest_utility_costs(electric_usage, water_usage)
        return self.create_utility(
            room_id,
            month,
            year,
            electric_usage=electric_usage,
            water_usage=water_usage,
            electric_cost=suggested_electric if electric_cost is None else electric_cost,
            water_cost=suggested_water if water_cost is None else water_cost,
        )

    # Joined and derived views
    def get_room_with_details(self, room_id: str) -> RoomWithDetails | None:
        room = self.get_room(room_id)
        if room is None:
            return None
        return RoomWithDetails(
            room=room,
            utilities=self.get_utilities_by_room(room_id),
            payments=self.get_payments_by_room(room_id),
        )

    def get_branch_with_rooms(self, branch_id: str) -> BranchWithRooms | None:
        branch = self.get_branch(branch_id)
        if branch is None:
            return None
        return BranchWithRooms(branch=branch, rooms=self.get_rooms_by_branch(branch_id))

    def today(self) -> date:
        """Current date according to the store clock."""
        return self._clock().date()

    def current_period(self, today: date | None = None) -> BillingPeriod:
        """Billing period containing ``today`` (default: the store clock's date)."""
        return BillingPeriod.from_date(today or self.today())

    def get_current_payment(self, room_id: str, today: date | None = None) -> Payment | None:
        period = self.current_period(today)
        return self.get_payment_for_month(room_id, period.month, period.year)

    def get_current_utility(self, room_id: str, today: date | None = None) -> UtilityUsage | None:
        period = self.current_period(today)
        return self.get_utility_for_month(room_id, period.month, period.year)

    def is_room_paid(self, room_id: str, today: date | None = None) -> bool:
        """Whether the room's rent for the current billing period is paid."""
        payment = self.get_current_payment(room_id, today)
        return payment is not None and payment.is_paid

    def summary(self, today: date | None = None) -> dict[str, int]:
        """Entity counts and current-period payment status."""
        period = self.current_period(today)
        rooms = self.get_rooms()
        room_ids = {r.room_id for r in rooms}
        paid_room_ids = {
            p.room_id
            for p in self.get_payments()
            if p.is_paid and p.month == period.month and p.year == period.year and p.room_id in room_ids
        }
        return {
            "branches": len(self.get_branches()),
            "rooms": len(rooms),
            "paid_rooms": len(paid_room_ids),
            "unpaid_rooms": len(rooms) - len(paid_room_ids),
        }

    def clear_all(self) -> bool:
        """Empty all four collections; settings are kept."""
        results = [
            self.save_branches([]),
            self.save_rooms([]),
            self.save_utilities([]),
            self.save_payments([]),
        ]
        logger.info("Cleared all rental data")
        return all(results)

    # Internals
    def _load(self, key: str, cls: type[E]) -> list[E]:
        try:
            raw = self.backend.get(key)
            if raw is None:
                return []
            return decode_collection(cls, raw)
        except StorageError:
            if self.strict:
                raise
            logger.exception("Error getting %s", key, extra={"extra": {"key": key}})
            return []

    def _save(self, key: str, records: list[Any]) -> WriteResult:
        return self._write(key, encode_collection(records))

    def _write(self, key: str, value: str) -> WriteResult:
        try:
            self.backend.set(key, value)
        except StorageError as e:
            if self.strict:
                raise
            logger.exception("Error saving %s", key, extra={"extra": {"key": key}})
            return WriteResult(key=key, ok=False, error=e)
        return WriteResult(key=key)

    def _find(self, records: list[E], entity_id: str) -> E | None:
        if not records:
            return None
        id_field = ID_FIELDS[type(records[0])]
        return next((r for r in records if getattr(r, id_field) == entity_id), None)

    def _update(
        self,
        key: str,
        cls: type[E],
        entity_id: str,
        changes: dict[str, Any],
        touch: bool,
        adjust: Callable[[E, E], E] | None = None,
    ) -> E | None:
        id_field = ID_FIELDS[cls]
        allowed = {f.name for f in fields(cls)} - {id_field, "created_at", "updated_at"}
        unknown = set(changes) - allowed
        if unknown:
            raise InvalidEntityStateError(f"Cannot update {cls.__name__} fields: {', '.join(sorted(unknown))}")
        try:
            values = coerce_fields(cls, changes)
        except DeserializationError as e:
            raise InvalidEntityStateError(f"Invalid {cls.__name__} update: {e}") from e

        records = self._load(key, cls)
        for index, before in enumerate(records):
            if getattr(before, id_field) == entity_id:
                break
        else:
            return None

        after = replace(before, **values)
        if adjust is not None:
            after = adjust(before, after)
        if touch:
            after = replace(after, updated_at=self._later_than(before.updated_at))

        records[index] = after
        self._save(key, records)
        return after

    def _delete_rooms(self, room_ids: set[str]) -> None:
        utilities = self.get_utilities()
        payments = self.get_payments()
        self.save_utilities([u for u in utilities if u.room_id not in room_ids])
        self.save_payments([p for p in payments if p.room_id not in room_ids])

        rooms = self.get_rooms()
        self.save_rooms([r for r in rooms if r.room_id not in room_ids])

    def _later_than(self, previous: datetime) -> datetime:
        now = self._clock()
        if now <= previous:
            now = previous + timedelta(microseconds=1)
        return now


def _newest_first(records: Any) -> list:
    # sorted() is stable, so records of the same period keep insertion order
    return sorted(records, key=lambda r: (r.year, month_index(r.month)), reverse=True)
