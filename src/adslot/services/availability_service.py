"""AvailabilityService: per-month calendar view for one neighborhood."""

from __future__ import annotations

from datetime import date

from ..config.runtime import RuntimeSettings
from ..domain.errors import NeighborhoodNotFoundError
from ..domain.filters import SlotFilter
from ..domain.inventory import GLOBAL_TAKEOVER_ID, Neighborhood, PlacementType, SlotState
from ..domain.pricing import PricingResolver
from ..domain.schedule import BookingWindow, Month
from ..models.responses import AvailabilityView
from ..ports.clock import Clock, SystemClock
from ..ports.directory import NeighborhoodDirectory
from ..ports.inventory_store import InventoryStorePort


def overlapping_ids(directory: NeighborhoodDirectory, neighborhood: Neighborhood) -> list[str]:
    """Slot ids that make ``neighborhood`` unsellable when taken on the same date.

    The neighborhood itself, a global takeover, and every neighborhood that
    shares exposure with it: a combo's components and any other combo over
    those components, or for a plain neighborhood the combos containing it.
    """
    ids = [neighborhood.id]
    if neighborhood.is_combo:
        components = directory.list_components(neighborhood.id)
        ids += components
        for component_id in components:
            ids += directory.combos_containing(component_id)
    else:
        ids += directory.combos_containing(neighborhood.id)
    ids.append(GLOBAL_TAKEOVER_ID)
    return list(dict.fromkeys(ids))


class AvailabilityService:
    """Classifies stored slots into booked and blocked dates and attaches prices."""

    def __init__(
        self,
        directory: NeighborhoodDirectory,
        store: InventoryStorePort,
        pricing: PricingResolver,
        settings: RuntimeSettings,
        clock: Clock | None = None,
    ) -> None:
        self._directory = directory
        self._store = store
        self._pricing = pricing
        self._settings = settings
        self._clock = clock or SystemClock()

    def booking_window(self) -> BookingWindow:
        return BookingWindow.from_now(
            self._clock.now(),
            lead_hours=self._settings.booking_lead_hours,
            max_days=self._settings.booking_max_days,
        )

    def get_availability(
        self,
        neighborhood_id: str | None,
        placement_type: PlacementType | str,
        month: str | date | Month,
    ) -> AvailabilityView:
        """Calendar for ``neighborhood_id``; ``None`` gives the global takeover calendar.

        A takeover is unavailable on any date where some neighborhood slot
        is taken, so its calendar reads every slot of the month.
        """
        placement_type = PlacementType(placement_type)
        neighborhood = None
        if neighborhood_id is not None:
            neighborhood = self._directory.get_neighborhood(neighborhood_id)
            if neighborhood is None:
                raise NeighborhoodNotFoundError(neighborhood_id)

        month = Month.parse(month)
        window = self.booking_window()
        window.check_month(month, today=self._clock.now().date())

        booked: set[date] = set()
        blocked: set[date] = set()
        slot_filter = SlotFilter.for_range(
            overlapping_ids(self._directory, neighborhood) if neighborhood is not None else None,
            placement_type.value,
            month.first_day,
            month.last_day,
        )
        for slot in self._store.query_slots(slot_filter):
            if slot.state == SlotState.booked:
                booked.add(slot.date)
            elif slot.state == SlotState.blocked:
                blocked.add(slot.date)
        # A date both blocked and booked through different neighborhoods reads as booked.
        blocked -= booked

        if neighborhood is None:
            tier, price = None, self._pricing.takeover_rates()
        else:
            tier, price = neighborhood.tier, self._pricing.rates_for(neighborhood.tier)
        return AvailabilityView(
            neighborhood_id=neighborhood.id if neighborhood is not None else None,
            placement_type=placement_type,
            month=str(month),
            tier=tier,
            price=price,
            booked_dates=sorted(booked),
            blocked_dates=sorted(blocked),
            min_date=window.min_date,
            max_date=window.max_date,
            weekly_weekday=self._settings.weekly_weekday,
        )
