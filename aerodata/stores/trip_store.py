#!/usr/bin/env python3

"""
Trips, their flights and the trip currently open for editing.
"""

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, List, Optional, Sequence

from ..events import EventPublisher, ListenerFailure, Subscription
from ..filters.registry import FilterRegistry
from ..models.airport import Airport
from ..models.route import Route
from ..models.trip import Trip, TripFlight
from ..storage.base import Row, StorageInterface
from .base import ChangeKind, DataChange, EntityStore
from .route_store import RouteStore

logger = logging.getLogger(__name__)

INTERNATIONAL_LAYOVER = timedelta(hours=2)
DOMESTIC_LAYOVER = timedelta(minutes=30)
GROUND_TRAVEL_WINDOW = timedelta(hours=24)
GROUND_SPEED_KM = 100  # km covered per hour on the ground

CurrentTripListener = Callable[[Optional[Trip]], object]


@dataclass(frozen=True)
class TripIssue:
    """A problem with one flight of a trip; errors make the trip impossible."""

    is_error: bool
    message: str

    def __str__(self) -> str:
        return f"{'Error' if self.is_error else 'Warning'}: {self.message}"


def _format_time(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


class TripStore(EntityStore[Trip]):
    """
    Trips keyed by name. Flights are resolved against the route store.

    The store also tracks the trip open for editing and tells its own
    listeners when it is replaced, saved or deleted.
    """

    TABLE = 'trips'
    ENTITY_CLASS = Trip

    def __init__(self, storage: StorageInterface, registry: FilterRegistry, routes: RouteStore):
        super().__init__(storage, registry)
        self.routes = routes
        self._current_trip: Optional[Trip] = None
        self._current_trip_listeners = EventPublisher('current trip')

    def _to_row(self, trip: Trip) -> Row:
        row = trip.values()
        row['flights'] = [flight.to_record() for flight in trip.flights]
        return row

    def _from_row(self, row: Row) -> Trip:
        flights = [TripFlight(**record) for record in row.get('flights') or []]
        return Trip.from_storage(row['id'], flights=flights, name=row['name'], comment=row.get('comment'))

    def get_by_name(self, name: str) -> Optional[Trip]:
        return self.find_by('name', name.strip())

    def get_all_names(self) -> List[str]:
        return [row['name'] for row in self.storage.query(self.TABLE, sort_column='name')]

    # Current trip

    @property
    def current_trip(self) -> Optional[Trip]:
        return self._current_trip

    def set_current_trip(self, trip: Optional[Trip]) -> List[ListenerFailure]:
        self._current_trip = trip
        return self._current_trip_listeners.publish(trip)

    def add_current_trip_listener(self, listener: CurrentTripListener) -> Subscription:
        return self._current_trip_listeners.subscribe(listener)

    def remove_current_trip_listener(self, listener: CurrentTripListener) -> bool:
        return self._current_trip_listeners.unsubscribe(listener)

    def _publish_change(self, change: DataChange) -> List[ListenerFailure]:
        failures = super()._publish_change(change)
        current = self._current_trip
        if current is not None and current.id == change.entity_id:
            if change.kind is ChangeKind.SAVED:
                failures.extend(self.set_current_trip(change.entity))
            elif change.kind is ChangeKind.DELETED:
                failures.extend(self.set_current_trip(None))
        return failures

    # Flights

    def _route_for(self, flight: TripFlight) -> Optional[Route]:
        return self.routes.get_by_key(flight.source, flight.destination, flight.airline)

    def _required_route(self, flight: TripFlight) -> Route:
        route = self._route_for(flight)
        if route is None:
            raise LookupError(f"No route found for flight {flight.source} -> {flight.destination} ({flight.airline})")
        return route

    def landing_time(self, flight: TripFlight) -> datetime:
        """
        Landing time in UTC from the duration of the flight's route.

        Raises:
            LookupError: if the route of the flight is not stored
        """
        return flight.takeoff_datetime + self._required_route(flight).flight_duration_delta

    def flight_price(self, flight: TripFlight) -> int:
        """
        Price of the flight's route.

        Raises:
            LookupError: if the route of the flight is not stored
        """
        return self._required_route(flight).price

    def find_clash(self, existing_flights: Sequence[TripFlight], new_flight: TripFlight) -> Optional[str]:
        """
        Check that a new flight is not in the air at the same time as another.

        Flights whose route is unknown are ignored, as is the new flight
        if its own route is unknown.

        Returns:
            A message naming the first clashing flight, None if there is none
        """
        new_route = self._route_for(new_flight)
        if new_route is None:
            return None
        new_takeoff = new_flight.takeoff_datetime
        new_landing = new_takeoff + new_route.flight_duration_delta

        for flight in existing_flights:
            route = self._route_for(flight)
            if route is None:
                continue
            takeoff = flight.takeoff_datetime
            landing = takeoff + route.flight_duration_delta
            # Touching intervals clash so identical flights are caught
            if new_takeoff <= landing and new_landing >= takeoff:
                return (f"Clashes with flight {flight.source} → {flight.destination} "
                        f"({takeoff.strftime('%H:%M, %d/%m/%Y')})")
        return None

    def sanity_check(self, trip: Trip) -> List[Optional[TripIssue]]:
        """
        Check that a trip can actually be flown.

        Errors are missing routes or airports, takeoff times the route does
        not fly and flights leaving before the previous one lands. Warnings
        are short connections and connections between distant airports with
        no flight in between.

        Returns:
            One entry per flight in takeoff order, None when the flight is fine
        """
        issues: List[Optional[TripIssue]] = []
        previous_landing: Optional[datetime] = None
        previous_destination: Optional[Airport] = None

        for flight in trip.flights:
            route = self._route_for(flight)
            if route is None:
                issues.append(TripIssue(True, "The route is not in the database"))
                continue

            source = self.routes.airports.get_by_code(route.source)
            if source is None:
                issues.append(TripIssue(True, f"The origin airport ({route.source}) is not in the database"))
                continue
            destination = self.routes.airports.get_by_code(route.destination)
            if destination is None:
                issues.append(TripIssue(True, f"The destination airport ({route.destination}) is not in the database"))
                continue

            if flight.takeoff_time not in route.takeoff_times:
                nearest = route.nearest_takeoff_time(flight.takeoff_time)
                if nearest is None:
                    issues.append(TripIssue(True, "The route has no scheduled flights"))
                else:
                    issues.append(TripIssue(True, (
                        f"The selected takeoff time, {_format_time(flight.takeoff_time)} was not found "
                        f"in the route. Closest alternative: {_format_time(nearest)}"
                    )))
                continue

            takeoff = flight.takeoff_datetime
            message = None
            if previous_landing is not None:
                layover = takeoff - previous_landing
                if layover < timedelta(0):
                    issues.append(TripIssue(True, "The flight takes off before you land"))
                    continue
                message = self._connection_warning(layover, previous_destination, source, destination)

            previous_landing = takeoff + route.flight_duration_delta
            previous_destination = destination
            issues.append(None if message is None else TripIssue(False, message))

        return issues

    @staticmethod
    def _connection_warning(layover: timedelta, previous_destination: Optional[Airport],
                            source: Airport, destination: Airport) -> Optional[str]:
        international = source.country != destination.country
        if international and layover < INTERNATIONAL_LAYOVER:
            return "You have less than 2 hours between connections for an international flight"
        if layover < DOMESTIC_LAYOVER:
            return "You have less than 30 minutes between connections for a domestic flight"
        if previous_destination is None or previous_destination.code == source.code:
            return None

        distance = previous_destination.distance_to(source)
        if distance and layover < GROUND_TRAVEL_WINDOW:
            hours_by_road = math.floor(distance / GROUND_SPEED_KM)
            if layover < timedelta(hours=hours_by_road):
                return (f"No connecting flight between {previous_destination.name} and {source.name}, "
                        f"which are {int(distance)} km away")
        return None
