#!/usr/bin/env python3

"""
Routes and the checks that need the airports and airlines they reference.
"""

import logging
import random
from typing import Any, Dict, List, Optional

from ..events import ListenerFailure
from ..filters.registry import FilterKeys, FilterRegistry
from ..models.route import Route, generate_flight_duration, generate_price, generate_takeoff_times
from ..storage.base import MembershipCriterion, StorageInterface
from .airline_store import AirlineStore
from .airport_store import AirportStore
from .base import ChangeKind, DataChange, EntityStore

logger = logging.getLogger(__name__)


class RouteStore(EntityStore[Route]):
    """
    Routes keyed by airline, source and destination.

    Routes filter on the airline name through a column derived from the
    airlines table, so they share the airline name filter with airlines.
    """

    TABLE = 'routes'
    ENTITY_CLASS = Route
    FILTER_COLUMNS = {
        FilterKeys.AIRLINE_NAME: 'airline_name',
        FilterKeys.ROUTE_SOURCE: 'source',
        FilterKeys.ROUTE_DESTINATION: 'destination',
        FilterKeys.ROUTE_PRICE: 'price',
        FilterKeys.ROUTE_DURATION: 'flight_duration',
    }
    OPTION_COLUMNS = {
        FilterKeys.ROUTE_SOURCE: 'source',
        FilterKeys.ROUTE_DESTINATION: 'destination',
    }
    SORT_ALIASES = {'duration': 'flight_duration'}

    def __init__(self, storage: StorageInterface, registry: FilterRegistry,
                 airlines: AirlineStore, airports: AirportStore):
        super().__init__(storage, registry)
        self.airlines = airlines
        self.airports = airports

    def _publish_change(self, change: DataChange) -> List[ListenerFailure]:
        failures = super()._publish_change(change)
        # Route counts of airports are derived from this table
        failures.extend(self.airports.notify_reloaded())
        return failures

    def get_by_key(self, source: str, destination: str, airline: str) -> Optional[Route]:
        """Route flown by ``airline`` from ``source`` to ``destination``, codes as stored."""
        criteria = [
            MembershipCriterion('source', (source.strip().upper(),)),
            MembershipCriterion('destination', (destination.strip().upper(),)),
            MembershipCriterion('airline', (airline.strip().upper(),)),
        ]
        rows = self.storage.query(self.TABLE, criteria=criteria, limit=1)
        return self._from_row(rows[0]) if rows else None

    def sanity_check(self, route: Route) -> Optional[str]:
        """
        Check that the airports and airline of a route exist and differ.

        Returns:
            A message describing the first problem found, None if there is none
        """
        source = self.airports.get_by_code(route.source)
        destination = self.airports.get_by_code(route.destination)

        if source is None:
            return "Origin airport is not in the database"
        if destination is None:
            return "Destination airport is not in the database"
        if self.airlines.get_by_code(route.airline) is None:
            return "Airline is not in the database"
        # One end may be named by IATA and the other by ICAO
        if source.code == destination.code:
            return "Origin and destination airports are the same"
        return None

    def distance_between(self, source: str, destination: str) -> Optional[float]:
        """Great circle distance in km between two airports, None if either is unknown."""
        source_airport = self.airports.get_by_code(source)
        destination_airport = self.airports.get_by_code(destination)
        if source_airport is None or destination_airport is None:
            return None
        return source_airport.distance_to(destination_airport)

    def generate_values(self, route: Route, rng: Optional[random.Random] = None) -> Optional[Dict[str, Any]]:
        """
        Duration, price and takeoff times estimated from the route's distance.

        Returns:
            The generated field values, None if an airport of the route is unknown
        """
        distance = self.distance_between(route.source, route.destination)
        if distance is None:
            return None
        duration = generate_flight_duration(distance)
        return {
            'flight_duration': duration,
            'price': generate_price(duration, rng=rng),
            'takeoff_times': generate_takeoff_times(duration, rng=rng),
        }

    def fill_generated_values(self, rng: Optional[random.Random] = None) -> int:
        """
        Generate duration, price and takeoff times for every route priced at 0.

        Routes whose airports are unknown are left as they are. Listeners are
        told once, after all routes were written.

        Returns:
            The number of routes updated
        """
        updated = 0
        for row in self.storage.find(self.TABLE, 'price', 0):
            route = self._from_row(row)
            generated = self.generate_values(route, rng)
            if generated is None:
                logger.debug(f"Skipping route {route.id}: unknown airport")
                continue
            route.update(**generated)
            self.storage.update(self.TABLE, route.id, {name: route.values()[name] for name in generated})
            updated += 1

        logger.info(f"Generated values for {updated} routes")
        if updated:
            self._publish_committed(DataChange(ChangeKind.RELOADED, Route.UNKNOWN_ID), 'update')
        return updated
