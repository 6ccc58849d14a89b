#!/usr/bin/env python3

"""
The filters shared by every table of an application.

One registry is created per application context. Stores keep the option
universes of its multi-select filters in line with their data, consumers
change selections and bounds and then call ``notify_all`` so every
attached view reloads.
"""

import logging
from typing import Callable, Dict, List, Optional

from ..events import EventPublisher, ListenerFailure, Subscription
from .base import Filter
from .multi_select_filter import MultiSelectFilter
from .range_filter import RangeFilter

logger = logging.getLogger(__name__)


class FilterKeys:
    """Keys of the standard filters."""

    AIRLINE_NAME = 'airline_name'
    AIRLINE_CODE = 'airline_code'
    AIRLINE_COUNTRY = 'airline_country'
    AIRPORT_NAME = 'airport_name'
    AIRPORT_CODE = 'airport_code'
    AIRPORT_COUNTRY = 'airport_country'
    AIRPORT_ROUTES = 'airport_routes'
    ROUTE_SOURCE = 'route_source'
    ROUTE_DESTINATION = 'route_destination'
    ROUTE_PRICE = 'route_price'
    ROUTE_DURATION = 'route_duration'


class FilterRegistry:
    """Owns one filter per key and the listeners told when filters change."""

    def __init__(self):
        self._filters: Dict[str, Filter] = {}
        self._listeners = EventPublisher('filters')

    @classmethod
    def with_defaults(cls) -> 'FilterRegistry':
        """Registry holding the standard airline, airport and route filters."""
        registry = cls()
        for key, name in (
            (FilterKeys.AIRLINE_NAME, "Airline name"),
            (FilterKeys.AIRLINE_CODE, "Airline code"),
            (FilterKeys.AIRLINE_COUNTRY, "Airline country"),
            (FilterKeys.AIRPORT_NAME, "Airport name"),
            (FilterKeys.AIRPORT_CODE, "Airport code"),
            (FilterKeys.AIRPORT_COUNTRY, "Airport country"),
            (FilterKeys.ROUTE_SOURCE, "Start"),
            (FilterKeys.ROUTE_DESTINATION, "Destination"),
        ):
            registry.register_filter(MultiSelectFilter(key, name))

        registry.register_filter(RangeFilter(FilterKeys.ROUTE_PRICE, "Price", 0, 5000, 10))
        registry.register_filter(RangeFilter(FilterKeys.AIRPORT_ROUTES, "Number of routes", 0, 5000, 1))
        registry.register_filter(RangeFilter(FilterKeys.ROUTE_DURATION, "Duration", 0, 1440, 10))
        return registry

    def register_filter(self, filter_: Filter) -> Filter:
        if filter_.key in self._filters:
            raise ValueError(f"A filter is already registered for {filter_.key!r}")
        self._filters[filter_.key] = filter_
        return filter_

    def get(self, key: str) -> Optional[Filter]:
        filter_ = self._filters.get(key)
        if filter_ is None:
            logger.warning(f"No filter registered for {key!r}")
        return filter_

    def multi_select(self, key: str) -> MultiSelectFilter:
        filter_ = self._filters[key]
        if not isinstance(filter_, MultiSelectFilter):
            raise TypeError(f"Filter {key!r} is not a multi-select filter")
        return filter_

    def range(self, key: str) -> RangeFilter:
        filter_ = self._filters[key]
        if not isinstance(filter_, RangeFilter):
            raise TypeError(f"Filter {key!r} is not a range filter")
        return filter_

    def keys(self) -> List[str]:
        return list(self._filters)

    def __contains__(self, key: str) -> bool:
        return key in self._filters

    def __len__(self) -> int:
        return len(self._filters)

    def reset_all(self) -> List[ListenerFailure]:
        """Clear every selection and bound, then notify once."""
        for filter_ in self._filters.values():
            filter_.reset()
        return self.notify_all()

    def add_listener(self, listener: Callable[[], object]) -> Subscription:
        """Register a callable taking no arguments, called whenever filters change."""
        return self._listeners.subscribe(listener)

    def remove_listener(self, listener: Callable[[], object]) -> bool:
        return self._listeners.unsubscribe(listener)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def notify_all(self) -> List[ListenerFailure]:
        """
        Call every listener in registration order.

        Returns:
            The failures of listeners that raised; the others still ran
        """
        logger.debug(f"Notifying {len(self._listeners)} filter listeners")
        return self._listeners.publish()
