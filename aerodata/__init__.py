"""
Aviation reference data: validated entities and filtered, paginated views.

This package keeps airlines, airports, routes and trips valid on every
change, stores them in SQLite and serves sorted, filtered pages of them
to any number of views that follow data and filter changes.

The main public API includes:
- Airline, Airport, Route, Trip, TripFlight: validated entities
- FilterRegistry: range and multi-select filters shared by all views
- AirlineStore, AirportStore, RouteStore, TripStore: CRUD and filtered reads
- PagedView: sentinel-row pagination over a store
- AppContext: wiring of storage, filters and stores
"""

from .context import AppContext, get_context, init_context, teardown_context
from .filters import FilterKeys, FilterRegistry, MultiSelectFilter, RangeFilter
from .models import Airline, Airport, DataConstraintsError, DSTType, Route, Trip, TripFlight
from .paging import PagedView, PageEvent
from .storage import DatabaseStorage, SortOrder, StorageError, StoreError, UniquenessConflictError
from .stores import AirlineStore, AirportStore, RouteStore, TripStore

__version__ = '0.1.0'
__all__ = [
    'AppContext',
    'get_context',
    'init_context',
    'teardown_context',
    'FilterKeys',
    'FilterRegistry',
    'MultiSelectFilter',
    'RangeFilter',
    'Airline',
    'Airport',
    'DataConstraintsError',
    'DSTType',
    'Route',
    'Trip',
    'TripFlight',
    'PagedView',
    'PageEvent',
    'DatabaseStorage',
    'SortOrder',
    'StorageError',
    'StoreError',
    'UniquenessConflictError',
    'AirlineStore',
    'AirportStore',
    'RouteStore',
    'TripStore',
]
