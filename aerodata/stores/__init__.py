"""
Entity stores: validated CRUD and filtered, paginated reads per entity kind.
"""

from .airline_store import AirlineStore
from .airport_store import AirportStore
from .base import ChangeKind, DataChange, EntityStore
from .route_store import RouteStore
from .trip_store import TripIssue, TripStore

__all__ = [
    'ChangeKind',
    'DataChange',
    'EntityStore',
    'AirlineStore',
    'AirportStore',
    'RouteStore',
    'TripStore',
    'TripIssue',
]
