"""
Data models for the aerodata library.

Entities validate every change through the rules in ``validators`` and
report rejected fields with DataConstraintsError.
"""

from .airline import Airline
from .airport import Airport
from .dst_type import DSTType
from .entity import Entity
from .navpoint import NavPoint
from .queryable_collection import QueryableCollection
from .route import Route, generate_flight_duration, generate_price, generate_takeoff_times
from .trip import Trip, TripFlight
from .validation import DataConstraintsError, ValidationError, ValidationResult

__all__ = [
    # Entities
    'Entity',
    'Airline',
    'Airport',
    'Route',
    'Trip',
    'TripFlight',
    'DSTType',
    'NavPoint',
    # Route helpers
    'generate_flight_duration',
    'generate_price',
    'generate_takeoff_times',
    # Collections
    'QueryableCollection',
    # Validation
    'DataConstraintsError',
    'ValidationError',
    'ValidationResult',
]
