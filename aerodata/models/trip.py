#!/usr/bin/env python3

from datetime import date, datetime, time
from typing import Any, Dict, Iterable, List, Optional, Tuple

from dateutil import tz

from .entity import Entity, Record, entity_field
from .validators import validate_trip, validate_trip_flight
from .validation import ValidationResult


class TripFlight(Entity):
    """
    One flight of a trip: a route taken on a given UTC date and time.

    ``takeoff_time`` is minutes after midnight UTC on ``takeoff_date``.
    """

    KIND = 'trip flight'
    FIELDS = ('source', 'destination', 'airline', 'takeoff_time', 'takeoff_date', 'comment')

    def __init__(self, source: str, destination: str, airline: str, takeoff_time: int,
                 takeoff_date: Any, comment: Optional[str] = None):
        super().__init__(source=source, destination=destination, airline=airline,
                         takeoff_time=takeoff_time, takeoff_date=takeoff_date, comment=comment)

    @classmethod
    def from_datetime(cls, source: str, destination: str, airline: str, takeoff: datetime,
                      comment: Optional[str] = None) -> 'TripFlight':
        """Create a flight from an aware takeoff datetime in any timezone."""
        takeoff_date, takeoff_time = _utc_parts(takeoff)
        return cls(source, destination, airline, takeoff_time, takeoff_date, comment)

    @classmethod
    def validate_record(cls, record: Record) -> Tuple[Record, ValidationResult]:
        return validate_trip_flight(record)

    source = entity_field('source')
    destination = entity_field('destination')
    airline = entity_field('airline')
    takeoff_time = entity_field('takeoff_time')
    takeoff_date = entity_field('takeoff_date')
    comment = entity_field('comment')

    @property
    def takeoff_datetime(self) -> datetime:
        """Takeoff as an aware UTC datetime."""
        minutes = self._values['takeoff_time']
        return datetime.combine(self._values['takeoff_date'],
                                time(minutes // 60, minutes % 60), tzinfo=tz.UTC)

    def set_takeoff_datetime(self, takeoff: datetime) -> None:
        """Set date and time from a datetime, converting it to UTC first."""
        takeoff_date, takeoff_time = _utc_parts(takeoff)
        self.update(takeoff_date=takeoff_date, takeoff_time=takeoff_time)

    def to_record(self) -> Dict[str, Any]:
        """Field values only, with the date as an ISO string."""
        record = self.to_dict()
        record.pop('id')
        return record


def _utc_parts(takeoff: datetime) -> Tuple[date, int]:
    if takeoff.tzinfo is None:
        takeoff = takeoff.replace(tzinfo=tz.UTC)
    utc = takeoff.astimezone(tz.UTC)
    return utc.date(), utc.hour * 60 + utc.minute


def _takeoff_key(flight: TripFlight) -> datetime:
    return flight.takeoff_datetime


class Trip(Entity):
    """A named itinerary of flights kept in UTC takeoff order."""

    KIND = 'trip'
    FIELDS = ('name', 'comment')

    def __init__(self, name: str, comment: Optional[str] = None, flights: Iterable[TripFlight] = ()):
        super().__init__(name=name, comment=comment)
        self._flights: List[TripFlight] = []
        self.add_flights(flights)

    @classmethod
    def from_storage(cls, entity_id: int, flights: Iterable[TripFlight] = (), **values: Any) -> 'Trip':
        trip = super().from_storage(entity_id, **values)
        trip._flights = sorted(flights, key=_takeoff_key)
        return trip

    @classmethod
    def validate_record(cls, record: Record) -> Tuple[Record, ValidationResult]:
        return validate_trip(record)

    name = entity_field('name')
    comment = entity_field('comment')

    @property
    def flights(self) -> List[TripFlight]:
        """Copy of the flights in takeoff order."""
        return list(self._flights)

    def add_flight(self, flight: TripFlight) -> None:
        if not isinstance(flight, TripFlight):
            raise TypeError(f"Expected TripFlight, got {type(flight).__name__}")
        self._flights.append(flight)
        self._flights.sort(key=_takeoff_key)

    def add_flights(self, flights: Iterable[TripFlight]) -> None:
        for flight in flights:
            self.add_flight(flight)

    def remove_flight(self, flight: TripFlight) -> bool:
        """Remove the first flight equal to ``flight``; False if there is none."""
        for index, candidate in enumerate(self._flights):
            if candidate == flight:
                del self._flights[index]
                return True
        return False

    def clear_flights(self) -> None:
        self._flights.clear()

    def copy(self) -> 'Trip':
        return Trip.from_storage(self._id, flights=[flight.copy() for flight in self._flights],
                                 **self.values())

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result['flights'] = [flight.to_record() for flight in self._flights]
        return result

    def _state(self) -> Tuple[Any, ...]:
        return super()._state() + (tuple(tuple(sorted(flight.to_record().items())) for flight in self._flights),)

    @property
    def start(self) -> Optional[datetime]:
        return self._flights[0].takeoff_datetime if self._flights else None
