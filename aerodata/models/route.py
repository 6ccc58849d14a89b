#!/usr/bin/env python3

import random
from datetime import timedelta
from typing import Any, Iterable, List, Optional, Tuple

from .entity import Entity, Record, entity_field
from .validation import ValidationResult
from .validators import MINUTES_PER_DAY, validate_route

TIME_TO_COST = 162  # $/hr
PLANE_SPEED = 900  # km/h
PRICE_VARIATION = 0.1
MIN_TAKEOFF_GAP = 30  # minutes
TAKEOFF_ROUNDING = 15  # minutes


def generate_flight_duration(distance_km: float, plane_speed: float = PLANE_SPEED) -> int:
    """Flight duration in minutes for a distance flown at a constant speed."""
    return int(distance_km / plane_speed * 60)


def generate_price(flight_duration: int, time_to_cost: float = TIME_TO_COST,
                   rng: Optional[random.Random] = None) -> int:
    """Price from the flight duration, varied randomly by up to 10% either way."""
    rng = rng or random
    price = flight_duration / 60 * time_to_cost
    price += (2 * rng.random() - 1) * price * PRICE_VARIATION
    return max(0, int(price))


def generate_takeoff_times(flight_duration: int, rng: Optional[random.Random] = None) -> List[int]:
    """
    Evenly spaced takeoff times through the day for a route.

    The first takeoff is random, later ones follow a gap of roughly the
    flight duration, at least 30 minutes, rounded to 15 minutes.
    """
    rng = rng or random
    time = rng.randrange(MINUTES_PER_DAY) // TAKEOFF_ROUNDING * TAKEOFF_ROUNDING
    gap = max((rng.random() + 0.8) * flight_duration, MIN_TAKEOFF_GAP)
    gap = max(TAKEOFF_ROUNDING, round(gap / TAKEOFF_ROUNDING) * TAKEOFF_ROUNDING)

    times = []
    while time < MINUTES_PER_DAY:
        times.append(time)
        time += gap
    return times


class Route(Entity):
    """
    A scheduled connection flown by an airline between two airports.

    Airports are referenced by IATA or ICAO code and the airline by its
    IATA or ICAO code. Takeoff times are minutes after midnight UTC and
    are kept sorted.
    """

    KIND = 'route'
    FIELDS = ('airline', 'source', 'destination', 'plane_types', 'price',
              'codeshare', 'flight_duration', 'takeoff_times')
    DEFAULTS = {'plane_types': [], 'price': 0, 'codeshare': False,
                'flight_duration': 0, 'takeoff_times': []}

    def __init__(self, airline: str, source: str, destination: str,
                 plane_types: Any = None, price: int = 0, codeshare: Any = False,
                 flight_duration: int = 0, takeoff_times: Optional[Iterable[int]] = ()):
        super().__init__(airline=airline, source=source, destination=destination,
                         plane_types=plane_types, price=price, codeshare=codeshare,
                         flight_duration=flight_duration,
                         takeoff_times=None if takeoff_times is None else list(takeoff_times))

    @classmethod
    def validate_record(cls, record: Record) -> Tuple[Record, ValidationResult]:
        return validate_route(record)

    airline = entity_field('airline')
    source = entity_field('source')
    destination = entity_field('destination')
    plane_types = entity_field('plane_types', "List of plane type codes; a space separated string is accepted.")
    price = entity_field('price')
    codeshare = entity_field('codeshare')
    flight_duration = entity_field('flight_duration', "Minutes in the air.")
    takeoff_times = entity_field('takeoff_times', "Sorted copy of the takeoff times in minutes after midnight.")

    @property
    def key(self) -> Tuple[str, str, str]:
        return (self.airline, self.source, self.destination)

    @property
    def plane_types_raw(self) -> str:
        return ' '.join(self._values['plane_types'])

    @property
    def flight_duration_delta(self) -> timedelta:
        return timedelta(minutes=self.flight_duration)

    def nearest_takeoff_time(self, time: int) -> Optional[int]:
        """Scheduled takeoff closest to ``time``, going round midnight if shorter."""
        times = self._values['takeoff_times']
        if not times:
            return None

        def gap(candidate: int) -> int:
            difference = abs(candidate - time) % MINUTES_PER_DAY
            return min(difference, MINUTES_PER_DAY - difference)

        return min(times, key=gap)
