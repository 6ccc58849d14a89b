from typing import Any, Optional, Tuple

from .dst_type import DSTType
from .entity import Entity, Record, entity_field
from .navpoint import NavPoint
from .validation import ValidationResult
from .validators import validate_airport


class Airport(Entity):
    """
    An airport identified by its ICAO code and optionally an IATA code.

    Coordinates are decimal degrees, altitude is in feet and timezone is
    the offset from UTC in hours.
    """

    KIND = 'airport'
    FIELDS = ('name', 'city', 'country', 'iata', 'icao',
              'latitude', 'longitude', 'altitude', 'timezone', 'dst')
    DEFAULTS = {'dst': DSTType.UNKNOWN}

    def __init__(self, name: str, city: str, country: str, icao: str, iata: Optional[str] = None,
                 latitude: float = 0.0, longitude: float = 0.0, altitude: float = 0.0,
                 timezone: float = 0.0, dst: Any = DSTType.UNKNOWN):
        super().__init__(name=name, city=city, country=country, iata=iata, icao=icao,
                         latitude=latitude, longitude=longitude, altitude=altitude,
                         timezone=timezone, dst=dst)

    @classmethod
    def validate_record(cls, record: Record) -> Tuple[Record, ValidationResult]:
        return validate_airport(record)

    @classmethod
    def from_storage(cls, entity_id: int, **values: Any) -> 'Airport':
        if values.get('dst') is not None:
            values['dst'] = DSTType.from_code(values['dst'])
        return super().from_storage(entity_id, **values)

    name = entity_field('name')
    city = entity_field('city')
    country = entity_field('country')
    iata = entity_field('iata')
    icao = entity_field('icao')
    latitude = entity_field('latitude')
    longitude = entity_field('longitude')
    altitude = entity_field('altitude', "Altitude in feet.")
    timezone = entity_field('timezone', "Offset from UTC in hours.")
    dst = entity_field('dst', "DSTType; a one letter code is accepted when setting.")

    @property
    def code(self) -> str:
        """IATA code when there is one, ICAO code otherwise."""
        return self.iata or self.icao

    @property
    def codes(self) -> Tuple[str, ...]:
        return tuple(code for code in (self.iata, self.icao) if code)

    @property
    def navpoint(self) -> NavPoint:
        return NavPoint(latitude=self.latitude, longitude=self.longitude, name=self.code)

    def distance_to(self, other: 'Airport') -> float:
        """Great circle distance in kilometers."""
        return self.navpoint.distance_km(other.navpoint)
