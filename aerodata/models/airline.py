from typing import Any, Optional, Tuple

from .entity import Entity, Record, entity_field
from .validation import ValidationResult
from .validators import validate_airline


class Airline(Entity):
    """An airline identified by an IATA and/or an ICAO code."""

    KIND = 'airline'
    FIELDS = ('name', 'callsign', 'iata', 'icao', 'country')

    def __init__(self, name: str, iata: Optional[str] = None, icao: Optional[str] = None,
                 country: Optional[str] = None, callsign: Optional[str] = None):
        super().__init__(name=name, callsign=callsign, iata=iata, icao=icao, country=country)

    @classmethod
    def validate_record(cls, record: Record) -> Tuple[Record, ValidationResult]:
        return validate_airline(record)

    name = entity_field('name')
    callsign = entity_field('callsign')
    iata = entity_field('iata', "Two character IATA code, may be empty when ICAO is set.")
    icao = entity_field('icao', "Three character ICAO code, may be empty when IATA is set.")
    country = entity_field('country')

    @property
    def code(self) -> str:
        """IATA code when there is one, ICAO code otherwise."""
        return self.iata or self.icao

    def set_codes(self, iata: Any, icao: Any) -> None:
        """Replace both codes in one validated change."""
        self.update(iata=iata, icao=icao)
