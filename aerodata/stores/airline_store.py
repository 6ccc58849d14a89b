from typing import Optional

from ..filters.registry import FilterKeys
from ..models.airline import Airline
from .base import EntityStore


class AirlineStore(EntityStore[Airline]):
    """Airlines, looked up by IATA or ICAO code or by name."""

    TABLE = 'airlines'
    ENTITY_CLASS = Airline
    FILTER_COLUMNS = {
        FilterKeys.AIRLINE_NAME: 'name',
        FilterKeys.AIRLINE_CODE: 'code',
        FilterKeys.AIRLINE_COUNTRY: 'country',
    }
    OPTION_COLUMNS = FILTER_COLUMNS

    def get_by_code(self, code: Optional[str]) -> Optional[Airline]:
        """Airline with a two letter IATA or three letter ICAO code."""
        if not code:
            return None
        code = code.strip().upper()
        column = 'iata' if len(code) == 2 else 'icao'
        return self.find_by(column, code)

    def get_by_name(self, name: str) -> Optional[Airline]:
        return self.find_by('name', name.strip())
