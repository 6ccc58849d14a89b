from typing import Optional, Union

from ..filters.registry import FilterKeys
from ..models.airport import Airport
from .base import EntityStore


class AirportStore(EntityStore[Airport]):
    """
    Airports, looked up by IATA or ICAO code.

    The number of routes leaving an airport is derived from the routes
    table, so the route store tells this store when routes change.
    """

    TABLE = 'airports'
    ENTITY_CLASS = Airport
    FILTER_COLUMNS = {
        FilterKeys.AIRPORT_NAME: 'name',
        FilterKeys.AIRPORT_CODE: 'code',
        FilterKeys.AIRPORT_COUNTRY: 'country',
        FilterKeys.AIRPORT_ROUTES: 'route_count',
    }
    OPTION_COLUMNS = {
        FilterKeys.AIRPORT_NAME: 'name',
        FilterKeys.AIRPORT_CODE: 'code',
        FilterKeys.AIRPORT_COUNTRY: 'country',
    }
    SORT_ALIASES = {'total_routes': 'route_count'}

    def get_by_code(self, code: Optional[str]) -> Optional[Airport]:
        """Airport with a three letter IATA or four letter ICAO code."""
        if not code:
            return None
        code = code.strip().upper()
        column = 'iata' if len(code) == 3 else 'icao'
        return self.find_by(column, code)

    def get_total_routes(self, airport: Union[Airport, str]) -> int:
        """
        Number of routes leaving an airport.

        Routes may name the airport by either code, both are counted.
        """
        codes = airport.codes if isinstance(airport, Airport) else (airport.strip().upper(),)
        return sum(self.storage.count('routes', 'source', code) for code in codes)
