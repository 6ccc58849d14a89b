import pytest

from aerodata.context import AppContext
from aerodata.models import Airline, Airport, Route
from aerodata.storage import DatabaseStorage


@pytest.fixture
def database_path(tmp_path) -> str:
    """Path of a fresh SQLite database for one test."""
    return str(tmp_path / 'aerodata.db')


@pytest.fixture
def storage(database_path) -> DatabaseStorage:
    return DatabaseStorage(database_path)


@pytest.fixture
def context(storage):
    """Application context with its own registry and stores."""
    ctx = AppContext(storage)
    yield ctx
    ctx.close()


@pytest.fixture
def sample_airlines():
    return [
        Airline("Air New Zealand", iata="NZ", icao="ANZ", country="New Zealand", callsign="NEW ZEALAND"),
        Airline("Qantas", iata="QF", icao="QFA", country="Australia", callsign="QANTAS"),
        Airline("Jetstar", iata="JQ", icao="JST", country="Australia"),
    ]


@pytest.fixture
def sample_airports():
    return [
        Airport("Auckland International", "Auckland", "New Zealand", "NZAA", "AKL",
                -37.008, 174.792, 23, 12, "Z"),
        Airport("Christchurch International", "Christchurch", "New Zealand", "NZCH", "CHC",
                -43.489, 172.532, 123, 12, "Z"),
        Airport("Sydney Kingsford Smith", "Sydney", "Australia", "YSSY", "SYD",
                -33.946, 151.177, 21, 10, "O"),
    ]


@pytest.fixture
def sample_routes():
    return [
        Route("NZ", "AKL", "CHC", plane_types="320", price=180, flight_duration=80, takeoff_times=[720, 360]),
        Route("NZ", "CHC", "AKL", plane_types="320", price=175, flight_duration=80, takeoff_times=[480, 900]),
        Route("QF", "AKL", "SYD", plane_types="738", price=420, flight_duration=185, takeoff_times=[600]),
        Route("JQ", "SYD", "AKL", price=0, flight_duration=0, takeoff_times=[]),
    ]


@pytest.fixture
def populated_context(context, sample_airlines, sample_airports, sample_routes):
    """Context holding the sample airlines, airports and routes."""
    for airline in sample_airlines:
        context.airlines.save(airline)
    for airport in sample_airports:
        context.airports.save(airport)
    for route in sample_routes:
        context.routes.save(route)
    return context
