#!/usr/bin/env python3

from datetime import datetime

import pytest
from dateutil import tz

from aerodata.models import Route, Trip, TripFlight
from aerodata.storage import UniquenessConflictError


def flight(source, destination, airline, takeoff_time, takeoff_date="2024-03-01"):
    return TripFlight(source, destination, airline, takeoff_time, takeoff_date)


@pytest.fixture
def trips(populated_context):
    return populated_context.trips


class TestTripStore:
    """Test storing trips and their flights."""

    def test_round_trip_keeps_flights(self, trips):
        trip = Trip("South Island", comment="Ski week", flights=[
            flight("CHC", "AKL", "NZ", 480, "2024-03-08"),
            flight("AKL", "CHC", "NZ", 360),
        ])

        stored = trips.save(trip)
        reloaded = trips.get_by_name("South Island")

        assert reloaded == stored
        assert [f.source for f in reloaded.flights] == ["AKL", "CHC"]
        assert reloaded.comment == "Ski week"

    def test_names(self, trips):
        trips.save(Trip("Work"))
        trips.save(Trip("Holiday"))

        assert trips.get_all_names() == ["Holiday", "Work"]

    def test_duplicate_name(self, trips):
        trips.save(Trip("Holiday"))

        with pytest.raises(UniquenessConflictError):
            trips.save(Trip("Holiday"))

    def test_landing_time_and_price(self, trips):
        first = flight("AKL", "CHC", "NZ", 360)

        assert trips.landing_time(first) == datetime(2024, 3, 1, 7, 20, tzinfo=tz.UTC)
        assert trips.flight_price(first) == 180

    def test_unknown_route(self, trips):
        with pytest.raises(LookupError):
            trips.flight_price(flight("AKL", "WLG", "NZ", 360))


class TestTripClashes:
    """Test detecting flights in the air at the same time."""

    def test_no_clash_after_landing(self, trips):
        existing = [flight("AKL", "CHC", "NZ", 360)]

        assert trips.find_clash(existing, flight("CHC", "AKL", "NZ", 480)) is None

    def test_clash_while_in_the_air(self, trips):
        existing = [flight("AKL", "CHC", "NZ", 360)]

        message = trips.find_clash(existing, flight("CHC", "AKL", "NZ", 420))

        assert message.startswith("Clashes with flight AKL → CHC")
        assert "06:00, 01/03/2024" in message

    def test_identical_flight_clashes(self, trips):
        existing = [flight("AKL", "CHC", "NZ", 360)]

        assert trips.find_clash(existing, flight("AKL", "CHC", "NZ", 360)) is not None

    def test_unknown_routes_are_ignored(self, trips):
        existing = [flight("AKL", "WLG", "NZ", 360)]

        assert trips.find_clash(existing, flight("AKL", "CHC", "NZ", 360)) is None
        assert trips.find_clash([flight("AKL", "CHC", "NZ", 360)], flight("AKL", "WLG", "NZ", 360)) is None


class TestTripSanityCheck:
    """Test warnings and errors for each flight of a trip."""

    def test_feasible_trip(self, trips):
        trip = Trip("Return", flights=[flight("AKL", "CHC", "NZ", 360), flight("CHC", "AKL", "NZ", 480)])

        assert trips.sanity_check(trip) == [None, None]

    def test_missing_route(self, trips):
        issues = trips.sanity_check(Trip("Nowhere", flights=[flight("AKL", "WLG", "NZ", 360)]))

        assert issues[0].is_error
        assert issues[0].message == "The route is not in the database"

    def test_unscheduled_takeoff_time(self, trips):
        issues = trips.sanity_check(Trip("Early", flights=[flight("AKL", "CHC", "NZ", 365)]))

        assert issues[0].is_error
        assert issues[0].message.endswith("Closest alternative: 06:00")

    def test_no_scheduled_flights(self, trips):
        issues = trips.sanity_check(Trip("Budget", flights=[flight("SYD", "AKL", "JQ", 600)]))

        assert issues[0].message == "The route has no scheduled flights"

    def test_takes_off_before_landing(self, populated_context, trips):
        populated_context.routes.save(Route("NZ", "AKL", "SYD", flight_duration=200, takeoff_times=[400]))
        trip = Trip("Rushed", flights=[flight("AKL", "CHC", "NZ", 360), flight("AKL", "SYD", "NZ", 400)])

        issues = trips.sanity_check(trip)

        assert issues[0] is None
        assert issues[1].is_error
        assert issues[1].message == "The flight takes off before you land"

    def test_short_international_connection(self, trips):
        trip = Trip("Tight", flights=[flight("CHC", "AKL", "NZ", 480), flight("AKL", "SYD", "QF", 600)])

        issues = trips.sanity_check(trip)

        assert not issues[1].is_error
        assert "less than 2 hours" in issues[1].message
        assert str(issues[1]).startswith("Warning: ")

    def test_distant_connection_without_flight(self, trips):
        trip = Trip("Gap", flights=[flight("AKL", "CHC", "NZ", 360), flight("AKL", "SYD", "QF", 600)])

        issues = trips.sanity_check(trip)

        assert not issues[1].is_error
        assert issues[1].message.startswith(
            "No connecting flight between Christchurch International and Auckland International"
        )


class TestCurrentTrip:
    """Test tracking the trip open for editing."""

    def test_listeners_follow_current_trip(self, trips):
        seen = []
        trips.add_current_trip_listener(seen.append)
        stored = trips.save(Trip("Holiday"))

        trips.set_current_trip(stored)
        stored.comment = "Beach"
        updated = trips.save(stored)
        trips.delete(updated.id)

        assert seen == [stored, updated, None]
        assert trips.current_trip is None

    def test_other_trips_leave_current_trip_alone(self, trips):
        holiday = trips.save(Trip("Holiday"))
        work = trips.save(Trip("Work"))
        trips.set_current_trip(holiday)

        trips.delete(work.id)

        assert trips.current_trip == holiday
