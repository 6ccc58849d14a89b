#!/usr/bin/env python3

import pytest

from aerodata.models import Airport, DataConstraintsError, DSTType


def make_airport(**overrides):
    values = dict(name="Auckland International", city="Auckland", country="New Zealand",
                  icao="NZAA", iata="AKL", latitude=-37.008, longitude=174.792,
                  altitude=23, timezone=12, dst="Z")
    values.update(overrides)
    return Airport(**values)


class TestAirport:
    """Test airport validation and helpers."""

    def test_create(self):
        airport = make_airport(icao="nzaa", iata="akl", dst="z")

        assert airport.icao == "NZAA"
        assert airport.iata == "AKL"
        assert airport.dst is DSTType.NEW_ZEALAND
        assert airport.latitude == pytest.approx(-37.008)
        assert airport.code == "AKL"
        assert airport.codes == ("AKL", "NZAA")

    def test_iata_is_optional(self):
        airport = make_airport(iata=None)

        assert airport.code == "NZAA"
        assert airport.codes == ("NZAA",)

    def test_icao_is_required(self):
        with pytest.raises(DataConstraintsError) as exc_info:
            make_airport(icao="")

        assert exc_info.value.fields == ['icao']

    @pytest.mark.parametrize("field,value,message", [
        ('latitude', 90.5, "Latitude must be between -90 and 90"),
        ('longitude', -180.1, "Longitude must be between -180 and 180"),
        ('altitude', -1241, "Altitude must be between -1240ft and 30000ft"),
        ('timezone', 14.5, "Timezone UTC offset must be between -12 and 14"),
    ])
    def test_out_of_range(self, field, value, message):
        with pytest.raises(DataConstraintsError) as exc_info:
            make_airport(**{field: value})

        assert exc_info.value.error(field) == message

    @pytest.mark.parametrize("field,value", [
        ('latitude', -90), ('latitude', 90), ('longitude', 180),
        ('altitude', 30000), ('altitude', -1240), ('timezone', -12),
    ])
    def test_range_edges_are_accepted(self, field, value):
        airport = make_airport(**{field: value})

        assert getattr(airport, field) == value

    def test_numbers_from_strings(self):
        airport = make_airport(latitude="-37.5", altitude=" 100 ")

        assert airport.latitude == -37.5
        assert airport.altitude == 100.0

    def test_not_a_number(self):
        with pytest.raises(DataConstraintsError) as exc_info:
            make_airport(latitude="north")

        assert exc_info.value.error('latitude') == "Latitude must be a number"

    def test_unknown_dst_code_fails(self):
        airport = make_airport()

        with pytest.raises(DataConstraintsError) as exc_info:
            airport.dst = "X"

        assert 'dst' in exc_info.value.errors
        assert airport.dst is DSTType.NEW_ZEALAND

    def test_empty_dst_is_unknown(self):
        airport = make_airport(dst="")

        assert airport.dst is DSTType.UNKNOWN

    def test_rejected_update_changes_nothing(self):
        airport = make_airport()

        with pytest.raises(DataConstraintsError) as exc_info:
            airport.update(latitude=100, longitude=200, city="Waiheke")

        assert set(exc_info.value.fields) == {'latitude', 'longitude'}
        assert airport.city == "Auckland"
        assert airport.latitude == pytest.approx(-37.008)

    def test_distance_to(self):
        auckland = make_airport()
        christchurch = make_airport(name="Christchurch International", city="Christchurch",
                                    icao="NZCH", iata="CHC", latitude=-43.489, longitude=172.532)

        assert 700 < auckland.distance_to(christchurch) < 800
        assert auckland.distance_to(auckland) == pytest.approx(0)

    def test_navpoint(self):
        airport = make_airport()

        point = airport.navpoint
        assert point.name == "AKL"
        assert point.latitude == pytest.approx(-37.008)

    def test_to_dict_uses_dst_code(self):
        assert make_airport().to_dict()['dst'] == "Z"


class TestDSTFromStorage:
    """Test rebuilding airports from stored rows."""

    def test_from_storage_maps_dst_code(self):
        airport = Airport.from_storage(7, name="Sydney Kingsford Smith", city="Sydney",
                                       country="Australia", iata="SYD", icao="YSSY", latitude=-33.9,
                                       longitude=151.2, altitude=21.0, timezone=10.0, dst="O")

        assert airport.id == 7
        assert not airport.is_memory_only
        assert airport.dst is DSTType.AUSTRALIA
        assert airport.validate().is_valid
