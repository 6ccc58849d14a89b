#!/usr/bin/env python3

import pytest

from aerodata.models import Airline, DataConstraintsError


class TestAirlineCreation:
    """Test building airlines from raw values."""

    def test_values_are_normalized(self):
        airline = Airline("  Air New Zealand ", iata="nz", icao=" anz", country="New Zealand")

        assert airline.name == "Air New Zealand"
        assert airline.iata == "NZ"
        assert airline.icao == "ANZ"
        assert airline.code == "NZ"
        assert airline.is_memory_only
        assert airline.id == Airline.UNKNOWN_ID

    def test_missing_data_markers_become_none(self):
        airline = Airline("Air New Zealand", iata="NZ", icao="\\N", country="New Zealand", callsign="-")

        assert airline.icao is None
        assert airline.callsign is None
        assert airline.code == "NZ"

    def test_one_code_is_enough(self):
        airline = Airline("Jetstar", icao="JST", country="Australia")

        assert airline.iata is None
        assert airline.code == "JST"

    def test_both_codes_missing_fails_on_both(self):
        with pytest.raises(DataConstraintsError) as exc_info:
            Airline("Nameless Air", country="Nowhere")

        assert exc_info.value.error('iata') is not None
        assert exc_info.value.error('icao') is not None

    def test_all_violations_are_reported(self):
        with pytest.raises(DataConstraintsError) as exc_info:
            Airline("A;", iata="N", icao="AN", country=None)

        errors = exc_info.value.errors
        assert set(errors) == {'name', 'iata', 'icao', 'country'}
        assert " AND " in errors['name']

    @pytest.mark.parametrize("iata", ["N", "NZL", "N-", "N Z"])
    def test_invalid_iata(self, iata):
        with pytest.raises(DataConstraintsError) as exc_info:
            Airline("Air New Zealand", iata=iata, icao="ANZ", country="New Zealand")

        assert exc_info.value.fields == ['iata']

    def test_unknown_field_is_a_type_error(self):
        airline = Airline("Qantas", iata="QF", country="Australia")

        with pytest.raises(TypeError):
            airline.update(alias="Flying Kangaroo")


class TestAirlinePairedCodes:
    """Test that IATA and ICAO codes are validated together."""

    @pytest.fixture
    def airline(self):
        return Airline("Air New Zealand", iata="NZ", icao="ANZ", country="New Zealand")

    def test_clear_iata_when_icao_present(self, airline):
        airline.iata = ""

        assert airline.iata is None
        assert airline.icao == "ANZ"

    def test_clear_icao_when_iata_present(self, airline):
        airline.icao = None

        assert airline.icao is None

    def test_clear_iata_when_icao_empty_fails(self, airline):
        airline.icao = None

        with pytest.raises(DataConstraintsError) as exc_info:
            airline.iata = ""

        assert exc_info.value.fields == ['iata']
        assert airline.iata == "NZ"

    def test_clear_icao_when_iata_empty_fails(self, airline):
        airline.iata = None

        with pytest.raises(DataConstraintsError) as exc_info:
            airline.icao = ""

        assert exc_info.value.fields == ['icao']
        assert airline.icao == "ANZ"

    def test_clearing_both_at_once_fails_on_both(self, airline):
        with pytest.raises(DataConstraintsError) as exc_info:
            airline.set_codes(None, None)

        assert set(exc_info.value.fields) == {'iata', 'icao'}
        assert airline.iata == "NZ"
        assert airline.icao == "ANZ"

    def test_swap_codes_in_one_change(self, airline):
        airline.set_codes(None, "NZA")

        assert airline.iata is None
        assert airline.icao == "NZA"


class TestAirlineUpdates:
    """Test that rejected changes leave the airline untouched."""

    def test_rejected_update_changes_nothing(self):
        airline = Airline("Qantas", iata="QF", icao="QFA", country="Australia")

        with pytest.raises(DataConstraintsError) as exc_info:
            airline.update(name="Qa", iata="Q1")

        assert exc_info.value.fields == ['name']
        assert airline.name == "Qantas"
        assert airline.iata == "QF"

    def test_accepted_update_changes_every_field(self):
        airline = Airline("Qantas", iata="QF", icao="QFA", country="Australia")

        airline.update(name="Qantas Airways", callsign="qantas")

        assert airline.name == "Qantas Airways"
        assert airline.callsign == "qantas"

    def test_semicolons_are_rejected(self):
        airline = Airline("Qantas", iata="QF", country="Australia")

        with pytest.raises(DataConstraintsError):
            airline.callsign = "QANTAS;"

        assert airline.callsign is None

    def test_copy_is_equal_and_independent(self):
        airline = Airline("Qantas", iata="QF", icao="QFA", country="Australia")
        duplicate = airline.copy()

        assert duplicate == airline
        duplicate.name = "Qantas Link"
        assert duplicate != airline
        assert airline.name == "Qantas"

    def test_to_dict(self):
        airline = Airline("Qantas", iata="QF", icao="QFA", country="Australia")

        assert airline.to_dict() == {
            'id': -1,
            'name': "Qantas",
            'callsign': None,
            'iata': "QF",
            'icao': "QFA",
            'country': "Australia",
        }
