#!/usr/bin/env python3

import json
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple
from dataclasses import dataclass, field

from dateutil.parser import isoparse


class FieldType(Enum):
    """Supported column types."""
    STRING = "TEXT"
    INTEGER = "INTEGER"
    FLOAT = "REAL"
    BOOLEAN = "BOOLEAN"
    DATE = "DATE"
    JSON = "JSON"

    @property
    def sql_type(self) -> str:
        # SQLite has no BOOLEAN, DATE or JSON storage classes
        return {
            FieldType.BOOLEAN: "INTEGER",
            FieldType.DATE: "TEXT",
            FieldType.JSON: "TEXT",
        }.get(self, self.value)


@dataclass
class FieldDefinition:
    """Definition of a stored column."""
    name: str
    field_type: FieldType
    nullable: bool = True
    default_value: Any = None
    description: str = ""

    def get_sql_type(self) -> str:
        return self.field_type.sql_type

    def format_for_storage(self, value: Any) -> Any:
        """Format value for storage in database."""
        if value is None:
            return None
        if isinstance(value, Enum):
            value = value.value

        if self.field_type is FieldType.BOOLEAN:
            return 1 if value else 0
        elif self.field_type is FieldType.DATE:
            if hasattr(value, 'isoformat'):
                return value.isoformat()
            return str(value)
        elif self.field_type is FieldType.JSON:
            return json.dumps(value)
        elif self.field_type is FieldType.STRING:
            return str(value)
        elif self.field_type is FieldType.INTEGER:
            return int(value)
        elif self.field_type is FieldType.FLOAT:
            return float(value)

        return value

    def parse_from_storage(self, value: Any) -> Any:
        """Convert a value read from the database back to its Python type."""
        if value is None:
            return None

        if self.field_type is FieldType.BOOLEAN:
            return bool(value)
        elif self.field_type is FieldType.DATE:
            return isoparse(value).date() if isinstance(value, str) else value
        elif self.field_type is FieldType.JSON:
            return json.loads(value)

        return value


@dataclass
class TableDefinition:
    """
    A table, its unique constraints and the columns derived from it.

    Derived columns are SQL expressions over the table aliased as ``t``;
    they can be filtered and sorted on like stored columns but are never
    written.
    """
    name: str
    fields: List[FieldDefinition]
    unique_constraints: List[Tuple[str, ...]] = field(default_factory=list)
    derived_columns: Dict[str, str] = field(default_factory=dict)

    def get_field(self, name: str) -> Optional[FieldDefinition]:
        for field_definition in self.fields:
            if field_definition.name == name:
                return field_definition
        return None

    @property
    def field_names(self) -> List[str]:
        return [field_definition.name for field_definition in self.fields]

    @property
    def columns(self) -> List[str]:
        """Every readable column: id, stored fields and derived columns."""
        return ['id'] + self.field_names + list(self.derived_columns)

    def get_select_sql(self) -> str:
        """SELECT returning stored and derived columns, usable as a subquery."""
        derived = ''.join(f", {expression} AS {name}" for name, expression in self.derived_columns.items())
        return f"SELECT t.*{derived} FROM {self.name} t"


class AirlineFields:
    """Centralized definition of airline fields."""

    NAME = FieldDefinition("name", FieldType.STRING, nullable=False, description="Airline name")
    CALLSIGN = FieldDefinition("callsign", FieldType.STRING, description="Radio callsign")
    IATA = FieldDefinition("iata", FieldType.STRING, description="Two character IATA code")
    ICAO = FieldDefinition("icao", FieldType.STRING, description="Three character ICAO code")
    COUNTRY = FieldDefinition("country", FieldType.STRING, nullable=False, description="Country of registration")

    @classmethod
    def get_all_fields(cls) -> List[FieldDefinition]:
        return [cls.NAME, cls.CALLSIGN, cls.IATA, cls.ICAO, cls.COUNTRY]


class AirportFields:
    """Centralized definition of airport fields."""

    NAME = FieldDefinition("name", FieldType.STRING, nullable=False, description="Airport name")
    CITY = FieldDefinition("city", FieldType.STRING, nullable=False, description="City served")
    COUNTRY = FieldDefinition("country", FieldType.STRING, nullable=False, description="Country")
    IATA = FieldDefinition("iata", FieldType.STRING, description="Three character IATA code")
    ICAO = FieldDefinition("icao", FieldType.STRING, nullable=False, description="Four character ICAO code")
    LATITUDE = FieldDefinition("latitude", FieldType.FLOAT, nullable=False, description="Latitude in degrees")
    LONGITUDE = FieldDefinition("longitude", FieldType.FLOAT, nullable=False, description="Longitude in degrees")
    ALTITUDE = FieldDefinition("altitude", FieldType.FLOAT, nullable=False, description="Altitude in feet")
    TIMEZONE = FieldDefinition("timezone", FieldType.FLOAT, nullable=False, description="UTC offset in hours")
    DST = FieldDefinition("dst", FieldType.STRING, nullable=False, default_value="U", description="DST code")

    @classmethod
    def get_all_fields(cls) -> List[FieldDefinition]:
        return [cls.NAME, cls.CITY, cls.COUNTRY, cls.IATA, cls.ICAO,
                cls.LATITUDE, cls.LONGITUDE, cls.ALTITUDE, cls.TIMEZONE, cls.DST]


class RouteFields:
    """Centralized definition of route fields."""

    AIRLINE = FieldDefinition("airline", FieldType.STRING, nullable=False, description="Airline IATA or ICAO code")
    SOURCE = FieldDefinition("source", FieldType.STRING, nullable=False, description="Source airport code")
    DESTINATION = FieldDefinition("destination", FieldType.STRING, nullable=False, description="Destination airport code")
    PLANE_TYPES = FieldDefinition("plane_types", FieldType.JSON, description="List of plane type codes")
    PRICE = FieldDefinition("price", FieldType.INTEGER, nullable=False, default_value=0, description="Price in dollars")
    CODESHARE = FieldDefinition("codeshare", FieldType.BOOLEAN, nullable=False, default_value=0, description="Codeshare flag")
    FLIGHT_DURATION = FieldDefinition("flight_duration", FieldType.INTEGER, nullable=False, default_value=0,
                                      description="Duration in minutes")
    TAKEOFF_TIMES = FieldDefinition("takeoff_times", FieldType.JSON, description="Sorted takeoff times in minutes")

    @classmethod
    def get_all_fields(cls) -> List[FieldDefinition]:
        return [cls.AIRLINE, cls.SOURCE, cls.DESTINATION, cls.PLANE_TYPES, cls.PRICE,
                cls.CODESHARE, cls.FLIGHT_DURATION, cls.TAKEOFF_TIMES]


class TripFields:
    """Centralized definition of trip fields."""

    NAME = FieldDefinition("name", FieldType.STRING, nullable=False, description="Trip name")
    COMMENT = FieldDefinition("comment", FieldType.STRING, description="Free text comment")
    FLIGHTS = FieldDefinition("flights", FieldType.JSON, description="Flights of the trip")

    @classmethod
    def get_all_fields(cls) -> List[FieldDefinition]:
        return [cls.NAME, cls.COMMENT, cls.FLIGHTS]


AIRLINES_TABLE = TableDefinition(
    "airlines",
    AirlineFields.get_all_fields(),
    unique_constraints=[("name",), ("iata",), ("icao",)],
    derived_columns={"code": "coalesce(t.iata, t.icao)"},
)

AIRPORTS_TABLE = TableDefinition(
    "airports",
    AirportFields.get_all_fields(),
    unique_constraints=[("iata",), ("icao",)],
    derived_columns={
        "code": "coalesce(t.iata, t.icao)",
        "route_count": "(SELECT COUNT(*) FROM routes r WHERE r.source = t.iata OR r.source = t.icao)",
    },
)

ROUTES_TABLE = TableDefinition(
    "routes",
    RouteFields.get_all_fields(),
    unique_constraints=[("airline", "source", "destination")],
    derived_columns={
        "airline_name": "(SELECT a.name FROM airlines a WHERE a.iata = t.airline OR a.icao = t.airline LIMIT 1)",
    },
)

TRIPS_TABLE = TableDefinition(
    "trips",
    TripFields.get_all_fields(),
    unique_constraints=[("name",)],
)

ALL_TABLES = [AIRLINES_TABLE, AIRPORTS_TABLE, ROUTES_TABLE, TRIPS_TABLE]


class SchemaManager:
    """Generates the database schema from table definitions."""

    def __init__(self):
        self.version = 1  # Current schema version

    def get_create_table_sql(self, table: TableDefinition) -> str:
        """Generate CREATE TABLE SQL from a table definition."""
        column_definitions = ["id INTEGER PRIMARY KEY AUTOINCREMENT"]

        for field_definition in table.fields:
            field_sql = f"{field_definition.name} {field_definition.get_sql_type()}"
            if not field_definition.nullable:
                field_sql += " NOT NULL"
            if field_definition.default_value is not None:
                if field_definition.get_sql_type() == "TEXT":
                    field_sql += f" DEFAULT '{field_definition.default_value}'"
                else:
                    field_sql += f" DEFAULT {field_definition.default_value}"
            column_definitions.append(field_sql)

        for columns in table.unique_constraints:
            column_definitions.append(f"UNIQUE ({', '.join(columns)})")

        return f"CREATE TABLE {table.name} (\n    " + ",\n    ".join(column_definitions) + "\n)"

    def get_create_index_sql(self, table: TableDefinition, columns: Sequence[str]) -> str:
        index_name = f"idx_{table.name}_{'_'.join(columns)}"
        return f"CREATE INDEX IF NOT EXISTS {index_name} ON {table.name} ({', '.join(columns)})"
