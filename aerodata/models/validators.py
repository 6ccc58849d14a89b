#!/usr/bin/env python3

"""
Field and record validation rules for every entity kind.

Each ``validate_*`` function takes the complete candidate record of an
entity, normalizes it and returns it together with a ValidationResult
holding every violated rule. Fields that depend on each other (an
airline needs an IATA or an ICAO code) are therefore always checked
against the values they will actually be stored with.
"""

import math
import numbers
import re
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

from dateutil.parser import isoparse

from .dst_type import DSTType
from .validation import ValidationResult

Record = Dict[str, Any]

MINUTES_PER_DAY = 24 * 60

LATITUDE_RANGE = (-90.0, 90.0)
LONGITUDE_RANGE = (-180.0, 180.0)
ALTITUDE_RANGE = (-1240.0, 30000.0)  # feet
TIMEZONE_RANGE = (-12.0, 14.0)  # hours from UTC
PRICE_RANGE = (0, 100000)
MIN_NAME_LENGTH = 3

EMPTY_MARKERS = frozenset(['', '""', '-', 'N/A', '\\N'])

_ALPHANUMERIC = re.compile(r'[A-Za-z0-9]+')
_LENGTH_WORDS = {2: 'two', 3: 'three', 4: 'four'}

TAKEOFF_TIME_NULL = "Received null as takeoff time"
TAKEOFF_TIME_NOT_INTEGER = "Takeoff time must be a whole number of minutes"
TAKEOFF_TIME_RANGE = "Takeoff time must be between 0 minutes (inclusive) and 24 hours (exclusive)"
TAKEOFF_TIME_DUPLICATE = "Duplicate takeoff time encountered"


def clean_string(value: Any) -> Optional[str]:
    """Trim a raw string, mapping the placeholders used for missing data to None."""
    if value is None:
        return None
    text = str(value).strip()
    if text in EMPTY_MARKERS:
        return None
    return text


def is_code(value: Any, lengths: Sequence[int]) -> bool:
    """Check that value is an alphanumeric code of one of the given lengths."""
    return (
        isinstance(value, str)
        and len(value) in lengths
        and _ALPHANUMERIC.fullmatch(value) is not None
    )


def to_number(value: Any, integer: bool = False) -> Optional[float]:
    """Coerce a raw value to a number, returning None when it is not one."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        text = clean_string(value)
        if text is None:
            return None
        try:
            value = float(text)
        except ValueError:
            return None
    if not isinstance(value, numbers.Real):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if integer:
        if isinstance(value, numbers.Integral):
            return int(value)
        if not float(value).is_integer():
            return None
        return int(value)
    return float(value)


def to_date(value: Any) -> Optional[date]:
    """
    Convert a date, datetime or ISO 8601 string to a date.

    Raises:
        ValueError: if a string cannot be parsed
        TypeError: for any other kind of value
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = clean_string(value)
        if text is None:
            return None
        return isoparse(text).date()
    raise TypeError(f"Cannot interpret {value!r} as a date")


def check_takeoff_times(times: Sequence[Any]) -> List[Optional[str]]:
    """
    Check scheduled takeoff times, in minutes after midnight.

    Returns one entry per position of ``times``: None when the time at that
    position is acceptable, otherwise the reason it is not. The first
    occurrence of a repeated time is accepted, later ones are duplicates.
    Whole numbers are accepted in any form ``to_number`` accepts, so 60.0
    is the same time as 60.
    """
    messages: List[Optional[str]] = []
    seen = set()
    for time in times:
        if time is None:
            messages.append(TAKEOFF_TIME_NULL)
            continue
        minute = to_number(time, integer=True)
        if minute is None:
            messages.append(TAKEOFF_TIME_NOT_INTEGER)
            continue
        message = None
        if not 0 <= minute < MINUTES_PER_DAY:
            message = TAKEOFF_TIME_RANGE
        if minute in seen:
            message = TAKEOFF_TIME_DUPLICATE
        seen.add(minute)
        messages.append(message)
    return messages


def _describe_lengths(lengths: Sequence[int]) -> str:
    words = [_LENGTH_WORDS.get(length, str(length)) for length in lengths]
    return ' or '.join(words) + '-character'


def _check_text(result: ValidationResult, values: Record, field: str, label: str,
                required: bool = True, min_length: int = 0, allow_semicolons: bool = False) -> None:
    text = clean_string(values.get(field))
    values[field] = text
    if text is None:
        if required:
            result.add_error(field, f"{label} cannot be empty")
        return
    if len(text) < min_length:
        result.add_error(field, f"{label} cannot be shorter than {min_length} characters", text)
    if not allow_semicolons and ';' in text:
        result.add_error(field, f"{label} cannot contain semicolons", text)


def _check_code(result: ValidationResult, values: Record, field: str, label: str,
                lengths: Sequence[int], required: bool = True) -> Optional[str]:
    code = clean_string(values.get(field))
    values[field] = code
    if code is None:
        if required:
            result.add_error(field, f"{label} cannot be empty")
        return None
    if not is_code(code, lengths):
        result.add_error(field, f"{label} must be a {_describe_lengths(lengths)} alphanumeric code", code)
        return None
    values[field] = code.upper()
    return values[field]


def _check_range(result: ValidationResult, values: Record, field: str, label: str,
                 bounds: Tuple[float, float], integer: bool = False,
                 upper_exclusive: bool = False, message: Optional[str] = None) -> None:
    raw = values.get(field)
    number = to_number(raw, integer)
    if number is None:
        kind = "a whole number" if integer else "a number"
        result.add_error(field, f"{label} must be {kind}", raw)
        return
    low, high = bounds
    inside = low <= number < high if upper_exclusive else low <= number <= high
    if not inside:
        closing = ')' if upper_exclusive else ']'
        result.add_error(field, message or f"{label} must be in [{low:g}, {high:g}{closing}", raw)
        return
    values[field] = number


def validate_airline(record: Record) -> Tuple[Record, ValidationResult]:
    values = dict(record)
    result = ValidationResult()

    _check_text(result, values, 'name', 'Name', min_length=MIN_NAME_LENGTH)
    _check_text(result, values, 'callsign', 'Callsign', required=False)
    _check_code(result, values, 'iata', 'IATA', (2,), required=False)
    _check_code(result, values, 'icao', 'ICAO', (3,), required=False)
    if values['iata'] is None and values['icao'] is None:
        result.add_error('iata', "IATA cannot be empty if ICAO is also empty")
        result.add_error('icao', "ICAO cannot be empty if IATA is also empty")
    _check_text(result, values, 'country', 'Country')

    return values, result


def validate_airport(record: Record) -> Tuple[Record, ValidationResult]:
    values = dict(record)
    result = ValidationResult()

    _check_text(result, values, 'name', 'Name', min_length=MIN_NAME_LENGTH)
    _check_text(result, values, 'city', 'City')
    _check_text(result, values, 'country', 'Country')
    _check_code(result, values, 'iata', 'IATA', (3,), required=False)
    _check_code(result, values, 'icao', 'ICAO', (4,))
    _check_range(result, values, 'latitude', 'Latitude', LATITUDE_RANGE,
                 message="Latitude must be between -90 and 90")
    _check_range(result, values, 'longitude', 'Longitude', LONGITUDE_RANGE,
                 message="Longitude must be between -180 and 180")
    _check_range(result, values, 'altitude', 'Altitude', ALTITUDE_RANGE,
                 message="Altitude must be between -1240ft and 30000ft")
    _check_range(result, values, 'timezone', 'Timezone', TIMEZONE_RANGE,
                 message="Timezone UTC offset must be between -12 and 14")

    dst = values.get('dst')
    if isinstance(dst, DSTType):
        pass
    elif clean_string(dst) is None:
        values['dst'] = DSTType.UNKNOWN
    else:
        try:
            values['dst'] = DSTType.from_code(clean_string(dst))
        except ValueError as e:
            result.add_error('dst', str(e), dst)

    return values, result


def _plane_types(raw: Any) -> Optional[List[str]]:
    if raw is None:
        return []
    if isinstance(raw, str):
        codes: List[Optional[str]] = list(raw.split())
    else:
        codes = [clean_string(code) for code in raw]
    if any(not is_code(code, (3, 4)) for code in codes):
        return None
    return [code.upper() for code in codes]


def _codeshare(raw: Any) -> Optional[bool]:
    if raw is None or isinstance(raw, bool):
        return bool(raw)
    flag = clean_string(raw)
    if flag is None:
        return False
    if flag.upper() in ('Y', 'N'):
        return flag.upper() == 'Y'
    return None


def validate_route(record: Record) -> Tuple[Record, ValidationResult]:
    values = dict(record)
    result = ValidationResult()

    _check_code(result, values, 'airline', 'Airline', (2, 3))
    source = _check_code(result, values, 'source', 'Source airport', (3, 4))
    destination = _check_code(result, values, 'destination', 'Destination airport', (3, 4))
    if source is not None and source == destination:
        result.add_error('source', "Source and destination airports must be different", source)
        result.add_error('destination', "Source and destination airports must be different", destination)

    plane_types = _plane_types(values.get('plane_types'))
    if plane_types is None:
        result.add_error('plane_types', "Plane types must be three or four-character alphanumeric codes",
                         values.get('plane_types'))
    else:
        values['plane_types'] = plane_types

    _check_range(result, values, 'price', 'Price', PRICE_RANGE, integer=True,
                 message=f"Price must be between {PRICE_RANGE[0]} and {PRICE_RANGE[1]}")

    codeshare = _codeshare(values.get('codeshare'))
    if codeshare is None:
        result.add_error('codeshare', "Codeshare must be 'Y' or 'N'", values.get('codeshare'))
    else:
        values['codeshare'] = codeshare

    _check_range(result, values, 'flight_duration', 'Flight duration', (0, MINUTES_PER_DAY),
                 integer=True, upper_exclusive=True,
                 message="Flight duration (in minutes) must be positive and less than 24 hours long")

    times = values.get('takeoff_times')
    if times is None:
        result.add_error('takeoff_times', "Takeoff times cannot be null")
    else:
        times = list(times)
        problems = [(index, message) for index, message in enumerate(check_takeoff_times(times)) if message]
        for index, message in problems:
            result.add_error(f'takeoff_times[{index}]', message, times[index])
        if not problems:
            values['takeoff_times'] = sorted(to_number(time, integer=True) for time in times)

    return values, result


def validate_trip(record: Record) -> Tuple[Record, ValidationResult]:
    values = dict(record)
    result = ValidationResult()

    _check_text(result, values, 'name', 'Name', min_length=MIN_NAME_LENGTH, allow_semicolons=True)
    _check_text(result, values, 'comment', 'Comment', required=False, allow_semicolons=True)

    return values, result


def validate_trip_flight(record: Record) -> Tuple[Record, ValidationResult]:
    values = dict(record)
    result = ValidationResult()

    _check_code(result, values, 'source', 'Source airport', (3, 4))
    _check_code(result, values, 'destination', 'Destination airport', (3, 4))
    _check_code(result, values, 'airline', 'Airline', (2, 3))
    _check_range(result, values, 'takeoff_time', 'Takeoff time', (0, MINUTES_PER_DAY),
                 integer=True, upper_exclusive=True,
                 message="Takeoff time (in minutes) must be positive and less than 24 hours long")

    raw_date = values.get('takeoff_date')
    try:
        takeoff_date = to_date(raw_date)
    except (TypeError, ValueError):
        result.add_error('takeoff_date', "Takeoff date must be a valid date", raw_date)
    else:
        if takeoff_date is None:
            result.add_error('takeoff_date', "Takeoff date must not be null")
        values['takeoff_date'] = takeoff_date

    _check_text(result, values, 'comment', 'Comment', required=False, allow_semicolons=True)

    return values, result
