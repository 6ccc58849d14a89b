#!/usr/bin/env python3

"""
Base class for validated entities.

An entity keeps its field values in a private record. Every change goes
through ``update`` which validates the whole candidate record at once and
either applies all requested changes or raises DataConstraintsError
without touching the entity.
"""

import copy
import logging
from datetime import date
from enum import Enum
from typing import Any, ClassVar, Dict, Optional, Tuple

from .validation import DataConstraintsError, ValidationResult

logger = logging.getLogger(__name__)

Record = Dict[str, Any]


def entity_field(name: str, doc: Optional[str] = None) -> property:
    """Property reading a field from the record and writing it through ``update``."""

    def getter(self: 'Entity') -> Any:
        value = self._values[name]
        if isinstance(value, list):
            return list(value)
        return value

    def setter(self: 'Entity', value: Any) -> None:
        self.update(**{name: value})

    return property(getter, setter, doc=doc or f"Validated '{name}' field.")


class Entity:
    """
    A uniquely identified record whose fields are always valid.

    Subclasses declare FIELDS, DEFAULTS and KIND and implement
    ``validate_record``.
    """

    UNKNOWN_ID: ClassVar[int] = -1
    KIND: ClassVar[str] = 'entity'
    FIELDS: ClassVar[Tuple[str, ...]] = ()
    DEFAULTS: ClassVar[Record] = {}

    def __init__(self, **values: Any):
        self._check_field_names(values)
        record = {name: copy.deepcopy(self.DEFAULTS.get(name)) for name in self.FIELDS}
        record.update(values)
        normalized, result = self.validate_record(record)
        if not result.is_valid:
            raise DataConstraintsError(f"Invalid {self.KIND}", result)
        self._id = self.UNKNOWN_ID
        self._values: Record = normalized

    @classmethod
    def validate_record(cls, record: Record) -> Tuple[Record, ValidationResult]:
        raise NotImplementedError

    @classmethod
    def from_storage(cls, entity_id: int, **values: Any) -> 'Entity':
        """
        Rebuild an entity from values read back from the backing store.

        The values were validated when they were saved so they are taken
        as they are.
        """
        entity = cls.__new__(cls)
        entity._id = entity_id
        entity._values = {name: values.get(name) for name in cls.FIELDS}
        return entity

    @classmethod
    def _check_field_names(cls, values: Record) -> None:
        unknown = sorted(set(values) - set(cls.FIELDS))
        if unknown:
            raise TypeError(f"{cls.__name__} has no field(s) {', '.join(unknown)}")

    @property
    def id(self) -> int:
        return self._id

    @property
    def is_memory_only(self) -> bool:
        """True until the entity has been stored and given an id."""
        return self._id == self.UNKNOWN_ID

    def update(self, **changes: Any) -> None:
        """
        Change one or more fields at once.

        The full record, with the changes applied, is validated. Only
        errors raised against the changed fields are reported, which covers
        rules spanning several fields: clearing the IATA code of an airline
        fails on ``iata`` when the ICAO code is empty too.

        Raises:
            DataConstraintsError: with every rejected field; no field is changed
        """
        self._check_field_names(changes)
        if not changes:
            return
        candidate = dict(self._values)
        candidate.update(changes)
        normalized, result = self.validate_record(candidate)
        relevant = result.only(changes)
        if not relevant.is_valid:
            logger.debug(f"Rejected {self.KIND} update {relevant.to_mapping()}")
            raise DataConstraintsError(f"Invalid {self.KIND} update", relevant)
        for name in changes:
            self._values[name] = normalized[name]

    def validate(self) -> ValidationResult:
        """Validate the current record as a whole."""
        _, result = self.validate_record(dict(self._values))
        return result

    def values(self) -> Record:
        """Copy of the field values."""
        return copy.deepcopy(self._values)

    def copy(self) -> 'Entity':
        return type(self).from_storage(self._id, **self.values())

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a plain dictionary with JSON friendly values."""
        result: Dict[str, Any] = {'id': self._id}
        for name, value in self._values.items():
            if isinstance(value, Enum):
                value = value.value
            elif isinstance(value, date):
                value = value.isoformat()
            elif isinstance(value, list):
                value = list(value)
            result[name] = value
        return result

    def _state(self) -> Tuple[Any, ...]:
        return (self._id, tuple(sorted(self._values.items())))

    def __eq__(self, other: Any) -> bool:
        if type(self) is not type(other):
            return NotImplemented
        return self._state() == other._state()

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        fields = ', '.join(f"{name}={self._values[name]!r}" for name in self.FIELDS[:3])
        return f"{type(self).__name__}(id={self._id}, {fields})"
