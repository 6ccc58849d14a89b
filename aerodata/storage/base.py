from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

Row = Dict[str, Any]


class SortOrder(Enum):
    ASC = 'ASC'
    DESC = 'DESC'

    @classmethod
    def from_value(cls, value: Union[str, 'SortOrder', None]) -> 'SortOrder':
        if value is None:
            return cls.ASC
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).upper())
        except ValueError:
            raise ValueError(f"Sort order must be ASC or DESC, got {value!r}") from None


@dataclass(frozen=True)
class MembershipCriterion:
    """Column value must be one of ``values``."""

    column: str
    values: Tuple[Any, ...]


@dataclass(frozen=True)
class RangeCriterion:
    """Column value must lie in the inclusive range; a None bound is open."""

    column: str
    minimum: Optional[float] = None
    maximum: Optional[float] = None


Criterion = Union[MembershipCriterion, RangeCriterion]


class StorageInterface(ABC):
    """
    Keyed CRUD over named tables plus one filtered, sorted, paginated query.

    Rows are dictionaries keyed by column name, with an integer ``id``
    assigned by the backend on insert.
    """

    @abstractmethod
    def insert(self, table: str, values: Row) -> int:
        """
        Insert a row.

        Returns:
            The id given to the new row

        Raises:
            UniquenessConflictError: if a unique column would be duplicated
            StorageError: on any other backend failure
        """
        pass

    @abstractmethod
    def update(self, table: str, entity_id: int, values: Row) -> bool:
        """Replace the values of a row; False if no row has that id."""
        pass

    @abstractmethod
    def delete(self, table: str, entity_id: int) -> bool:
        """Delete a row; False if no row has that id."""
        pass

    @abstractmethod
    def get(self, table: str, entity_id: int) -> Optional[Row]:
        pass

    @abstractmethod
    def find(self, table: str, column: str, value: Any, limit: Optional[int] = None) -> List[Row]:
        """Rows whose column equals value exactly."""
        pass

    @abstractmethod
    def query(self, table: str, criteria: Sequence[Criterion] = (), sort_column: Optional[str] = None,
              sort_order: SortOrder = SortOrder.ASC, limit: Optional[int] = None, offset: int = 0) -> List[Row]:
        """
        Return up to ``limit`` rows matching every criterion, skipping the first ``offset``.

        Rows are ordered by ``sort_column`` with missing values last, then by id.
        """
        pass

    @abstractmethod
    def count(self, table: str, column: str, value: Any) -> int:
        """Number of rows whose column equals value exactly."""
        pass

    @abstractmethod
    def distinct_values(self, table: str, column: str) -> List[Any]:
        """Sorted distinct non null values of a column."""
        pass
