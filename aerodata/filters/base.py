from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional

from ..storage.base import Criterion


@dataclass(frozen=True)
class FilterRange:
    """Inclusive bounds of a range filter; None means open on that side."""

    min: Optional[float] = None
    max: Optional[float] = None

    @property
    def is_unbounded(self) -> bool:
        return self.min is None and self.max is None

    def contains(self, value: Any) -> bool:
        if value is None:
            return self.is_unbounded
        if self.min is not None and value < self.min:
            return False
        if self.max is not None and value > self.max:
            return False
        return True


class Filter(ABC):
    """A stateful predicate over one entity field, shared by every consumer of that field."""

    def __init__(self, key: str, name: str):
        self.key = key
        self.name = name

    @property
    @abstractmethod
    def is_active(self) -> bool:
        """True when the filter excludes anything."""
        pass

    @abstractmethod
    def reset(self) -> None:
        pass

    @abstractmethod
    def to_criterion(self, column: str) -> Optional[Criterion]:
        """Storage criterion for ``column``, or None when the filter is inactive."""
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.key!r})"


class TextPredicate:
    """Case-insensitive substring test against the string form of a value."""

    def __init__(self, substring: Optional[str] = ''):
        self.substring = substring or ''
        self._needle = self.substring.lower()

    def __call__(self, value: Any) -> bool:
        if not self._needle:
            return True
        if value is None:
            return False
        return self._needle in str(value).lower()
