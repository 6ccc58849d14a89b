import logging
from typing import Optional, Tuple

from ..storage.base import RangeCriterion
from .base import Filter, FilterRange

logger = logging.getLogger(__name__)


class RangeFilter(Filter):
    """
    Inclusive numeric bounds within a fixed, steppable domain.

    A bound sitting on the edge of the domain is open on that side, so a
    filter at its full domain excludes nothing, including values outside
    the domain.
    """

    def __init__(self, key: str, name: str, minimum: float, maximum: float, step: float = 1):
        if minimum >= maximum:
            raise ValueError(f"Range filter {name!r} needs minimum < maximum, got {minimum} >= {maximum}")
        if step <= 0:
            raise ValueError(f"Range filter {name!r} needs a positive step, got {step}")
        super().__init__(key, name)
        self.minimum = minimum
        self.maximum = maximum
        self.step = step
        self._low = minimum
        self._high = maximum

    @property
    def bounds(self) -> Tuple[float, float]:
        return self._low, self._high

    @bounds.setter
    def bounds(self, value: Tuple[Optional[float], Optional[float]]) -> None:
        low, high = value
        self.set_bounds(low, high)

    def set_bounds(self, low: Optional[float], high: Optional[float]) -> None:
        """
        Set both bounds, clamped to the domain; None means the domain edge.

        Raises:
            ValueError: if low is greater than high
        """
        low = self.minimum if low is None else low
        high = self.maximum if high is None else high
        if low > high:
            raise ValueError(f"Lower bound {low} is above upper bound {high} for {self.name!r}")
        self._low = min(max(low, self.minimum), self.maximum)
        self._high = min(max(high, self.minimum), self.maximum)
        logger.debug(f"Range filter {self.key} set to [{self._low}, {self._high}]")

    def reset(self) -> None:
        self._low, self._high = self.minimum, self.maximum

    @property
    def is_active(self) -> bool:
        return self._low > self.minimum or self._high < self.maximum

    def get_range(self) -> FilterRange:
        return FilterRange(
            min=None if self._low <= self.minimum else self._low,
            max=None if self._high >= self.maximum else self._high,
        )

    def accepts(self, value: Optional[float]) -> bool:
        return self.get_range().contains(value)

    def to_criterion(self, column: str) -> Optional[RangeCriterion]:
        active = self.get_range()
        if active.is_unbounded:
            return None
        return RangeCriterion(column, active.min, active.max)
