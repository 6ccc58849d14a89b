"""
Filters shared across tables: range filters, multi-select filters and
the registry that owns them.
"""

from .base import Filter, FilterRange, TextPredicate
from .multi_select_filter import MultiSelectFilter
from .range_filter import RangeFilter
from .registry import FilterKeys, FilterRegistry

__all__ = [
    'Filter',
    'FilterRange',
    'TextPredicate',
    'MultiSelectFilter',
    'RangeFilter',
    'FilterKeys',
    'FilterRegistry',
]
