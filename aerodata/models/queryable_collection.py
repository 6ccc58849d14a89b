"""
Chainable in-memory queries over entities.

Stores return a QueryableCollection from ``get_all`` so callers can refine
a result without another round trip to the backing store.
"""

from typing import TypeVar, Generic, Callable, List, Dict, Optional, Any, Union
from collections.abc import Iterable

T = TypeVar('T')


class QueryableCollection(Generic[T]):
    """
    A lightweight, chainable collection for filtering and querying entities.

    Examples:
        # Airlines from one country, by name
        airlines.where(country='New Zealand').order_by(lambda a: a.name).all()

        # Routes longer than three hours
        routes.filter(lambda r: r.flight_duration > 180).count()

        # Airports grouped by country
        airports.group_by(lambda a: a.country)
    """

    def __init__(self, items: Union[List[T], Iterable[T]]):
        self._items: List[T] = list(items) if not isinstance(items, list) else items

    def filter(self, predicate: Callable[[T], bool]) -> 'QueryableCollection[T]':
        """
        Filter items using a predicate function.

        Examples:
            # Codeshare routes only
            routes.filter(lambda r: r.codeshare)
        """
        return self.__class__([item for item in self._items if predicate(item)])

    def where(self, **kwargs) -> 'QueryableCollection[T]':
        """
        Keep items whose attributes equal all the given values.

        Examples:
            routes.where(source='AKL', airline='NZ')
        """
        def matches(item: T) -> bool:
            return all(
                getattr(item, key, None) == value
                for key, value in kwargs.items()
            )
        return self.filter(matches)

    def first(self) -> Optional[T]:
        """Return the first item or None if collection is empty."""
        return self._items[0] if self._items else None

    def all(self) -> List[T]:
        """Return all items as a list."""
        return self._items

    def count(self) -> int:
        return len(self._items)

    def exists(self) -> bool:
        return len(self._items) > 0

    def group_by(self, key_func: Callable[[T], Any]) -> Dict[Any, List[T]]:
        """
        Group items by a key function.

        Examples:
            # Routes by airline
            by_airline = routes.group_by(lambda r: r.airline)
        """
        result: Dict[Any, List[T]] = {}
        for item in self._items:
            result.setdefault(key_func(item), []).append(item)
        return result

    def order_by(self, key_func: Callable[[T], Any], reverse: bool = False) -> 'QueryableCollection[T]':
        """
        Sort items by a key function.

        Examples:
            # Cheapest routes first
            routes.order_by(lambda r: r.price)
        """
        return self.__class__(sorted(self._items, key=key_func, reverse=reverse))

    def take(self, n: int) -> 'QueryableCollection[T]':
        return self.__class__(self._items[:n])

    def skip(self, n: int) -> 'QueryableCollection[T]':
        return self.__class__(self._items[n:])

    def distinct_by(self, key_func: Callable[[T], Any]) -> 'QueryableCollection[T]':
        """
        Return distinct items based on a key function, keeping the first occurrence.

        Examples:
            # One airport per country
            airports.distinct_by(lambda a: a.country)
        """
        seen = set()
        result = []
        for item in self._items:
            key = key_func(item)
            if key not in seen:
                seen.add(key)
                result.append(item)
        return self.__class__(result)

    def map(self, transform: Callable[[T], Any]) -> 'QueryableCollection[Any]':
        """
        Transform each item using a function.

        Examples:
            # Airport codes
            airports.map(lambda a: a.code)
        """
        return QueryableCollection([transform(item) for item in self._items])

    def __iter__(self):
        return iter(self._items)

    def __len__(self):
        return len(self._items)

    def __getitem__(self, index):
        if isinstance(index, slice):
            return self.__class__(self._items[index])
        return self._items[index]

    def __bool__(self):
        return len(self._items) > 0

    def __repr__(self):
        class_name = self.__class__.__name__
        count = len(self._items)
        if count == 0:
            return f"{class_name}([])"

        preview_items = [
            repr(getattr(item, 'name')) if hasattr(item, 'name') else f"<{type(item).__name__}>"
            for item in self._items[:3]
        ]
        if count > 3:
            preview_items.append('...')
        return f"{class_name}([{', '.join(preview_items)}], count={count})"
