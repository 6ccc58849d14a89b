#!/usr/bin/env python3

"""
A paginated, sorted and filtered window over one entity store.

The view never asks the store for a total count. Each fetch asks for one
row more than the page size: the extra row, when it comes back, only
tells the view that a next page exists and is never shown.
"""

import logging
from enum import Enum
from typing import Any, Callable, Generic, List, Optional, TypeVar, Union

import pandas as pd

from . import config
from .events import EventPublisher, Subscription
from .filters.registry import FilterRegistry
from .models.entity import Entity
from .storage.base import SortOrder
from .storage.exceptions import StoreError
from .stores.base import DataChange, EntityStore

logger = logging.getLogger(__name__)

E = TypeVar('E', bound=Entity)


class PageEvent(Enum):
    INITIAL = 'initial'
    NEXT = 'next'
    PREV = 'prev'
    REFRESH = 'refresh'


class PagedView(Generic[E]):
    """
    Offset, sort and page size over a store, with the page last fetched.

    ``attach`` subscribes the view to its store and to the filter registry
    and loads the first page; ``detach`` unsubscribes it. A filter change
    brings the view back to the first page, a data change reloads the
    current page. A failed fetch leaves the view exactly as it was.
    """

    def __init__(self, store: EntityStore[E], registry: Optional[FilterRegistry] = None,
                 page_size: Optional[int] = None, sort_column: Optional[str] = None,
                 sort_order: Union[SortOrder, str] = SortOrder.ASC,
                 on_detach: Optional[Callable[['PagedView[E]'], Any]] = None):
        self.store = store
        self.registry = registry if registry is not None else store.registry
        self._page_size = config.clamp_page_size(page_size)
        self._sort_column = sort_column
        self._sort_order = SortOrder.from_value(sort_order)

        self._offset = 0
        self._items: List[E] = []
        self._can_page_forward = False
        self._can_page_backward = False
        self.last_error: Optional[StoreError] = None

        self._listeners = EventPublisher(f"{store.TABLE} view")
        self._subscriptions: List[Subscription] = []
        self._on_detach = on_detach

    # Lifecycle

    @property
    def is_attached(self) -> bool:
        return bool(self._subscriptions)

    def attach(self) -> 'PagedView[E]':
        """Subscribe to data and filter changes and load the first page."""
        if not self.is_attached:
            self._subscriptions = [
                self.store.add_listener(self._on_data_change),
                self.registry.add_listener(self._on_filters_change),
            ]
            logger.debug(f"Attached view on {self.store.TABLE}")
        self.reload()
        return self

    def detach(self) -> None:
        if not self.is_attached:
            return
        for subscription in self._subscriptions:
            subscription.cancel()
        self._subscriptions = []
        logger.debug(f"Detached view on {self.store.TABLE}")
        if self._on_detach is not None:
            self._on_detach(self)

    def __enter__(self) -> 'PagedView[E]':
        # Views from AppContext.open_view arrive attached and loaded
        if self.is_attached:
            return self
        return self.attach()

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.detach()

    def _on_filters_change(self) -> None:
        self.update(self._page_size, True, PageEvent.INITIAL)

    def _on_data_change(self, change: DataChange) -> None:
        self.update(self._page_size, False, PageEvent.REFRESH)

    # Window

    def update(self, num_rows: int, is_initial: bool = False,
               event: PageEvent = PageEvent.REFRESH) -> List[E]:
        """
        Recompute the visible page for a transition.

        NEXT moves past the visible rows, PREV moves back one page size,
        INITIAL goes to the first page and REFRESH reloads the current
        offset, stepping back a page at a time while it is past the end.

        Returns:
            Copy of the new visible page

        Raises:
            StoreError: if the store fails; the previous page is kept
        """
        num_rows = config.clamp_page_size(num_rows)
        if is_initial or event is PageEvent.INITIAL:
            offset = 0
        elif event is PageEvent.NEXT:
            offset = self._offset + len(self._items)
        elif event is PageEvent.PREV:
            offset = self._offset - num_rows
        else:
            offset = self._offset
        offset = max(0, offset)

        try:
            rows = self._fetch(num_rows, offset)
            while event is PageEvent.REFRESH and not rows and offset > 0:
                offset = max(0, offset - num_rows)
                rows = self._fetch(num_rows, offset)
        except StoreError as e:
            self.last_error = e
            logger.error(f"Could not load {self.store.TABLE} page at offset {offset}: {e}")
            raise

        self._page_size = num_rows
        self._offset = offset
        self._can_page_forward = len(rows) > num_rows
        self._items = rows[:num_rows]
        self._can_page_backward = offset > 0
        self.last_error = None
        logger.debug(f"{event.value} {self.store.TABLE} page: offset {offset}, {len(self._items)} rows, "
                     f"more={self._can_page_forward}")

        self._listeners.publish(self)
        return self.items

    def _fetch(self, num_rows: int, offset: int) -> List[E]:
        return self.store.get_page(self._sort_column, self._sort_order, limit=num_rows + 1, offset=offset)

    def next_page(self) -> List[E]:
        """Move to the next page; does nothing on the last page."""
        if not self._can_page_forward:
            return self.items
        return self.update(self._page_size, False, PageEvent.NEXT)

    def previous_page(self) -> List[E]:
        """Move to the previous page; does nothing on the first page."""
        if not self._can_page_backward:
            return self.items
        return self.update(self._page_size, False, PageEvent.PREV)

    def refresh(self) -> List[E]:
        return self.update(self._page_size, False, PageEvent.REFRESH)

    def reload(self) -> List[E]:
        """Go back to the first page."""
        return self.update(self._page_size, True, PageEvent.INITIAL)

    def set_sort(self, sort_column: Optional[str], sort_order: Union[SortOrder, str] = SortOrder.ASC) -> List[E]:
        """
        Sort by another column and go back to the first page.

        Raises:
            StoreError: if the store fails; the previous sort is kept
        """
        previous = self._sort_column, self._sort_order
        self._sort_column = sort_column
        self._sort_order = SortOrder.from_value(sort_order)
        try:
            return self.reload()
        except (StoreError, ValueError):
            self._sort_column, self._sort_order = previous
            raise

    def set_page_size(self, page_size: int) -> List[E]:
        return self.update(page_size, False, PageEvent.REFRESH)

    # State

    @property
    def items(self) -> List[E]:
        return list(self._items)

    @property
    def offset(self) -> int:
        return self._offset

    @property
    def page_size(self) -> int:
        return self._page_size

    @property
    def sort_column(self) -> Optional[str]:
        return self._sort_column

    @property
    def sort_order(self) -> SortOrder:
        return self._sort_order

    @property
    def can_page_forward(self) -> bool:
        return self._can_page_forward

    @property
    def can_page_backward(self) -> bool:
        return self._can_page_backward

    def add_listener(self, listener: Callable[['PagedView[E]'], Any]) -> Subscription:
        """Register a callable taking the view, called after each successful update."""
        return self._listeners.subscribe(listener)

    def remove_listener(self, listener: Callable[['PagedView[E]'], Any]) -> bool:
        return self._listeners.unsubscribe(listener)

    def to_dataframe(self) -> pd.DataFrame:
        """Visible page as a DataFrame, one row per entity."""
        if not self._items:
            return pd.DataFrame(columns=['id'] + list(self.store.ENTITY_CLASS.FIELDS))
        return pd.DataFrame([item.to_dict() for item in self._items])

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"PagedView({self.store.TABLE}, offset={self._offset}, rows={len(self._items)})"
