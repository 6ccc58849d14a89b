#!/usr/bin/env python3

"""
Application context: the filter registry and one store per entity kind.

Code that wants the process wide context calls ``get_context``; tests and
tools that want isolated state build an ``AppContext`` of their own.
"""

import logging
from typing import Dict, List, Optional, Union

from . import config
from .filters.registry import FilterRegistry
from .paging import PagedView
from .storage.base import SortOrder, StorageInterface
from .storage.database_storage import DatabaseStorage
from .storage.exceptions import StoreError
from .stores import AirlineStore, AirportStore, EntityStore, RouteStore, TripStore

logger = logging.getLogger(__name__)


class AppContext:
    """Wires a storage backend to the registry, the stores and their views."""

    def __init__(self, storage: StorageInterface, registry: Optional[FilterRegistry] = None):
        self.storage = storage
        self.registry = registry if registry is not None else FilterRegistry.with_defaults()

        self.airlines = AirlineStore(storage, self.registry)
        self.airports = AirportStore(storage, self.registry)
        self.routes = RouteStore(storage, self.registry, self.airlines, self.airports)
        self.trips = TripStore(storage, self.registry, self.routes)
        self._stores: Dict[str, EntityStore] = {
            'airline': self.airlines,
            'airport': self.airports,
            'route': self.routes,
            'trip': self.trips,
        }
        self._views = []

        self.refresh_filter_options()

    @classmethod
    def from_path(cls, database_path: str) -> 'AppContext':
        return cls(DatabaseStorage(database_path))

    def store(self, kind: str) -> EntityStore:
        """
        Store for an entity kind: 'airline', 'airport', 'route' or 'trip'.

        Raises:
            KeyError: for any other kind
        """
        try:
            return self._stores[kind]
        except KeyError:
            raise KeyError(f"Unknown entity kind {kind!r}, expected one of {', '.join(self._stores)}") from None

    def open_view(self, kind: str, page_size: Optional[int] = None, sort_column: Optional[str] = None,
                  sort_order: Union[SortOrder, str] = SortOrder.ASC) -> PagedView:
        """Create an attached view on a store; it is released when detached or on ``close``."""
        view = PagedView(self.store(kind), self.registry, page_size, sort_column, sort_order,
                         on_detach=self._release_view)
        self._views.append(view)
        try:
            return view.attach()
        except (StoreError, ValueError):
            view.detach()
            raise

    @property
    def views(self) -> List[PagedView]:
        """Views opened through this context and still attached."""
        return list(self._views)

    def _release_view(self, view: PagedView) -> None:
        if view in self._views:
            self._views.remove(view)

    def refresh_filter_options(self) -> bool:
        """Recompute every filter universe, notifying filter listeners once if any changed."""
        changed = False
        for store in self._stores.values():
            if store.refresh_filter_options():
                changed = True
        if changed:
            self.registry.notify_all()
        return changed

    def close(self) -> None:
        for view in list(self._views):
            view.detach()
        self._views = []


_context: Optional[AppContext] = None


def init_context(database_path: Optional[str] = None) -> AppContext:
    """
    Create the process wide context.

    Raises:
        RuntimeError: if a context already exists
    """
    global _context
    if _context is not None:
        raise RuntimeError("Application context is already initialized")
    path = database_path or config.DATABASE_PATH
    _context = AppContext.from_path(path)
    logger.info(f"Initialized application context on {path}")
    return _context


def get_context() -> AppContext:
    """Process wide context, created from the configured database on first use."""
    if _context is None:
        return init_context()
    return _context


def teardown_context() -> None:
    global _context
    if _context is not None:
        _context.close()
        logger.info("Tore down application context")
    _context = None
