#!/usr/bin/env python3

"""
Generic store for one kind of entity.

A store validates and persists entities through a StorageInterface, keeps
the option universes of the filters it owns in line with the stored data,
and tells its listeners about every change.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, ClassVar, Dict, Generic, List, Optional, Type, TypeVar, Union

from ..events import EventPublisher, ListenerFailure, Subscription, dispatch
from ..filters.multi_select_filter import MultiSelectFilter
from ..filters.registry import FilterRegistry
from ..models.entity import Entity
from ..models.queryable_collection import QueryableCollection
from ..storage.base import Criterion, Row, SortOrder, StorageInterface
from ..storage.exceptions import CommittedWriteError, EntityNotFoundError, StoreError

logger = logging.getLogger(__name__)

E = TypeVar('E', bound=Entity)


class ChangeKind(Enum):
    SAVED = 'saved'
    DELETED = 'deleted'
    RELOADED = 'reloaded'


@dataclass(frozen=True)
class DataChange:
    """
    What changed in a store.

    ``entity`` is the stored entity after a save and None after a delete.
    RELOADED changes cover many rows at once and carry no entity.
    """

    kind: ChangeKind
    entity_id: int
    entity: Optional[Entity] = None


DataListener = Callable[[DataChange], Any]


class EntityStore(Generic[E]):
    """
    CRUD and filtered, sorted, paginated reads over one table.

    Subclasses set TABLE and ENTITY_CLASS, map filter keys to the columns
    they apply to in FILTER_COLUMNS, and list in OPTION_COLUMNS the
    multi-select filters whose universes this store provides.
    """

    TABLE: ClassVar[str] = ''
    ENTITY_CLASS: ClassVar[Type[Entity]] = Entity
    FILTER_COLUMNS: ClassVar[Dict[str, str]] = {}
    OPTION_COLUMNS: ClassVar[Dict[str, str]] = {}
    SORT_ALIASES: ClassVar[Dict[str, str]] = {}

    def __init__(self, storage: StorageInterface, registry: FilterRegistry):
        self.storage = storage
        self.registry = registry
        self._listeners = EventPublisher(f"{self.TABLE} changes")
        self._entity_listeners: Dict[int, EventPublisher] = {}

    # Listeners

    def add_listener(self, listener: DataListener, entity_id: Optional[int] = None) -> Subscription:
        """
        Register a listener for every change, or only for changes to one entity.

        A listener registered both ways is still called once per change.
        """
        if entity_id is None:
            return self._listeners.subscribe(listener)
        publisher = self._entity_listeners.get(entity_id)
        if publisher is None:
            publisher = self._entity_listeners[entity_id] = EventPublisher(f"{self.TABLE}[{entity_id}] changes")
        return publisher.subscribe(listener)

    def remove_listener(self, listener: DataListener, entity_id: Optional[int] = None) -> bool:
        if entity_id is None:
            return self._listeners.unsubscribe(listener)
        publisher = self._entity_listeners.get(entity_id)
        if publisher is None:
            return False
        removed = publisher.unsubscribe(listener)
        if not len(publisher):
            del self._entity_listeners[entity_id]
        return removed

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def _notify(self, change: DataChange) -> List[ListenerFailure]:
        publisher = self._entity_listeners.get(change.entity_id)
        recipients = self._listeners.listeners
        if publisher is not None:
            recipients += [listener for listener in publisher.listeners if listener not in recipients]

        def is_subscribed(listener: DataListener) -> bool:
            return listener in self._listeners or (publisher is not None and listener in publisher)

        return dispatch(recipients, (change,), is_subscribed, f"{self.TABLE} store")

    def notify_reloaded(self) -> List[ListenerFailure]:
        """Tell listeners that rows changed outside ``save`` and ``delete``."""
        return self._notify(DataChange(ChangeKind.RELOADED, Entity.UNKNOWN_ID))

    # Filters

    def refresh_filter_options(self) -> bool:
        """
        Recompute the universes of the filters this store owns.

        Returns:
            True if any universe changed
        """
        changed = False
        for key, column in self.OPTION_COLUMNS.items():
            filter_ = self.registry.get(key)
            if not isinstance(filter_, MultiSelectFilter):
                continue
            if filter_.set_options(self.storage.distinct_values(self.TABLE, column)):
                changed = True
        return changed

    def active_criteria(self) -> List[Criterion]:
        """Criteria of every active filter applying to this store, combined with AND."""
        criteria = []
        for key, column in self.FILTER_COLUMNS.items():
            filter_ = self.registry.get(key)
            if filter_ is None:
                continue
            criterion = filter_.to_criterion(column)
            if criterion is not None:
                criteria.append(criterion)
        return criteria

    def _after_mutation(self, change: DataChange) -> List[ListenerFailure]:
        failures: List[ListenerFailure] = []
        try:
            if self.refresh_filter_options():
                failures.extend(self.registry.notify_all())
        finally:
            failures.extend(self._publish_change(change))
        return failures

    def _publish_change(self, change: DataChange) -> List[ListenerFailure]:
        """Tell the listeners of this store, and of anything derived from it, about a change."""
        return self._notify(change)

    def _publish_committed(self, change: DataChange, action: str,
                           read_error: Optional[StoreError] = None) -> None:
        """
        Refresh and notify after a write storage has already committed.

        Raises:
            CommittedWriteError: if the read back or the refresh failed
        """
        try:
            self._after_mutation(change)
        except StoreError as e:
            read_error = read_error or e
        if read_error is not None:
            logger.error(f"{action.capitalize()} of {self.TABLE} row {change.entity_id} committed, "
                         f"refresh failed: {read_error}")
            raise CommittedWriteError(self.TABLE, change.entity_id, action, change.entity) from read_error

    # Conversion

    def _to_row(self, entity: E) -> Row:
        return entity.values()

    def _from_row(self, row: Row) -> E:
        return self.ENTITY_CLASS.from_storage(row['id'], **{name: row.get(name) for name in self.ENTITY_CLASS.FIELDS})

    def _check_entity(self, entity: Any) -> None:
        if not isinstance(entity, self.ENTITY_CLASS):
            raise TypeError(f"{type(self).__name__} stores {self.ENTITY_CLASS.__name__}, got {type(entity).__name__}")

    # CRUD

    def save(self, entity: E) -> E:
        """
        Insert a memory-only entity or update a stored one.

        Returns:
            The entity as read back from storage, with its id

        Raises:
            DataConstraintsError: if the entity does not validate
            UniquenessConflictError: if a unique value is already used
            EntityNotFoundError: if a stored entity was deleted meanwhile
            StorageError: if the backing store fails before the write
            CommittedWriteError: if the write was stored but the refresh failed
        """
        self._check_entity(entity)
        entity.validate().raise_if_invalid(f"Cannot save invalid {entity.KIND}")
        row = self._to_row(entity)

        if entity.is_memory_only:
            entity_id = self.storage.insert(self.TABLE, row)
            logger.info(f"Inserted {entity.KIND} {entity_id}")
        else:
            entity_id = entity.id
            if not self.storage.update(self.TABLE, entity_id, row):
                raise EntityNotFoundError(self.TABLE, entity_id)
            logger.info(f"Updated {entity.KIND} {entity_id}")

        read_error = None
        try:
            stored = self.get_by_id(entity_id)
        except StoreError as e:
            read_error = e
            stored = self._from_row(dict(row, id=entity_id))
        self._publish_committed(DataChange(ChangeKind.SAVED, entity_id, stored), 'save', read_error)
        return stored

    def delete(self, entity_id: Union[int, E]) -> bool:
        """
        Delete by id or entity; False if nothing was stored under that id.

        Raises:
            CommittedWriteError: if the row was deleted but the refresh failed
        """
        if isinstance(entity_id, Entity):
            entity_id = entity_id.id
        if not self.storage.delete(self.TABLE, entity_id):
            return False
        logger.info(f"Deleted {self.ENTITY_CLASS.KIND} {entity_id}")
        try:
            self._publish_committed(DataChange(ChangeKind.DELETED, entity_id), 'delete')
        finally:
            self._entity_listeners.pop(entity_id, None)
        return True

    def get_by_id(self, entity_id: int) -> Optional[E]:
        row = self.storage.get(self.TABLE, entity_id)
        return self._from_row(row) if row else None

    def find_by(self, column: str, value: Any) -> Optional[E]:
        rows = self.storage.find(self.TABLE, column, value, limit=1)
        return self._from_row(rows[0]) if rows else None

    def get_all(self) -> QueryableCollection[E]:
        """Every stored entity, ignoring filters."""
        return QueryableCollection([self._from_row(row) for row in self.storage.query(self.TABLE)])

    def count_matching(self, column: str, value: Any) -> int:
        return self.storage.count(self.TABLE, column, value)

    def get_page(self, sort_column: Optional[str] = None, sort_order: Union[SortOrder, str] = SortOrder.ASC,
                 limit: Optional[int] = None, offset: int = 0) -> List[E]:
        """
        Up to ``limit`` entities from ``offset`` that pass every active filter.

        Raises:
            StorageError: if the backing store fails
        """
        if sort_column is not None:
            sort_column = self.SORT_ALIASES.get(sort_column, sort_column)
        rows = self.storage.query(
            self.TABLE,
            criteria=self.active_criteria(),
            sort_column=sort_column,
            sort_order=SortOrder.from_value(sort_order),
            limit=limit,
            offset=offset,
        )
        return [self._from_row(row) for row in rows]

    get_sorted_filtered_entities = get_page

    def __len__(self) -> int:
        return len(self.storage.query(self.TABLE))
