"""
Exceptions raised by storage backends and entity stores.

UniquenessConflictError and StorageError are siblings so callers can
tell a rejected duplicate apart from a failing backend.
"""

from typing import Optional, Sequence


class StoreError(Exception):
    """Base class for store failures."""


class UniquenessConflictError(StoreError):
    """A save would duplicate a value that must be unique across the collection."""

    def __init__(self, table: str, fields: Sequence[str], message: Optional[str] = None):
        self.table = table
        self.fields = tuple(fields)
        self.field = self.fields[0] if self.fields else None
        if message is None:
            if len(self.fields) > 1:
                message = f"The combination of {', '.join(self.fields)} must be unique"
            else:
                message = f"The value for the {self.field} must be unique"
        super().__init__(message)


class StorageError(StoreError):
    """The backing store could not be read or written."""


class EntityNotFoundError(StoreError):
    """An update targeted an entity that is no longer stored."""

    def __init__(self, table: str, entity_id: int):
        self.table = table
        self.entity_id = entity_id
        super().__init__(f"No row with id {entity_id} in {table}")


class CommittedWriteError(StorageError):
    """
    A write was committed but reading it back or refreshing the store failed.

    Listeners were still told about the change. ``entity`` holds the saved
    entity with its id, as read back or as written when the read failed.
    """

    def __init__(self, table: str, entity_id: int, action: str, entity=None):
        self.table = table
        self.entity_id = entity_id
        self.entity = entity
        super().__init__(f"{action.capitalize()} of {table} row {entity_id} was committed "
                         f"but refreshing the store failed")
