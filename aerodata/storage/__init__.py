from .base import (
    Criterion,
    MembershipCriterion,
    RangeCriterion,
    SortOrder,
    StorageInterface,
)
from .database_storage import DatabaseStorage
from .exceptions import CommittedWriteError, EntityNotFoundError, StorageError, StoreError, UniquenessConflictError
from .field_definitions import FieldDefinition, FieldType, SchemaManager, TableDefinition

__all__ = [
    'Criterion',
    'MembershipCriterion',
    'RangeCriterion',
    'SortOrder',
    'StorageInterface',
    'DatabaseStorage',
    'StoreError',
    'StorageError',
    'UniquenessConflictError',
    'EntityNotFoundError',
    'CommittedWriteError',
    'FieldDefinition',
    'FieldType',
    'SchemaManager',
    'TableDefinition',
]
