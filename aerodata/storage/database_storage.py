#!/usr/bin/env python3

import re
import sqlite3
import logging
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple
from contextlib import contextmanager

from .base import Criterion, MembershipCriterion, RangeCriterion, Row, SortOrder, StorageInterface
from .exceptions import StorageError, UniquenessConflictError
from .field_definitions import ALL_TABLES, SchemaManager, TableDefinition

logger = logging.getLogger(__name__)

_UNIQUE_FAILURE = re.compile(r'UNIQUE constraint failed: (.*)')
_QUALIFIED_COLUMN = re.compile(r'\w+\.(\w+)')


class DatabaseStorage(StorageInterface):
    """
    SQLite storage for the aviation tables.

    A connection is opened for each operation. Every sqlite3 error leaves
    this class as a StoreError: UniquenessConflictError when a unique
    constraint rejects a write, StorageError otherwise.
    """

    def __init__(self, database_path: str, tables: Optional[Sequence[TableDefinition]] = None):
        """
        Initialize the database storage.

        Args:
            database_path: Path to the SQLite database file
            tables: Table definitions, all aviation tables by default
        """
        self.database_path = Path(database_path)
        self.schema_manager = SchemaManager()
        self.tables: Dict[str, TableDefinition] = {table.name: table for table in (tables or ALL_TABLES)}
        self._ensure_database_exists()

    def _ensure_database_exists(self):
        """Create any table missing from the database file."""
        with self._get_connection() as conn, self._translate_errors("schema"):
            existing = {
                row['name'] for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
            }
            missing = [table for name, table in self.tables.items() if name not in existing]
            if not missing:
                return
            for table in missing:
                conn.execute(self.schema_manager.get_create_table_sql(table))
                logger.info(f"Created table {table.name} in {self.database_path}")
            if 'routes' in self.tables:
                for columns in (("source",), ("destination",)):
                    conn.execute(self.schema_manager.get_create_index_sql(self.tables['routes'], columns))
            conn.commit()

    @contextmanager
    def _get_connection(self) -> Iterator[sqlite3.Connection]:
        """Get a database connection with proper configuration."""
        try:
            conn = sqlite3.connect(str(self.database_path))
        except sqlite3.Error as e:
            raise StorageError(f"Cannot open database {self.database_path}: {e}") from e
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        finally:
            conn.close()

    @contextmanager
    def _translate_errors(self, table: str) -> Iterator[None]:
        try:
            yield
        except sqlite3.IntegrityError as e:
            match = _UNIQUE_FAILURE.search(str(e))
            if match:
                fields = _QUALIFIED_COLUMN.findall(match.group(1))
                logger.debug(f"Uniqueness conflict in {table} on {fields}")
                raise UniquenessConflictError(table, fields) from e
            logger.error(f"Integrity error in {table}: {e}")
            raise StorageError(f"Integrity error in {table}: {e}") from e
        except sqlite3.Error as e:
            logger.error(f"Database error in {table}: {e}")
            raise StorageError(f"Database error in {table}: {e}") from e

    def _table(self, table: str) -> TableDefinition:
        try:
            return self.tables[table]
        except KeyError:
            raise ValueError(f"Unknown table: {table}") from None

    def _check_column(self, definition: TableDefinition, column: str) -> str:
        # Column names are interpolated into SQL so only known ones are accepted
        if column not in definition.columns:
            raise ValueError(f"Unknown column {column!r} for table {definition.name}")
        return column

    def _storage_values(self, definition: TableDefinition, values: Row) -> Tuple[List[str], List[Any]]:
        columns, parameters = [], []
        for name, value in values.items():
            field_definition = definition.get_field(name)
            if field_definition is None:
                raise ValueError(f"Column {name!r} of table {definition.name} cannot be written")
            columns.append(name)
            parameters.append(field_definition.format_for_storage(value))
        return columns, parameters

    def _row_to_dict(self, definition: TableDefinition, row: sqlite3.Row) -> Row:
        result = {}
        for key in row.keys():
            field_definition = definition.get_field(key)
            value = row[key]
            result[key] = field_definition.parse_from_storage(value) if field_definition else value
        return result

    def insert(self, table: str, values: Row) -> int:
        definition = self._table(table)
        columns, parameters = self._storage_values(definition, values)
        placeholders = ', '.join('?' for _ in columns)
        sql = f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({placeholders})"

        with self._get_connection() as conn, self._translate_errors(table):
            cursor = conn.execute(sql, parameters)
            conn.commit()
            logger.debug(f"Inserted row {cursor.lastrowid} into {table}")
            return cursor.lastrowid

    def update(self, table: str, entity_id: int, values: Row) -> bool:
        definition = self._table(table)
        columns, parameters = self._storage_values(definition, values)
        if not columns:
            return self.get(table, entity_id) is not None
        assignments = ', '.join(f"{column} = ?" for column in columns)
        sql = f"UPDATE {table} SET {assignments} WHERE id = ?"

        with self._get_connection() as conn, self._translate_errors(table):
            cursor = conn.execute(sql, parameters + [entity_id])
            conn.commit()
            return cursor.rowcount > 0

    def delete(self, table: str, entity_id: int) -> bool:
        self._table(table)
        with self._get_connection() as conn, self._translate_errors(table):
            cursor = conn.execute(f"DELETE FROM {table} WHERE id = ?", (entity_id,))
            conn.commit()
            return cursor.rowcount > 0

    def get(self, table: str, entity_id: int) -> Optional[Row]:
        rows = self.find(table, 'id', entity_id, limit=1)
        return rows[0] if rows else None

    def find(self, table: str, column: str, value: Any, limit: Optional[int] = None) -> List[Row]:
        definition = self._table(table)
        self._check_column(definition, column)
        sql = f"SELECT * FROM ({definition.get_select_sql()}) WHERE {column} = ? ORDER BY id LIMIT ?"

        with self._get_connection() as conn, self._translate_errors(table):
            rows = conn.execute(sql, (value, -1 if limit is None else limit)).fetchall()
            return [self._row_to_dict(definition, row) for row in rows]

    def _where_clause(self, definition: TableDefinition, criteria: Sequence[Criterion]) -> Tuple[str, List[Any]]:
        clauses: List[str] = []
        parameters: List[Any] = []
        for criterion in criteria:
            column = self._check_column(definition, criterion.column)
            if isinstance(criterion, MembershipCriterion):
                if not criterion.values:
                    clauses.append("0")
                    continue
                placeholders = ', '.join('?' for _ in criterion.values)
                clauses.append(f"{column} IN ({placeholders})")
                parameters.extend(criterion.values)
            elif isinstance(criterion, RangeCriterion):
                if criterion.minimum is not None:
                    clauses.append(f"{column} >= ?")
                    parameters.append(criterion.minimum)
                if criterion.maximum is not None:
                    clauses.append(f"{column} <= ?")
                    parameters.append(criterion.maximum)
            else:
                raise TypeError(f"Unsupported criterion {criterion!r}")

        if not clauses:
            return "", parameters
        return " WHERE " + " AND ".join(clauses), parameters

    def query(self, table: str, criteria: Sequence[Criterion] = (), sort_column: Optional[str] = None,
              sort_order: SortOrder = SortOrder.ASC, limit: Optional[int] = None, offset: int = 0) -> List[Row]:
        definition = self._table(table)
        where, parameters = self._where_clause(definition, criteria)
        order = SortOrder.from_value(sort_order)

        sql = f"SELECT * FROM ({definition.get_select_sql()}){where}"
        if sort_column and sort_column != 'id':
            self._check_column(definition, sort_column)
            sql += f" ORDER BY {sort_column} {order.value} NULLS LAST, id ASC"
        else:
            sql += f" ORDER BY id {order.value}"
        sql += " LIMIT ? OFFSET ?"
        parameters.extend([-1 if limit is None else limit, max(0, offset)])

        logger.debug(f"Query {table}: {sql} {parameters}")
        with self._get_connection() as conn, self._translate_errors(table):
            rows = conn.execute(sql, parameters).fetchall()
            return [self._row_to_dict(definition, row) for row in rows]

    def count(self, table: str, column: str, value: Any) -> int:
        definition = self._table(table)
        self._check_column(definition, column)
        sql = f"SELECT COUNT(*) AS count FROM ({definition.get_select_sql()}) WHERE {column} = ?"

        with self._get_connection() as conn, self._translate_errors(table):
            return conn.execute(sql, (value,)).fetchone()['count']

    def distinct_values(self, table: str, column: str) -> List[Any]:
        definition = self._table(table)
        self._check_column(definition, column)
        sql = (f"SELECT DISTINCT {column} AS value FROM ({definition.get_select_sql()}) "
               f"WHERE {column} IS NOT NULL ORDER BY {column}")

        with self._get_connection() as conn, self._translate_errors(table):
            return [row['value'] for row in conn.execute(sql).fetchall()]

    def get_database_info(self) -> Dict[str, Any]:
        """Get information about the database."""
        with self._get_connection() as conn, self._translate_errors("schema"):
            info = {
                'database_path': str(self.database_path),
                'schema_version': self.schema_manager.version,
                'tables': {},
            }
            for table in self.tables:
                count = conn.execute(f"SELECT COUNT(*) AS count FROM {table}").fetchone()['count']
                info['tables'][table] = count
            return info
