#!/usr/bin/env python3

import pytest

from aerodata.context import AppContext
from aerodata.filters import FilterKeys
from aerodata.models import Airline, Route
from aerodata.storage import CommittedWriteError, DatabaseStorage, StorageError, UniquenessConflictError
from aerodata.stores import ChangeKind


class FailingStorage(DatabaseStorage):
    """Database storage whose named operations can be made to fail."""

    failing = ()

    def _fail_if(self, operation):
        if operation in self.failing:
            raise StorageError(f"{operation} unavailable")

    def insert(self, *args, **kwargs):
        self._fail_if('insert')
        return super().insert(*args, **kwargs)

    def get(self, *args, **kwargs):
        self._fail_if('get')
        return super().get(*args, **kwargs)

    def distinct_values(self, *args, **kwargs):
        self._fail_if('distinct_values')
        return super().distinct_values(*args, **kwargs)


@pytest.fixture
def failing_context(database_path):
    ctx = AppContext(FailingStorage(database_path))
    yield ctx
    ctx.close()


class TestFailureBeforeWrite:
    """Test that a failing backend is reported apart from a rejected duplicate."""

    def test_storage_failure_on_save(self, failing_context):
        changes = []
        failing_context.airlines.add_listener(changes.append)
        failing_context.storage.failing = ('insert',)

        with pytest.raises(StorageError) as exc_info:
            failing_context.airlines.save(Airline("Qantas", iata="QF", country="Australia"))

        assert not isinstance(exc_info.value, (UniquenessConflictError, CommittedWriteError))
        assert changes == []
        assert len(failing_context.airlines) == 0

    def test_duplicate_is_not_a_storage_failure(self, failing_context):
        failing_context.airlines.save(Airline("Qantas", iata="QF", country="Australia"))

        with pytest.raises(UniquenessConflictError) as exc_info:
            failing_context.airlines.save(Airline("Qantas Link", iata="QF", country="Australia"))

        assert not isinstance(exc_info.value, StorageError)


class TestFailureAfterWrite:
    """Test that a committed write is never hidden by a failing refresh."""

    def test_refresh_failure_after_insert(self, failing_context):
        airlines = failing_context.airlines
        changes = []
        airlines.add_listener(changes.append)
        failing_context.storage.failing = ('distinct_values',)

        with pytest.raises(CommittedWriteError) as exc_info:
            airlines.save(Airline("Qantas", iata="QF", country="Australia"))

        error = exc_info.value
        assert isinstance(error, StorageError)
        assert isinstance(error.__cause__, StorageError)
        assert error.entity.id == error.entity_id
        assert error.entity.name == "Qantas"
        assert [(change.kind, change.entity_id) for change in changes] == [(ChangeKind.SAVED, error.entity_id)]
        assert len(airlines) == 1

        failing_context.storage.failing = ()
        error.entity.country = "New Zealand"
        airlines.save(error.entity)

        assert len(airlines) == 1
        assert failing_context.registry.multi_select(FilterKeys.AIRLINE_NAME).options == ["Qantas"]

    def test_read_back_failure_after_insert(self, failing_context):
        changes = []
        failing_context.airlines.add_listener(changes.append)
        failing_context.storage.failing = ('get',)

        with pytest.raises(CommittedWriteError) as exc_info:
            failing_context.airlines.save(Airline("Qantas", iata="QF", country="Australia"))

        assert exc_info.value.entity.iata == "QF"
        assert changes[0].entity == exc_info.value.entity
        assert failing_context.registry.multi_select(FilterKeys.AIRLINE_NAME).options == ["Qantas"]

    def test_refresh_failure_after_delete(self, failing_context):
        stored = failing_context.airlines.save(Airline("Qantas", iata="QF", country="Australia"))
        changes = []

        def listener(change):
            changes.append(change.kind)

        failing_context.airlines.add_listener(listener, stored.id)
        failing_context.storage.failing = ('distinct_values',)

        with pytest.raises(CommittedWriteError):
            failing_context.airlines.delete(stored.id)

        assert changes == [ChangeKind.DELETED]
        assert len(failing_context.airlines) == 0
        assert not failing_context.airlines.remove_listener(listener, stored.id)

    def test_derived_listeners_still_told(self, failing_context):
        reloads = []
        failing_context.airports.add_listener(lambda change: reloads.append(change.kind))
        failing_context.storage.failing = ('distinct_values',)

        with pytest.raises(CommittedWriteError):
            failing_context.routes.save(Route("NZ", "AKL", "CHC"))

        assert reloads == [ChangeKind.RELOADED]
