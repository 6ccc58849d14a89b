#!/usr/bin/env python3

import pytest

from aerodata.context import AppContext
from aerodata.filters import FilterKeys
from aerodata.models import Airline
from aerodata.paging import PagedView, PageEvent
from aerodata.storage import DatabaseStorage, StorageError


class FlakyStorage(DatabaseStorage):
    """Database storage whose queries can be made to fail."""

    fail_queries = False

    def query(self, *args, **kwargs):
        if self.fail_queries:
            raise StorageError("disk unplugged")
        return super().query(*args, **kwargs)


def two_letter_code(index):
    return chr(ord('A') + index // 26) + chr(ord('A') + index % 26)


def fill_airlines(context, count):
    for index in range(count):
        context.airlines.save(Airline(f"Airline {index:02d}", iata=two_letter_code(index),
                                      country="New Zealand" if index % 2 else "Australia"))


@pytest.fixture
def flaky_context(database_path):
    ctx = AppContext(FlakyStorage(database_path))
    yield ctx
    ctx.close()


def names(items):
    return [item.name for item in items]


class TestPagination:
    """Test the sentinel row window."""

    @pytest.mark.parametrize("total,page_size", [(12, 5), (10, 5), (7, 3), (3, 5)])
    def test_next_pages_cover_collection_once(self, context, total, page_size):
        fill_airlines(context, total)
        view = context.open_view('airline', page_size=page_size, sort_column='name')

        seen = names(view.items)
        while view.can_page_forward:
            seen.extend(names(view.next_page()))

        assert seen == [f"Airline {index:02d}" for index in range(total)]
        assert not view.can_page_forward

    def test_exactly_one_page(self, context):
        fill_airlines(context, 5)

        view = context.open_view('airline', page_size=5)

        assert len(view.items) == 5
        assert not view.can_page_forward
        assert not view.can_page_backward

    def test_one_more_than_a_page(self, context):
        fill_airlines(context, 6)

        view = context.open_view('airline', page_size=5)

        assert len(view.items) == 5
        assert view.can_page_forward

    def test_previous_page_returns_preceding_window(self, context):
        fill_airlines(context, 12)
        view = context.open_view('airline', page_size=5, sort_column='name')
        first = view.items
        second = view.next_page()

        view.next_page()
        assert view.offset == 10
        assert view.can_page_backward

        assert view.previous_page() == second
        assert view.previous_page() == first
        assert view.offset == 0
        assert not view.can_page_backward

    def test_offset_never_negative(self, context):
        fill_airlines(context, 3)
        view = context.open_view('airline', page_size=5)

        view.update(5, False, PageEvent.PREV)

        assert view.offset == 0
        assert names(view.previous_page()) == names(view.items)

    def test_next_on_last_page_does_nothing(self, context):
        fill_airlines(context, 3)
        view = context.open_view('airline', page_size=5)

        assert view.next_page() == view.items
        assert view.offset == 0

    def test_empty_store(self, context):
        view = context.open_view('route')

        assert view.items == []
        assert not view.can_page_forward
        assert list(view.to_dataframe().columns)[:2] == ['id', 'airline']

    def test_items_is_a_copy(self, context):
        fill_airlines(context, 3)
        view = context.open_view('airline')

        view.items.clear()

        assert len(view) == 3


class TestViewNotifications:
    """Test views following data and filter changes."""

    def test_data_change_refreshes_current_page(self, context):
        fill_airlines(context, 4)
        view = context.open_view('airline', page_size=5, sort_column='name')

        context.airlines.save(Airline("Aardvark Air", iata="ZZ", country="Australia"))

        assert names(view.items)[0] == "Aardvark Air"
        assert len(view.items) == 5

    def test_refresh_steps_back_when_page_emptied(self, context):
        fill_airlines(context, 12)
        view = context.open_view('airline', page_size=5, sort_column='name')
        view.next_page()
        view.next_page()
        assert view.offset == 10

        for airline in view.items:
            context.storage.delete('airlines', airline.id)
        view.refresh()

        assert view.offset == 5
        assert names(view.items) == [f"Airline {index:02d}" for index in range(5, 10)]
        assert not view.can_page_forward

    def test_filter_change_goes_back_to_first_page(self, context):
        fill_airlines(context, 12)
        view = context.open_view('airline', page_size=5, sort_column='name')
        view.next_page()

        context.registry.multi_select(FilterKeys.AIRLINE_COUNTRY).select_option("Australia")
        context.registry.notify_all()

        assert view.offset == 0
        assert names(view.items) == [f"Airline {index:02d}" for index in range(0, 10, 2)]
        assert view.can_page_forward

    def test_detached_view_stops_following(self, context):
        fill_airlines(context, 2)
        view = context.open_view('airline')
        before = view.items

        view.detach()
        context.airlines.save(Airline("Aardvark Air", iata="ZZ", country="Australia"))

        assert view.items == before
        assert context.airlines.listener_count == 0
        assert context.registry.listener_count == 0

    def test_context_manager(self, context):
        fill_airlines(context, 2)

        with PagedView(context.airlines, page_size=10) as view:
            assert view.is_attached
            assert len(view) == 2

        assert not view.is_attached

    def test_consumer_listener(self, context):
        view = PagedView(context.airlines)
        seen = []
        view.add_listener(lambda v: seen.append(v.offset))

        view.attach()
        context.airlines.save(Airline("Aardvark Air", iata="ZZ", country="Australia"))

        assert seen == [0, 0, 0]
        view.detach()


class TestViewSettings:
    """Test sort and page size changes."""

    def test_set_sort(self, context):
        fill_airlines(context, 3)
        view = context.open_view('airline', sort_column='name')

        view.set_sort('name', 'DESC')

        assert names(view.items) == ["Airline 02", "Airline 01", "Airline 00"]

    def test_bad_sort_column_keeps_previous_sort(self, context):
        fill_airlines(context, 3)
        view = context.open_view('airline', sort_column='name')

        with pytest.raises(ValueError):
            view.set_sort('altitude')

        assert view.sort_column == 'name'
        assert names(view.items) == ["Airline 00", "Airline 01", "Airline 02"]

    def test_set_page_size(self, context):
        fill_airlines(context, 6)
        view = context.open_view('airline', page_size=2)

        view.set_page_size(4)

        assert view.page_size == 4
        assert len(view.items) == 4

    def test_page_size_is_clamped(self, context):
        view = PagedView(context.airlines, page_size=0)

        assert view.page_size == 1

    def test_to_dataframe(self, context):
        fill_airlines(context, 3)
        view = context.open_view('airline', page_size=2, sort_column='name')

        frame = view.to_dataframe()

        assert len(frame) == 2
        assert list(frame['name']) == ["Airline 00", "Airline 01"]


class TestStorageFailures:
    """Test that a failing store never blanks the view."""

    def test_failed_fetch_keeps_window(self, flaky_context):
        fill_airlines(flaky_context, 8)
        view = flaky_context.open_view('airline', page_size=5, sort_column='name')
        before = view.items

        flaky_context.storage.fail_queries = True
        with pytest.raises(StorageError):
            view.next_page()

        assert view.items == before
        assert view.offset == 0
        assert view.can_page_forward
        assert isinstance(view.last_error, StorageError)

        flaky_context.storage.fail_queries = False
        view.next_page()
        assert view.offset == 5
        assert view.last_error is None

    def test_failed_sort_restores_sort(self, flaky_context):
        fill_airlines(flaky_context, 3)
        view = flaky_context.open_view('airline', sort_column='name')

        flaky_context.storage.fail_queries = True
        with pytest.raises(StorageError):
            view.set_sort('country')

        assert view.sort_column == 'name'

    def test_failure_during_notification_is_isolated(self, flaky_context):
        fill_airlines(flaky_context, 3)
        view = flaky_context.open_view('airline', sort_column='name')
        before = view.items

        flaky_context.storage.fail_queries = True
        flaky_context.registry.notify_all()

        assert view.items == before
        assert isinstance(view.last_error, StorageError)
