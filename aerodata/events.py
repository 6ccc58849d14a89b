#!/usr/bin/env python3

"""
Listener registration and dispatch shared by stores, filters and views.

Dispatch walks a snapshot of the listeners taken when it starts, so a
listener may subscribe or unsubscribe anyone while being notified. A
listener removed during dispatch is not called afterwards, one added
during dispatch is first called on the next dispatch. A failing listener
is logged and reported back, the others still run.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, List

logger = logging.getLogger(__name__)

Listener = Callable[..., Any]


@dataclass
class ListenerFailure:
    """A listener that raised while being notified."""

    listener: Listener
    error: Exception

    def __str__(self) -> str:
        return f"{self.listener!r} failed: {self.error}"


def dispatch(listeners: Iterable[Listener], args: tuple = (),
             is_subscribed: Callable[[Listener], bool] = lambda listener: True,
             source: str = 'events') -> List[ListenerFailure]:
    """
    Call each listener in order with ``args``.

    Returns:
        One ListenerFailure per listener that raised
    """
    failures: List[ListenerFailure] = []
    for listener in list(listeners):
        if not is_subscribed(listener):
            continue
        try:
            listener(*args)
        except Exception as e:
            logger.exception(f"Listener {listener!r} of {source} failed")
            failures.append(ListenerFailure(listener, e))
    return failures


class Subscription:
    """Handle returned by ``subscribe``; ``cancel`` unsubscribes the listener."""

    def __init__(self, publisher: 'EventPublisher', listener: Listener):
        self._publisher = publisher
        self.listener = listener

    @property
    def active(self) -> bool:
        return self.listener in self._publisher

    def cancel(self) -> bool:
        return self._publisher.unsubscribe(self.listener)

    def __repr__(self) -> str:
        return f"Subscription({self._publisher.name}, {self.listener!r})"


class EventPublisher:
    """Ordered list of listeners for one source of events."""

    def __init__(self, name: str = 'events'):
        self.name = name
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> Subscription:
        """Register a listener; registering it again keeps its first position."""
        if not callable(listener):
            raise TypeError(f"Listener must be callable, got {listener!r}")
        if listener not in self._listeners:
            self._listeners.append(listener)
        return Subscription(self, listener)

    def unsubscribe(self, listener: Listener) -> bool:
        """Remove a listener; False if it was not registered."""
        try:
            self._listeners.remove(listener)
        except ValueError:
            logger.warning(f"Listener {listener!r} was not registered on {self.name}")
            return False
        return True

    @property
    def listeners(self) -> List[Listener]:
        return list(self._listeners)

    def publish(self, *args: Any) -> List[ListenerFailure]:
        return dispatch(self._listeners, args, self.__contains__, self.name)

    def clear(self) -> None:
        self._listeners.clear()

    def __contains__(self, listener: Listener) -> bool:
        return listener in self._listeners

    def __len__(self) -> int:
        return len(self._listeners)
