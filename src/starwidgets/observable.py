"""
Observable Values

A single mutable value with synchronous, ordered change notification.

Every write notifies every subscriber, including writes of an unchanged
value. Widgets rely on this to re-run their change hooks (see
``Observable.notify`` and ``Widget.trigger``).
"""

import logging
import threading
from collections import deque
from dataclasses import dataclass, field
from itertools import count
from typing import Any, Callable, Generic, List, TypeVar, Union

from .errors import ObservableClosedError

logger = logging.getLogger(__name__)

T = TypeVar('T')
U = TypeVar('U')

_subscription_ids = count()


@dataclass(frozen=True, eq=False)
class Subscription:
    """Handle returned by ``Observable.subscribe``."""
    observable: 'Observable'
    callback: Callable[[Any], None]
    id: int = field(default_factory=lambda: next(_subscription_ids))

    def cancel(self) -> None:
        """Stop delivering notifications to the callback."""
        self.observable.unsubscribe(self)

    @property
    def active(self) -> bool:
        return self in self.observable.subscriptions


class Observable(Generic[T]):
    """
    Mutable value with an ordered list of subscribers.

    Writes are serialized per observable: a ``set`` runs its whole
    notification chain before the next ``set`` starts. A ``set`` issued by a
    subscriber of the same observable is queued and delivered once the
    current chain has finished.
    """

    def __init__(self, value: T = None):
        self._value = value
        self._subscriptions: List[Subscription] = []
        self._lock = threading.RLock()
        self._pending: deque = deque()
        self._notifying = False
        self._closed = False

    def __repr__(self) -> str:
        return f"Observable({self._value!r})"

    def get(self) -> T:
        return self._value

    def set(self, value: T) -> None:
        """Replace the value and notify all subscribers in subscription order."""
        if self._closed:
            raise ObservableClosedError("cannot set a closed observable")
        with self._lock:
            self._pending.append(value)
            if self._notifying:
                return
            self._notifying = True
            try:
                while self._pending:
                    self._value = self._pending.popleft()
                    for subscription in list(self._subscriptions):
                        subscription.callback(self._value)
            except Exception:
                dropped = len(self._pending)
                self._pending.clear()
                if dropped:
                    logger.debug(f"Discarded {dropped} queued writes after subscriber failure")
                raise
            finally:
                self._notifying = False

    @property
    def value(self) -> T:
        return self.get()

    @value.setter
    def value(self, new_value: T) -> None:
        self.set(new_value)

    def notify(self) -> None:
        """Re-send the current value to every subscriber."""
        self.set(self._value)

    def subscribe(self, callback: Callable[[T], None]) -> Subscription:
        subscription = Subscription(self, callback)
        with self._lock:
            self._subscriptions.append(subscription)
        return subscription

    def unsubscribe(self, handle: Union[Subscription, Callable[[T], None]]) -> None:
        """Remove a subscription, given its handle or its callback."""
        with self._lock:
            for subscription in self._subscriptions:
                if subscription is handle or subscription.callback == handle:
                    self._subscriptions.remove(subscription)
                    return

    @property
    def subscriptions(self) -> List[Subscription]:
        return list(self._subscriptions)

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Drop all subscribers and refuse further writes."""
        with self._lock:
            self._closed = True
            self._subscriptions.clear()
            self._pending.clear()


def as_observable(value: Union[T, Observable]) -> Observable:
    """Return ``value`` if it already is an Observable, else wrap it."""
    if isinstance(value, Observable):
        return value
    return Observable(value)


def lift(func: Callable[..., U], *sources: Observable) -> Observable:
    """
    Derive an observable from one or more sources.

    The result holds ``func(*values)`` and is recomputed on every write to
    any source.
    """
    if not sources:
        raise TypeError("lift() needs at least one source observable")
    derived: Observable = Observable(func(*(s.get() for s in sources)))

    def recompute(_value):
        derived.set(func(*(s.get() for s in sources)))

    for source in sources:
        source.subscribe(recompute)
    return derived


def connect(source: Observable, target: Observable) -> Subscription:
    """Forward every value written to ``source`` into ``target``."""
    return source.subscribe(target.set)
