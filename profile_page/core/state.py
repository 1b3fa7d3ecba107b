from collections.abc import Callable
from typing import Any
from typing import Generic
from typing import TypeVar


T = TypeVar("T")

Listener = Callable[[], None]


class State(Generic[T]):
    """Observable value holder.

    Listeners are notified after every `set` that changes the value.
    """

    def __init__(self, value: T) -> None:
        self._value = value
        self._listeners: list[Listener] = []

    def get(self) -> T:
        return self._value

    def set(self, value: T) -> None:
        if value == self._value:
            return
        self._value = value
        for listener in list(self._listeners):
            listener()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register `listener` and return a callable that removes it."""

        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe


class Derived(State[T]):
    """Value computed from other states, recomputed when any of them changes."""

    def __init__(self, compute: Callable[[], T], *sources: State[Any]) -> None:
        self._compute = compute
        super().__init__(compute())
        for source in sources:
            source.subscribe(self._refresh)

    def _refresh(self) -> None:
        super().set(self._compute())

    def set(self, value: T) -> None:
        raise AttributeError("Derived values cannot be set directly")
