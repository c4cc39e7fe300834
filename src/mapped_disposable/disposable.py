"""Disposables — values that own a cleanup action.

A Disposable runs its action at most once. A CompositeDisposable groups
disposables so they can be torn down as a unit. Anything with a callable
.dispose() is accepted as a member, including CompositeDisposables and
MappedDisposables, so groups nest arbitrarily deep.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable, Iterator, Protocol, runtime_checkable

logger = logging.getLogger("mapped_disposable.disposable")


class InvalidValueError(TypeError):
    """Raised when a value without a .dispose() method is offered as a disposable."""

    def __init__(self, message: str = "Value must have a .dispose() method") -> None:
        super().__init__(message)


@runtime_checkable
class DisposableLike(Protocol):
    def dispose(self) -> None: ...


def is_disposable(value: object) -> bool:
    """Does value expose a callable .dispose()?

    Classes are rejected: their dispose attribute is an unbound function.
    """
    if isinstance(value, type):
        return False
    return callable(getattr(value, "dispose", None))


def _check(values: tuple) -> None:
    for value in values:
        if not is_disposable(value):
            raise InvalidValueError()


class Disposable:
    """Runs an optional action the first time it is disposed.

    Usage:
        closed = []
        d = Disposable(lambda: closed.append(True))
        d.dispose()
        d.dispose()
        # closed == [True]
    """

    __slots__ = ("_action", "_disposed")

    def __init__(self, action: Callable[[], object] | None = None) -> None:
        self._action = action
        self._disposed = False

    @property
    def disposed(self) -> bool:
        return self._disposed

    def dispose(self) -> None:
        if self._disposed:
            return
        # Flag first so an action that raises is not re-run by a retry.
        self._disposed = True
        action, self._action = self._action, None
        if action is not None:
            action()

    def __enter__(self) -> Disposable:
        return self

    def __exit__(self, *exc_info) -> None:
        self.dispose()

    def __repr__(self) -> str:
        state = "disposed" if self._disposed else "active"
        return f"Disposable({state})"


def dispose_all(disposables: Iterable[DisposableLike]) -> None:
    """Dispose every item, even when some raise.

    The first error is re-raised once all items have been visited; later
    ones are logged.
    """
    error: BaseException | None = None
    for disposable in disposables:
        try:
            disposable.dispose()
        except Exception as exc:
            if error is None:
                error = exc
            else:
                logger.exception("Error while disposing %r", disposable)
    if error is not None:
        raise error


class CompositeDisposable:
    """A mutable group of disposables, disposed as a unit.

    Members are held by identity, so equal-but-distinct members are kept
    apart and unhashable members are accepted. Removing a member never
    disposes it. Members added after the composite is disposed are
    disposed on the spot.
    """

    __slots__ = ("_disposables", "_disposed")

    def __init__(self, *disposables: DisposableLike) -> None:
        # id(member) -> member; holding the member keeps its id stable.
        self._disposables: dict[int, DisposableLike] = {}
        self._disposed = False
        self.add(*disposables)

    @property
    def disposed(self) -> bool:
        return self._disposed

    @property
    def disposables(self) -> tuple[DisposableLike, ...]:
        """Current members in insertion order. Empty once disposed."""
        return tuple(self._disposables.values())

    def add(self, *disposables: DisposableLike) -> None:
        """Add members. Raises InvalidValueError before adding anything if one is not disposable."""
        _check(disposables)
        if self._disposed:
            dispose_all(disposables)
            return
        for disposable in disposables:
            self._disposables[id(disposable)] = disposable

    def remove(self, *disposables: DisposableLike) -> None:
        """Drop members without disposing them. Unknown members are ignored."""
        for disposable in disposables:
            if self._disposables.get(id(disposable)) is disposable:
                del self._disposables[id(disposable)]

    delete = remove

    def clear(self) -> None:
        """Drop every member without disposing it."""
        self._disposables.clear()

    def dispose(self) -> None:
        """Dispose every member, then empty the group. Idempotent.

        A member that raises does not stop the others from being disposed.
        """
        if self._disposed:
            return
        self._disposed = True
        members = list(self._disposables.values())
        self._disposables.clear()
        dispose_all(members)

    def __len__(self) -> int:
        return len(self._disposables)

    def __contains__(self, disposable: object) -> bool:
        return self._disposables.get(id(disposable)) is disposable

    def __iter__(self) -> Iterator[DisposableLike]:
        return iter(list(self._disposables.values()))

    def __enter__(self) -> CompositeDisposable:
        return self

    def __exit__(self, *exc_info) -> None:
        self.dispose()

    def __repr__(self) -> str:
        state = "disposed" if self._disposed else "active"
        return f"CompositeDisposable({len(self._disposables)} members, {state})"
