"""MappedDisposable — a dict of CompositeDisposables with cascading disposal.

Each key owns a CompositeDisposable. Disposing one key tears down that
key's members; disposing the whole map tears down every entry, and also
any key that is itself disposable.

Removal paths never dispose:
- set(key, value) replaces an entry, leaving the old one alive.
- delete(key) drops the entry.
- remove(key, *members) drops members from the entry.

A MappedDisposable is itself disposable, so maps can be members of
composites or of other maps.
"""

from __future__ import annotations

import logging
from typing import Hashable, Iterable, Iterator, Mapping, TypeVar

from mapped_disposable.disposable import (
    CompositeDisposable,
    DisposableLike,
    InvalidValueError,
    dispose_all,
    is_disposable,
)

logger = logging.getLogger("mapped_disposable.mapped")

T = TypeVar("T")


def _as_composite(value: object) -> CompositeDisposable:
    """Store composites by reference, wrap anything else that is disposable."""
    if isinstance(value, CompositeDisposable):
        return value
    if not is_disposable(value):
        raise InvalidValueError()
    return CompositeDisposable(value)


class MappedDisposable:
    """Map of keys to CompositeDisposables.

    Single-threaded. A cleanup action that calls back into the same map for
    the entry being torn down sees an undefined ordering.

    Usage:
        subscriptions = MappedDisposable()
        subscriptions.add(editor, on_change, on_save)
        subscriptions.dispose(editor)   # tears down editor's members only
        subscriptions.dispose()         # tears down everything
    """

    __slots__ = ("_entries", "_disposed")

    def __init__(
        self,
        entries: Iterable[tuple[Hashable, object]] | Mapping[Hashable, object] | None = None,
    ) -> None:
        self._entries: dict[Hashable, CompositeDisposable] = {}
        self._disposed = False
        if entries is None:
            return
        if isinstance(entries, Mapping):
            entries = entries.items()
        for key, value in entries:
            self._entries[key] = _as_composite(value)

    @property
    def disposed(self) -> bool:
        return self._disposed

    @property
    def size(self) -> int:
        return len(self._entries)

    # --- Queries ---

    def get(self, key: Hashable, default: T | None = None) -> CompositeDisposable | T | None:
        return self._entries.get(key, default)

    def has(self, key: Hashable) -> bool:
        return key in self._entries

    def keys(self):
        return self._entries.keys()

    def values(self):
        return self._entries.values()

    def items(self):
        return self._entries.items()

    # --- Mutations ---

    def set(self, key: Hashable, value: object) -> None:
        """Install value for key. A previous entry is replaced, not disposed."""
        composite = _as_composite(value)
        if self._disposed:
            logger.debug("set(%r) on disposed map; disposing value", key)
            composite.dispose()
            return
        self._entries[key] = composite

    def add(self, key: Hashable, *disposables: DisposableLike) -> None:
        """Add members to key's composite, creating the entry if needed."""
        for disposable in disposables:
            if not is_disposable(disposable):
                raise InvalidValueError()
        if self._disposed:
            logger.debug("add(%r) on disposed map; disposing %d value(s)", key, len(disposables))
            dispose_all(disposables)
            return
        composite = self._entries.get(key)
        if composite is None:
            composite = self._entries[key] = CompositeDisposable()
        composite.add(*disposables)

    def remove(self, key: Hashable, *disposables: DisposableLike) -> None:
        """Drop members from key's composite without disposing them."""
        composite = self._entries.get(key)
        if composite is not None:
            composite.remove(*disposables)

    def delete(self, key: Hashable) -> bool:
        """Drop key's entry without disposing it. Returns whether it existed."""
        return self._entries.pop(key, None) is not None

    # --- Disposal ---

    def dispose(self, *keys: Hashable) -> None:
        """Dispose the given keys' entries, or the whole map when called without keys.

        Per-key disposal removes those entries and leaves the map active. Keys
        are only disposed themselves when the whole map is disposed.

        Every targeted entry is torn down even if a cleanup action raises;
        the first error is re-raised afterwards.
        """
        if self._disposed:
            return
        if keys:
            targets = []
            for key in keys:
                composite = self._entries.pop(key, None)
                if composite is not None:
                    targets.append(composite)
            dispose_all(targets)
            return

        entries = list(self._entries.items())
        logger.debug("Disposing %d entries", len(entries))
        self._entries.clear()
        self._disposed = True
        targets = []
        for key, composite in entries:
            targets.append(composite)
            if is_disposable(key):
                targets.append(key)
        dispose_all(targets)

    # --- dict protocol ---

    def __getitem__(self, key: Hashable) -> CompositeDisposable:
        return self._entries[key]

    def __setitem__(self, key: Hashable, value: object) -> None:
        self.set(key, value)

    def __delitem__(self, key: Hashable) -> None:
        if not self.delete(key):
            raise KeyError(key)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Hashable]:
        return iter(self._entries)

    def __enter__(self) -> MappedDisposable:
        return self

    def __exit__(self, *exc_info) -> None:
        self.dispose()

    def __repr__(self) -> str:
        state = "disposed" if self._disposed else "active"
        return f"MappedDisposable({len(self._entries)} entries, {state})"
