"""Textual integration for mapped_disposable. Opt-in — requires textual.

Textual coupling is isolated in this module; the core stays agnostic.

Usage:
    class Sidebar(DisposablesMixin, Static):
        def on_mount(self) -> None:
            self.disposables.add("timer", Disposable(self.set_interval(1, self.tick).stop))

The map is disposed when Textual delivers the widget's Unmount event.
"""

import logging

from textual import events

from mapped_disposable.mapped import MappedDisposable

logger = logging.getLogger("mapped_disposable.textual")


class DisposablesMixin:
    """Gives a Textual widget a MappedDisposable that lives as long as it is mounted.

    List the mixin before the Widget base so Textual dispatches its
    on_unmount alongside the widget's own handlers.
    """

    _mapped_disposables: MappedDisposable | None = None

    @property
    def disposables(self) -> MappedDisposable:
        """The widget's map, created on first access. Replaced after an unmount."""
        if self._mapped_disposables is None or self._mapped_disposables.disposed:
            self._mapped_disposables = MappedDisposable()
        return self._mapped_disposables

    def on_unmount(self, event: events.Unmount) -> None:
        mapped = self._mapped_disposables
        if mapped is None:
            return
        logger.debug("Unmounting %r: disposing %d entries", self, len(mapped))
        mapped.dispose()
