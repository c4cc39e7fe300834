"""mapped_disposable: keyed containers of disposable resources."""

from importlib.metadata import version as _version

__version__ = _version("mapped-disposable")

from mapped_disposable.disposable import (
    CompositeDisposable,
    Disposable,
    DisposableLike,
    InvalidValueError,
    dispose_all,
    is_disposable,
)
from mapped_disposable.mapped import MappedDisposable
# textual NOT auto-imported — opt-in only

__all__ = [
    "CompositeDisposable",
    "Disposable",
    "DisposableLike",
    "InvalidValueError",
    "MappedDisposable",
    "dispose_all",
    "is_disposable",
]
