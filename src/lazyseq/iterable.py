"""
Lazy operations over any Python iterable.

The functions here are meant to be used through the module namespace
(``from lazyseq import iterable; iterable.filter(...)``); several of them
deliberately share names with builtins.

Transform and combination functions are lazy: they return a one-shot cursor
and neither touch their source nor call any callback until that cursor is
advanced. ``reduce``, ``for_each``, ``length`` and the prefix half of
``consume`` are eager. Callback exceptions propagate unchanged from the
advance that triggered them.
"""

import math
import logging
from collections.abc import Iterable as IterableABC
from collections.abc import Mapping
from typing import Any, Callable, Iterable, Iterator, List, Optional, Sequence, Tuple, TypeVar

from lazyseq.cursors import (
    ConcatCursor, FilterCursor, MapCursor, Remainder, SingleCursor, SliceCursor
)
from lazyseq.memory import MaterializationGuard

T = TypeVar('T')
U = TypeVar('U')

logger = logging.getLogger(__name__)

# The shared empty sequence: immutable and re-iterable
EMPTY: Tuple[Any, ...] = ()

_MISSING = object()


def is_(thing: Any) -> bool:
    """Whether ``thing`` can produce a cursor. Text and bytes values do not count."""
    return isinstance(thing, IterableABC) and not isinstance(thing, (str, bytes, bytearray))


def is_indexable(thing: Any) -> bool:
    """Whether ``thing`` has a length and integer indexing, as ``slice`` needs."""
    return (hasattr(thing, "__len__") and hasattr(thing, "__getitem__")
            and not isinstance(thing, Mapping))


def empty() -> Iterable[Any]:
    return EMPTY


def single(value: T) -> Iterator[T]:
    """A fresh one-shot sequence yielding ``value`` once."""
    return SingleCursor(value)


def from_(source: Optional[Iterable[T]]) -> Iterable[T]:
    """``source`` itself, or the shared empty sequence for ``None``."""
    return EMPTY if source is None else source


def is_empty(source: Optional[Iterable[Any]]) -> bool:
    """
    Whether ``source`` is ``None`` or yields nothing.

    This advances a cursor once: on a one-shot source the first element
    is consumed by the check.
    """
    return source is None or next(iter(source), _MISSING) is _MISSING


def first(source: Iterable[T], default: Optional[T] = None) -> Optional[T]:
    """The first element, or ``default`` if there is none."""
    return next(iter(source), default)


def some(source: Iterable[T], predicate: Callable[[T], bool]) -> bool:
    for item in source:
        if predicate(item):
            return True
    return False


def every(source: Iterable[T], predicate: Callable[[T], bool]) -> bool:
    for item in source:
        if not predicate(item):
            return False
    return True


def find(source: Iterable[T], predicate: Callable[[T], bool],
         default: Optional[T] = None) -> Optional[T]:
    """The first element matching ``predicate``, or ``default``."""
    for item in source:
        if predicate(item):
            return item
    return default


def filter(source: Iterable[T], predicate: Callable[[T], bool]) -> Iterator[T]:
    return FilterCursor(source, predicate)


def map(source: Iterable[T], func: Callable[[T], U]) -> Iterator[U]:
    return MapCursor(source, func)


def concat(*sources: Iterable[T]) -> Iterator[T]:
    """Chain ``sources`` in argument order."""
    return ConcatCursor(sources)


def concat_nested(sources: Iterable[Iterable[T]]) -> Iterator[T]:
    """Chain the sources yielded by ``sources``, flattening exactly one level."""
    return ConcatCursor(sources)


def reduce(source: Iterable[T], reducer: Callable[[U, T], U], initial: U) -> U:
    """
    Eager left fold.

    Never returns for an infinite source; memory pressure is reported
    to the memory log while it runs.
    """
    guard = MaterializationGuard("reduce")
    value = initial
    for item in source:
        value = reducer(value, item)
        guard.tick()
    return value


def for_each(source: Iterable[T], func: Callable[[T], Any]) -> None:
    guard = MaterializationGuard("for_each")
    for item in source:
        func(item)
        guard.tick()


def length(source: Iterable[Any]) -> int:
    """Count the elements of ``source``, consuming it."""
    guard = MaterializationGuard("length")
    for _ in source:
        guard.tick()
    return guard.count


def slice(indexable: Sequence[T], start: Optional[int], stop: Optional[int] = None) -> Iterator[T]:
    """
    Lazily yield ``indexable[start:stop]`` with list slicing semantics.

    Args:
        indexable: A sequence supporting ``len`` and integer indexing
        start: First index; negative values count from the end
        stop: End index, exclusive; ``None`` means the length
    """
    if not is_indexable(indexable):
        raise TypeError(f"slice() requires an indexable sequence, got {type(indexable).__name__}")
    return SliceCursor(indexable, start, stop)


def consume(source: Iterable[T], at_most: float = math.inf) -> Tuple[List[T], Iterable[T]]:
    """
    Consume up to ``at_most`` elements.

    Returns the consumed elements and an iterable for the rest. With
    ``at_most == 0`` the original ``source`` is returned untouched. When
    ``source`` runs out first, the rest is the shared empty sequence;
    otherwise it continues the same cursor the prefix was read from.
    """
    consumed: List[T] = []

    if at_most == 0:
        return consumed, source

    iterator = iter(source)
    guard = MaterializationGuard("consume")

    while len(consumed) < at_most:
        item = next(iterator, _MISSING)
        if item is _MISSING:
            logger.debug("consume: source exhausted after %d elements", len(consumed))
            return consumed, EMPTY
        consumed.append(item)
        guard.tick()

    logger.debug("consume: took %d elements, returning remainder", len(consumed))
    return consumed, Remainder(iterator)
