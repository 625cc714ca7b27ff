"""
Cursors: the explicit state machines behind the lazy combinators.

Every cursor owns its upstream iterator and keeps its progress in plain
attributes; ``__next__`` is the only transition. Upstream sources are not
touched until the first advance, and an exhausted cursor stays exhausted.
"""

from abc import abstractmethod
from typing import Callable, Generic, Iterable, Iterator, Optional, Sequence, TypeVar

T = TypeVar('T')
U = TypeVar('U')


def _call(func: Callable, item):
    # Only upstream exhaustion may end a cursor
    try:
        return func(item)
    except StopIteration as exc:
        raise RuntimeError(f"{func!r} raised StopIteration") from exc


class Cursor(Iterator[T]):
    """Base class for one-shot cursors."""

    _done = False

    def __iter__(self) -> 'Cursor[T]':
        return self

    def __next__(self) -> T:
        if self._done:
            raise StopIteration
        try:
            return self.advance()
        except StopIteration:
            self._finish()
            raise

    @abstractmethod
    def advance(self) -> T:
        """Produce the next value or raise StopIteration."""
        pass

    def _finish(self) -> None:
        self._done = True


class SingleCursor(Cursor[T]):
    """Yield one value, then complete."""

    def __init__(self, value: T):
        self._value = value

    def advance(self) -> T:
        value = self._value
        self._done = True
        self._value = None
        return value


class FilterCursor(Cursor[T]):
    """Pull from upstream until an element passes the predicate."""

    def __init__(self, source: Iterable[T], predicate: Callable[[T], bool]):
        self._source = source
        self._iterator: Optional[Iterator[T]] = None
        self.predicate = predicate

    def advance(self) -> T:
        if self._iterator is None:
            self._iterator = iter(self._source)
        for item in self._iterator:
            if _call(self.predicate, item):
                return item
        raise StopIteration

    def _finish(self) -> None:
        super()._finish()
        self._source = self._iterator = None


class MapCursor(Cursor[U]):
    """Pull exactly one element from upstream per advance and transform it."""

    def __init__(self, source: Iterable[T], func: Callable[[T], U]):
        self._source = source
        self._iterator: Optional[Iterator[T]] = None
        self.func = func

    def advance(self) -> U:
        if self._iterator is None:
            self._iterator = iter(self._source)
        return _call(self.func, next(self._iterator))

    def _finish(self) -> None:
        super()._finish()
        self._source = self._iterator = None


class ConcatCursor(Cursor[T]):
    """Exhaust each inner source in order; exactly one level is flattened."""

    def __init__(self, sources: Iterable[Iterable[T]]):
        self._sources = sources
        self._outer: Optional[Iterator[Iterable[T]]] = None
        self._inner: Optional[Iterator[T]] = None

    def advance(self) -> T:
        if self._outer is None:
            self._outer = iter(self._sources)
        while True:
            if self._inner is not None:
                try:
                    return next(self._inner)
                except StopIteration:
                    self._inner = None
            # Raises StopIteration once every source is exhausted
            self._inner = iter(next(self._outer))

    def _finish(self) -> None:
        super()._finish()
        self._sources = self._outer = self._inner = None


class SliceCursor(Cursor[T]):
    """
    Walk ``indexable[start:stop]`` by index.

    Bounds follow list slicing: negative values count from the end and
    everything is clamped to ``[0, len]``. ``len`` is read once, on the
    first advance.
    """

    def __init__(self, indexable: Sequence[T], start: Optional[int], stop: Optional[int] = None):
        self._indexable = indexable
        self.start = start
        self.stop = stop
        self._indices: Optional[Iterator[int]] = None

    def advance(self) -> T:
        if self._indices is None:
            length = len(self._indexable)
            self._indices = iter(range(*slice(self.start, self.stop).indices(length)))
        return self._indexable[next(self._indices)]

    def _finish(self) -> None:
        super()._finish()
        self._indexable = self._indices = None


class TakeCursor(Cursor[T]):
    """Yield at most ``n`` elements from upstream."""

    def __init__(self, source: Iterable[T], n: int):
        self._source = source
        self._iterator: Optional[Iterator[T]] = None
        self.remaining = n

    def advance(self) -> T:
        if self.remaining <= 0:
            raise StopIteration
        if self._iterator is None:
            self._iterator = iter(self._source)
        item = next(self._iterator)
        self.remaining -= 1
        return item

    def _finish(self) -> None:
        super()._finish()
        self._source = self._iterator = None


class SkipCursor(Cursor[T]):
    """Drop the first ``n`` elements from upstream, then pass the rest through."""

    def __init__(self, source: Iterable[T], n: int):
        self._source = source
        self._iterator: Optional[Iterator[T]] = None
        self.n = n

    def advance(self) -> T:
        if self._iterator is None:
            self._iterator = iter(self._source)
            for _ in range(self.n):
                next(self._iterator)
        return next(self._iterator)

    def _finish(self) -> None:
        super()._finish()
        self._source = self._iterator = None


class Remainder(Generic[T]):
    """
    The rest of a partially consumed source.

    Every ``iter()`` hands back the same, already advanced cursor; the
    remainder is never rewound.
    """

    def __init__(self, iterator: Iterator[T]):
        self._iterator = iterator

    def __iter__(self) -> Iterator[T]:
        return self._iterator

    def __repr__(self) -> str:
        return f"Remainder({self._iterator!r})"
