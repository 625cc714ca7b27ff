"""
Fluent wrapper around the lazy operations in :mod:`lazyseq.iterable`.
"""

from typing import (
    Any, Callable, Iterable, Iterator, List, Optional, Tuple, TypeVar, Union
)

from lazyseq import iterable
from lazyseq.cursors import SkipCursor, TakeCursor

T = TypeVar('T')
U = TypeVar('U')


class Seq(Iterable[T]):
    """
    A lazy sequence with chainable operations.

    A ``Seq`` over a re-iterable source (a list, a range, a callable
    returning a new iterator) can be walked any number of times; a ``Seq``
    over an iterator is one-shot, like the iterator itself.
    """

    def __init__(self, source: Union[Iterable[T], Iterator[T], Callable[[], Iterator[T]]]):
        """
        Initialize sequence.

        Args:
            source: Data source (iterable, iterator, or callable returning iterator)
        """
        if isinstance(source, Seq):
            self._source = source._source
            self._indexable = source._indexable
        elif hasattr(source, "__iter__"):
            self._source = lambda: iter(source)
            self._indexable = source if iterable.is_indexable(source) else None
        elif callable(source):
            self._source = source
            self._indexable = None
        else:
            raise TypeError("Source must be iterable or callable")

    def __iter__(self) -> Iterator[T]:
        return iter(self._source())

    # Lazy operators

    def map(self, func: Callable[[T], U]) -> 'Seq[U]':
        """Apply function to each element."""
        return Seq(lambda: iterable.map(self, func))

    def filter(self, predicate: Callable[[T], bool]) -> 'Seq[T]':
        """Keep only elements matching predicate."""
        return Seq(lambda: iterable.filter(self, predicate))

    def concat(self, *others: Iterable[T]) -> 'Seq[T]':
        """Append other sources after this one."""
        return Seq(lambda: iterable.concat(self, *others))

    def flatten(self) -> 'Seq[Any]':
        """Flatten one level of nesting."""
        return Seq(lambda: iterable.concat_nested(self))

    def slice(self, start: Optional[int], stop: Optional[int] = None) -> 'Seq[T]':
        """
        Elements ``start`` up to ``stop`` with list slicing semantics.

        Sources that cannot be indexed are collected into a list on the
        first advance, since negative bounds need the length.
        """
        def factory():
            indexable = self._indexable
            if indexable is None:
                indexable = self.collect()
            return iterable.slice(indexable, start, stop)

        return Seq(lambda: _Deferred(factory))

    def take(self, n: int) -> 'Seq[T]':
        """Take first n elements."""
        return Seq(lambda: TakeCursor(self, n))

    def skip(self, n: int) -> 'Seq[T]':
        """Skip first n elements."""
        return Seq(lambda: SkipCursor(self, n))

    # Terminal operators

    def collect(self) -> List[T]:
        """Collect all elements into a list."""
        result: List[T] = []
        iterable.for_each(self, result.append)
        return result

    def reduce(self, func: Callable[[U, T], U], initial: U) -> U:
        """Reduce sequence to single value."""
        return iterable.reduce(self, func, initial)

    def count(self) -> int:
        """Count elements."""
        return iterable.length(self)

    def first(self, default: Optional[T] = None) -> Optional[T]:
        """Get first element."""
        return iterable.first(self, default)

    def is_empty(self) -> bool:
        return iterable.is_empty(self)

    def some(self, predicate: Callable[[T], bool]) -> bool:
        return iterable.some(self, predicate)

    def every(self, predicate: Callable[[T], bool]) -> bool:
        return iterable.every(self, predicate)

    def find(self, predicate: Callable[[T], bool], default: Optional[T] = None) -> Optional[T]:
        return iterable.find(self, predicate, default)

    def foreach(self, func: Callable[[T], Any]) -> None:
        """Apply function to each element."""
        iterable.for_each(self, func)

    def consume(self, at_most: float = float('inf')) -> Tuple[List[T], 'Seq[T]']:
        """Split off up to ``at_most`` elements; see :func:`lazyseq.iterable.consume`."""
        consumed, rest = iterable.consume(self, at_most)
        if rest is self:
            return consumed, self
        return consumed, Seq(rest)

    # Factory methods

    @classmethod
    def empty(cls) -> 'Seq[Any]':
        return cls(iterable.empty())

    @classmethod
    def single(cls, value: T) -> 'Seq[T]':
        """Sequence of exactly one element."""
        return cls(lambda: iterable.single(value))

    @classmethod
    def from_iterable(cls, source: Optional[Iterable[T]]) -> 'Seq[T]':
        """Create sequence from iterable; ``None`` gives the empty sequence."""
        return cls(iterable.from_(source))

    @classmethod
    def range(cls, *args) -> 'Seq[int]':
        """Create sequence of integers."""
        return cls(range(*args))

    @classmethod
    def infinite(cls, func: Callable[[], T]) -> 'Seq[T]':
        """Create infinite sequence."""
        def generator():
            while True:
                yield func()
        return cls(generator)


class _Deferred(Iterator[T]):
    """Build the real cursor on the first advance."""

    def __init__(self, factory: Callable[[], Iterator[T]]):
        self._factory = factory
        self._iterator: Optional[Iterator[T]] = None

    def __next__(self) -> T:
        if self._iterator is None:
            self._iterator = self._factory()
        return next(self._iterator)
