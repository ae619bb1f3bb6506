import functools
import inspect
import logging
import math
from collections import abc
from typing import Any, Callable, Generic, Iterable, Iterator, List, Optional, Set, Tuple, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
U = TypeVar("U")

_MISSING = object()


def is_iterable(value) -> bool:
    """
    Return True if value is a nested sequence rather than a scalar element.
    str, bytes and bytearray are scalars. Mappings are iterable, so a dict
    contributes its keys, like a JS Map rather than a plain object.
    """
    return isinstance(value, abc.Iterable) and not isinstance(value, (str, bytes, bytearray))


def _accepts_index(fn) -> bool:
    # only a required third positional parameter receives the index;
    # builtins without a signature get the two-argument form
    try:
        params = inspect.signature(fn).parameters.values()
    except (TypeError, ValueError):
        return False
    positional = 0
    for param in params:
        if param.kind is param.VAR_POSITIONAL:
            return True
        if param.kind in (param.POSITIONAL_ONLY, param.POSITIONAL_OR_KEYWORD) and param.default is param.empty:
            positional += 1
    return positional >= 3


def _lexical_key(item) -> str:
    return str(item)


# --------- combinator sources (one fresh upstream iterator per traversal) ----------

class _Filtered:
    def __init__(self, upstream, predicate):
        self._upstream = upstream
        self._predicate = predicate

    def __iter__(self):
        predicate = self._predicate
        for item in self._upstream:
            if predicate(item):
                yield item


class _Mapped:
    def __init__(self, upstream, transform):
        self._upstream = upstream
        self._transform = transform

    def __iter__(self):
        transform = self._transform
        for item in self._upstream:
            yield transform(item)


class _Flattened:
    def __init__(self, upstream, depth):
        self._upstream = upstream
        self._depth = depth

    def __iter__(self):
        depth = self._depth
        for item in self._upstream:
            if not is_iterable(item):
                yield item
            elif depth > 1:
                yield from _Flattened(item, depth - 1)
            else:
                yield from item


class _Concatenated:
    def __init__(self, upstream, args):
        self._upstream = upstream
        self._args = args

    def __iter__(self):
        yield from self._upstream
        for arg in self._args:
            if is_iterable(arg):
                yield from arg
            else:
                yield arg


class _Taken:
    def __init__(self, upstream, n):
        self._upstream = upstream
        self._n = n

    def __iter__(self):
        n = self._n
        if n <= 0:
            return
        taken = 0
        for item in self._upstream:
            yield item
            taken += 1
            if taken >= n:
                return


class _Skipped:
    def __init__(self, upstream, n):
        self._upstream = upstream
        self._n = n

    def __iter__(self):
        skipped = 0
        for item in self._upstream:
            if skipped < self._n:
                skipped += 1
                continue
            yield item


class _Chunked:
    def __init__(self, upstream, size):
        self._upstream = upstream
        self._size = size

    def __iter__(self):
        bucket = []
        for item in self._upstream:
            bucket.append(item)
            if len(bucket) == self._size:
                yield tuple(bucket)
                bucket = []
        if bucket:
            yield tuple(bucket)


class _Zipped:
    def __init__(self, sources):
        self._sources = sources

    def __iter__(self):
        # builtin zip stops at the first exhausted source
        yield from zip(*self._sources)


class Lazy(Generic[T]):
    """
    A chainable, lazy view over any iterable. Combinators return new Lazy
    objects and do no work; terminal operations each start a fresh traversal.
    Re-traversal is only as repeatable as the wrapped source: a one-shot
    iterator stays one-shot and yields nothing the second time.
    """

    def __init__(self, iterable: Iterable):
        self._iterable = iterable

    @classmethod
    def from_iterable(cls, iterable: Iterable) -> "Lazy":
        if isinstance(iterable, abc.Iterator):
            logger.debug(f"Wrapping one-shot iterator {type(iterable).__name__}; it can be traversed once")
        return cls(iterable)

    @staticmethod
    def zip(*iterables: Iterable) -> "Lazy[Tuple]":
        """Lock-step tuples, stopping as soon as any iterable is exhausted"""
        return Lazy(_Zipped(iterables))

    # --------- iterator protocol ----------
    def __iter__(self) -> Iterator[T]:
        return iter(self._iterable)

    # --------- chainable operators (lazy) ----------
    def filter(self, predicate: Callable[[T], bool]) -> "Lazy[T]":
        return Lazy(_Filtered(self, predicate))

    def map(self, transform: Callable[[T], U]) -> "Lazy[U]":
        return Lazy(_Mapped(self, transform))

    def flat(self, depth: Optional[float] = 1) -> "Lazy[Any]":
        """
        Flatten nested iterables up to depth levels, like Array.prototype.flat.
        depth=None (or math.inf) flattens every level. Strings are treated as
        elements, not as nested sequences.
        """
        if depth is None:
            depth = math.inf
        if depth <= 0:
            return self
        return Lazy(_Flattened(self, depth))

    def concat(self, *args) -> "Lazy[T]":
        """Append each argument: iterables contribute their elements, anything else itself"""
        return Lazy(_Concatenated(self, args))

    def take(self, n: float) -> "Lazy[T]":
        """At most n elements, never pulling one more; n may be fractional or math.inf"""
        return Lazy(_Taken(self, n))

    def skip(self, n: float) -> "Lazy[T]":
        return Lazy(_Skipped(self, n))

    def chunk(self, size: int) -> "Lazy[Tuple]":
        """Group elements into tuples of size; the last one may be shorter"""
        size = int(size)
        if size < 1:
            raise ValueError("Chunk size must be >= 1")
        return Lazy(_Chunked(self, size))

    def page(self, page_number: int, page_size: int) -> "Lazy[T]":
        """Get a specific page of results (1-indexed)"""
        if page_number < 1:
            raise ValueError("Page number must be >= 1")
        offset = (page_number - 1) * page_size
        return self.skip(offset).take(page_size)

    def paginate(self, page_size: int) -> Iterator[List[T]]:
        """Yield successive pages as lists from a single traversal"""
        for bucket in self.chunk(page_size):
            yield list(bucket)

    def sort(self, comparator: Optional[Callable[[T, T], int]] = None) -> "Lazy[T]":
        """
        Materialize and sort. Without a comparator elements are ordered by
        their string form, so 10 sorts before 2. The comparator follows the
        three-way convention (negative, zero, positive). The sort is stable.
        """
        items = self.to_list()
        if comparator is None:
            items.sort(key=_lexical_key)
        else:
            items.sort(key=functools.cmp_to_key(comparator))
        logger.debug(f"Sorted {len(items)} elements")
        return Lazy(items)

    # --------- terminal operations (force evaluation) ----------
    def for_each(self, fn: Callable[[T], Any]) -> None:
        for item in self:
            fn(item)

    def reduce(self, fn: Callable[..., U], initial: Any = _MISSING) -> U:
        """
        Fold elements left to right. fn receives (accumulator, element) or,
        when it takes three required positional arguments, (accumulator, element, index).
        Without initial the first element seeds the accumulator; an empty
        sequence then reduces to None.
        """
        with_index = _accepts_index(fn)
        result = None if initial is _MISSING else initial
        for index, item in enumerate(self):
            if index == 0 and initial is _MISSING:
                result = item
            elif with_index:
                result = fn(result, item, index)
            else:
                result = fn(result, item)
        return result

    def to_set(self) -> Set[T]:
        return set(self)

    def to_list(self) -> List[T]:
        return list(self)

    def some(self, predicate: Callable[[T], bool]) -> bool:
        for item in self:
            if predicate(item):
                return True
        return False

    def every(self, predicate: Callable[[T], bool]) -> bool:
        return not self.some(lambda item: not predicate(item))

    def empty(self) -> bool:
        for _ in self:
            return False
        return True

    @property
    def length(self) -> int:
        """Element count, always by full traversal"""
        count = 0
        for _ in self:
            count += 1
        return count

    def includes(self, value) -> bool:
        """
        True if an element is value itself or equal to it. Booleans only match
        booleans, so includes(True) does not match 1.
        """
        value_is_bool = isinstance(value, bool)
        for item in self:
            if item is value:
                return True
            if isinstance(item, bool) == value_is_bool and item == value:
                return True
        return False

    def find(self, predicate: Callable[[T], bool], default=None):
        """Return the first element that satisfies the predicate, or default"""
        for item in self:
            if predicate(item):
                return item
        return default
