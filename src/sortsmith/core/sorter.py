# sorter.py
# SPDX-License-Identifier: MIT
"""Chainable sort pipeline.

Build a :class:`Sorter` over a collection, record steps with chained calls
and finish with a terminal method::

    >>> from sortsmith import sort_by
    >>> users = [{"name": "bob"}, {"name": "Alice"}, {"name": None}]
    >>> [u["name"] for u in sort_by(users, "name").downcase().desc().sort()]
    ['bob', 'Alice', None]

The sorter is lazy: no value is extracted or compared until ``sort``,
``sort_in_place``, ``reverse``, ``reverse_in_place`` or one of the delegated
accessors (``first``, ``take``, ``size``, iteration, ...) runs.

A sorter is meant for a single terminal call. Calling another terminal
re-reads the input, which works for lists but finds an exhausted iterator
empty.

``sort_in_place`` writes into the caller's list; the caller must not mutate
that list from another thread while the sort runs.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, MutableSequence
from dataclasses import dataclass
from functools import cmp_to_key
from typing import Any

from .compare import Direction, NilPlacement, compare_values, derive_value
from .log import get_logger
from .step import Step

__all__ = ["Sorter", "sort_by"]

log = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class _Keyed:
    value: Any
    item: Any


class Sorter:
    """Fluent builder that turns recorded steps into a stable sort.

    Value-shaping steps (extraction, case folding) are kept in call order.
    Direction and nil placement are single settings: the last call wins.
    """

    def __init__(self, items: Iterable[Any]) -> None:
        self._items = items
        self._steps: list[Step] = []
        self._direction = Step.order(Direction.ASC)
        self._nils = Step.nil_policy(NilPlacement.LAST)

    def __repr__(self) -> str:
        chain = ".".join(s.describe() for s in (*self._steps, self._nils, self._direction))
        return f"<Sorter {chain}>"

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def steps(self) -> tuple[Step, ...]:
        """Value-shaping steps in application order."""
        return tuple(self._steps)

    @property
    def direction(self) -> str:
        return self._direction.direction or Direction.ASC

    @property
    def nils(self) -> str:
        return self._nils.nils or NilPlacement.LAST

    @property
    def has_extraction(self) -> bool:
        return any(s.is_extraction for s in self._steps)

    def add_step(self, step: Step) -> "Sorter":
        """Record a prebuilt step; ordering steps replace the current setting."""
        if step.is_ordering:
            if step.direction is not None:
                self._direction = step
            else:
                self._nils = step
        else:
            self._steps.append(step)
        return self

    # ------------------------------------------------------------------
    # Extractors
    # ------------------------------------------------------------------

    def dig(self, *segments: Any, indifferent: bool = False) -> "Sorter":
        """Extract a value by walking keys, indices or attribute names.

        Args:
            *segments: Path applied left to right, e.g. ``dig("user", "name")``
                or ``dig("tags", 0)``.
            indifferent (bool): Match mapping keys regardless of ``str`` vs
                ``bytes``/enum representation.

        Raises:
            ValueError: If no segment is given.
        """
        return self.add_step(Step.dig(*segments, indifferent=indifferent))

    key = dig
    field = dig
    extract = dig

    def call(self, name: str, *args: Any, **kwargs: Any) -> "Sorter":
        """Extract the result of ``item.<name>(*args, **kwargs)``.

        Items lacking the member sort by their string form.
        """
        return self.add_step(Step.call(name, *args, **kwargs))

    method = call
    attribute = call

    # ------------------------------------------------------------------
    # Modifiers
    # ------------------------------------------------------------------

    def downcase(self) -> "Sorter":
        return self.add_step(Step.case_fold("lower"))

    lower = downcase
    insensitive = downcase
    case_insensitive = downcase

    def upcase(self) -> "Sorter":
        return self.add_step(Step.case_fold("upper"))

    upper = upcase

    def asc(self) -> "Sorter":
        return self.add_step(Step.order(Direction.ASC))

    ascending = asc

    def desc(self) -> "Sorter":
        return self.add_step(Step.order(Direction.DESC))

    descending = desc

    def nils_first(self) -> "Sorter":
        return self.add_step(Step.nil_policy(NilPlacement.FIRST))

    def nils_last(self) -> "Sorter":
        return self.add_step(Step.nil_policy(NilPlacement.LAST))

    # ------------------------------------------------------------------
    # Terminators
    # ------------------------------------------------------------------

    def _ordered(self) -> list[Any]:
        shaping = tuple(self._steps)
        nils = self.nils
        has_extraction = self.has_extraction
        descending = Direction.is_descending(self.direction)

        keyed = [_Keyed(derive_value(item, shaping), item) for item in self._items]
        log.debug(
            "Sorting %d item(s) with %d step(s) (direction=%s, nils=%s)",
            len(keyed),
            len(shaping),
            self.direction,
            nils,
        )
        if descending:
            # visit in reverse so the final reversal keeps ties in input order
            keyed.reverse()

        def _cmp(a: _Keyed, b: _Keyed) -> int:
            return compare_values(a.value, b.value, nils=nils, has_extraction=has_extraction)

        keyed.sort(key=cmp_to_key(_cmp))

        if descending:
            keyed.reverse()
            present = [k for k in keyed if k.value is not None]
            missing = [k for k in keyed if k.value is None]
            keyed = missing + present if nils == NilPlacement.FIRST else present + missing
        return [k.item for k in keyed]

    def sort(self) -> list[Any]:
        """Return a new sorted list; the input is left untouched."""
        return self._ordered()

    to_list = sort

    def sort_in_place(self) -> Any:
        """Sort the input list in place and return that same list.

        The full order is computed before anything is written back, so a
        failing comparison leaves the input unchanged.

        Raises:
            TypeError: If the input is not a mutable sequence.
        """
        target = self._items
        if not isinstance(target, MutableSequence):
            raise TypeError(
                f"sort_in_place() needs a mutable sequence; got {type(target).__name__}"
            )
        ordered = self._ordered()
        if isinstance(target, list):
            target[:] = ordered
        else:
            # deque and friends reject slice assignment
            for index, item in enumerate(ordered):
                target[index] = item
        return target

    def reverse(self) -> list[Any]:
        """Shorthand for ``desc().sort()``."""
        return self.desc().sort()

    def reverse_in_place(self) -> Any:
        """Shorthand for ``desc().sort_in_place()``."""
        return self.desc().sort_in_place()

    # ------------------------------------------------------------------
    # Delegated accessors (each sorts first)
    # ------------------------------------------------------------------

    def first(self, n: int | None = None) -> Any:
        """First element (``None`` when empty), or a list of the first ``n``."""
        ordered = self.sort()
        if n is None:
            return ordered[0] if ordered else None
        return ordered[:_check_count(n)]

    def last(self, n: int | None = None) -> Any:
        """Last element (``None`` when empty), or a list of the last ``n``."""
        ordered = self.sort()
        if n is None:
            return ordered[-1] if ordered else None
        count = _check_count(n)
        return ordered[len(ordered) - count:] if count else []

    def take(self, n: int) -> list[Any]:
        return self.sort()[:_check_count(n)]

    def drop(self, n: int) -> list[Any]:
        return self.sort()[_check_count(n):]

    def count(self, predicate: Callable[[Any], bool] | None = None) -> int:
        ordered = self.sort()
        if predicate is None:
            return len(ordered)
        return sum(1 for item in ordered if predicate(item))

    def size(self) -> int:
        return len(self.sort())

    def map(self, fn: Callable[[Any], Any]) -> list[Any]:
        return [fn(item) for item in self.sort()]

    def select(self, predicate: Callable[[Any], bool]) -> list[Any]:
        return [item for item in self.sort() if predicate(item)]

    filter = select

    def each(self, fn: Callable[[Any], Any]) -> list[Any]:
        """Call ``fn`` on every sorted item and return the sorted list."""
        ordered = self.sort()
        for item in ordered:
            fn(item)
        return ordered

    def __bool__(self) -> bool:
        return True

    def __iter__(self) -> Iterator[Any]:
        return iter(self.sort())

    def __getitem__(self, index: int | slice) -> Any:
        return self.sort()[index]


def _check_count(n: int) -> int:
    count = int(n)
    if count < 0:
        raise ValueError(f"count must be non-negative; got {n!r}")
    return count


def sort_by(items: Iterable[Any], *segments: Any, indifferent: bool = False) -> Sorter:
    """Start a pipeline over ``items``, optionally digging ``segments`` first.

    ``sort_by(users, "name")`` is the same as ``Sorter(users).dig("name")``.
    ``sort_by(users)`` and ``sort_by(users, None)`` return a sorter with no
    extraction configured. A ``None`` inside a longer path raises
    ``ValueError``.
    """
    sorter = Sorter(items)
    if len(segments) == 1 and segments[0] is None:
        return sorter
    if any(s is None for s in segments):
        raise ValueError(f"None is not a valid path segment: {segments!r}")
    if segments:
        sorter.dig(*segments, indifferent=indifferent)
    return sorter
