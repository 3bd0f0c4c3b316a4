# compare.py
# SPDX-License-Identifier: MIT
"""Three-way comparison of derived sort values and comparator assembly."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from typing import TYPE_CHECKING, Any, Optional

from .log import get_logger, short_repr

if TYPE_CHECKING:  # pragma: no cover
    from .step import Step

__all__ = [
    "Direction",
    "NilPlacement",
    "ComparisonError",
    "compare_values",
    "derive_value",
    "build_comparator",
]

log = get_logger(__name__)

Comparator = Callable[[Any, Any], int]


class Direction:
    """Supported sort directions.

    Direction is applied once to the fully sorted sequence, never by
    flipping the comparator, so it cannot move nils to the other end.
    """

    ASC = "asc"
    DESC = "desc"
    ALL = {ASC, DESC}
    _ALIASES = {"ascending": ASC, "descending": DESC}

    @classmethod
    def normalize(cls, value: Optional[str]) -> str:
        direction = (value or cls.ASC).strip().lower()
        direction = cls._ALIASES.get(direction, direction)
        if direction not in cls.ALL:
            raise ValueError(f"Invalid sort direction: {value!r}. Expected one of {sorted(cls.ALL)}")
        return direction

    @classmethod
    def is_descending(cls, direction: str) -> bool:
        return direction == cls.DESC


class NilPlacement:
    """Where ``None`` derived values land, regardless of direction."""

    FIRST = "first"
    LAST = "last"
    ALL = {FIRST, LAST}

    @classmethod
    def normalize(cls, value: Optional[str]) -> str:
        placement = (value or cls.LAST).strip().lower()
        if placement.startswith("nils_") or placement.startswith("nil_"):
            placement = placement.split("_", 1)[1]
        if placement not in cls.ALL:
            raise ValueError(f"Invalid nil placement: {value!r}. Expected one of {sorted(cls.ALL)}")
        return placement


class ComparisonError(TypeError):
    """Raised when two derived values have no defined relative order.

    Attributes:
        left: Left operand after extraction/transformation.
        right: Right operand after extraction/transformation.
        has_extraction (bool): Whether the pipeline had an extraction step.
    """

    def __init__(self, left: Any, right: Any, *, has_extraction: bool = True) -> None:
        self.left = left
        self.right = right
        self.has_extraction = has_extraction
        super().__init__(self._build_message())

    def _build_message(self) -> str:
        lines = [
            "Cannot compare values during sort:",
            f"  {short_repr(self.left)} ({type(self.left).__name__})",
            "  <=>",
            f"  {short_repr(self.right)} ({type(self.right).__name__})",
        ]
        if not self.has_extraction and _looks_like_record(self.left) and _looks_like_record(self.right):
            lines.append(
                "The pipeline is missing an extraction method; "
                "use dig()/key() or call() to pick the value to sort by."
            )
        elif self.has_extraction:
            lines.append(
                "The extracted values have incompatible types; "
                "normalize them (e.g. downcase()) or pre-validate the collection."
            )
        return "\n".join(lines)


def _looks_like_record(value: Any) -> bool:
    return isinstance(value, Mapping) or hasattr(value, "__dict__") or hasattr(value, "__slots__")


def compare_values(
    left: Any,
    right: Any,
    *,
    nils: str = NilPlacement.LAST,
    has_extraction: bool = True,
) -> int:
    """Return -1, 0 or 1 for two derived values.

    ``None`` is placed by ``nils`` (greater than everything for ``"last"``,
    smaller for ``"first"``); two ``None`` values are equal. Anything else
    uses the values' own ``<`` ordering.

    Raises:
        ComparisonError: If the values cannot be ordered against each other.
    """
    if left is None or right is None:
        if left is None and right is None:
            return 0
        nil_rank = 1 if nils == NilPlacement.LAST else -1
        return nil_rank if left is None else -nil_rank
    try:
        if left < right:
            return -1
        if right < left:
            return 1
    except TypeError as exc:
        log.debug("Comparison failed: %s vs %s", short_repr(left), short_repr(right))
        raise ComparisonError(left, right, has_extraction=has_extraction) from exc
    return 0


def derive_value(item: Any, steps: Iterable["Step"]) -> Any:
    """Run ``item`` through the value-shaping steps in order."""
    value = item
    for step in steps:
        value = step.perform(value)
    return value


def build_comparator(steps: Iterable["Step"], *, nils: str = NilPlacement.LAST) -> Comparator:
    """Compose value-shaping steps into a ``cmp(a, b) -> int`` function.

    Ordering steps in ``steps`` are ignored; pass the nil placement via
    ``nils``. The result plugs into :func:`functools.cmp_to_key`.
    """
    shaping = tuple(s for s in steps if not s.is_ordering)
    has_extraction = any(s.is_extraction for s in shaping)
    placement = NilPlacement.normalize(nils)

    def _compare(a: Any, b: Any) -> int:
        return compare_values(
            derive_value(a, shaping),
            derive_value(b, shaping),
            nils=placement,
            has_extraction=has_extraction,
        )

    return _compare
