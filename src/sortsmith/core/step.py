# step.py
# SPDX-License-Identifier: MIT
"""Immutable pipeline steps.

A :class:`Step` is one instruction recorded by a :class:`~sortsmith.core.sorter.Sorter`.
Extraction and transformation steps are applied to every item before
comparison; ordering steps (direction, nil placement) only configure how the
sorted output is arranged and are never applied per item.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any

from .compare import Direction, NilPlacement
from .extract import call_value, dig_value, fold_case

__all__ = ["StepKind", "Step"]


class StepKind(enum.Enum):
    EXTRACT_PATH = "extract_path"
    EXTRACT_CALL = "extract_call"
    CASE_FOLD = "case_fold"
    NIL_POLICY = "nil_policy"
    DIRECTION = "direction"


_EXTRACTIONS = frozenset({StepKind.EXTRACT_PATH, StepKind.EXTRACT_CALL})
_ORDERING = frozenset({StepKind.NIL_POLICY, StepKind.DIRECTION})


@dataclass(frozen=True, slots=True)
class Step:
    """One pipeline instruction.

    Use the ``dig``/``call``/``case_fold``/``nil_policy``/``order`` constructors rather
    than filling the payload fields by hand; they validate the payload for
    the kind.

    Attributes:
        kind (StepKind): Operation tag.
        path (tuple[Any, ...]): EXTRACT_PATH segments (keys, indices or
            attribute names), applied left to right.
        indifferent (bool): EXTRACT_PATH key matching ignores ``str`` vs
            ``bytes``/enum key representations.
        name (str | None): EXTRACT_CALL member name.
        args (tuple[Any, ...]): EXTRACT_CALL positional arguments.
        kwargs (tuple[tuple[str, Any], ...]): EXTRACT_CALL keyword
            arguments as (name, value) pairs, so steps stay hashable.
        fold (str | None): CASE_FOLD target, ``"upper"`` or ``"lower"``.
        nils (str | None): NIL_POLICY placement.
        direction (str | None): DIRECTION value.
    """

    kind: StepKind
    path: tuple[Any, ...] = ()
    indifferent: bool = False
    name: str | None = None
    args: tuple[Any, ...] = ()
    kwargs: tuple[tuple[str, Any], ...] = ()
    fold: str | None = None
    nils: str | None = None
    direction: str | None = None

    # -- constructors -------------------------------------------------------

    @classmethod
    def dig(cls, *path: Any, indifferent: bool = False) -> "Step":
        if not path:
            raise ValueError("dig() needs at least one key, index or attribute name")
        return cls(StepKind.EXTRACT_PATH, path=tuple(path), indifferent=bool(indifferent))

    @classmethod
    def call(cls, name: str, *args: Any, **kwargs: Any) -> "Step":
        if not isinstance(name, str) or not name.strip():
            raise ValueError(f"call() needs a method or attribute name; got {name!r}")
        return cls(
            StepKind.EXTRACT_CALL,
            name=name,
            args=tuple(args),
            kwargs=tuple(kwargs.items()),
        )

    @classmethod
    def case_fold(cls, fold: str) -> "Step":
        fold_norm = (fold or "").strip().lower()
        if fold_norm not in ("upper", "lower"):
            raise ValueError(f"Invalid case fold: {fold!r}. Expected 'upper' or 'lower'")
        return cls(StepKind.CASE_FOLD, fold=fold_norm)

    @classmethod
    def nil_policy(cls, nils: str) -> "Step":
        return cls(StepKind.NIL_POLICY, nils=NilPlacement.normalize(nils))

    @classmethod
    def order(cls, direction: str) -> "Step":
        return cls(StepKind.DIRECTION, direction=Direction.normalize(direction))

    # -- classification -----------------------------------------------------

    @property
    def is_extraction(self) -> bool:
        return self.kind in _EXTRACTIONS

    @property
    def is_transformation(self) -> bool:
        return self.kind is StepKind.CASE_FOLD

    @property
    def is_ordering(self) -> bool:
        return self.kind in _ORDERING

    # -- execution ----------------------------------------------------------

    def perform(self, item: Any) -> Any:
        """Apply this step to one item (or to the value derived so far)."""
        if self.is_extraction:
            return self.perform_extraction(item)
        if self.is_transformation:
            return self.perform_transform(item)
        raise TypeError(f"{self.kind.name} steps configure ordering and are not applied per item")

    def perform_extraction(self, item: Any) -> Any:
        if self.kind is StepKind.EXTRACT_PATH:
            return dig_value(item, self.path, indifferent=self.indifferent)
        if self.kind is StepKind.EXTRACT_CALL:
            return call_value(item, self.name or "", self.args, dict(self.kwargs))
        raise TypeError(f"{self.kind.name} is not an extraction step")

    def perform_transform(self, value: Any) -> Any:
        if self.kind is not StepKind.CASE_FOLD:
            raise TypeError(f"{self.kind.name} is not a transformation step")
        return fold_case(value, self.fold or "lower")

    def describe(self) -> str:
        """Short human-readable label used in log lines."""
        if self.kind is StepKind.EXTRACT_PATH:
            label = "dig(" + ", ".join(repr(p) for p in self.path)
            return label + (", indifferent=True)" if self.indifferent else ")")
        if self.kind is StepKind.EXTRACT_CALL:
            parts = [repr(self.name)] + [repr(a) for a in self.args]
            parts += [f"{k}={v!r}" for k, v in self.kwargs]
            return "call(" + ", ".join(parts) + ")"
        if self.kind is StepKind.CASE_FOLD:
            return "upcase()" if self.fold == "upper" else "downcase()"
        if self.kind is StepKind.NIL_POLICY:
            return f"nils_{self.nils}()"
        return f"{self.direction}()"
