# extract.py
# SPDX-License-Identifier: MIT
"""Value extraction and normalization used by pipeline steps.

Items handed to a sorter can be anything: JSON-ish dicts, dataclasses,
tuples, plain strings. Extraction therefore starts by classifying what the
current value can do for a given path segment and then picks one branch:

* ``KEYED``: a :class:`~collections.abc.Mapping` holding the key.
* ``INDEXED``: a non-text :class:`~collections.abc.Sequence` and an ``int``
  segment inside its bounds.
* ``ATTRIBUTE``: an object exposing an attribute with the segment's name.
* ``OPAQUE``: none of the above.

Opaque values never raise. They degrade to ``str(value)`` so heterogeneous
collections stay sortable; the ordering may be meaningless but it is
deterministic.
"""

from __future__ import annotations

import enum
import inspect
from collections.abc import Mapping, Sequence, Set
from typing import Any, Hashable

from .log import get_logger, short_repr

__all__ = [
    "Capability",
    "MISSING",
    "classify",
    "normalize_key",
    "lookup_key",
    "dig_value",
    "call_value",
    "fold_case",
]

log = get_logger(__name__)

_TEXT_TYPES = (str, bytes, bytearray)


class _Missing:
    __slots__ = ()

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


class Capability(enum.Enum):
    """What a value supports for one path segment."""

    KEYED = "keyed"
    INDEXED = "indexed"
    ATTRIBUTE = "attribute"
    OPAQUE = "opaque"


def normalize_key(key: Any) -> Any:
    """Collapse string-like key representations onto ``str``.

    ``bytes`` decode as UTF-8 and enum members use their string value (or
    their name when the value is not text). Other keys, e.g. ints, are
    returned unchanged.
    """
    if isinstance(key, enum.Enum):
        value = key.value
        return value if isinstance(value, str) else key.name
    if isinstance(key, str):
        return str(key)
    if isinstance(key, (bytes, bytearray)):
        return bytes(key).decode("utf-8", "replace")
    return key


def lookup_key(mapping: Mapping[Any, Any], key: Hashable, *, indifferent: bool = False) -> Any:
    """Return ``mapping[key]`` or :data:`MISSING`.

    In indifferent mode an exact hit still wins; otherwise keys are compared
    after :func:`normalize_key` and the first matching entry in iteration
    order is returned.
    """
    try:
        if key in mapping:
            return mapping[key]
    except TypeError:
        # unhashable segment against a dict
        pass
    if not indifferent:
        return MISSING
    wanted = normalize_key(key)
    for candidate, value in mapping.items():
        if normalize_key(candidate) == wanted:
            return value
    return MISSING


def _attribute_name(segment: Any) -> str | None:
    name = normalize_key(segment)
    if isinstance(name, str) and name.isidentifier():
        return name
    return None


def _is_container(value: Any) -> bool:
    return isinstance(value, (Mapping, Set)) or (
        isinstance(value, Sequence) and not isinstance(value, _TEXT_TYPES)
    )


def _is_bound_call(owner: Any, name: str, member: Any) -> bool:
    if inspect.ismethod(member) or inspect.isbuiltin(member):
        return True
    # staticmethods come back from getattr as plain functions
    return isinstance(inspect.getattr_static(type(owner), name, None), staticmethod)


def classify(value: Any, segment: Any, *, indifferent: bool = False) -> Capability:
    """Pick the extraction branch ``value`` supports for ``segment``.

    Containers only expose data attributes (namedtuple fields, properties);
    their methods are never invoked by a path walk, so ``dig("clear")`` on a
    dict without that key cannot empty it.
    """
    if isinstance(value, Mapping):
        if lookup_key(value, segment, indifferent=indifferent) is not MISSING:
            return Capability.KEYED
    elif (
        isinstance(value, Sequence)
        and not isinstance(value, _TEXT_TYPES)
        and isinstance(segment, int)
        and not isinstance(segment, bool)
    ):
        if -len(value) <= segment < len(value):
            return Capability.INDEXED
        return Capability.OPAQUE
    name = _attribute_name(segment)
    if name is None or not hasattr(value, name):
        return Capability.OPAQUE
    if _is_container(value) and callable(getattr(value, name)):
        return Capability.OPAQUE
    return Capability.ATTRIBUTE


def dig_value(item: Any, path: Sequence[Any], *, indifferent: bool = False) -> Any:
    """Walk ``path`` against ``item`` and return the value found.

    A ``None`` reached along the way ends the walk with ``None``, which the
    comparator then places according to the nil policy. A segment the
    current value cannot resolve ends the walk with ``str(current)``.
    """
    current = item
    for segment in path:
        if current is None:
            return None
        capability = classify(current, segment, indifferent=indifferent)
        if capability is Capability.KEYED:
            current = lookup_key(current, segment, indifferent=indifferent)
        elif capability is Capability.INDEXED:
            current = current[segment]
        elif capability is Capability.ATTRIBUTE:
            name = _attribute_name(segment)
            member = getattr(current, name)  # type: ignore[arg-type]
            current = member() if _is_bound_call(current, name, member) else member
        else:
            log.debug(
                "Segment %r not resolvable on %s; using its string form",
                segment,
                short_repr(current),
            )
            return str(current)
    return current


def call_value(
    item: Any,
    name: str,
    args: Sequence[Any] = (),
    kwargs: Mapping[str, Any] | None = None,
) -> Any:
    """Invoke ``item.<name>(*args, **kwargs)``.

    Plain (non-callable) attributes are returned as-is. Items without the
    member fall back to ``str(item)``.
    """
    if item is None:
        return None
    if not hasattr(item, name):
        log.debug("%s has no member %r; using its string form", short_repr(item), name)
        return str(item)
    member = getattr(item, name)
    if callable(member):
        return member(*args, **(kwargs or {}))
    return member


def fold_case(value: Any, fold: str) -> Any:
    """Upper- or lower-case ``value``, coercing non-text with ``str()``.

    ``None`` passes through untouched so nil placement still applies after a
    case-insensitive step.
    """
    if value is None:
        return None
    text = value if isinstance(value, str) else str(value)
    if fold == "upper":
        return text.upper()
    if fold == "lower":
        return text.lower()
    raise ValueError(f"Invalid case fold: {fold!r}. Expected 'upper' or 'lower'")
