# __init__.py
# SPDX-License-Identifier: MIT
"""
Top-level package exports for :mod:`sortsmith`.

Public surface
--------------
Most callers only need :func:`sort_by` (or :class:`Sorter`) and the chained
builder methods:

- Extraction: ``dig``/``key``/``field``/``extract`` for keys, indices and
  attribute paths; ``call``/``method``/``attribute`` for method calls.
- Modifiers: ``downcase``/``insensitive``, ``upcase``.
- Ordering: ``asc``/``desc``, ``nils_first``/``nils_last``.
- Terminals: ``sort``, ``sort_in_place``, ``reverse``, ``reverse_in_place``,
  plus accessors such as ``first``, ``last``, ``take`` and iteration.

Missing keys or methods never raise; the item sorts by its string form.
Values that cannot be ordered against each other raise
:class:`ComparisonError`.

Pipelines can also be described declaratively with :class:`SortConfig` and
loaded from TOML/JSON via :func:`load_config_from_path`.

Examples:
    >>> from sortsmith import sort_by
    >>> users = [{"name": "bob"}, {"name": "Alice"}]
    >>> [u["name"] for u in sort_by(users, "name").insensitive().sort()]
    ['Alice', 'bob']
"""


from __future__ import annotations

try:
    from importlib.metadata import version as _pkg_version

    __version__ = _pkg_version("sortsmith")
except Exception:  # PackageNotFoundError or runtime env oddities
    __version__ = "0.0.0+unknown"


from .core.compare import ComparisonError, Direction, NilPlacement, build_comparator
from .core.config import LoggingConfig, SortConfig, StepSpec, load_config_from_path
from .core.log import configure_logging, get_logger, temp_level
from .core.sorter import Sorter, sort_by
from .core.step import Step, StepKind

PRIMARY_API = [
    "__version__",
    "sort_by",
    "Sorter",
    "Step",
    "StepKind",
    "Direction",
    "NilPlacement",
    "ComparisonError",
    "build_comparator",
    "SortConfig",
    "StepSpec",
    "LoggingConfig",
    "load_config_from_path",
    "configure_logging",
    "get_logger",
    "temp_level",
]

__all__ = list(PRIMARY_API)
