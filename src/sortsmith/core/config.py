# config.py
# SPDX-License-Identifier: MIT
"""Declarative sort pipelines.

A :class:`SortConfig` describes the same pipeline a chain of
:class:`~sortsmith.core.sorter.Sorter` calls would build, in a form that can
live in a JSON or TOML file::

    direction = "desc"
    nils = "first"

    [[steps]]
    kind = "dig"
    options = { path = ["user", "name"], indifferent = true }

    [[steps]]
    kind = "downcase"

    [logging]
    level = "DEBUG"

Step options may also sit next to ``kind`` (``{kind = "dig", path = ["name"]}``).
"""
from __future__ import annotations

import json
try:  # pragma: no cover - optional dependency
    import tomllib  # Python 3.11+
except ModuleNotFoundError:  # pragma: no cover
    try:
        import tomli as tomllib  # type: ignore[assignment]
    except Exception:  # pragma: no cover
        tomllib = None  # type: ignore[assignment]
import types
from collections.abc import Sequence as ABCSequence
from dataclasses import dataclass, field, fields, is_dataclass
from pathlib import Path
from typing import (
    Any,
    Callable,
    Dict,
    Iterable,
    Mapping,
    Optional,
    Tuple,
    Type,
    TypeVar,
    Union,
    get_args,
    get_origin,
    get_type_hints,
)

from .compare import Direction, NilPlacement
from .log import DEFAULT_LOG_FORMAT, PACKAGE_LOGGER_NAME, configure_logging
from .sorter import Sorter
from .step import Step

__all__ = [
    "StepSpec",
    "LoggingConfig",
    "SortConfig",
    "STEP_KINDS",
    "load_config_from_path",
    "validate_options",
]

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Step kinds
# ---------------------------------------------------------------------------

def _build_dig(options: Mapping[str, Any]) -> Step:
    path = options.get("path")
    if path is None:
        raise ValueError("dig step requires a 'path' option")
    if isinstance(path, (str, int)):
        path = [path]
    return Step.dig(*path, indifferent=bool(options.get("indifferent", False)))


def _build_call(options: Mapping[str, Any]) -> Step:
    name = options.get("name")
    args = options.get("args") or ()
    kwargs = options.get("kwargs") or {}
    if not isinstance(kwargs, Mapping):
        raise ValueError(f"call step 'kwargs' must be a table/object; got {type(kwargs).__name__}")
    return Step.call(name, *args, **dict(kwargs))  # type: ignore[arg-type]


@dataclass(frozen=True, slots=True)
class _StepKind:
    build: Callable[[Mapping[str, Any]], Step]
    options: frozenset[str] = frozenset()


STEP_KINDS: Dict[str, _StepKind] = {
    "dig": _StepKind(_build_dig, frozenset({"path", "indifferent"})),
    "call": _StepKind(_build_call, frozenset({"name", "args", "kwargs"})),
    "downcase": _StepKind(lambda _opts: Step.case_fold("lower")),
    "upcase": _StepKind(lambda _opts: Step.case_fold("upper")),
}

_KIND_ALIASES = {
    "key": "dig",
    "field": "dig",
    "extract": "dig",
    "method": "call",
    "attribute": "call",
    "lower": "downcase",
    "insensitive": "downcase",
    "case_insensitive": "downcase",
    "upper": "upcase",
}


def _normalize_kind(kind: str) -> str:
    norm = (kind or "").strip().lower().replace("-", "_")
    norm = _KIND_ALIASES.get(norm, norm)
    if norm not in STEP_KINDS:
        known = sorted(set(STEP_KINDS) | set(_KIND_ALIASES))
        raise ValueError(f"Unknown step kind {kind!r}. Expected one of {known}")
    return norm


def validate_options(
    options: Mapping[str, Any] | None,
    *,
    allowed: Iterable[str],
    context: str,
) -> None:
    """Reject option keys outside ``allowed``.

    Raises:
        ValueError: If unknown option keys are present.
    """
    if not options:
        return
    allowed_set = set(allowed)
    unknown = sorted(str(k) for k in options.keys() if k not in allowed_set)
    if unknown:
        allowed_list = ", ".join(sorted(allowed_set)) or "(none)"
        raise ValueError(
            f"Unsupported options for {context}: {', '.join(unknown)}. "
            f"Allowed keys: {allowed_list}"
        )


# ---------------------------------------------------------------------------
# Config dataclasses
# ---------------------------------------------------------------------------

@dataclass(slots=True)
class StepSpec:
    """Declarative step entry; ``kind`` maps to a Sorter builder call.

    Known kinds (aliases in parentheses):
    - "dig" (key, field, extract): options path (list or single key),
      indifferent
    - "call" (method, attribute): options name, args, kwargs
    - "downcase" (lower, insensitive, case_insensitive): no options
    - "upcase" (upper): no options
    """

    kind: str
    options: Dict[str, Any] = field(default_factory=dict)

    def build(self) -> Step:
        kind = _normalize_kind(self.kind)
        spec = STEP_KINDS[kind]
        validate_options(self.options, allowed=spec.options, context=f"step {self.kind!r}")
        return spec.build(self.options or {})

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "StepSpec":
        if isinstance(data, str):
            return cls(kind=data)
        if "kind" not in data:
            raise ValueError(f"Step entry is missing 'kind': {dict(data)!r}")
        options = dict(data.get("options") or {})
        for key, value in data.items():
            if key not in ("kind", "options"):
                options[key] = value
        return cls(kind=str(data["kind"]), options=options)


@dataclass(slots=True)
class LoggingConfig:
    """Controls the package logger when a config is applied by the CLI."""

    level: int | str = "WARNING"
    propagate: bool = False
    fmt: Optional[str] = DEFAULT_LOG_FORMAT
    logger_name: str = PACKAGE_LOGGER_NAME

    def apply(self) -> None:
        """Apply this logging configuration to the package logger."""
        configure_logging(
            level=self.level,
            propagate=self.propagate,
            fmt=self.fmt,
            logger_name=self.logger_name or PACKAGE_LOGGER_NAME,
        )


@dataclass(slots=True)
class SortConfig:
    """Serializable description of one sort pipeline.

    Attributes:
        steps (tuple[StepSpec, ...]): Value-shaping steps in application
            order.
        direction (str): ``"asc"`` or ``"desc"``.
        nils (str): ``"last"`` or ``"first"``.
        logging (LoggingConfig): Package logger settings used by the CLI.
    """

    steps: Tuple[StepSpec, ...] = ()
    direction: str = Direction.ASC
    nils: str = NilPlacement.LAST
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def validate(self) -> None:
        """Raise ``ValueError`` for unknown kinds, options or ordering values."""
        self.direction = Direction.normalize(self.direction)
        self.nils = NilPlacement.normalize(self.nils)
        self.build_steps()

    def build_steps(self) -> list[Step]:
        return [spec.build() for spec in self.steps]

    def apply(self, sorter: Sorter) -> Sorter:
        """Record this config's steps and ordering on an existing sorter."""
        for step in self.build_steps():
            sorter.add_step(step)
        sorter.add_step(Step.order(self.direction))
        sorter.add_step(Step.nil_policy(self.nils))
        return sorter

    def build_sorter(self, items: Iterable[Any]) -> Sorter:
        return self.apply(Sorter(items))

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serializable representation of this configuration."""
        return _dataclass_to_dict(self)

    def to_json(self, path: Path | str, *, indent: int = 2) -> str:
        """Serialize the configuration to JSON and write it to disk.

        Returns:
            str: String path to the written file.
        """
        target = Path(path)
        target.write_text(json.dumps(self.to_dict(), indent=indent, sort_keys=True), encoding="utf-8")
        return str(target)

    @classmethod
    def from_dict(cls: Type[T], data: Mapping[str, Any]) -> T:
        if not isinstance(data, Mapping):
            raise TypeError(f"Config must be a mapping; got {type(data).__name__}.")
        validate_options(data, allowed=(f.name for f in fields(cls)), context="sort config")  # type: ignore[arg-type]
        return _dataclass_from_dict(cls, data)

    @classmethod
    def from_json(cls: Type[T], path: Path | str) -> T:
        payload = json.loads(Path(path).read_text(encoding="utf-8"))
        return cls.from_dict(payload)  # type: ignore[attr-defined]

    @classmethod
    def from_toml(cls: Type[T], path: Path | str) -> T:
        """Load a SortConfig from a TOML file (see the module docstring for the layout)."""
        if tomllib is None:
            raise RuntimeError(
                "TOML support requires Python 3.11+ (tomllib) or installing the 'tomli' package."
            )
        data = tomllib.loads(Path(path).read_bytes().decode("utf-8"))
        return cls.from_dict(data)  # type: ignore[attr-defined]


def load_config_from_path(path: str | Path) -> SortConfig:
    """Load a SortConfig from a ``.toml`` or ``.json`` file.

    Raises:
        ValueError: If the file extension is not ``.toml`` or ``.json``.
    """
    p = Path(path)
    suffix = p.suffix.lower()
    if suffix == ".toml":
        cfg = SortConfig.from_toml(p)
    elif suffix == ".json":
        cfg = SortConfig.from_json(p)
    else:
        raise ValueError(f"Unsupported config extension {p.suffix!r}; expected .toml or .json.")
    cfg.validate()
    return cfg


# ---------------------------------------------------------------------------
# (De)serialization helpers
# ---------------------------------------------------------------------------

def _dataclass_to_dict(obj: Any) -> Dict[str, Any]:
    """Serialize dataclasses to JSON-friendly dicts, skipping None values."""
    result: Dict[str, Any] = {}
    for f in fields(obj):
        value = getattr(obj, f.name)
        if value is None:
            continue
        result[f.name] = _serialize_value(value)
    return result


def _serialize_value(value: Any) -> Any:
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, (list, tuple)):
        return [_serialize_value(v) for v in value]
    if isinstance(value, Mapping):
        return {str(k): _serialize_value(v) for k, v in value.items()}
    if is_dataclass(value) and not isinstance(value, type):
        return _dataclass_to_dict(value)
    return str(value)


def _dataclass_from_dict(cls: Type[T], data: Mapping[str, Any] | None) -> T:
    """Instantiate a dataclass of type ``cls`` from a mapping."""
    if data is None:
        return cls()  # type: ignore[call-arg]
    type_hints = get_type_hints(cls)
    kwargs: Dict[str, Any] = {}
    for f in fields(cls):  # type: ignore[arg-type]
        if f.name not in data:
            continue
        kwargs[f.name] = _coerce_value(type_hints.get(f.name, f.type), data[f.name])
    return cls(**kwargs)  # type: ignore[call-arg]


def _coerce_value(expected_type: Any, value: Any) -> Any:
    """Coerce ``value`` into the shape implied by ``expected_type``."""
    base_type, _ = _strip_optional(expected_type)
    if value is None:
        return None
    if isinstance(base_type, type) and is_dataclass(base_type):
        hook = getattr(base_type, "from_dict", None)
        return hook(value) if hook is not None else _dataclass_from_dict(base_type, value)
    origin = get_origin(base_type)
    if origin in (list, tuple, ABCSequence):
        args = get_args(base_type)
        inner = args[0] if args else Any
        items = [_coerce_value(inner, v) for v in value]
        return tuple(items) if origin is tuple else items
    if origin is dict:
        return dict(value)
    if base_type in {str, float, bool}:
        return base_type(value)
    return value


def _strip_optional(typ: Any) -> Tuple[Any, bool]:
    """Strip ``None`` from ``Optional[X]`` / ``X | None`` annotations."""
    origin = get_origin(typ)
    if origin is Union or origin is types.UnionType:
        args = [arg for arg in get_args(typ) if arg is not type(None)]
        if len(args) == 1:
            base, _ = _strip_optional(args[0])
            return base, True
    return typ, False
