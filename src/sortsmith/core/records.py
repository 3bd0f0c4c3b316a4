# records.py
# SPDX-License-Identifier: MIT
"""Reading and writing record files for the command line.

Supported inputs are a JSON document holding an array, JSONL (one JSON value
per line) and gzip-compressed JSONL (``.jsonl.gz``). Sorting needs every
record, so unlike a streaming reader an invalid line is an error rather than
something to skip.
"""

from __future__ import annotations

import gzip
import json
import os
import sys
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Any, Self, TextIO

from .log import get_logger

__all__ = [
    "RECORD_FORMATS",
    "detect_format",
    "iter_jsonl_records",
    "read_records",
    "RecordWriter",
    "write_records",
]

log = get_logger(__name__)

RECORD_FORMATS = ("json", "jsonl")


def _is_gzip(path: Path) -> bool:
    return path.suffix.lower() == ".gz"


def detect_format(path: str | os.PathLike[str]) -> str:
    """Guess ``json`` or ``jsonl`` from a file name (``.jsonl.gz`` counts as JSONL)."""
    p = Path(path)
    suffixes = [s.lower() for s in p.suffixes]
    if suffixes and suffixes[-1] == ".gz":
        suffixes = suffixes[:-1]
    if suffixes and suffixes[-1] == ".json":
        return "json"
    return "jsonl"


def _open_text(path: Path) -> TextIO:
    if _is_gzip(path):
        return gzip.open(path, "rt", encoding="utf-8")
    return open(path, "r", encoding="utf-8")


def iter_jsonl_records(fp: TextIO, *, source: str = "<stream>") -> Iterator[Any]:
    """Yield one decoded JSON value per non-blank line.

    Raises:
        ValueError: On the first line that is not valid JSON.
    """
    for lineno, raw_line in enumerate(fp, start=1):
        line = raw_line.strip()
        if not line:
            continue
        try:
            yield json.loads(line)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid JSON at {source}:#{lineno}: {exc}") from exc


def read_records(path: str | os.PathLike[str], *, fmt: str | None = None) -> list[Any]:
    """Load every record from ``path``.

    Args:
        path (str | os.PathLike[str]): Input file; ``-`` reads stdin.
        fmt (str | None): ``json`` or ``jsonl``; guessed from the file name
            when omitted (stdin defaults to JSONL).

    Returns:
        list[Any]: Decoded records in file order.
    """
    if str(path) == "-":
        fmt = fmt or "jsonl"
        return _read_stream(sys.stdin, fmt=fmt, source="<stdin>")
    p = Path(path)
    fmt = fmt or detect_format(p)
    with _open_text(p) as fp:
        records = _read_stream(fp, fmt=fmt, source=str(p))
    log.debug("Read %d record(s) from %s", len(records), p)
    return records


def _read_stream(fp: TextIO, *, fmt: str, source: str) -> list[Any]:
    if fmt not in RECORD_FORMATS:
        raise ValueError(f"Unsupported record format {fmt!r}; expected one of {RECORD_FORMATS}")
    if fmt == "jsonl":
        return list(iter_jsonl_records(fp, source=source))
    try:
        payload = json.load(fp)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {source}: {exc}") from exc
    if not isinstance(payload, list):
        raise ValueError(f"{source} must hold a JSON array; got {type(payload).__name__}")
    return payload


def _dumps(record: Any) -> str:
    return json.dumps(record, ensure_ascii=False, separators=(",", ":"))


class RecordWriter:
    """Write records to a file through a temp file that is moved into place.

    Used as a context manager; the destination is only replaced when the
    block exits cleanly.
    """

    def __init__(self, out_path: str | os.PathLike[str], *, fmt: str | None = None) -> None:
        self._path = Path(out_path)
        self._fmt = fmt or detect_format(self._path)
        if self._fmt not in RECORD_FORMATS:
            raise ValueError(f"Unsupported record format {self._fmt!r}; expected one of {RECORD_FORMATS}")
        self._fp: TextIO | None = None
        self._tmp_path: Path | None = None
        self._buffer: list[Any] = []
        self.count = 0

    def open(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._tmp_path = self._path.parent / f"{self._path.name}.tmp"
        if _is_gzip(self._path):
            self._fp = gzip.open(self._tmp_path, "wt", encoding="utf-8", newline="")
        else:
            self._fp = open(self._tmp_path, "w", encoding="utf-8", newline="")

    def write(self, record: Any) -> None:
        assert self._fp is not None
        self.count += 1
        if self._fmt == "json":
            self._buffer.append(record)
            return
        self._fp.write(_dumps(record) + "\n")

    def close(self, *, commit: bool = True) -> None:
        """Close the handle and, when ``commit`` is true, move the file into place."""
        if self._fp is None:
            return
        try:
            if commit and self._fmt == "json":
                json.dump(self._buffer, self._fp, ensure_ascii=False, indent=2)
                self._fp.write("\n")
        except BaseException:
            commit = False
            raise
        finally:
            self._fp.close()
            self._fp = None
            if not commit and self._tmp_path is not None:
                self._tmp_path.unlink(missing_ok=True)
                self._tmp_path = None
        if self._tmp_path is not None:
            os.replace(self._tmp_path, self._path)
            self._tmp_path = None

    def __enter__(self) -> Self:
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close(commit=exc_type is None)


def write_records(
    records: Iterable[Any],
    out_path: str | os.PathLike[str] | None = None,
    *,
    fmt: str | None = None,
    stream: TextIO | None = None,
) -> int:
    """Write ``records`` to ``out_path`` (or ``stream``, stdout by default).

    Returns:
        int: Number of records written.
    """
    if out_path is not None and str(out_path) != "-":
        with RecordWriter(out_path, fmt=fmt) as writer:
            for record in records:
                writer.write(record)
        log.debug("Wrote %d record(s) to %s", writer.count, out_path)
        return writer.count

    target = stream if stream is not None else sys.stdout
    fmt = fmt or "jsonl"
    if fmt == "json":
        items = list(records)
        target.write(json.dumps(items, ensure_ascii=False, indent=2) + "\n")
        return len(items)
    count = 0
    for record in records:
        target.write(_dumps(record) + "\n")
        count += 1
    return count
