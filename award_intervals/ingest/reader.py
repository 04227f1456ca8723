"""
Streaming reader for `;`-delimited award-list sources.

Rows are produced lazily from an open text handle, so sources of any size are
read with bounded memory. The reader owns no file lifecycle beyond the
`open_source` context manager used for path inputs.
"""

from __future__ import annotations

import csv
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, TextIO, Tuple, Union

from award_intervals.domain.errors import MalformedSource, SourceNotFound

DELIMITER = ";"
Source = Union[str, Path, TextIO]


@contextmanager
def open_source(source: Source) -> Iterator[TextIO]:
    """
    Yield a readable text handle for `source`.

    Paths are opened (and closed on exit) here; open handles are passed through
    untouched and stay owned by the caller. A UTF-8 byte-order mark is dropped.

    Raises
    ------
    SourceNotFound
        If a path cannot be opened for reading.
    """
    if not isinstance(source, (str, Path)):
        yield source
        return

    try:
        handle = open(source, "r", newline="", encoding="utf-8-sig")
    except OSError as exc:
        raise SourceNotFound(str(source)) from exc
    with handle:
        yield handle


class SourceReader:
    """
    Iterate `(line_number, row)` pairs from a delimited text handle.

    `columns` is available before iteration starts so the header can be
    validated without consuming any data row.
    """

    def __init__(self, handle: TextIO, delimiter: str = DELIMITER) -> None:
        self._reader = csv.DictReader(handle, delimiter=delimiter)
        self._name = str(getattr(handle, "name", "<stream>"))

    @property
    def columns(self) -> List[str]:
        try:
            fieldnames = self._reader.fieldnames
        except (csv.Error, UnicodeDecodeError) as exc:
            raise MalformedSource(self._name, 1, str(exc)) from exc
        return [name.strip() for name in fieldnames] if fieldnames else []

    def __iter__(self) -> Iterator[Tuple[int, Dict[str, Optional[str]]]]:
        columns = self.columns
        for raw in self._guarded(self._reader):
            row: Dict[str, Optional[str]] = {}
            for key, value in raw.items():
                if key is None:
                    # Surplus cells beyond the header.
                    continue
                row[key.strip()] = value
            for name in columns:
                row.setdefault(name, None)
            yield self._reader.line_num, row

    def _guarded(self, rows: Iterator[Dict[Optional[str], Any]]) -> Iterator[Dict[Optional[str], Any]]:
        try:
            yield from rows
        except (csv.Error, UnicodeDecodeError) as exc:
            raise MalformedSource(self._name, self._reader.line_num, str(exc)) from exc


__all__ = ["DELIMITER", "Source", "SourceReader", "open_source"]
