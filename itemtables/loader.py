"""
Loader stage: opens the item CSV and hands out its data rows lazily.

Responsibilities:
- encoding detection (charset-normalizer) unless an encoding is given
- header parsing and required column resolution
- streaming data rows, turning parser failures into MalformedRowError
"""

from __future__ import annotations

import csv
import logging
from typing import Iterator, List, Optional, Sequence

from charset_normalizer import from_bytes

from .exceptions import MalformedRowError, MissingColumnError, OpenError
from .models import ColumnPositions
from .rules import (
    CATEGORY_COLUMN,
    ENCODING_SAMPLE_SIZE,
    FALLBACK_ENCODING,
    ID_COLUMN,
    NAME_COLUMN,
)

logger = logging.getLogger(__name__)

_UTF8_BOM = b"\xef\xbb\xbf"


def detect_encoding(path, sample_size: int = ENCODING_SAMPLE_SIZE) -> str:
    """
    Best-effort encoding guess from the head of the file.

    UTF-8 and plain ASCII are reported as utf-8-sig so a BOM, if present,
    is stripped instead of sticking to the first header name.
    """
    try:
        with open(path, "rb") as fh:
            sample = fh.read(sample_size)
    except OSError as e:
        raise OpenError(f"could not open file: {e}") from e

    if sample.startswith(_UTF8_BOM):
        return "utf-8-sig"

    if len(sample) == sample_size:
        # drop the partial last line so a multibyte character is never cut
        cut = sample.rfind(b"\n")
        if cut != -1:
            sample = sample[: cut + 1]

    try:
        sample.decode("utf-8")
    except UnicodeDecodeError:
        pass
    else:
        return "utf-8-sig"

    match = from_bytes(sample).best()
    if match is None:
        logger.info("No encoding detected for %s, using %s", path, FALLBACK_ENCODING)
        return FALLBACK_ENCODING

    detected = match.encoding
    if detected.lower().replace("-", "_") in ("utf_8", "utf8", "ascii"):
        return "utf-8-sig"
    return detected


def resolve_columns(header: Sequence[str]) -> ColumnPositions:
    """Locate the required columns in a header row (trimmed, case-sensitive)."""
    found = {}
    for i, column in enumerate(header):
        trimmed = column.strip()
        # a repeated column name resolves to its last occurrence
        if trimmed in (ID_COLUMN, NAME_COLUMN, CATEGORY_COLUMN):
            found[trimmed] = i

    missing = [c for c in (ID_COLUMN, NAME_COLUMN, CATEGORY_COLUMN) if c not in found]
    if missing:
        raise MissingColumnError(missing)

    return ColumnPositions(
        id=found[ID_COLUMN],
        name=found[NAME_COLUMN],
        category=found[CATEGORY_COLUMN],
    )


class ItemSource:
    """
    A single read-through over an item CSV.

    Use as a context manager; the file handle is released on exit whether
    the rows were fully consumed or reading failed. rows() is not
    restartable.
    """

    def __init__(self, path, encoding: Optional[str] = None):
        self.path = path
        self.encoding = encoding
        self.positions: Optional[ColumnPositions] = None
        self._fh = None
        self._reader = None

    def open(self) -> "ItemSource":
        if self.encoding is None:
            self.encoding = detect_encoding(self.path)

        try:
            self._fh = open(self.path, "r", encoding=self.encoding, newline="")
        except (OSError, LookupError) as e:
            raise OpenError(f"could not open file: {e}") from e

        try:
            self._reader = csv.reader(self._fh, strict=True)
            header = self._next_row()
            if header is None:
                raise MissingColumnError([ID_COLUMN, NAME_COLUMN, CATEGORY_COLUMN])
            self.positions = resolve_columns(header)
        except Exception:
            self.close()
            raise

        logger.info(
            "Opened %s (encoding=%s, columns id=%d name=%d category=%d)",
            self.path,
            self.encoding,
            self.positions.id,
            self.positions.name,
            self.positions.category,
        )
        return self

    def close(self) -> None:
        if self._fh is not None:
            self._fh.close()
            self._fh = None

    def __enter__(self) -> "ItemSource":
        if self._fh is None:
            self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _next_row(self) -> Optional[List[str]]:
        try:
            return next(self._reader)
        except StopIteration:
            return None
        except csv.Error as e:
            raise MalformedRowError(self._reader.line_num, str(e)) from e
        except UnicodeDecodeError as e:
            raise MalformedRowError(self._reader.line_num + 1, f"cannot decode as {self.encoding}: {e}") from e

    def rows(self) -> Iterator[List[str]]:
        """Yield raw data rows (everything after the header)."""
        if self._reader is None:
            raise RuntimeError("ItemSource is not open")
        while True:
            row = self._next_row()
            if row is None:
                return
            yield row


def load_items(path, encoding: Optional[str] = None) -> ItemSource:
    """Open path and resolve its header; the caller closes the source."""
    return ItemSource(path, encoding=encoding).open()
