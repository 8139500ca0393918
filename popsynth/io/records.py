"""Line normalisation shared by the grid header parser and record reader.

Grid files are plain text.  A ``#`` starts a comment that runs to the end of
the line, tabs count as spaces, and surrounding spaces and line terminators
are ignored.  Lines that are empty after normalisation are skipped but still
counted so that diagnostics can quote the physical line number.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, TextIO, Tuple

_STRIP_CHARS = " \r\n"


def normalize_record(line: str) -> str:
    """Return ``line`` without comment, tabs, or surrounding whitespace."""

    hash_pos = line.find("#")
    if hash_pos >= 0:
        line = line[:hash_pos]
    return line.replace("\t", " ").strip(_STRIP_CHARS)


def split_fields(record: str) -> List[str]:
    """Split a normalised record on commas and trim every field.

    A single trailing comma does not introduce an extra field, while embedded
    empty fields (``"1,,2"``) are preserved as empty strings.
    """

    if not record:
        return []
    parts = record.split(",")
    if parts[-1] == "":
        parts.pop()
    return [part.strip(_STRIP_CHARS) for part in parts]


@dataclass(frozen=True)
class Checkpoint:
    """Restorable read position of a :class:`RecordCursor`."""

    offset: int
    line_no: int


class RecordCursor:
    """Iterate over the non-empty normalised records of a text stream."""

    def __init__(self, stream: TextIO, line_no: int = 1) -> None:
        self.stream = stream
        self.line_no = int(line_no)
        self.exhausted = False

    def checkpoint(self) -> Checkpoint:
        return Checkpoint(offset=self.stream.tell(), line_no=self.line_no)

    def restore(self, checkpoint: Checkpoint) -> None:
        self.stream.seek(checkpoint.offset)
        self.line_no = checkpoint.line_no
        self.exhausted = False

    def next_record(self) -> Optional[Tuple[int, str]]:
        """Return ``(line_no, record)`` for the next non-empty line, or ``None`` at EOF."""

        while True:
            raw = self.stream.readline()
            if raw == "":
                self.exhausted = True
                return None
            record = normalize_record(raw)
            line_no = self.line_no
            self.line_no += 1
            if record:
                return line_no, record


__all__ = ["normalize_record", "split_fields", "Checkpoint", "RecordCursor"]
