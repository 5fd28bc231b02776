"""
Exceptions raised by the SnapT curation library.

Structural problems (malformed records, missing contigs) are fatal for a
stage: silently dropping a record would corrupt every downstream count.
"""

from typing import Optional


class SnapTError(Exception):
    """Base class for all curation errors."""


class RecordFormatError(SnapTError, ValueError):
    """A tab-delimited input record could not be parsed."""

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        line_number: Optional[int] = None,
        line: Optional[str] = None,
    ):
        self.path = path
        self.line_number = line_number
        self.line = line

        location = ""
        if path is not None and line_number is not None:
            location = f"{path}:{line_number}: "
        elif line_number is not None:
            location = f"line {line_number}: "
        super().__init__(f"{location}{message}")


class ContigLengthError(SnapTError, LookupError):
    """A contig referenced by a transcript is absent from the length table."""

    def __init__(self, contig_id: str):
        self.contig_id = contig_id
        super().__init__(
            f"Contig '{contig_id}' not found in the contig length table; "
            f"check that the genome index matches the assembly"
        )

    def __str__(self) -> str:
        return self.args[0]
