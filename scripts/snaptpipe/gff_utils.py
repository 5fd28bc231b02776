"""
GTF/GFF Record Utilities for SnapT

This module parses the 9-column feature records produced by the assembly and
annotation tools of the pipeline, and writes them back in the same shape.

Record Format (tab-separated):
    Col 1: Contig / sequence ID
    Col 2: Source (StringTie, Prodigal_v2.6.3, Prokka, ...)
    Col 3: Feature type (transcript, exon, CDS, gene, ...)
    Col 4: Start (1-based, inclusive)
    Col 5: End (1-based, inclusive)
    Col 6: Score
    Col 7: Strand (+, - or .)
    Col 8: Frame
    Col 9: Attributes, either GTF style (key "value";) or GFF3 style (key=value;)

Coordinates are converted to 0-based half-open on parsing, so that
``length = end - start`` everywhere in the library, and converted back on
writing.

Common use cases:
- Read StringTie transcripts, Prodigal ORFs and Prokka annotation
- Tag curated transcripts and write them back for bedtools/IGV
- Build the names bedtools getfasta -s gives extracted sequences
"""

import gzip
import re
import sys
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Set, TextIO, Tuple, Union

from .errors import RecordFormatError

GFF_FIELD_COUNT = 9

STRAND_FORWARD = "+"
STRAND_REVERSE = "-"
STRAND_UNKNOWN = "."
VALID_STRANDS = (STRAND_FORWARD, STRAND_REVERSE, STRAND_UNKNOWN)

ATTR_STYLE_GTF = "gtf"
ATTR_STYLE_GFF3 = "gff3"

# Attribute keys searched (in order) for a record's identity
ID_ATTRIBUTE_KEYS = ("transcript_id", "ID", "gene_id")
EXPRESSION_ATTRIBUTE = "TPM"

_GTF_ATTR = re.compile(r'^(\S+)\s+"?(.*?)"?$')


@dataclass(frozen=True)
class GenomicInterval:
    """One parsed feature record (0-based, half-open coordinates)."""
    contig_id: str
    start: int
    end: int
    strand: str = STRAND_UNKNOWN
    feature_type: str = "transcript"
    attributes: Dict[str, str] = field(default_factory=dict, hash=False)
    source: str = "."
    score: str = "."
    frame: str = "."
    attribute_style: str = ATTR_STYLE_GTF

    def __post_init__(self):
        if not self.contig_id:
            raise ValueError("contig_id must be non-empty")
        if self.start < 0 or self.start > self.end:
            raise ValueError(
                f"Invalid interval {self.contig_id}:{self.start}-{self.end} "
                f"(requires 0 <= start <= end)"
            )
        if self.strand not in VALID_STRANDS:
            raise ValueError(f"Invalid strand symbol: {self.strand!r}")

    @property
    def length(self) -> int:
        """Interval length in bases."""
        return self.end - self.start

    @property
    def feature_id(self) -> str:
        """Record identity: transcript_id, ID or gene_id, else its FASTA key."""
        for key in ID_ATTRIBUTE_KEYS:
            value = self.attributes.get(key)
            if value:
                return value
        return fasta_key(self)

    def get_float(self, key: str) -> Optional[float]:
        """Numeric attribute value, or None if absent or not numeric."""
        value = self.attributes.get(key)
        if value is None:
            return None
        try:
            return float(value)
        except ValueError:
            return None

    def with_attributes(self, **updates: str) -> "GenomicInterval":
        """Return a copy with attributes added or replaced (order preserved)."""
        merged = dict(self.attributes)
        merged.update({k: str(v) for k, v in updates.items()})
        return replace(self, attributes=merged)


def parse_attributes(text: str) -> Tuple[Dict[str, str], str]:
    """
    Parse column 9 into an ordered mapping and detect its style.

    Args:
        text: Raw attribute column

    Returns:
        Tuple of (attributes, style) where style is 'gtf' or 'gff3'

    Examples:
        >>> parse_attributes('gene_id "STRG.1"; transcript_id "STRG.1.1"; TPM "12.5";')
        ({'gene_id': 'STRG.1', 'transcript_id': 'STRG.1.1', 'TPM': '12.5'}, 'gtf')
        >>> parse_attributes('ID=1_1;partial=00')
        ({'ID': '1_1', 'partial': '00'}, 'gff3')
    """
    attributes: Dict[str, str] = {}
    style = ATTR_STYLE_GFF3
    text = text.strip()
    if text in ("", "."):
        return attributes, style

    for part in text.split(";"):
        part = part.strip()
        if not part:
            continue
        match = _GTF_ATTR.match(part)
        if match and " " in part and "=" not in part.split()[0]:
            attributes[match.group(1)] = match.group(2)
            style = ATTR_STYLE_GTF
        elif "=" in part:
            key, _, value = part.partition("=")
            attributes[key.strip()] = value.strip()
        else:
            # Flag-style attribute without a value
            attributes[part] = ""
    return attributes, style


def format_attributes(attributes: Dict[str, str], style: str = ATTR_STYLE_GTF) -> str:
    """
    Serialize attributes back into column 9.

    Examples:
        >>> format_attributes({'gene_id': 'STRG.1', 'TPM': '3.0'})
        'gene_id "STRG.1"; TPM "3.0";'
        >>> format_attributes({'ID': '1_1'}, style='gff3')
        'ID=1_1'
    """
    if not attributes:
        return "."
    if style == ATTR_STYLE_GFF3:
        return ";".join(f"{k}={v}" if v != "" else k for k, v in attributes.items())
    return " ".join(f'{k} "{v}";' for k, v in attributes.items())


def parse_gff_line(
    line: str,
    line_number: Optional[int] = None,
    path: Optional[str] = None,
) -> GenomicInterval:
    """
    Parse a single 9-column record into a GenomicInterval.

    Args:
        line: Tab-separated record line
        line_number: Line number, reported on error
        path: Source file, reported on error

    Returns:
        GenomicInterval with 0-based half-open coordinates

    Raises:
        RecordFormatError: Wrong field count, non-numeric coordinates,
            start > end, empty contig or unknown strand symbol

    Examples:
        >>> iv = parse_gff_line("contig1\\tStringTie\\ttranscript\\t101\\t200\\t1000\\t+\\t.\\ttranscript_id \\"t1\\";")
        >>> (iv.start, iv.end, iv.length)
        (100, 200, 100)
    """
    stripped = line.rstrip("\r\n")
    parts = stripped.split("\t")
    if len(parts) != GFF_FIELD_COUNT:
        raise RecordFormatError(
            f"expected {GFF_FIELD_COUNT} tab-separated fields, found {len(parts)}",
            path, line_number, stripped,
        )

    contig, source, feature_type, start_s, end_s, score, strand, frame, attr_text = parts

    if not contig:
        raise RecordFormatError("empty contig ID", path, line_number, stripped)

    try:
        start = int(start_s)
        end = int(end_s)
    except ValueError:
        raise RecordFormatError(
            f"non-numeric coordinates ({start_s!r}, {end_s!r})", path, line_number, stripped
        )

    if start < 1:
        raise RecordFormatError(
            f"start must be >= 1 in 1-based coordinates, got {start}", path, line_number, stripped
        )
    if start > end:
        raise RecordFormatError(f"start {start} > end {end}", path, line_number, stripped)

    # GFF3 uses '?' for strand-relevant but unknown
    if strand == "?":
        strand = STRAND_UNKNOWN
    if strand not in VALID_STRANDS:
        raise RecordFormatError(f"invalid strand {strand!r}", path, line_number, stripped)

    attributes, style = parse_attributes(attr_text)

    return GenomicInterval(
        contig_id=contig,
        start=start - 1,
        end=end,
        strand=strand,
        feature_type=feature_type,
        attributes=attributes,
        source=source,
        score=score,
        frame=frame,
        attribute_style=style,
    )


def _open_text(path: Union[str, Path], mode: str = "rt"):
    path = str(path)
    opener = gzip.open if path.endswith(".gz") else open
    return opener(path, mode)


def parse_gff_file(
    gff_path: Union[str, Path],
    feature_types: Optional[Iterable[str]] = None,
) -> Iterator[GenomicInterval]:
    """
    Parse a GTF/GFF file and yield records.

    Comment and blank lines are skipped; a ``##FASTA`` directive (Prokka
    GFF3) ends the feature section.

    Args:
        gff_path: Path to GTF/GFF file (supports .gz)
        feature_types: Keep only these feature types (column 3); None keeps all

    Yields:
        GenomicInterval objects in file order

    Raises:
        RecordFormatError: On the first malformed record
    """
    wanted: Optional[Set[str]] = set(feature_types) if feature_types is not None else None

    with _open_text(gff_path) as f:
        for line_number, line in enumerate(f, start=1):
            if line.startswith("##FASTA"):
                break
            if line.startswith("#") or not line.strip():
                continue

            record = parse_gff_line(line, line_number, str(gff_path))
            if wanted is not None and record.feature_type not in wanted:
                continue
            yield record


def read_gff(
    gff_path: Union[str, Path],
    feature_types: Optional[Iterable[str]] = None,
) -> List[GenomicInterval]:
    """Read all records of a GTF/GFF file into a list."""
    return list(parse_gff_file(gff_path, feature_types))


def format_gff_line(interval: GenomicInterval) -> str:
    """
    Serialize a GenomicInterval as a 9-column record (no trailing newline).

    Examples:
        >>> iv = GenomicInterval("contig1", 100, 200, "+", attributes={"transcript_id": "t1"})
        >>> format_gff_line(iv)
        'contig1\\t.\\ttranscript\\t101\\t200\\t.\\t+\\t.\\ttranscript_id "t1";'
    """
    return "\t".join([
        interval.contig_id,
        interval.source,
        interval.feature_type,
        str(interval.start + 1),
        str(interval.end),
        interval.score,
        interval.strand,
        interval.frame,
        format_attributes(interval.attributes, interval.attribute_style),
    ])


def write_gff(
    intervals: Iterable[GenomicInterval],
    output: Union[str, Path, TextIO, None] = None,
) -> int:
    """
    Write records to a path, an open handle, or stdout.

    Args:
        intervals: Records to write, in order
        output: Output path (.gz supported), open text handle, or None for stdout

    Returns:
        Number of records written
    """
    if output is None:
        return _write_records(intervals, sys.stdout)
    if hasattr(output, "write"):
        return _write_records(intervals, output)

    with _open_text(output, "wt") as handle:
        return _write_records(intervals, handle)


def _write_records(intervals: Iterable[GenomicInterval], handle: TextIO) -> int:
    count = 0
    for interval in intervals:
        handle.write(format_gff_line(interval) + "\n")
        count += 1
    return count


def fasta_key(interval: GenomicInterval, stranded: bool = True) -> str:
    """
    Name bedtools getfasta gives the sequence extracted for an interval.

    With ``-s`` the strand is appended in parentheses. The start is 0-based,
    the end 1-based inclusive (identical to half-open).

    Examples:
        >>> fasta_key(GenomicInterval("contig1", 99, 200, "-"))
        'contig1:99-200(-)'
        >>> fasta_key(GenomicInterval("contig1", 99, 200, "-"), stranded=False)
        'contig1:99-200'
    """
    key = f"{interval.contig_id}:{interval.start}-{interval.end}"
    if stranded:
        key += f"({interval.strand})"
    return key


def interval_identifiers(interval: GenomicInterval) -> Set[str]:
    """
    All names under which an interval may appear in downstream tool output.

    Includes its feature ID and the stranded and unstranded FASTA keys.
    """
    return {
        interval.feature_id,
        fasta_key(interval, stranded=True),
        fasta_key(interval, stranded=False),
    }
