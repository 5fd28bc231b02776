"""
Homology Hit Lists and Homology Filtering

Two external searches flag candidates that are not novel small RNAs:

BLASTX / DIAMOND (protein homology), tabular output with 14 columns:
    qseqid sseqid bitscore evalue pident nident qlen slen length mismatch
    qstart qend sstart send
    A hit is significant when bitscore > 50, evalue < 1e-4 and pident > 30.

Infernal cmscan --tblout (Rfam families), whitespace-aligned columns.
    Rows of small-RNA families are skipped: those are the true positives
    the pipeline is looking for, not contamination.

Both reduce to a deduplicated, sorted list of query (transcript) names,
which filter_homology() subtracts from the candidate set.
"""

import logging
import re
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Set, Union

import pandas as pd

from .classifier import TranscriptRecord
from .errors import RecordFormatError

logger = logging.getLogger(__name__)

BLAST_COLUMNS = [
    "qseqid", "sseqid", "bitscore", "evalue", "pident", "nident", "qlen",
    "slen", "length", "mismatch", "qstart", "qend", "sstart", "send",
]

DEFAULT_MIN_BITSCORE = 50.0
DEFAULT_MAX_EVALUE = 1e-4
DEFAULT_MIN_PIDENT = 30.0

DEFAULT_SMALL_RNA_PATTERN = "sRNA"

# cmscan --tblout --fmt 1: 17 fixed columns then free-text description
TBLOUT_FMT1_FIELDS = 17
TBLOUT_FMT1_QUERY = 2
TBLOUT_FMT1_ACCESSION = 1
TBLOUT_FMT1_TARGET = 0
# --fmt 2 prepends idx and inserts clan and overlap columns
TBLOUT_FMT2_FIELDS = 26
TBLOUT_FMT2_QUERY = 3
TBLOUT_FMT2_ACCESSION = 2
TBLOUT_FMT2_TARGET = 1


# ============================================================================
# Protein homology (BLASTX / DIAMOND tabular)
# ============================================================================

def read_blast_table(blast_path: Union[str, Path]) -> pd.DataFrame:
    """
    Load a 14-column BLAST tabular file.

    Returns:
        DataFrame with BLAST_COLUMNS (empty if the file is empty)

    Raises:
        RecordFormatError: If the column count is not 14
    """
    try:
        df = pd.read_csv(blast_path, sep="\t", header=None, comment="#", dtype={0: str})
    except pd.errors.EmptyDataError:
        return pd.DataFrame(columns=BLAST_COLUMNS)

    if df.shape[1] != len(BLAST_COLUMNS):
        raise RecordFormatError(
            f"expected {len(BLAST_COLUMNS)} BLAST tabular columns, found {df.shape[1]}",
            str(blast_path),
        )
    df.columns = BLAST_COLUMNS
    for col in ("bitscore", "evalue", "pident"):
        df[col] = pd.to_numeric(df[col], errors="raise")
    return df


def significant_blast_hits(
    df: pd.DataFrame,
    min_bitscore: float = DEFAULT_MIN_BITSCORE,
    max_evalue: float = DEFAULT_MAX_EVALUE,
    min_pident: float = DEFAULT_MIN_PIDENT,
) -> Set[str]:
    """
    Query IDs with at least one hit passing all three thresholds.

    Thresholds are strict: bitscore > min, evalue < max, pident > min.
    """
    mask = (
        (df["bitscore"] > min_bitscore)
        & (df["evalue"] < max_evalue)
        & (df["pident"] > min_pident)
    )
    return set(df.loc[mask, "qseqid"].astype(str))


def blast_hit_ids(
    blast_paths: Iterable[Union[str, Path]],
    min_bitscore: float = DEFAULT_MIN_BITSCORE,
    max_evalue: float = DEFAULT_MAX_EVALUE,
    min_pident: float = DEFAULT_MIN_PIDENT,
) -> Set[str]:
    """Union of significant query IDs over several BLAST tables."""
    hits: Set[str] = set()
    for path in blast_paths:
        df = read_blast_table(path)
        file_hits = significant_blast_hits(df, min_bitscore, max_evalue, min_pident)
        logger.info(f"{path}: {len(df)} alignments, {len(file_hits)} significant queries")
        hits |= file_hits
    return hits


# ============================================================================
# Structural RNA homology (Infernal cmscan tblout)
# ============================================================================

def parse_tblout(
    tblout_path: Union[str, Path],
    small_rna_pattern: Optional[str] = DEFAULT_SMALL_RNA_PATTERN,
    exclude_accessions: Optional[Set[str]] = None,
) -> Set[str]:
    """
    Collect query names from a cmscan tabular file, skipping small-RNA families.

    Args:
        tblout_path: cmscan --tblout output (format 1 or 2)
        small_rna_pattern: Regex; rows whose target name or description
            match it are skipped. None disables the check.
        exclude_accessions: Rfam accessions (e.g. RF00057) to skip as well

    Returns:
        Set of query names with a non-small-RNA family hit

    Raises:
        RecordFormatError: If a data row has too few columns
    """
    pattern = re.compile(small_rna_pattern) if small_rna_pattern else None
    exclude_accessions = exclude_accessions or set()

    n_fields = TBLOUT_FMT1_FIELDS
    query_col, acc_col, target_col = TBLOUT_FMT1_QUERY, TBLOUT_FMT1_ACCESSION, TBLOUT_FMT1_TARGET

    hits: Set[str] = set()
    skipped = 0
    with open(tblout_path) as f:
        for line_number, line in enumerate(f, start=1):
            if line.startswith("#"):
                if line.startswith("#idx"):
                    n_fields = TBLOUT_FMT2_FIELDS
                    query_col = TBLOUT_FMT2_QUERY
                    acc_col = TBLOUT_FMT2_ACCESSION
                    target_col = TBLOUT_FMT2_TARGET
                continue
            if not line.strip():
                continue

            parts = line.split(None, n_fields)
            if len(parts) < n_fields:
                raise RecordFormatError(
                    f"expected at least {n_fields} tblout columns, found {len(parts)}",
                    str(tblout_path), line_number, line.rstrip("\n"),
                )
            description = parts[n_fields].strip() if len(parts) > n_fields else ""

            if parts[acc_col] in exclude_accessions:
                skipped += 1
                continue
            if pattern is not None and (
                pattern.search(parts[target_col]) or pattern.search(description)
            ):
                skipped += 1
                continue
            hits.add(parts[query_col])

    logger.info(f"{tblout_path}: {len(hits)} queries with non-sRNA hits ({skipped} sRNA rows skipped)")
    return hits


def rfam_hit_ids(
    tblout_paths: Iterable[Union[str, Path]],
    small_rna_pattern: Optional[str] = DEFAULT_SMALL_RNA_PATTERN,
    exclude_accessions: Optional[Set[str]] = None,
) -> Set[str]:
    """Union of non-small-RNA query names over several tblout files."""
    hits: Set[str] = set()
    for path in tblout_paths:
        hits |= parse_tblout(path, small_rna_pattern, exclude_accessions)
    return hits


# ============================================================================
# Hit list I/O
# ============================================================================

def write_hit_list(hit_ids: Iterable[str], output_path: Union[str, Path]) -> int:
    """Write IDs one per line, deduplicated and sorted. Returns the count."""
    ids = sorted(set(hit_ids))
    with open(output_path, "w") as f:
        for hit in ids:
            f.write(hit + "\n")
    return len(ids)


def read_hit_list(hit_list_path: Optional[Union[str, Path]]) -> Optional[Set[str]]:
    """
    Read a newline-separated ID list.

    Returns:
        Set of IDs, or None if no path was given or the file does not exist
        (the search was not run)
    """
    if hit_list_path is None:
        return None
    path = Path(hit_list_path)
    if not path.exists():
        return None
    with open(path) as f:
        return {line.strip() for line in f if line.strip()}


# ============================================================================
# Filtering
# ============================================================================

def filter_homology(
    records: Sequence[TranscriptRecord],
    hit_ids: Optional[Set[str]],
    source: str = "homology",
) -> List[TranscriptRecord]:
    """
    Remove candidates named in a hit list.

    A record matches if its transcript ID or the FASTA name of its
    extracted sequence is in ``hit_ids``.

    Args:
        records: Candidate transcripts
        hit_ids: Significant-hit IDs, or None if the search was not run
        source: Label used in log messages ('protein', 'rfam', ...)

    Returns:
        Surviving records in order; all records if hit_ids is None

    Examples:
        >>> from snaptpipe.gff_utils import GenomicInterval
        >>> t = TranscriptRecord(GenomicInterval("c", 0, 100, attributes={"transcript_id": "tx42"}))
        >>> filter_homology([t], {"tx42"})
        []
    """
    if hit_ids is None:
        logger.warning(
            f"No {source} hit list available; skipping {source} homology filter "
            f"(reduced curation confidence)"
        )
        return list(records)

    kept = [r for r in records if not (r.identifiers & hit_ids)]
    logger.info(
        f"{source} homology filter: removed {len(records) - len(kept)} of "
        f"{len(records)} transcripts"
    )
    return kept
