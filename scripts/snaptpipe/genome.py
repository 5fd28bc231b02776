"""
Contig length table.

Lengths come from a samtools faidx index (``genome.fa.fai``) when one is
given or sits next to the FASTA, otherwise from the FASTA itself.
"""

import gzip
import logging
from pathlib import Path
from typing import Dict, Mapping, Union

import pandas as pd
from Bio import SeqIO

from .errors import ContigLengthError, RecordFormatError

logger = logging.getLogger(__name__)


def read_fai(fai_path: Union[str, Path]) -> Dict[str, int]:
    """
    Read contig lengths from a faidx index (columns: name, length, ...).

    Raises:
        RecordFormatError: If the index has fewer than 2 columns or a
            non-integer length
    """
    try:
        fai = pd.read_csv(fai_path, sep="\t", header=None, dtype={0: str})
    except pd.errors.EmptyDataError:
        return {}
    if fai.shape[1] < 2:
        raise RecordFormatError(
            f"faidx index needs at least 2 columns, found {fai.shape[1]}", str(fai_path)
        )
    try:
        lengths = fai[1].astype(int)
    except (ValueError, TypeError):
        raise RecordFormatError("non-integer contig length in faidx index", str(fai_path))
    return dict(zip(fai[0], lengths.tolist()))


def read_fasta_lengths(fasta_path: Union[str, Path]) -> Dict[str, int]:
    """Contig lengths by scanning a FASTA file (supports .gz)."""
    opener = gzip.open if str(fasta_path).endswith(".gz") else open
    lengths = {}
    with opener(fasta_path, "rt") as handle:
        for record in SeqIO.parse(handle, "fasta"):
            lengths[record.id] = len(record.seq)
    return lengths


def load_contig_lengths(path: Union[str, Path]) -> Dict[str, int]:
    """
    Load the contig length table for a genome.

    Args:
        path: A ``.fai`` index, or a FASTA file. For a FASTA, an adjacent
            ``<fasta>.fai`` is preferred when present.

    Returns:
        Dictionary mapping contig ID to length

    Raises:
        FileNotFoundError: If the path does not exist
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Genome/index file not found: {path}")

    if path.suffix == ".fai":
        lengths = read_fai(path)
    else:
        index = path.with_name(path.name + ".fai")
        if index.exists():
            logger.info(f"Using faidx index {index}")
            lengths = read_fai(index)
        else:
            lengths = read_fasta_lengths(path)

    logger.info(f"Loaded lengths of {len(lengths)} contigs from {path}")
    return lengths


def contig_length(lengths: Mapping[str, int], contig_id: str) -> int:
    """
    Look up a contig's length; a missing contig is a configuration error.

    Raises:
        ContigLengthError: If the contig is not in the table
    """
    try:
        return lengths[contig_id]
    except KeyError:
        raise ContigLengthError(contig_id) from None
