"""
Summary tables for the final small ncRNA call set.

The expression tables are what a TPM curve is drawn from; the expected
shape is roughly exponential, and a long low-TPM tail suggests raising the
minimum coverage used during assembly.
"""

from typing import Dict, Iterable, List, Sequence

import numpy as np
import pandas as pd

from .classifier import Classification, TranscriptRecord

REPORTED_CLASSES = (Classification.INTERGENIC, Classification.ANTISENSE)

SUMMARY_COLUMNS = [
    "classification", "count", "tpm_min", "tpm_median", "tpm_mean", "tpm_max",
    "length_median",
]


def split_by_classification(
    records: Iterable[TranscriptRecord],
) -> Dict[str, List[TranscriptRecord]]:
    """
    Split records into intergenic and antisense lists (order preserved).

    Examples:
        >>> split_by_classification([])
        {'intergenic': [], 'antisense': []}
    """
    split: Dict[str, List[TranscriptRecord]] = {c.value: [] for c in REPORTED_CLASSES}
    for record in records:
        if record.classification.value in split:
            split[record.classification.value].append(record)
    return split


def expression_table(records: Sequence[TranscriptRecord]) -> pd.DataFrame:
    """
    One row per transcript, ranked by decreasing TPM within the call set.

    Columns: rank, transcript_id, classification, contig, start, end,
    strand, length, tpm. Transcripts without a TPM value are listed last.
    """
    rows = [
        {
            "transcript_id": r.transcript_id,
            "classification": r.classification.value,
            "contig": r.interval.contig_id,
            "start": r.interval.start + 1,
            "end": r.interval.end,
            "strand": r.interval.strand,
            "length": r.length,
            "tpm": r.expression_value if r.expression_value is not None else np.nan,
        }
        for r in records
    ]
    columns = ["rank", "transcript_id", "classification", "contig", "start", "end",
               "strand", "length", "tpm"]
    if not rows:
        return pd.DataFrame(columns=columns)

    df = pd.DataFrame(rows)
    df = df.sort_values("tpm", ascending=False, na_position="last", kind="mergesort")
    df.insert(0, "rank", np.arange(1, len(df) + 1))
    return df.reset_index(drop=True)[columns]


def summarize_expression(records: Sequence[TranscriptRecord]) -> pd.DataFrame:
    """
    Per-class count and TPM distribution, plus an 'all' row.

    Classes with no records are reported with count 0 and NaN statistics.
    """
    split = split_by_classification(records)
    groups = list(split.items()) + [("all", [r for v in split.values() for r in v])]

    rows = []
    for label, group in groups:
        tpm = np.array(
            [r.expression_value for r in group if r.expression_value is not None],
            dtype=float,
        )
        lengths = np.array([r.length for r in group], dtype=float)
        rows.append({
            "classification": label,
            "count": len(group),
            "tpm_min": float(np.min(tpm)) if tpm.size else np.nan,
            "tpm_median": float(np.median(tpm)) if tpm.size else np.nan,
            "tpm_mean": float(np.mean(tpm)) if tpm.size else np.nan,
            "tpm_max": float(np.max(tpm)) if tpm.size else np.nan,
            "length_median": float(np.median(lengths)) if lengths.size else np.nan,
        })
    return pd.DataFrame(rows, columns=SUMMARY_COLUMNS)
