"""
Consolidation of ORF-based and annotation-based classifications.

The two evidence sources are combined conjunctively: a transcript survives
only if the ORF pass calls it intergenic or antisense AND, when an
annotation was supplied, the annotation pass does too. Annotation catches
curated genes the ORF predictor misses; ORF prediction catches genes the
annotation never had.

Label and TPM are taken from the ORF pass, output follows ORF-pass order.
"""

import logging
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Union

from .classifier import (
    CLASSIFICATION_ATTRIBUTE,
    EVIDENCE_ATTRIBUTE,
    Classification,
    EvidenceSource,
    TranscriptRecord,
    with_classification,
)
from .errors import RecordFormatError
from .gff_utils import parse_gff_file

logger = logging.getLogger(__name__)


def classification_map(records: Iterable[TranscriptRecord]) -> Dict[str, Classification]:
    """Map transcript ID to classification."""
    return {r.transcript_id: r.classification for r in records}


def consolidate(
    orf_records: Sequence[TranscriptRecord],
    annotation_records: Optional[Iterable[TranscriptRecord]] = None,
) -> List[TranscriptRecord]:
    """
    Merge the two classification passes into one non-coding candidate set.

    Args:
        orf_records: Result of classifying against the ORF predictions
        annotation_records: Result of classifying against the annotation,
            or None if no annotation was supplied. Transcripts absent from
            this set count as not non-coding.

    Returns:
        Non-coding TranscriptRecords in ORF-pass order, each ID at most once

    Examples:
        >>> from snaptpipe.gff_utils import GenomicInterval
        >>> iv = GenomicInterval("c1", 100, 200, "+", attributes={"transcript_id": "t1"})
        >>> orf = [TranscriptRecord.from_interval(iv, Classification.INTERGENIC)]
        >>> anno = [TranscriptRecord.from_interval(iv, Classification.CODING)]
        >>> len(consolidate(orf)), len(consolidate(orf, anno))
        (1, 0)
    """
    annotation: Optional[Mapping[str, Classification]] = None
    source = EvidenceSource.ORF
    if annotation_records is not None:
        annotation = classification_map(annotation_records)
        source = EvidenceSource.BOTH

    merged: List[TranscriptRecord] = []
    seen = set()

    for record in orf_records:
        tid = record.transcript_id
        if tid in seen:
            continue
        if not record.classification.is_noncoding:
            continue
        if annotation is not None:
            other = annotation.get(tid, Classification.UNCLASSIFIED)
            if not other.is_noncoding:
                continue
        seen.add(tid)
        merged.append(with_classification(record, record.classification, source))

    logger.info(
        f"Consolidated {len(merged)} non-coding transcripts "
        f"(evidence: {source.value})"
    )
    return merged


def read_classified_gff(gff_path: Union[str, Path]) -> List[TranscriptRecord]:
    """
    Read transcripts previously written with a classification attribute.

    Raises:
        RecordFormatError: If a record lacks a valid classification attribute
    """
    records = []
    for interval in parse_gff_file(gff_path):
        label = interval.attributes.get(CLASSIFICATION_ATTRIBUTE)
        try:
            classification = Classification(label)
        except ValueError:
            raise RecordFormatError(
                f"record {interval.feature_id!r} has no valid "
                f"'{CLASSIFICATION_ATTRIBUTE}' attribute (got {label!r})",
                str(gff_path),
            )
        evidence = interval.attributes.get(EVIDENCE_ATTRIBUTE)
        records.append(TranscriptRecord.from_interval(
            interval,
            classification,
            EvidenceSource(evidence) if evidence in {e.value for e in EvidenceSource} else None,
        ))
    return records
