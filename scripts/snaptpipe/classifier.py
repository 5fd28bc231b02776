"""
Non-coding Transcript Classification

Assigns every assembled transcript one of four classes against a single
reference set of coding features (Prodigal ORFs or a supplied annotation):

Classification Rules (highest priority first):
    - coding:       a same-strand feature overlaps the transcript
    - antisense:    an opposite-strand feature overlaps it by at least
                    ``antisense_overlap_min`` bases
    - intergenic:   no feature of either strand within ``intergenic_margin``
    - unclassified: anything else (too close to call intergenic, not
                    overlapping enough to call antisense)

Short-peptide exception:
    A same-strand feature shorter than ``peptide_len_max`` is ignored when
    the transcript is more than ``peptide_ratio_min`` times longer than it;
    a small embedded ORF does not make a long transcript coding.

Only coding short-circuits; the other rules are evaluated over every nearby
feature, so the result never depends on the order of the reference set.
"""

import logging
from collections import OrderedDict, defaultdict
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Set

from .errors import RecordFormatError
from .gff_utils import (
    EXPRESSION_ATTRIBUTE,
    GenomicInterval,
    interval_identifiers,
)
from .overlap import ReferenceIndex, relate

logger = logging.getLogger(__name__)

CLASSIFICATION_ATTRIBUTE = "classification"
EVIDENCE_ATTRIBUTE = "evidence"


class Classification(str, Enum):
    """Outcome of classifying one transcript against one reference set."""
    UNCLASSIFIED = "unclassified"
    INTERGENIC = "intergenic"
    ANTISENSE = "antisense"
    CODING = "coding"

    @property
    def is_noncoding(self) -> bool:
        return self in (Classification.INTERGENIC, Classification.ANTISENSE)

    def __str__(self) -> str:
        return self.value


class EvidenceSource(str, Enum):
    """Reference set(s) a classification was derived from."""
    ORF = "orf"
    ANNOTATION = "annotation"
    BOTH = "both"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ClassifierParams:
    """Thresholds of the classification rule."""
    intergenic_margin: int = 30
    antisense_overlap_min: int = 10
    peptide_len_max: int = 100
    peptide_ratio_min: float = 3

    def __post_init__(self):
        if self.intergenic_margin < 0:
            raise ValueError(f"intergenic_margin must be >= 0, got {self.intergenic_margin}")
        if self.antisense_overlap_min < 1:
            raise ValueError(
                f"antisense_overlap_min must be >= 1, got {self.antisense_overlap_min}"
            )


DEFAULT_PARAMS = ClassifierParams()


@dataclass(frozen=True)
class TranscriptRecord:
    """A transcript interval with its classification and expression value."""
    interval: GenomicInterval
    classification: Classification = Classification.UNCLASSIFIED
    evidence_source: Optional[EvidenceSource] = None
    expression_value: Optional[float] = None

    @classmethod
    def from_interval(
        cls,
        interval: GenomicInterval,
        classification: Classification = Classification.UNCLASSIFIED,
        evidence_source: Optional[EvidenceSource] = None,
    ) -> "TranscriptRecord":
        return cls(
            interval=interval,
            classification=classification,
            evidence_source=evidence_source,
            expression_value=interval.get_float(EXPRESSION_ATTRIBUTE),
        )

    @property
    def transcript_id(self) -> str:
        return self.interval.feature_id

    @property
    def length(self) -> int:
        return self.interval.length

    @property
    def identifiers(self) -> Set[str]:
        """Transcript ID plus the FASTA names of its extracted sequence."""
        return interval_identifiers(self.interval)

    def to_interval(self) -> GenomicInterval:
        """Interval tagged with its classification, ready for writing."""
        updates = {CLASSIFICATION_ATTRIBUTE: self.classification.value}
        if self.evidence_source is not None:
            updates[EVIDENCE_ATTRIBUTE] = self.evidence_source.value
        return self.interval.with_attributes(**updates)


def is_short_peptide(
    feature: GenomicInterval,
    transcript_length: int,
    params: ClassifierParams = DEFAULT_PARAMS,
) -> bool:
    """
    True if a same-strand feature falls under the short-peptide exception.

    Examples:
        >>> orf = GenomicInterval("c", 0, 60, "+")
        >>> is_short_peptide(orf, 400)
        True
        >>> is_short_peptide(orf, 150)
        False
    """
    return (
        feature.length < params.peptide_len_max
        and transcript_length > params.peptide_ratio_min * feature.length
    )


def classify(
    transcript: GenomicInterval,
    reference: Iterable[GenomicInterval],
    params: ClassifierParams = DEFAULT_PARAMS,
) -> Classification:
    """
    Classify one transcript against a reference feature set.

    Args:
        transcript: Transcript interval
        reference: Reference features (any contig, any order). Passing the
            output of ReferenceIndex.nearby() avoids scanning the full set.
        params: Classification thresholds

    Returns:
        Exactly one Classification

    Examples:
        >>> t = GenomicInterval("contig1", 100, 200, "+")
        >>> classify(t, [GenomicInterval("contig1", 300, 400, "+")]).value
        'intergenic'
        >>> classify(t, [GenomicInterval("contig1", 150, 250, "-")]).value
        'antisense'
        >>> classify(t, []).value
        'intergenic'
    """
    transcript_length = transcript.length
    antisense = False
    too_close = False

    for feature in reference:
        rel = relate(transcript, feature)
        if not rel.same_contig:
            continue

        if rel.same_strand and is_short_peptide(feature, transcript_length, params):
            continue

        if rel.same_strand and rel.overlaps:
            return Classification.CODING

        if rel.opposite_strand and rel.overlap_len >= params.antisense_overlap_min:
            antisense = True
        elif rel.overlaps or rel.gap < params.intergenic_margin:
            too_close = True

    if antisense:
        return Classification.ANTISENSE
    if too_close:
        return Classification.UNCLASSIFIED
    return Classification.INTERGENIC


def _classify_contig(
    transcripts: List[GenomicInterval],
    features: List[GenomicInterval],
    params: ClassifierParams,
) -> List[Classification]:
    """Classify the transcripts of one contig (worker entry point)."""
    index = ReferenceIndex(features)
    return [
        classify(t, index.nearby(t, params.intergenic_margin), params)
        for t in transcripts
    ]


def classify_transcripts(
    transcripts: Sequence[GenomicInterval],
    reference: Iterable[GenomicInterval],
    params: ClassifierParams = DEFAULT_PARAMS,
    evidence_source: EvidenceSource = EvidenceSource.ORF,
    jobs: int = 1,
) -> List[TranscriptRecord]:
    """
    Classify every transcript against one reference set.

    Contigs are independent, so with ``jobs > 1`` they are spread over a
    process pool. Output order always follows ``transcripts``.

    Args:
        transcripts: Assembled transcript intervals
        reference: Coding features of one evidence source
        params: Classification thresholds
        evidence_source: Tag recorded on every resulting TranscriptRecord
        jobs: Worker processes (1 = classify in this process)

    Returns:
        One TranscriptRecord per transcript, in input order

    Raises:
        RecordFormatError: If two transcripts share an identifier
    """
    seen: Dict[str, int] = {}
    for i, t in enumerate(transcripts):
        tid = t.feature_id
        if tid in seen:
            raise RecordFormatError(
                f"duplicate transcript identifier {tid!r} "
                f"(records {seen[tid] + 1} and {i + 1})"
            )
        seen[tid] = i

    by_contig: Dict[str, List[int]] = OrderedDict()
    for i, t in enumerate(transcripts):
        by_contig.setdefault(t.contig_id, []).append(i)

    features_by_contig: Dict[str, List[GenomicInterval]] = defaultdict(list)
    for feature in reference:
        if feature.contig_id in by_contig:
            features_by_contig[feature.contig_id].append(feature)

    results: List[Optional[Classification]] = [None] * len(transcripts)

    if jobs > 1 and len(by_contig) > 1:
        logger.info(f"Classifying {len(transcripts)} transcripts on "
                    f"{len(by_contig)} contigs with {jobs} workers")
        with ProcessPoolExecutor(max_workers=jobs) as executor:
            futures = {
                contig: executor.submit(
                    _classify_contig,
                    [transcripts[i] for i in indices],
                    features_by_contig.get(contig, []),
                    params,
                )
                for contig, indices in by_contig.items()
            }
            for contig, future in futures.items():
                for i, cls in zip(by_contig[contig], future.result()):
                    results[i] = cls
    else:
        for contig, indices in by_contig.items():
            contig_results = _classify_contig(
                [transcripts[i] for i in indices],
                features_by_contig.get(contig, []),
                params,
            )
            for i, cls in zip(indices, contig_results):
                results[i] = cls

    return [
        TranscriptRecord.from_interval(t, cls, evidence_source)
        for t, cls in zip(transcripts, results)
    ]


def count_classes(records: Iterable[TranscriptRecord]) -> Dict[str, int]:
    """Count records per classification (all four classes always present)."""
    counts = {c.value: 0 for c in Classification}
    for record in records:
        counts[record.classification.value] += 1
    return counts


def noncoding(records: Iterable[TranscriptRecord]) -> List[TranscriptRecord]:
    """Keep intergenic and antisense records, in order."""
    return [r for r in records if r.classification.is_noncoding]


def with_classification(
    record: TranscriptRecord,
    classification: Classification,
    evidence_source: Optional[EvidenceSource] = None,
) -> TranscriptRecord:
    """Copy of a record with a new classification."""
    return replace(
        record,
        classification=classification,
        evidence_source=evidence_source if evidence_source is not None else record.evidence_source,
    )
