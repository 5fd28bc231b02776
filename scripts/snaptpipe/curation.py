"""
Curation Filters for Non-coding Transcript Candidates

Each filter takes a candidate list and returns a new, smaller list in the
same order; nothing is modified in place.

Filters:
- Edge proximity: drop transcripts close to a contig end, or on a contig
  too short to trust. The exclusion margin depends on contig length through
  a margin policy (short fragments get a proportionally larger zone).
- ORF content: drop transcripts whose own sequence contains a re-predicted
  ORF longer than ``max_ratio`` of the transcript.
- Size: keep transcripts with ``min_len <= length <= max_len``.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Sequence

from .classifier import TranscriptRecord
from .genome import contig_length
from .gff_utils import GenomicInterval

logger = logging.getLogger(__name__)

DEFAULT_MIN_CONTIG_LENGTH = 1000
DEFAULT_MAX_ORF_RATIO = 1 / 3
DEFAULT_MIN_SIZE = 50
DEFAULT_MAX_SIZE = 500


# ============================================================================
# Edge proximity
# ============================================================================

@dataclass(frozen=True)
class FixedMarginPolicy:
    """Same exclusion margin on every contig."""
    margin: int = 50

    def __call__(self, contig_length: int) -> int:
        return self.margin


@dataclass(frozen=True)
class ScaledMarginPolicy:
    """
    Margin that grows as contigs get shorter.

        margin(L) = base_margin + round(base_margin * reference_length / L)

    Once L exceeds 2 * base_margin * reference_length the extra term rounds
    to 0 and the margin is exactly base_margin.

    Examples:
        >>> policy = ScaledMarginPolicy(base_margin=50, reference_length=2000)
        >>> policy(1000), policy(10000), policy(10_000_000)
        (150, 60, 50)
    """
    base_margin: int = 50
    reference_length: int = 2000

    def __call__(self, contig_length: int) -> int:
        if contig_length <= 0:
            return self.base_margin
        return self.base_margin + round(self.base_margin * self.reference_length / contig_length)


DEFAULT_MARGIN_POLICY = ScaledMarginPolicy()


def margin_policy_from_config(settings: Mapping[str, Any]):
    """
    Build a margin policy from the ``positional`` config section.

    Raises:
        ValueError: If margin_policy is neither 'scaled' nor 'fixed'
    """
    name = settings.get("margin_policy", "scaled")
    base_margin = int(settings.get("base_margin", 50))
    if name == "fixed":
        return FixedMarginPolicy(margin=base_margin)
    if name == "scaled":
        return ScaledMarginPolicy(
            base_margin=base_margin,
            reference_length=int(settings.get("reference_length", 2000)),
        )
    raise ValueError(f"Unknown margin policy: {name!r} (expected 'scaled' or 'fixed')")


def edge_distance(interval: GenomicInterval, length: int) -> int:
    """
    Distance from an interval to the nearest end of its contig.

    Examples:
        >>> edge_distance(GenomicInterval("c", 5, 60), 1000)
        5
    """
    return min(interval.start, length - interval.end)


def filter_edges(
    records: Iterable[TranscriptRecord],
    contig_lengths: Mapping[str, int],
    min_contig_length: int = DEFAULT_MIN_CONTIG_LENGTH,
    margin_policy=DEFAULT_MARGIN_POLICY,
) -> List[TranscriptRecord]:
    """
    Drop transcripts near contig ends or on short contigs.

    Args:
        records: Candidate transcripts
        contig_lengths: Contig ID -> length
        min_contig_length: Contigs shorter than this are discarded entirely
        margin_policy: Callable (contig_length) -> minimum edge distance

    Returns:
        Surviving records, in order

    Raises:
        ContigLengthError: If a transcript's contig has no known length
    """
    kept = []
    short_contig = 0
    near_edge = 0

    for record in records:
        interval = record.interval
        length = contig_length(contig_lengths, interval.contig_id)

        if length < min_contig_length:
            short_contig += 1
            continue
        if edge_distance(interval, length) < margin_policy(length):
            near_edge += 1
            continue
        kept.append(record)

    logger.info(
        f"Edge filter: kept {len(kept)}, dropped {short_contig} on contigs "
        f"< {min_contig_length} bp and {near_edge} near contig ends"
    )
    return kept


# ============================================================================
# ORF content
# ============================================================================

def group_orfs_by_sequence(orfs: Iterable[GenomicInterval]) -> Dict[str, List[GenomicInterval]]:
    """Group ORFs predicted on extracted transcript sequences by sequence name."""
    grouped: Dict[str, List[GenomicInterval]] = defaultdict(list)
    for orf in orfs:
        grouped[orf.contig_id].append(orf)
    return dict(grouped)


def filter_orf_content(
    record: TranscriptRecord,
    re_predicted_orfs: Iterable[GenomicInterval],
    max_ratio: float = DEFAULT_MAX_ORF_RATIO,
) -> bool:
    """
    Decide whether a transcript survives the ORF-content check.

    Args:
        record: Candidate transcript
        re_predicted_orfs: ORFs predicted on the transcript's own sequence
        max_ratio: Largest allowed ORF length / transcript length

    Returns:
        True to keep, False if any ORF exceeds max_ratio of the transcript

    Examples:
        >>> t = TranscriptRecord(GenomicInterval("c", 100, 600, "+"))
        >>> filter_orf_content(t, [GenomicInterval("c:100-600(+)", 0, 50, "+")])
        True
        >>> filter_orf_content(t, [GenomicInterval("c:100-600(+)", 0, 300, "+")])
        False
    """
    limit = max_ratio * record.length
    return all(orf.length <= limit for orf in re_predicted_orfs)


def filter_by_orf_content(
    records: Iterable[TranscriptRecord],
    orfs_by_sequence: Mapping[str, Sequence[GenomicInterval]],
    max_ratio: float = DEFAULT_MAX_ORF_RATIO,
) -> List[TranscriptRecord]:
    """
    Apply filter_orf_content to every record.

    ORFs are matched to a record through its transcript ID or the name
    bedtools getfasta gave its sequence (stranded or not).
    """
    kept = []
    for record in records:
        orfs: List[GenomicInterval] = []
        for name in sorted(record.identifiers):
            orfs.extend(orfs_by_sequence.get(name, ()))
        if filter_orf_content(record, orfs, max_ratio):
            kept.append(record)
        else:
            longest = max(o.length for o in orfs)
            logger.debug(
                f"{record.transcript_id}: ORF of {longest} bp in "
                f"{record.length} bp transcript"
            )

    logger.info(f"ORF-content filter: kept {len(kept)} transcripts (max ratio {max_ratio:.3f})")
    return kept


# ============================================================================
# Size selection
# ============================================================================

def filter_size(
    record: TranscriptRecord,
    min_len: int = DEFAULT_MIN_SIZE,
    max_len: int = DEFAULT_MAX_SIZE,
) -> bool:
    """
    Inclusive length window check.

    Examples:
        >>> filter_size(TranscriptRecord(GenomicInterval("c", 0, 50)))
        True
        >>> filter_size(TranscriptRecord(GenomicInterval("c", 0, 600)))
        False
    """
    return min_len <= record.length <= max_len


def select_by_size(
    records: Iterable[TranscriptRecord],
    min_len: int = DEFAULT_MIN_SIZE,
    max_len: int = DEFAULT_MAX_SIZE,
) -> List[TranscriptRecord]:
    """Keep records whose length lies in [min_len, max_len]."""
    if min_len > max_len:
        raise ValueError(f"min_len ({min_len}) > max_len ({max_len})")
    kept = [r for r in records if filter_size(r, min_len, max_len)]
    logger.info(f"Size selection [{min_len}, {max_len}]: kept {len(kept)} transcripts")
    return kept
