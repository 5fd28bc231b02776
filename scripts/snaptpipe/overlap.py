"""
Overlap and Distance Computation for Genomic Intervals

All intervals are 0-based half-open, so for two intervals on one contig:

    overlap_len = max(0, min(a.end, b.end) - max(a.start, b.start))
    gap         = max(a.start, b.start) - min(a.end, b.end)   (when no overlap)

Two book-ended intervals (a.end == b.start) have overlap 0 and gap 0.

Strands compare as plain symbols except that the unknown strand ('.') never
matches '+' or '-', and is never "opposite" to anything either.

ReferenceIndex keeps one interval tree per contig, so the features that can
possibly interact with a query are found without an all-pairs scan.
"""

from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from intervaltree import Interval, IntervalTree

from .gff_utils import GenomicInterval, STRAND_UNKNOWN


@dataclass(frozen=True)
class IntervalRelation:
    """Spatial relationship between two intervals."""
    same_contig: bool
    overlap_len: int
    gap: Optional[int]  # None when on different contigs
    same_strand: bool
    opposite_strand: bool

    @property
    def overlaps(self) -> bool:
        return self.overlap_len > 0


def strands_match(a: str, b: str) -> bool:
    """True if both strands are known and equal."""
    return a == b and a != STRAND_UNKNOWN


def strands_opposite(a: str, b: str) -> bool:
    """True if both strands are known and differ."""
    return a != b and a != STRAND_UNKNOWN and b != STRAND_UNKNOWN


def relate(a: GenomicInterval, b: GenomicInterval) -> IntervalRelation:
    """
    Compute overlap, gap and strand relationship of two intervals.

    Args:
        a: First interval
        b: Second interval

    Returns:
        IntervalRelation; overlap_len and gap are symmetric in (a, b)

    Examples:
        >>> t = GenomicInterval("contig1", 100, 200, "+")
        >>> relate(t, GenomicInterval("contig1", 300, 400, "+")).gap
        100
        >>> relate(t, GenomicInterval("contig1", 150, 250, "-")).overlap_len
        50
    """
    same_strand = strands_match(a.strand, b.strand)
    opposite_strand = strands_opposite(a.strand, b.strand)

    if a.contig_id != b.contig_id:
        return IntervalRelation(
            same_contig=False,
            overlap_len=0,
            gap=None,
            same_strand=same_strand,
            opposite_strand=opposite_strand,
        )

    inner_start = max(a.start, b.start)
    inner_end = min(a.end, b.end)
    overlap_len = max(0, inner_end - inner_start)
    gap = max(0, inner_start - inner_end)

    return IntervalRelation(
        same_contig=True,
        overlap_len=overlap_len,
        gap=gap,
        same_strand=same_strand,
        opposite_strand=opposite_strand,
    )


class ReferenceIndex:
    """
    Per-contig interval trees of reference features.

    Query results are sorted by (start, end, strand), so the input order of
    the reference set has no effect on any query.
    """

    def __init__(self, features: Iterable[GenomicInterval]):
        self._trees: Dict[str, IntervalTree] = defaultdict(IntervalTree)
        for feature in features:
            # IntervalTree rejects null intervals; a 0 bp feature is stored as 1 bp
            end = max(feature.end, feature.start + 1)
            self._trees[feature.contig_id].addi(feature.start, end, feature)

    def __len__(self) -> int:
        return sum(len(tree) for tree in self._trees.values())

    @property
    def contigs(self) -> List[str]:
        return sorted(self._trees)

    def features_on(self, contig_id: str) -> List[GenomicInterval]:
        """All features of one contig, sorted by start."""
        tree = self._trees.get(contig_id)
        if tree is None:
            return []
        return _sorted_features(tree)

    def nearby(self, interval: GenomicInterval, flank: int = 0) -> List[GenomicInterval]:
        """
        Features overlapping ``interval`` or lying less than ``flank`` bases away.

        Args:
            interval: Query interval
            flank: Distance below which a non-overlapping feature is reported

        Returns:
            Matching features sorted by start
        """
        tree = self._trees.get(interval.contig_id)
        if tree is None:
            return []

        window_start = interval.start - flank
        window_end = interval.end + flank
        if window_end <= window_start:
            return []
        return _sorted_features(tree.overlap(window_start, window_end))


def _sorted_features(intervals: Iterable[Interval]) -> List[GenomicInterval]:
    return sorted(
        (iv.data for iv in intervals),
        key=lambda f: (f.start, f.end, f.strand),
    )
