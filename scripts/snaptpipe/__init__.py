"""
SnapT - Small ncRNA Curation Library

Reusable functions for calling small non-coding RNAs from assembled transcripts:
- GTF/GFF record parsing and writing
- Interval overlap/distance and intergenic/antisense classification
- Consolidation of ORF-based and annotation-based evidence
- Positional, ORF-content, size and homology curation filters
"""

from .errors import (
    SnapTError,
    RecordFormatError,
    ContigLengthError,
)

from .gff_utils import (
    GenomicInterval,
    parse_gff_line,
    parse_gff_file,
    read_gff,
    write_gff,
    fasta_key,
)

from .overlap import (
    IntervalRelation,
    ReferenceIndex,
    relate,
)

from .classifier import (
    Classification,
    ClassifierParams,
    EvidenceSource,
    TranscriptRecord,
    classify,
    classify_transcripts,
)

from .consolidate import (
    consolidate,
    read_classified_gff,
)

from .genome import (
    load_contig_lengths,
)

from .curation import (
    FixedMarginPolicy,
    ScaledMarginPolicy,
    filter_edges,
    filter_orf_content,
    filter_by_orf_content,
    filter_size,
    select_by_size,
)

from .homology import (
    blast_hit_ids,
    rfam_hit_ids,
    read_hit_list,
    write_hit_list,
    filter_homology,
)

__version__ = "0.3.0"

__all__ = [
    # Errors
    "SnapTError",
    "RecordFormatError",
    "ContigLengthError",
    # Records
    "GenomicInterval",
    "parse_gff_line",
    "parse_gff_file",
    "read_gff",
    "write_gff",
    "fasta_key",
    # Overlap
    "IntervalRelation",
    "ReferenceIndex",
    "relate",
    # Classification
    "Classification",
    "ClassifierParams",
    "EvidenceSource",
    "TranscriptRecord",
    "classify",
    "classify_transcripts",
    "consolidate",
    "read_classified_gff",
    # Curation
    "load_contig_lengths",
    "FixedMarginPolicy",
    "ScaledMarginPolicy",
    "filter_edges",
    "filter_orf_content",
    "filter_by_orf_content",
    "filter_size",
    "select_by_size",
    # Homology
    "blast_hit_ids",
    "rfam_hit_ids",
    "read_hit_list",
    "write_hit_list",
    "filter_homology",
]
