"""
Tests for merging the ORF and annotation classification passes.
"""

import sys
from pathlib import Path

import pytest

# Add scripts directory to path for imports
scripts_dir = Path(__file__).parent.parent / "scripts"
sys.path.insert(0, str(scripts_dir))

from snaptpipe.classifier import (
    Classification,
    EvidenceSource,
    TranscriptRecord,
    classify_transcripts,
)
from snaptpipe.consolidate import classification_map, consolidate, read_classified_gff
from snaptpipe.errors import RecordFormatError
from snaptpipe.gff_utils import GenomicInterval, read_gff, write_gff


def record(tid, classification, start=0, end=100):
    iv = GenomicInterval("contig1", start, end, "+", attributes={"transcript_id": tid})
    return TranscriptRecord.from_interval(iv, classification, EvidenceSource.ORF)


I = Classification.INTERGENIC
A = Classification.ANTISENSE
C = Classification.CODING
U = Classification.UNCLASSIFIED


# ============================================================================
# Tests: consolidate()
# ============================================================================

class TestConsolidate:
    """Tests for the conjunctive merge."""

    def test_orf_only(self):
        orf = [record("t1", I), record("t2", C), record("t3", A), record("t4", U)]
        merged = consolidate(orf)
        assert [r.transcript_id for r in merged] == ["t1", "t3"]
        assert all(r.evidence_source == EvidenceSource.ORF for r in merged)

    @pytest.mark.parametrize("orf_class,anno_class,kept", [
        (I, I, True),
        (I, A, True),
        (A, I, True),
        (A, A, True),
        (I, C, False),
        (I, U, False),
        (C, I, False),
        (U, A, False),
    ])
    def test_conjunction(self, orf_class, anno_class, kept):
        merged = consolidate([record("t1", orf_class)], [record("t1", anno_class)])
        assert bool(merged) is kept

    def test_label_from_orf_pass(self):
        merged = consolidate([record("t1", A)], [record("t1", I)])
        assert merged[0].classification == A
        assert merged[0].evidence_source == EvidenceSource.BOTH

    def test_missing_from_annotation_dropped(self):
        merged = consolidate([record("t1", I), record("t2", I)], [record("t1", I)])
        assert [r.transcript_id for r in merged] == ["t1"]

    def test_empty_annotation_drops_everything(self):
        """An annotation pass that was run but classified nothing keeps nothing."""
        assert consolidate([record("t1", I)], []) == []

    def test_duplicates_collapsed(self):
        merged = consolidate([record("t1", I), record("t1", I)])
        assert len(merged) == 1

    def test_order_follows_orf_pass(self):
        orf = [record("t3", I), record("t1", A), record("t2", I)]
        anno = [record("t1", I), record("t2", A), record("t3", I)]
        assert [r.transcript_id for r in consolidate(orf, anno)] == ["t3", "t1", "t2"]

    def test_inputs_not_modified(self):
        orf = [record("t1", I)]
        consolidate(orf, [record("t1", I)])
        assert orf[0].evidence_source == EvidenceSource.ORF

    def test_classification_map(self):
        assert classification_map([record("t1", I), record("t2", C)]) == {"t1": I, "t2": C}

    def test_sample_assembly(self, write_file, sample_transcripts_gtf,
                             sample_orfs_gff, sample_annotation_gff):
        transcripts = read_gff(write_file("t.gtf", sample_transcripts_gtf), ["transcript"])
        orfs = read_gff(write_file("o.gff", sample_orfs_gff), ["CDS"])
        annotation = read_gff(write_file("a.gff", sample_annotation_gff), ["CDS"])

        merged = consolidate(
            classify_transcripts(transcripts, orfs),
            classify_transcripts(transcripts, annotation, evidence_source=EvidenceSource.ANNOTATION),
        )
        assert [r.transcript_id for r in merged] == ["STRG.1.1"]

    def test_input_order_independent(self, write_file, sample_transcripts_gtf,
                                     sample_orfs_gff, sample_annotation_gff):
        """Reordering transcripts or reference features leaves the merged set unchanged."""
        transcripts = read_gff(write_file("t.gtf", sample_transcripts_gtf), ["transcript"])
        orfs = read_gff(write_file("o.gff", sample_orfs_gff), ["CDS"])
        annotation = read_gff(write_file("a.gff", sample_annotation_gff), ["CDS"])

        forward = consolidate(
            classify_transcripts(transcripts, orfs),
            classify_transcripts(transcripts, annotation, evidence_source=EvidenceSource.ANNOTATION),
        )

        reversed_transcripts = list(reversed(transcripts))
        annotation_pass = classify_transcripts(
            reversed_transcripts, list(reversed(annotation)),
            evidence_source=EvidenceSource.ANNOTATION,
        )
        orf_pass = classify_transcripts(reversed_transcripts, list(reversed(orfs)))
        backward = consolidate(orf_pass, annotation_pass)

        assert {r.transcript_id for r in forward} == {r.transcript_id for r in backward}
        assert {r.transcript_id for r in consolidate(orf_pass)} == {"STRG.1.1", "STRG.2.1"}

    def test_empty_input(self):
        assert consolidate([]) == []
        assert consolidate([], []) == []


# ============================================================================
# Tests: read_classified_gff()
# ============================================================================

class TestReadClassifiedGff:
    """Tests for reading back tagged transcripts."""

    def test_round_trip(self, temp_dir):
        records = [
            TranscriptRecord.from_interval(
                GenomicInterval("contig1", 10, 90, "-", attributes={"transcript_id": "t1", "TPM": "4.5"}),
                A, EvidenceSource.BOTH,
            ),
            TranscriptRecord.from_interval(
                GenomicInterval("contig2", 0, 60, "+", attributes={"transcript_id": "t2"}),
                I,
            ),
        ]
        path = temp_dir / "classified.gff"
        write_gff((r.to_interval() for r in records), path)

        loaded = read_classified_gff(path)
        assert [r.transcript_id for r in loaded] == ["t1", "t2"]
        assert [r.classification for r in loaded] == [A, I]
        assert loaded[0].evidence_source == EvidenceSource.BOTH
        assert loaded[1].evidence_source is None
        assert loaded[0].expression_value == 4.5

    def test_missing_classification(self, write_file, sample_transcripts_gtf):
        path = write_file("plain.gtf", sample_transcripts_gtf)
        with pytest.raises(RecordFormatError, match="classification"):
            read_classified_gff(path)

    def test_invalid_classification(self, write_file):
        path = write_file(
            "bad.gtf",
            'contig1\tStringTie\ttranscript\t1\t100\t.\t+\t.\ttranscript_id "t1"; classification "novel";\n',
        )
        with pytest.raises(RecordFormatError, match="novel"):
            read_classified_gff(path)
