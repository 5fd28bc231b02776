"""
Tests for GTF/GFF record parsing and writing.
"""

import io
import sys
from pathlib import Path

import pytest

# Add scripts directory to path for imports
scripts_dir = Path(__file__).parent.parent / "scripts"
sys.path.insert(0, str(scripts_dir))

from snaptpipe.errors import RecordFormatError
from snaptpipe.gff_utils import (
    GenomicInterval,
    fasta_key,
    format_gff_line,
    interval_identifiers,
    parse_attributes,
    parse_gff_file,
    parse_gff_line,
    read_gff,
    write_gff,
)


# ============================================================================
# Tests: Line Parsing
# ============================================================================

class TestParseGffLine:
    """Tests for parse_gff_line function."""

    def test_stringtie_transcript(self, stringtie_transcript_line):
        """GTF record is converted to 0-based half-open coordinates."""
        iv = parse_gff_line(stringtie_transcript_line)

        assert iv.contig_id == "contig1"
        assert iv.source == "StringTie"
        assert iv.feature_type == "transcript"
        assert iv.start == 100
        assert iv.end == 200
        assert iv.length == 100
        assert iv.strand == "+"
        assert iv.attribute_style == "gtf"
        assert iv.attributes["transcript_id"] == "STRG.1.1"
        assert iv.feature_id == "STRG.1.1"
        assert iv.get_float("TPM") == 50.5

    def test_prodigal_orf(self, prodigal_orf_line):
        """GFF3 record keeps key=value attributes."""
        iv = parse_gff_line(prodigal_orf_line)

        assert iv.feature_type == "CDS"
        assert (iv.start, iv.end) == (300, 400)
        assert iv.attribute_style == "gff3"
        assert iv.feature_id == "1_1"
        assert iv.attributes["start_type"] == "ATG"

    def test_single_base_feature(self):
        """start == end in 1-based coordinates is a 1 bp feature."""
        iv = parse_gff_line("c1\tsrc\tCDS\t10\t10\t.\t+\t.\tID=x")
        assert iv.length == 1

    def test_question_mark_strand(self):
        """GFF3 '?' strand is read as unknown."""
        iv = parse_gff_line("c1\tsrc\tCDS\t10\t20\t.\t?\t.\tID=x")
        assert iv.strand == "."

    def test_too_few_fields(self):
        """Line with fewer than 9 fields is rejected with its line number."""
        with pytest.raises(RecordFormatError) as excinfo:
            parse_gff_line("contig1\tStringTie\ttranscript\t101\t200", line_number=7)
        assert "line 7" in str(excinfo.value)
        assert excinfo.value.line_number == 7

    def test_non_numeric_coordinates(self):
        """Non-numeric start/end is rejected."""
        with pytest.raises(RecordFormatError, match="non-numeric"):
            parse_gff_line("c1\tsrc\tCDS\tXXX\t200\t.\t+\t.\tID=x")

    def test_start_after_end(self):
        """start > end is rejected."""
        with pytest.raises(RecordFormatError, match="start 300 > end 200"):
            parse_gff_line("c1\tsrc\tCDS\t300\t200\t.\t+\t.\tID=x")

    def test_zero_start(self):
        """1-based start of 0 is rejected."""
        with pytest.raises(RecordFormatError):
            parse_gff_line("c1\tsrc\tCDS\t0\t200\t.\t+\t.\tID=x")

    def test_invalid_strand(self):
        """Unknown strand symbol is rejected."""
        with pytest.raises(RecordFormatError, match="strand"):
            parse_gff_line("c1\tsrc\tCDS\t1\t200\t.\tx\t.\tID=x")

    def test_empty_contig(self):
        """Empty contig ID is rejected."""
        with pytest.raises(RecordFormatError, match="contig"):
            parse_gff_line("\tsrc\tCDS\t1\t200\t.\t+\t.\tID=x")


class TestParseAttributes:
    """Tests for attribute column parsing."""

    def test_gtf_style(self):
        attrs, style = parse_attributes('gene_id "G1"; transcript_id "T1";')
        assert attrs == {"gene_id": "G1", "transcript_id": "T1"}
        assert style == "gtf"

    def test_gff3_style(self):
        attrs, style = parse_attributes("ID=PROKKA_00001;product=hypothetical protein")
        assert attrs == {"ID": "PROKKA_00001", "product": "hypothetical protein"}
        assert style == "gff3"

    def test_empty(self):
        assert parse_attributes(".") == ({}, "gff3")

    def test_order_preserved(self):
        attrs, _ = parse_attributes('b "2"; a "1"; c "3";')
        assert list(attrs) == ["b", "a", "c"]


# ============================================================================
# Tests: File Parsing
# ============================================================================

class TestParseGffFile:
    """Tests for parse_gff_file / read_gff."""

    def test_skips_comments_and_filters_types(self, write_file, sample_transcripts_gtf):
        path = write_file("raw_transcripts.gff", sample_transcripts_gtf)

        all_records = read_gff(path)
        transcripts = read_gff(path, feature_types=["transcript"])

        assert len(all_records) == 6
        assert [t.feature_id for t in transcripts] == [
            "STRG.1.1", "STRG.2.1", "STRG.3.1", "STRG.4.1"
        ]

    def test_stops_at_fasta_section(self, write_file, sample_annotation_gff):
        path = write_file("annotation.gff", sample_annotation_gff)
        records = read_gff(path)
        assert len(records) == 3
        assert all(r.contig_id in ("contig1", "contig2") for r in records)

    def test_error_reports_path_and_line(self, write_file):
        content = (
            "##gff-version 3\n"
            "c1\tsrc\tCDS\t1\t100\t.\t+\t0\tID=a\n"
            "c1\tsrc\tCDS\t1\n"
        )
        path = write_file("bad.gff", content)
        with pytest.raises(RecordFormatError) as excinfo:
            list(parse_gff_file(path))
        assert excinfo.value.line_number == 3
        assert str(path) in str(excinfo.value)

    def test_gzip_input(self, temp_dir, sample_orfs_gff):
        import gzip
        path = temp_dir / "orfs.gff.gz"
        with gzip.open(path, "wt") as f:
            f.write(sample_orfs_gff)
        assert len(read_gff(path)) == 4


# ============================================================================
# Tests: Writing
# ============================================================================

class TestWriteGff:
    """Tests for record emission."""

    def test_gtf_line_round_trip(self, stringtie_transcript_line):
        iv = parse_gff_line(stringtie_transcript_line)
        assert format_gff_line(iv) == stringtie_transcript_line

    def test_gff3_line_round_trip(self, prodigal_orf_line):
        iv = parse_gff_line(prodigal_orf_line)
        assert format_gff_line(iv) == prodigal_orf_line

    def test_added_attribute_keeps_style(self, stringtie_transcript_line):
        iv = parse_gff_line(stringtie_transcript_line).with_attributes(classification="intergenic")
        line = format_gff_line(iv)
        assert line.endswith('TPM "50.5"; classification "intergenic";')

    def test_with_attributes_returns_copy(self, stringtie_transcript_line):
        iv = parse_gff_line(stringtie_transcript_line)
        tagged = iv.with_attributes(classification="antisense")
        assert "classification" not in iv.attributes
        assert tagged.attributes["classification"] == "antisense"

    def test_write_to_handle_and_path(self, temp_dir, prodigal_orf_line):
        iv = parse_gff_line(prodigal_orf_line)

        handle = io.StringIO()
        assert write_gff([iv, iv], handle) == 2
        assert handle.getvalue() == (prodigal_orf_line + "\n") * 2

        path = temp_dir / "out.gff"
        write_gff([iv], path)
        assert read_gff(path) == [iv]

    def test_write_empty(self, temp_dir):
        path = temp_dir / "empty.gff"
        assert write_gff([], path) == 0
        assert path.read_text() == ""


# ============================================================================
# Tests: Interval model and FASTA keys
# ============================================================================

class TestGenomicInterval:
    """Tests for GenomicInterval invariants and helpers."""

    def test_invalid_interval(self):
        with pytest.raises(ValueError):
            GenomicInterval("c1", 200, 100)
        with pytest.raises(ValueError):
            GenomicInterval("", 0, 100)
        with pytest.raises(ValueError):
            GenomicInterval("c1", 0, 100, strand="x")

    def test_feature_id_fallback(self):
        iv = GenomicInterval("contig1", 99, 200, "-")
        assert iv.feature_id == "contig1:99-200(-)"

    def test_fasta_key_matches_bedtools(self):
        """bedtools getfasta -s names use 0-based start and strand suffix."""
        iv = parse_gff_line("contig1\tsrc\ttranscript\t100\t200\t.\t+\t.\ttranscript_id \"t1\";")
        assert fasta_key(iv) == "contig1:99-200(+)"
        assert fasta_key(iv, stranded=False) == "contig1:99-200"

    def test_identifiers(self):
        iv = GenomicInterval("c1", 0, 10, "+", attributes={"transcript_id": "t1"})
        assert interval_identifiers(iv) == {"t1", "c1:0-10(+)", "c1:0-10"}

    def test_get_float_non_numeric(self):
        iv = GenomicInterval("c1", 0, 10, attributes={"TPM": "n/a"})
        assert iv.get_float("TPM") is None
        assert iv.get_float("FPKM") is None
