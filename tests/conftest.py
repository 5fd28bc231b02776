"""
Pytest configuration and fixtures for SnapT tests.
"""

import pytest
import tempfile
from pathlib import Path


# ============================================================================
# Path Fixtures
# ============================================================================

@pytest.fixture
def project_root():
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def scripts_dir(project_root):
    """Return the scripts directory."""
    return project_root / "scripts"


@pytest.fixture
def temp_dir():
    """Provide a temporary directory that is cleaned up after the test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


# ============================================================================
# Record Fixtures
# ============================================================================

@pytest.fixture
def stringtie_transcript_line():
    """One StringTie transcript record (GTF attributes)."""
    return (
        'contig1\tStringTie\ttranscript\t101\t200\t1000\t+\t.\t'
        'gene_id "STRG.1"; transcript_id "STRG.1.1"; cov "25.0"; FPKM "100.0"; TPM "50.5";'
    )


@pytest.fixture
def prodigal_orf_line():
    """One Prodigal ORF record (GFF3 attributes)."""
    return (
        "contig1\tProdigal_v2.6.3\tCDS\t301\t400\t20.1\t+\t0\t"
        "ID=1_1;partial=00;start_type=ATG"
    )


@pytest.fixture
def sample_transcripts_gtf():
    """
    StringTie assembly on two contigs.

    STRG.1.1 is intergenic, STRG.2.1 antisense, STRG.3.1 coding and
    STRG.4.1 unclassified against sample_orfs_gff.
    """
    return """\
# stringtie -o raw_transcripts.gff -m 50
contig1\tStringTie\ttranscript\t101\t200\t1000\t+\t.\tgene_id "STRG.1"; transcript_id "STRG.1.1"; TPM "50.5";
contig1\tStringTie\texon\t101\t200\t1000\t+\t.\tgene_id "STRG.1"; transcript_id "STRG.1.1"; exon_number "1";
contig1\tStringTie\ttranscript\t1101\t1300\t1000\t+\t.\tgene_id "STRG.2"; transcript_id "STRG.2.1"; TPM "12.0";
contig1\tStringTie\texon\t1101\t1300\t1000\t+\t.\tgene_id "STRG.2"; transcript_id "STRG.2.1"; exon_number "1";
contig2\tStringTie\ttranscript\t501\t800\t1000\t-\t.\tgene_id "STRG.3"; transcript_id "STRG.3.1"; TPM "3.2";
contig2\tStringTie\ttranscript\t2001\t2100\t1000\t+\t.\tgene_id "STRG.4"; transcript_id "STRG.4.1"; TPM "7.7";
"""


@pytest.fixture
def sample_orfs_gff():
    """Prodigal ORFs matching sample_transcripts_gtf."""
    return """\
##gff-version  3
# Sequence Data: seqnum=1;seqlen=5000;seqhdr="contig1"
contig1\tProdigal_v2.6.3\tCDS\t301\t600\t40.2\t+\t0\tID=1_1;partial=00
contig1\tProdigal_v2.6.3\tCDS\t1201\t1800\t55.0\t-\t0\tID=1_2;partial=00
# Sequence Data: seqnum=2;seqlen=8000;seqhdr="contig2"
contig2\tProdigal_v2.6.3\tCDS\t401\t1000\t61.3\t-\t0\tID=2_1;partial=00
contig2\tProdigal_v2.6.3\tCDS\t2121\t2400\t30.0\t-\t0\tID=2_2;partial=00
"""


@pytest.fixture
def sample_annotation_gff():
    """Prokka-style GFF3 with a trailing FASTA section."""
    return """\
##gff-version 3
##sequence-region contig1 1 5000
contig1\tProkka\tgene\t1001\t1090\t.\t+\t.\tID=GENE_0001
contig1\tProkka\tCDS\t1001\t1090\t.\t+\t0\tID=PROKKA_00001;product=hypothetical protein
contig2\tProkka\tCDS\t401\t1000\t.\t-\t0\tID=PROKKA_00002;product=transporter
##FASTA
>contig1
ACGTACGTACGT
"""


@pytest.fixture
def sample_blast_table():
    """DIAMOND blastx --outfmt 6 with the 14 SnapT columns."""
    return (
        "contig1:100-200(+)\tWP_001.1\t85.5\t1e-10\t45.0\t40\t100\t300\t90\t50\t1\t100\t10\t40\n"
        "contig1:100-200(+)\tWP_002.1\t60.0\t1e-6\t35.0\t30\t100\t300\t90\t60\t1\t100\t10\t40\n"
        "contig2:10-300(-)\tWP_003.1\t50.0\t1e-8\t60.0\t40\t290\t200\t60\t20\t1\t180\t1\t60\n"
        "contig3:5-90(+)\tWP_004.1\t120.0\t1e-3\t80.0\t60\t85\t120\t70\t10\t1\t85\t1\t28\n"
        "contig4:0-70(-)\tWP_005.1\t75.0\t1e-20\t30.0\t20\t70\t90\t60\t40\t1\t70\t1\t23\n"
        "tx42\tWP_006.1\t210.0\t1e-50\t92.5\t80\t300\t400\t90\t5\t1\t270\t5\t95\n"
    )


@pytest.fixture
def sample_tblout_fmt1():
    """cmscan --tblout --fmt 1 output."""
    return """\
#target name         accession query name           accession mdl mdl from   mdl to seq from   seq to strand trunc pass   gc  bias  score   E-value inc description of target
#------------------- --------- -------------------- --------- --- -------- -------- -------- -------- ------ ----- ---- ---- ----- ------ --------- --- ---------------------
5S_rRNA              RF00001   contig1:99-220(+)    -          cm        1      119        2      118      +    no    1 0.52   0.0   95.1   1.2e-20 !   5S ribosomal RNA
sRNA-Xcc1            RF02216   contig2:10-100(-)    -          cm        1       80        5       85      +    no    1 0.48   0.0   45.3   3.4e-08 !   Xanthomonas sRNA Xcc1
ArcZ                 RF01990   contig3:50-170(+)    -          cm        1      120        1      118      +    no    1 0.50   0.0   70.0   1.0e-15 !   ArcZ RNA
tRNA                 RF00005   contig1:99-220(+)    -          cm        1       71       10       80      +    no    1 0.55   0.0   60.2   1.1e-12 !   tRNA
#
# Program:         cmscan
# Version:         1.1.2 (July 2016)
"""


@pytest.fixture
def sample_tblout_fmt2():
    """cmscan --tblout --fmt 2 output."""
    return """\
#idx target name         accession query name           accession clan name mdl mdl from   mdl to seq from   seq to strand trunc pass   gc  bias  score   E-value inc olp anyidx afrct1 afrct2 winidx wfrct1 wfrct2 description of target
#--- ------------------- --------- -------------------- --------- --------- --- -------- -------- -------- -------- ------ ----- ---- ---- ----- ------ --------- --- --- ------ ------ ------ ------ ------ ------ ---------------------
1    tRNA                RF00005   contig5:99-220(+)    -         CL00001    cm        1       71       10       80      +    no    1 0.55   0.0   60.2   1.1e-12 !   *       -      -      -      -      -      - tRNA
2    sRNA-Xcc1           RF02216   contig6:10-100(-)    -         -          cm        1       80        5       85      +    no    1 0.48   0.0   45.3   3.4e-08 !   *       -      -      -      -      -      - Xanthomonas sRNA Xcc1
"""


@pytest.fixture
def write_file(temp_dir):
    """Factory fixture writing text content to a file in temp_dir."""
    def _write(name, content):
        path = temp_dir / name
        path.write_text(content)
        return path
    return _write


# ============================================================================
# Configuration Fixtures
# ============================================================================

@pytest.fixture
def sample_config_yaml():
    """Partial user configuration overriding a few defaults."""
    return """\
classification:
  intergenic_margin: 50
positional:
  margin_policy: fixed
  base_margin: 25
size_selection:
  max_length: 300
"""
