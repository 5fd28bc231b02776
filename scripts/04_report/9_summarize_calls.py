#!/usr/bin/env python3
"""
Summarize the Final Small ncRNA Calls

Splits the final call set into intergenic and antisense files and writes
the expression tables used to judge a minimum TPM cut-off.

Output (in --out-dir):
    - small_intergenic_ncRNAs.gff
    - small_antisense_ncRNAs.gff
    - expression_ranked.tsv: transcripts ranked by TPM
    - expression_summary.tsv: per-class count and TPM distribution

Usage:
    python 9_summarize_calls.py --transcripts small_ncRNAs.gff --out-dir results/
"""

import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from snaptpipe.consolidate import read_classified_gff
from snaptpipe.errors import SnapTError
from snaptpipe.gff_utils import write_gff
from snaptpipe.report import expression_table, split_by_classification, summarize_expression

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("summarize_calls")


def main():
    parser = argparse.ArgumentParser(description="Split and summarize final small ncRNA calls")
    parser.add_argument("--transcripts", required=True, help="Final classified transcripts GFF")
    parser.add_argument("--out-dir", required=True, help="Output directory")
    args = parser.parse_args()

    out_dir = Path(args.out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    try:
        records = read_classified_gff(args.transcripts)
    except (SnapTError, FileNotFoundError) as e:
        logger.error(str(e))
        sys.exit(1)

    for label, group in split_by_classification(records).items():
        path = out_dir / f"small_{label}_ncRNAs.gff"
        write_gff((r.to_interval() for r in group), path)
        logger.info(f"{label}: {len(group)} transcripts -> {path}")

    expression_table(records).to_csv(out_dir / "expression_ranked.tsv", sep="\t", index=False)
    summary = summarize_expression(records)
    summary.to_csv(out_dir / "expression_summary.tsv", sep="\t", index=False)

    print("=" * 60)
    print(summary.to_string(index=False))
    print("=" * 60)
    logger.warning(
        "Inspect expression_ranked.tsv: the TPM distribution should be roughly exponential. "
        "A long low-expression tail suggests a minimum TPM cut-off or a higher minimum "
        "coverage during assembly."
    )


if __name__ == "__main__":
    main()
