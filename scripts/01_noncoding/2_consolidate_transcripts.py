#!/usr/bin/env python3
"""
Consolidate ORF-based and Annotation-based Non-coding Calls

Keeps a transcript only if it is non-coding by the ORF pass and, when an
annotation pass is given, by the annotation pass too. Labels and TPM come
from the ORF pass.

Usage:
    python 2_consolidate_transcripts.py --orf ncRNA.orf.gff \\
        --annotation ncRNA.anno.gff --out ncRNA.gff
"""

import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from snaptpipe.consolidate import consolidate, read_classified_gff
from snaptpipe.errors import SnapTError
from snaptpipe.gff_utils import write_gff

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("consolidate_transcripts")


def main():
    parser = argparse.ArgumentParser(
        description="Merge ORF-based and annotation-based non-coding transcript calls"
    )
    parser.add_argument("--orf", required=True, help="Classified GFF from the ORF pass")
    parser.add_argument("--annotation", help="Classified GFF from the annotation pass (optional)")
    parser.add_argument("--out", required=True, help="Output GFF")
    args = parser.parse_args()

    try:
        orf_records = read_classified_gff(args.orf)
        annotation_records = read_classified_gff(args.annotation) if args.annotation else None
    except (SnapTError, FileNotFoundError) as e:
        logger.error(str(e))
        sys.exit(1)

    logger.info(f"ORF pass: {len(orf_records)} transcripts")
    if annotation_records is None:
        logger.warning("No annotation pass supplied; using ORF evidence only")
    else:
        logger.info(f"Annotation pass: {len(annotation_records)} transcripts")

    merged = consolidate(orf_records, annotation_records)
    if not merged:
        logger.warning("No non-coding transcripts left after consolidation")

    n = write_gff((r.to_interval() for r in merged), args.out)
    logger.info(f"Wrote {n} transcripts to {args.out}")


if __name__ == "__main__":
    main()
