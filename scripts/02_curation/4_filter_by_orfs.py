#!/usr/bin/env python3
"""
Filter Transcripts by Internal ORF Content

Prodigal is re-run on the extracted transcript sequences
(bedtools getfasta -s). A transcript containing an ORF longer than 1/3 of
its own length is a miscalled coding sequence and is removed.

Input:
    - raw_nc_transcripts.prodigal.gff: Prodigal on the extracted sequences
      (sequence names like contig1:99-250(+))
    - raw_nc_transcripts.gff

Usage:
    python 4_filter_by_orfs.py --orfs raw_nc_transcripts.prodigal.gff \\
        --transcripts raw_nc_transcripts.gff --out raw_nc_transcripts.noorfs.gff
"""

import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from snaptpipe.consolidate import read_classified_gff
from snaptpipe.curation import filter_by_orf_content, group_orfs_by_sequence
from snaptpipe.errors import SnapTError
from snaptpipe.gff_utils import read_gff, write_gff
from utils.config_parser import get_nested, load_config

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("filter_by_orfs")


def main():
    parser = argparse.ArgumentParser(
        description="Remove transcripts containing a long re-predicted ORF"
    )
    parser.add_argument("--orfs", required=True, help="Prodigal GFF on extracted transcripts")
    parser.add_argument("--transcripts", required=True, help="Classified transcripts GFF")
    parser.add_argument("--out", required=True, help="Output GFF")
    parser.add_argument("--max-ratio", type=float,
                        help="Maximum ORF length / transcript length (default: 1/3)")
    parser.add_argument("--config", help="YAML configuration file")
    args = parser.parse_args()

    try:
        config = load_config(args.config)
    except FileNotFoundError as e:
        logger.error(str(e))
        sys.exit(1)

    max_ratio = (args.max_ratio if args.max_ratio is not None
                 else float(get_nested(config, "orf_content.max_ratio")))

    try:
        orfs = group_orfs_by_sequence(read_gff(args.orfs, feature_types=["CDS"]))
        records = read_classified_gff(args.transcripts)
    except (SnapTError, FileNotFoundError) as e:
        logger.error(str(e))
        sys.exit(1)

    logger.info(f"{sum(len(v) for v in orfs.values())} ORFs on {len(orfs)} transcript sequences")
    kept = filter_by_orf_content(records, orfs, max_ratio)
    logger.info(f"ORF-content filter: {len(records)} -> {len(kept)} transcripts")
    write_gff((r.to_interval() for r in kept), args.out)


if __name__ == "__main__":
    main()
