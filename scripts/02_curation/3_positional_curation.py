#!/usr/bin/env python3
"""
Positional Curation of Non-coding Transcripts

Dynamically thresholds transcripts that are too close to a contig's edge,
and drops every transcript on a contig shorter than the minimum length.
Assembly-boundary artifacts are most common near the ends of short
fragments, so short contigs get a larger exclusion zone.

Input:
    - genome.fa (or genome.fa.fai): contig lengths
    - raw_nc_transcripts.gff

Usage:
    python 3_positional_curation.py --genome genome.fa \\
        --transcripts raw_nc_transcripts.gff --out good_nc_transcripts.gff -l 1000
"""

import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from snaptpipe.consolidate import read_classified_gff
from snaptpipe.curation import filter_edges, margin_policy_from_config
from snaptpipe.errors import SnapTError
from snaptpipe.genome import load_contig_lengths
from snaptpipe.gff_utils import write_gff
from utils.config_parser import get_nested, load_config

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("positional_curation")


def main():
    parser = argparse.ArgumentParser(
        description="Remove transcripts close to contig edges or on short contigs"
    )
    parser.add_argument("--genome", required=True, help="Genome FASTA or its .fai index")
    parser.add_argument("--transcripts", required=True, help="Classified transcripts GFF")
    parser.add_argument("--out", required=True, help="Output GFF")
    parser.add_argument("-l", "--min-contig-length", type=int,
                        help="Minimum contig length (default: 1000)")
    parser.add_argument("--margin-policy", choices=["scaled", "fixed"],
                        help="Edge margin policy (default: scaled)")
    parser.add_argument("--base-margin", type=int, help="Base edge margin in bp (default: 50)")
    parser.add_argument("--config", help="YAML configuration file")
    args = parser.parse_args()

    try:
        config = load_config(args.config)
    except FileNotFoundError as e:
        logger.error(str(e))
        sys.exit(1)

    settings = dict(get_nested(config, "positional"))
    if args.margin_policy:
        settings["margin_policy"] = args.margin_policy
    if args.base_margin is not None:
        settings["base_margin"] = args.base_margin
    min_contig_length = (args.min_contig_length if args.min_contig_length is not None
                         else int(settings["min_contig_length"]))

    try:
        policy = margin_policy_from_config(settings)
        lengths = load_contig_lengths(args.genome)
        records = read_classified_gff(args.transcripts)
        kept = filter_edges(records, lengths, min_contig_length, policy)
    except (SnapTError, FileNotFoundError, ValueError) as e:
        logger.error(str(e))
        sys.exit(1)

    logger.info(f"Positional curation ({policy}): {len(records)} -> {len(kept)} transcripts")
    write_gff((r.to_interval() for r in kept), args.out)


if __name__ == "__main__":
    main()
