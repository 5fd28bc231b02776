#!/usr/bin/env python3
"""
Significant BLASTX Hit List

Filters DIAMOND blastx tabular output for significant protein hits and
writes the sorted, deduplicated list of query (transcript) names.

The searches are expected with:
    --outfmt 6 qseqid sseqid bitscore evalue pident nident qlen slen length
               mismatch qstart qend sstart send --query-cover 30

Significance: bit score > 50, e-value < 0.0001, percent identity > 30.

Usage:
    python 6_blastx_hit_list.py --blast intergenic.blast antisense.blast \\
        --out signifficant_hits.list
"""

import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from snaptpipe.errors import SnapTError
from snaptpipe.homology import blast_hit_ids, write_hit_list
from utils.config_parser import get_nested, load_config

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("blastx_hit_list")


def main():
    parser = argparse.ArgumentParser(description="Collect significant BLASTX query IDs")
    parser.add_argument("--blast", nargs="+", required=True, help="14-column BLAST tabular file(s)")
    parser.add_argument("--out", required=True, help="Output hit list")
    parser.add_argument("--min-bitscore", type=float, help="Bit score must exceed (default: 50)")
    parser.add_argument("--max-evalue", type=float, help="E-value must be below (default: 1e-4)")
    parser.add_argument("--min-pident", type=float, help="Percent identity must exceed (default: 30)")
    parser.add_argument("--config", help="YAML configuration file")
    args = parser.parse_args()

    try:
        config = load_config(args.config)
    except FileNotFoundError as e:
        logger.error(str(e))
        sys.exit(1)

    def pick(value, key):
        return value if value is not None else float(get_nested(config, f"homology.blastx.{key}"))

    min_bitscore = pick(args.min_bitscore, "min_bitscore")
    max_evalue = pick(args.max_evalue, "max_evalue")
    min_pident = pick(args.min_pident, "min_pident")
    logger.info(f"Filtering blastx hits for bit score > {min_bitscore}, "
                f"evalue < {max_evalue}, and percent identity > {min_pident}")

    try:
        hits = blast_hit_ids(args.blast, min_bitscore, max_evalue, min_pident)
    except (SnapTError, FileNotFoundError, ValueError) as e:
        logger.error(str(e))
        sys.exit(1)

    n = write_hit_list(hits, args.out)
    logger.info(f"{n} transcripts had significant hits against the protein database")


if __name__ == "__main__":
    main()
