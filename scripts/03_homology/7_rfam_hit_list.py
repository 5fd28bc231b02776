#!/usr/bin/env python3
"""
Rfam (cmscan) Hit List

Collects transcripts with hits to Rfam families other than small RNAs from
Infernal ``cmscan --tblout`` output. sRNA-family hits are known small RNAs
and stay in the call set; any other family (rRNA, tRNA, riboswitch, ...)
means the transcript is not a novel sRNA.

The searches are expected with:
    cmscan --tblout X.tblout --notextw --cut_ga --FZ 5 --nohmmonly Rfam.cm X.fa

Usage:
    python 7_rfam_hit_list.py --tblout intergenic_rfam.tblout antisense_rfam.tblout \\
        --out rfam_signifficant_hits.list
"""

import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from snaptpipe.errors import SnapTError
from snaptpipe.homology import read_hit_list, rfam_hit_ids, write_hit_list
from utils.config_parser import get_nested, load_config

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("rfam_hit_list")


def main():
    parser = argparse.ArgumentParser(description="Collect non-sRNA Rfam hits from cmscan output")
    parser.add_argument("--tblout", nargs="+", required=True, help="cmscan --tblout file(s)")
    parser.add_argument("--out", required=True, help="Output hit list")
    parser.add_argument("--small-rna-pattern",
                        help="Regex marking small-RNA families (default: sRNA)")
    parser.add_argument("--exclude-accessions",
                        help="File of Rfam accessions (one per line) to treat as sRNA families")
    parser.add_argument("--config", help="YAML configuration file")
    args = parser.parse_args()

    try:
        config = load_config(args.config)
    except FileNotFoundError as e:
        logger.error(str(e))
        sys.exit(1)

    pattern = args.small_rna_pattern or get_nested(config, "homology.rfam.small_rna_pattern")
    excluded = set(get_nested(config, "homology.rfam.exclude_accessions", []) or [])
    if args.exclude_accessions:
        extra = read_hit_list(args.exclude_accessions)
        if extra is None:
            logger.error(f"Accession file not found: {args.exclude_accessions}")
            sys.exit(1)
        excluded |= extra

    try:
        hits = rfam_hit_ids(args.tblout, pattern, excluded)
    except (SnapTError, FileNotFoundError) as e:
        logger.error(str(e))
        sys.exit(1)

    n = write_hit_list(hits, args.out)
    logger.info(f"{n} transcripts had non-sRNA significant hits against the Rfam database")


if __name__ == "__main__":
    main()
