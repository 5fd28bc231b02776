#!/usr/bin/env python3
"""
Remove Transcripts with Significant Homology Hits

Drops every transcript whose ID (or extracted-sequence name) is in a hit
list from 6_blastx_hit_list.py or 7_rfam_hit_list.py. Run once per
database. If the hit list is missing (the database was not supplied), the
transcripts pass through unchanged and a warning is logged.

Usage:
    python 8_filter_by_hits.py --hits signifficant_hits.list --source protein \\
        --transcripts small_nc_transcripts.gff --out blastx-filtered_small_nc_transcripts.gff
"""

import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from snaptpipe.consolidate import read_classified_gff
from snaptpipe.errors import SnapTError
from snaptpipe.gff_utils import write_gff
from snaptpipe.homology import filter_homology, read_hit_list

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("filter_by_hits")


def main():
    parser = argparse.ArgumentParser(description="Remove transcripts listed in a hit list")
    parser.add_argument("--transcripts", required=True, help="Classified transcripts GFF")
    parser.add_argument("--out", required=True, help="Output GFF")
    parser.add_argument("--hits", help="Hit list; omitted or missing skips the filter")
    parser.add_argument("--source", default="protein", help="Hit list label for logs")
    args = parser.parse_args()

    try:
        records = read_classified_gff(args.transcripts)
    except (SnapTError, FileNotFoundError) as e:
        logger.error(str(e))
        sys.exit(1)

    if args.hits and not Path(args.hits).exists():
        logger.warning(f"Hit list {args.hits} does not exist")
    hit_ids = read_hit_list(args.hits)

    kept = filter_homology(records, hit_ids, args.source)
    write_gff((r.to_interval() for r in kept), args.out)
    logger.info(f"Wrote {len(kept)} transcripts to {args.out}")


if __name__ == "__main__":
    main()
