#!/usr/bin/env python3
"""
Size Selection of Non-coding Transcripts

Keeps transcripts whose length lies in [min, max] (inclusive, default
50-500 bp), i.e. the small ncRNA size range.

Usage:
    python 5_size_select.py --transcripts good_nc_transcripts.gff \\
        --out small_nc_transcripts.gff --min-length 50 --max-length 500
"""

import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from snaptpipe.classifier import count_classes
from snaptpipe.consolidate import read_classified_gff
from snaptpipe.curation import select_by_size
from snaptpipe.errors import SnapTError
from snaptpipe.gff_utils import write_gff
from utils.config_parser import get_nested, load_config

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("size_select")


def main():
    parser = argparse.ArgumentParser(description="Keep transcripts within a length window")
    parser.add_argument("--transcripts", required=True, help="Classified transcripts GFF")
    parser.add_argument("--out", required=True, help="Output GFF")
    parser.add_argument("--min-length", type=int, help="Minimum length (default: 50)")
    parser.add_argument("--max-length", type=int, help="Maximum length (default: 500)")
    parser.add_argument("--config", help="YAML configuration file")
    args = parser.parse_args()

    try:
        config = load_config(args.config)
    except FileNotFoundError as e:
        logger.error(str(e))
        sys.exit(1)

    min_len = (args.min_length if args.min_length is not None
               else int(get_nested(config, "size_selection.min_length")))
    max_len = (args.max_length if args.max_length is not None
               else int(get_nested(config, "size_selection.max_length")))

    try:
        records = read_classified_gff(args.transcripts)
        kept = select_by_size(records, min_len, max_len)
    except (SnapTError, FileNotFoundError, ValueError) as e:
        logger.error(str(e))
        sys.exit(1)

    counts = count_classes(kept)
    logger.info(
        f"Out of {len(records)} ncRNAs, there are {len(kept)} small ncRNAs, of which "
        f"{counts['intergenic']} are intergenic and {counts['antisense']} are antisense"
    )
    write_gff((r.to_interval() for r in kept), args.out)


if __name__ == "__main__":
    main()
