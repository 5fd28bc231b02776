#!/usr/bin/env python3
"""
Classify Assembled Transcripts Against Coding Features

Compares StringTie transcripts with one set of coding features (Prodigal
ORFs or a genome annotation) and writes the transcripts called intergenic
or antisense, tagged with a ``classification`` attribute.

Run once with the Prodigal ORFs and once with the annotation, then merge
both outputs with 2_consolidate_transcripts.py.

Input:
    - raw_transcripts.gff: StringTie assembly (GTF attributes, TPM)
    - prodigal_orfs.gff or the annotation GFF

Output:
    - ncRNA.orf.gff / ncRNA.anno.gff: non-coding transcripts

Usage:
    python 1_classify_transcripts.py --transcripts raw_transcripts.gff \\
        --reference prodigal_orfs.gff --evidence orf --out ncRNA.orf.gff

    # Keep every transcript with its class (coding/unclassified included)
    python 1_classify_transcripts.py ... --all
"""

import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from snaptpipe.classifier import (
    ClassifierParams,
    EvidenceSource,
    classify_transcripts,
    count_classes,
    noncoding,
)
from snaptpipe.errors import SnapTError
from snaptpipe.gff_utils import read_gff, write_gff
from utils.config_parser import get_nested, load_config

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("classify_transcripts")


def main():
    parser = argparse.ArgumentParser(
        description="Classify transcripts as intergenic/antisense against coding features"
    )
    parser.add_argument("--transcripts", required=True, help="Assembled transcripts (GTF/GFF)")
    parser.add_argument("--reference", required=True, help="Coding features (ORFs or annotation)")
    parser.add_argument("--out", required=True, help="Output GFF of non-coding transcripts")
    parser.add_argument("--evidence", choices=["orf", "annotation"], default="orf",
                        help="Which evidence source --reference is (default: orf)")
    parser.add_argument("--config", help="YAML configuration file")
    parser.add_argument("--jobs", type=int, help="Worker processes")
    parser.add_argument("--margin", type=int, help="Intergenic margin (bp)")
    parser.add_argument("--antisense-overlap", type=int, help="Minimum antisense overlap (bp)")
    parser.add_argument("--feature-types", nargs="+",
                        help="Reference feature types treated as coding (default: CDS)")
    parser.add_argument("--all", action="store_true",
                        help="Write every transcript, including coding and unclassified")
    args = parser.parse_args()

    try:
        config = load_config(args.config)
    except FileNotFoundError as e:
        logger.error(str(e))
        sys.exit(1)

    try:
        params = ClassifierParams(
            intergenic_margin=args.margin if args.margin is not None
            else int(get_nested(config, "classification.intergenic_margin")),
            antisense_overlap_min=args.antisense_overlap if args.antisense_overlap is not None
            else int(get_nested(config, "classification.antisense_overlap_min")),
            peptide_len_max=int(get_nested(config, "classification.peptide_len_max")),
            peptide_ratio_min=float(get_nested(config, "classification.peptide_ratio_min")),
        )
        feature_types = args.feature_types or get_nested(config, "classification.reference_feature_types")
        transcript_type = get_nested(config, "classification.transcript_feature_type")
        jobs = args.jobs or int(get_nested(config, "classification.jobs", 1))

        transcripts = read_gff(args.transcripts, feature_types=[transcript_type])
        reference = read_gff(args.reference, feature_types=feature_types)
        logger.info(f"Loaded {len(transcripts)} transcripts and "
                    f"{len(reference)} reference features ({', '.join(feature_types)})")
        if not reference:
            logger.warning(f"No coding features in {args.reference}; "
                           f"every transcript will be intergenic")

        records = classify_transcripts(
            transcripts, reference, params, EvidenceSource(args.evidence), jobs=jobs
        )
    except (SnapTError, FileNotFoundError, ValueError) as e:
        logger.error(str(e))
        sys.exit(1)

    counts = count_classes(records)
    logger.info("Classes: " + ", ".join(f"{k}={v}" for k, v in counts.items()))

    selected = records if args.all else noncoding(records)
    n = write_gff((r.to_interval() for r in selected), args.out)
    logger.info(f"Wrote {n} transcripts to {args.out}")


if __name__ == "__main__":
    main()
