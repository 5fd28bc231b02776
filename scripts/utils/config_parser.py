#!/usr/bin/env python3
"""
SnapT Configuration Parser

Parses YAML configuration files, merges them over the built-in defaults and
exports values as shell variables for the bash driver.

Usage:
    # Get single value
    python config_parser.py config.yaml --get classification.intergenic_margin

    # Export all as shell variables
    python config_parser.py config.yaml --export

    # Validate configuration
    python config_parser.py config.yaml --validate

    # As Python module
    from utils.config_parser import load_config, get_nested
    config = load_config("config.yaml")
    margin = get_nested(config, "classification.intergenic_margin")
"""

import argparse
import copy
import json
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

DEFAULT_CONFIG: Dict[str, Any] = {
    "classification": {
        "transcript_feature_type": "transcript",
        "reference_feature_types": ["CDS"],
        "intergenic_margin": 30,
        "antisense_overlap_min": 10,
        "peptide_len_max": 100,
        "peptide_ratio_min": 3,
        "jobs": 1,
    },
    "positional": {
        "min_contig_length": 1000,
        "margin_policy": "scaled",
        "base_margin": 50,
        "reference_length": 2000,
    },
    "orf_content": {
        "max_ratio": 1 / 3,
    },
    "size_selection": {
        "min_length": 50,
        "max_length": 500,
    },
    "homology": {
        "blastx": {
            "min_bitscore": 50,
            "max_evalue": 0.0001,
            "min_pident": 30,
        },
        "rfam": {
            "small_rna_pattern": "sRNA",
            "exclude_accessions": [],
        },
    },
}


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Recursively merge ``override`` into a copy of ``base``.

    Examples:
        >>> deep_merge({"a": {"x": 1, "y": 2}}, {"a": {"y": 3}})
        {'a': {'x': 1, 'y': 3}}
    """
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(config_path: Optional[str] = None, with_defaults: bool = True) -> Dict[str, Any]:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to YAML configuration file; None returns the defaults
        with_defaults: Merge the file over DEFAULT_CONFIG

    Returns:
        Dictionary containing configuration values

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If YAML parsing fails
    """
    base = copy.deepcopy(DEFAULT_CONFIG) if with_defaults else {}
    if config_path is None:
        return base

    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(path, 'r') as f:
        config = yaml.safe_load(f)

    if config is None:
        return base

    return deep_merge(base, config)


def get_nested(config: Dict[str, Any], key_path: str, default: Any = None) -> Any:
    """
    Get a nested value from config using dot notation.

    Args:
        config: Configuration dictionary
        key_path: Dot-separated path (e.g., "positional.min_contig_length")
        default: Default value if key not found

    Returns:
        Value at the specified path, or default if not found

    Examples:
        >>> config = {"positional": {"min_contig_length": 1000}}
        >>> get_nested(config, "positional.min_contig_length")
        1000
        >>> get_nested(config, "positional.missing", "default")
        'default'
    """
    keys = key_path.split('.')
    value = config

    for key in keys:
        if isinstance(value, dict) and key in value:
            value = value[key]
        else:
            return default

    return value


def flatten_config(config: Dict[str, Any], prefix: str = "") -> Dict[str, str]:
    """
    Flatten nested config into flat dictionary with dot-notation keys.

    Lists are joined with commas.

    Examples:
        >>> flatten_config({"size_selection": {"min_length": 50}})
        {'size_selection.min_length': '50'}
    """
    flat = {}

    for key, value in config.items():
        full_key = f"{prefix}.{key}" if prefix else key

        if isinstance(value, dict):
            flat.update(flatten_config(value, full_key))
        elif value is None:
            flat[full_key] = ""
        elif isinstance(value, bool):
            flat[full_key] = "true" if value else "false"
        elif isinstance(value, (list, tuple)):
            flat[full_key] = ",".join(str(v) for v in value)
        else:
            flat[full_key] = str(value)

    return flat


def to_shell_var_name(key_path: str) -> str:
    """
    Convert dot-notation key to shell variable name.

    Examples:
        >>> to_shell_var_name("positional.min_contig_length")
        'SNAPT_POSITIONAL_MIN_CONTIG_LENGTH'
    """
    return "SNAPT_" + key_path.upper().replace(".", "_").replace("-", "_")


def export_as_shell(config: Dict[str, Any]) -> str:
    """Export config as shell variable assignments."""
    flat = flatten_config(config)
    lines = []

    for key, value in sorted(flat.items()):
        var_name = to_shell_var_name(key)
        # Escape single quotes in value
        escaped_value = str(value).replace("'", "'\"'\"'")
        lines.append(f"export {var_name}='{escaped_value}'")

    return "\n".join(lines)


def _check_number(config, key_path, errors, minimum=None, maximum=None, integer=False):
    value = get_nested(config, key_path)
    kind = "an integer" if integer else "a number"
    try:
        number = int(value) if integer else float(value)
        if integer and number != float(value):
            raise ValueError
    except (ValueError, TypeError):
        errors.append(f"{key_path} must be {kind}, got {value!r}")
        return None
    if minimum is not None and number < minimum:
        errors.append(f"{key_path} must be >= {minimum}, got {value}")
    if maximum is not None and number > maximum:
        errors.append(f"{key_path} must be <= {maximum}, got {value}")
    return number


def validate_config(config: Dict[str, Any]) -> tuple[bool, list[str]]:
    """
    Validate configuration values and ranges.

    Args:
        config: Configuration dictionary (normally after load_config)

    Returns:
        Tuple of (is_valid, list of error messages)
    """
    errors = []

    for key_path in (
        "classification.intergenic_margin",
        "classification.peptide_len_max",
        "positional.min_contig_length",
        "positional.base_margin",
        "positional.reference_length",
        "size_selection.min_length",
    ):
        _check_number(config, key_path, errors, minimum=0, integer=True)

    _check_number(config, "classification.antisense_overlap_min", errors, minimum=1, integer=True)
    _check_number(config, "classification.jobs", errors, minimum=1, integer=True)
    _check_number(config, "classification.peptide_ratio_min", errors, minimum=0)
    _check_number(config, "orf_content.max_ratio", errors, minimum=0, maximum=1)
    _check_number(config, "homology.blastx.min_bitscore", errors, minimum=0)
    _check_number(config, "homology.blastx.max_evalue", errors, minimum=0)
    _check_number(config, "homology.blastx.min_pident", errors, minimum=0, maximum=100)

    max_len = _check_number(config, "size_selection.max_length", errors, minimum=1, integer=True)
    min_len = get_nested(config, "size_selection.min_length")
    if max_len is not None and isinstance(min_len, int) and min_len > max_len:
        errors.append(
            f"size_selection.min_length ({min_len}) > size_selection.max_length ({max_len})"
        )

    policy = get_nested(config, "positional.margin_policy")
    if policy not in ("scaled", "fixed"):
        errors.append(f"positional.margin_policy must be 'scaled' or 'fixed', got {policy!r}")

    feature_types = get_nested(config, "classification.reference_feature_types")
    if not isinstance(feature_types, list) or not feature_types:
        errors.append("classification.reference_feature_types must be a non-empty list")

    return len(errors) == 0, errors


def print_config_summary(config: Dict[str, Any]) -> None:
    """Print a human-readable config summary."""
    print("=" * 60)
    print("SnapT Configuration Summary")
    print("=" * 60)

    sections = [
        ("Classification", [
            ("classification.intergenic_margin", "Intergenic margin"),
            ("classification.antisense_overlap_min", "Min antisense overlap"),
            ("classification.peptide_len_max", "Short peptide max length"),
            ("classification.peptide_ratio_min", "Short peptide length ratio"),
            ("classification.reference_feature_types", "Coding feature types"),
        ]),
        ("Positional", [
            ("positional.min_contig_length", "Min contig length"),
            ("positional.margin_policy", "Margin policy"),
            ("positional.base_margin", "Base margin"),
        ]),
        ("Curation", [
            ("orf_content.max_ratio", "Max ORF fraction"),
            ("size_selection.min_length", "Min length"),
            ("size_selection.max_length", "Max length"),
        ]),
        ("Homology", [
            ("homology.blastx.min_bitscore", "Min bit score"),
            ("homology.blastx.max_evalue", "Max e-value"),
            ("homology.blastx.min_pident", "Min % identity"),
            ("homology.rfam.small_rna_pattern", "sRNA family pattern"),
        ]),
    ]

    for section_name, fields in sections:
        print(f"\n{section_name}:")
        for key_path, label in fields:
            value = get_nested(config, key_path, "not set")
            print(f"  {label}: {value}")

    print("\n" + "=" * 60)


def main():
    parser = argparse.ArgumentParser(
        description="SnapT Configuration Parser",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )

    parser.add_argument(
        "config",
        help="Path to YAML configuration file"
    )

    parser.add_argument(
        "--get",
        metavar="KEY",
        help="Get single value using dot notation (e.g., positional.min_contig_length)"
    )

    parser.add_argument(
        "--export",
        action="store_true",
        help="Export all config as shell variable assignments"
    )

    parser.add_argument(
        "--validate",
        action="store_true",
        help="Validate configuration and report errors"
    )

    parser.add_argument(
        "--json",
        action="store_true",
        help="Output as JSON (for --get with complex values)"
    )

    args = parser.parse_args()

    try:
        config = load_config(args.config)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except yaml.YAMLError as e:
        print(f"Error parsing YAML: {e}", file=sys.stderr)
        sys.exit(1)

    if args.get:
        value = get_nested(config, args.get)
        if value is None:
            print(f"Key not found: {args.get}", file=sys.stderr)
            sys.exit(1)
        if args.json:
            print(json.dumps(value))
        else:
            print(value)

    elif args.export:
        print(export_as_shell(config))

    elif args.validate:
        is_valid, errors = validate_config(config)
        if is_valid:
            print("Configuration is valid!")
            sys.exit(0)
        else:
            print("Configuration errors:", file=sys.stderr)
            for error in errors:
                print(f"  - {error}", file=sys.stderr)
            sys.exit(1)

    else:
        print_config_summary(config)


if __name__ == "__main__":
    main()
