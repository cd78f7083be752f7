"""Command-line batch runner for Box 3 deduplication.

Reads a blueprint JSON file, deduplicates it, optionally runs the
cross-category review pass, and writes the results.

Usage:
    box3-dedup dossier.json
    box3-dedup dossier.json --years 2022 2023 --output-dir out/
    box3-dedup dossier.json --no-cross-category --log-level DEBUG

Outputs (in --output-dir):
    <name>.deduplicated.json  The deduplicated blueprint
    <name>.dedup_result.json  Matches, counts, conflicts and audit trail
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Optional, Sequence

import structlog

from .config import configure_logging, load_config
from .cross_category import detect_cross_category_duplicates
from .deduplication import run_semantic_deduplication
from .exceptions import Box3Error
from .models import load_blueprint

logger = structlog.get_logger()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="box3-dedup",
        description="Deduplicate the assets of a Box 3 dossier blueprint",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Consider every tax year found in the blueprint
  box3-dedup dossier.json

  # Only the objection years, results next to the input
  box3-dedup dossier.json --years 2022 2023 --output-dir .
        """,
    )
    parser.add_argument(
        "blueprint",
        type=Path,
        help="Path to the blueprint JSON file",
    )
    parser.add_argument(
        "--years", "-y",
        nargs="+",
        default=None,
        help="Tax years to consider (default: BOX3_DEDUP_TAX_YEARS or all years in the data)",
    )
    parser.add_argument(
        "--output-dir", "-o",
        type=Path,
        default=None,
        help="Output directory (default: directory of the input file)",
    )
    parser.add_argument(
        "--no-cross-category",
        action="store_true",
        help="Skip the cross-category review pass",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Override BOX3_LOG_LEVEL",
    )
    return parser


def _write_json(path: Path, payload: object) -> None:
    with path.open("w", encoding="utf-8") as handle:
        json.dump(payload, handle, indent=2, ensure_ascii=False)


def run(
    blueprint_path: Path,
    *,
    years: Optional[Sequence[str]],
    output_dir: Path,
    cross_category: bool,
) -> dict[str, object]:
    """Deduplicate one blueprint file and write the outputs.

    Returns:
        Summary of the run.

    Raises:
        Box3Error: If the blueprint is invalid.
        OSError: If a file cannot be read or written.
    """
    with blueprint_path.open("r", encoding="utf-8") as handle:
        raw = json.load(handle)

    blueprint = load_blueprint(raw)
    outcome = run_semantic_deduplication(blueprint, years)
    cross_matches = (
        detect_cross_category_duplicates(outcome.blueprint, years) if cross_category else []
    )

    output_dir.mkdir(parents=True, exist_ok=True)
    stem = blueprint_path.stem
    blueprint_out = output_dir / f"{stem}.deduplicated.json"
    result_out = output_dir / f"{stem}.dedup_result.json"

    _write_json(blueprint_out, outcome.blueprint.model_dump(mode="json", exclude_unset=True))
    _write_json(
        result_out,
        {
            **outcome.result.model_dump(mode="json"),
            "cross_category_matches": [m.model_dump(mode="json") for m in cross_matches],
        },
    )

    return {
        "original_total": outcome.result.original_count.total,
        "deduplicated_total": outcome.result.deduplicated_count.total,
        "items_merged": outcome.result.items_merged,
        "items_flagged_for_review": outcome.result.items_flagged_for_review,
        "ownership_conflicts": len(outcome.result.ownership_conflicts),
        "cross_category_matches": len(cross_matches),
        "blueprint_path": str(blueprint_out),
        "result_path": str(result_out),
    }


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point for the box3-dedup command."""
    args = build_parser().parse_args(argv)

    try:
        overrides = {"log_level": args.log_level} if args.log_level else {}
        config = load_config(**overrides)
    except Box3Error as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    configure_logging(config.log_level, config.log_format)

    blueprint_path = args.blueprint.expanduser().resolve()
    if not blueprint_path.is_file():
        print(f"Error: Blueprint not found: {blueprint_path}", file=sys.stderr)
        return 1

    years = args.years or config.dedup.tax_years or None
    output_dir = (args.output_dir or blueprint_path.parent).expanduser().resolve()
    cross_category = config.dedup.enable_cross_category and not args.no_cross_category

    try:
        summary = run(
            blueprint_path,
            years=years,
            output_dir=output_dir,
            cross_category=cross_category,
        )
    except json.JSONDecodeError as e:
        print(f"Error: {blueprint_path} is not valid JSON: {e}", file=sys.stderr)
        return 1
    except Box3Error as e:
        logger.error("dedup_failed", error=str(e), details=e.details)
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"Records:   {summary['original_total']} -> {summary['deduplicated_total']}")
    print(f"Merged:    {summary['items_merged']}")
    print(f"Review:    {summary['items_flagged_for_review']}")
    print(f"Ownership: {summary['ownership_conflicts']} conflict(s)")
    if cross_category:
        print(f"Cross:     {summary['cross_category_matches']} match(es)")
    print(f"Blueprint: {summary['blueprint_path']}")
    print(f"Result:    {summary['result_path']}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
