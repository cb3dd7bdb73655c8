"""Command-line interface for apexcolor."""

import argparse
from dataclasses import replace
from itertools import product
import logging
import sys
from pathlib import Path
from typing import List, Optional

import numpy as np
from PIL import Image

from apexcolor.pipeline import ProminentColorPipeline
from apexcolor.report import render_report, save_report
from apexcolor.types import (
    CentroidAggregation,
    Cropping,
    DistanceMetricKind,
    ExtractionConfig,
    ProminentColorError,
    SeedingStrategy,
)


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI."""
    parser = argparse.ArgumentParser(
        prog="apexcolor",
        description="Find the K most prominent colors of an image",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  apexcolor -i photo.jpg
  apexcolor -i photo.jpg -k 5 --seeding random --aggregation mean
  apexcolor -i a.jpg b.png --all-variants --html report.html
  apexcolor -i clipart.png --debug --debug-dir ./masks
        """,
    )

    parser.add_argument("-i", "--input", nargs="+", required=True, help="Input image file path(s)")

    parser.add_argument(
        "-k", "--colors", type=int, default=3, help="Number of colors to find (default: 3)"
    )

    parser.add_argument(
        "--seeding",
        choices=[s.value for s in SeedingStrategy],
        default=SeedingStrategy.KMEANS_PLUS_PLUS.value,
        help="Initial centroid selection (default: kmeans++)",
    )

    parser.add_argument(
        "--aggregation",
        choices=[a.value for a in CentroidAggregation],
        default=CentroidAggregation.MEDIAN.value,
        help="Centroid color computation (default: median)",
    )

    parser.add_argument(
        "--distance",
        choices=[d.value for d in DistanceMetricKind],
        default=DistanceMetricKind.RGB.value,
        help="Color distance metric (default: rgb)",
    )

    parser.add_argument(
        "--no-crop", action="store_true", help="Do not crop 25%% off each side before analysis"
    )

    parser.add_argument(
        "--size",
        type=int,
        default=80,
        help="Resize images wider or taller than this to this width (default: 80)",
    )

    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducible runs")

    parser.add_argument(
        "--all-variants",
        action="store_true",
        help="Run every seeding/aggregation/distance/cropping combination",
    )

    parser.add_argument("--html", default=None, help="Write an HTML swatch report to this path")

    parser.add_argument(
        "--debug", action="store_true", help="Save the background mask snapshot of each image"
    )

    parser.add_argument(
        "--debug-dir", default=None, help="Directory for debug snapshots (default: next to input)"
    )

    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    return parser


def build_configs(parsed: argparse.Namespace) -> List[ExtractionConfig]:
    """Configurations to run for each image."""
    base = ExtractionConfig(
        k=parsed.colors,
        seeding=parsed.seeding,
        aggregation=parsed.aggregation,
        distance=parsed.distance,
        cropping=Cropping.NONE if parsed.no_crop else Cropping.CENTER,
        resize_width=parsed.size,
        debug_snapshot=parsed.debug,
        seed=parsed.seed,
    )
    if not parsed.all_variants:
        return [base]

    return [
        replace(base, seeding=seeding, aggregation=aggregation, distance=distance, cropping=cropping)
        for seeding, aggregation, distance, cropping in product(
            SeedingStrategy, CentroidAggregation, DistanceMetricKind, Cropping
        )
    ]


def save_debug_stages(pipeline: ProminentColorPipeline, input_path: Path, debug_dir: Optional[str], index: int) -> None:
    """Save debug stage images as PNG.

    Args:
        pipeline: Pipeline instance with debug_stages
        input_path: Image the stages were produced from
        debug_dir: Output directory, or None for a folder next to the input
        index: Configuration index, keeps variant snapshots apart
    """
    out_dir = Path(debug_dir) if debug_dir else input_path.parent / f"{input_path.stem}_debug"
    out_dir.mkdir(parents=True, exist_ok=True)

    for stage_name, stage_image in pipeline.debug_stages:
        debug_file = out_dir / f"{input_path.stem}_{index}_{stage_name}.png"
        Image.fromarray(stage_image.astype(np.uint8)).save(debug_file)
        print(f"  Saved debug stage: {debug_file}")


def main(args: Optional[list] = None) -> int:
    """Main entry point for CLI.

    Args:
        args: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, 1 if any image failed)
    """
    parser = create_parser()
    parsed = parser.parse_args(args)

    if parsed.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    try:
        configs = build_configs(parsed)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    report = {}
    exit_code = 0

    for input_name in parsed.input:
        input_path = Path(input_name)
        print(f"Processing: {input_path}")
        runs = []

        for index, config in enumerate(configs):
            pipeline = ProminentColorPipeline(config)
            try:
                colors = pipeline.process(input_path)
            except FileNotFoundError as e:
                print(f"Error: {e}", file=sys.stderr)
                exit_code = 1
                break
            except ProminentColorError as e:
                print(f"Error processing image ({config.describe()}): {e}", file=sys.stderr)
                exit_code = 1
                continue

            print(f"  {config.describe()}")
            for color in colors:
                print(f"    #{color.hex} {color.count}")
            runs.append((config.describe(), colors))

            if parsed.debug:
                save_debug_stages(pipeline, input_path, parsed.debug_dir, index)

        if runs:
            report[str(input_path)] = runs

    if parsed.html:
        output = save_report(render_report(report), parsed.html)
        print(f"  Report saved: {output}")

    return exit_code


if __name__ == "__main__":
    sys.exit(main())
