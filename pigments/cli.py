"""Command-line interface for pigments."""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from .extract import ColorExtractor
from .formatting import OUTPUT_FORMATS, format_colors
from .ingest import load_image
from .types import INIT_METHODS, ExtractorConfig, PigmentsError

logger = logging.getLogger(__name__)


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI."""
    parser = argparse.ArgumentParser(
        prog="pigments",
        description="Extract the dominant colors of an image with k-means clustering",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  pigments -i photo.jpg
  pigments -i photo.jpg -n 8 -f json -o palette.json

  # Cluster every pixel instead of a downsampled copy
  pigments -i photo.jpg --max-dimension 0
        """,
    )

    parser.add_argument("-i", "--input", required=True, help="Path to the input image")

    parser.add_argument(
        "-n",
        "--num-colors",
        type=int,
        default=5,
        help="Number of colors to extract (default: 5)",
    )

    parser.add_argument(
        "-f",
        "--format",
        choices=OUTPUT_FORMATS,
        default="text",
        help="Output format (default: text)",
    )

    parser.add_argument(
        "-o",
        "--output",
        default=None,
        help="Output file path (default: print to stdout)",
    )

    parser.add_argument(
        "--max-dimension",
        type=int,
        default=500,
        help="Downsample images larger than this before clustering, 0 disables (default: 500)",
    )

    parser.add_argument(
        "--max-iterations",
        type=int,
        default=100,
        help="Maximum k-means iterations (default: 100)",
    )

    parser.add_argument(
        "--tolerance",
        type=float,
        default=1e-4,
        help="Convergence tolerance on centroid movement (default: 1e-4)",
    )

    parser.add_argument(
        "--init",
        choices=INIT_METHODS,
        default="k-means++",
        help="Centroid seeding method (default: k-means++)",
    )

    parser.add_argument(
        "--seed",
        type=int,
        default=42,
        help="Random seed for centroid seeding (default: 42)",
    )

    parser.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Threads for the assignment step (default: 1)",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase log verbosity (-v info, -vv debug)",
    )

    return parser


def configure_logging(verbosity: int) -> None:
    """Route library log records to stderr at the requested level."""
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def main(args: Optional[list] = None) -> int:
    """Main entry point for CLI.

    Args:
        args: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, 1 for error)
    """
    parser = create_parser()
    parsed = parser.parse_args(args)
    configure_logging(parsed.verbose)

    try:
        config = ExtractorConfig(
            num_colors=parsed.num_colors,
            max_dimension=parsed.max_dimension or None,
            max_iterations=parsed.max_iterations,
            tolerance=parsed.tolerance,
            init=parsed.init,
            random_state=parsed.seed,
            n_workers=parsed.workers,
        )

        logger.info(f"Loading image from {parsed.input}")
        image = load_image(parsed.input)

        colors = ColorExtractor(config).extract(image)
        output = format_colors(colors, parsed.format)

        if parsed.output:
            output_path = Path(parsed.output)
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(output + "\n", encoding="utf-8")
            logger.info(f"Results written to {output_path}")
        else:
            print(output)

        return 0

    except (PigmentsError, ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
