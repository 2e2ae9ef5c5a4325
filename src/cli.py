"""Command-line interface for number extraction, batch scanning and benchmarks.

Provides subcommands for extracting numbers from text, scanning single
images or folders of images with CSV export, and benchmarking the
extractor against labeled samples.
"""

import argparse
import csv
import json
import sys
import time
from pathlib import Path

from src.benchmark.evaluator import Evaluator, load_ground_truth
from src.extraction.number_extractor import NumberExtractor
from src.ocr.scanner import NumberScanner
from src.utils.config import load_config
from src.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)

_SUPPORTED_EXTENSIONS = ("*.png", "*.jpg", "*.jpeg", "*.tiff", "*.tif", "*.webp")
_CSV_COLUMNS = [
    "filename",
    "status",
    "ocr_pass",
    "number_count",
    "numbers",
    "processing_time_s",
    "error",
]


def _find_images(input_dir: Path) -> list[Path]:
    """Find all supported image files in a directory.

    Args:
        input_dir: Directory to scan for captures.

    Returns:
        Sorted list of image file paths.
    """
    files: list[Path] = []
    for ext in _SUPPORTED_EXTENSIONS:
        files.extend(input_dir.glob(ext))
        files.extend(input_dir.glob(ext.upper()))
    return sorted(set(files))


def extract_text(text: str, max_results: int | None = None) -> list[str]:
    """Extract ranked numbers from text with the configured extractor."""
    config = load_config()
    return NumberExtractor(config.extraction).extract(text, max_results)


def scan_single(file_path: Path, max_results: int | None = None) -> dict[str, object]:
    """Scan one image and return the scan record as a dictionary."""
    scanner = NumberScanner(load_config())
    return scanner.scan(file_path, file_path.name, max_results).to_dict()


def process_folder(
    input_dir: Path,
    output_csv: Path,
    verbose: bool = False,
) -> dict[str, int]:
    """Scan all images in a folder and export the numbers to CSV.

    Args:
        input_dir: Directory containing image files.
        output_csv: Path for the output CSV file.
        verbose: Whether to print per-file progress.

    Returns:
        Summary dict with total, successful, and failed counts.
    """
    scanner = NumberScanner(load_config())

    files = _find_images(input_dir)
    if not files:
        logger.warning("No images found in %s", input_dir)
        return {"total": 0, "successful": 0, "failed": 0}

    logger.info("Found %d images to scan", len(files))

    rows: list[dict[str, object]] = []
    successful = 0
    failed = 0

    for i, file_path in enumerate(files, 1):
        if verbose:
            print(f"Scanning [{i}/{len(files)}]: {file_path.name}")

        start_time = time.time()
        try:
            result = scanner.scan(file_path, file_path.name)
            rows.append(
                {
                    "filename": file_path.name,
                    "status": "success" if result.numbers else "no_numbers",
                    "ocr_pass": result.ocr_pass,
                    "number_count": len(result.numbers),
                    "numbers": " | ".join(result.numbers),
                    "processing_time_s": round(time.time() - start_time, 2),
                    "error": None,
                }
            )
            successful += 1
        except Exception as exc:
            logger.error("Failed to scan %s: %s", file_path.name, exc)
            rows.append(
                {
                    "filename": file_path.name,
                    "status": "failed",
                    "error": str(exc),
                }
            )
            failed += 1

    _write_csv(rows, output_csv)
    logger.info("Results written to %s", output_csv)

    summary = {"total": len(files), "successful": successful, "failed": failed}
    _print_summary(summary, output_csv)
    return summary


def _write_csv(rows: list[dict[str, object]], output_path: Path) -> None:
    """Write scan rows to a CSV file.

    Args:
        rows: List of row dictionaries.
        output_path: Path for the output CSV file.
    """
    if not rows:
        return

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=_CSV_COLUMNS, extrasaction="ignore")
        writer.writeheader()
        writer.writerows(rows)


def _print_summary(summary: dict[str, int], output_csv: Path) -> None:
    """Print batch scanning summary to stdout."""
    print(f"\n{'=' * 50}")
    print("Batch Scan Complete")
    print(f"{'=' * 50}")
    print(f"Total:      {summary['total']}")
    print(f"Successful: {summary['successful']}")
    print(f"Failed:     {summary['failed']}")
    print(f"Output:     {output_csv}")


def run_benchmark(ground_truth_path: Path, output: Path | None = None) -> str:
    """Benchmark the configured extractor against labeled samples.

    Args:
        ground_truth_path: JSON or CSV file of labeled samples.
        output: Optional path for the text report.

    Returns:
        The formatted report.
    """
    config = load_config()
    ground_truth = load_ground_truth(ground_truth_path)
    evaluator = Evaluator()
    result = evaluator.run(NumberExtractor(config.extraction), ground_truth)
    return evaluator.generate_report(result, output)


def _write_or_print(output_str: str, output: Path | None) -> None:
    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(output_str, encoding="utf-8")
        print(f"Output written to {output}")
    else:
        print(output_str)


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and dispatch to the appropriate command.

    Args:
        argv: Command-line arguments (defaults to sys.argv).
    """
    parser = argparse.ArgumentParser(
        description="Number Scanner",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    text_parser = subparsers.add_parser(
        "text", help="Extract numbers from a text file or stdin"
    )
    text_parser.add_argument(
        "file", type=Path, nargs="?", help="Text file (default: read stdin)"
    )
    text_parser.add_argument(
        "-n", "--max-results", type=int, help="Maximum number of values"
    )

    scan_parser = subparsers.add_parser("scan", help="Scan a single image")
    scan_parser.add_argument("file", type=Path, help="Image file to scan")
    scan_parser.add_argument(
        "-n", "--max-results", type=int, help="Maximum number of values"
    )
    scan_parser.add_argument("-o", "--output", type=Path, help="Output JSON file")

    batch_parser = subparsers.add_parser("batch", help="Scan a folder of images")
    batch_parser.add_argument("input_dir", type=Path, help="Input directory with images")
    batch_parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=Path("results.csv"),
        help="Output CSV file (default: results.csv)",
    )
    batch_parser.add_argument(
        "-v", "--verbose", action="store_true", help="Verbose output"
    )

    bench_parser = subparsers.add_parser(
        "benchmark", help="Evaluate extraction on labeled text samples"
    )
    bench_parser.add_argument(
        "ground_truth", type=Path, help="Labeled samples (JSON or CSV)"
    )
    bench_parser.add_argument("-o", "--output", type=Path, help="Output report file")

    args = parser.parse_args(argv)

    setup_logging(load_config().log_level, stream=sys.stderr)

    if args.command == "text":
        if args.file is not None and not args.file.exists():
            print(f"Error: {args.file} does not exist", file=sys.stderr)
            sys.exit(1)
        text = (
            args.file.read_text(encoding="utf-8")
            if args.file is not None
            else sys.stdin.read()
        )
        print(json.dumps(extract_text(text, args.max_results), ensure_ascii=False))
    elif args.command == "scan":
        if not args.file.exists():
            print(f"Error: {args.file} does not exist", file=sys.stderr)
            sys.exit(1)
        result = scan_single(args.file, args.max_results)
        _write_or_print(json.dumps(result, indent=2, ensure_ascii=False), args.output)
    elif args.command == "batch":
        if not args.input_dir.is_dir():
            print(f"Error: {args.input_dir} is not a directory", file=sys.stderr)
            sys.exit(1)
        process_folder(args.input_dir, args.output, args.verbose)
    elif args.command == "benchmark":
        if not args.ground_truth.exists():
            print(f"Error: {args.ground_truth} does not exist", file=sys.stderr)
            sys.exit(1)
        report = run_benchmark(args.ground_truth, args.output)
        print(report)
    else:
        parser.print_help()
        sys.exit(0)


if __name__ == "__main__":
    main()
