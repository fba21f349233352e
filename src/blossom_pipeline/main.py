"""Main module for the blossom pipeline CLI."""

import sys
import argparse
from pathlib import Path
from typing import Dict, List

from .core.exceptions import BlossomPipelineError, ValidationError
from .core.image_utils import PillowImageCodec, read_image_file
from .core.logging_config import setup_logger
from .core.models import ImageInput, ValidationPolicy, format_file_size
from .core.sanitizer import sanitize_image
from .core.validation import validate_batch
from .processors import process_batch

VERSION = "0.1.0"


def _read_inputs(paths: List[str]) -> List[ImageInput]:
    return [read_image_file(path) for path in paths]


def _output_conflicts(paths: List[str], output_dir: Path, force: bool) -> List[str]:
    """
    Find sanitize targets that would clobber an input or each other.

    Inputs are never overwritten. Existing files in the output directory
    are only overwritten with ``force``.
    """
    inputs = {Path(p).resolve() for p in paths}
    conflicts: List[str] = []
    seen: Dict[str, str] = {}
    for path in paths:
        name = Path(path).name
        if name in seen:
            conflicts.append(f"{path} and {seen[name]} both map to {output_dir / name}")
            continue
        seen[name] = path

        target = output_dir / name
        if target.resolve() in inputs:
            conflicts.append(f"{target} is an input file")
        elif target.exists() and not force:
            conflicts.append(f"{target} already exists (use --force to overwrite)")
    return conflicts


def validate_command(args: argparse.Namespace) -> int:
    """Check local files against the upload policy."""
    try:
        images = _read_inputs(args.files)
        validate_batch(images, ValidationPolicy(max_file_size=args.max_file_size))
    except ValidationError as e:
        print(f"Rejected: {e.message}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Could not read input: {e}", file=sys.stderr)
        return 1

    for image in images:
        print(f"OK {image.name} ({format_file_size(image.size)})")
    return 0


def sanitize_command(args: argparse.Namespace) -> int:
    """Strip metadata from local files and write the results to a directory."""
    logger = setup_logger(level="DEBUG" if args.debug else None)

    try:
        images = _read_inputs(args.files)
        validate_batch(images, ValidationPolicy(max_file_size=args.max_file_size))
    except ValidationError as e:
        print(f"Rejected: {e.message}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Could not read input: {e}", file=sys.stderr)
        return 1

    output_dir = Path(args.output_dir)
    conflicts = _output_conflicts(args.files, output_dir, args.force)
    if conflicts:
        for conflict in conflicts:
            print(f"Refusing to write: {conflict}", file=sys.stderr)
        return 1

    output_dir.mkdir(parents=True, exist_ok=True)
    codec = PillowImageCodec()

    async def sanitize(image: ImageInput):
        return await sanitize_image(image, codec)

    results = process_batch(images, sanitize)

    failures = 0
    for result in results:
        if not result.success:
            failures += 1
            message = (
                result.error.message
                if isinstance(result.error, BlossomPipelineError)
                else str(result.error)
            )
            logger.error(f"[{result.item.name}] Sanitize failed: {message}")
            continue
        target = output_dir / result.value.name
        target.write_bytes(result.value.data)
        print(
            f"Sanitized {result.item.name}: "
            f"{format_file_size(result.item.size)} -> "
            f"{format_file_size(result.value.size)}"
        )

    logger.info(f"Sanitized {len(results) - failures}/{len(results)} images into {output_dir}")
    return 1 if failures else 0


def main() -> None:
    """
    Entry point for the command-line interface (CLI) of the Blossom Pipeline.

    Uploading needs a signer and a Blossom client supplied by the host
    application, so the CLI only exposes the local stages: policy
    validation and metadata stripping.
    """
    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="blossom-pipeline",
        description="Blossom Pipeline - validate and strip metadata from images before upload",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Check files against the upload policy
  blossom-pipeline validate photo.jpg diagram.png

  # Strip metadata into an output directory
  blossom-pipeline sanitize photo.jpg --output-dir clean/

  # Show version
  blossom-pipeline version
        """,
    )

    subparsers: argparse._SubParsersAction = parser.add_subparsers(
        dest="command", help="Available commands"
    )

    for name, help_text in (
        ("validate", "Check images against the upload policy"),
        ("sanitize", "Strip metadata from images by re-encoding their pixels"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("files", nargs="+", help="Image files")
        sub.add_argument(
            "--max-file-size",
            type=int,
            default=ValidationPolicy().max_file_size,
            help="Maximum accepted size in bytes (default: 5 MB)",
        )
        if name == "sanitize":
            sub.add_argument(
                "--output-dir", required=True, help="Directory for sanitized images"
            )
            sub.add_argument(
                "--force",
                action="store_true",
                help="Overwrite existing files in the output directory (never the inputs)",
            )
            sub.add_argument("--debug", action="store_true", help="Enable debug logging")

    # Version subcommand
    subparsers.add_parser("version", help="Show version information")

    args: argparse.Namespace = parser.parse_args()

    if args.command == "validate":
        sys.exit(validate_command(args))

    elif args.command == "sanitize":
        sys.exit(sanitize_command(args))

    elif args.command == "version":
        print("Blossom Pipeline CLI")
        print(f"Version {VERSION}")
        print("Metadata-stripping image uploads for Blossom media servers")
        sys.exit(0)

    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
