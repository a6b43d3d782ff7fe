"""Command-line interface for ditherpunk.

Supports both interactive TUI mode and headless/JSON mode for scripting.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from ditherpunk.core.kernels import KernelName
from ditherpunk.core.processor import DitherMode

logger = logging.getLogger("ditherpunk")

PALETTE_MODES = (DitherMode.PALETTE, DitherMode.PALETTE_DIFFUSION)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ditherpunk",
        description="Convert an image to monochrome or a reduced color palette.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # --- convert subcommand ---
    convert = subparsers.add_parser(
        "convert",
        help="Dither an image file.",
    )
    convert.add_argument("input", help="Input image path.")
    convert.add_argument(
        "-o", "--output",
        help="Output file path. Defaults to <input>_<mode>.png.",
    )
    convert.add_argument(
        "--mode",
        choices=[m.value for m in DitherMode],
        default="threshold",
        help="Dithering mode (default: threshold).",
    )
    convert.add_argument(
        "--colors",
        type=int,
        help=(
            "Number of palette colors, taken in order from "
            "[white, black, red, green, blue, yellow, magenta, cyan] for "
            "palette, or [black, white, red, blue, green] for "
            "palette-diffusion. Required for both."
        ),
    )
    convert.add_argument(
        "--order",
        type=int,
        default=2,
        help="Bayer matrix order for ordered mode (default: 2).",
    )
    convert.add_argument(
        "--kernel",
        default=KernelName.FLOYD_STEINBERG.value,
        help=(
            "Error diffusion kernel for palette-diffusion: "
            + ", ".join(k.value for k in KernelName)
            + " (default: floyd-steinberg). Unknown names disable diffusion."
        ),
    )
    convert.add_argument(
        "--seed",
        type=int,
        help="Random seed for random mode.",
    )
    convert.add_argument(
        "--json",
        action="store_true",
        help="Output structured JSON (pipe-friendly, no TUI).",
    )
    convert.add_argument(
        "--debug",
        action="store_true",
        help="Show stack traces on error.",
    )
    verbosity = convert.add_mutually_exclusive_group()
    verbosity.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )
    verbosity.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Only log errors.",
    )

    return parser


def _setup_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Send log records to stderr through Rich."""
    if quiet:
        level = logging.ERROR
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO

    handler = RichHandler(
        console=Console(stderr=True),
        show_time=False,
        show_path=False,
        rich_tracebacks=True,
    )
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[handler],
        force=True,
    )


def _json_error(message: str, code: str) -> None:
    """Print JSON error to stderr and exit with code 1."""
    err = {"status": "error", "error": message, "code": code}
    print(json.dumps(err), file=sys.stderr)
    sys.exit(1)


def _fail(args: argparse.Namespace, message: str, code: str) -> None:
    if args.debug and sys.exc_info()[0] is not None:
        import traceback
        traceback.print_exc(file=sys.stderr)
    if args.json:
        _json_error(message, code)
    print(f"Error: {message}", file=sys.stderr)
    sys.exit(1)


def _run_convert(args: argparse.Namespace) -> None:
    """Run the headless convert pipeline."""
    from ditherpunk.core.processor import Settings, process_image
    from ditherpunk.core.reader import open_image
    from ditherpunk.core.writer import default_output_path, save_output

    _setup_logging(verbose=args.verbose, quiet=args.quiet or args.json)

    mode = DitherMode(args.mode)
    if mode in PALETTE_MODES and args.colors is None:
        _fail(args, f"--colors is required for {mode.value} mode", "INVALID_SETTINGS")

    settings = Settings(
        mode=mode,
        n_colors=args.colors if args.colors is not None else Settings.n_colors,
        order=args.order,
        kernel=args.kernel,
        seed=args.seed,
    )
    # Reject bad settings before touching any file
    try:
        settings.validate()
    except ValueError as e:
        _fail(args, str(e), "INVALID_SETTINGS")
    logger.debug("Using %s", settings)

    input_path = Path(args.input).resolve()
    try:
        source = open_image(input_path)
    except FileNotFoundError as e:
        _fail(args, str(e), "FILE_NOT_FOUND")
    except ValueError as e:
        _fail(args, str(e), "INVALID_INPUT")

    if args.output:
        output_path = Path(args.output).resolve()
    else:
        output_path = default_output_path(input_path, mode)

    if not args.json:
        print(
            f"Processing {source.width}x{source.height} image ({mode.value})...",
            file=sys.stderr,
        )

    try:
        processed = process_image(source.pixels, settings)
        save_output(processed, output_path)
    except (ValueError, OSError) as e:
        _fail(args, str(e), "PROCESSING_ERROR")

    if not args.json:
        print(f"Saved to {output_path}", file=sys.stderr)
    else:
        result = {
            "status": "success",
            "input": str(input_path),
            "output": str(output_path),
            "settings": {
                "mode": settings.mode.value,
                "colors": len(processed.colors),
                "order": settings.order,
                "kernel": settings.kernel,
                "seed": settings.seed,
            },
            "metadata": {
                "width": processed.width,
                "height": processed.height,
                "input_format": source.format,
                "output_format": output_path.suffix.lstrip("."),
                "grayscale": processed.is_grayscale,
            },
        }
        print(json.dumps(result, indent=2))


def main(argv: list[str] | None = None) -> None:
    """Main entry point.

    Routing:
      ditherpunk convert <file> [opts]  → convert subcommand
      ditherpunk <file>                 → launch TUI with file
      ditherpunk                        → launch TUI (file prompt)
    """
    # If the first real arg isn't "convert", treat it as a direct TUI launch
    # to avoid argparse subparser consuming the file path as a subcommand.
    raw_args = sys.argv[1:] if argv is None else argv
    if raw_args and raw_args[0] == "convert":
        parser = _build_parser()
        args = parser.parse_args(raw_args)
        _run_convert(args)
    elif raw_args and not raw_args[0].startswith("-"):
        from ditherpunk.app import run_app
        run_app(input_path=raw_args[0])
    elif raw_args and raw_args[0] in ("-h", "--help"):
        parser = _build_parser()
        parser.parse_args(raw_args)
    else:
        from ditherpunk.app import run_app
        run_app()
