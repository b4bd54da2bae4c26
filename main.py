#!/usr/bin/env python3
"""
Command-line entry point.

Anything not given as an argument is asked for interactively, re-prompting
until the answer is valid:

    python main.py photo.bmp --filter 4 --strength 3
    python main.py            # prompts for path, filter and strength
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Callable, Optional

from pydantic import ValidationError

from ascii_art import validate_ascii_width
from bmpdecoder import DecodedBitmap, header_info
from errors import ImageFilterError, InvalidParameterError
from filter_options import (
    FILTER_TYPES,
    MAX_STRENGTH,
    MENU_KINDS,
    MIN_STRENGTH,
    FilterKind,
    check_strength,
    make_filter,
    parse_kind,
)
from pipeline import load_bitmap, output_path_for, render_output, write_output
from settings import LoggingSettings, build_converter, get_settings

logger = logging.getLogger(__name__)

Prompt = Callable[[str], str]


def _log_level(value: str) -> str:
    try:
        return LoggingSettings(level=value).level
    except ValidationError:
        raise argparse.ArgumentTypeError(f"unknown log level: {value!r}") from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bmpfilter",
        description="Apply a filter to a 24-bit BMP (other formats are converted first).",
    )
    parser.add_argument("path", nargs="?", help="Input image path")
    parser.add_argument("-f", "--filter", dest="filter_kind",
                        help="Filter number (1-8) or name, e.g. 'sepia', 'gaussian-blur'")
    parser.add_argument("-s", "--strength", type=int,
                        help=f"Filter strength ({MIN_STRENGTH}-{MAX_STRENGTH}) for parametrised filters")
    parser.add_argument("-w", "--width", type=int, help="ASCII output width in characters")
    parser.add_argument("-o", "--output-dir", type=Path, help="Directory for the output file")
    parser.add_argument("--converter", choices=["pillow", "magick", "none"],
                        help="How to convert non-BMP inputs")
    parser.add_argument("--info", action="store_true", help="Print the bitmap headers and exit")
    parser.add_argument("--preview", action="store_true", help="Show the result in a window")
    parser.add_argument("--log-level", type=_log_level, help="Logging level (DEBUG, INFO, ...)")
    return parser


def _ask_int(prompt: Prompt, message: str) -> Optional[int]:
    answer = prompt(message).strip()
    try:
        return int(answer)
    except ValueError:
        return None


def prompt_path(prompt: Prompt, converter) -> tuple:
    """Ask for a file until one decodes. An empty answer aborts."""
    while True:
        path = prompt("Enter the file path: ").strip()
        if not path:
            raise InvalidParameterError("No file path provided")
        try:
            return path, load_bitmap(path, converter)
        except (ImageFilterError, OSError) as e:
            logger.error(f"Invalid file: {e}")


def prompt_filter_kind(prompt: Prompt) -> FilterKind:
    menu = "\n".join(f"{int(k)}: {FILTER_TYPES[k].name}" for k in MENU_KINDS)
    while True:
        choice = _ask_int(prompt, f"Select a filter type (1 - 8): \n{menu}\n")
        if choice is not None and choice in [int(k) for k in MENU_KINDS]:
            return FilterKind(choice)
        print("Error: Invalid filter type", file=sys.stderr)


def prompt_strength(prompt: Prompt) -> int:
    while True:
        strength = _ask_int(prompt, f"Enter the filter strength ({MIN_STRENGTH} - {MAX_STRENGTH}): ")
        if strength is not None and MIN_STRENGTH <= strength <= MAX_STRENGTH:
            return strength
        print("Error: Invalid filter strength", file=sys.stderr)


def prompt_ascii_width(prompt: Prompt, bitmap: DecodedBitmap) -> int:
    while True:
        width = _ask_int(prompt, "Enter image size: ")
        if width is not None:
            try:
                validate_ascii_width(bitmap.buffer, width)
                return width
            except InvalidParameterError:
                pass
        print("Error: Invalid new size.", file=sys.stderr)


def run(args: argparse.Namespace, prompt: Prompt = input) -> int:
    settings = get_settings()
    conversion = settings.conversion
    if args.converter:
        conversion = conversion.model_copy(update={"backend": args.converter})
    converter = build_converter(conversion)

    if args.path:
        path = args.path
        bitmap = load_bitmap(path, converter)
    else:
        path, bitmap = prompt_path(prompt, converter)

    if args.info:
        for key, value in header_info(bitmap, path).items():
            print(f"{key}: {value}")
        return 0

    if args.filter_kind is not None:
        kind = parse_kind(args.filter_kind)
        if kind not in MENU_KINDS:
            raise InvalidParameterError(f"Invalid filter type: {args.filter_kind!r} (choose 1 - 8)")
    else:
        kind = prompt_filter_kind(prompt)

    strength = None
    width = None
    if FILTER_TYPES[kind].has_parameters:
        strength = check_strength(args.strength) if args.strength is not None else prompt_strength(prompt)
    if kind == FilterKind.ASCII:
        if args.width is not None:
            validate_ascii_width(bitmap.buffer, args.width)
            width = args.width
        else:
            width = prompt_ascii_width(prompt, bitmap)

    option = make_filter(kind, strength=strength, width=width)
    output = render_output(bitmap, option)
    output_dir = args.output_dir if args.output_dir is not None else settings.output_dir
    out_path = write_output(output_path_for(path, option, output_dir), output)
    print(f"Output file created: {out_path}")

    if args.preview:
        from viewer import show_preview
        show_preview(bitmap.buffer, output.result, FILTER_TYPES[kind].name)
    return 0


def main(argv=None, prompt: Prompt = input) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    level = args.log_level or settings.logging.level
    logging.basicConfig(
        level=level,
        format=settings.logging.format,
    )
    logger.debug(f"Settings: {settings.to_dict()}")
    try:
        return run(args, prompt)
    except (ImageFilterError, OSError) as e:
        logger.error(str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
