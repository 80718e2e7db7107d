"""Command line interface for revmark."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Iterable, Optional

from .errors import RevmarkError
from .pipeline import diff_and_highlight
from .presets import GRANULARITIES, HighlightOptions, get_preset, parse_color
from .report import write_json_report

EXIT_HIGHLIGHTED = 0
EXIT_NO_DIFFERENCES = 1
EXIT_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="revmark",
        description="Highlight on a revised PDF the text added since the baseline.",
    )
    parser.add_argument("--old", required=True, help="Path to the baseline PDF")
    parser.add_argument("--new", required=True, help="Path to the revised PDF")
    parser.add_argument("--output", required=True, help="Output PDF with highlights")
    parser.add_argument("--json", help="Optional report path (JSON)")
    parser.add_argument("--preset", default="precise", help="Preset name (precise|characters|lenient)")
    parser.add_argument("--granularity", choices=GRANULARITIES, help="Comparison granularity")
    parser.add_argument("--color", help="Highlight color (#RRGGBB or r,g,b)")
    parser.add_argument("--opacity", type=float, help="Highlight opacity (0-1)")
    parser.add_argument("--padding", type=float, help="Padding around each box (PDF points)")
    parser.add_argument("--y-tolerance", type=float, help="Vertical tolerance for lines and merging")
    parser.add_argument("--join-gap", type=float, help="Gap above which runs are joined with a space")
    parser.add_argument("--fold-case", action="store_true", help="Ignore case when comparing")
    parser.add_argument("--fold-diacritics", action="store_true", help="Ignore accents when comparing")
    parser.add_argument("--fold-width", action="store_true", help="Ignore full-width forms when comparing")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="More logging (-vv for debug)")
    parser.add_argument("--version", action="version", version=_version())
    return parser


def _version() -> str:
    from . import __version__

    return f"%(prog)s {__version__}"


def _override_options(base: HighlightOptions, args: argparse.Namespace) -> HighlightOptions:
    overrides = {}
    for field_name, arg_name in (
        ("granularity", "granularity"),
        ("highlight_opacity", "opacity"),
        ("padding", "padding"),
        ("y_cluster_tolerance", "y_tolerance"),
        ("join_gap_threshold", "join_gap"),
    ):
        value = getattr(args, arg_name)
        if value is not None:
            overrides[field_name] = value
    color = parse_color(args.color)
    if color is not None:
        overrides["highlight_color"] = color
    for flag in ("fold_case", "fold_diacritics", "fold_width"):
        if getattr(args, flag):
            overrides[flag] = True
    return base.copy(**overrides)


def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def main(argv: Optional[Iterable[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    try:
        preset = get_preset(args.preset)
        options = _override_options(preset.options, args)
    except (KeyError, ValueError) as exc:
        parser.error(str(exc.args[0] if exc.args else exc))
        return EXIT_ERROR

    try:
        old_bytes = Path(args.old).read_bytes()
        new_bytes = Path(args.new).read_bytes()
    except OSError as exc:
        print(f"revmark: {exc}", file=sys.stderr)
        return EXIT_ERROR

    try:
        result = diff_and_highlight(old_bytes, new_bytes, options)
    except RevmarkError as exc:
        print(f"revmark: {exc}", file=sys.stderr)
        return EXIT_ERROR

    output = Path(args.output)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(result.pdf_bytes)
    if args.json:
        write_json_report(result, args.json)

    if not result.has_differences:
        print("No added text found.")
        return EXIT_NO_DIFFERENCES
    print(f"Highlighted {len(result.boxes)} region(s) in {output}")
    return EXIT_HIGHLIGHTED


if __name__ == "__main__":
    sys.exit(main())
