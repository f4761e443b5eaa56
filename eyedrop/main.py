from __future__ import annotations

import argparse
import json
import logging

import requests

from eyedrop.src.pixel_picker.config import PickerConfig
from eyedrop.src.pixel_picker.history import load_history, save_history
from eyedrop.src.pixel_picker.io import ImageLoadError, read_image, write_result_json
from eyedrop.src.pixel_picker.models import BoundingBox
from eyedrop.src.pixel_picker.palette import (
    PaletteValidationError,
    load_palette_book,
    save_palette_book,
)
from eyedrop.src.pixel_picker.session import ExtractionSession


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="eyedrop",
        description="Pick exact pixel colors from an image as HEX, RGB and HSL.",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging."
    )
    verbosity.add_argument(
        "-q", "--quiet", action="store_true", help="Only log errors."
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    pick = subparsers.add_parser(
        "pick",
        help="Sample one pixel and print its color.",
    )
    pick.add_argument("--image", required=True, help="Path or URL to the image.")
    pick.add_argument("--x", type=float, required=True, help="Horizontal position.")
    pick.add_argument("--y", type=float, required=True, help="Vertical position.")
    pick.add_argument(
        "--display-width",
        type=float,
        default=None,
        help="On-screen width of the image. When set, --x/--y are display "
        "coordinates instead of buffer pixels.",
    )
    pick.add_argument(
        "--display-height",
        type=float,
        default=None,
        help="On-screen height of the image (defaults to keeping the aspect ratio).",
    )
    pick.add_argument(
        "--zoom",
        type=float,
        default=1.0,
        help="Visual zoom applied around the display center.",
    )
    pick.add_argument(
        "--max-width",
        type=int,
        default=PickerConfig.max_width,
        help="Largest buffer side in pixels; images are only ever downscaled.",
    )
    pick.add_argument(
        "--history",
        default=None,
        help="Optional JSON history file to record the picked color in.",
    )
    pick.add_argument(
        "--out",
        default=None,
        help="Optional JSON output path. If omitted, prints JSON to stdout.",
    )

    history = subparsers.add_parser("history", help="Show or clear picked colors.")
    history.add_argument("action", choices=["list", "clear"])
    history.add_argument("--history", required=True, help="JSON history file.")

    palette = subparsers.add_parser(
        "palette", help="Save the history as a named palette, or manage palettes."
    )
    palette.add_argument("action", choices=["save", "list", "delete", "copy"])
    palette.add_argument("--palettes", required=True, help="JSON palettes file.")
    palette.add_argument("--history", default=None, help="JSON history file.")
    palette.add_argument("--name", default=None, help="Name for a new palette.")
    palette.add_argument("--index", type=int, default=None, help="Palette index.")

    return parser


def _configure_logging(args: argparse.Namespace) -> None:
    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s:%(name)s:%(message)s")


def _run_pick(args: argparse.Namespace, parser: argparse.ArgumentParser) -> None:
    config = PickerConfig(max_width=args.max_width)
    try:
        history = (
            load_history(args.history, config.history_limit) if args.history else None
        )
    except ValueError as exc:
        parser.error(str(exc))
    session = ExtractionSession(config=config, history=history)

    try:
        image = read_image(
            args.image,
            max_bytes=config.max_image_bytes,
            timeout=config.request_timeout,
        )
    except (ImageLoadError, requests.RequestException) as exc:
        parser.error(f"failed_to_load_image: {exc}")
    buffer = session.load_image(image)

    if args.display_width is None:
        if not (args.x.is_integer() and args.y.is_integer()):
            parser.error("buffer coordinates must be whole pixels without --display-width")
        result = session.pick(int(args.x), int(args.y))
    else:
        display_height = args.display_height
        if display_height is None:
            display_height = args.display_width * buffer.height / buffer.width
        session.zoom.set_level(args.zoom)
        layout = BoundingBox(0.0, 0.0, args.display_width, display_height)
        result = session.pick_at(args.x, args.y, session.zoom.display_box(layout))

    if args.history and result is not None:
        save_history(session.history, args.history)

    if args.out:
        write_result_json(result, args.out)
    else:
        print(json.dumps(None if result is None else result.to_dict(), indent=2))


def _run_history(args: argparse.Namespace, parser: argparse.ArgumentParser) -> None:
    try:
        history = load_history(args.history)
    except ValueError as exc:
        parser.error(str(exc))
    if args.action == "clear":
        history.clear()
        save_history(history, args.history)
        return
    print(json.dumps(history.colors, indent=2))


def _run_palette(args: argparse.Namespace, parser: argparse.ArgumentParser) -> None:
    try:
        book = load_palette_book(args.palettes)
    except PaletteValidationError as exc:
        parser.error(str(exc))

    if args.action == "list":
        print(json.dumps([p.to_dict() for p in book.palettes], indent=2))
        return

    if args.action == "save":
        if not args.history or not args.name:
            parser.error("palette save needs --history and --name")
        try:
            colors = load_history(args.history).colors
            book.create(args.name, colors)
        except ValueError as exc:
            parser.error(str(exc))
        save_palette_book(book, args.palettes)
        return

    if args.index is None:
        parser.error(f"palette {args.action} needs --index")
    try:
        if args.action == "copy":
            print(book.copy_text(args.index))
            return
        book.delete(args.index)
    except IndexError as exc:
        parser.error(str(exc))
    save_palette_book(book, args.palettes)


def main() -> None:
    parser = _build_parser()
    args = parser.parse_args()
    _configure_logging(args)

    if args.command == "pick":
        _run_pick(args, parser)
        return
    if args.command == "history":
        _run_history(args, parser)
        return
    if args.command == "palette":
        _run_palette(args, parser)
        return

    parser.error("unknown command")


if __name__ == "__main__":
    main()
