from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Callable, NoReturn, Optional, Sequence

from .config import RunConfig, RunMode, Settings, load_settings
from .errors import ArgumentError
from .models import RunSummary
from .pipeline import CoverTagger

LOG_FORMAT = "%(levelname).1s | %(message)s"

C_RESET = "\033[0m"
LEVEL_COLORS = {
    logging.DEBUG: "\033[36m",  # Cyan
    logging.INFO: "\033[37m",  # Light gray
    logging.WARNING: "\033[33m",  # Yellow
    logging.ERROR: "\033[31m",  # Red
    logging.CRITICAL: "\033[35m",  # Magenta
}


class ColorFormatter(logging.Formatter):
    def __init__(self, fmt: str, use_color: bool = True) -> None:
        super().__init__(fmt)
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        color = LEVEL_COLORS.get(record.levelno)
        if not color or not self.use_color:
            return message
        return f"{color}{message}{C_RESET}"


class ErrorBufferHandler(logging.Handler):
    def __init__(self) -> None:
        super().__init__(level=logging.ERROR)
        self.records: list[str] = []

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record)
        except Exception:  # pragma: no cover
            msg = record.getMessage()
        self.records.append(msg)


class _BelowWarning(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno < logging.WARNING


class _Parser(argparse.ArgumentParser):
    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def configure_logging(level: str = "INFO") -> ErrorBufferHandler:
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    out_handler = logging.StreamHandler(sys.stdout)
    out_handler.addFilter(_BelowWarning())
    out_handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(out_handler)

    err_handler = logging.StreamHandler(sys.stderr)
    err_handler.setLevel(logging.WARNING)
    err_handler.setFormatter(ColorFormatter(LOG_FORMAT, use_color=sys.stderr.isatty()))
    root_logger.addHandler(err_handler)

    error_buffer = ErrorBufferHandler()
    error_buffer.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(error_buffer)

    logging.getLogger("PIL").setLevel(logging.WARNING)
    return error_buffer


def _add_common_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", type=Path, help="Optional settings file (YAML)")
    parser.add_argument("--log-level", default="INFO", help="Python logging level")


def _add_folder_arguments(parser: argparse.ArgumentParser, *, resize: bool) -> None:
    parser.add_argument("folder", type=Path, help="Folder containing the MP3 files")
    parser.add_argument("image", type=Path, help="Cover art image to embed")
    if resize:
        parser.add_argument("--size", type=int, help="Edge length of the square cover (default 300)")
    _add_common_options(parser)


def _add_manifest_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("manifest", type=Path, help="CSV file with 'Album' and 'Art' columns")
    parser.add_argument("--size", type=int, help="Edge length of the square cover (default 300)")
    _add_common_options(parser)


def build_config(mode: RunMode, args: argparse.Namespace) -> RunConfig:
    settings = load_settings(args.config)
    size = getattr(args, "size", None)
    if size is not None:
        if size <= 0:
            raise ArgumentError("--size must be a positive number of pixels")
        settings = _with_size(settings, size)
    return RunConfig.build(
        mode=mode,
        folder=getattr(args, "folder", None),
        image=getattr(args, "image", None),
        manifest=getattr(args, "manifest", None),
        settings=settings,
    )


def _with_size(settings: Settings, size: int) -> Settings:
    image = settings.image.model_copy(update={"size": size})
    return settings.model_copy(update={"image": image})


def run(config: RunConfig, log_level: str = "INFO") -> RunSummary:
    error_buffer = configure_logging(log_level)
    summary = asyncio.run(CoverTagger(config).run())
    if error_buffer.records:
        count = len(error_buffer.records)
        line = f"{count} error{'s' if count != 1 else ''} reported, see above."
        print(f"\033[33m{line}\033[0m" if sys.stderr.isatty() else line, file=sys.stderr)
    return summary


def _entry(
    mode: RunMode,
    parser: argparse.ArgumentParser,
    argv: Optional[Sequence[str]],
) -> int:
    args = parser.parse_args(argv)
    try:
        config = build_config(mode, args)
    except ArgumentError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        parser.print_usage(sys.stderr)
        return 1
    run(config, args.log_level)
    return 0


def _folder_parser(prog: str, *, resize: bool) -> argparse.ArgumentParser:
    description = (
        "Resize artwork to a square PNG and embed it into every MP3 in a folder"
        if resize
        else "Embed one cover image into every MP3 in a folder"
    )
    parser = _Parser(prog=prog, description=description)
    _add_folder_arguments(parser, resize=resize)
    return parser


def add_album_art(argv: Optional[Sequence[str]] = None) -> int:
    return _entry(RunMode.FOLDER, _folder_parser("add-album-art", resize=False), argv)


def add_album_art_resized(argv: Optional[Sequence[str]] = None) -> int:
    return _entry(RunMode.NORMALIZE, _folder_parser("add-album-art-resized", resize=True), argv)


def add_album_art_bulk(argv: Optional[Sequence[str]] = None) -> int:
    parser = _Parser(
        prog="add-album-art-bulk",
        description="Embed artwork into many album folders listed in a CSV manifest",
    )
    _add_manifest_arguments(parser)
    return _entry(RunMode.MANIFEST, parser, argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = _Parser(prog="cover-tagger", description="Embed cover art into MP3 files")
    subparsers = parser.add_subparsers(dest="command", required=True, parser_class=_Parser)
    _add_folder_arguments(
        subparsers.add_parser("folder", help="Embed an image as-is into one folder"), resize=False
    )
    _add_folder_arguments(
        subparsers.add_parser("normalize", help="Resize the image to a square, then embed"), resize=True
    )
    _add_manifest_arguments(subparsers.add_parser("manifest", help="Process a CSV manifest"))
    args = parser.parse_args(argv)
    modes: dict[str, RunMode] = {
        "folder": RunMode.FOLDER,
        "normalize": RunMode.NORMALIZE,
        "manifest": RunMode.MANIFEST,
    }
    try:
        config = build_config(modes[args.command], args)
    except ArgumentError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    run(config, args.log_level)
    return 0


def _console(entry: Callable[[], int]) -> Callable[[], None]:
    def _run() -> None:
        raise SystemExit(entry())

    return _run


main_folder = _console(add_album_art)
main_resized = _console(add_album_art_resized)
main_bulk = _console(add_album_art_bulk)
main_cli = _console(main)


if __name__ == "__main__":  # pragma: no cover
    main_cli()
