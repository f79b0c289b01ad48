# av1sweep/cli.py
from __future__ import annotations

import argparse
import logging
import shutil
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from av1sweep.common.logging import configure_logging, get_logger
from av1sweep.common.settings import get_settings
from av1sweep.domain.enums import MediaGenre, PipelineKind
from av1sweep.services.encode.ffmpeg_adapter import FFmpegEncoder
from av1sweep.services.pipeline.runner import SweepRunner
from av1sweep.services.probe.ffprobe_adapter import FFprobeAdapter
from av1sweep.services.reporting.summary import TITLES, render_summary

logger = get_logger(__name__)

EPILOGS = {
    PipelineKind.crf: (
        "Recursively scans the folder, reads width/height and video codec, picks a base\n"
        "AV1 CRF from the media type, nudges it by pixel count vs 1080p and re-encodes\n"
        "with libsvtav1 only the files that are not already AV1."
    ),
    PipelineKind.bitrate: (
        "Recursively scans the folder, estimates each file's video bitrate, compares it\n"
        "with a recommendation derived from the media type and resolution and re-encodes\n"
        "to AV1 at the recommended bitrate only the files above it by more than the margin,\n"
        "whatever their current codec."
    ),
}


class _ArgumentParser(argparse.ArgumentParser):
    """Configuration errors exit with status 1."""

    def error(self, message: str):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def build_arg_parser(kind: PipelineKind, prog: Optional[str] = None) -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog=prog,
        description=f"{TITLES[kind]} of a media library.",
        epilog=EPILOGS[kind],
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("root", type=Path, help="Root folder to scan")
    parser.add_argument(
        "--media",
        required=True,
        choices=[g.value for g in MediaGenre],
        help="Kind of media stored under the root folder",
    )
    if kind is PipelineKind.bitrate:
        parser.add_argument(
            "--margin",
            type=int,
            default=None,
            metavar="PCT",
            help="Tolerance above the recommended bitrate, in percent (default: BITRATE_MARGIN_PCT or 10)",
        )
    parser.add_argument("--dry-run", action="store_true", default=None, help="Decide and report, never encode")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging, including tool commands")
    return parser


def verify_dependencies(binaries: Sequence[str]) -> bool:
    missing = [b for b in binaries if shutil.which(b) is None]
    if missing:
        logger.critical("Missing required tools: %s", ", ".join(missing))
        logger.critical("Ensure they are installed and available in PATH.")
        return False
    logger.debug("All required CLI tools found: %s", ", ".join(binaries))
    return True


def run(kind: PipelineKind, argv: Optional[Sequence[str]] = None, prog: Optional[str] = None) -> int:
    args = build_arg_parser(kind, prog).parse_args(argv)
    cfg = get_settings()
    configure_logging(logging.DEBUG if args.verbose else cfg.log_level)

    dry_run = cfg.dry_run if args.dry_run is None else args.dry_run
    margin = getattr(args, "margin", None)
    if margin is not None and margin < 0:
        logger.critical("--margin must be >= 0")
        return 1

    binaries: List[str] = [cfg.ffprobe.bin] if dry_run else [cfg.ffprobe.bin, cfg.ffmpeg.bin]
    if not verify_dependencies(binaries):
        return 1

    logger.info("=== %s ===", TITLES[kind])
    logger.info("Media type : %s", args.media)
    logger.info("Folder     : %s", args.root)
    if kind is PipelineKind.bitrate:
        logger.info("Margin     : %s%%", cfg.bitrate_margin_pct if margin is None else margin)
    logger.info("Scanning video files...")

    runner = SweepRunner(
        genre=MediaGenre(args.media),
        kind=kind,
        prober=FFprobeAdapter(shutil.which(cfg.ffprobe.bin)),
        encoder=None if dry_run else FFmpegEncoder(shutil.which(cfg.ffmpeg.bin)),
        margin_pct=margin,
        dry_run=dry_run,
    )
    summary = runner.run(args.root)

    for line in render_summary(summary, kind, dry_run=dry_run):
        logger.info(line)
    logger.info("=== End of %s ===", TITLES[kind])
    return 0


def main_crf(argv: Optional[Sequence[str]] = None) -> int:
    return run(PipelineKind.crf, argv)


def main_bitrate(argv: Optional[Sequence[str]] = None) -> int:
    return run(PipelineKind.bitrate, argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """`python -m av1sweep {crf|bitrate} --media=... ROOT`"""
    argv = list(sys.argv[1:] if argv is None else argv)
    kinds = [k.value for k in PipelineKind]
    if not argv or argv[0] not in kinds:
        print(f"usage: av1sweep {{{','.join(kinds)}}} --media=<anime|movie|cartoon> <root_folder>", file=sys.stderr)
        return 1
    return run(PipelineKind(argv[0]), argv[1:], prog=f"av1sweep {argv[0]}")
