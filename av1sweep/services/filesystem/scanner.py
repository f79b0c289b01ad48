# av1sweep/services/filesystem/scanner.py
from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, Iterator

from av1sweep.common.logging import get_logger
from av1sweep.common.strings.splitters import normalize_exts

logger = get_logger(__name__)


def has_video_ext(name: str, exts: set[str]) -> bool:
    _, dot, ext = name.rpartition(".")
    return bool(dot) and ext.lower() in exts


def iter_video_files(root: Path | str, extensions: Iterable[str]) -> Iterator[Path]:
    """
    Depth-first walk of `root` yielding absolute paths of files (symlinks
    included) whose extension is in `extensions`, case-insensitively.
    Unreadable directories are skipped; a missing root yields nothing.
    """
    exts = set(normalize_exts(extensions))
    top = os.path.abspath(os.path.expanduser(str(root)))

    def _on_error(err: OSError) -> None:
        logger.debug("skipping unreadable path %s: %s", getattr(err, "filename", "?"), err)

    for dirpath, _dirs, files in os.walk(top, onerror=_on_error):
        for name in files:
            if has_video_ext(name, exts):
                yield Path(dirpath) / name
