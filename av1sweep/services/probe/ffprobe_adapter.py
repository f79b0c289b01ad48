# av1sweep/services/probe/ffprobe_adapter.py
from __future__ import annotations

import os
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from av1sweep.common.logging import get_logger
from av1sweep.common.probe.ffprobe_helpers import build_ffprobe_cmd, parse_ffprobe, run_ffprobe
from av1sweep.common.settings import get_settings
from av1sweep.domain.entities.probe import ProbeResult
from av1sweep.domain.ports.probe import MediaProbePort

logger = get_logger(__name__)


@dataclass(eq=False)
class FFprobeError(RuntimeError):
    """Adapter-level error for probe failures."""
    message: str
    stderr: Optional[str] = None
    rc: Optional[int] = None

    def __str__(self) -> str:
        return self.message


class FFprobeAdapter(MediaProbePort):
    """
    Infrastructure adapter implementing MediaProbePort using `ffprobe`
    for stream metadata and `os.stat` for the file size.
    """

    def __init__(self, ffprobe_bin: Optional[str] = None, timeout_sec: Optional[int] = None):
        cfg = get_settings()
        candidate = ffprobe_bin or cfg.ffprobe.bin
        if candidate == "ffprobe":
            # resolve absolute path for nicer errors
            resolved = shutil.which(candidate)
            if not resolved:
                raise FFprobeError("ffprobe not found on PATH; set FFPROBE__BIN or install ffmpeg.")
            candidate = resolved

        self.ffprobe_bin = candidate
        self.log_level = cfg.ffprobe.log_level
        self.timeout_sec = int(timeout_sec or cfg.ffprobe.timeout_sec)

    # ---- Port API -------------------------------------------------------------
    def probe(self, path: Path) -> ProbeResult:
        if not path:
            raise FFprobeError("No path provided to probe().")
        if not Path(path).is_file():
            raise FFprobeError(f"File not found: {path}")

        cmd = build_ffprobe_cmd(path, ffprobe_bin=self.ffprobe_bin, log_level=self.log_level)
        try:
            data = run_ffprobe(cmd, timeout_sec=self.timeout_sec)
        except subprocess.TimeoutExpired as e:
            raise FFprobeError(f"ffprobe timed out after {self.timeout_sec}s", stderr=str(e)) from e
        except subprocess.CalledProcessError as e:
            raise FFprobeError("ffprobe returned non-zero exit code", stderr=e.stderr, rc=e.returncode) from e
        except OSError as e:
            raise FFprobeError("Failed to execute ffprobe (OS error).", stderr=str(e)) from e
        except (RuntimeError, ValueError) as e:
            raise FFprobeError(f"Unreadable ffprobe output: {e}") from e

        fields = parse_ffprobe(data)
        return ProbeResult(size_bytes=_file_size(path), **fields)


def _file_size(path: Path) -> Optional[int]:
    try:
        size = os.stat(path).st_size
    except OSError as e:
        logger.debug("stat failed for %s: %s", path, e)
        return None
    return size or None
