# av1sweep/services/encode/ffmpeg_adapter.py
from __future__ import annotations

import shlex
import shutil
import subprocess
import sys
from pathlib import Path
from typing import Iterable, Optional, TextIO

from av1sweep.common.encode.ffmpeg_helpers import (
    build_encode_cmd,
    guess_container_format,
    is_noise_line,
    iter_stderr_segments,
    temp_output_path,
)
from av1sweep.common.logging import get_logger
from av1sweep.common.settings import get_settings
from av1sweep.domain.dataclasses.decision import EncodeTarget
from av1sweep.domain.ports.encoder import EncodeResult, MediaEncoderPort
from av1sweep.services.filesystem.local_file_ops import LocalFileOps

logger = get_logger(__name__)


class FFmpegError(RuntimeError):
    """Raised when the ffmpeg binary cannot be located."""


class FFmpegEncoder(MediaEncoderPort):
    """
    Infrastructure adapter implementing MediaEncoderPort with `ffmpeg`.

    The encode goes to a sibling temp file; the original is replaced only
    when ffmpeg exits 0. Encoder failures are reported through EncodeResult,
    never raised.
    """

    def __init__(
        self,
        ffmpeg_bin: Optional[str] = None,
        *,
        video_encoder: Optional[str] = None,
        preset: Optional[int] = None,
        temp_suffix: Optional[str] = None,
        noise_prefixes: Optional[Iterable[str]] = None,
        file_ops: Optional[LocalFileOps] = None,
        diag_stream: Optional[TextIO] = None,
    ):
        cfg = get_settings()
        candidate = ffmpeg_bin or cfg.ffmpeg.bin
        if candidate == "ffmpeg":
            resolved = shutil.which(candidate)
            if not resolved:
                raise FFmpegError("ffmpeg not found on PATH; set FFMPEG__BIN or install ffmpeg.")
            candidate = resolved

        self.ffmpeg_bin = candidate
        self.video_encoder = video_encoder or cfg.ffmpeg.video_encoder
        self.preset = cfg.ffmpeg.preset if preset is None else int(preset)
        self.log_level = cfg.ffmpeg.log_level
        self.temp_suffix = temp_suffix or cfg.temp_suffix
        self.noise_prefixes = tuple(cfg.ffmpeg.noise_prefixes if noise_prefixes is None else noise_prefixes)
        self.files = file_ops or LocalFileOps()
        self._diag = diag_stream

    # ---- Port API -------------------------------------------------------------
    def encode(self, path: Path, target: EncodeTarget) -> EncodeResult:
        src = Path(path)
        tmp = temp_output_path(src, self.temp_suffix)
        cmd = build_encode_cmd(
            src,
            tmp,
            target,
            ffmpeg_bin=self.ffmpeg_bin,
            video_encoder=self.video_encoder,
            preset=self.preset,
            log_level=self.log_level,
            container_format=guess_container_format(src),
        )
        logger.debug("ffmpeg cmd: %s", " ".join(shlex.quote(c) for c in cmd))

        try:
            proc = self._start(cmd)
        except OSError as e:
            self.files.remove_quietly(tmp)
            return EncodeResult(ok=False, message=f"failed to launch ffmpeg: {e}")

        try:
            rc = self._forward_and_wait(proc)
        except Exception as e:
            self.files.remove_quietly(tmp)
            return EncodeResult(ok=False, message=f"ffmpeg aborted while forwarding its output: {e}")
        except BaseException:
            self.files.remove_quietly(tmp)
            raise

        if rc != 0:
            self.files.remove_quietly(tmp)
            return EncodeResult(ok=False, returncode=rc, message=f"ffmpeg exited with status {rc}")

        try:
            self.files.replace_file(tmp, src)
        except OSError as e:
            self.files.remove_quietly(tmp)
            return EncodeResult(ok=False, returncode=rc, message=f"could not replace original: {e}")
        return EncodeResult(ok=True, returncode=rc)

    # ---- internals ------------------------------------------------------------
    @staticmethod
    def _start(cmd: list[str]) -> subprocess.Popen:
        return subprocess.Popen(
            cmd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.PIPE,
        )

    def _forward_and_wait(self, proc: subprocess.Popen) -> int:
        """
        Forward ffmpeg stderr minus the known-benign encoder chatter, then reap
        the process. If forwarding fails the process is killed before re-raising.
        """
        diag = self._diag or sys.stderr
        assert proc.stderr is not None
        try:
            for segment in iter_stderr_segments(proc.stderr):
                if is_noise_line(segment, self.noise_prefixes):
                    continue
                diag.write(segment)
                diag.flush()
        except BaseException:
            proc.kill()
            proc.wait()
            raise
        finally:
            proc.stderr.close()
        return proc.wait()
