# av1sweep/common/encode/ffmpeg_helpers.py
from __future__ import annotations

import re
from pathlib import Path
from typing import BinaryIO, Iterable, Iterator, List, Optional

from av1sweep.domain.dataclasses.decision import BitrateTarget, CrfTarget, EncodeTarget

# original extension -> ffmpeg muxer name
CONTAINER_FORMATS = {
    "mkv": "matroska",
    "mp4": "mp4",
    "m4v": "mp4",
    "mov": "mp4",
    "webm": "webm",
    "ts": "mpegts",
    "avi": "avi",
}

DEFAULT_NOISE_PREFIXES = ("Svt[info]:", "SvtMalloc[info]:")

# one stderr segment, terminator included; -stats redraws its line with a bare \r
_SEGMENT = re.compile(rb"[^\r\n]*(?:\r\n|\r|\n)")


def guess_container_format(path: str | Path) -> Optional[str]:
    """Muxer hint from the extension; None lets ffmpeg guess (or fail)."""
    ext = Path(path).suffix.lstrip(".").lower()
    return CONTAINER_FORMATS.get(ext)


def temp_output_path(path: str | Path, suffix: str = ".tmp") -> Path:
    """Sibling path media servers ignore while the encode is running."""
    p = Path(path)
    return p.with_name(p.name + suffix)


def _head(ffmpeg_bin: str, log_level: str, src: Path) -> List[str]:
    return [
        ffmpeg_bin,
        "-hide_banner",
        "-loglevel", log_level,
        "-stats",
        "-nostdin",
        "-y",
        "-i", str(src),
        "-map", "0",
    ]


def _tail(preset: int, container_format: Optional[str], dst: Path) -> List[str]:
    out = ["-preset", str(preset)]
    if container_format:
        out += ["-f", container_format]
    out.append(str(dst))
    return out


def build_crf_cmd(
    src: str | Path,
    dst: str | Path,
    crf: int,
    *,
    ffmpeg_bin: str = "ffmpeg",
    video_encoder: str = "libsvtav1",
    preset: int = 6,
    log_level: str = "error",
    container_format: Optional[str] = None,
) -> List[str]:
    """
    Constant quality: re-encode video stream 0, copy audio and subtitles,
    regenerate presentation timestamps.
    """
    src, dst = Path(src), Path(dst)
    return (
        _head(ffmpeg_bin, log_level, src)
        + [
            "-c:v:0", video_encoder,
            "-c:a", "copy",
            "-c:s", "copy",
            "-fflags", "+genpts",
            "-crf:v:0", str(crf),
        ]
        + _tail(preset, container_format, dst)
    )


def build_bitrate_cmd(
    src: str | Path,
    dst: str | Path,
    kbps: int,
    *,
    ffmpeg_bin: str = "ffmpeg",
    video_encoder: str = "libsvtav1",
    preset: int = 6,
    log_level: str = "error",
    container_format: Optional[str] = None,
) -> List[str]:
    """Bitrate target: copy everything, override only video stream 0."""
    src, dst = Path(src), Path(dst)
    return (
        _head(ffmpeg_bin, log_level, src)
        + [
            "-c", "copy",
            "-c:v:0", video_encoder,
            "-b:v:0", BitrateTarget(kbps).ffmpeg_value,
        ]
        + _tail(preset, container_format, dst)
    )


def build_encode_cmd(src: str | Path, dst: str | Path, target: EncodeTarget, **kwargs) -> List[str]:
    if isinstance(target, CrfTarget):
        return build_crf_cmd(src, dst, target.crf, **kwargs)
    if isinstance(target, BitrateTarget):
        return build_bitrate_cmd(src, dst, target.kbps, **kwargs)
    raise TypeError(f"Unsupported encode target: {target!r}")


def is_noise_line(line: str, prefixes: Iterable[str] = DEFAULT_NOISE_PREFIXES) -> bool:
    return line.lstrip().startswith(tuple(prefixes))


def iter_stderr_segments(stream: BinaryIO, chunk_size: int = 4096) -> Iterator[str]:
    """
    Yield ffmpeg stderr as it arrives, one line or carriage-return redraw at a
    time, terminator included so progress updates stay on one terminal line.
    """
    read = getattr(stream, "read1", stream.read)
    buf = b""
    while True:
        chunk = read(chunk_size)
        if not chunk:
            break
        buf += chunk
        end = 0
        for m in _SEGMENT.finditer(buf):
            yield m.group().decode("utf-8", errors="replace")
            end = m.end()
        buf = buf[end:]
    if buf:
        yield buf.decode("utf-8", errors="replace")
