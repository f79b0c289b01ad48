# av1sweep/common/probe/ffprobe_helpers.py
from __future__ import annotations
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional
import json
import shlex
import subprocess

from av1sweep.common.logging import get_logger
from av1sweep.common.strings.codec import normalize_codec
logger = get_logger(__name__)

# ffprobe placeholders that mean "unknown" rather than a value
_UNKNOWN = {"", "n/a", "nan"}


def build_ffprobe_cmd(
    input_path: str | Path,
    *,
    ffprobe_bin: str = "ffprobe",
    log_level: str = "error",
    extra_args: Iterable[str] | None = None,
) -> List[str]:
    """
    Build an ffprobe command that emits JSON for format + all streams.
    """
    if isinstance(input_path, Path):
        input_path = str(input_path)
    base = [
        ffprobe_bin,
        "-v", log_level,
        "-show_streams",
        "-show_format",
        "-print_format", "json",
    ]
    if extra_args:
        base += list(extra_args)
    # Stop option parsing in case of weird filenames
    return base + ["--", input_path]


def run_ffprobe(cmd: List[str], timeout_sec: Optional[int] = None) -> Dict[str, Any]:
    """
    Execute ffprobe and return parsed JSON. Raises CalledProcessError on failure,
    TimeoutExpired on timeout and RuntimeError on unparsable output.
    """
    logger.debug("ffprobe cmd: %s", " ".join(shlex.quote(p) for p in cmd))
    # file names and tags are copied byte-for-byte and need not be UTF-8
    cp = subprocess.run(cmd, capture_output=True, text=True, errors="replace", check=True, timeout=timeout_sec)
    try:
        data = json.loads(cp.stdout or "{}")
    except json.JSONDecodeError as e:
        raise RuntimeError("ffprobe produced invalid JSON") from e
    if not isinstance(data, dict):
        raise RuntimeError("ffprobe produced unexpected JSON")
    return data


def parse_positive_int(x: Any) -> Optional[int]:
    try:
        v = int(float(x))
    except (TypeError, ValueError, OverflowError):
        return None
    return v if v > 0 else None


def parse_duration(x: Any) -> Optional[float]:
    """Container duration in seconds; "0", "N/A", empty or missing are None."""
    if x is None or str(x).strip().lower() in _UNKNOWN:
        return None
    try:
        v = float(x)
    except (TypeError, ValueError):
        return None
    return v if v > 0 else None


def first_video_stream(streams: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    return next((s for s in streams if s.get("codec_type") == "video"), None)


def sum_audio_kbps(streams: List[Dict[str, Any]]) -> Optional[int]:
    """
    Sum of bit_rate over audio streams that report one, in kb/s.
    None when no audio stream reports a bitrate.
    """
    rates = [
        parse_positive_int(s.get("bit_rate"))
        for s in streams
        if s.get("codec_type") == "audio"
    ]
    rates = [r for r in rates if r is not None]
    if not rates:
        return None
    return sum(rates) // 1000


def parse_ffprobe(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Extract the fields the policies need from ffprobe JSON.
    Safe to call in unit tests with fixture JSON.
    """
    fmt = (data or {}).get("format", {}) or {}
    streams = (data or {}).get("streams", []) or []

    v_stream = first_video_stream(streams) or {}
    width = parse_positive_int(v_stream.get("width"))
    height = parse_positive_int(v_stream.get("height"))
    if width is None or height is None:
        # width and height are only usable together
        width = height = None

    return {
        "width": width,
        "height": height,
        "codec": normalize_codec(v_stream.get("codec_name")),
        "duration_sec": parse_duration(fmt.get("duration")),
        "audio_kbps": sum_audio_kbps(streams),
    }
