# av1sweep/domain/entities/probe.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from av1sweep.domain.policies.bitrate import estimate_video_kbps


@dataclass(frozen=True)
class ProbeResult:
    """
    Normalized, framework-free result of a media probe (ffprobe + stat).
    Anything the prober could not determine is None.
    """
    width: Optional[int] = None
    height: Optional[int] = None
    codec: Optional[str] = None
    duration_sec: Optional[float] = None
    size_bytes: Optional[int] = None
    audio_kbps: Optional[int] = None

    @property
    def pixels(self) -> int:
        if not self.width or not self.height:
            return 0
        return self.width * self.height

    @property
    def has_video_metadata(self) -> bool:
        """Dimensions and codec are known; required by both pipelines."""
        return bool(self.width and self.height and self.codec)

    @property
    def has_bitrate_metadata(self) -> bool:
        return bool(self.duration_sec and self.duration_sec > 0 and self.size_bytes and self.size_bytes > 0)

    @property
    def video_kbps(self) -> Optional[int]:
        if not self.has_bitrate_metadata:
            return None
        return estimate_video_kbps(self.size_bytes, self.duration_sec, self.audio_kbps)
