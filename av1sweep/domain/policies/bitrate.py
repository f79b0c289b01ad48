# av1sweep/domain/policies/bitrate.py
from __future__ import annotations

from typing import Dict, Optional

from av1sweep.domain.dataclasses.decision import BitrateTarget, EncodeDecision
from av1sweep.domain.enums import MediaGenre
from av1sweep.domain.policies.resolution import REF_PIXELS

# kb/s for a 1080p source
BASELINE_KBPS_1080: Dict[str, int] = {
    MediaGenre.anime: 2500,
    MediaGenre.movie: 4000,
    MediaGenre.cartoon: 1700,
}
DEFAULT_BASELINE_KBPS = 2500

MIN_RECOMMENDED_KBPS = 500
DEFAULT_MARGIN_PCT = 10


def baseline_kbps(genre: MediaGenre | str) -> int:
    return BASELINE_KBPS_1080.get(genre, DEFAULT_BASELINE_KBPS)


def recommended_kbps(genre: MediaGenre | str, pixels: int) -> int:
    """Baseline scaled linearly by pixel count, never below MIN_RECOMMENDED_KBPS."""
    reco = baseline_kbps(genre) * pixels // REF_PIXELS
    return max(MIN_RECOMMENDED_KBPS, reco)


def threshold_kbps(reco: int, margin_pct: int = DEFAULT_MARGIN_PCT) -> int:
    # integer truncation: 505 @ 10% -> 555
    return reco + reco * margin_pct // 100


def estimate_video_kbps(size_bytes: int, duration_sec: float, audio_kbps: Optional[int] = None) -> int:
    """
    Whole-file bitrate from size and duration, minus the audio streams
    when that leaves something positive.
    """
    total = int(size_bytes * 8 / 1000 / duration_sec)
    if audio_kbps and audio_kbps > 0:
        video = total - audio_kbps
        if video > 0:
            return video
    return total


def decide_bitrate(
    genre: MediaGenre | str,
    pixels: int,
    observed_kbps: int,
    margin_pct: int = DEFAULT_MARGIN_PCT,
) -> EncodeDecision:
    # codec is not considered: an oversized AV1 file is still a candidate
    reco = recommended_kbps(genre, pixels)
    if observed_kbps > threshold_kbps(reco, margin_pct):
        return EncodeDecision.reencode(BitrateTarget(reco))
    return EncodeDecision.skip()
