# av1sweep/domain/policies/crf.py
from __future__ import annotations

from typing import Dict

from av1sweep.domain.dataclasses.decision import CrfTarget, EncodeDecision
from av1sweep.domain.enums import MediaGenre
from av1sweep.domain.policies.resolution import resolution_ratio

BASE_CRF: Dict[str, int] = {
    MediaGenre.anime: 31,
    MediaGenre.cartoon: 32,
    MediaGenre.movie: 26,
}
DEFAULT_BASE_CRF = 26

CRF_MIN = 18
CRF_MAX = 40

# (ratio upper bound inclusive, CRF delta); first match wins, anything above gets +2
_RATIO_BUCKETS = (
    (50, -2),
    (80, -1),
    (130, 0),
    (200, +1),
)
_ABOVE_BUCKETS_DELTA = +2

TARGET_CODECS = frozenset({"av1", "av01"})


def base_crf(genre: MediaGenre | str) -> int:
    return BASE_CRF.get(genre, DEFAULT_BASE_CRF)


def adjust_crf(base: int, pixels: int) -> int:
    """
    Shift the base CRF by resolution bucket around 1080p:
      <= 50%  SD and small sources      -> -2
      <= 80%  around 720p               -> -1
      <= 130% around 1080p              ->  0
      <= 200% 1440p / ultrawide         -> +1
      above   4K and beyond             -> +2
    then clamp to [CRF_MIN, CRF_MAX].
    """
    ratio = resolution_ratio(pixels)
    delta = _ABOVE_BUCKETS_DELTA
    for upper, d in _RATIO_BUCKETS:
        if ratio <= upper:
            delta = d
            break
    return max(CRF_MIN, min(CRF_MAX, base + delta))


def choose_crf(genre: MediaGenre | str, pixels: int) -> int:
    return adjust_crf(base_crf(genre), pixels)


def is_target_codec(codec: str | None) -> bool:
    return (codec or "") in TARGET_CODECS


def decide_crf(genre: MediaGenre | str, pixels: int, codec: str | None) -> EncodeDecision:
    if is_target_codec(codec):
        return EncodeDecision.already_target()
    return EncodeDecision.reencode(CrfTarget(choose_crf(genre, pixels)))
