# av1sweep/domain/policies/resolution.py
from __future__ import annotations

# 1920x1080
REF_PIXELS = 1920 * 1080

# (min height, label), checked top-down
_HEIGHT_LABELS = (
    (2160, "2160p"),
    (1440, "1440p"),
    (1080, "1080p"),
    (720, "720p"),
    (576, "576p"),
    (480, "480p"),
)


def resolution_ratio(pixels: int) -> int:
    """Integer pixel-count ratio against 1080p, in percent."""
    return pixels * 100 // REF_PIXELS


def resolution_label(height: int) -> str:
    for min_h, label in _HEIGHT_LABELS:
        if height >= min_h:
            return label
    return f"{height}p"
