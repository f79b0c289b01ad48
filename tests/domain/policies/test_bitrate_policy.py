from __future__ import annotations

import pytest

from av1sweep.domain.dataclasses.decision import BitrateTarget
from av1sweep.domain.enums import DecisionAction, MediaGenre
from av1sweep.domain.policies.bitrate import (
    MIN_RECOMMENDED_KBPS,
    baseline_kbps,
    decide_bitrate,
    estimate_video_kbps,
    recommended_kbps,
    threshold_kbps,
)

P1080 = 1920 * 1080


def test_baseline_by_genre():
    assert baseline_kbps(MediaGenre.anime) == 2500
    assert baseline_kbps(MediaGenre.movie) == 4000
    assert baseline_kbps(MediaGenre.cartoon) == 1700
    assert baseline_kbps("other") == 2500


def test_recommended_scales_with_pixels():
    assert recommended_kbps(MediaGenre.movie, P1080) == 4000
    assert recommended_kbps(MediaGenre.movie, 3840 * 2160) == 16000
    assert recommended_kbps(MediaGenre.anime, 1280 * 720) == 1111


def test_recommended_floor():
    # 2500 * 76800 / 2073600 = 92 -> floored to 500
    assert recommended_kbps(MediaGenre.anime, 320 * 240) == MIN_RECOMMENDED_KBPS == 500
    assert recommended_kbps(MediaGenre.cartoon, 0) == 500


@pytest.mark.parametrize("genre", list(MediaGenre))
def test_recommended_is_monotonic(genre):
    values = [recommended_kbps(genre, px) for px in range(0, 4 * P1080, 50_000)]
    assert all(a <= b for a, b in zip(values, values[1:]))


@pytest.mark.parametrize("reco, expected", [(500, 550), (505, 555), (1700, 1870), (1111, 1222), (9, 9)])
def test_threshold_truncates(reco, expected):
    assert threshold_kbps(reco) == expected


def test_threshold_custom_margin():
    assert threshold_kbps(1000, 0) == 1000
    assert threshold_kbps(1000, 25) == 1250
    assert threshold_kbps(505, 10) == 505 + 505 // 10


def test_scenario_cartoon_1080p_oversized():
    decision = decide_bitrate(MediaGenre.cartoon, P1080, 2000)
    assert decision.action is DecisionAction.reencode
    assert decision.target == BitrateTarget(1700)
    assert decision.target.ffmpeg_value == "1700k"


def test_at_threshold_is_skip():
    assert decide_bitrate(MediaGenre.cartoon, P1080, 1870).action is DecisionAction.skip
    assert decide_bitrate(MediaGenre.cartoon, P1080, 1871).action is DecisionAction.reencode


def test_margin_changes_decision():
    assert decide_bitrate(MediaGenre.cartoon, P1080, 2000, margin_pct=20).action is DecisionAction.skip


def test_estimate_video_kbps():
    # 10 MB over 10 s = 8000 kb/s total
    assert estimate_video_kbps(10_000_000, 10.0) == 8000
    assert estimate_video_kbps(10_000_000, 10.0, 256) == 7744
    assert estimate_video_kbps(10_000_000, 3.0) == 26666


def test_estimate_video_kbps_falls_back_to_total():
    assert estimate_video_kbps(10_000_000, 10.0, 0) == 8000
    assert estimate_video_kbps(10_000_000, 10.0, None) == 8000
    # audio larger than everything: subtraction would not be positive
    assert estimate_video_kbps(10_000_000, 10.0, 9000) == 8000
    assert estimate_video_kbps(10_000_000, 10.0, 8000) == 8000
