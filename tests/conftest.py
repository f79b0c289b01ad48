# tests/conftest.py
from __future__ import annotations

from pathlib import Path

import pytest

from av1sweep.common.settings import get_settings

_ENV_VARS = (
    "LOG_LEVEL",
    "VIDEO_EXTS",
    "TEMP_SUFFIX",
    "BITRATE_MARGIN_PCT",
    "DRY_RUN",
    "FFPROBE__BIN",
    "FFPROBE__TIMEOUT_SEC",
    "FFMPEG__BIN",
    "FFMPEG__PRESET",
    "FFMPEG__VIDEO_ENCODER",
)


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch):
    """Every test starts from default settings, whatever the host env says."""
    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def touch(p: Path, data: bytes = b"dummy") -> Path:
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_bytes(data)
    return p


@pytest.fixture()
def make_file():
    return touch
