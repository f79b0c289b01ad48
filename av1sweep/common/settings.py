# av1sweep/common/settings.py
from __future__ import annotations

from functools import lru_cache
from typing import Annotated, List
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict
from av1sweep.common.strings.splitters import csv_to_list, normalize_exts


def _to_bool(v: str | bool | int | None, default: bool = False) -> bool:
    if isinstance(v, bool):
        return v
    if v is None:
        return default
    s = str(v).strip().lower()
    return s in {"1", "true", "yes", "y", "on"}


class FFProbeConfig(BaseModel):
    bin: str = "ffprobe"
    timeout_sec: int = Field(60, ge=1)
    log_level: str = "error"  # quiet|panic|fatal|error|warning|info|verbose|debug|trace


class FFmpegConfig(BaseModel):
    bin: str = "ffmpeg"
    video_encoder: str = "libsvtav1"
    preset: int = Field(6, ge=-1, le=13, description="SVT-AV1 speed preset")
    log_level: str = "error"

    # stderr lines starting with one of these are dropped before display
    noise_prefixes: List[str] = Field(default_factory=lambda: ["Svt[info]:", "SvtMalloc[info]:"])


class Settings(BaseSettings):
    # -------- App --------
    app_name: str = "av1sweep"
    log_level: str = "INFO"

    # -------- Scanning --------
    video_exts: Annotated[List[str], NoDecode] = Field(
        default_factory=lambda: ["mkv", "mp4", "mov", "avi", "ts", "m4v", "webm"]
    )

    # -------- Encoding --------
    temp_suffix: str = Field(".tmp", description="Suffix of the sibling file written during an encode")
    bitrate_margin_pct: int = Field(10, ge=0, le=1000, description="Tolerance above the recommended bitrate")
    dry_run: bool = False

    # -------- Sub-configs --------
    ffprobe: FFProbeConfig = FFProbeConfig()
    ffmpeg: FFmpegConfig = FFmpegConfig()

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("video_exts", mode="before")
    @classmethod
    def _split_exts(cls, v):
        return normalize_exts(csv_to_list(v))

    @field_validator("dry_run", mode="before")
    @classmethod
    def _boolify(cls, v):
        return _to_bool(v)

    @field_validator("temp_suffix")
    @classmethod
    def _dotted(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("temp_suffix must not be empty")
        return v if v.startswith(".") else f".{v}"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Global settings accessor (cached). Use this everywhere you need config:
        from av1sweep.common.settings import get_settings
        cfg = get_settings()
    """
    return Settings()  # pydantic_settings will read from .env automatically
