from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol

from av1sweep.domain.dataclasses.decision import EncodeTarget


@dataclass(frozen=True)
class EncodeResult:
    ok: bool
    returncode: Optional[int] = None
    message: Optional[str] = None


class MediaEncoderPort(Protocol):
    # Replaces `path` in place on success; leaves it untouched on failure.
    def encode(self, path: Path, target: EncodeTarget) -> EncodeResult: ...
