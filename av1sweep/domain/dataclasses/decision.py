from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from av1sweep.domain.enums import DecisionAction


@dataclass(frozen=True)
class CrfTarget:
    crf: int

    def describe(self) -> str:
        return f"CRF {self.crf}"


@dataclass(frozen=True)
class BitrateTarget:
    kbps: int

    @property
    def ffmpeg_value(self) -> str:
        return f"{self.kbps}k"

    def describe(self) -> str:
        return f"{self.kbps} kb/s"


EncodeTarget = Union[CrfTarget, BitrateTarget]


@dataclass(frozen=True)
class EncodeDecision:
    """
    Outcome of a parameter policy for one file.
    `target` is set only when action is reencode.
    """
    action: DecisionAction
    target: Optional[EncodeTarget] = None

    @classmethod
    def already_target(cls) -> "EncodeDecision":
        return cls(DecisionAction.already_target)

    @classmethod
    def skip(cls) -> "EncodeDecision":
        return cls(DecisionAction.skip)

    @classmethod
    def reencode(cls, target: EncodeTarget) -> "EncodeDecision":
        return cls(DecisionAction.reencode, target)

    @property
    def should_encode(self) -> bool:
        return self.action is DecisionAction.reencode
