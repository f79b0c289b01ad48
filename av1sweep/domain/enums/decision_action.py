from __future__ import annotations
from enum import StrEnum

class DecisionAction(StrEnum):
    already_target = "already_target"
    skip = "skip"
    reencode = "reencode"
