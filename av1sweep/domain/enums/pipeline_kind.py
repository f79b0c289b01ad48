from __future__ import annotations
from enum import StrEnum

class PipelineKind(StrEnum):
    crf = "crf"           # constant quality, skip files already in AV1
    bitrate = "bitrate"   # bitrate audit, codec-agnostic
