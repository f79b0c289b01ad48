# av1sweep/common/strings/codec.py
from __future__ import annotations

import re
from typing import Optional

_ws_re = re.compile(r"\s+")


def normalize_codec(raw: Optional[str]) -> Optional[str]:
    """
    Normalize a codec identifier as reported by ffprobe:
    keep everything before the first comma, drop whitespace and CRs, lowercase.
    Returns None when nothing is left.
    """
    if raw is None:
        return None
    s = str(raw).split(",", 1)[0]
    s = _ws_re.sub("", s.replace("\r", "")).lower()
    return s or None
