# av1sweep/domain/enums/file_status.py
from __future__ import annotations

from enum import StrEnum


class FileStatus(StrEnum):
    """Terminal state of one file within a run."""
    metadata_skip = "metadata_skip"
    already_target = "already_target"
    skip = "skip"
    candidate = "candidate"  # dry run only
    reencoded = "reencoded"
    failed = "failed"
