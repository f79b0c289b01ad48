# av1sweep/domain/dataclasses/reports.py
from __future__ import annotations

from dataclasses import dataclass, field, asdict
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from av1sweep.domain.dataclasses.decision import EncodeDecision
from av1sweep.domain.entities.probe import ProbeResult
from av1sweep.domain.enums import FileStatus


# ---------------------------------------------------------------------------
# Base report (shared fields + utilities)
# ---------------------------------------------------------------------------
@dataclass
class BaseReport:
    """Common report base:
    - timing: started_at / finished_at
    - error capture: error_details
    - helpers: start(), stop(), add_error(), as_dict()
    """
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    # Each tuple is (path, message)
    error_details: List[Tuple[str, str]] = field(default_factory=list)

    def start(self) -> None:
        if self.started_at is None:
            self.started_at = datetime.now()

    def stop(self) -> None:
        self.finished_at = datetime.now()

    def add_error(self, subject: str, message: str) -> None:
        self.error_details.append((subject, message))

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


# ---------------------------------------------------------------------------
# Per-file outcome
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class FileOutcome:
    path: Path
    status: FileStatus
    probe: Optional[ProbeResult] = None
    decision: Optional[EncodeDecision] = None
    observed_kbps: Optional[int] = None
    recommended_kbps: Optional[int] = None
    message: Optional[str] = None


# ---------------------------------------------------------------------------
# Run summary
# ---------------------------------------------------------------------------
@dataclass
class RunSummary(BaseReport):
    found: int = 0             # files yielded by the scanner
    total_analyzed: int = 0    # files with usable metadata
    skipped_metadata: int = 0
    already_target: int = 0    # crf pipeline: already AV1
    within_budget: int = 0     # bitrate pipeline: observed <= threshold
    candidates: int = 0
    reencoded: int = 0
    failed: int = 0

    # bitrate pipeline only, summed over files that reported both rates
    observed_kbps_sum: int = 0
    recommended_kbps_sum: int = 0
    bitrate_samples: int = 0

    outcomes: List[FileOutcome] = field(default_factory=list)

    def record(self, outcome: FileOutcome) -> None:
        self.outcomes.append(outcome)
        self.found += 1

        if outcome.status is FileStatus.metadata_skip:
            self.skipped_metadata += 1
            return

        self.total_analyzed += 1
        if outcome.observed_kbps is not None and outcome.recommended_kbps is not None:
            self.observed_kbps_sum += outcome.observed_kbps
            self.recommended_kbps_sum += outcome.recommended_kbps
            self.bitrate_samples += 1

        if outcome.status is FileStatus.already_target:
            self.already_target += 1
        elif outcome.status is FileStatus.skip:
            self.within_budget += 1
        else:
            # candidate, reencoded and failed all went through the encode decision
            self.candidates += 1
            if outcome.status is FileStatus.reencoded:
                self.reencoded += 1
            elif outcome.status is FileStatus.failed:
                self.failed += 1
                self.add_error(str(outcome.path), outcome.message or "encode failed")

    @property
    def avg_observed_kbps(self) -> Optional[int]:
        if not self.bitrate_samples:
            return None
        return self.observed_kbps_sum // self.bitrate_samples

    @property
    def avg_recommended_kbps(self) -> Optional[int]:
        if not self.bitrate_samples:
            return None
        return self.recommended_kbps_sum // self.bitrate_samples
