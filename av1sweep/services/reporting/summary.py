# av1sweep/services/reporting/summary.py
from __future__ import annotations

from typing import List

from av1sweep.domain.dataclasses.reports import RunSummary
from av1sweep.domain.enums import PipelineKind

TITLES = {
    PipelineKind.crf: "AV1 / CRF re-encoding",
    PipelineKind.bitrate: "AV1 / bitrate audit",
}


def _row(label: str, value: object) -> str:
    return f"{label:<33}: {value}"


def render_summary(summary: RunSummary, kind: PipelineKind, *, dry_run: bool = False) -> List[str]:
    """Human-readable end-of-run lines."""
    lines = ["=============== SUMMARY ==============="]
    if summary.found == 0:
        lines.append("No video files found.")
        return lines

    lines.append(_row("Videos analyzed", summary.total_analyzed))
    lines.append(_row("Files skipped (missing metadata)", summary.skipped_metadata))

    if kind is PipelineKind.crf:
        lines.append(_row("Already AV1 (skipped)", summary.already_target))
    else:
        lines.append(_row("Within bitrate budget (skipped)", summary.within_budget))
        if summary.avg_observed_kbps is not None:
            lines.append(_row("Average observed bitrate", f"{summary.avg_observed_kbps} kb/s"))
            lines.append(_row("Average recommended bitrate", f"{summary.avg_recommended_kbps} kb/s"))

    lines.append(_row("Re-encode candidates", summary.candidates))
    if dry_run:
        lines.append("Dry run: no file was modified.")
    else:
        lines.append(_row("Files re-encoded to AV1", summary.reencoded))
        lines.append(_row("Failed encodes (original kept)", summary.failed))
    return lines
