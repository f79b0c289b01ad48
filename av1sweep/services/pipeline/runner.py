# av1sweep/services/pipeline/runner.py
from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional

from av1sweep.common.logging import get_logger
from av1sweep.common.settings import get_settings
from av1sweep.domain.dataclasses.decision import EncodeDecision
from av1sweep.domain.dataclasses.reports import FileOutcome, RunSummary
from av1sweep.domain.entities.probe import ProbeResult
from av1sweep.domain.enums import FileStatus, MediaGenre, PipelineKind
from av1sweep.domain.policies.bitrate import decide_bitrate, recommended_kbps, threshold_kbps
from av1sweep.domain.policies.crf import base_crf, decide_crf
from av1sweep.domain.policies.resolution import resolution_label
from av1sweep.domain.ports.encoder import MediaEncoderPort
from av1sweep.domain.ports.probe import MediaProbePort
from av1sweep.services.filesystem.scanner import iter_video_files
from av1sweep.services.probe.ffprobe_adapter import FFprobeError

logger = get_logger(__name__)

_RULE = "-" * 40


class SweepRunner:
    """
    Sequential scan -> probe -> decide -> encode loop.

    One file is finished before the next is looked at. Nothing raised while
    handling a single file stops the run; it becomes a `failed` outcome.
    """

    def __init__(
        self,
        *,
        genre: MediaGenre,
        kind: PipelineKind,
        prober: MediaProbePort,
        encoder: Optional[MediaEncoderPort],
        extensions: Optional[Iterable[str]] = None,
        margin_pct: Optional[int] = None,
        dry_run: bool = False,
    ):
        cfg = get_settings()
        self.genre = MediaGenre(genre)
        self.kind = PipelineKind(kind)
        self.prober = prober
        self.encoder = encoder
        self.extensions = list(extensions) if extensions is not None else list(cfg.video_exts)
        self.margin_pct = cfg.bitrate_margin_pct if margin_pct is None else int(margin_pct)
        self.dry_run = bool(dry_run)
        if self.encoder is None and not self.dry_run:
            raise ValueError("an encoder is required unless dry_run is set")

    # --- main ---------------------------------------------------------------

    def run(self, root: Path | str) -> RunSummary:
        summary = RunSummary()
        summary.start()
        root = Path(root)
        if not root.is_dir():
            logger.warning("Root folder does not exist or is not a directory: %s", root)

        for path in iter_video_files(root, self.extensions):
            try:
                outcome = self.process_one(path)
            except Exception as e:
                logger.exception("Unexpected error while processing %s", path)
                outcome = FileOutcome(path=path, status=FileStatus.failed, message=str(e) or type(e).__name__)
            summary.record(outcome)

        summary.stop()
        return summary

    def process_one(self, path: Path) -> FileOutcome:
        try:
            probe = self.prober.probe(path)
        except FFprobeError as e:
            logger.warning("[SKIP] Probe failed (%s): %s", e, path)
            return FileOutcome(path=path, status=FileStatus.metadata_skip, message=str(e))

        if not probe.has_video_metadata:
            logger.warning("[SKIP] Missing metadata (dims/codec): %s", path)
            return FileOutcome(path=path, status=FileStatus.metadata_skip, probe=probe,
                               message="missing dimensions or codec")

        if self.kind is PipelineKind.crf:
            return self._process_crf(path, probe)
        return self._process_bitrate(path, probe)

    # --- pipelines ----------------------------------------------------------

    def _process_crf(self, path: Path, probe: ProbeResult) -> FileOutcome:
        self._log_header(path, probe)
        decision = decide_crf(self.genre, probe.pixels, probe.codec)

        if not decision.should_encode:
            logger.info("-> Status    : ALREADY AV1 (skipping)")
            return FileOutcome(path=path, status=FileStatus.already_target, probe=probe, decision=decision)

        logger.info("-> Status    : RE-ENCODE to AV1 at %s", decision.target.describe())
        logger.info("   Base CRF  : %s", base_crf(self.genre))
        logger.info("   Final CRF : %s", decision.target.crf)
        return self._encode(path, probe, decision)

    def _process_bitrate(self, path: Path, probe: ProbeResult) -> FileOutcome:
        if not probe.has_bitrate_metadata:
            logger.warning("[SKIP] Missing metadata (duration/size): %s", path)
            return FileOutcome(path=path, status=FileStatus.metadata_skip, probe=probe,
                               message="missing duration or size")

        self._log_header(path, probe)
        observed = probe.video_kbps
        reco = recommended_kbps(self.genre, probe.pixels)
        threshold = threshold_kbps(reco, self.margin_pct)
        logger.info("Bitrate    : %s kb/s observed, %s kb/s recommended (threshold %s kb/s)",
                    observed, reco, threshold)

        decision = decide_bitrate(self.genre, probe.pixels, observed, self.margin_pct)
        if not decision.should_encode:
            logger.info("-> Status    : OK (within bitrate budget)")
            return FileOutcome(path=path, status=FileStatus.skip, probe=probe, decision=decision,
                               observed_kbps=observed, recommended_kbps=reco)

        logger.info("-> Status    : RE-ENCODE to AV1 at %s", decision.target.describe())
        return self._encode(path, probe, decision, observed_kbps=observed, recommended_kbps=reco)

    def _encode(
        self,
        path: Path,
        probe: ProbeResult,
        decision: EncodeDecision,
        *,
        observed_kbps: Optional[int] = None,
        recommended_kbps: Optional[int] = None,
    ) -> FileOutcome:
        common = dict(path=path, probe=probe, decision=decision,
                      observed_kbps=observed_kbps, recommended_kbps=recommended_kbps)

        if self.dry_run:
            logger.info("   Dry run, not encoding.")
            return FileOutcome(status=FileStatus.candidate, **common)

        result = self.encoder.encode(path, decision.target)
        if result.ok:
            logger.info("   Encoding complete, original file replaced.")
            return FileOutcome(status=FileStatus.reencoded, **common)

        logger.error("   Encoding failed, original file kept (%s): %s", result.message, path)
        return FileOutcome(status=FileStatus.failed, message=result.message, **common)

    # --- helpers ------------------------------------------------------------

    @staticmethod
    def _log_header(path: Path, probe: ProbeResult) -> None:
        logger.info(_RULE)
        logger.info("File       : %s", path)
        logger.info("Resolution : %sx%s (%s pixels) -> %s",
                    probe.width, probe.height, probe.pixels, resolution_label(probe.height))
        logger.info("Codec      : %s", probe.codec)
