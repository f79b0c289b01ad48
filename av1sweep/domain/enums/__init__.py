from av1sweep.domain.enums.decision_action import DecisionAction
from av1sweep.domain.enums.file_status import FileStatus
from av1sweep.domain.enums.media_genre import MediaGenre
from av1sweep.domain.enums.pipeline_kind import PipelineKind
__all__ = [
    "DecisionAction",
    "FileStatus",
    "MediaGenre",
    "PipelineKind",
]
