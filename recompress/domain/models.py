from enum import Enum
from pathlib import Path
from typing import Dict, FrozenSet, List, Optional
from pydantic import BaseModel, ConfigDict, Field
from recompress.domain.errors import InvalidTransition

TARGET_CODEC_MARKER = "hevc"

class JobStatus(str, Enum):
    SKIPPED = "SKIPPED"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"

class FileState(str, Enum):
    PENDING = "PENDING"
    PROBED = "PROBED"
    DECIDED = "DECIDED"
    SKIPPED = "SKIPPED"
    ENCODED = "ENCODED"
    FINALIZED = "FINALIZED"
    FAILED = "FAILED"

_TRANSITIONS: Dict[FileState, FrozenSet[FileState]] = {
    FileState.PENDING: frozenset({FileState.PROBED, FileState.SKIPPED, FileState.FAILED}),
    FileState.PROBED: frozenset({FileState.DECIDED, FileState.FAILED}),
    FileState.DECIDED: frozenset({FileState.SKIPPED, FileState.ENCODED, FileState.FAILED}),
    FileState.ENCODED: frozenset({FileState.FINALIZED, FileState.FAILED}),
    FileState.SKIPPED: frozenset(),
    FileState.FINALIZED: frozenset(),
    FileState.FAILED: frozenset(),
}

class MediaDescriptor(BaseModel):
    codec_name: str
    width: int = Field(gt=0)
    height: int = Field(gt=0)
    frame_count: int = Field(default=0, ge=0)

    @property
    def is_target_codec(self) -> bool:
        return TARGET_CODEC_MARKER in self.codec_name.lower()

class ScalingPlan(BaseModel):
    model_config = ConfigDict(frozen=True)

    required: bool
    width: int = Field(gt=0)
    height: int = Field(gt=0)

class DecisionAction(str, Enum):
    SKIP = "SKIP"
    ENCODE = "ENCODE"

class Decision(BaseModel):
    model_config = ConfigDict(frozen=True)

    action: DecisionAction
    plan: Optional[ScalingPlan] = None
    reason: Optional[str] = None

    @classmethod
    def skip(cls, reason: str) -> "Decision":
        return cls(action=DecisionAction.SKIP, reason=reason)

    @classmethod
    def encode(cls, plan: ScalingPlan) -> "Decision":
        return cls(action=DecisionAction.ENCODE, plan=plan)

    @property
    def should_encode(self) -> bool:
        return self.action == DecisionAction.ENCODE

class EncodeCommand(BaseModel):
    """A fully resolved ffmpeg invocation for one file."""
    model_config = ConfigDict(frozen=True)

    source: Path
    destination: Path
    scale_width: Optional[int] = None
    scale_height: Optional[int] = None
    codec: str = "libx265"
    codec_tag: str = "hvc1"
    pixel_format: str = "yuv420p10le"
    quality: int
    preset: str
    pools: int = Field(ge=1)
    frame_threads: int = Field(ge=1)
    # -map 0 selects every stream; everything that is not video is copied verbatim
    stream_maps: List[str] = Field(default_factory=lambda: ["0"])
    copy_codecs: List[str] = Field(default_factory=lambda: ["-c", "copy"])

    @property
    def scale_filter(self) -> Optional[str]:
        if self.scale_width is None or self.scale_height is None:
            return None
        return f"scale={self.scale_width}:{self.scale_height}"

    @property
    def x265_params(self) -> str:
        return f"pools={self.pools}:frame-threads={self.frame_threads}"

    def to_args(self, executable: str = "ffmpeg") -> List[str]:
        """Renders the command line arguments."""
        args = [
            executable,
            "-hide_banner",
            "-nostdin",
            "-loglevel", "warning",
            "-stats",
            "-i", str(self.source),
        ]

        if self.scale_filter:
            args.extend(["-vf", self.scale_filter])

        for stream in self.stream_maps:
            args.extend(["-map", stream])
        args.extend([
            "-map_metadata", "0",
            "-map_chapters", "0",
        ])
        args.extend(self.copy_codecs)

        args.extend([
            "-c:v", self.codec,
            "-crf", str(self.quality),
            "-preset", self.preset,
            "-pix_fmt", self.pixel_format,
            "-tag:v", self.codec_tag,
            "-x265-params", self.x265_params,
        ])

        args.extend(["-y", str(self.destination)])
        return args

class JobResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    source: Path
    status: JobStatus
    output_path: Optional[Path] = None
    reason: Optional[str] = None
    # Skips the user should look at (unreadable or non-video input)
    warning: bool = False

    @classmethod
    def skipped(cls, source: Path, reason: str, warning: bool = False) -> "JobResult":
        return cls(source=source, status=JobStatus.SKIPPED, reason=reason, warning=warning)

    @classmethod
    def succeeded(cls, source: Path, output_path: Path) -> "JobResult":
        return cls(source=source, status=JobStatus.SUCCEEDED, output_path=output_path)

    @classmethod
    def failed(cls, source: Path, reason: str) -> "JobResult":
        return cls(source=source, status=JobStatus.FAILED, reason=reason)

class FileJob(BaseModel):
    """Tracks one input file through the pipeline."""
    path: Path
    state: FileState = FileState.PENDING
    descriptor: Optional[MediaDescriptor] = None
    decision: Optional[Decision] = None

    @property
    def is_terminal(self) -> bool:
        return not _TRANSITIONS[self.state]

    def advance(self, new_state: FileState):
        if new_state not in _TRANSITIONS[self.state]:
            raise InvalidTransition(f"{self.path.name}: cannot move from {self.state.value} to {new_state.value}")
        self.state = new_state
