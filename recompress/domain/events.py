from typing import List, Optional
from pathlib import Path
from pydantic import BaseModel
from .models import JobResult, MediaDescriptor, ScalingPlan

class Event(BaseModel):
    """Base class for all domain events."""
    pass

class BatchStarted(Event):
    total_files: int

class BatchFinished(Event):
    results: List[JobResult]

class JobStarted(Event):
    source: Path
    index: int
    total: int

class JobProbed(Event):
    source: Path
    descriptor: MediaDescriptor

class EncodeStarted(Event):
    source: Path
    destination: Path
    frame_count: int = 0
    plan: Optional[ScalingPlan] = None

class JobProgressUpdated(Event):
    source: Path
    frame: int
    progress_percent: Optional[float] = None

class EncoderOutput(Event):
    source: Path
    line: str

class JobResultEvent(Event):
    result: JobResult

class JobSkipped(JobResultEvent):
    pass

class JobCompleted(JobResultEvent):
    pass

class JobFailed(JobResultEvent):
    pass
