import logging
from pathlib import Path
from typing import Iterable, List
from recompress.config.models import JobConfiguration
from recompress.domain.errors import NotAVideo, ProbeFailure, RecompressError
from recompress.domain.events import (
    BatchStarted, BatchFinished, EncodeStarted, JobStarted, JobProbed,
    JobSkipped, JobCompleted, JobFailed
)
from recompress.domain.models import FileJob, FileState, JobResult, JobStatus
from recompress.infrastructure.event_bus import EventBus
from recompress.infrastructure.ffmpeg import FFmpegAdapter
from recompress.infrastructure.ffprobe import FFprobeAdapter
from recompress.infrastructure.housekeeping import HousekeepingService
from recompress.pipeline.decision import decide
from recompress.pipeline.invocation import build_encode_command

class Orchestrator:
    """Processes input files one at a time, in the order given."""

    def __init__(
        self,
        config: JobConfiguration,
        event_bus: EventBus,
        ffprobe_adapter: FFprobeAdapter,
        ffmpeg_adapter: FFmpegAdapter,
        housekeeping: HousekeepingService
    ):
        self.config = config
        self.event_bus = event_bus
        self.ffprobe_adapter = ffprobe_adapter
        self.ffmpeg_adapter = ffmpeg_adapter
        self.housekeeping = housekeeping
        self.logger = logging.getLogger(__name__)

    def _encode(self, job: FileJob) -> JobResult:
        plan = job.decision.plan
        staging = self.housekeeping.staging_path(job.path)
        self.housekeeping.prepare()

        command = build_encode_command(self.config, job.path, staging, plan)
        self.event_bus.publish(EncodeStarted(
            source=job.path,
            destination=self.housekeeping.final_path(job.path),
            frame_count=job.descriptor.frame_count,
            plan=plan
        ))

        result = self.ffmpeg_adapter.encode(command, frame_count=job.descriptor.frame_count)
        if result.status != JobStatus.SUCCEEDED:
            job.advance(FileState.FAILED)
            return result

        job.advance(FileState.ENCODED)
        try:
            result = self.housekeeping.finalize(result)
        except OSError:
            self.housekeeping.discard(staging)
            raise
        job.advance(FileState.FINALIZED)
        return result

    def process_file(self, path: Path) -> JobResult:
        """Runs one file through probe, decision, encode and finalize.

        Never raises for per-file problems; they come back as a SKIPPED or
        FAILED result.
        """
        job = FileJob(path=path)
        try:
            if not path.is_file():
                job.advance(FileState.FAILED)
                return JobResult.failed(path, "no such file")

            try:
                job.descriptor = self.ffprobe_adapter.probe(path)
            except NotAVideo as e:
                job.advance(FileState.SKIPPED)
                return JobResult.skipped(path, f"not a video file ({e})", warning=True)
            except ProbeFailure as e:
                job.advance(FileState.SKIPPED)
                return JobResult.skipped(path, f"probe failed: {e}", warning=True)
            job.advance(FileState.PROBED)
            self.event_bus.publish(JobProbed(source=path, descriptor=job.descriptor))

            job.decision = decide(job.descriptor, self.config)
            job.advance(FileState.DECIDED)
            if not job.decision.should_encode:
                job.advance(FileState.SKIPPED)
                return JobResult.skipped(path, job.decision.reason)

            return self._encode(job)

        except (RecompressError, OSError) as e:
            self.logger.error(f"Exception processing {path.name}: {e}")
            if not job.is_terminal:
                job.advance(FileState.FAILED)
            return JobResult.failed(path, str(e))
        finally:
            self.logger.debug(f"STATE: {path.name} -> {job.state.value}")
            self.housekeeping.cleanup_empty_dirs()

    def _publish_result(self, result: JobResult):
        if result.status == JobStatus.SUCCEEDED:
            self.event_bus.publish(JobCompleted(result=result))
        elif result.status == JobStatus.SKIPPED:
            self.event_bus.publish(JobSkipped(result=result))
        else:
            self.event_bus.publish(JobFailed(result=result))

    def run(self, paths: Iterable[Path]) -> List[JobResult]:
        files = list(paths)
        self.event_bus.publish(BatchStarted(total_files=len(files)))
        self.housekeeping.cleanup_stale_staging()
        self.housekeeping.cleanup_empty_dirs()

        results: List[JobResult] = []
        for index, path in enumerate(files, start=1):
            self.event_bus.publish(JobStarted(source=path, index=index, total=len(files)))
            result = self.process_file(path)
            self.logger.info(f"RESULT: {path.name} status={result.status.value} reason={result.reason}")
            self._publish_result(result)
            results.append(result)

        self.event_bus.publish(BatchFinished(results=results))
        return results
