import logging
import re
import time
from collections import deque
from pathlib import Path
from typing import Optional
from recompress.domain.errors import ProcessTimeout
from recompress.domain.events import EncoderOutput, JobProgressUpdated
from recompress.domain.models import EncodeCommand, JobResult
from recompress.infrastructure.event_bus import EventBus
from recompress.infrastructure.process import ProcessRunner

# Progress lines look like 'frame=  120 fps= 24 q=28.0 size= 1024kB time=00:00:05.00 ...'
FRAME_REGEX = re.compile(r"frame=\s*(\d+)")

class FFmpegAdapter:
    """Runs ffmpeg for one EncodeCommand and judges the outcome."""

    def __init__(self, event_bus: EventBus, runner: Optional[ProcessRunner] = None, executable: str = "ffmpeg"):
        self.event_bus = event_bus
        self.runner = runner or ProcessRunner()
        self.executable = executable
        self.logger = logging.getLogger(__name__)

    def _remove_partial(self, destination: Path):
        try:
            if destination.exists():
                destination.unlink()
                self.logger.info(f"Removed partial output {destination}")
        except OSError as e:
            self.logger.warning(f"Could not remove partial output {destination}: {e}")

    def encode(self, command: EncodeCommand, frame_count: int = 0) -> JobResult:
        """Executes the encode.

        Succeeds only when ffmpeg exits with 0 and left a non-empty destination.
        Any other outcome removes whatever was written to the destination.
        """
        source = command.source
        destination = command.destination
        diagnostics = deque(maxlen=20)

        def on_line(line: str):
            match = FRAME_REGEX.search(line)
            if match:
                frame = int(match.group(1))
                percent = min(100.0, frame * 100.0 / frame_count) if frame_count else None
                self.event_bus.publish(JobProgressUpdated(source=source, frame=frame, progress_percent=percent))
                return
            diagnostics.append(line)
            self.logger.debug(f"FFMPEG: {source.name}: {line}")
            self.event_bus.publish(EncoderOutput(source=source, line=line))

        args = command.to_args(self.executable)
        self.logger.info(f"FFMPEG_START: {source.name} -> {destination}")
        start_time = time.monotonic()

        try:
            returncode = self.runner.stream(args, on_line)
        except ProcessTimeout as e:
            self._remove_partial(destination)
            return JobResult.failed(source, str(e))
        except OSError as e:
            self._remove_partial(destination)
            return JobResult.failed(source, f"Could not run {self.executable}: {e}")
        except BaseException:
            self._remove_partial(destination)
            raise

        elapsed = time.monotonic() - start_time

        if returncode != 0:
            reason = f"ffmpeg exited with code {returncode}"
            if diagnostics:
                reason = f"{reason}: {diagnostics[-1]}"
            self.logger.info(f"FFMPEG_END: {source.name} status=failed code={returncode} elapsed={elapsed:.2f}s")
            self._remove_partial(destination)
            return JobResult.failed(source, reason)

        if not destination.exists() or destination.stat().st_size == 0:
            self.logger.info(f"FFMPEG_END: {source.name} status=failed reason=empty-output elapsed={elapsed:.2f}s")
            self._remove_partial(destination)
            return JobResult.failed(source, "ffmpeg reported success but produced no output")

        self.logger.info(f"FFMPEG_END: {source.name} status=completed elapsed={elapsed:.2f}s")
        return JobResult.succeeded(source, destination)
