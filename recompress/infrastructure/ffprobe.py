import logging
from pathlib import Path
from typing import List, Optional
from pydantic import ValidationError
from recompress.domain.errors import NotAVideo, ProbeFailure, ProcessTimeout
from recompress.domain.models import MediaDescriptor
from recompress.infrastructure.process import ProcessResult, ProcessRunner

class FFprobeAdapter:
    """Wrapper around ffprobe to extract codec and geometry of the first video stream."""

    def __init__(self, runner: Optional[ProcessRunner] = None, executable: str = "ffprobe"):
        self.runner = runner or ProcessRunner()
        self.executable = executable
        self.logger = logging.getLogger(__name__)

    def _query(self, file_path: Path, *options: str) -> ProcessResult:
        cmd = [self.executable, "-v", "error", *options, "-of", "csv=p=0", str(file_path)]
        try:
            return self.runner.run(cmd)
        except ProcessTimeout as e:
            raise ProbeFailure(f"ffprobe timed out for {file_path}: {e}") from e
        except OSError as e:
            raise ProbeFailure(f"Could not run {self.executable}: {e}") from e

    @staticmethod
    def _lines(output: str) -> List[str]:
        return [line.strip().rstrip(",") for line in output.splitlines() if line.strip()]

    def list_stream_types(self, file_path: Path) -> List[str]:
        """Returns the codec_type of every stream, e.g. ['video', 'audio', 'subtitle']."""
        result = self._query(file_path, "-show_entries", "stream=codec_type")
        if result.returncode != 0:
            # ffprobe could not read the file as media at all
            raise NotAVideo(file_path, result.stderr.strip() or None)
        return self._lines(result.stdout)

    def _read_geometry(self, file_path: Path):
        result = self._query(
            file_path,
            "-select_streams", "v:0",
            "-show_entries", "stream=codec_name,width,height",
        )
        if result.returncode != 0:
            raise ProbeFailure(f"ffprobe failed for {file_path}: {result.stderr.strip()}")

        lines = self._lines(result.stdout)
        if not lines:
            raise ProbeFailure(f"ffprobe returned no video stream details for {file_path}")

        fields = lines[0].split(",")
        if len(fields) != 3:
            raise ProbeFailure(f"Unexpected ffprobe output for {file_path}: {lines[0]!r}")
        codec, width, height = (f.strip() for f in fields)
        try:
            return codec, int(width), int(height)
        except ValueError:
            raise ProbeFailure(f"Malformed dimensions from ffprobe for {file_path}: {lines[0]!r}")

    def count_frames(self, file_path: Path) -> int:
        """Packet count of the first video stream; 0 when ffprobe cannot tell."""
        result = self._query(
            file_path,
            "-select_streams", "v:0",
            "-count_packets",
            "-show_entries", "stream=nb_read_packets",
        )
        if result.returncode != 0:
            raise ProbeFailure(f"ffprobe packet count failed for {file_path}: {result.stderr.strip()}")

        lines = self._lines(result.stdout)
        if not lines or lines[0] == "N/A":
            return 0
        try:
            return int(lines[0])
        except ValueError:
            raise ProbeFailure(f"Malformed packet count from ffprobe for {file_path}: {lines[0]!r}")

    def probe(self, file_path: Path) -> MediaDescriptor:
        """Raises NotAVideo when there is no video stream, ProbeFailure on anything unparsable."""
        if "video" not in self.list_stream_types(file_path):
            raise NotAVideo(file_path)

        codec, width, height = self._read_geometry(file_path)
        frames = self.count_frames(file_path)
        self.logger.debug(f"PROBE: {file_path.name} codec={codec} {width}x{height} frames={frames}")

        try:
            return MediaDescriptor(codec_name=codec, width=width, height=height, frame_count=frames)
        except ValidationError as e:
            raise ProbeFailure(f"Invalid stream properties for {file_path}: {width}x{height}") from e
