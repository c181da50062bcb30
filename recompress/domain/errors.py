from pathlib import Path
from typing import Optional

class RecompressError(Exception):
    """Base class for all recompress errors."""

class ConfigurationError(RecompressError):
    """Invalid settings; fatal before any file is processed."""

class MissingDependency(RecompressError):
    """A required external program is not installed."""

    def __init__(self, program: str):
        super().__init__(f"{program} not found in PATH. Please install ffmpeg with {program} available.")
        self.program = program

class NotAVideo(RecompressError):
    def __init__(self, path: Path, detail: Optional[str] = None):
        message = f"No video stream found in {path}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.path = path

class ProbeFailure(RecompressError):
    pass

class ProcessTimeout(RecompressError):
    def __init__(self, program: str, timeout: float):
        super().__init__(f"{program} did not finish within {timeout:g}s")
        self.program = program
        self.timeout = timeout

class InvalidTransition(RecompressError):
    pass
