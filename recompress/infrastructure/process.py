import logging
import subprocess
import threading
from typing import Callable, List, Optional
from pydantic import BaseModel
from recompress.domain.errors import ProcessTimeout

class ProcessResult(BaseModel):
    returncode: int
    stdout: str = ""
    stderr: str = ""

class ProcessRunner:
    """Single boundary for every external program the tool starts.

    Both entry points block until the child exits. When ``timeout`` is set the
    child is killed once it expires and ``ProcessTimeout`` is raised.
    """

    def __init__(self, timeout: Optional[float] = None):
        self.timeout = timeout
        self.logger = logging.getLogger(__name__)

    def run(self, args: List[str]) -> ProcessResult:
        """Runs a command to completion and captures its output."""
        self.logger.debug(f"RUN: {' '.join(args)}")
        try:
            completed = subprocess.run(
                args,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout
            )
        except subprocess.TimeoutExpired:
            raise ProcessTimeout(args[0], self.timeout)
        return ProcessResult(
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )

    def stream(self, args: List[str], on_line: Callable[[str], None]) -> int:
        """Runs a command, handing each stderr line to ``on_line`` as it arrives.

        Returns the exit code.
        """
        self.logger.debug(f"STREAM: {' '.join(args)}")
        process = subprocess.Popen(
            args,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.PIPE,
            universal_newlines=True,
            encoding="utf-8",
            errors="replace",
            bufsize=1
        )

        timed_out = threading.Event()
        timer: Optional[threading.Timer] = None
        if self.timeout:
            def _expire():
                timed_out.set()
                process.kill()
            timer = threading.Timer(self.timeout, _expire)
            timer.daemon = True
            timer.start()

        try:
            # ffmpeg ends progress lines with \r; universal newlines splits on it too
            for line in process.stderr:
                line = line.rstrip("\n")
                if line:
                    on_line(line)
            process.wait()
        except BaseException:
            process.kill()
            process.wait()
            raise
        finally:
            if timer:
                timer.cancel()

        if timed_out.is_set():
            raise ProcessTimeout(args[0], self.timeout)
        return process.returncode
