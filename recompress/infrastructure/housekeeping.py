import logging
import os
from pathlib import Path
from recompress.config.models import JobConfiguration
from recompress.domain.models import JobResult, JobStatus

class HousekeepingService:
    """Owns the output and staging directories.

    Encodes are written to ``<output_dir>/_working/`` and only moved to
    ``<output_dir>/`` once they succeeded.
    """

    def __init__(self, config: JobConfiguration):
        self.output_dir = config.output_dir
        self.staging_dir = config.staging_dir
        self.logger = logging.getLogger(__name__)

    def staging_path(self, source: Path) -> Path:
        return self.staging_dir / source.name

    def final_path(self, source: Path) -> Path:
        return self.output_dir / source.name

    def prepare(self):
        self.staging_dir.mkdir(parents=True, exist_ok=True)

    def cleanup_stale_staging(self) -> int:
        """Removes files left in the staging directory by an interrupted run."""
        if not self.staging_dir.is_dir():
            return 0
        removed = 0
        for leftover in self.staging_dir.iterdir():
            if leftover.is_file():
                self.logger.warning(f"Removing stale staging file {leftover}")
                leftover.unlink()
                removed += 1
        if removed:
            self.logger.info(f"Cleaned up {removed} stale file(s) in {self.staging_dir}")
        return removed

    def finalize(self, result: JobResult) -> JobResult:
        """Moves a successful encode into the output directory."""
        if result.status != JobStatus.SUCCEEDED or result.output_path is None:
            return result

        target = self.final_path(result.source)
        if target.exists():
            self.logger.warning(f"Overwriting existing output {target}")
        os.replace(result.output_path, target)
        self.logger.info(f"Finalized {result.source.name} -> {target}")
        return JobResult.succeeded(result.source, target)

    def discard(self, staged: Path):
        try:
            staged.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            self.logger.warning(f"Could not remove staged file {staged}: {e}")

    def _try_rmdir(self, directory: Path) -> bool:
        try:
            directory.rmdir()
        except OSError as e:
            # Still holds other outputs, or already gone. Either way nothing to report.
            self.logger.debug(f"Kept {directory}: {e.strerror or e}")
            return False
        return True

    def cleanup_empty_dirs(self):
        """Best-effort removal of the staging and output directories when empty."""
        self._try_rmdir(self.staging_dir)
        self._try_rmdir(self.output_dir)
