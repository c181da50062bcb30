from typing import List, Optional
from recompress.domain.models import JobResult

class BatchState:
    """Running totals for the console summary."""

    def __init__(self):
        # Counters
        self.total_files = 0
        self.completed_count = 0
        self.skipped_count = 0
        self.warning_count = 0
        self.failed_count = 0

        # Bytes tracking
        self.total_input_bytes = 0
        self.total_output_bytes = 0

        self.failed_jobs: List[JobResult] = []
        self.current_file: Optional[str] = None

    @property
    def processed_count(self) -> int:
        return self.completed_count + self.skipped_count + self.failed_count

    @property
    def space_saved_bytes(self) -> int:
        return max(0, self.total_input_bytes - self.total_output_bytes)

    @property
    def compression_ratio(self) -> float:
        if self.total_input_bytes == 0:
            return 0.0
        return self.total_output_bytes / self.total_input_bytes

    def add_completed_job(self, input_size: int, output_size: int):
        self.completed_count += 1
        self.total_input_bytes += input_size
        self.total_output_bytes += output_size
        self.current_file = None

    def add_skipped_job(self, result: JobResult):
        self.skipped_count += 1
        if result.warning:
            self.warning_count += 1
        self.current_file = None

    def add_failed_job(self, result: JobResult):
        self.failed_count += 1
        self.failed_jobs.append(result)
        self.current_file = None
