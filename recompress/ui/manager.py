import logging
from pathlib import Path
from typing import Optional
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskID, TextColumn, TimeRemainingColumn
from recompress.infrastructure.event_bus import EventBus
from recompress.ui.state import BatchState
from recompress.domain.events import (
    BatchStarted, BatchFinished, JobStarted, JobProbed, EncodeStarted,
    JobProgressUpdated, EncoderOutput, JobSkipped, JobCompleted, JobFailed
)

def format_size(size: float) -> str:
    """Format size in bytes to human readable"""
    for unit in ['B', 'KB', 'MB', 'GB']:
        if size < 1024.0:
            return f"{size:.1f}{unit}"
        size /= 1024.0
    return f"{size:.1f}TB"

def _file_size(path: Optional[Path]) -> int:
    if path is None:
        return 0
    try:
        return path.stat().st_size
    except OSError:
        return 0

class UIManager:
    """Subscribes to EventBus, updates BatchState and prints one status line per event."""

    def __init__(self, bus: EventBus, state: BatchState, console: Optional[Console] = None):
        self.bus = bus
        self.state = state
        self.console = console or Console()
        self.logger = logging.getLogger(__name__)
        self._progress: Optional[Progress] = None
        self._task: Optional[TaskID] = None
        self._setup_subscriptions()

    def _setup_subscriptions(self):
        self.bus.subscribe(BatchStarted, self.on_batch_started)
        self.bus.subscribe(BatchFinished, self.on_batch_finished)
        self.bus.subscribe(JobStarted, self.on_job_started)
        self.bus.subscribe(JobProbed, self.on_job_probed)
        self.bus.subscribe(EncodeStarted, self.on_encode_started)
        self.bus.subscribe(JobProgressUpdated, self.on_job_progress)
        self.bus.subscribe(EncoderOutput, self.on_encoder_output)
        self.bus.subscribe(JobSkipped, self.on_job_skipped)
        self.bus.subscribe(JobCompleted, self.on_job_completed)
        self.bus.subscribe(JobFailed, self.on_job_failed)

    def _stop_progress(self):
        if self._progress is not None:
            self._progress.stop()
            self._progress = None
            self._task = None

    def on_batch_started(self, event: BatchStarted):
        self.state.total_files = event.total_files

    def on_job_started(self, event: JobStarted):
        self.state.current_file = event.source.name
        self.console.print(f"[bold]({event.index}/{event.total})[/bold] {escape(str(event.source))}")

    def on_job_probed(self, event: JobProbed):
        d = event.descriptor
        frames = f", {d.frame_count} frames" if d.frame_count else ""
        self.console.print(f"  [dim]{escape(d.codec_name)} {d.width}x{d.height}{frames}[/dim]")

    def on_encode_started(self, event: EncodeStarted):
        target = f" scaled to {event.plan.width}x{event.plan.height}" if event.plan and event.plan.required else ""
        self.console.print(f"  [cyan]Encoding to {escape(str(event.destination))}{target}[/cyan]")

        self._stop_progress()
        self._progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(bar_width=40),
            TextColumn("{task.completed}/{task.total} frames" if event.frame_count else "{task.completed} frames"),
            TimeRemainingColumn(),
            console=self.console,
            transient=True
        )
        self._progress.start()
        self._task = self._progress.add_task(
            escape(event.source.name),
            total=event.frame_count or None
        )

    def on_job_progress(self, event: JobProgressUpdated):
        if self._progress is not None and self._task is not None:
            self._progress.update(self._task, completed=event.frame)

    def on_encoder_output(self, event: EncoderOutput):
        self.console.print(f"  [dim]{escape(event.line)}[/dim]")

    def on_job_skipped(self, event: JobSkipped):
        self._stop_progress()
        result = event.result
        self.state.add_skipped_job(result)
        if result.warning:
            self.console.print(f"  [yellow]⚠ Skipped: {escape(result.reason or '')}[/yellow]")
        else:
            self.console.print(f"  [green]✓ Skipped: {escape(result.reason or '')}[/green]")

    def on_job_completed(self, event: JobCompleted):
        self._stop_progress()
        result = event.result
        input_size = _file_size(result.source)
        output_size = _file_size(result.output_path)
        self.state.add_completed_job(input_size, output_size)
        self.console.print(
            f"  [bold green]✓ Done:[/bold green] {escape(str(result.output_path))} "
            f"[dim]({format_size(input_size)} → {format_size(output_size)})[/dim]"
        )

    def on_job_failed(self, event: JobFailed):
        self._stop_progress()
        self.state.add_failed_job(event.result)
        self.console.print(f"  [bold red]✗ Failed: {escape(event.result.reason or 'unknown error')}[/bold red]")

    def on_batch_finished(self, event: BatchFinished):
        self._stop_progress()
        summary_lines = [
            f"Processed: {self.state.processed_count}/{self.state.total_files}",
            f"[green]Encoded: {self.state.completed_count}[/green]",
            f"[yellow]Skipped: {self.state.skipped_count}[/yellow]",
            f"[red]Failed: {self.state.failed_count}[/red]",
        ]
        if self.state.warning_count:
            summary_lines.insert(3, f"[yellow]  Skipped with warnings: {self.state.warning_count}[/yellow]")
        if self.state.completed_count:
            summary_lines.extend([
                "",
                f"Total input size: {format_size(self.state.total_input_bytes)}",
                f"Total output size: {format_size(self.state.total_output_bytes)}",
                f"Space saved: {format_size(self.state.space_saved_bytes)} "
                f"({(1 - self.state.compression_ratio) * 100:.1f}%)",
            ])
        for result in self.state.failed_jobs:
            summary_lines.append(f"[red]  ✗ {escape(result.source.name)}: {escape(result.reason or '')}[/red]")

        self.console.print(Panel("\n".join(summary_lines), title="RECOMPRESS SUMMARY", border_style="cyan"))
