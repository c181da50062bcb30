import shutil
import sys
import typer
from pathlib import Path
from typing import Optional, List

from recompress.config.loader import load_config, build_configuration
from recompress.config.models import SpeedPreset
from recompress.domain.errors import ConfigurationError, MissingDependency
from recompress.domain.models import JobStatus
from recompress.infrastructure.logging import setup_logging
from recompress.infrastructure.event_bus import EventBus
from recompress.infrastructure.process import ProcessRunner
from recompress.infrastructure.ffprobe import FFprobeAdapter
from recompress.infrastructure.ffmpeg import FFmpegAdapter
from recompress.infrastructure.housekeeping import HousekeepingService
from recompress.infrastructure.manpage import install_manpage
from recompress.pipeline.orchestrator import Orchestrator
from recompress.ui.state import BatchState
from recompress.ui.manager import UIManager

REQUIRED_PROGRAMS = ("ffmpeg", "ffprobe")

app = typer.Typer(
    help="recompress - re-encode video files to 10-bit HEVC (libx265), keeping every other stream.",
    add_completion=False,
    context_settings={"help_option_names": ["-h", "--help"]},
)

def check_dependencies():
    for program in REQUIRED_PROGRAMS:
        if not shutil.which(program):
            raise MissingDependency(program)

def fail(message: str):
    typer.secho(f"Error: {message}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1)

@app.command()
def recompress_files(
    files: Optional[List[Path]] = typer.Argument(None, help="Video files to re-encode, processed in the order given", show_default=False),
    force: bool = typer.Option(False, "--force", "-f", help="Re-encode files that are already HEVC"),
    quality: Optional[int] = typer.Option(None, "--quality", "-q", help="CRF 18-35, lower is better quality (default 26)"),
    speed: Optional[str] = typer.Option(None, "--speed", "-s", help=f"x265 preset: {', '.join(SpeedPreset.names())} (default slower)"),
    width: Optional[int] = typer.Option(None, "--width", "-x", help="Maximum output width, at least 100 (default 1920)"),
    height: Optional[int] = typer.Option(None, "--height", "-y", help="Maximum output height, at least 50 (default 1080)"),
    installmanpage: bool = typer.Option(False, "--installmanpage", "-M", help="Install the manual page and exit"),
    config_path: Optional[Path] = typer.Option(None, "--config", help="Path to YAML config (default ~/.config/recompress/recompress.yaml)"),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Kill ffmpeg/ffprobe runs that take longer than this many seconds"),
    log_file: Optional[Path] = typer.Option(None, "--log-file", help="Write a detailed log to this file"),
    debug: bool = typer.Option(False, "--debug/--no-debug", help="Enable verbose debug logging")
):
    """Re-encode each FILE to HEVC, scaled to fit within the maximum size, into ./_recompressed/."""
    if installmanpage:
        target = install_manpage()
        typer.secho(f"Installed manpage to {target}", fg=typer.colors.GREEN)
        return

    try:
        file_values = load_config(config_path)
        config = build_configuration(file_values, {
            "quality": quality,
            "speed": speed,
            "max_width": width,
            "max_height": height,
            "force": force or None,
            "timeout_seconds": timeout,
            "debug": debug or None,
        })
    except ConfigurationError as e:
        fail(str(e))

    logger = setup_logging(log_file, debug=config.debug)

    if not files:
        fail("No input files given. Run with --help for usage.")

    try:
        check_dependencies()
    except MissingDependency as e:
        fail(str(e))

    logger.info(f"recompress started: {len(files)} file(s), output={config.output_dir}")
    logger.info(
        f"Config: quality={config.quality}, speed={config.speed.value}, "
        f"max={config.max_width}x{config.max_height}, force={config.force}, cpus={config.cpu_count}"
    )

    bus = EventBus()
    UIManager(bus, BatchState())

    runner = ProcessRunner(timeout=config.timeout_seconds)
    orchestrator = Orchestrator(
        config=config,
        event_bus=bus,
        ffprobe_adapter=FFprobeAdapter(runner),
        ffmpeg_adapter=FFmpegAdapter(bus, runner),
        housekeeping=HousekeepingService(config)
    )

    try:
        results = orchestrator.run(files)
    except KeyboardInterrupt:
        typer.echo("\nInterrupted by user")
        raise typer.Exit(code=130)
    except OSError as e:
        logger.exception("Fatal error")
        fail(str(e))

    failed = sum(1 for r in results if r.status == JobStatus.FAILED)
    logger.info(f"recompress finished: {len(results)} file(s), {failed} failed")

def main():
    """Console entry point; usage errors exit with 1 instead of click's 2."""
    try:
        app()
    except SystemExit as e:
        sys.exit(1 if e.code == 2 else e.code)

if __name__ == "__main__":
    main()
