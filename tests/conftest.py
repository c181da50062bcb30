import pytest
from pathlib import Path
from unittest.mock import MagicMock
from recompress.config.models import JobConfiguration
from recompress.infrastructure.process import ProcessResult

@pytest.fixture
def config(tmp_path):
    """Default settings on an 8-core host, writing under tmp_path."""
    return JobConfiguration(cpu_count=8, output_dir=tmp_path / "_recompressed")

@pytest.fixture
def source_file(tmp_path):
    d = tmp_path / "input"
    d.mkdir()
    f = d / "movie.mkv"
    f.write_bytes(b"x" * 4096)
    return f

@pytest.fixture
def probe_runner():
    """Builds a ProcessRunner double that answers the three ffprobe queries."""
    def factory(streams="video\naudio\nsubtitle\n", geometry="h264,1920,1080\n", packets="240\n",
                listing_code=0, listing_stderr=""):
        runner = MagicMock()

        def run(args):
            if "stream=codec_type" in args:
                return ProcessResult(returncode=listing_code, stdout=streams, stderr=listing_stderr)
            if "stream=codec_name,width,height" in args:
                return ProcessResult(returncode=0, stdout=geometry)
            if "stream=nb_read_packets" in args:
                return ProcessResult(returncode=0, stdout=packets)
            raise AssertionError(f"Unexpected ffprobe call: {args}")

        runner.run.side_effect = run
        return runner
    return factory

@pytest.fixture
def encode_runner():
    """Builds a ProcessRunner double whose stream() imitates an ffmpeg run."""
    def factory(returncode=0, lines=(), output=b"encoded-hevc"):
        runner = MagicMock()

        def stream(args, on_line):
            destination = Path(args[-1])
            if output is not None:
                destination.parent.mkdir(parents=True, exist_ok=True)
                destination.write_bytes(output)
            for line in lines:
                on_line(line)
            return returncode

        runner.stream.side_effect = stream
        return runner
    return factory

@pytest.fixture
def fake_executable(tmp_path):
    """Writes an executable shell script standing in for ffmpeg or ffprobe."""
    def factory(name, body):
        script = tmp_path / "bin" / name
        script.parent.mkdir(exist_ok=True)
        script.write_text("#!/bin/sh\n" + body)
        script.chmod(0o755)
        return str(script)
    return factory
