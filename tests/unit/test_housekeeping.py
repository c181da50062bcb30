from pathlib import Path
from unittest.mock import patch
from recompress.domain.models import JobResult, JobStatus
from recompress.infrastructure.housekeeping import HousekeepingService

def test_paths(config):
    hk = HousekeepingService(config)
    src = Path("/videos/season1/episode.mkv")
    assert hk.staging_path(src) == config.output_dir / "_working" / "episode.mkv"
    assert hk.final_path(src) == config.output_dir / "episode.mkv"

def test_finalize_moves_into_output_dir(config, source_file):
    hk = HousekeepingService(config)
    hk.prepare()
    staged = hk.staging_path(source_file)
    staged.write_bytes(b"encoded")

    result = hk.finalize(JobResult.succeeded(source_file, staged))

    assert result.status == JobStatus.SUCCEEDED
    assert result.output_path == config.output_dir / "movie.mkv"
    assert result.output_path.read_bytes() == b"encoded"
    assert not staged.exists()

def test_finalize_overwrites_existing_output(config, source_file):
    hk = HousekeepingService(config)
    hk.prepare()
    (config.output_dir / "movie.mkv").write_bytes(b"old")
    staged = hk.staging_path(source_file)
    staged.write_bytes(b"new")

    result = hk.finalize(JobResult.succeeded(source_file, staged))
    assert result.output_path.read_bytes() == b"new"

def test_finalize_passes_through_other_results(config, source_file):
    hk = HousekeepingService(config)
    failed = JobResult.failed(source_file, "boom")
    skipped = JobResult.skipped(source_file, "already HEVC")
    assert hk.finalize(failed) is failed
    assert hk.finalize(skipped) is skipped

def test_cleanup_removes_empty_dirs(config):
    hk = HousekeepingService(config)
    hk.prepare()
    hk.cleanup_empty_dirs()
    assert not config.staging_dir.exists()
    assert not config.output_dir.exists()

def test_cleanup_keeps_output_with_files(config):
    hk = HousekeepingService(config)
    hk.prepare()
    (config.output_dir / "done.mkv").write_bytes(b"x")

    hk.cleanup_empty_dirs()

    assert not config.staging_dir.exists()
    assert (config.output_dir / "done.mkv").exists()

def test_cleanup_without_dirs_is_silent(config):
    HousekeepingService(config).cleanup_empty_dirs()
    assert not config.output_dir.exists()

def test_cleanup_ignores_permission_errors(config):
    hk = HousekeepingService(config)
    hk.prepare()
    with patch.object(Path, "rmdir", side_effect=PermissionError(13, "Permission denied")):
        hk.cleanup_empty_dirs()
    assert config.staging_dir.exists()

def test_cleanup_stale_staging(config, caplog):
    hk = HousekeepingService(config)
    hk.prepare()
    (config.staging_dir / "crashed.mkv").write_bytes(b"partial")
    (config.staging_dir / "other.mp4").write_bytes(b"partial")

    with caplog.at_level("WARNING"):
        assert hk.cleanup_stale_staging() == 2

    assert list(config.staging_dir.iterdir()) == []
    warnings = [r.getMessage() for r in caplog.records if r.levelname == "WARNING"]
    assert len(warnings) == 2
    assert any("crashed.mkv" in m for m in warnings)
    assert any("other.mp4" in m for m in warnings)

def test_cleanup_stale_staging_without_dir(config):
    assert HousekeepingService(config).cleanup_stale_staging() == 0

def test_discard(config, source_file):
    hk = HousekeepingService(config)
    hk.prepare()
    staged = hk.staging_path(source_file)
    staged.write_bytes(b"x")
    hk.discard(staged)
    assert not staged.exists()
    hk.discard(staged)
