import pytest
from recompress.config.models import JobConfiguration
from recompress.domain.models import DecisionAction, MediaDescriptor
from recompress.pipeline.decision import decide, fit_within, plan_scaling

def _descriptor(codec="h264", width=1920, height=1080):
    return MediaDescriptor(codec_name=codec, width=width, height=height, frame_count=100)

@pytest.fixture
def limits():
    return JobConfiguration(max_width=1920, max_height=1080, cpu_count=1)

@pytest.mark.parametrize("codec", ["hevc", "HEVC", "hevc_main10"])
def test_hevc_is_skipped(limits, codec):
    decision = decide(_descriptor(codec=codec), limits)
    assert decision.action == DecisionAction.SKIP
    assert decision.plan is None
    assert "HEVC" in decision.reason

def test_hevc_with_force_is_encoded():
    config = JobConfiguration(force=True, cpu_count=1)
    decision = decide(_descriptor(codec="hevc"), config)
    assert decision.action == DecisionAction.ENCODE
    assert decision.plan.required is False

def test_other_codecs_are_encoded(limits):
    for codec in ("h264", "mpeg4", "vp9", "av1"):
        assert decide(_descriptor(codec=codec), limits).should_encode

def test_4k_scaled_to_1080p(limits):
    decision = decide(_descriptor(width=3840, height=2160), limits)
    assert decision.plan.required is True
    assert (decision.plan.width, decision.plan.height) == (1920, 1080)

def test_720p_not_scaled(limits):
    plan = plan_scaling(_descriptor(width=1280, height=720), limits)
    assert plan.required is False
    assert (plan.width, plan.height) == (1280, 720)

def test_exact_bounds_not_scaled(limits):
    assert plan_scaling(_descriptor(width=1920, height=1080), limits).required is False

def test_height_limited_portrait(limits):
    plan = plan_scaling(_descriptor(width=1080, height=1920), limits)
    assert plan.required is True
    assert plan.height == 1080
    assert plan.width == 608

def test_only_height_too_large(limits):
    plan = plan_scaling(_descriptor(width=1440, height=1440), limits)
    assert (plan.width, plan.height) == (1080, 1080)

def test_only_width_too_large(limits):
    plan = plan_scaling(_descriptor(width=2560, height=1080), limits)
    assert (plan.width, plan.height) == (1920, 810)

@pytest.mark.parametrize("width,height,max_width,max_height", [
    (3840, 2160, 1920, 1080),
    (4096, 2160, 1920, 1080),
    (1998, 1080, 1920, 1080),
    (1921, 1081, 1920, 1080),
    (7680, 4320, 1280, 720),
    (720, 1280, 640, 360),
    (1001, 999, 100, 50),
    (5000, 7, 100, 50),
    (3, 5000, 100, 50),
])
def test_fit_never_exceeds_bounds_and_keeps_aspect(width, height, max_width, max_height):
    w, h = fit_within(width, height, max_width, max_height)
    assert 1 <= w <= max_width
    assert 1 <= h <= max_height
    assert w <= width and h <= height
    # One side is exact, the other within a pixel
    assert w == max_width or h == max_height
    assert abs(w * height - h * width) < max(width, height)

@pytest.mark.parametrize("width,height,expected", [
    (1080, 1920, (608, 1080)),
    (2560, 1081, (1920, 811)),
    (1000, 1999, (540, 1080)),
    (3840, 1600, (1920, 800)),
])
def test_fit_rounds_to_nearest(width, height, expected):
    assert fit_within(width, height, 1920, 1080) == expected

def test_decision_is_pure(limits):
    d = _descriptor(width=3840, height=1600)
    assert decide(d, limits) == decide(d, limits)

def test_odd_target_logs_warning(limits, caplog):
    with caplog.at_level("WARNING"):
        plan = plan_scaling(_descriptor(width=3840, height=1606), limits)
    assert plan.height % 2 == 1
    assert "odd dimension" in caplog.text
