"""Skip-or-encode policy and the scaling plan.

Everything here is a pure function of the probed descriptor and the job
configuration.
"""
import logging
from typing import Tuple
from recompress.config.models import JobConfiguration
from recompress.domain.models import Decision, MediaDescriptor, ScalingPlan

logger = logging.getLogger(__name__)

def fit_within(width: int, height: int, max_width: int, max_height: int) -> Tuple[int, int]:
    """Largest size with the source aspect ratio inside max_width x max_height.

    The limiting side takes the bound exactly. The other side is rounded to
    the nearest pixel (halves up) and clamped to its bound, the same as
    ffmpeg's ``force_original_aspect_ratio=decrease``.
    """
    if width * max_height >= height * max_width:
        scaled = (2 * height * max_width + width) // (2 * width)
        return max_width, max(1, min(max_height, scaled))
    scaled = (2 * width * max_height + height) // (2 * height)
    return max(1, min(max_width, scaled)), max_height

def plan_scaling(descriptor: MediaDescriptor, config: JobConfiguration) -> ScalingPlan:
    required = descriptor.width > config.max_width or descriptor.height > config.max_height
    if not required:
        return ScalingPlan(required=False, width=descriptor.width, height=descriptor.height)

    width, height = fit_within(descriptor.width, descriptor.height, config.max_width, config.max_height)
    if width % 2 or height % 2:
        logger.warning(
            f"Scaled size {width}x{height} has an odd dimension; "
            f"4:2:0 encoders may reject it (source {descriptor.width}x{descriptor.height})"
        )
    return ScalingPlan(required=True, width=width, height=height)

def decide(descriptor: MediaDescriptor, config: JobConfiguration) -> Decision:
    if not config.force and descriptor.is_target_codec:
        return Decision.skip(f"already {descriptor.codec_name.upper()}")
    return Decision.encode(plan_scaling(descriptor, config))
