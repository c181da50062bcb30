from pathlib import Path
from recompress.config.models import JobConfiguration
from recompress.domain.models import EncodeCommand, ScalingPlan

def build_encode_command(
    config: JobConfiguration,
    source: Path,
    destination: Path,
    plan: ScalingPlan
) -> EncodeCommand:
    """Assembles the libx265 invocation for one file.

    All streams are mapped and copied; only video is re-encoded. The scale
    filter is present only when the plan requires it.
    """
    scale_width = plan.width if plan.required else None
    scale_height = plan.height if plan.required else None

    return EncodeCommand(
        source=source,
        destination=destination,
        scale_width=scale_width,
        scale_height=scale_height,
        quality=config.quality,
        preset=config.speed.value,
        pools=config.pools,
        frame_threads=config.frame_threads,
    )
