"""
Plugin registration for DayDream Scope

Registers the symmetric chaos pipeline as a video source.
"""

from .pipeline import ChaosPipeline

PIPELINE_NAME = "symmetric_chaos"


def register_pipelines(registry):
    """Called when Scope loads the plugin (simple registry API)."""
    registry.register(
        name=PIPELINE_NAME,
        pipeline_class=ChaosPipeline,
        description="Symmetric chaotic attractors (IFS, quilts, icons) as video source",
    )
