"""
Transcript-to-deck pipeline steps for SlideSmith.
"""

from .images import ImageBatchResult, generate_images_step
from .outline import outline_step, parse_outline
from .persist import build_slide_rows, persist_step
from .render import render_step
from .understand import understand_step

__all__ = [
    "ImageBatchResult",
    "build_slide_rows",
    "generate_images_step",
    "outline_step",
    "parse_outline",
    "persist_step",
    "render_step",
    "understand_step",
]
