"""
SlideSmith - AI-powered meeting transcript to slide deck generator

This package drives the transcript -> outline -> slides -> PDF pipeline across
remote AI services, with retries, progress reporting and render resumption.
"""

from .core.run_manager import run_manager
from .pipeline.coordinator import PresentationPipeline

# Public API
__all__ = ["PresentationPipeline", "run_manager"]

# Package version
__version__ = "0.1.0"
