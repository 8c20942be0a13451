"""
Pipeline package for SlideSmith presentation processing.

This package contains the run orchestrator and the individual processing steps.
"""

from .base import BasePipeline
from .coordinator import PresentationPipeline

__all__ = ["BasePipeline", "PresentationPipeline"]
