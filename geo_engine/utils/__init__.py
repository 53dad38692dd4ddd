"""Utility modules."""

from .config import Settings, PipelineConfig, get_settings

__all__ = ["Settings", "PipelineConfig", "get_settings"]
