"""Utilities module."""

from .config import GeneratorConfig
from .metadata import DatasetManifest, FrameRecord, ManifestWriter

__all__ = ["GeneratorConfig", "DatasetManifest", "FrameRecord", "ManifestWriter"]
