"""Rendering and image capture collaborators."""

from .base import Renderer, CaptureService
from .capture import ImageCapture, unique_path
from .raymarch import RaymarchRenderer, ray_box_intersection

__all__ = [
    "Renderer",
    "CaptureService",
    "ImageCapture",
    "unique_path",
    "RaymarchRenderer",
    "ray_box_intersection",
]
