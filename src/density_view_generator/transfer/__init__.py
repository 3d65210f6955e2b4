"""Transfer functions mapping density to color and opacity."""

from .transfer_function import TransferFunction, lut_to_rgba8
from .presets import Preset, PRESETS, load_preset, from_preset

__all__ = [
    "TransferFunction",
    "lut_to_rgba8",
    "Preset",
    "PRESETS",
    "load_preset",
    "from_preset",
]
