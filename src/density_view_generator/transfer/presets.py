"""Named transfer function presets."""

from enum import IntEnum

from .transfer_function import TransferFunction


class Preset(IntEnum):
    """Available presets, indexed as exposed in the preset dropdown."""
    WHITE = 0
    DEFAULT = 1
    ANEURYSM = 2
    HEAD = 3


PRESETS = {
    # plain white with a linear opacity ramp
    Preset.WHITE: (
        [(0.0, (1.0, 1.0, 1.0))],
        [(0.0, 0.0), (1.0, 1.0)],
    ),
    # blue -> red -> yellow, tuned for the synthesized volume
    Preset.DEFAULT: (
        [
            (0.0, (0.0, 0.0, 1.0)),
            (0.5, (1.0, 0.0, 0.0)),
            (1.0, (1.0, 1.0, 0.0)),
        ],
        [
            (0.05, 0.0),
            (0.1, 0.1),
            (0.3, 0.1),
            (0.35, 0.0),
            (0.35, 0.0),
            (0.45, 0.0),
            (0.5, 0.15),
            (0.55, 0.15),
            (0.6, 0.0),
            (0.8, 0.0),
            (0.95, 0.5),
        ],
    ),
    # white -> pale green -> coral, tuned for vascular scans
    Preset.ANEURYSM: (
        [
            (0.0, (1.0, 1.0, 1.0)),
            (0.25, (0.95, 1.0, 0.8)),
            (1.0, (1.0, 0.4, 0.333)),
        ],
        [(0.1, 0.0), (1.0, 1.0)],
    ),
    # anatomical preset with narrow opacity plateaus
    Preset.HEAD: (
        [
            (0.332, (0.5, 0.8, 0.85)),
            (0.349, (0.85, 0.5, 0.85)),
            (0.370, (0.9, 0.85, 0.8)),
            (0.452, (0.9, 0.85, 0.8)),
            (0.715, (0.9, 0.85, 0.8)),
            (1.0, (1.0, 0.0, 0.0)),
        ],
        [
            (0.208, 0.0),
            (0.22, 0.17),
            (0.315, 0.17),
            (0.326, 0.0),
            (0.345, 0.0),
            (0.348, 0.23),
            (0.35, 0.0),
            (0.374, 0.0),
            (0.539, 0.31),
            (0.633, 0.31),
            (0.716, 0.0),
            (0.8, 1.0),
        ],
    ),
}


def load_preset(transfer_function: TransferFunction, index: int) -> Preset:
    """Replace the transfer function's control points with a preset.

    Indices past the last preset select the last one.

    Returns:
        The preset that was applied
    """
    if index < 0:
        raise ValueError(f"Preset index must be non-negative, got {index}")
    preset = Preset(min(int(index), max(Preset)))
    color_points, opacity_points = PRESETS[preset]
    transfer_function.set_points(color_points, opacity_points)
    return preset


def from_preset(index: int) -> TransferFunction:
    transfer_function = TransferFunction()
    load_preset(transfer_function, index)
    return transfer_function
