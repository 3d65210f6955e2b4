"""Synthetic density volumes and NeRF-style view datasets."""

from .field.density_field import DensityField
from .transfer.transfer_function import TransferFunction
from .camera.framing import ViewFramer
from .pipeline import DatasetExporter, ViewDatasetGenerator
from .utils.config import GeneratorConfig

__version__ = "0.1.0"
__all__ = [
    "DensityField",
    "TransferFunction",
    "ViewFramer",
    "DatasetExporter",
    "ViewDatasetGenerator",
    "GeneratorConfig",
]
