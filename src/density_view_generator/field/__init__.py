"""Density field synthesis and raw volume I/O."""

from .density_field import DensityField, HISTOGRAM_BUCKETS, SPLAT_BATCHES
from .raw_io import (
    parse_header,
    load_from_header_and_raw,
    load_volume_file,
    export_volume_data,
    volume_file_pair,
)

__all__ = [
    "DensityField",
    "HISTOGRAM_BUCKETS",
    "SPLAT_BATCHES",
    "parse_header",
    "load_from_header_and_raw",
    "load_volume_file",
    "export_volume_data",
    "volume_file_pair",
]
