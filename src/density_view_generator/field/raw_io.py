"""Raw ``.vox`` volume files with ``.hd`` text headers."""

import logging
import re
from pathlib import Path
from typing import Tuple, Union

import numpy as np

from ..errors import FormatError
from .density_field import DensityField

logger = logging.getLogger(__name__)

_TOKEN_SEPARATORS = re.compile(r"[\sx,]+")
_INT_PREFIX = re.compile(r"[+-]?\d+")
_FLOAT_PREFIX = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")


def _leading_numbers(tokens, pattern, cast, defaults):
    """Parse up to three numbers from tokens, skipping tokens without a numeric prefix."""
    values = list(defaults)
    idx = 0
    for token in tokens:
        match = pattern.match(token)
        if match is None:
            continue
        values[idx] = cast(match.group(0))
        idx += 1
        if idx > 2:
            break
    return values


def parse_header(header_text: str) -> Tuple[Tuple[int, int, int], Tuple[float, float, float]]:
    """Parse a volume header.

    Each line has the form ``Identifier: v0 v1 v2`` where values may be
    separated by whitespace, commas or ``x`` (``Size 128x128x64``). Only
    ``Size``/``Dimension`` and ``Spacing`` are recognised.

    Args:
        header_text: Header file content

    Returns:
        Tuple of (resolution, spacing)

    Raises:
        FormatError: If no valid resolution is present or spacing is not positive
    """
    resolution = [-1, -1, -1]
    spacing = [1.0, 1.0, 1.0]

    for line in header_text.splitlines():
        tokens = [t for t in _TOKEN_SEPARATORS.split(line) if t]
        if not tokens:
            continue

        identifier = tokens[0]
        if identifier.endswith(":"):
            identifier = identifier[:-1]
        if not identifier:
            continue

        if identifier in ("Size", "Dimension"):
            resolution = _leading_numbers(tokens[1:], _INT_PREFIX, int, resolution)
        elif identifier == "Spacing":
            spacing = _leading_numbers(tokens[1:], _FLOAT_PREFIX, float, spacing)
        else:
            logger.warning("Unknown header identifier <%s>", identifier)

    logger.debug("Header resolution=%s spacing=%s", resolution, spacing)

    if min(resolution) < 0:
        raise FormatError(f"Could not read a valid resolution from header, got {resolution}")
    if min(resolution) == 0:
        raise FormatError(f"Resolution must be positive, got {resolution}")
    if min(spacing) <= 0.0:
        raise FormatError(f"Could not read a valid spacing from header, got {spacing}")

    return tuple(resolution), tuple(spacing)


def load_from_header_and_raw(field: DensityField, header_text: str, raw_bytes: bytes) -> DensityField:
    """Replace the field's contents with a decoded raw volume.

    The raw buffer holds one unsigned byte per voxel, x-fastest. Bytes are
    rescaled to [0, 1]. The field is left untouched if anything fails, and
    its bounding box is fitted to the new resolution on success.

    Args:
        field: Field to populate
        header_text: Content of the ``.hd`` header
        raw_bytes: Content of the ``.vox`` file

    Returns:
        The populated field

    Raises:
        FormatError: If the header is invalid or the byte count does not match
    """
    resolution, spacing = parse_header(header_text)
    num_voxels = resolution[0] * resolution[1] * resolution[2]

    if len(raw_bytes) != num_voxels:
        raise FormatError(
            f"Expected {num_voxels} voxels for resolution {resolution}, got {len(raw_bytes)} bytes"
        )

    values = np.frombuffer(raw_bytes, dtype=np.uint8).astype(np.float32) / 255.0
    field.replace(resolution, spacing, values)
    field.fit_to_resolution()
    return field


def volume_file_pair(file_path: Union[Path, str]) -> Tuple[Path, Path]:
    """Resolve the (header, raw) path pair from either member of the pair."""
    file_path = Path(file_path)
    suffix = file_path.suffix.upper()
    if suffix == ".HD":
        return file_path, file_path.with_suffix(".vox")
    if suffix == ".VOX":
        return file_path.with_suffix(".hd"), file_path
    raise FormatError(f"Expected a .hd or .vox file, got {file_path}")


def load_volume_file(field: DensityField, file_path: Union[Path, str]) -> DensityField:
    """Load a volume from a ``.hd``/``.vox`` file pair.

    Args:
        field: Field to populate
        file_path: Path to either the header or the raw file

    Raises:
        FileNotFoundError: If either file of the pair is missing
        FormatError: If the contents cannot be decoded
    """
    header_path, raw_path = volume_file_pair(file_path)
    for path in (header_path, raw_path):
        if not path.exists():
            raise FileNotFoundError(f"Volume file not found: {path}")

    logger.info("Loading volume from %s", raw_path)
    load_from_header_and_raw(field, header_path.read_text(), raw_path.read_bytes())
    logger.info("Loaded %dx%dx%d volume", *field.resolution)
    return field


def export_volume_data(
    field: DensityField,
    raw_path: Union[Path, str],
    header_path: Union[Path, str, None] = None
) -> Tuple[Path, Path]:
    """Write the field as a one-byte-per-voxel dump plus a ``Size WxHxD`` header.

    Args:
        field: Field to export
        raw_path: Output ``.vox`` path
        header_path: Output ``.hd`` path (defaults to ``raw_path`` with ``.hd``)

    Returns:
        Tuple of (raw_path, header_path)
    """
    raw_path = Path(raw_path)
    header_path = Path(header_path) if header_path is not None else raw_path.with_suffix(".hd")
    raw_path.parent.mkdir(parents=True, exist_ok=True)

    quantized = (255.0 * field.values).astype(np.uint8)
    raw_path.write_bytes(quantized.tobytes())

    nx, ny, nz = field.resolution
    header_path.write_text(f"Size {nx}x{ny}x{nz}")

    logger.info("Wrote volume data to %s", raw_path)
    return raw_path, header_path
