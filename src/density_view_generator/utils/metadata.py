"""Manifest generation for exported view datasets."""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Any

import numpy as np


@dataclass
class FrameRecord:
    """A single captured view: image path relative to the output dir and its pose."""

    file_path: str
    transform_matrix: np.ndarray

    def to_dict(self) -> Dict[str, Any]:
        return {
            "file_path": self.file_path,
            "transform_matrix": np.asarray(self.transform_matrix, dtype=float).tolist(),
        }


@dataclass
class DatasetManifest:
    """Global capture parameters plus the ordered frame records.

    Attributes:
        y_fov: Vertical field of view in degrees
        x_fov: Horizontal field of view in degrees
        width: Image width in pixels
        height: Image height in pixels
        aabb_scale: Scene bounding box scale consumed by NeRF trainers
        frames: Frame records in capture order
    """

    y_fov: float
    x_fov: float
    width: int
    height: int
    aabb_scale: float = 2.0
    frames: List[FrameRecord] = field(default_factory=list)

    def append(self, file_path: str, transform_matrix: np.ndarray):
        self.frames.append(FrameRecord(file_path, np.asarray(transform_matrix, dtype=float)))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "y_fov": float(self.y_fov),
            "x_fov": float(self.x_fov),
            "w": int(self.width),
            "h": int(self.height),
            "aabb_scale": float(self.aabb_scale),
            "frames": [frame.to_dict() for frame in self.frames],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DatasetManifest":
        return cls(
            y_fov=data["y_fov"],
            x_fov=data["x_fov"],
            width=data["w"],
            height=data["h"],
            aabb_scale=data.get("aabb_scale", 2.0),
            frames=[
                FrameRecord(f["file_path"], np.array(f["transform_matrix"], dtype=float))
                for f in data.get("frames", [])
            ],
        )


class ManifestWriter:
    """Handles reading and writing of transforms.json manifests."""

    @staticmethod
    def write_manifest(output_path: Path, manifest: DatasetManifest):
        """Write the manifest as pretty-printed UTF-8 JSON.

        Args:
            output_path: Path to transforms.json
            manifest: Manifest to serialize
        """
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(manifest.to_dict(), f, indent=2)

    @staticmethod
    def read_manifest(input_path: Path) -> DatasetManifest:
        """Read a manifest back from JSON.

        Args:
            input_path: Path to transforms.json

        Returns:
            Parsed manifest
        """
        with open(input_path, "r", encoding="utf-8") as f:
            return DatasetManifest.from_dict(json.load(f))
