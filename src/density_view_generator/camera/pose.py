"""Per-capture camera frames and NeRF-convention pose matrices."""

import math
from dataclasses import dataclass, field
from typing import Sequence, Tuple

import numpy as np

WORLD_UP = np.array([0.0, 1.0, 0.0])
FALLBACK_UP = np.array([0.0, 0.0, 1.0])


def _normalize(v: np.ndarray) -> np.ndarray:
    norm = np.linalg.norm(v)
    if norm == 0:
        raise ValueError("Cannot normalize a zero-length vector")
    return v / norm


def camera_basis(
    eye: Sequence[float],
    focus: Sequence[float],
    up: Sequence[float]
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Orthonormal (forward, right, up) basis of a look-at camera.

    Args:
        eye: Camera position
        focus: Point the camera looks at
        up: Approximate up direction

    Returns:
        Tuple of (forward, right, up) unit vectors
    """
    forward = _normalize(np.asarray(focus, dtype=np.float64) - np.asarray(eye, dtype=np.float64))
    right = _normalize(np.cross(forward, np.asarray(up, dtype=np.float64)))
    upward = _normalize(np.cross(right, forward))
    return forward, right, upward


def pose_matrix(eye: Sequence[float], focus: Sequence[float], up: Sequence[float]) -> np.ndarray:
    """Camera-to-world matrix in the axis convention of NeRF transforms.json files.

    The camera looks along -Z with +Y up, and the world y/z axes are remapped
    so the exported poses are z-up.
    """
    forward, right, upward = camera_basis(eye, focus, up)
    eye = np.asarray(eye, dtype=np.float64)
    return np.array([
        [right[0], upward[0], -forward[0], eye[0]],
        [-right[2], -upward[2], forward[2], -eye[2]],
        [right[1], upward[1], -forward[1], eye[1]],
        [0.0, 0.0, 0.0, 1.0],
    ])


@dataclass
class CameraFrame:
    """Camera state for a single capture.

    Attributes:
        eye: Camera position
        focus: Point the camera looks at
        view_up: Requested up direction (not necessarily orthogonal to the view)
        y_fov: Vertical field of view in degrees
        extent_at_focus: Vertical world extent visible at the focus distance
        zoom: Zoom factor applied for this frame
        pan: Pan offset (dx, dy) applied for this frame
    """

    eye: np.ndarray
    focus: np.ndarray
    view_up: np.ndarray
    y_fov: float
    extent_at_focus: float
    zoom: float = 1.0
    pan: Tuple[float, float] = (0.0, 0.0)
    basis: Tuple[np.ndarray, np.ndarray, np.ndarray] = field(init=False, repr=False)

    def __post_init__(self):
        self.eye = np.asarray(self.eye, dtype=np.float64)
        self.focus = np.asarray(self.focus, dtype=np.float64)
        self.view_up = np.asarray(self.view_up, dtype=np.float64)
        self.basis = camera_basis(self.eye, self.focus, self.view_up)

    @classmethod
    def look_along(
        cls,
        view_dir: Sequence[float],
        focus: Sequence[float],
        y_fov: float,
        extent_at_focus: float,
        view_up: Sequence[float] = WORLD_UP,
        zoom: float = 1.0
    ) -> "CameraFrame":
        """Place the eye behind ``focus`` along ``view_dir``.

        The eye distance is chosen so that ``extent_at_focus`` spans the
        vertical field of view. A view direction parallel to ``view_up``
        falls back to +Z as up.
        """
        view_dir = _normalize(np.asarray(view_dir, dtype=np.float64))
        focus = np.asarray(focus, dtype=np.float64)
        view_up = np.asarray(view_up, dtype=np.float64)
        if np.linalg.norm(np.cross(view_dir, view_up)) < 1e-6:
            view_up = FALLBACK_UP

        distance = extent_at_focus / (2.0 * math.tan(math.radians(y_fov) * 0.5))
        eye = focus - view_dir * distance
        return cls(eye, focus, view_up, y_fov, extent_at_focus, zoom=zoom)

    @property
    def forward(self) -> np.ndarray:
        return self.basis[0]

    @property
    def right(self) -> np.ndarray:
        return self.basis[1]

    @property
    def up(self) -> np.ndarray:
        return self.basis[2]

    @property
    def focus_distance(self) -> float:
        return float(np.linalg.norm(self.focus - self.eye))

    def panned(self, dx: float, dy: float) -> "CameraFrame":
        """Copy of this frame with eye and focus shifted in the image plane."""
        shift = dx * self.right + dy * self.up
        return CameraFrame(
            self.eye + shift,
            self.focus + shift,
            self.view_up,
            self.y_fov,
            self.extent_at_focus,
            zoom=self.zoom,
            pan=(self.pan[0] + dx, self.pan[1] + dy),
        )

    def pose_matrix(self) -> np.ndarray:
        """4x4 camera-to-world pose for the manifest."""
        return pose_matrix(self.eye, self.focus, self.view_up)
