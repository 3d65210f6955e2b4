"""Camera framing, sampling and pose computation."""

from .framing import ViewFramer, frame_extent, horizontal_fov
from .sampling import ViewSampler
from .pose import CameraFrame, camera_basis, pose_matrix, WORLD_UP

__all__ = [
    "ViewFramer",
    "frame_extent",
    "horizontal_fov",
    "ViewSampler",
    "CameraFrame",
    "camera_basis",
    "pose_matrix",
    "WORLD_UP",
]
