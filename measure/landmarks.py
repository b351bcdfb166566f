"""
MediaPipe pose landmark indices and landmark-set coercion.
"""

from typing import Any, Mapping, Optional

import numpy as np

from app_config.settings import APIConfig

# MediaPipe pose landmark indices
KEYPOINT_INDICES = {
    'nose': 0,
    'left_eye_inner': 1,
    'left_eye': 2,
    'left_eye_outer': 3,
    'right_eye_inner': 4,
    'right_eye': 5,
    'right_eye_outer': 6,
    'left_ear': 7,
    'right_ear': 8,
    'mouth_left': 9,
    'mouth_right': 10,
    'left_shoulder': 11,
    'right_shoulder': 12,
    'left_elbow': 13,
    'right_elbow': 14,
    'left_wrist': 15,
    'right_wrist': 16,
    'left_pinky': 17,
    'right_pinky': 18,
    'left_index': 19,
    'right_index': 20,
    'left_thumb': 21,
    'right_thumb': 22,
    'left_hip': 23,
    'right_hip': 24,
    'left_knee': 25,
    'right_knee': 26,
    'left_ankle': 27,
    'right_ankle': 28,
    'left_heel': 29,
    'right_heel': 30,
    'left_foot_index': 31,
    'right_foot_index': 32
}


def _coerce_point(point: Any) -> list:
    if isinstance(point, Mapping):
        return [float(point["x"]), float(point["y"])]
    if hasattr(point, "x") and hasattr(point, "y"):
        return [float(point.x), float(point.y)]
    return [float(point[0]), float(point[1])]


def as_landmark_array(landmarks: Any) -> Optional[np.ndarray]:
    """Convert a landmark set to an ``[N, 2]`` float array.

    Accepts numpy arrays, sequences of ``[x, y]`` pairs, mappings with
    ``x``/``y`` keys or objects with ``x``/``y`` attributes.

    Returns:
        The array, or None when the landmark set is absent or empty.

    Raises:
        ValueError: If the set is non-empty but has fewer points than the pose
            model produces.
    """
    if landmarks is None:
        return None

    if isinstance(landmarks, np.ndarray):
        if landmarks.size == 0:
            return None
        keypoints = np.asarray(landmarks, dtype=float)
        if keypoints.ndim != 2 or keypoints.shape[1] < 2:
            raise ValueError(f"Landmark array must have shape [N, 2], got {keypoints.shape}")
        keypoints = keypoints[:, :2]
    else:
        if len(landmarks) == 0:
            return None
        keypoints = np.array([_coerce_point(point) for point in landmarks], dtype=float)

    if len(keypoints) < APIConfig.MIN_LANDMARKS:
        raise ValueError(
            f"Landmark set must contain {APIConfig.MIN_LANDMARKS} points, got {len(keypoints)}"
        )
    if not np.all(np.isfinite(keypoints)):
        raise ValueError("Landmark coordinates must be finite numbers")

    return keypoints


def keypoint(keypoints: np.ndarray, name: str) -> np.ndarray:
    """Coordinates of a named landmark."""
    return keypoints[KEYPOINT_INDICES[name]]
