"""
Pixel to centimeter calibration from anthropometric reference widths.

The subject's distance from the camera differs between captures, so the
ratios are derived again for every landmark set.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Optional

import numpy as np

from app_config.settings import CalibrationDefaults
from measure.geometry import pixel_distance
from measure.landmarks import keypoint

logger = logging.getLogger(__name__)


def _valid_length(value: Any, default: float) -> float:
    """Return ``value`` as a positive finite float, or ``default``."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(number) or number <= 0:
        return default
    return number


@dataclass(frozen=True)
class CalibrationProfile:
    """Anthropometric widths/lengths in centimeters."""

    head_width_cm: float = CalibrationDefaults.HEAD_WIDTH_CM
    shoulder_width_cm: float = CalibrationDefaults.SHOULDER_WIDTH_CM
    hip_width_cm: float = CalibrationDefaults.HIP_WIDTH_CM
    neck_length_cm: float = CalibrationDefaults.NECK_LENGTH_CM

    @classmethod
    def from_inputs(cls, head_width=None, shoulder_width=None, hip_width=None, neck_length=None):
        """Build a profile, replacing absent or invalid fields with defaults."""
        return cls(
            head_width_cm=_valid_length(head_width, CalibrationDefaults.HEAD_WIDTH_CM),
            shoulder_width_cm=_valid_length(shoulder_width, CalibrationDefaults.SHOULDER_WIDTH_CM),
            hip_width_cm=_valid_length(hip_width, CalibrationDefaults.HIP_WIDTH_CM),
            neck_length_cm=_valid_length(neck_length, CalibrationDefaults.NECK_LENGTH_CM),
        )

    def to_dict(self) -> dict:
        return {
            "head_width_cm": self.head_width_cm,
            "shoulder_width_cm": self.shoulder_width_cm,
            "hip_width_cm": self.hip_width_cm,
            "neck_length_cm": self.neck_length_cm,
        }


@dataclass(frozen=True)
class CalibrationRatios:
    """Centimeters per image unit for each body region of one landmark set.

    A ratio of None means the region's reference landmarks coincide and no
    centimeter value can be derived from it.
    """

    head: Optional[float]
    shoulder: Optional[float]
    hip: Optional[float]
    neck_length_cm: float


def _region_ratio(width_cm: float, point1, point2, region: str) -> Optional[float]:
    distance = pixel_distance(point1, point2)
    if distance < CalibrationDefaults.MIN_REFERENCE_DISTANCE:
        logger.warning("Calibration failed for %s region: reference landmarks coincide", region)
        return None
    return width_cm / distance


def resolve_ratios(profile: CalibrationProfile, keypoints: np.ndarray) -> CalibrationRatios:
    """Derive the head, shoulder and hip ratios for one landmark set."""
    return CalibrationRatios(
        head=_region_ratio(
            profile.head_width_cm,
            keypoint(keypoints, 'left_ear'),
            keypoint(keypoints, 'right_ear'),
            "head",
        ),
        shoulder=_region_ratio(
            profile.shoulder_width_cm,
            keypoint(keypoints, 'left_shoulder'),
            keypoint(keypoints, 'right_shoulder'),
            "shoulder",
        ),
        hip=_region_ratio(
            profile.hip_width_cm,
            keypoint(keypoints, 'left_hip'),
            keypoint(keypoints, 'right_hip'),
            "hip",
        ),
        neck_length_cm=profile.neck_length_cm,
    )


def neck_ratio(neck_length_cm: float, vertical_span: float) -> float:
    """Ratio for side-view forward distances, from the neck's vertical span."""
    if abs(vertical_span) < CalibrationDefaults.MIN_REFERENCE_DISTANCE:
        return CalibrationDefaults.FALLBACK_NECK_RATIO
    return neck_length_cm / abs(vertical_span)


def to_cm(distance: float, ratio: Optional[float]) -> Optional[float]:
    """Convert an image distance to centimeters; None when uncalibrated."""
    if ratio is None:
        return None
    return distance * ratio


class CalibrationStore:
    """Holds the calibration profile of the current in-memory session."""

    def __init__(self, profile: Optional[CalibrationProfile] = None):
        self._profile = profile or CalibrationProfile()

    @property
    def profile(self) -> CalibrationProfile:
        return self._profile

    def set_calibration(self, head_width=None, shoulder_width=None, hip_width=None, neck_length=None):
        """Replace all four values at once; invalid values fall back to defaults."""
        self._profile = CalibrationProfile.from_inputs(head_width, shoulder_width, hip_width, neck_length)
        logger.info("Calibration updated: %s", self._profile.to_dict())
        return self._profile

    def reset(self) -> CalibrationProfile:
        self._profile = CalibrationProfile()
        return self._profile


def set_calibration(head_width=None, shoulder_width=None, hip_width=None, neck_length=None) -> CalibrationProfile:
    """Build a calibration profile from user input with per-field fallback."""
    return CalibrationProfile.from_inputs(head_width, shoulder_width, hip_width, neck_length)
