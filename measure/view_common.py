"""
Building blocks shared by the front, side and back view analyzers.
"""

from typing import Iterable, List, Optional, Tuple

from measure.calibration import to_cm
from measure.geometry import oriented_joint_angle, slope_deviation
from models.schemas import (
    AsymmetryDeformity,
    BodySide,
    DeformityType,
    JointDeformity,
    JointDirection,
    ViewResult,
    ViewType,
)


def empty_result(view: ViewType, side: Optional[BodySide] = None) -> ViewResult:
    """Result for a view that has no landmark set."""
    return ViewResult(view=view, side=side)


def round_measurement(value: Optional[float]) -> Optional[float]:
    if value is None:
        return None
    return round(float(value), 1)


def format_cm(distance_cm: Optional[float]) -> str:
    if distance_cm is None:
        return ""
    return f", {distance_cm:.1f} cm"


class ViewResultBuilder:
    """Collects measurements, issues, recommendations and deformities of one view."""

    def __init__(self, view: ViewType, side: Optional[BodySide] = None):
        self.view = view
        self.side = side
        self.measurements = {}
        self.issues: List[str] = []
        self.recommendations: List[str] = []
        self.deformities = []

    def measure(self, key: str, value: Optional[float]) -> None:
        self.measurements[key] = round_measurement(value)

    def flag(self, issue: str, recommendations: Iterable[str], deformity=None) -> None:
        self.issues.append(issue)
        for recommendation in recommendations:
            if recommendation not in self.recommendations:
                self.recommendations.append(recommendation)
        if deformity is not None:
            self.deformities.append(deformity)

    def build(self) -> ViewResult:
        return ViewResult(
            view=self.view,
            side=self.side,
            analyzed=True,
            is_normal=not self.issues,
            measurements=self.measurements,
            issues=self.issues,
            recommendations=self.recommendations,
            deformities=self.deformities,
        )


def check_level(
    builder: ViewResultBuilder,
    key: str,
    left,
    right,
    ratio: Optional[float],
    max_degrees: float,
    max_cm: Optional[float],
    deformity_type: DeformityType,
    label: str,
    recommendations: Iterable[str],
) -> None:
    """Height asymmetry of a left/right landmark pair.

    Records ``key`` (tilt from horizontal) and ``key_cm`` (vertical offset in
    cm, None when the region is uncalibrated). The landmark with the smaller
    y coordinate is the elevated one. With ``max_cm`` None only the angle
    is thresholded.
    """
    angle = slope_deviation(left, right)
    distance_cm = to_cm(abs(left[1] - right[1]), ratio)
    builder.measure(key, angle)
    builder.measure(f"{key}_cm", distance_cm)

    abnormal = angle > max_degrees or (
        max_cm is not None and distance_cm is not None and distance_cm > max_cm
    )
    if not abnormal:
        return

    if left[1] < right[1]:
        elevated, depressed = BodySide.LEFT, BodySide.RIGHT
    else:
        elevated, depressed = BodySide.RIGHT, BodySide.LEFT

    builder.flag(
        f"{label}: {angle:.1f}° tilt{format_cm(distance_cm)}, "
        f"{elevated.value.lower()} side elevated (Normal: <{max_degrees:g}°)",
        recommendations,
        AsymmetryDeformity(
            type=deformity_type,
            elevated_side=elevated,
            depressed_side=depressed,
            angle=round_measurement(angle),
            distance_cm=round_measurement(distance_cm),
        ),
    )


def classify_joint(
    joint_angle: float,
    max_deviation: float,
    inward: JointDirection,
    outward: JointDirection,
) -> Tuple[float, JointDirection]:
    """Deviation from a straight joint and its direction.

    ``joint_angle`` is on the 0-360 scale of ``oriented_joint_angle``; below
    180 maps to ``inward``, above 180 to ``outward``.
    """
    deviation = abs(180.0 - joint_angle)
    if deviation <= max_deviation:
        return deviation, JointDirection.NEUTRAL
    if joint_angle < 180.0:
        return deviation, inward
    return deviation, outward


def check_joint(
    builder: ViewResultBuilder,
    key: str,
    side: BodySide,
    proximal,
    joint,
    distal,
    reference,
    max_deviation: float,
    inward: JointDirection,
    outward: JointDirection,
    deformity_type: DeformityType,
    label: str,
    recommendations: Iterable[str],
) -> JointDirection:
    """Alignment of one limb joint relative to the proximal-distal line.

    ``reference`` marks the side that counts as inward (body midline in the
    frontal plane, the facing direction in the sagittal plane).
    """
    joint_angle = oriented_joint_angle(proximal, joint, distal, reference)
    deviation, direction = classify_joint(joint_angle, max_deviation, inward, outward)
    builder.measure(key, deviation)

    if direction != JointDirection.NEUTRAL:
        builder.flag(
            f"{label}: {side.value.lower()} {deviation:.1f}° {direction.value.lower()} "
            f"(Normal: <{max_deviation:g}°)",
            recommendations,
            JointDeformity(
                type=deformity_type,
                side=side,
                direction=direction,
                angle=round_measurement(deviation),
            ),
        )
    return direction
