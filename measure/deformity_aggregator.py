"""
Aggregation of per-view deformities into a structured summary.
"""

import logging
from typing import Iterable, List, Optional

from app_config.settings import BilateralTolerances
from models.schemas import (
    BilateralComparison,
    BodySide,
    DeformitySummary,
    DeformityType,
    JointDeformity,
    JointDirection,
    KneeAnalysis,
    KneeReading,
    LimbPair,
    SagittalDeformity,
    ViewResult,
)

logger = logging.getLogger(__name__)

# Side view metric -> (report label, tolerance in degrees)
BILATERAL_METRICS = (
    ('forward_neck', 'Forward Neck', BilateralTolerances.FORWARD_NECK_DEG),
    ('thoracic_curvature', 'Thoracic Curvature', BilateralTolerances.CURVATURE_DEG),
    ('lumbar_curvature', 'Lumbar Curvature', BilateralTolerances.CURVATURE_DEG),
    ('left_knee_position', 'Left Knee Position', BilateralTolerances.KNEE_DEG),
    ('right_knee_position', 'Right Knee Position', BilateralTolerances.KNEE_DEG),
)

FRONT_KNEE_TYPES = {
    BodySide.LEFT: DeformityType.LEFT_KNEE_MALALIGNMENT,
    BodySide.RIGHT: DeformityType.RIGHT_KNEE_MALALIGNMENT,
}

SIDE_KNEE_TYPES = {
    BodySide.LEFT: DeformityType.LEFT_KNEE_SAGITTAL,
    BodySide.RIGHT: DeformityType.RIGHT_KNEE_SAGITTAL,
}


def _analyzed(result: Optional[ViewResult]) -> bool:
    return result is not None and result.analyzed


def _knee_reading(result: ViewResult, limb: BodySide, key_suffix: str, deformity_type) -> Optional[KneeReading]:
    angle = result.measurements.get(f"{limb.value.lower()}_{key_suffix}")
    if angle is None:
        return None
    direction = JointDirection.NEUTRAL
    for deformity in result.deformities:
        if isinstance(deformity, JointDeformity) and deformity.type == deformity_type:
            direction = deformity.direction
            break
    return KneeReading(angle=angle, direction=direction)


def compare_bilateral(left_view: ViewResult, right_view: ViewResult) -> List[BilateralComparison]:
    """Left vs right side view differences above the metric tolerances."""
    comparisons = []
    for key, label, tolerance in BILATERAL_METRICS:
        left_value = left_view.measurements.get(key)
        right_value = right_view.measurements.get(key)
        if left_value is None or right_value is None:
            continue
        difference = abs(left_value - right_value)
        if difference <= tolerance:
            continue
        comparisons.append(
            BilateralComparison(
                type=label,
                more_severe=BodySide.LEFT if left_value > right_value else BodySide.RIGHT,
                left_value=left_value,
                right_value=right_value,
                difference=round(difference, 1),
            )
        )
    return comparisons


def aggregate_deformities(
    front: Optional[ViewResult] = None,
    back: Optional[ViewResult] = None,
    side_results: Optional[Iterable[ViewResult]] = None,
) -> DeformitySummary:
    """Merge per-view deformities into a DeformitySummary.

    Args:
        front: Front view result
        back: Back view result
        side_results: Side view results; a view's ``side`` tag labels its
            sagittal deformities

    Returns:
        DeformitySummary. Sections whose views are absent stay empty/None.
    """
    summary = DeformitySummary()

    # 1. Frontal plane: front and back views
    for result in (front, back):
        if _analyzed(result):
            summary.frontal_plane.extend(result.deformities)

    # 2. Sagittal plane: every side view, tagged with its side
    sides = [result for result in (side_results or []) if _analyzed(result)]
    for result in sides:
        for deformity in result.deformities:
            summary.sagittal_plane.append(SagittalDeformity(side=result.side, deformity=deformity))

    # 3. Bilateral comparison needs both a left and a right side view
    left_view = next((result for result in sides if result.side == BodySide.LEFT), None)
    right_view = next((result for result in sides if result.side == BodySide.RIGHT), None)
    if left_view is not None and right_view is not None:
        summary.bilateral_comparison = compare_bilateral(left_view, right_view)

    # 4. Knee analysis
    knee_analysis = KneeAnalysis()
    if _analyzed(front):
        knee_analysis.front = LimbPair(
            left=_knee_reading(front, BodySide.LEFT, 'knee_alignment', FRONT_KNEE_TYPES[BodySide.LEFT]),
            right=_knee_reading(front, BodySide.RIGHT, 'knee_alignment', FRONT_KNEE_TYPES[BodySide.RIGHT]),
        )
    if sides:
        # Each limb is read from the side view photographing it, else from any side view
        limbs = {}
        for limb in (BodySide.LEFT, BodySide.RIGHT):
            source = next((result for result in sides if result.side == limb), sides[0])
            limbs[limb] = _knee_reading(source, limb, 'knee_position', SIDE_KNEE_TYPES[limb])
        knee_analysis.side = LimbPair(left=limbs[BodySide.LEFT], right=limbs[BodySide.RIGHT])
    summary.knee_analysis = knee_analysis

    logger.debug(
        "Deformities aggregated: %d frontal, %d sagittal, bilateral=%s",
        len(summary.frontal_plane),
        len(summary.sagittal_plane),
        "n/a" if summary.bilateral_comparison is None else len(summary.bilateral_comparison),
    )
    return summary
