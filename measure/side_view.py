"""
Side view (sagittal plane) posture analysis.

Which way the subject faces is read from the nose relative to the ear, so
left and right side photographs are handled the same way.
"""

import logging
from typing import Any, Optional

from app_config.settings import ClinicalThresholds as T, CurvatureBaselines
from measure.calibration import CalibrationProfile, neck_ratio
from measure.geometry import lateral_reference, midpoint, oriented_joint_angle, vertical_deviation
from measure.landmarks import as_landmark_array, keypoint
from measure.view_common import (
    ViewResultBuilder,
    check_joint,
    empty_result,
    format_cm,
    round_measurement,
)
from models.schemas import (
    BodySide,
    CurvatureDirection,
    DeformityType,
    JointDirection,
    OffsetDeformity,
    OffsetDirection,
    ShoulderPosition,
    ViewResult,
    ViewType,
)

logger = logging.getLogger(__name__)

RECOMMENDATIONS = {
    'forward_neck': [
        '• Deep neck flexor strengthening (chin tucks)',
        '• Improve head and neck alignment at workstation',
    ],
    'chin_forward': [
        '• Chin tuck and upper cervical flexion drills',
        '• Suboccipital release',
    ],
    'rounded': [
        '• Pectoral stretching and thoracic extension mobility',
        '• Lower trapezius and rhomboid strengthening',
    ],
    'retracted': [
        '• Serratus anterior strengthening',
        '• Avoid sustained scapular bracing',
    ],
    'thoracic_excessive': [
        '• Thoracic extension mobility exercises',
        '• Postural endurance training for spinal extensors',
    ],
    'thoracic_reduced': [
        '• Thoracic mobility exercises (cat-camel)',
        '• Segmental spinal mobility training',
    ],
    'lumbar_excessive': [
        '• Hip flexor stretching',
        '• Core and gluteal strengthening (posterior pelvic tilt control)',
    ],
    'lumbar_reduced': [
        '• Lumbar extension mobility exercises',
        '• Hamstring flexibility training',
    ],
    'knee': [
        '• Knee alignment retraining in standing',
        '• Quadriceps and hamstring balance exercises',
    ],
    'ankle': [
        '• Ankle mobility and strengthening exercises',
        '• Calf stretching and dorsiflexion training',
    ],
}


def _trunk_points(keypoints, side: Optional[BodySide]):
    """Ear, shoulder and hip of the photographed side, or averaged for both."""
    if side is None:
        return (
            midpoint(keypoint(keypoints, 'left_ear'), keypoint(keypoints, 'right_ear')),
            midpoint(keypoint(keypoints, 'left_shoulder'), keypoint(keypoints, 'right_shoulder')),
            midpoint(keypoint(keypoints, 'left_hip'), keypoint(keypoints, 'right_hip')),
        )
    prefix = side.value.lower()
    return (
        keypoint(keypoints, f'{prefix}_ear'),
        keypoint(keypoints, f'{prefix}_shoulder'),
        keypoint(keypoints, f'{prefix}_hip'),
    )


def _curvature(proximal, joint, distal, baseline: float, bow_direction: float) -> float:
    """Curvature estimate: baseline plus the chain's bow at ``joint``.

    The bow counts positive when the joint lies on the ``bow_direction`` side
    (+1 anterior, -1 posterior in image x) of the proximal-distal line.
    """
    reference = lateral_reference(proximal, distal, bow_direction)
    bow = 180.0 - oriented_joint_angle(proximal, joint, distal, reference)
    return min(max(baseline + bow, 0.0), 180.0)


def _check_curvature(builder, key, value, normal_range, deformity_type, label, recommendations):
    builder.measure(key, value)
    low, high = normal_range
    if low <= value <= high:
        return
    if value > high:
        direction = CurvatureDirection.EXCESSIVE
        advice = recommendations['excessive']
    else:
        direction = CurvatureDirection.REDUCED
        advice = recommendations['reduced']
    builder.flag(
        f"{label}: {value:.1f}° {direction.value.lower()} (Normal: {low:g}-{high:g}°)",
        advice,
        OffsetDeformity(
            type=deformity_type,
            direction=direction,
            angle=round_measurement(value),
        ),
    )


def analyze_side_view(
    landmarks: Any,
    calibration: Optional[CalibrationProfile] = None,
    side: Optional[BodySide] = None,
) -> ViewResult:
    """Analyze sagittal plane alignment from a side view landmark set.

    Args:
        landmarks: Landmark set ([N, 2] array or sequence of points), or None
        calibration: Anthropometric profile; the neck length scales the
            forward head distances
        side: Physical side photographed (LEFT/RIGHT); None averages both sides

    Returns:
        ViewResult tagged with ``side``
    """
    keypoints = as_landmark_array(landmarks)
    if keypoints is None:
        return empty_result(ViewType.SIDE, side)

    calibration = calibration or CalibrationProfile()
    builder = ViewResultBuilder(ViewType.SIDE, side)

    ear, shoulder, hip = _trunk_points(keypoints, side)
    nose = keypoint(keypoints, 'nose')
    anterior = 1.0 if nose[0] >= ear[0] else -1.0

    ratio = neck_ratio(calibration.neck_length_cm, ear[1] - shoulder[1])

    # 1. Forward neck (ear off the vertical through the shoulder)
    neck_angle = vertical_deviation(shoulder, ear)
    neck_cm = abs(ear[0] - shoulder[0]) * ratio
    builder.measure('forward_neck', neck_angle)
    builder.measure('forward_neck_cm', neck_cm)
    if neck_angle > T.FORWARD_NECK_DEG or neck_cm > T.FORWARD_NECK_CM:
        builder.flag(
            f"Forward neck posture: {neck_angle:.1f}°{format_cm(neck_cm)} forward "
            f"(Normal: <{T.FORWARD_NECK_DEG:g}°)",
            RECOMMENDATIONS['forward_neck'],
            OffsetDeformity(
                type=DeformityType.FORWARD_HEAD_POSTURE,
                direction=OffsetDirection.ANTERIOR,
                angle=round_measurement(neck_angle),
                distance_cm=round_measurement(neck_cm),
            ),
        )

    # 2. Chin forward (nose off the vertical through the shoulder)
    chin_angle = vertical_deviation(shoulder, nose)
    chin_cm = abs(nose[0] - shoulder[0]) * ratio
    builder.measure('chin_forward', chin_angle)
    builder.measure('chin_forward_cm', chin_cm)
    if chin_angle > T.CHIN_FORWARD_DEG or chin_cm > T.CHIN_FORWARD_CM:
        builder.flag(
            f"Chin forward posture: {chin_angle:.1f}°{format_cm(chin_cm)} forward "
            f"(Normal: <{T.CHIN_FORWARD_DEG:g}°)",
            RECOMMENDATIONS['chin_forward'],
            OffsetDeformity(
                type=DeformityType.CHIN_FORWARD_POSTURE,
                direction=OffsetDirection.ANTERIOR,
                angle=round_measurement(chin_angle),
                distance_cm=round_measurement(chin_cm),
            ),
        )

    # 3. Shoulder position relative to the vertical through the hip
    shoulder_angle = vertical_deviation(hip, shoulder)
    builder.measure('shoulder_position', shoulder_angle)
    if shoulder_angle > T.SHOULDER_SAGITTAL_DEG:
        if (shoulder[0] - hip[0]) * anterior > 0:
            position, advice = ShoulderPosition.ROUNDED, RECOMMENDATIONS['rounded']
        else:
            position, advice = ShoulderPosition.RETRACTED, RECOMMENDATIONS['retracted']
        builder.flag(
            f"Shoulder position: {shoulder_angle:.1f}° {position.value.lower()} "
            f"(Normal: <{T.SHOULDER_SAGITTAL_DEG:g}°)",
            advice,
            OffsetDeformity(
                type=DeformityType.SHOULDER_SAGITTAL_POSITION,
                direction=position,
                angle=round_measurement(shoulder_angle),
            ),
        )

    # 4. Thoracic curvature: kyphosis grows as the shoulder bows posteriorly
    thoracic = _curvature(ear, shoulder, hip, CurvatureBaselines.THORACIC_DEG, -anterior)
    _check_curvature(
        builder, 'thoracic_curvature', thoracic, T.THORACIC_RANGE,
        DeformityType.THORACIC_KYPHOSIS, 'Thoracic kyphosis',
        {'excessive': RECOMMENDATIONS['thoracic_excessive'], 'reduced': RECOMMENDATIONS['thoracic_reduced']},
    )

    # 5. Lumbar curvature: lordosis grows as the hip bows posteriorly
    knee_mid = midpoint(keypoint(keypoints, 'left_knee'), keypoint(keypoints, 'right_knee'))
    lumbar = _curvature(shoulder, hip, knee_mid, CurvatureBaselines.LUMBAR_DEG, -anterior)
    _check_curvature(
        builder, 'lumbar_curvature', lumbar, T.LUMBAR_RANGE,
        DeformityType.LUMBAR_LORDOSIS, 'Lumbar lordosis',
        {'excessive': RECOMMENDATIONS['lumbar_excessive'], 'reduced': RECOMMENDATIONS['lumbar_reduced']},
    )

    # 6. Knee flexion/hyperextension per limb, inward = anterior
    for limb, prefix, deformity_type in (
        (BodySide.LEFT, 'left', DeformityType.LEFT_KNEE_SAGITTAL),
        (BodySide.RIGHT, 'right', DeformityType.RIGHT_KNEE_SAGITTAL),
    ):
        hip_point = keypoint(keypoints, f'{prefix}_hip')
        ankle_point = keypoint(keypoints, f'{prefix}_ankle')
        check_joint(
            builder, f'{prefix}_knee_position', limb,
            hip_point, keypoint(keypoints, f'{prefix}_knee'), ankle_point,
            lateral_reference(hip_point, ankle_point, anterior),
            T.KNEE_SAGITTAL_DEG, JointDirection.FLEXION, JointDirection.HYPEREXTENSION,
            deformity_type, 'Knee sagittal alignment', RECOMMENDATIONS['knee'],
        )

    # 7. Ankle positioning: lower leg (knee to ankle midpoints) from vertical
    ankle_mid = midpoint(keypoint(keypoints, 'left_ankle'), keypoint(keypoints, 'right_ankle'))
    ankle_angle = vertical_deviation(knee_mid, ankle_mid)
    builder.measure('ankle_position', ankle_angle)
    if ankle_angle > T.ANKLE_SAGITTAL_DEG:
        if (ankle_mid[0] - knee_mid[0]) * anterior > 0:
            direction = OffsetDirection.ANTERIOR
        else:
            direction = OffsetDirection.POSTERIOR
        builder.flag(
            f"Ankle positioning deviation: {ankle_angle:.1f}° from vertical, ankle "
            f"{direction.value.lower()} of the knee (Normal: <{T.ANKLE_SAGITTAL_DEG:g}°)",
            RECOMMENDATIONS['ankle'],
            OffsetDeformity(
                type=DeformityType.ANKLE_SAGITTAL_POSITION,
                direction=direction,
                angle=round_measurement(ankle_angle),
            ),
        )

    result = builder.build()
    logger.debug("Side view (%s) analyzed: %d issue(s)", side.value if side else "untagged", len(result.issues))
    return result
