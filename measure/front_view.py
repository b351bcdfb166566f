"""
Front view (frontal plane) posture analysis.
"""

import logging
from typing import Any, Optional

from app_config.settings import ClinicalThresholds as T
from measure.calibration import CalibrationProfile, resolve_ratios, to_cm
from measure.geometry import midpoint, vertical_deviation
from measure.landmarks import as_landmark_array, keypoint
from measure.view_common import (
    ViewResultBuilder,
    check_joint,
    check_level,
    empty_result,
    format_cm,
    round_measurement,
)
from models.schemas import (
    BodySide,
    DeformityType,
    JointDirection,
    OffsetDeformity,
    OffsetDirection,
    ViewResult,
    ViewType,
)

logger = logging.getLogger(__name__)

RECOMMENDATIONS = {
    'ear': [
        '• Cervical lateral flexion stretching exercises',
        '• Upper trapezius and levator scapulae release',
    ],
    'neck': [
        '• Cervical lateral flexion stretching exercises',
        '• Address muscle imbalances in neck and upper trapezius',
    ],
    'shoulder': [
        '• Strengthen weaker shoulder stabilizers',
        '• Check for scoliosis or leg length discrepancy',
    ],
    'elbow': [
        '• Address upper extremity length discrepancies',
        '• Evaluate shoulder girdle alignment',
    ],
    'pelvis': [
        '• Assess for leg length discrepancy',
        '• Strengthen hip abductors and core stabilizers',
    ],
    'knee': [
        '• Hip abductor strengthening exercises',
        '• Address foot pronation/supination patterns',
    ],
    'knee_height': [
        '• Assess for leg length discrepancy',
        '• Evaluate knee and ankle alignment under load',
    ],
    'ankle_height': [
        '• Assess for ankle mobility restrictions',
        '• Check for previous ankle injuries or compensation patterns',
    ],
}


def analyze_front_view(landmarks: Any, calibration: Optional[CalibrationProfile] = None) -> ViewResult:
    """Analyze frontal plane alignment from a front view landmark set.

    Args:
        landmarks: Landmark set ([N, 2] array or sequence of points), or None
        calibration: Anthropometric profile used for centimeter values

    Returns:
        ViewResult; empty and un-analyzed when no landmarks are given
    """
    keypoints = as_landmark_array(landmarks)
    if keypoints is None:
        return empty_result(ViewType.FRONT)

    calibration = calibration or CalibrationProfile()
    ratios = resolve_ratios(calibration, keypoints)
    builder = ViewResultBuilder(ViewType.FRONT)

    # 1. Ear pinnae level
    check_level(
        builder, 'ear_pinnae_level',
        keypoint(keypoints, 'left_ear'), keypoint(keypoints, 'right_ear'),
        ratios.head, T.EAR_LEVEL_DEG, T.EAR_LEVEL_CM,
        DeformityType.EAR_PINNAE_ASYMMETRY, 'Ear pinnae asymmetry', RECOMMENDATIONS['ear'],
    )

    # 2. Neck lateral deviation from the vertical through the shoulder midpoint
    nose = keypoint(keypoints, 'nose')
    left_shoulder = keypoint(keypoints, 'left_shoulder')
    right_shoulder = keypoint(keypoints, 'right_shoulder')
    shoulder_mid = midpoint(left_shoulder, right_shoulder)

    neck_angle = vertical_deviation(shoulder_mid, nose)
    neck_offset = nose[0] - shoulder_mid[0]
    neck_cm = to_cm(abs(neck_offset), ratios.shoulder)
    builder.measure('neck_lateral_deviation', neck_angle)
    builder.measure('neck_lateral_deviation_cm', neck_cm)

    if neck_angle > T.NECK_LATERAL_DEG or (neck_cm is not None and neck_cm > T.NECK_LATERAL_CM):
        # Image x is mirrored in a front view, so compare with the left shoulder
        towards_left = neck_offset * (left_shoulder[0] - shoulder_mid[0]) > 0
        direction = OffsetDirection.LEFT if towards_left else OffsetDirection.RIGHT
        builder.flag(
            f"Cervical lateral deviation: {neck_angle:.1f}°{format_cm(neck_cm)} "
            f"to the {direction.value.lower()} (Normal: <{T.NECK_LATERAL_DEG:g}°)",
            RECOMMENDATIONS['neck'],
            OffsetDeformity(
                type=DeformityType.NECK_LATERAL_DEVIATION,
                direction=direction,
                angle=round_measurement(neck_angle),
                distance_cm=round_measurement(neck_cm),
            ),
        )

    # 3. Shoulder level
    check_level(
        builder, 'shoulder_level', left_shoulder, right_shoulder,
        ratios.shoulder, T.SHOULDER_LEVEL_DEG, T.SHOULDER_LEVEL_CM,
        DeformityType.SHOULDER_ASYMMETRY, 'Shoulder height asymmetry', RECOMMENDATIONS['shoulder'],
    )

    # 4. Elbow level
    check_level(
        builder, 'elbow_level',
        keypoint(keypoints, 'left_elbow'), keypoint(keypoints, 'right_elbow'),
        ratios.shoulder, T.ELBOW_LEVEL_DEG, T.ELBOW_LEVEL_CM,
        DeformityType.ELBOW_ASYMMETRY, 'Elbow height asymmetry', RECOMMENDATIONS['elbow'],
    )

    # 5. Pelvic obliquity
    left_hip = keypoint(keypoints, 'left_hip')
    right_hip = keypoint(keypoints, 'right_hip')
    check_level(
        builder, 'pelvic_obliquity', left_hip, right_hip,
        ratios.hip, T.PELVIC_LEVEL_DEG, T.PELVIC_LEVEL_CM,
        DeformityType.PELVIC_OBLIQUITY, 'Pelvic obliquity', RECOMMENDATIONS['pelvis'],
    )

    # 6. Knee valgus/varus (hip-knee-ankle), inward = towards the body midline
    midline_x = midpoint(left_hip, right_hip)[0]
    for side, prefix, deformity_type in (
        (BodySide.LEFT, 'left', DeformityType.LEFT_KNEE_MALALIGNMENT),
        (BodySide.RIGHT, 'right', DeformityType.RIGHT_KNEE_MALALIGNMENT),
    ):
        knee = keypoint(keypoints, f'{prefix}_knee')
        check_joint(
            builder, f'{prefix}_knee_alignment', side,
            keypoint(keypoints, f'{prefix}_hip'), knee, keypoint(keypoints, f'{prefix}_ankle'),
            (midline_x, knee[1]),
            T.KNEE_FRONTAL_DEG, JointDirection.VALGUS, JointDirection.VARUS,
            deformity_type, 'Knee malalignment', RECOMMENDATIONS['knee'],
        )

    # 7. Knee height level
    check_level(
        builder, 'knee_height_level',
        keypoint(keypoints, 'left_knee'), keypoint(keypoints, 'right_knee'),
        ratios.hip, T.KNEE_HEIGHT_DEG, T.KNEE_HEIGHT_CM,
        DeformityType.KNEE_HEIGHT_ASYMMETRY, 'Knee height asymmetry', RECOMMENDATIONS['knee_height'],
    )

    # 8. Ankle height level
    check_level(
        builder, 'ankle_height_level',
        keypoint(keypoints, 'left_ankle'), keypoint(keypoints, 'right_ankle'),
        ratios.hip, T.ANKLE_HEIGHT_DEG, None,
        DeformityType.ANKLE_HEIGHT_ASYMMETRY, 'Ankle height asymmetry', RECOMMENDATIONS['ankle_height'],
    )

    result = builder.build()
    logger.debug("Front view analyzed: %d issue(s)", len(result.issues))
    return result
