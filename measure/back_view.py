"""
Back view (posterior frontal plane) posture analysis.
"""

import logging
from typing import Any, Optional

from app_config.settings import ClinicalThresholds as T
from measure.calibration import CalibrationProfile, resolve_ratios
from measure.geometry import EPSILON, midpoint, pixel_distance
from measure.landmarks import as_landmark_array, keypoint
from measure.view_common import (
    ViewResultBuilder,
    check_joint,
    check_level,
    empty_result,
    round_measurement,
)
from models.schemas import (
    BodySide,
    DeformityType,
    JointDirection,
    LengthDeformity,
    ViewResult,
    ViewType,
)

logger = logging.getLogger(__name__)

RECOMMENDATIONS = {
    'ear': [
        '• Cervical lateral flexion stretching exercises',
        '• Upper trapezius and levator scapulae release',
    ],
    'scapula': [
        '• Scapular stabilization exercises (rows, wall slides)',
        '• Check for scoliosis or leg length discrepancy',
    ],
    'elbow': [
        '• Address upper extremity length discrepancies',
        '• Evaluate shoulder girdle alignment',
    ],
    'psis': [
        '• Assess for leg length discrepancy and sacroiliac dysfunction',
        '• Strengthen hip abductors and core stabilizers',
    ],
    'popliteal': [
        '• Assess for leg length discrepancy',
        '• Evaluate knee and ankle alignment under load',
    ],
    'gluteal': [
        '• Gluteal strengthening on the weaker side',
        '• Assess for leg length discrepancy',
    ],
    'ankle': [
        '• Ankle strengthening and proprioception exercises',
        '• Address foot arch support and calf flexibility',
    ],
    'ankle_height': [
        '• Assess for ankle mobility restrictions',
        '• Check for previous ankle injuries or compensation patterns',
    ],
}


def analyze_back_view(landmarks: Any, calibration: Optional[CalibrationProfile] = None) -> ViewResult:
    """Analyze posterior alignment from a back view landmark set."""
    keypoints = as_landmark_array(landmarks)
    if keypoints is None:
        return empty_result(ViewType.BACK)

    calibration = calibration or CalibrationProfile()
    ratios = resolve_ratios(calibration, keypoints)
    builder = ViewResultBuilder(ViewType.BACK)

    check_level(
        builder, 'ear_pinnae_level',
        keypoint(keypoints, 'left_ear'), keypoint(keypoints, 'right_ear'),
        ratios.head, T.EAR_LEVEL_DEG, T.EAR_LEVEL_CM,
        DeformityType.EAR_PINNAE_ASYMMETRY, 'Ear pinnae asymmetry', RECOMMENDATIONS['ear'],
    )
    check_level(
        builder, 'scapular_level',
        keypoint(keypoints, 'left_shoulder'), keypoint(keypoints, 'right_shoulder'),
        ratios.shoulder, T.SHOULDER_LEVEL_DEG, T.SHOULDER_LEVEL_CM,
        DeformityType.SCAPULAR_ASYMMETRY, 'Scapular height asymmetry', RECOMMENDATIONS['scapula'],
    )
    check_level(
        builder, 'elbow_level',
        keypoint(keypoints, 'left_elbow'), keypoint(keypoints, 'right_elbow'),
        ratios.shoulder, T.ELBOW_LEVEL_DEG, T.ELBOW_LEVEL_CM,
        DeformityType.ELBOW_ASYMMETRY, 'Elbow height asymmetry', RECOMMENDATIONS['elbow'],
    )

    left_hip = keypoint(keypoints, 'left_hip')
    right_hip = keypoint(keypoints, 'right_hip')
    check_level(
        builder, 'psis_level', left_hip, right_hip,
        ratios.hip, T.PELVIC_LEVEL_DEG, T.PELVIC_LEVEL_CM,
        DeformityType.PSIS_ASYMMETRY, 'PSIS height asymmetry', RECOMMENDATIONS['psis'],
    )

    left_knee = keypoint(keypoints, 'left_knee')
    right_knee = keypoint(keypoints, 'right_knee')
    check_level(
        builder, 'popliteal_height_level', left_knee, right_knee,
        ratios.hip, T.KNEE_HEIGHT_DEG, T.KNEE_HEIGHT_CM,
        DeformityType.POPLITEAL_HEIGHT_ASYMMETRY, 'Popliteal crease asymmetry',
        RECOMMENDATIONS['popliteal'],
    )
    check_level(
        builder, 'ankle_height_level',
        keypoint(keypoints, 'left_ankle'), keypoint(keypoints, 'right_ankle'),
        ratios.hip, T.ANKLE_HEIGHT_DEG, None,
        DeformityType.ANKLE_HEIGHT_ASYMMETRY, 'Ankle height asymmetry', RECOMMENDATIONS['ankle_height'],
    )

    # Gluteal fold: thigh segment (hip-knee) lengths compared side to side
    left_length = pixel_distance(left_hip, left_knee)
    right_length = pixel_distance(right_hip, right_knee)
    mean_length = (left_length + right_length) / 2
    if mean_length < EPSILON:
        builder.measure('gluteal_fold_asymmetry', None)
    else:
        percentage = abs(left_length - right_length) / mean_length * 100
        builder.measure('gluteal_fold_asymmetry', percentage)
        if percentage > T.GLUTEAL_FOLD_PERCENT:
            if left_length > right_length:
                longer, shorter = BodySide.LEFT, BodySide.RIGHT
            else:
                longer, shorter = BodySide.RIGHT, BodySide.LEFT
            builder.flag(
                f"Gluteal fold asymmetry: {percentage:.1f}% length difference, "
                f"{longer.value.lower()} side longer (Normal: <{T.GLUTEAL_FOLD_PERCENT:g}%)",
                RECOMMENDATIONS['gluteal'],
                LengthDeformity(
                    type=DeformityType.GLUTEAL_FOLD_ASYMMETRY,
                    longer_side=longer,
                    shorter_side=shorter,
                    percentage=round_measurement(percentage),
                ),
            )

    # Ankle (knee-ankle-heel): bowing towards the midline is pronation
    midline_x = midpoint(left_hip, right_hip)[0]
    for side, prefix, deformity_type in (
        (BodySide.LEFT, 'left', DeformityType.LEFT_ANKLE_MALALIGNMENT),
        (BodySide.RIGHT, 'right', DeformityType.RIGHT_ANKLE_MALALIGNMENT),
    ):
        ankle = keypoint(keypoints, f'{prefix}_ankle')
        check_joint(
            builder, f'{prefix}_ankle_alignment', side,
            keypoint(keypoints, f'{prefix}_knee'), ankle, keypoint(keypoints, f'{prefix}_heel'),
            (midline_x, ankle[1]),
            T.ANKLE_FRONTAL_DEG, JointDirection.PRONATION, JointDirection.SUPINATION,
            deformity_type, 'Ankle malalignment', RECOMMENDATIONS['ankle'],
        )

    result = builder.build()
    logger.debug("Back view analyzed: %d issue(s)", len(result.issues))
    return result
