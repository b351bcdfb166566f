"""
Exercise protocol generator.

A plain rule table, not a scoring system: when no view reported an issue the
maintenance protocol is returned, otherwise the general corrective protocol
followed by the region protocols whose deformities were found.
"""

from typing import Iterable

from models.schemas import DeformityType, ExerciseProtocol, ViewResult

MAINTENANCE_EXERCISES = [
    'Maintenance Protocol:',
    '   Continue general posture awareness exercises',
    '   Regular movement breaks during prolonged sitting/standing',
    '   Full-body mobility routine: 10 minutes',
]
MAINTENANCE_SCHEDULE = ['General maintenance: 2-3 times per week']

CORRECTIVE_EXERCISES = [
    '1. General Corrective Protocol:',
    '   Postural awareness drills in front of a mirror: 5 minutes',
    '   Diaphragmatic breathing in neutral alignment: 2 sets x 10 breaths',
    '   Core activation (abdominal bracing): 3 sets x 10 reps',
]
CORRECTIVE_SCHEDULE = ['General corrective exercises: Daily']

# (deformity types, exercises, schedule)
REGION_PROTOCOLS = (
    (
        {
            DeformityType.NECK_LATERAL_DEVIATION,
            DeformityType.EAR_PINNAE_ASYMMETRY,
            DeformityType.FORWARD_HEAD_POSTURE,
            DeformityType.CHIN_FORWARD_POSTURE,
        },
        [
            'Neck Strengthening Protocol:',
            '   Deep neck flexor strengthening (chin tucks): 3 sets x 10 reps',
            '   Upper cervical extension: 3 sets x 8 reps',
            '   Cervical lateral flexion stretches: Hold 30 seconds each side',
        ],
        'Neck exercises: Daily, morning and evening',
    ),
    (
        {
            DeformityType.SHOULDER_ASYMMETRY,
            DeformityType.SCAPULAR_ASYMMETRY,
            DeformityType.ELBOW_ASYMMETRY,
            DeformityType.SHOULDER_SAGITTAL_POSITION,
        },
        [
            'Shoulder Stabilization Protocol:',
            '   Scapular wall slides: 3 sets x 12 reps',
            '   External rotation with resistance band: 3 sets x 15 reps',
            '   Unilateral shoulder blade squeezes: 3 sets x 10 reps each side',
        ],
        'Shoulder exercises: 5 days per week',
    ),
    (
        {
            DeformityType.THORACIC_KYPHOSIS,
            DeformityType.LUMBAR_LORDOSIS,
        },
        [
            'Spinal Alignment Protocol:',
            '   Thoracic extension mobility: 3 sets x 10 reps',
            '   Core strengthening (dead bug): 3 sets x 8 reps each side',
            '   Hip flexor stretches: Hold 45 seconds each side',
        ],
        'Spinal exercises: 4-5 days per week',
    ),
    (
        {
            DeformityType.PELVIC_OBLIQUITY,
            DeformityType.PSIS_ASYMMETRY,
            DeformityType.GLUTEAL_FOLD_ASYMMETRY,
            DeformityType.LEFT_KNEE_MALALIGNMENT,
            DeformityType.RIGHT_KNEE_MALALIGNMENT,
            DeformityType.KNEE_HEIGHT_ASYMMETRY,
            DeformityType.POPLITEAL_HEIGHT_ASYMMETRY,
            DeformityType.LEFT_KNEE_SAGITTAL,
            DeformityType.RIGHT_KNEE_SAGITTAL,
        },
        [
            'Lower Extremity Protocol:',
            '   Hip abductor strengthening (clamshells): 3 sets x 12 reps each side',
            '   Single leg balance: Hold 30 seconds each leg',
            '   Quadriceps strengthening: 3 sets x 10 reps',
        ],
        'Lower body exercises: 3-4 days per week',
    ),
    (
        {
            DeformityType.LEFT_ANKLE_MALALIGNMENT,
            DeformityType.RIGHT_ANKLE_MALALIGNMENT,
            DeformityType.ANKLE_HEIGHT_ASYMMETRY,
            DeformityType.ANKLE_SAGITTAL_POSITION,
        },
        [
            'Ankle Stability Protocol:',
            '   Ankle circles and pumps: 2 sets x 15 reps each direction',
            '   Single leg balance on unstable surface: 3 sets x 30 seconds',
            '   Calf raises and heel walks: 3 sets x 12 reps',
        ],
        'Ankle exercises: 4-5 days per week',
    ),
)


def generate_exercise_protocol(results: Iterable[ViewResult]) -> ExerciseProtocol:
    """Map the issues of all analyzed views to an exercise protocol."""
    results = [result for result in results if result is not None]
    has_issues = any(result.issues for result in results)

    if not has_issues:
        return ExerciseProtocol(
            exercises='\n'.join(MAINTENANCE_EXERCISES),
            schedule='\n'.join(MAINTENANCE_SCHEDULE),
            maintenance=True,
        )

    found = {deformity.type for result in results for deformity in result.deformities}
    exercises = list(CORRECTIVE_EXERCISES)
    schedule = list(CORRECTIVE_SCHEDULE)
    number = 1
    for types, region_exercises, region_schedule in REGION_PROTOCOLS:
        if not types & found:
            continue
        number += 1
        exercises.append(f"{number}. {region_exercises[0]}")
        exercises.extend(region_exercises[1:])
        schedule.append(region_schedule)

    return ExerciseProtocol(exercises='\n'.join(exercises), schedule='\n'.join(schedule))
