from __future__ import annotations

import unittest

from measure.back_view import analyze_back_view
from models.schemas import (
    BodySide,
    DeformityType,
    JointDirection,
    LengthDeformity,
    ViewType,
)
from tests.landmark_fixtures import back_landmarks


def _deformities_of(result, deformity_type):
    return [d for d in result.deformities if d.type == deformity_type]


class TestBackView(unittest.TestCase):
    def test_missing_landmarks_give_empty_result(self) -> None:
        result = analyze_back_view([])
        self.assertEqual(result.view, ViewType.BACK)
        self.assertFalse(result.analyzed)

    def test_upright_subject_is_normal(self) -> None:
        result = analyze_back_view(back_landmarks())
        self.assertTrue(result.is_normal, result.issues)
        self.assertEqual(result.measurements['gluteal_fold_asymmetry'], 0.0)
        for key in (
            'ear_pinnae_level', 'scapular_level', 'elbow_level', 'psis_level',
            'popliteal_height_level', 'ankle_height_level', 'left_ankle_alignment', 'right_ankle_alignment',
        ):
            self.assertIn(key, result.measurements)

    def test_gluteal_fold_asymmetry(self) -> None:
        result = analyze_back_view(back_landmarks(left_knee=(0.43, 0.78)))
        gluteal = _deformities_of(result, DeformityType.GLUTEAL_FOLD_ASYMMETRY)
        self.assertEqual(len(gluteal), 1)
        self.assertIsInstance(gluteal[0], LengthDeformity)
        self.assertEqual(gluteal[0].longer_side, BodySide.LEFT)
        self.assertEqual(gluteal[0].shorter_side, BodySide.RIGHT)
        # |0.23 - 0.20| / 0.215
        self.assertAlmostEqual(gluteal[0].percentage, 14.0)

        popliteal = _deformities_of(result, DeformityType.POPLITEAL_HEIGHT_ASYMMETRY)
        self.assertEqual(popliteal[0].elevated_side, BodySide.RIGHT)

    def test_scapular_asymmetry(self) -> None:
        result = analyze_back_view(back_landmarks(right_shoulder=(0.60, 0.26)))
        scapular = _deformities_of(result, DeformityType.SCAPULAR_ASYMMETRY)
        self.assertEqual(len(scapular), 1)
        self.assertEqual(scapular[0].elevated_side, BodySide.LEFT)

    def test_ankle_height_asymmetry(self) -> None:
        result = analyze_back_view(back_landmarks(right_ankle=(0.57, 0.92)))
        ankle = _deformities_of(result, DeformityType.ANKLE_HEIGHT_ASYMMETRY)
        self.assertEqual(len(ankle), 1)
        self.assertEqual(ankle[0].elevated_side, BodySide.RIGHT)
        self.assertEqual(ankle[0].depressed_side, BodySide.LEFT)

    def test_ankle_pronation(self) -> None:
        result = analyze_back_view(back_landmarks(left_ankle=(0.45, 0.93)))
        ankle = _deformities_of(result, DeformityType.LEFT_ANKLE_MALALIGNMENT)
        self.assertEqual(len(ankle), 1)
        self.assertEqual(ankle[0].side, BodySide.LEFT)
        self.assertEqual(ankle[0].direction, JointDirection.PRONATION)

    def test_ankle_supination(self) -> None:
        result = analyze_back_view(back_landmarks(left_ankle=(0.41, 0.93)))
        ankle = _deformities_of(result, DeformityType.LEFT_ANKLE_MALALIGNMENT)
        self.assertEqual(ankle[0].direction, JointDirection.SUPINATION)

    def test_degenerate_thighs_leave_gluteal_unavailable(self) -> None:
        keypoints = back_landmarks(
            left_hip=(0.43, 0.55), left_knee=(0.43, 0.55),
            right_hip=(0.57, 0.55), right_knee=(0.57, 0.55),
        )
        result = analyze_back_view(keypoints)
        self.assertIsNone(result.measurements['gluteal_fold_asymmetry'])
        self.assertEqual(_deformities_of(result, DeformityType.GLUTEAL_FOLD_ASYMMETRY), [])


if __name__ == "__main__":
    unittest.main()
