from __future__ import annotations

import math
import unittest

import numpy as np

from measure.calibration import (
    CalibrationProfile,
    CalibrationStore,
    neck_ratio,
    resolve_ratios,
    set_calibration,
    to_cm,
)
from measure.landmarks import as_landmark_array
from tests.landmark_fixtures import front_landmarks


class TestCalibrationProfile(unittest.TestCase):
    def test_defaults(self) -> None:
        profile = CalibrationProfile()
        self.assertEqual(
            profile.to_dict(),
            {"head_width_cm": 15.0, "shoulder_width_cm": 40.0, "hip_width_cm": 35.0, "neck_length_cm": 20.0},
        )

    def test_invalid_fields_fall_back_individually(self) -> None:
        profile = set_calibration(head_width=16, shoulder_width=0, hip_width=-3, neck_length=None)
        self.assertEqual(profile.head_width_cm, 16.0)
        self.assertEqual(profile.shoulder_width_cm, 40.0)
        self.assertEqual(profile.hip_width_cm, 35.0)
        self.assertEqual(profile.neck_length_cm, 20.0)

    def test_non_numeric_and_non_finite_fall_back(self) -> None:
        profile = CalibrationProfile.from_inputs("wide", math.inf, math.nan, "22.5")
        self.assertEqual(profile.head_width_cm, 15.0)
        self.assertEqual(profile.shoulder_width_cm, 40.0)
        self.assertEqual(profile.hip_width_cm, 35.0)
        self.assertEqual(profile.neck_length_cm, 22.5)


class TestCalibrationStore(unittest.TestCase):
    def test_set_replaces_all_fields(self) -> None:
        store = CalibrationStore()
        store.set_calibration(18, 44, 38, 21)
        store.set_calibration(shoulder_width=42)
        self.assertEqual(store.profile, CalibrationProfile(shoulder_width_cm=42.0))

    def test_reset(self) -> None:
        store = CalibrationStore(CalibrationProfile(head_width_cm=20.0))
        self.assertEqual(store.reset(), CalibrationProfile())
        self.assertEqual(store.profile, CalibrationProfile())


class TestRatios(unittest.TestCase):
    def test_ratios_from_reference_widths(self) -> None:
        ratios = resolve_ratios(CalibrationProfile(), as_landmark_array(front_landmarks()))
        self.assertAlmostEqual(ratios.head, 187.5)
        self.assertAlmostEqual(ratios.shoulder, 200.0)
        self.assertAlmostEqual(ratios.hip, 250.0)
        self.assertEqual(ratios.neck_length_cm, 20.0)

    def test_ratios_follow_subject_distance(self) -> None:
        near = front_landmarks()
        far = near * 0.5
        near_ratios = resolve_ratios(CalibrationProfile(), near)
        far_ratios = resolve_ratios(CalibrationProfile(), far)
        self.assertAlmostEqual(far_ratios.shoulder, near_ratios.shoulder * 2)

    def test_coincident_reference_gives_no_ratio(self) -> None:
        keypoints = front_landmarks(left_ear=(0.5, 0.11), right_ear=(0.5, 0.11))
        with self.assertLogs("measure.calibration", level="WARNING"):
            ratios = resolve_ratios(CalibrationProfile(), keypoints)
        self.assertIsNone(ratios.head)
        self.assertIsNotNone(ratios.shoulder)

    def test_to_cm(self) -> None:
        self.assertAlmostEqual(to_cm(0.01, 200.0), 2.0)
        self.assertIsNone(to_cm(0.01, None))

    def test_neck_ratio(self) -> None:
        self.assertAlmostEqual(neck_ratio(20.0, -0.2), 100.0)
        self.assertEqual(neck_ratio(20.0, 0.0), 0.3)


class TestLandmarkCoercion(unittest.TestCase):
    def test_absent_or_empty(self) -> None:
        self.assertIsNone(as_landmark_array(None))
        self.assertIsNone(as_landmark_array([]))
        self.assertIsNone(as_landmark_array(np.empty((0, 2))))

    def test_mappings_and_extra_columns(self) -> None:
        points = [{"x": 0.1 * i, "y": 0.2, "z": 0.0, "visibility": 0.9} for i in range(33)]
        keypoints = as_landmark_array(points)
        self.assertEqual(keypoints.shape, (33, 2))
        self.assertAlmostEqual(keypoints[3][0], 0.3)

        wide = np.ones((33, 4))
        self.assertEqual(as_landmark_array(wide).shape, (33, 2))

    def test_too_few_points(self) -> None:
        with self.assertRaises(ValueError):
            as_landmark_array([[0.5, 0.5]] * 10)

    def test_non_finite_coordinates(self) -> None:
        keypoints = front_landmarks()
        keypoints[0][0] = np.nan
        with self.assertRaises(ValueError):
            as_landmark_array(keypoints)


if __name__ == "__main__":
    unittest.main()
