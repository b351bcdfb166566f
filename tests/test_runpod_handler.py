from __future__ import annotations

import base64
import importlib.util
import unittest
from unittest import mock

import cv2
import numpy as np

from tests.landmark_fixtures import back_landmarks, front_landmarks, side_landmarks


@unittest.skipUnless(importlib.util.find_spec("runpod"), "runpod is not installed")
class TestRunpodHandler(unittest.TestCase):
    def setUp(self) -> None:
        import runpod_handler

        self.module = runpod_handler

    def test_landmark_job(self) -> None:
        job = {
            "input": {
                "landmarks": {
                    "front": front_landmarks().tolist(),
                    "side_left": side_landmarks().tolist(),
                    "back": back_landmarks(left_ankle=(0.45, 0.93)).tolist(),
                },
                "calibration": {"shoulder_width_cm": 42},
            }
        }
        output = self.module.handler(job)
        self.assertEqual(output["status"], "success")
        analysis = output["data"]["analysis"]
        self.assertTrue(analysis["front"]["is_normal"])
        self.assertEqual(analysis["side_left"]["side"], "LEFT")
        self.assertIsNone(analysis["side"])
        self.assertEqual(analysis["deformity_summary"]["frontal_plane"][0]["direction"], "PRONATION")
        self.assertIn("Ankle Stability Protocol:", output["data"]["exercise_protocol"]["exercises"])

    def test_base64_image_job(self) -> None:
        ok, encoded = cv2.imencode(".png", np.full((100, 100, 3), 200, dtype=np.uint8))
        self.assertTrue(ok)
        image = "data:image/png;base64," + base64.b64encode(encoded.tobytes()).decode()

        extractor = mock.Mock()
        extractor.extract.return_value = side_landmarks() * 500
        with mock.patch.object(self.module, "landmark_extractor", extractor):
            output = self.module.handler({"input": {"side_image": image}})

        self.assertEqual(output["status"], "success")
        self.assertTrue(output["data"]["analysis"]["side"]["analyzed"])
        self.assertTrue(output["data"]["exercise_protocol"]["maintenance"])

    def test_missing_views(self) -> None:
        output = self.module.handler({"input": {"unexpected": 1}})
        self.assertEqual(output["status"], "error")
        self.assertIn("Input validation failed", output["error"])

    def test_empty_landmarks(self) -> None:
        output = self.module.handler({"input": {"landmarks": {}}})
        self.assertEqual(output["status"], "error")

    def test_invalid_base64(self) -> None:
        output = self.module.handler({"input": {"front": "***not base64***"}})
        self.assertEqual(output["status"], "error")

    def test_missing_input_key(self) -> None:
        output = self.module.handler({})
        self.assertEqual(output["status"], "error")

    def test_landmarks_not_a_mapping(self) -> None:
        output = self.module.handler({"input": {"landmarks": [[0.5, 0.5]]}})
        self.assertEqual(output["status"], "error")
        self.assertIn("Input validation failed", output["error"])

    def test_input_not_an_object(self) -> None:
        output = self.module.handler({"input": ["front"]})
        self.assertEqual(output["status"], "error")
        self.assertIn("Input validation failed", output["error"])

    def test_calibration_not_an_object(self) -> None:
        job = {"input": {"landmarks": {"front": front_landmarks().tolist()}, "calibration": [1]}}
        output = self.module.handler(job)
        self.assertEqual(output["status"], "error")
        self.assertIn("Input validation failed", output["error"])


if __name__ == "__main__":
    unittest.main()
