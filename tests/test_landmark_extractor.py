from __future__ import annotations

import unittest
from types import SimpleNamespace
from unittest import mock

import cv2
import numpy as np

from services.landmark_extractor import LandmarkExtractor


def _image_bytes(width: int = 200, height: int = 100) -> bytes:
    ok, encoded = cv2.imencode(".png", np.zeros((height, width, 3), dtype=np.uint8))
    assert ok
    return encoded.tobytes()


class TestLandmarkExtractor(unittest.TestCase):
    def _extractor_with(self, pose_landmarks) -> LandmarkExtractor:
        extractor = LandmarkExtractor()
        pose = mock.Mock()
        pose.process.return_value = SimpleNamespace(pose_landmarks=pose_landmarks)
        extractor._pose = pose
        return extractor

    def test_normalized_landmarks_scaled_to_pixels(self) -> None:
        landmarks = SimpleNamespace(
            landmark=[SimpleNamespace(x=0.5, y=0.25, z=0.0, visibility=0.9)] * 33
        )
        extractor = self._extractor_with(landmarks)
        keypoints = extractor.extract(_image_bytes(width=200, height=100))
        self.assertEqual(keypoints.shape, (33, 2))
        self.assertEqual(keypoints[0].tolist(), [100.0, 25.0])

    def test_no_pose(self) -> None:
        extractor = self._extractor_with(None)
        self.assertIsNone(extractor.extract(_image_bytes()))

    def test_undecodable_image(self) -> None:
        extractor = self._extractor_with(None)
        self.assertIsNone(extractor.extract(b"\x00\x01garbage"))
        extractor._pose.process.assert_not_called()

    def test_close_releases_model(self) -> None:
        extractor = self._extractor_with(None)
        pose = extractor._pose
        extractor.close()
        pose.close.assert_called_once()
        self.assertIsNone(extractor._pose)


if __name__ == "__main__":
    unittest.main()
