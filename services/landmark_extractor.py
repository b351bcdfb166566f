"""
Pose landmark extraction from photographs using MediaPipe.
"""

import logging
from typing import Optional

import cv2
import numpy as np

logger = logging.getLogger(__name__)


class LandmarkExtractor:
    """MediaPipe-based pose landmark extractor."""

    def __init__(self, model_complexity: int = 2, min_detection_confidence: float = 0.5):
        self.model_complexity = model_complexity
        self.min_detection_confidence = min_detection_confidence
        self._pose = None

    @property
    def pose(self):
        """MediaPipe pose model, created on first use."""
        if self._pose is None:
            import mediapipe as mp

            logger.info("Initializing MediaPipe pose model (complexity=%d)", self.model_complexity)
            self._pose = mp.solutions.pose.Pose(
                static_image_mode=True,
                model_complexity=self.model_complexity,
                enable_segmentation=False,
                min_detection_confidence=self.min_detection_confidence,
            )
        return self._pose

    def extract(self, image_data: bytes) -> Optional[np.ndarray]:
        """Extract pose landmarks from an image.

        Args:
            image_data: Raw image bytes

        Returns:
            Array of keypoints [N, 2] in pixel coordinates, or None if no pose detected
        """
        # Convert bytes to image
        nparr = np.frombuffer(image_data, np.uint8)
        image = cv2.imdecode(nparr, cv2.IMREAD_COLOR)

        if image is None:
            logger.warning("Could not decode image for landmark extraction")
            return None

        # Convert BGR to RGB for MediaPipe
        image_rgb = cv2.cvtColor(image, cv2.COLOR_BGR2RGB)
        results = self.pose.process(image_rgb)

        if not results.pose_landmarks:
            logger.info("No pose landmarks detected")
            return None

        # Convert normalized coordinates to pixel coordinates
        height, width = image.shape[:2]
        keypoints = [
            [landmark.x * width, landmark.y * height]
            for landmark in results.pose_landmarks.landmark
        ]
        return np.array(keypoints)

    def close(self):
        """Release MediaPipe resources."""
        if self._pose is not None:
            self._pose.close()
            self._pose = None

    def __del__(self):
        self.close()
