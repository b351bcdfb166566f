"""
Configuration settings for the Clinical Posture Measurement API
"""

import os

from dotenv import load_dotenv

load_dotenv()


class APIConfig:
    """API Configuration settings."""

    # Server settings
    HOST = os.getenv("POSTURE_API_HOST", "0.0.0.0")
    PORT = int(os.getenv("POSTURE_API_PORT", "8000"))
    TITLE = "Clinical Posture Measurement API"
    VERSION = "2.0.0"
    DESCRIPTION = (
        "Clinical posture analysis from front, side and back view landmarks "
        "using MediaPipe pose detection"
    )
    LOG_LEVEL = os.getenv("POSTURE_LOG_LEVEL", "info")

    # File upload settings
    ALLOWED_IMAGE_TYPES = ["image/jpeg", "image/png", "image/jpg"]

    # MediaPipe pose model returns 33 landmarks
    MIN_LANDMARKS = 33


class CalibrationDefaults:
    """Default anthropometric widths/lengths in centimeters."""

    HEAD_WIDTH_CM = 15.0
    SHOULDER_WIDTH_CM = 40.0
    HIP_WIDTH_CM = 35.0
    NECK_LENGTH_CM = 20.0

    # cm per unit used for side-view forward distances when the neck span is ~0
    FALLBACK_NECK_RATIO = 0.3

    # Distances below this are treated as coincident landmarks
    MIN_REFERENCE_DISTANCE = 1e-6


class ClinicalThresholds:
    """Abnormality thresholds (degrees unless suffixed).

    These come from the clinical logic of the assessment protocol and are not
    derived from a cited standard. Treat them as tunable constants.
    """

    EAR_LEVEL_DEG = 3.0
    EAR_LEVEL_CM = 1.0

    NECK_LATERAL_DEG = 5.0
    NECK_LATERAL_CM = 1.5

    SHOULDER_LEVEL_DEG = 2.0
    SHOULDER_LEVEL_CM = 1.5

    ELBOW_LEVEL_DEG = 3.0
    ELBOW_LEVEL_CM = 2.0

    PELVIC_LEVEL_DEG = 2.0
    PELVIC_LEVEL_CM = 1.5

    KNEE_FRONTAL_DEG = 8.0

    KNEE_HEIGHT_DEG = 2.0
    KNEE_HEIGHT_CM = 1.5

    GLUTEAL_FOLD_PERCENT = 3.0

    ANKLE_FRONTAL_DEG = 5.0

    # Ankle height is judged on the angle only
    ANKLE_HEIGHT_DEG = 2.0

    FORWARD_NECK_DEG = 15.0
    FORWARD_NECK_CM = 4.0

    CHIN_FORWARD_DEG = 12.0
    CHIN_FORWARD_CM = 3.0

    SHOULDER_SAGITTAL_DEG = 10.0

    THORACIC_RANGE = (20.0, 40.0)
    LUMBAR_RANGE = (40.0, 60.0)

    KNEE_SAGITTAL_DEG = 5.0

    ANKLE_SAGITTAL_DEG = 8.0


class CurvatureBaselines:
    """Neutral spinal curvature estimates used when only 2D landmarks exist."""

    THORACIC_DEG = 30.0
    LUMBAR_DEG = 50.0


class BilateralTolerances:
    """Left vs right side-view differences that are reported."""

    FORWARD_NECK_DEG = 3.0
    CURVATURE_DEG = 5.0
    KNEE_DEG = 3.0


class NarrativeConfig:
    """Settings for the external narrative (language model) service."""

    API_KEY = os.getenv("OPENAI_API_KEY")
    API_URL = os.getenv("OPENAI_API_URL", "https://api.openai.com/v1/chat/completions")
    MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
    MAX_TOKENS = int(os.getenv("OPENAI_MAX_TOKENS", "500"))
    TEMPERATURE = float(os.getenv("OPENAI_TEMPERATURE", "0.3"))
    TIMEOUT_SECONDS = float(os.getenv("OPENAI_TIMEOUT_SECONDS", "60"))
