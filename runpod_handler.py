"""
RunPod Serverless Handler for the Clinical Posture Measurement API

This handler adapts the posture analysis service for RunPod's serverless
environment. Jobs carry either landmark sets or base64 images per view and
return the full posture analysis with its exercise protocol.
"""

import logging
import traceback
from typing import Any, Dict

import runpod

from measure.calibration import CalibrationProfile
from measure.posture_analyzer import PostureAnalyzer
from services.landmark_extractor import LandmarkExtractor
from utils.validators import decode_base64_image, validate_image_content

logger = logging.getLogger(__name__)

VIEW_NAMES = ("front", "side", "side_left", "side_right", "back")

# Created once when the container starts; the pose model itself loads lazily
posture_analyzer = PostureAnalyzer()
landmark_extractor = LandmarkExtractor()


def extract_views(job_input: Dict[str, Any]) -> Dict[str, Any]:
    """
    Validate and extract the landmark set of every view in a job request.

    Supported formats:
      {"landmarks": {"front": [[x, y], ...], "side": [...], ...}}
      {"front": "<base64>", "side": "<base64>", ...}  ("front_image" etc. also accepted)

    Returns:
        Mapping of view name to landmark set (None when the view is missing
        or no pose was detected)

    Raises:
        ValueError: If no view is supplied or an image is invalid
    """
    if not isinstance(job_input, dict):
        raise ValueError(f"Job input must be an object, got {type(job_input).__name__}")

    if "landmarks" in job_input:
        landmarks = job_input["landmarks"] or {}
        if not isinstance(landmarks, dict):
            raise ValueError("'landmarks' must map view names to landmark sets")
        views = {name: landmarks.get(name) for name in VIEW_NAMES}
        if all(not views[name] for name in VIEW_NAMES):
            raise ValueError("No landmark sets supplied")
        return views

    views = {}
    for name in VIEW_NAMES:
        encoded = job_input.get(name) or job_input.get(f"{name}_image")
        if not encoded:
            continue
        image_data = decode_base64_image(encoded)
        validate_image_content(image_data)
        views[name] = landmark_extractor.extract(image_data)

    if not views:
        available_keys = list(job_input.keys())
        raise ValueError(
            f"Missing required view fields. "
            f"Expected 'landmarks' or any of {list(VIEW_NAMES)}. "
            f"Available keys: {available_keys}"
        )
    return views


def handler(job):
    """
    RunPod serverless handler function.

    Optional "calibration": {"head_width_cm", "shoulder_width_cm",
    "hip_width_cm", "neck_length_cm"} overrides the default profile.

    Returns:
    {
        "status": "success" | "error",
        "data": {"analysis": {...}, "exercise_protocol": {...}},
        "message": str,
        "error": str (only if status is "error")
    }
    """
    try:
        job_input = job["input"]
        views = extract_views(job_input)
        logger.info("Received job input with keys: %s", list(job_input.keys()))

        calibration_input = job_input.get("calibration") or {}
        if not isinstance(calibration_input, dict):
            raise ValueError("'calibration' must be an object")
        calibration = CalibrationProfile.from_inputs(
            calibration_input.get("head_width_cm"),
            calibration_input.get("shoulder_width_cm"),
            calibration_input.get("hip_width_cm"),
            calibration_input.get("neck_length_cm"),
        )

        result = posture_analyzer.analyze_posture(**views, calibration=calibration)
        protocol = posture_analyzer.exercise_protocol(result)

        return {
            "status": "success",
            "data": {
                "analysis": result.model_dump(mode="json"),
                "exercise_protocol": protocol.model_dump(mode="json"),
            },
            "message": "Posture analysis completed successfully",
        }

    except (ValueError, TypeError, KeyError) as e:
        logger.warning("Validation error: %s", e)
        return {
            "status": "error",
            "error": f"Input validation failed: {str(e)}",
            "message": "Please check your input format and try again",
        }

    except Exception as e:
        logger.error("Unexpected error: %s\n%s", e, traceback.format_exc())
        return {
            "status": "error",
            "error": f"Internal server error: {str(e)}",
            "message": "An unexpected error occurred during processing",
        }


# Start the RunPod serverless function
if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    logger.info("Starting RunPod serverless handler...")
    runpod.serverless.start({"handler": handler})
