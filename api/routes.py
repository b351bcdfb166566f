"""
API routes for posture measurement endpoints.
"""

import logging
import time
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, File, HTTPException, UploadFile

from measure.calibration import CalibrationProfile, CalibrationStore
from measure.posture_analyzer import PostureAnalyzer
from models.schemas import (
    CalibrationProfileOut,
    CalibrationRequest,
    ExerciseProtocol,
    NarrativeReport,
    PostureAnalysisResult,
    PostureLandmarksRequest,
)
from services.landmark_extractor import LandmarkExtractor
from services.narrative import (
    EXERCISES_FALLBACK,
    SUMMARY_FALLBACK,
    NarrativeError,
    NarrativeGenerator,
)
from utils.validators import validate_image_content, validate_image_files, validate_landmarks

logger = logging.getLogger(__name__)

router = APIRouter()
calibration_store = CalibrationStore()
posture_analyzer = PostureAnalyzer()
landmark_extractor = LandmarkExtractor()
narrative_generator = NarrativeGenerator()


def _profile_from_request(calibration: Optional[CalibrationRequest]) -> CalibrationProfile:
    if calibration is None:
        return calibration_store.profile
    return CalibrationProfile.from_inputs(
        calibration.head_width_cm,
        calibration.shoulder_width_cm,
        calibration.hip_width_cm,
        calibration.neck_length_cm,
    )


@router.get("/")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "ok",
        "message": "Clinical posture analysis API is running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "narrative_configured": narrative_generator.configured,
    }


@router.get("/calibration", response_model=CalibrationProfileOut)
async def get_calibration():
    """Current session calibration profile."""
    return calibration_store.profile.to_dict()


@router.post("/calibration", response_model=CalibrationProfileOut)
async def set_calibration(request: CalibrationRequest):
    """
    Replace the session calibration profile.

    Missing, zero or negative values fall back to the defaults
    (head 15 cm, shoulder 40 cm, hip 35 cm, neck 20 cm).
    """
    profile = calibration_store.set_calibration(
        request.head_width_cm,
        request.shoulder_width_cm,
        request.hip_width_cm,
        request.neck_length_cm,
    )
    return profile.to_dict()


@router.post("/analyze_posture", response_model=PostureAnalysisResult)
async def analyze_posture_landmarks(request: PostureLandmarksRequest):
    """
    Analyze posture from pose landmark sets.

    Each view (front, side, side_left, side_right, back) is optional; omitted
    views are skipped. Use ``side`` for a single side photograph, or
    ``side_left`` and ``side_right`` for a bilateral comparison.
    """
    start_time = time.time()

    views = {
        name: validate_landmarks(name, getattr(request, name))
        for name in ("front", "side", "side_left", "side_right", "back")
    }
    result = posture_analyzer.analyze_posture(
        **views,
        calibration=_profile_from_request(request.calibration),
    )

    logger.info("Landmark posture analysis runtime: %.4f seconds", time.time() - start_time)
    return result


@router.post("/measure_posture", response_model=PostureAnalysisResult)
async def measure_posture_images(
    front_image: Optional[UploadFile] = File(None, description="Front view image of the person"),
    side_image: Optional[UploadFile] = File(None, description="Side view image (single side)"),
    side_left_image: Optional[UploadFile] = File(None, description="Left side view image"),
    side_right_image: Optional[UploadFile] = File(None, description="Right side view image"),
    back_image: Optional[UploadFile] = File(None, description="Back view image of the person"),
):
    """
    Analyze posture from photographs.

    MediaPipe pose detection extracts the landmarks of every uploaded view;
    views without an image, or without a detected pose, are skipped.
    """
    start_time = time.time()

    uploads = {
        "front": front_image,
        "side": side_image,
        "side_left": side_left_image,
        "side_right": side_right_image,
        "back": back_image,
    }
    validate_image_files(**{f"{name}_image": upload for name, upload in uploads.items()})

    views = {}
    for name, upload in uploads.items():
        if upload is None:
            continue
        image_data = await upload.read()
        try:
            validate_image_content(image_data)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=f"{name}_image: {e}")
        keypoints = landmark_extractor.extract(image_data)
        if keypoints is None:
            logger.warning("No pose detected in %s image, view skipped", name)
        views[name] = keypoints

    if all(keypoints is None for keypoints in views.values()):
        raise HTTPException(status_code=422, detail="Could not detect pose landmarks in any image")

    result = posture_analyzer.analyze_posture(**views, calibration=calibration_store.profile)

    logger.info("Image posture measurement runtime: %.4f seconds", time.time() - start_time)
    return result


@router.post("/exercise_protocol", response_model=ExerciseProtocol)
async def exercise_protocol(result: PostureAnalysisResult):
    """Exercise protocol for a completed posture analysis."""
    return posture_analyzer.exercise_protocol(result)


@router.post("/generate_summary", response_model=NarrativeReport)
async def generate_summary(result: PostureAnalysisResult):
    """Clinical summary and exercise narrative from the language model."""
    try:
        return narrative_generator.generate(result)
    except NarrativeError as e:
        status_code = 502 if narrative_generator.configured else 500
        raise HTTPException(
            status_code=status_code,
            detail={
                "error": str(e),
                "summary": SUMMARY_FALLBACK,
                "exercises": EXERCISES_FALLBACK,
            },
        )
