"""
Input validation utilities for the posture measurement API.
"""

import base64
import binascii
from typing import Optional

import cv2
import numpy as np
from fastapi import HTTPException, UploadFile

from app_config.settings import APIConfig
from measure.landmarks import as_landmark_array


def validate_image_files(**image_files: Optional[UploadFile]):
    """
    Validates that uploaded files are images in allowed formats.

    Args:
        **image_files: Image files keyed by form field name. Missing views are
                       allowed but at least one image must be present.

    Raises:
        HTTPException: If no file is supplied or a file has an invalid format.
                      Returns 400 status with descriptive error message.
    """
    supplied = {name: image for name, image in image_files.items() if image is not None}
    if not supplied:
        raise HTTPException(status_code=400, detail="At least one view image is required")

    for name, image_file in supplied.items():
        if image_file.content_type not in APIConfig.ALLOWED_IMAGE_TYPES:
            raise HTTPException(
                status_code=400,
                detail=(
                    f"{name} must be JPEG or PNG. "
                    f"Got: {image_file.content_type}"
                ),
            )


def validate_image_content(image_data: bytes):
    """
    Validates that the image data can be properly decoded and is a valid image.

    Args:
        image_data: Raw image bytes to validate

    Raises:
        ValueError: If the image data is invalid or cannot be decoded
    """
    nparr = np.frombuffer(image_data, np.uint8)
    image = cv2.imdecode(nparr, cv2.IMREAD_COLOR) if nparr.size else None

    if image is None:
        raise ValueError("Image validation failed: could not decode image")

    # Check if image has valid dimensions
    if len(image.shape) != 3 or image.shape[2] != 3:
        raise ValueError("Image validation failed: image must be a color image with 3 channels")

    # Check minimum image size (more lenient for posture analysis)
    if image.shape[0] < 50 or image.shape[1] < 50:
        raise ValueError("Image validation failed: image must be at least 50x50 pixels")


def decode_base64_image(base64_string: str) -> bytes:
    """
    Decode base64 encoded image to bytes.

    Args:
        base64_string: Base64 encoded image string, optionally a data URL

    Returns:
        Raw image bytes

    Raises:
        ValueError: If the string is not valid base64
    """
    # Remove data URL prefix if present (e.g., "data:image/jpeg;base64,")
    if ',' in base64_string:
        base64_string = base64_string.split(',', 1)[1]
    try:
        return base64.b64decode(base64_string, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"Failed to decode base64 image: {e}") from e


def validate_landmarks(view: str, landmarks):
    """
    Validates one view's landmark set.

    Returns:
        Landmark array [N, 2], or None when the view was not supplied

    Raises:
        HTTPException: 400 when the landmark set is malformed
    """
    try:
        return as_landmark_array(landmarks)
    except (ValueError, TypeError, KeyError) as e:
        raise HTTPException(status_code=400, detail=f"Invalid {view} landmarks: {e}")
