"""
Posture analysis service: runs the view analyzers and aggregates deformities.
"""

import logging
from typing import Any, Optional

from measure.back_view import analyze_back_view
from measure.calibration import CalibrationProfile
from measure.deformity_aggregator import aggregate_deformities
from measure.exercise_protocol import generate_exercise_protocol
from measure.front_view import analyze_front_view
from measure.side_view import analyze_side_view
from models.schemas import (
    BodySide,
    ExerciseProtocol,
    PostureAnalysisResult,
    ViewResult,
    ViewType,
)

logger = logging.getLogger(__name__)


class PostureAnalyzer:
    """Clinical posture analyzer working on pose landmark sets."""

    def __init__(self, calibration: Optional[CalibrationProfile] = None):
        """Initialize the analyzer with a default calibration profile."""
        self.calibration = calibration or CalibrationProfile()

    def analyze_view(
        self,
        view: ViewType,
        landmarks: Any,
        calibration: Optional[CalibrationProfile] = None,
        side: Optional[BodySide] = None,
    ) -> ViewResult:
        """Analyze one view.

        Args:
            view: FRONT, SIDE or BACK
            landmarks: Landmark set of that view, or None when it was not captured
            calibration: Profile for this call; defaults to the analyzer's profile
            side: Physical side photographed, side views only

        Returns:
            ViewResult with measurements, issues, recommendations and deformities
        """
        calibration = calibration or self.calibration
        view = ViewType(view)

        if view == ViewType.FRONT:
            return analyze_front_view(landmarks, calibration)
        if view == ViewType.BACK:
            return analyze_back_view(landmarks, calibration)
        return analyze_side_view(landmarks, calibration, side)

    def analyze_posture(
        self,
        front: Any = None,
        side: Any = None,
        back: Any = None,
        side_left: Any = None,
        side_right: Any = None,
        calibration: Optional[CalibrationProfile] = None,
    ) -> PostureAnalysisResult:
        """Analyze all supplied views and build the deformity summary.

        A single side photograph goes in ``side``; when both sides were
        photographed use ``side_left`` and ``side_right`` instead.
        """
        calibration = calibration or self.calibration

        result = PostureAnalysisResult(
            front=self.analyze_view(ViewType.FRONT, front, calibration),
            back=self.analyze_view(ViewType.BACK, back, calibration),
        )

        side_results = []
        if side is not None:
            result.side = self.analyze_view(ViewType.SIDE, side, calibration)
            side_results.append(result.side)
        if side_left is not None:
            result.side_left = self.analyze_view(ViewType.SIDE, side_left, calibration, BodySide.LEFT)
            side_results.append(result.side_left)
        if side_right is not None:
            result.side_right = self.analyze_view(ViewType.SIDE, side_right, calibration, BodySide.RIGHT)
            side_results.append(result.side_right)

        result.deformity_summary = aggregate_deformities(result.front, result.back, side_results)

        issue_count = sum(len(view_result.issues) for view_result in result.view_results())
        logger.info(
            "Posture analysis completed: %d view(s) analyzed, %d issue(s)",
            sum(1 for view_result in result.view_results() if view_result.analyzed),
            issue_count,
        )
        return result

    def exercise_protocol(self, result: PostureAnalysisResult) -> ExerciseProtocol:
        """Exercise protocol for a completed analysis."""
        return generate_exercise_protocol(result.view_results())
