from __future__ import annotations

import unittest

from measure.deformity_aggregator import aggregate_deformities, compare_bilateral
from models.schemas import (
    AsymmetryDeformity,
    BodySide,
    DeformityType,
    JointDeformity,
    JointDirection,
    OffsetDeformity,
    OffsetDirection,
    ViewResult,
    ViewType,
)


def _side_result(side, **measurements) -> ViewResult:
    return ViewResult(view=ViewType.SIDE, side=side, analyzed=True, measurements=measurements)


class TestCompareBilateral(unittest.TestCase):
    def test_difference_above_tolerance(self) -> None:
        comparisons = compare_bilateral(
            _side_result(BodySide.LEFT, forward_neck=10.0),
            _side_result(BodySide.RIGHT, forward_neck=16.0),
        )
        self.assertEqual(len(comparisons), 1)
        self.assertEqual(comparisons[0].type, 'Forward Neck')
        self.assertEqual(comparisons[0].more_severe, BodySide.RIGHT)
        self.assertEqual(comparisons[0].difference, 6.0)

    def test_difference_within_tolerance(self) -> None:
        comparisons = compare_bilateral(
            _side_result(BodySide.LEFT, forward_neck=10.0, thoracic_curvature=30.0),
            _side_result(BodySide.RIGHT, forward_neck=12.0, thoracic_curvature=34.0),
        )
        self.assertEqual(comparisons, [])

    def test_unavailable_metric_is_skipped(self) -> None:
        comparisons = compare_bilateral(
            _side_result(BodySide.LEFT, lumbar_curvature=None),
            _side_result(BodySide.RIGHT, lumbar_curvature=70.0),
        )
        self.assertEqual(comparisons, [])


class TestAggregateDeformities(unittest.TestCase):
    def setUp(self) -> None:
        self.front = ViewResult(
            view=ViewType.FRONT,
            analyzed=True,
            measurements={'left_knee_alignment': 15.0, 'right_knee_alignment': 2.0},
            issues=['Knee malalignment'],
            deformities=[
                JointDeformity(
                    type=DeformityType.LEFT_KNEE_MALALIGNMENT,
                    side=BodySide.LEFT,
                    direction=JointDirection.VALGUS,
                    angle=15.0,
                ),
            ],
        )
        self.back = ViewResult(
            view=ViewType.BACK,
            analyzed=True,
            issues=['PSIS height asymmetry'],
            deformities=[
                AsymmetryDeformity(
                    type=DeformityType.PSIS_ASYMMETRY,
                    elevated_side=BodySide.RIGHT,
                    depressed_side=BodySide.LEFT,
                    angle=3.0,
                ),
            ],
        )
        self.forward_head = OffsetDeformity(
            type=DeformityType.FORWARD_HEAD_POSTURE,
            direction=OffsetDirection.ANTERIOR,
            angle=18.0,
            distance_cm=5.0,
        )

    def test_no_views(self) -> None:
        summary = aggregate_deformities()
        self.assertEqual(summary.frontal_plane, [])
        self.assertEqual(summary.sagittal_plane, [])
        self.assertIsNone(summary.bilateral_comparison)
        self.assertIsNone(summary.knee_analysis.front)
        self.assertIsNone(summary.knee_analysis.side)
        self.assertFalse(summary.has_findings)

    def test_frontal_plane_merges_front_and_back(self) -> None:
        summary = aggregate_deformities(self.front, self.back)
        self.assertEqual(
            [d.type for d in summary.frontal_plane],
            [DeformityType.LEFT_KNEE_MALALIGNMENT, DeformityType.PSIS_ASYMMETRY],
        )
        self.assertTrue(summary.has_findings)

    def test_unanalyzed_views_are_ignored(self) -> None:
        summary = aggregate_deformities(ViewResult(view=ViewType.FRONT), ViewResult(view=ViewType.BACK))
        self.assertEqual(summary.frontal_plane, [])
        self.assertIsNone(summary.knee_analysis.front)

    def test_front_knee_analysis(self) -> None:
        summary = aggregate_deformities(front=self.front)
        front_knees = summary.knee_analysis.front
        self.assertEqual(front_knees.left.angle, 15.0)
        self.assertEqual(front_knees.left.direction, JointDirection.VALGUS)
        self.assertEqual(front_knees.right.angle, 2.0)
        self.assertEqual(front_knees.right.direction, JointDirection.NEUTRAL)

    def test_sagittal_plane_tagged_with_side(self) -> None:
        left = _side_result(BodySide.LEFT, forward_neck=18.0)
        left.deformities.append(self.forward_head)
        summary = aggregate_deformities(side_results=[left])
        self.assertEqual(len(summary.sagittal_plane), 1)
        self.assertEqual(summary.sagittal_plane[0].side, BodySide.LEFT)
        self.assertEqual(summary.sagittal_plane[0].deformity.type, DeformityType.FORWARD_HEAD_POSTURE)

    def test_single_side_view_has_no_bilateral_comparison(self) -> None:
        summary = aggregate_deformities(side_results=[_side_result(None, forward_neck=10.0)])
        self.assertIsNone(summary.bilateral_comparison)

    def test_both_side_views_give_bilateral_comparison(self) -> None:
        summary = aggregate_deformities(
            side_results=[
                _side_result(BodySide.LEFT, forward_neck=10.0),
                _side_result(BodySide.RIGHT, forward_neck=10.5),
            ]
        )
        self.assertEqual(summary.bilateral_comparison, [])

    def test_side_knee_analysis_reads_matching_view(self) -> None:
        left = _side_result(BodySide.LEFT, left_knee_position=9.0, right_knee_position=1.0)
        left.deformities.append(
            JointDeformity(
                type=DeformityType.LEFT_KNEE_SAGITTAL,
                side=BodySide.LEFT,
                direction=JointDirection.FLEXION,
                angle=9.0,
            )
        )
        right = _side_result(BodySide.RIGHT, left_knee_position=0.0, right_knee_position=2.0)
        summary = aggregate_deformities(side_results=[left, right])
        side_knees = summary.knee_analysis.side
        self.assertEqual(side_knees.left.angle, 9.0)
        self.assertEqual(side_knees.left.direction, JointDirection.FLEXION)
        self.assertEqual(side_knees.right.angle, 2.0)
        self.assertEqual(side_knees.right.direction, JointDirection.NEUTRAL)


if __name__ == "__main__":
    unittest.main()
