from __future__ import annotations

import unittest

from measure.exercise_protocol import generate_exercise_protocol
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


class TestExerciseProtocol(unittest.TestCase):
    def test_maintenance_when_no_issues(self) -> None:
        results = [
            ViewResult(view=ViewType.FRONT, analyzed=True, is_normal=True),
            ViewResult(view=ViewType.BACK),
            None,
        ]
        protocol = generate_exercise_protocol(results)
        self.assertTrue(protocol.maintenance)
        self.assertTrue(protocol.exercises.startswith('Maintenance Protocol:'))
        self.assertIn('2-3 times per week', protocol.schedule)

    def test_corrective_protocol_lists_matching_regions(self) -> None:
        side = ViewResult(
            view=ViewType.SIDE,
            analyzed=True,
            issues=['Forward neck posture'],
            deformities=[
                OffsetDeformity(
                    type=DeformityType.FORWARD_HEAD_POSTURE,
                    direction=OffsetDirection.ANTERIOR,
                    angle=20.0,
                ),
            ],
        )
        back = ViewResult(
            view=ViewType.BACK,
            analyzed=True,
            issues=['Ankle malalignment'],
            deformities=[
                JointDeformity(
                    type=DeformityType.RIGHT_ANKLE_MALALIGNMENT,
                    side=BodySide.RIGHT,
                    direction=JointDirection.PRONATION,
                    angle=9.0,
                ),
            ],
        )
        protocol = generate_exercise_protocol([side, back])

        self.assertFalse(protocol.maintenance)
        lines = protocol.exercises.split('\n')
        self.assertEqual(lines[0], '1. General Corrective Protocol:')
        self.assertIn('2. Neck Strengthening Protocol:', lines)
        self.assertIn('3. Ankle Stability Protocol:', lines)
        self.assertNotIn('Shoulder Stabilization Protocol:', protocol.exercises)
        self.assertEqual(
            protocol.schedule.split('\n'),
            [
                'General corrective exercises: Daily',
                'Neck exercises: Daily, morning and evening',
                'Ankle exercises: 4-5 days per week',
            ],
        )

    def test_ankle_height_and_position_map_to_ankle_protocol(self) -> None:
        for deformity in (
            AsymmetryDeformity(
                type=DeformityType.ANKLE_HEIGHT_ASYMMETRY,
                elevated_side=BodySide.LEFT,
                depressed_side=BodySide.RIGHT,
                angle=4.1,
            ),
            OffsetDeformity(
                type=DeformityType.ANKLE_SAGITTAL_POSITION,
                direction=OffsetDirection.POSTERIOR,
                angle=12.0,
            ),
        ):
            result = ViewResult(
                view=ViewType.FRONT, analyzed=True, issues=['Ankle finding'], deformities=[deformity],
            )
            protocol = generate_exercise_protocol([result])
            self.assertIn('2. Ankle Stability Protocol:', protocol.exercises.split('\n'))
            self.assertIn('Ankle exercises: 4-5 days per week', protocol.schedule)

    def test_issue_without_deformity_gets_general_protocol_only(self) -> None:
        result = ViewResult(view=ViewType.FRONT, analyzed=True, issues=['Something unusual'])
        protocol = generate_exercise_protocol([result])
        self.assertFalse(protocol.maintenance)
        self.assertEqual(protocol.schedule, 'General corrective exercises: Daily')


if __name__ == "__main__":
    unittest.main()
