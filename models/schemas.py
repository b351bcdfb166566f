"""
Pydantic schemas for the Clinical Posture Measurement API.
"""

from enum import Enum
from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field


class ViewType(str, Enum):
    """Photographed view of the subject."""

    FRONT = "front"
    SIDE = "side"
    BACK = "back"


class BodySide(str, Enum):
    LEFT = "LEFT"
    RIGHT = "RIGHT"


class OffsetDirection(str, Enum):
    LEFT = "LEFT"
    RIGHT = "RIGHT"
    ANTERIOR = "ANTERIOR"
    POSTERIOR = "POSTERIOR"


class ShoulderPosition(str, Enum):
    ROUNDED = "ROUNDED"
    RETRACTED = "RETRACTED"


class CurvatureDirection(str, Enum):
    EXCESSIVE = "EXCESSIVE"
    REDUCED = "REDUCED"


class JointDirection(str, Enum):
    VALGUS = "VALGUS"
    VARUS = "VARUS"
    PRONATION = "PRONATION"
    SUPINATION = "SUPINATION"
    FLEXION = "FLEXION"
    HYPEREXTENSION = "HYPEREXTENSION"
    NEUTRAL = "NEUTRAL"


class DeformityType(str, Enum):
    """Type tag of a classified deformity."""

    EAR_PINNAE_ASYMMETRY = "Ear Pinnae Asymmetry"
    NECK_LATERAL_DEVIATION = "Neck Lateral Deviation"
    SHOULDER_ASYMMETRY = "Shoulder Asymmetry"
    SCAPULAR_ASYMMETRY = "Scapular Asymmetry"
    ELBOW_ASYMMETRY = "Elbow Asymmetry"
    PELVIC_OBLIQUITY = "Pelvic Obliquity"
    PSIS_ASYMMETRY = "PSIS Asymmetry"
    LEFT_KNEE_MALALIGNMENT = "Left Knee Malalignment"
    RIGHT_KNEE_MALALIGNMENT = "Right Knee Malalignment"
    KNEE_HEIGHT_ASYMMETRY = "Knee Height Asymmetry"
    POPLITEAL_HEIGHT_ASYMMETRY = "Popliteal Height Asymmetry"
    GLUTEAL_FOLD_ASYMMETRY = "Gluteal Fold Asymmetry"
    LEFT_ANKLE_MALALIGNMENT = "Left Ankle Malalignment"
    RIGHT_ANKLE_MALALIGNMENT = "Right Ankle Malalignment"
    ANKLE_HEIGHT_ASYMMETRY = "Ankle Height Asymmetry"
    FORWARD_HEAD_POSTURE = "Forward Head Posture"
    CHIN_FORWARD_POSTURE = "Chin Forward Posture"
    SHOULDER_SAGITTAL_POSITION = "Shoulder Sagittal Position"
    THORACIC_KYPHOSIS = "Thoracic Kyphosis"
    LUMBAR_LORDOSIS = "Lumbar Lordosis"
    LEFT_KNEE_SAGITTAL = "Left Knee Sagittal Alignment"
    RIGHT_KNEE_SAGITTAL = "Right Knee Sagittal Alignment"
    ANKLE_SAGITTAL_POSITION = "Ankle Sagittal Position"


class Landmark(BaseModel):
    """One pose landmark as produced by the pose estimation model."""

    x: float
    y: float
    z: Optional[float] = None
    visibility: Optional[float] = None


class CalibrationRequest(BaseModel):
    """User supplied anthropometric measurements; missing fields use defaults."""

    head_width_cm: Optional[float] = Field(None, description="Head width (ear to ear) in cm")
    shoulder_width_cm: Optional[float] = Field(None, description="Shoulder width in cm")
    hip_width_cm: Optional[float] = Field(None, description="Hip width in cm")
    neck_length_cm: Optional[float] = Field(None, description="Neck length in cm")


class CalibrationProfileOut(BaseModel):
    head_width_cm: float
    shoulder_width_cm: float
    hip_width_cm: float
    neck_length_cm: float


class AsymmetryDeformity(BaseModel):
    """Level difference between a paired landmark (ears, shoulders, hips...)."""

    kind: Literal["asymmetry"] = "asymmetry"
    type: DeformityType
    elevated_side: BodySide
    depressed_side: BodySide
    angle: float
    distance_cm: Optional[float] = None


class OffsetDeformity(BaseModel):
    """Displacement of a segment from its reference line."""

    kind: Literal["offset"] = "offset"
    type: DeformityType
    direction: Union[OffsetDirection, ShoulderPosition, CurvatureDirection]
    angle: float
    distance_cm: Optional[float] = None


class LengthDeformity(BaseModel):
    """Length difference between left and right segments."""

    kind: Literal["length"] = "length"
    type: DeformityType
    longer_side: BodySide
    shorter_side: BodySide
    percentage: float


class JointDeformity(BaseModel):
    """Knee or ankle malalignment of one limb."""

    kind: Literal["joint"] = "joint"
    type: DeformityType
    side: BodySide
    direction: JointDirection
    angle: float


Deformity = Annotated[
    Union[AsymmetryDeformity, OffsetDeformity, LengthDeformity, JointDeformity],
    Field(discriminator="kind"),
]


class ViewResult(BaseModel):
    """Output of one view analyzer."""

    view: ViewType
    side: Optional[BodySide] = None
    analyzed: bool = False
    is_normal: bool = False
    measurements: Dict[str, Optional[float]] = Field(default_factory=dict)
    issues: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    deformities: List[Deformity] = Field(default_factory=list)


class SagittalDeformity(BaseModel):
    side: Optional[BodySide] = None
    deformity: Deformity


class BilateralComparison(BaseModel):
    type: str
    more_severe: BodySide
    left_value: float
    right_value: float
    difference: float


class KneeReading(BaseModel):
    angle: Optional[float] = None
    direction: JointDirection = JointDirection.NEUTRAL


class LimbPair(BaseModel):
    left: Optional[KneeReading] = None
    right: Optional[KneeReading] = None


class KneeAnalysis(BaseModel):
    front: Optional[LimbPair] = None
    side: Optional[LimbPair] = None


class DeformitySummary(BaseModel):
    """Structured deformity summary rebuilt on every analysis run.

    Knee readings are filled in for every analyzed front or side view, with a
    NEUTRAL direction when the knee is within limits, so a normal run still
    carries them. Use ``has_findings`` to tell an empty summary apart.
    """

    frontal_plane: List[Deformity] = Field(default_factory=list)
    sagittal_plane: List[SagittalDeformity] = Field(default_factory=list)
    bilateral_comparison: Optional[List[BilateralComparison]] = None
    knee_analysis: KneeAnalysis = Field(default_factory=KneeAnalysis)

    @property
    def has_findings(self) -> bool:
        if self.frontal_plane or self.sagittal_plane or self.bilateral_comparison:
            return True
        for pair in (self.knee_analysis.front, self.knee_analysis.side):
            if pair is None:
                continue
            for reading in (pair.left, pair.right):
                if reading is not None and reading.direction != JointDirection.NEUTRAL:
                    return True
        return False


class PostureAnalysisResult(BaseModel):
    """Complete posture analysis handed to report and narrative consumers."""

    front: ViewResult = Field(default_factory=lambda: ViewResult(view=ViewType.FRONT))
    side: Optional[ViewResult] = None
    side_left: Optional[ViewResult] = None
    side_right: Optional[ViewResult] = None
    back: ViewResult = Field(default_factory=lambda: ViewResult(view=ViewType.BACK))
    deformity_summary: DeformitySummary = Field(default_factory=DeformitySummary)

    def view_results(self) -> List[ViewResult]:
        """All present view results in report order."""
        results = [self.front, self.side, self.side_left, self.side_right, self.back]
        return [result for result in results if result is not None]


class PostureLandmarksRequest(BaseModel):
    """Landmark sets per view; omitted views are skipped."""

    front: Optional[List[Landmark]] = None
    side: Optional[List[Landmark]] = None
    side_left: Optional[List[Landmark]] = None
    side_right: Optional[List[Landmark]] = None
    back: Optional[List[Landmark]] = None
    calibration: Optional[CalibrationRequest] = None


class ExerciseProtocol(BaseModel):
    exercises: str
    schedule: str
    maintenance: bool = False


class NarrativeReport(BaseModel):
    """Free text produced by the narrative generator."""

    summary: str
    exercises: str
