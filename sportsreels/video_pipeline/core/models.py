"""
Data models for the video upload and analysis pipeline.

Persistent shapes (``VideoRecord`` and the canonical ``AnalysisData``) are pydantic
models with camelCase aliases, matching the JSON consumed by the timeline, heat map,
formation and statistics views. Transient state lives in dataclasses.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from sportsreels.exceptions import ValidationException


class VideoType(str, Enum):
    MATCH = "match"
    TRAINING = "training"
    INTERVIEW = "interview"
    HIGHLIGHT = "highlight"

    def __str__(self):
        return self.value


class AnalysisStatus(str, Enum):
    PENDING = "pending"
    ANALYZING = "analyzing"
    COMPLETED = "completed"
    FAILED = "failed"

    def __str__(self):
        return self.value


class Importance(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    def __str__(self):
        return self.value


class Sport(str, Enum):
    FOOTBALL = "football"
    BASKETBALL = "basketball"
    RUGBY = "rugby"
    TENNIS = "tennis"
    VOLLEYBALL = "volleyball"
    BASEBALL = "baseball"
    CRICKET = "cricket"
    HOCKEY = "hockey"
    GOLF = "golf"
    SWIMMING = "swimming"
    ATHLETICS = "athletics"

    def __str__(self):
        return self.value


class PipelineStage(str, Enum):
    IDLE = "idle"
    COMPRESSING = "compressing"
    UPLOADING = "uploading"
    PERSISTING = "persisting"
    ANALYZING = "analyzing"

    def __str__(self):
        return self.value


ACTIVE_STAGES = (
    PipelineStage.COMPRESSING,
    PipelineStage.UPLOADING,
    PipelineStage.PERSISTING,
    PipelineStage.ANALYZING,
)

_STATUS_TRANSITIONS = {
    AnalysisStatus.PENDING: {AnalysisStatus.ANALYZING},
    AnalysisStatus.ANALYZING: {AnalysisStatus.COMPLETED, AnalysisStatus.FAILED},
    AnalysisStatus.COMPLETED: set(),
    AnalysisStatus.FAILED: set(),
}


def ensure_status_transition(current: AnalysisStatus, new: AnalysisStatus, reanalysis: bool = False) -> AnalysisStatus:
    """
    Check that ``current -> new`` is a legal analysis status move.

    Status only advances pending -> analyzing -> completed|failed. A finished
    record may go back to analyzing only through an explicit re-analysis.
    """
    current = AnalysisStatus(current)
    new = AnalysisStatus(new)
    if new in _STATUS_TRANSITIONS[current]:
        return new
    if reanalysis and new == AnalysisStatus.ANALYZING and current in (AnalysisStatus.COMPLETED, AnalysisStatus.FAILED):
        return new
    raise ValidationException(
        f"Invalid analysis status transition: {current.value} -> {new.value}",
        field="status",
        error_code="INVALID_STATUS_TRANSITION",
    )


def clamp_timestamp(timestamp: float, duration: Optional[float]) -> float:
    """Clamp a timestamp into [0, duration] for playback seeking."""
    value = max(0.0, float(timestamp or 0.0))
    if duration is not None and duration > 0:
        value = min(value, float(duration))
    return value


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CanonicalModel(BaseModel):
    """Immutable base for the canonical analysis schema."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )


# ---------------------------------------------------------------------------
# Canonical analysis schema
# ---------------------------------------------------------------------------

class PlayerAction(CanonicalModel):
    timestamp: float = Field(default=0.0, ge=0)
    action: str
    description: str = ""
    confidence: float = 0.0
    players: List[str] = Field(default_factory=list)
    zone: str = ""
    outcome: Optional[str] = None

    @field_validator("confidence", mode="before")
    @classmethod
    def _clamp_confidence(cls, v):
        try:
            return min(1.0, max(0.0, float(v)))
        except (TypeError, ValueError):
            return 0.0


class KeyMoment(CanonicalModel):
    timestamp: float = Field(default=0.0, ge=0)
    type: str
    description: str = ""
    importance: Importance = Importance.MEDIUM
    context: Optional[str] = None
    participants: List[str] = Field(default_factory=list)

    @field_validator("importance", mode="before")
    @classmethod
    def _known_importance(cls, v):
        try:
            return Importance(str(v).lower())
        except ValueError:
            return Importance.MEDIUM


class PlayerStat(CanonicalModel):
    name: str
    position: str = ""
    rating: float = 0.0
    actions: Dict[str, int] = Field(default_factory=dict)


class TimelineBucket(CanonicalModel):
    timestamp: float = Field(default=0.0, ge=0)
    minute: Optional[int] = None
    label: str = ""
    events: List[str] = Field(default_factory=list)


class PositionSample(CanonicalModel):
    x: float
    y: float
    timestamp: float = 0.0
    confidence: float = 0.0


class HeatMapPoint(CanonicalModel):
    x: float
    y: float
    intensity: float = 0.0
    timestamp: float = 0.0


class TrackedMoment(CanonicalModel):
    timestamp: float = Field(default=0.0, ge=0)
    type: str
    description: str = ""
    confidence: float = 0.0
    field_position: str = ""
    outcome: Optional[str] = None


class PlayerTracking(CanonicalModel):
    player_id: str = ""
    player_name: str
    jersey_number: Optional[int] = None
    position: str = ""
    positions: List[PositionSample] = Field(default_factory=list)
    total_distance: float = 0.0
    average_speed: float = 0.0
    max_speed: float = 0.0
    heat_map_data: List[HeatMapPoint] = Field(default_factory=list)
    key_moments: List[TrackedMoment] = Field(default_factory=list)


class FormationPosition(CanonicalModel):
    player_id: str = ""
    position: str = ""
    x: float = 0.0
    y: float = 0.0


class FormationChange(CanonicalModel):
    formation: str
    positions: List[FormationPosition] = Field(default_factory=list)
    confidence: float = 0.0
    timestamp: float = 0.0


class PressingMoment(CanonicalModel):
    timestamp: float = 0.0
    duration: float = 0.0
    intensity: str = "medium"
    players_involved: List[str] = Field(default_factory=list)
    success: bool = False


class BuildUpPlay(CanonicalModel):
    timestamp: float = 0.0
    duration: float = 0.0
    players_involved: List[str] = Field(default_factory=list)
    passes: int = 0
    outcome: str = "failed"


class DefensiveAction(CanonicalModel):
    timestamp: float = 0.0
    type: str = "tackle"
    player_id: str = ""
    success: bool = False
    field_position: str = ""


class AttackingPattern(CanonicalModel):
    timestamp: float = 0.0
    type: str = "possession-play"
    players_involved: List[str] = Field(default_factory=list)
    outcome: str = "failed"


class TacticalAnalysis(CanonicalModel):
    formation_changes: List[FormationChange] = Field(default_factory=list)
    pressing_moments: List[PressingMoment] = Field(default_factory=list)
    build_up_play: List[BuildUpPlay] = Field(default_factory=list)
    defensive_actions: List[DefensiveAction] = Field(default_factory=list)
    attacking_patterns: List[AttackingPattern] = Field(default_factory=list)

    def is_empty(self) -> bool:
        return not (
            self.formation_changes or self.pressing_moments or self.build_up_play
            or self.defensive_actions or self.attacking_patterns
        )


class TeamSplit(CanonicalModel):
    home: float = 0.0
    away: float = 0.0


class PassSplit(CanonicalModel):
    home: float = 0.0
    away: float = 0.0
    accuracy: TeamSplit = Field(default_factory=TeamSplit)


class GoalEvent(CanonicalModel):
    timestamp: float = 0.0
    player_id: str = ""
    team: str = "home"
    type: str = "open-play"
    assist_player_id: Optional[str] = None
    field_position: str = ""


class CardEvent(CanonicalModel):
    timestamp: float = 0.0
    player_id: str = ""
    team: str = "home"
    type: str = "yellow"
    reason: str = ""


class SubstitutionEvent(CanonicalModel):
    timestamp: float = 0.0
    player_out: str = ""
    player_in: str = ""
    team: str = "home"
    reason: str = "tactical"


class MatchStatistics(CanonicalModel):
    possession: TeamSplit = Field(default_factory=lambda: TeamSplit(home=50, away=50))
    shots: TeamSplit = Field(default_factory=TeamSplit)
    passes: PassSplit = Field(default_factory=PassSplit)
    goals: List[GoalEvent] = Field(default_factory=list)
    cards: List[CardEvent] = Field(default_factory=list)
    substitutions: List[SubstitutionEvent] = Field(default_factory=list)


class PlayerRating(CanonicalModel):
    player_id: str = ""
    player_name: str
    overall_rating: float = 0.0
    technical_rating: float = 0.0
    tactical_rating: float = 0.0
    physical_rating: float = 0.0
    key_actions: int = 0
    influence: float = 0.0


class PerformanceMetrics(CanonicalModel):
    overall_team_rating: float = 0.0
    individual_ratings: List[PlayerRating] = Field(default_factory=list)
    tactical_effectiveness: float = 0.0
    physical_performance: float = 0.0
    technical_execution: float = 0.0


class CriticalMoment(CanonicalModel):
    timestamp: float = 0.0
    type: str
    description: str = ""
    importance: Importance = Importance.HIGH
    players_involved: List[str] = Field(default_factory=list)
    outcome: str = ""


class SportSpecificInsights(CanonicalModel):
    formation: str = "Unknown"
    tactical_style: str = "Balanced"
    key_strengths: List[str] = Field(default_factory=list)
    areas_for_improvement: List[str] = Field(default_factory=list)
    critical_moments: List[CriticalMoment] = Field(default_factory=list)
    performance_metrics: PerformanceMetrics = Field(default_factory=PerformanceMetrics)


class AnalysisData(CanonicalModel):
    """The single normalized analysis schema every video type is mapped into."""

    video_type: VideoType
    sport: Sport = Sport.FOOTBALL
    player_actions: List[PlayerAction] = Field(default_factory=list)
    key_moments: List[KeyMoment] = Field(default_factory=list)
    summary: str = ""
    insights: List[str] = Field(default_factory=list)
    performance_rating: float = Field(default=0.0, ge=0, le=10)
    player_stats: List[PlayerStat] = Field(default_factory=list)
    timeline: List[TimelineBucket] = Field(default_factory=list)
    player_tracking: List[PlayerTracking] = Field(default_factory=list)
    tactical_analysis: TacticalAnalysis = Field(default_factory=TacticalAnalysis)
    match_statistics: Optional[MatchStatistics] = None
    sport_specific_insights: Optional[SportSpecificInsights] = None
    recommendations: List[str] = Field(default_factory=list)
    confidence: Optional[float] = None
    processing_time: Optional[float] = None


class AnalysisDiagnostic(CanonicalModel):
    """Stored in place of analysis data when the analysis stage fails."""

    message: str
    stage: str = PipelineStage.ANALYZING.value
    error_code: Optional[str] = None
    timestamp: datetime = Field(default_factory=utc_now)


# ---------------------------------------------------------------------------
# Video record and upload metadata
# ---------------------------------------------------------------------------

class TaggedPlayer(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    player_id: str
    name: str
    jersey_number: Optional[int] = None
    position: Optional[str] = None


class MatchDetails(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    opposing_team: Optional[str] = None
    venue: Optional[str] = None
    match_date: Optional[str] = None
    score: Optional[str] = None
    league: Optional[str] = None


class UploadMetadata(BaseModel):
    """Structured metadata supplied with a selected file."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    title: str = ""
    video_type: VideoType = VideoType.MATCH
    description: str = ""
    tags: List[str] = Field(default_factory=list)
    match_details: Optional[MatchDetails] = None
    tagged_players: List[TaggedPlayer] = Field(default_factory=list)
    duration: Optional[float] = Field(default=None, ge=0)
    thumbnail_url: Optional[str] = None
    upload_key: Optional[str] = None


class VideoRecord(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    id: str
    team_id: str
    uploader_id: Optional[str] = None
    title: str
    url: str
    storage_path: str = ""
    compressed_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    duration: float = Field(default=0.0, ge=0)
    file_size: int = Field(default=0, ge=0)
    video_type: VideoType
    created_at: datetime = Field(default_factory=utc_now)
    match_details: Optional[MatchDetails] = None
    tagged_players: List[TaggedPlayer] = Field(default_factory=list)
    description: str = ""
    tags: List[str] = Field(default_factory=list)
    status: AnalysisStatus = AnalysisStatus.PENDING
    sport: Optional[Sport] = None
    upload_key: Optional[str] = None
    analysis_data: Optional[AnalysisData] = None
    analysis_error: Optional[AnalysisDiagnostic] = None

    def to_row(self) -> Dict:
        """Serialize for the metadata store (snake_case, JSON-safe)."""
        return self.model_dump(mode="json")

    @classmethod
    def from_row(cls, row: Dict) -> "VideoRecord":
        return cls.model_validate(row)


# ---------------------------------------------------------------------------
# Transient pipeline state
# ---------------------------------------------------------------------------

@dataclass
class MediaFile:
    """A selected (or compressed) video held in memory."""
    filename: str
    content_type: str
    data: bytes
    duration: Optional[float] = None

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def extension(self) -> str:
        _, dot, ext = self.filename.rpartition(".")
        return f".{ext.lower()}" if dot and ext else ""


@dataclass
class UploaderContext:
    """Who is uploading, passed in explicitly rather than looked up per call."""
    team_id: str
    uploader_id: str


@dataclass
class PipelineState:
    """Current stage, per-stage progress and error of one in-progress upload."""
    stage: PipelineStage = PipelineStage.IDLE
    progress: Dict[str, float] = field(default_factory=dict)
    error: Optional[Exception] = None

    def __post_init__(self):
        for stage in ACTIVE_STAGES:
            self.progress.setdefault(stage.value, 0.0)

    def enter(self, stage: PipelineStage):
        self.stage = stage
        self.progress[stage.value] = 0.0

    def report(self, stage: PipelineStage, percent: float):
        self.progress[stage.value] = min(100.0, max(0.0, float(percent)))

    def reset(self, error: Optional[Exception] = None):
        self.stage = PipelineStage.IDLE
        self.error = error
