from .models import (
    AnalysisData,
    AnalysisDiagnostic,
    AnalysisStatus,
    Importance,
    KeyMoment,
    MatchDetails,
    MediaFile,
    PipelineStage,
    PipelineState,
    PlayerAction,
    PlayerStat,
    PlayerTracking,
    Sport,
    TaggedPlayer,
    UploaderContext,
    UploadMetadata,
    VideoRecord,
    VideoType,
    clamp_timestamp,
    ensure_status_transition,
)
from .sport_classifier import classify_sport, resolve_sport
from .normalizer import AnalysisNormalizer, normalize_analysis
from .aggregator import aggregate_key_moments, aggregate_player_actions, with_aggregated_lists
from .filters import FilterSpec, filter_actions, filter_moments

__all__ = [
    "AnalysisData",
    "AnalysisDiagnostic",
    "AnalysisStatus",
    "Importance",
    "KeyMoment",
    "MatchDetails",
    "MediaFile",
    "PipelineStage",
    "PipelineState",
    "PlayerAction",
    "PlayerStat",
    "PlayerTracking",
    "Sport",
    "TaggedPlayer",
    "UploaderContext",
    "UploadMetadata",
    "VideoRecord",
    "VideoType",
    "clamp_timestamp",
    "ensure_status_transition",
    "classify_sport",
    "resolve_sport",
    "AnalysisNormalizer",
    "normalize_analysis",
    "aggregate_key_moments",
    "aggregate_player_actions",
    "with_aggregated_lists",
    "FilterSpec",
    "filter_actions",
    "filter_moments",
]
