"""Video upload and analysis pipeline. See ``service.VideoAnalysisService`` for the entry point."""

from .core import (
    AnalysisData,
    AnalysisStatus,
    FilterSpec,
    MediaFile,
    PipelineStage,
    Sport,
    UploaderContext,
    UploadMetadata,
    VideoRecord,
    VideoType,
)

__all__ = [
    "AnalysisData",
    "AnalysisStatus",
    "FilterSpec",
    "MediaFile",
    "PipelineStage",
    "Sport",
    "UploaderContext",
    "UploadMetadata",
    "VideoRecord",
    "VideoType",
]
