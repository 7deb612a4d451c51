from .settings import (
    SportsReelsConfig,
    PipelineConfig,
    StorageConfig,
    MetadataConfig,
    CompressionConfig,
    AnalysisConfig,
    LoggingConfig,
)

__all__ = [
    "SportsReelsConfig",
    "PipelineConfig",
    "StorageConfig",
    "MetadataConfig",
    "CompressionConfig",
    "AnalysisConfig",
    "LoggingConfig",
]
