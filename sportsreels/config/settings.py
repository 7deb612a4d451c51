from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import Optional
from dotenv import load_dotenv, find_dotenv


_SETTINGS = dict(
    env_file=".env",
    env_file_encoding="utf-8",
    validate_assignment=True,
    extra="ignore",
    case_sensitive=False,
    populate_by_name=True,
)


class PipelineConfig(BaseSettings):
    """Upload pipeline limits and behaviour."""

    max_file_size_mb: int = Field(default=100, validation_alias="PIPELINE_MAX_FILE_SIZE_MB")
    max_description_length: int = Field(default=1000, validation_alias="PIPELINE_MAX_DESCRIPTION_LENGTH")
    video_folder: str = Field(default="videos", validation_alias="PIPELINE_VIDEO_FOLDER")
    # Spacing used to place training "key learnings" on the timeline
    training_moment_interval_seconds: int = Field(default=30, validation_alias="PIPELINE_TRAINING_MOMENT_INTERVAL")
    orphan_grace_period_minutes: int = Field(default=60, validation_alias="PIPELINE_ORPHAN_GRACE_PERIOD_MINUTES")

    model_config = SettingsConfigDict(**_SETTINGS)

    @property
    def max_file_size_bytes(self) -> int:
        return self.max_file_size_mb * 1024 * 1024


class StorageConfig(BaseSettings):
    """Object storage configuration."""

    provider: str = Field(default="local", validation_alias="STORAGE_PROVIDER")
    base_path: str = Field(default="./local_storage", validation_alias="STORAGE_BASE_PATH")
    account_url: Optional[str] = Field(default=None, validation_alias="STORAGE_ACCOUNT_URL")
    container_name: str = Field(default="videos", validation_alias="STORAGE_CONTAINER_NAME")
    use_managed_identity: bool = Field(default=True, validation_alias="STORAGE_USE_MANAGED_IDENTITY")
    connection_string: Optional[str] = Field(default=None, validation_alias="STORAGE_CONNECTION_STRING")
    managed_identity_client_id: Optional[str] = Field(default=None, validation_alias="STORAGE_MANAGED_IDENTITY_CLIENT_ID")

    model_config = SettingsConfigDict(**_SETTINGS)


class MetadataConfig(BaseSettings):
    """Metadata (table) store configuration."""

    provider: str = Field(default="local", validation_alias="METADATA_PROVIDER")
    path: Optional[str] = Field(default=None, validation_alias="METADATA_PATH")

    model_config = SettingsConfigDict(**_SETTINGS)


class CompressionConfig(BaseSettings):
    """Compression routine configuration."""

    provider: str = Field(default="passthrough", validation_alias="COMPRESSION_PROVIDER")
    max_width: int = Field(default=1280, validation_alias="COMPRESSION_MAX_WIDTH")
    max_fps: float = Field(default=30.0, validation_alias="COMPRESSION_MAX_FPS")
    crf: int = Field(default=28, validation_alias="COMPRESSION_CRF")
    preset: str = Field(default="fast", validation_alias="COMPRESSION_PRESET")
    audio_bitrate_kbps: int = Field(default=128, validation_alias="COMPRESSION_AUDIO_BITRATE_KBPS")
    output_dir: str = Field(default="Compressed", validation_alias="COMPRESSION_OUTPUT_DIR")

    model_config = SettingsConfigDict(**_SETTINGS)


class AnalysisConfig(BaseSettings):
    """AI analysis provider configuration."""

    provider: str = Field(default="openai", validation_alias="ANALYSIS_PROVIDER")
    api_key: Optional[str] = Field(default=None, validation_alias="ANALYSIS_API_KEY")
    model_name: str = Field(default="gpt-4o", validation_alias="ANALYSIS_MODEL_NAME")
    timeout: int = Field(default=600, validation_alias="ANALYSIS_TIMEOUT")
    max_retries: int = Field(default=2, validation_alias="ANALYSIS_MAX_RETRIES")
    temperature: float = Field(default=0.0, validation_alias="ANALYSIS_TEMPERATURE")

    model_config = SettingsConfigDict(**_SETTINGS)


class LoggingConfig(BaseSettings):
    """Logging configuration."""

    level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_file: Optional[str] = Field(default=None, validation_alias="LOG_FILE")
    enable_json: bool = Field(default=False, validation_alias="LOG_ENABLE_JSON")
    enable_file_logging: bool = Field(default=False, validation_alias="LOG_ENABLE_FILE")
    max_file_size: str = Field(default="10 MB", validation_alias="LOG_MAX_FILE_SIZE")
    retention_days: int = Field(default=7, validation_alias="LOG_RETENTION_DAYS")

    model_config = SettingsConfigDict(**_SETTINGS)


class SportsReelsConfig(BaseSettings):
    """Main configuration class."""

    app_name: str = Field(default="SportsReels Video Pipeline", validation_alias="APP_NAME")
    app_version: str = Field(default="1.0.0", validation_alias="APP_VERSION")
    debug: bool = Field(default=False, validation_alias="DEBUG")
    environment: str = Field(default="development", validation_alias="ENVIRONMENT")

    model_config = SettingsConfigDict(**_SETTINGS)

    def __init__(self, **kwargs):
        # Force load environment variables before initializing
        load_dotenv(find_dotenv())

        super().__init__(**kwargs)
        self._pipeline = None
        self._storage = None
        self._metadata = None
        self._compression = None
        self._analysis = None
        self._logging = None

    @property
    def pipeline(self) -> PipelineConfig:
        if self._pipeline is None:
            self._pipeline = PipelineConfig()
        return self._pipeline

    @property
    def storage(self) -> StorageConfig:
        if self._storage is None:
            self._storage = StorageConfig()
        return self._storage

    @property
    def metadata(self) -> MetadataConfig:
        if self._metadata is None:
            self._metadata = MetadataConfig()
        return self._metadata

    @property
    def compression(self) -> CompressionConfig:
        if self._compression is None:
            self._compression = CompressionConfig()
        return self._compression

    @property
    def analysis(self) -> AnalysisConfig:
        if self._analysis is None:
            self._analysis = AnalysisConfig()
        return self._analysis

    @property
    def logging(self) -> LoggingConfig:
        if self._logging is None:
            self._logging = LoggingConfig()
        return self._logging
