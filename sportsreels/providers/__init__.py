"""Provider system for the SportsReels video pipeline."""

from .base import (
    StorageProvider,
    StoredObject,
    MetadataStore,
    CompressionProvider,
    AnalysisProvider,
)
from .factory import ProviderFactory, provider_factory
from .custom_providers import (
    LocalStorageProvider,
    LocalMetadataStore,
    PassthroughCompressionProvider,
)
from .azure_providers import AzureBlobStorageProvider
from .openai_providers import OpenAIAnalysisProvider
from .ffmpeg_providers import FFmpegCompressionProvider

__all__ = [
    # Base classes
    'StorageProvider',
    'StoredObject',
    'MetadataStore',
    'CompressionProvider',
    'AnalysisProvider',
    # Factory
    'ProviderFactory',
    'provider_factory',
    # Local providers
    'LocalStorageProvider',
    'LocalMetadataStore',
    'PassthroughCompressionProvider',
    # Azure providers
    'AzureBlobStorageProvider',
    # OpenAI providers
    'OpenAIAnalysisProvider',
    # FFmpeg providers
    'FFmpegCompressionProvider',
]
