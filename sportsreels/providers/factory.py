from typing import Dict, Optional, Type
from loguru import logger

from .base import (
    StorageProvider,
    MetadataStore,
    CompressionProvider,
    AnalysisProvider,
)
from .azure_providers import AzureBlobStorageProvider
from .openai_providers import OpenAIAnalysisProvider
from .ffmpeg_providers import FFmpegCompressionProvider
from .custom_providers import (
    LocalStorageProvider,
    LocalMetadataStore,
    PassthroughCompressionProvider,
)
from ..utils.error_handler import ConfigurationException
from ..config.settings import SportsReelsConfig


class ProviderFactory:
    """Factory class for creating provider instances."""

    _storage_providers: Dict[str, Type[StorageProvider]] = {
        'azure': AzureBlobStorageProvider,
        'local': LocalStorageProvider,
    }

    _metadata_providers: Dict[str, Type[MetadataStore]] = {
        'local': LocalMetadataStore,
    }

    _compression_providers: Dict[str, Type[CompressionProvider]] = {
        'passthrough': PassthroughCompressionProvider,
        'ffmpeg': FFmpegCompressionProvider,
    }

    _analysis_providers: Dict[str, Type[AnalysisProvider]] = {
        'openai': OpenAIAnalysisProvider,
    }

    @staticmethod
    def _resolve(kind: str, registry: Dict[str, Type], provider_name: Optional[str], default: str) -> Type:
        provider_name = provider_name or default
        if provider_name not in registry:
            raise ConfigurationException(
                f"Unknown {kind} provider: {provider_name}. "
                f"Supported providers: {list(registry.keys())}"
            )
        logger.info(f"Creating {kind} provider: {provider_name}")
        return registry[provider_name]

    @classmethod
    def create_storage_provider(cls, provider_name: str = None, config: Optional[SportsReelsConfig] = None) -> StorageProvider:
        """
        Create storage provider instance.

        Raises:
            ConfigurationException: If provider is not supported
        """
        config = config or SportsReelsConfig()
        provider_class = cls._resolve("storage", cls._storage_providers, provider_name, config.storage.provider)
        return provider_class(config.storage.model_dump())

    @classmethod
    def create_metadata_provider(cls, provider_name: str = None, config: Optional[SportsReelsConfig] = None) -> MetadataStore:
        """
        Create metadata store instance.

        Raises:
            ConfigurationException: If provider is not supported
        """
        config = config or SportsReelsConfig()
        provider_class = cls._resolve("metadata", cls._metadata_providers, provider_name, config.metadata.provider)
        return provider_class(config.metadata.model_dump())

    @classmethod
    def create_compression_provider(cls, provider_name: str = None, config: Optional[SportsReelsConfig] = None) -> CompressionProvider:
        """
        Create compression provider instance.

        Raises:
            ConfigurationException: If provider is not supported
        """
        config = config or SportsReelsConfig()
        provider_class = cls._resolve("compression", cls._compression_providers, provider_name, config.compression.provider)
        return provider_class(config.compression.model_dump())

    @classmethod
    def create_analysis_provider(cls, provider_name: str = None, config: Optional[SportsReelsConfig] = None) -> AnalysisProvider:
        """
        Create analysis provider instance.

        Raises:
            ConfigurationException: If provider is not supported
        """
        config = config or SportsReelsConfig()
        provider_class = cls._resolve("analysis", cls._analysis_providers, provider_name, config.analysis.provider)
        return provider_class(config.analysis.model_dump())

    @classmethod
    def register_storage_provider(cls, name: str, provider_class: Type[StorageProvider]):
        """Register a new storage provider."""
        cls._storage_providers[name] = provider_class

    @classmethod
    def register_analysis_provider(cls, name: str, provider_class: Type[AnalysisProvider]):
        """Register a new analysis provider."""
        cls._analysis_providers[name] = provider_class


provider_factory = ProviderFactory()
