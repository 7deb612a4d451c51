from .storage_provider import StorageProvider, StoredObject
from .metadata_store import MetadataStore
from .compression_provider import CompressionProvider
from .analysis_provider import AnalysisProvider

__all__ = [
    'StorageProvider',
    'StoredObject',
    'MetadataStore',
    'CompressionProvider',
    'AnalysisProvider',
]
