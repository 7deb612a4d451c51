from .storage_provider import LocalStorageProvider
from .metadata_store import LocalMetadataStore
from .compression_provider import PassthroughCompressionProvider

__all__ = [
    'LocalStorageProvider',
    'LocalMetadataStore',
    'PassthroughCompressionProvider',
]
