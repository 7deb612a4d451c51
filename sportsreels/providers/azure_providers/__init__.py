from .storage_provider import AzureBlobStorageProvider

__all__ = [
    'AzureBlobStorageProvider',
]
