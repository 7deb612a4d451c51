from azure.core.exceptions import ResourceNotFoundError
from azure.storage.blob import ContentSettings
from azure.storage.blob.aio import BlobServiceClient
from loguru import logger
from typing import Any, Dict, List, Optional
from sportsreels.providers.base import StorageProvider, StoredObject
from sportsreels.providers.base.storage_provider import ProgressCallback
from sportsreels.providers.credentials import AzureCredentials
from sportsreels.utils.error_handler import handle_exceptions, convert_exceptions
from sportsreels.utils.error_handler import ProviderException, ConfigurationException


class AzureBlobStorageProvider(StorageProvider):
    """Azure Blob Storage provider implementation."""

    def __init__(self, config: Dict[str, Any]):
        """
        Initialize Azure Blob Storage Provider.

        Args:
            config: Configuration dictionary with:
                - account_url: Azure Storage account URL
                - container_name: container holding the videos (default: videos)
                - use_managed_identity: authenticate with Azure AD credentials (default: True)
                - managed_identity_client_id: client id of a user-assigned identity (optional)
                - connection_string: used instead of Azure AD credentials when managed identity is off
        """
        self.config = config
        self.container_name = config.get("container_name") or "videos"
        self.credential = None
        self.service_client = None

    def _initialize(self):
        """Create the credential and service client."""
        try:
            if self.config.get("use_managed_identity", True):
                account_url = self.config.get("account_url")
                if not account_url:
                    raise ConfigurationException("Azure Storage account_url is required")
                self.credential = AzureCredentials.get_async_credentials(
                    self.config.get("managed_identity_client_id")
                )
                self.service_client = BlobServiceClient(account_url=account_url, credential=self.credential)
            else:
                connection_string = self.config.get("connection_string")
                if not connection_string:
                    raise ConfigurationException(
                        "Azure Storage connection_string is required when managed identity is disabled"
                    )
                self.service_client = BlobServiceClient.from_connection_string(connection_string)
            logger.info("Successfully initialized Azure Blob Storage client")
        except ConfigurationException:
            raise
        except Exception as e:
            logger.exception(f"Failed to initialize Azure Blob Storage client: {e}")
            raise ProviderException(f"Failed to initialize Azure Blob Storage client: {e}")

    def _ensure_initialized(self):
        """Ensure the client is initialized before operations."""
        if self.service_client is None:
            self._initialize()

    def _url_for(self, path: str) -> str:
        return f"{self.service_client.url.rstrip('/')}/{self.container_name}/{path}"

    @handle_exceptions(retries=3, exceptions=(ProviderException,))
    @convert_exceptions({Exception: ProviderException})
    async def put(self, path: str, data: bytes, content_type: str = "application/octet-stream",
                  on_progress: Optional[ProgressCallback] = None) -> str:
        """Upload bytes as a block blob. Paths are unique per call, so overwrite is refused."""
        self._ensure_initialized()

        async def progress_hook(current: int, total: Optional[int]):
            if on_progress:
                on_progress(current * 100.0 / (total or len(data) or 1))

        client = None
        try:
            logger.info(f"Uploading {len(data)} bytes to Container: {self.container_name}, Blob: {path}")
            client = self.service_client.get_blob_client(container=self.container_name, blob=path)
            await client.upload_blob(
                data,
                overwrite=False,
                content_settings=ContentSettings(content_type=content_type),
                progress_hook=progress_hook,
            )
            if on_progress:
                on_progress(100.0)
            return self._url_for(path)
        except Exception as e:
            logger.exception(f"Error uploading blob {path}: {e}")
            raise ProviderException(f"Error uploading blob {path}: {e}")
        finally:
            if client:
                await client.close()

    @convert_exceptions({Exception: ProviderException})
    async def delete(self, path: str) -> bool:
        self._ensure_initialized()

        client = self.service_client.get_blob_client(container=self.container_name, blob=path)
        try:
            await client.delete_blob()
            logger.info(f"Deleted blob {path}")
            return True
        except ResourceNotFoundError:
            logger.debug(f"Blob {path} not found, nothing to delete")
            return False
        finally:
            await client.close()

    @convert_exceptions({Exception: ProviderException})
    async def list_objects(self, prefix: str = "") -> List[StoredObject]:
        self._ensure_initialized()

        objects = []
        container = self.service_client.get_container_client(self.container_name)
        try:
            async for blob in container.list_blobs(name_starts_with=prefix or None):
                objects.append(StoredObject(
                    path=blob.name,
                    url=self._url_for(blob.name),
                    size=blob.size or 0,
                    last_modified=blob.last_modified,
                ))
        finally:
            await container.close()
        return objects

    async def close(self):
        """Close the underlying service client and cleanup."""
        if self.service_client:
            logger.info("Closing Azure Blob Storage client")
            await self.service_client.close()
        if self.credential:
            await self.credential.close()
