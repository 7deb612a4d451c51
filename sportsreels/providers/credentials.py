"""Azure credentials for blob storage."""

from typing import Optional

from azure.identity.aio import (
    AzureCliCredential,
    ChainedTokenCredential,
    DefaultAzureCredential,
    ManagedIdentityCredential,
)


class AzureCredentials:

    @staticmethod
    def get_async_credentials(managed_identity_client_id: Optional[str] = None):
        """
        Developer CLI login first, then the ambient identity of the host.

        A user-assigned identity is tried explicitly when its client id is given.
        """
        chain = [AzureCliCredential()]
        if managed_identity_client_id:
            chain.append(ManagedIdentityCredential(client_id=managed_identity_client_id))
        chain.append(DefaultAzureCredential())
        return ChainedTokenCredential(*chain)
