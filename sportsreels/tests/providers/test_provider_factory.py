import pytest

from sportsreels.config.settings import SportsReelsConfig
from sportsreels.exceptions import ConfigurationException
from sportsreels.providers.custom_providers import (
    LocalMetadataStore,
    LocalStorageProvider,
    PassthroughCompressionProvider,
)
from sportsreels.providers.factory import ProviderFactory


@pytest.fixture
def config(tmp_path, monkeypatch):
    monkeypatch.setenv("STORAGE_PROVIDER", "local")
    monkeypatch.setenv("STORAGE_BASE_PATH", str(tmp_path / "storage"))
    monkeypatch.setenv("METADATA_PROVIDER", "local")
    monkeypatch.setenv("COMPRESSION_PROVIDER", "passthrough")
    return SportsReelsConfig()


def test_creates_configured_local_providers(config, tmp_path):
    storage = ProviderFactory.create_storage_provider(config=config)

    assert isinstance(storage, LocalStorageProvider)
    assert storage.base_path == (tmp_path / "storage").resolve()
    assert isinstance(ProviderFactory.create_metadata_provider(config=config), LocalMetadataStore)
    assert isinstance(ProviderFactory.create_compression_provider(config=config), PassthroughCompressionProvider)


def test_explicit_name_overrides_config(config):
    compressor = ProviderFactory.create_compression_provider("passthrough", config=config)
    assert isinstance(compressor, PassthroughCompressionProvider)


@pytest.mark.parametrize("create", [
    ProviderFactory.create_storage_provider,
    ProviderFactory.create_metadata_provider,
    ProviderFactory.create_compression_provider,
    ProviderFactory.create_analysis_provider,
])
def test_unknown_provider_raises(create, config):
    with pytest.raises(ConfigurationException) as exc_info:
        create("carrier-pigeon", config=config)
    assert "Supported providers" in str(exc_info.value)


def test_registered_storage_provider_is_used(config, monkeypatch):
    monkeypatch.setattr(ProviderFactory, "_storage_providers", dict(ProviderFactory._storage_providers))

    class MemoryStorage(LocalStorageProvider):
        pass

    ProviderFactory.register_storage_provider("memory", MemoryStorage)

    assert isinstance(ProviderFactory.create_storage_provider("memory", config=config), MemoryStorage)
