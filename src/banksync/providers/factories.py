"""Factory for the provider registry built at startup."""

from typing import Any, Mapping, Optional

from banksync.providers.base import BankProvider
from banksync.providers.csv_export import CSVExportProvider
from banksync.providers.registry import ProviderRegistry

BUILTIN_PROVIDERS: tuple[type[BankProvider], ...] = (CSVExportProvider,)


def create_provider_registry(
    provider_configs: Optional[Mapping[str, dict[str, Any]]] = None,
    provider_classes: tuple[type[BankProvider], ...] = BUILTIN_PROVIDERS,
) -> ProviderRegistry:
    """Instantiate every provider class with its config block.

    Args:
        provider_configs: Provider options keyed by slug
        provider_classes: Provider classes to register

    Returns:
        ProviderRegistry holding one instance per class
    """
    provider_configs = provider_configs or {}
    return ProviderRegistry(
        provider_class(provider_configs.get(provider_class.slug, {}))
        for provider_class in provider_classes
    )
