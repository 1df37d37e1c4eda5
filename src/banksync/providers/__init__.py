"""Bank providers for banksync."""

from banksync.providers.base import BankProvider
from banksync.providers.registry import ProviderRegistry
from banksync.providers.factories import create_provider_registry

__all__ = ["BankProvider", "ProviderRegistry", "create_provider_registry"]
