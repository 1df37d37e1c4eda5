"""Registry of bank providers keyed by slug."""

from typing import Iterable

from banksync.domain.errors import ConflictError, UnknownProviderError, duplicate_provider
from banksync.providers.base import BankProvider


class ProviderRegistry:
    """Lookup table from provider slug to a configured provider instance."""

    def __init__(self, providers: Iterable[BankProvider] = ()):
        self._providers: dict[str, BankProvider] = {}
        for provider in providers:
            self.register(provider)

    def register(self, provider: BankProvider) -> None:
        """Register a provider under its slug.

        Raises:
            ConflictError: If a provider with the same slug is registered
        """
        if provider.slug in self._providers:
            raise ConflictError(duplicate_provider(provider.slug))
        self._providers[provider.slug] = provider

    def get(self, slug: str) -> BankProvider:
        """Return the provider for ``slug``.

        Raises:
            UnknownProviderError: If no provider has that slug
        """
        try:
            return self._providers[slug]
        except KeyError:
            raise UnknownProviderError(slug) from None

    def slugs(self) -> list[str]:
        """Return registered slugs in sorted order."""
        return sorted(self._providers)

    def __contains__(self, slug: object) -> bool:
        return slug in self._providers

    def __len__(self) -> int:
        return len(self._providers)
