"""Provider registry for managing provider plugins.

A registry is an explicit instance owned by whoever builds the validator;
there is no module-level singleton, so each validator (and each test) can
work with its own set of providers.
"""

from __future__ import annotations

from ai_key_validator.core.errors import ConfigurationError, ProviderNotFoundError
from ai_key_validator.providers.anthropic import AnthropicProvider
from ai_key_validator.providers.base import BaseProvider
from ai_key_validator.providers.google import GoogleGeminiProvider
from ai_key_validator.providers.groq import GroqProvider
from ai_key_validator.providers.huggingface import HuggingFaceProvider
from ai_key_validator.providers.openai import OpenAIProvider


class ProviderRegistry:
    """Lookup table of provider plugins keyed by provider id.

    Aliases (e.g. ``claude`` for ``anthropic``) resolve to the same plugin.
    """

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._providers: dict[str, BaseProvider] = {}
        self._aliases: dict[str, str] = {}

    def register(self, provider: BaseProvider) -> None:
        """Register a provider instance.

        Args:
            provider: Provider instance to register.

        Raises:
            ConfigurationError: If the id or an alias is not lowercase or is
                already taken.
        """
        names = (provider.name, *provider.aliases)
        for name in names:
            if name != name.strip().lower():
                raise ConfigurationError(f"Provider names must be lowercase: {name!r}")
            if name in self._providers or name in self._aliases:
                raise ConfigurationError(f"Provider name already registered: {name}")

        self._providers[provider.name] = provider
        for alias in provider.aliases:
            self._aliases[alias] = provider.name

    def resolve(self, name: str) -> str | None:
        """Map an id or alias to the canonical provider id."""
        if not isinstance(name, str):
            return None
        key = name.strip().lower()
        if key in self._providers:
            return key
        return self._aliases.get(key)

    def get(self, name: str) -> BaseProvider | None:
        """Get a provider by id or alias.

        Args:
            name: Provider identifier or alias.

        Returns:
            Provider instance if found, None otherwise.
        """
        canonical = self.resolve(name)
        return self._providers.get(canonical) if canonical else None

    def require(self, name: str) -> BaseProvider:
        """Get a provider by id or alias, raising if it is unknown.

        Raises:
            ProviderNotFoundError: If no provider matches.
        """
        provider = self.get(name)
        if provider is None:
            raise ProviderNotFoundError(name)
        return provider

    def all(self) -> list[BaseProvider]:
        """Get all registered providers."""
        return list(self._providers.values())

    def names(self) -> list[str]:
        """Get all canonical provider ids."""
        return list(self._providers.keys())

    def __len__(self) -> int:
        """Return number of registered providers."""
        return len(self._providers)

    def __contains__(self, name: object) -> bool:
        """Check if a provider id or alias is registered."""
        return isinstance(name, str) and self.resolve(name) is not None


def create_default_registry() -> ProviderRegistry:
    """Build a fresh registry holding every built-in provider.

    Returns:
        A new ProviderRegistry instance.
    """
    registry = ProviderRegistry()
    registry.register(OpenAIProvider())
    registry.register(AnthropicProvider())
    registry.register(GoogleGeminiProvider())
    registry.register(GroqProvider())
    registry.register(HuggingFaceProvider())
    return registry
