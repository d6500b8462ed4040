"""Provider plugins for the supported AI services."""

from ai_key_validator.providers.anthropic import AnthropicProvider
from ai_key_validator.providers.base import BaseProvider, parse_retry_after
from ai_key_validator.providers.google import GoogleGeminiProvider
from ai_key_validator.providers.groq import GroqProvider
from ai_key_validator.providers.huggingface import HuggingFaceProvider
from ai_key_validator.providers.openai import OpenAIProvider
from ai_key_validator.providers.registry import ProviderRegistry, create_default_registry

__all__ = [
    "AnthropicProvider",
    "BaseProvider",
    "GoogleGeminiProvider",
    "GroqProvider",
    "HuggingFaceProvider",
    "OpenAIProvider",
    "ProviderRegistry",
    "create_default_registry",
    "parse_retry_after",
]
