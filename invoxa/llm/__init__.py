"""LLM providers module."""

from invoxa.llm.anthropic import AnthropicConfig, AnthropicProvider
from invoxa.llm.base import LLMProvider, LLMProviderFactory, ResponseResult
from invoxa.llm.factory import create_llm_provider
from invoxa.llm.gemini import GeminiConfig, GeminiProvider
from invoxa.llm.ollama import OllamaConfig, OllamaProvider
from invoxa.llm.openai import OpenAIConfig, OpenAIProvider

# Register all providers
LLMProviderFactory.register("ollama", OllamaProvider)
LLMProviderFactory.register("openai", OpenAIProvider)
LLMProviderFactory.register("gemini", GeminiProvider)
LLMProviderFactory.register("anthropic", AnthropicProvider)

__all__ = [
    "AnthropicConfig",
    "AnthropicProvider",
    "GeminiConfig",
    "GeminiProvider",
    "LLMProvider",
    "LLMProviderFactory",
    "OllamaConfig",
    "OllamaProvider",
    "OpenAIConfig",
    "OpenAIProvider",
    "ResponseResult",
    "create_llm_provider",
]
