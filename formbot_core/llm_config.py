"""
LLM settings for the form agent.

The agent talks to models through litellm, so a provider is written as
"provider/model" (``openai/gpt-4o-mini``, ``ollama/qwen2.5:7b``). A bare
provider name picks that provider's default model.

API keys come from, in order: an explicit ``api_token``, an ``env:NAME``
reference, or the provider's usual environment variable.
"""

import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

DEFAULT_PROVIDER = "openai/gpt-4o-mini"

# Providers that run locally have no key variable
PROVIDER_ENV_VARS: Dict[str, Optional[str]] = {
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
    "gemini": "GEMINI_API_KEY",
    "google": "GEMINI_API_KEY",
    "groq": "GROQ_API_KEY",
    "deepseek": "DEEPSEEK_API_KEY",
    "ollama": None,
}

DEFAULT_MODELS: Dict[str, str] = {
    "openai": "gpt-4o-mini",
    "anthropic": "claude-3-haiku-20240307",
    "gemini": "gemini-2.0-flash",
    "google": "gemini-2.0-flash",
    "groq": "llama3-70b-8192",
    "deepseek": "deepseek-chat",
    "ollama": "qwen2.5:7b",
}


def split_provider(provider: str):
    """'ollama/library/qwen2.5:7b' -> ('ollama', 'library/qwen2.5:7b')"""
    name, _, model = provider.partition("/")
    name = name.strip().lower()
    return name, model or DEFAULT_MODELS.get(name, "")


def lookup_token(provider_name: str, api_token: Optional[str]) -> Optional[str]:
    if api_token is not None:
        if api_token.startswith("env:"):
            return os.getenv(api_token[len("env:"):].strip())
        return api_token
    env_var = PROVIDER_ENV_VARS.get(provider_name)
    return os.getenv(env_var) if env_var else None


@dataclass
class LLMConfig:
    provider: str = DEFAULT_PROVIDER
    api_token: Optional[str] = None
    base_url: Optional[str] = None
    temperature: float = 0.0
    max_tokens: int = 1024
    timeout: int = 120
    extra_params: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        self._provider_name, self._model_name = split_provider(self.provider)
        self._token = lookup_token(self._provider_name, self.api_token)

    @property
    def provider_name(self) -> str:
        return self._provider_name

    @property
    def model_name(self) -> str:
        return self._model_name

    @property
    def model(self) -> str:
        return f"{self._provider_name}/{self._model_name}"

    @property
    def resolved_api_token(self) -> Optional[str]:
        return self._token

    @property
    def requires_api_key(self) -> bool:
        return PROVIDER_ENV_VARS.get(self._provider_name, "") is not None

    def validate(self) -> bool:
        """Raise ValueError when a hosted provider has no key."""
        if self._token or not self.requires_api_key:
            return True
        env_var = PROVIDER_ENV_VARS.get(self._provider_name) or f"{self._provider_name.upper()}_API_KEY"
        raise ValueError(f"No API key for provider '{self._provider_name}': pass api_token or export {env_var}")

    def completion_kwargs(self) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = dict(
            model=self.model,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            timeout=self.timeout,
        )
        if self._token:
            kwargs["api_key"] = self._token
        if self.base_url:
            kwargs["api_base"] = self.base_url
        return {**kwargs, **self.extra_params}

    @classmethod
    def from_env(cls, prefix: str = "FORMBOT") -> "LLMConfig":
        """Build from {prefix}_LLM_PROVIDER, _API_TOKEN, _BASE_URL, _TEMPERATURE and _TIMEOUT."""
        def env(key: str, default: Optional[str] = None) -> Optional[str]:
            return os.getenv(f"{prefix}_LLM_{key}", default)

        return cls(
            provider=env("PROVIDER", DEFAULT_PROVIDER),
            api_token=env("API_TOKEN"),
            base_url=env("BASE_URL"),
            temperature=float(env("TEMPERATURE", "0.0")),
            timeout=int(env("TIMEOUT", "120")),
        )
