"""Configuration: frozen Config and per-provider endpoint resolution."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
import os

from dotenv import load_dotenv

from askbridge._http import CHAT_COMPLETIONS_PATH
from askbridge.errors import ConfigurationError
from askbridge.providers import PROVIDERS, ProviderName, unsupported_provider

load_dotenv()

# Provider-specific API key environment variable names
_API_KEY_ENV_VARS: dict[ProviderName, str] = {
    "anthropic": "ANTHROPIC_API_KEY",
    "openai": "OPENAI_API_KEY",
    "proxy": "OPENAI_API_KEY",
    "google": "GOOGLE_API_KEY",
}

# OpenAI-compatible endpoints used when no base_url is configured.
_DEFAULT_BASE_URLS: dict[ProviderName, str] = {
    "anthropic": "https://api.anthropic.com/v1",
    "openai": "https://api.openai.com/v1",
    "google": "https://generativelanguage.googleapis.com/v1beta/openai",
}


def api_key_env_var(provider: ProviderName) -> str:
    """Return the environment variable holding *provider*'s API key."""
    match provider:
        case "anthropic" | "openai" | "proxy" | "google":
            return _API_KEY_ENV_VARS[provider]
        case _:
            unsupported_provider(provider)


def resolve_api_key(
    provider: ProviderName, environ: Mapping[str, str] | None = None
) -> str:
    """Look up the API key for *provider* in *environ* (default: ``os.environ``).

    Raises:
        ConfigurationError: If the variable is unset or empty.
    """
    env = os.environ if environ is None else environ
    env_var = api_key_env_var(provider)
    key = env.get(env_var)
    if not key:
        raise ConfigurationError(
            f"{env_var} environment variable is required",
            hint=f"Set {env_var} or pass Config(api_key=...).",
        )
    return key


def redact_key(api_key: str | None) -> str:
    """Return a log-safe form of *api_key* (``***`` plus its last four chars)."""
    if not api_key:
        return "undefined"
    return "***" + api_key[-4:]


@dataclass(frozen=True)
class Endpoint:
    """Where and how a translated body is sent for one provider."""

    provider: ProviderName
    url: str
    api_key: str


def chat_completions_url(provider: ProviderName, base_url: str | None) -> str:
    """Return the chat-completions URL for *provider*.

    Only ``proxy`` base URLs are completed with a ``/v1`` segment; other
    providers get ``/chat/completions`` appended to the base as given.
    """
    base = (base_url or _DEFAULT_BASE_URLS.get(provider, "")).rstrip("/")
    if provider == "proxy":
        if base.endswith("/v1" + CHAT_COMPLETIONS_PATH):
            return base
        if not base.endswith("/v1"):
            return base + "/v1" + CHAT_COMPLETIONS_PATH
    elif base.endswith(CHAT_COMPLETIONS_PATH):
        return base
    return base + CHAT_COMPLETIONS_PATH


@dataclass(frozen=True)
class Config:
    """Immutable configuration for a bridge target.

    Provider and model are required. When ``api_key`` is omitted the key is
    looked up for whichever provider the request is finally routed to, so a
    known model may use a different provider's credentials than configured.

    Example:
        config = Config(provider="proxy", model="gpt-4o", base_url="http://localhost:4000")
        endpoint = config.endpoint()
        # endpoint.api_key comes from OPENAI_API_KEY
    """

    provider: ProviderName
    model: str
    #: Used for every provider when set; otherwise resolved per provider.
    api_key: str | None = None
    #: Required for ``proxy``; other providers fall back to their public endpoint.
    base_url: str | None = None
    #: Log full request and response bodies at DEBUG level.
    debug: bool = False

    def __post_init__(self) -> None:
        """Validate provider, model and endpoint settings."""
        if self.provider not in PROVIDERS:
            raise ConfigurationError(
                f"Unknown provider: {self.provider!r}",
                hint=f"Supported providers: {', '.join(repr(p) for p in PROVIDERS)}",
            )

        if not isinstance(self.model, str) or not self.model.strip():
            raise ConfigurationError(
                "model must be a non-empty string",
                hint="Pass Config(model='gpt-4o', ...).",
            )

        if self.provider == "proxy" and not self.base_url:
            raise ConfigurationError(
                "base_url required for proxy provider",
                hint="Pass Config(provider='proxy', base_url='http://localhost:4000', ...).",
            )

    def endpoint(
        self,
        provider: ProviderName | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> Endpoint:
        """Resolve URL and credentials for *provider* (default: the configured one).

        Raises:
            ConfigurationError: If no API key is configured or found in the
                provider's environment variable.
        """
        target = self.provider if provider is None else provider
        api_key = self.api_key
        if api_key is None:
            api_key = resolve_api_key(target, environ)
        return Endpoint(
            provider=target,
            url=chat_completions_url(target, self.base_url),
            api_key=api_key,
        )

    def __str__(self) -> str:
        """Return a redacted, developer-friendly representation."""
        return (
            f"Config(provider={self.provider!r}, model={self.model!r}, "
            f"api_key={'[REDACTED]' if self.api_key else None}, "
            f"base_url={self.base_url!r}, debug={self.debug})"
        )

    __repr__ = __str__
