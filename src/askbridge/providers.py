"""Provider identifiers: the closed set of backends a request can target."""

from __future__ import annotations

from typing import Literal, NoReturn, TypeGuard, get_args

from askbridge.errors import InternalError

#: ``proxy`` is an OpenAI-compatible endpoint that forwards Anthropic-style
#: thinking fields verbatim.
ProviderName = Literal["anthropic", "openai", "google", "proxy"]

PROVIDERS: tuple[ProviderName, ...] = get_args(ProviderName)


def is_provider(value: object) -> TypeGuard[ProviderName]:
    """Return True when *value* names a known provider."""
    return isinstance(value, str) and value in PROVIDERS


def unsupported_provider(provider: NoReturn) -> NoReturn:
    """Fail an exhaustive ``match`` over ``ProviderName``.

    Type checkers flag any call site where a provider variant is left
    unhandled; at runtime this only fires for values that bypassed
    validation.
    """
    raise InternalError(
        f"Unsupported provider: {provider!r}",
        hint=f"Supported providers: {', '.join(repr(p) for p in PROVIDERS)}",
    )
