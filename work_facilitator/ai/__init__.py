"""AI Provider Package"""

import os
from enum import Enum

from work_facilitator.ai.base import (
    Deadline, ErrorKind, GenerateOptions, Provider, ProviderError,
)
from work_facilitator.ai.claude import ClaudeProvider
from work_facilitator.ai.llamacpp import LlamaCPPProvider
from work_facilitator.ai.openai import OpenAIProvider
from work_facilitator.ai.vertexai import VertexAIProvider, VertexLocation


class ProviderKind(str, Enum):
    OPENAI = "openai"
    CLAUDE = "claude"
    VERTEXAI = "vertexai"
    LLAMACPP = "llamacpp"


PROVIDERS: dict[ProviderKind, type[Provider]] = {
    ProviderKind.OPENAI: OpenAIProvider,
    ProviderKind.CLAUDE: ClaudeProvider,
    ProviderKind.VERTEXAI: VertexAIProvider,
    ProviderKind.LLAMACPP: LlamaCPPProvider,
}

# Read when api_key is unset in the config file
API_KEY_ENV_VARS = {
    ProviderKind.OPENAI: "OPENAI_API_KEY",
    ProviderKind.CLAUDE: "ANTHROPIC_API_KEY",
}


def get_provider(config) -> Provider:
    """Build the adapter named by config.provider. Does not validate it."""
    try:
        kind = ProviderKind(config.provider)
    except ValueError:
        raise ProviderError(
            "ai",
            f"unknown AI provider: {config.provider}. "
            f"Use one of: {', '.join(k.value for k in ProviderKind)}",
            kind=ErrorKind.CONFIGURATION,
        )

    provider_class = PROVIDERS[kind]
    api_key = config.resolved_api_key() or os.environ.get(API_KEY_ENV_VARS.get(kind, ""), "")
    common = {
        "model": config.model,
        "timeout": config.timeout,
        "prompt_style": config.prompt_style,
    }

    if kind is ProviderKind.VERTEXAI:
        if not config.google_service_account_key:
            raise ProviderError("vertexai", "service account key path is required",
                                kind=ErrorKind.CONFIGURATION)
        return VertexAIProvider.from_key_file(
            config.google_service_account_key,
            project_id=config.google_project_id,
            location=config.google_location,
            **common,
        )
    if kind is ProviderKind.LLAMACPP:
        return provider_class(base_url=config.base_url, api_key=api_key, **common)
    return provider_class(api_key=api_key, base_url=config.base_url, **common)


__all__ = [
    "ClaudeProvider",
    "Deadline",
    "ErrorKind",
    "GenerateOptions",
    "LlamaCPPProvider",
    "OpenAIProvider",
    "PROVIDERS",
    "Provider",
    "ProviderError",
    "ProviderKind",
    "VertexAIProvider",
    "VertexLocation",
    "get_provider",
]
