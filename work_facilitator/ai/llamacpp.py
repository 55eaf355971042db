"""llama.cpp Server Provider for Local Models"""

import logging
import urllib.error

from work_facilitator.ai.base import (
    Deadline, ErrorKind, GenerateOptions, Provider, ProviderError, vendor_error_message,
)
from work_facilitator.prompts import PromptStyle, build_prompt

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a helpful assistant that generates concise, meaningful git commit "
    "messages following conventional commit format."
)


class LlamaCPPProvider(Provider):
    """OpenAI-compatible llama.cpp server client. Requires: llama-server running"""

    DEFAULT_MODEL = "default"
    DEFAULT_BASE_URL = "http://localhost:8080/v1"
    DEFAULT_TIMEOUT = 90.0  # CPU inference is slow

    def __init__(self, base_url: str | None = None, api_key: str = "", model: str | None = None,
                 timeout: float | None = None, prompt_style: PromptStyle | str = PromptStyle.STRICT):
        super().__init__(model or self.DEFAULT_MODEL, timeout)
        self.base_url = (base_url or self.DEFAULT_BASE_URL).rstrip('/')
        self.api_key = api_key or ""
        self.prompt_style = PromptStyle(prompt_style)

    @property
    def name(self) -> str:
        return "llamacpp"

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/chat/completions"

    def validate(self) -> None:
        if not self.base_url:
            raise self.error("base URL is required", kind=ErrorKind.CONFIGURATION)
        if not self.base_url.startswith(("http://", "https://")):
            raise self.error("base URL must start with http:// or https://", kind=ErrorKind.CONFIGURATION)
        logger.debug("LlamaCPP provider configured with base URL: %s", self.base_url)

    def generate_commit_message(self, diff: str, options: GenerateOptions | None = None,
                                deadline: Deadline | None = None) -> str:
        options = options or GenerateOptions()
        self.validate()
        timeout = self._effective_timeout(deadline)

        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": build_prompt(diff, options, self.prompt_style)},
            ],
        }
        if options.temperature:
            payload["temperature"] = options.temperature
        if options.max_tokens:
            payload["max_tokens"] = options.max_tokens

        headers = {}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        result = self._post_json(self.endpoint, payload, headers, timeout)
        if result.status != 200:
            message = vendor_error_message(result.body) or result.text
            raise self.error(f"API returned status {result.status}: {message}")

        return self._chat_completion_text(self._decode(result), "no choices in response")

    def _transport_error(self, cause: BaseException) -> ProviderError:
        reason = cause.reason if isinstance(cause, urllib.error.URLError) else cause
        if isinstance(reason, ConnectionRefusedError) or "Connection refused" in str(cause):
            return self.error("connection refused - is the llama.cpp server running?",
                              cause, ErrorKind.TRANSPORT)
        return self.error("request failed", cause, ErrorKind.TRANSPORT)
