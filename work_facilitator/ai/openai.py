"""OpenAI Chat Completions Provider"""

from work_facilitator.ai.base import (
    DEFAULT_SYSTEM_PROMPT, Deadline, ErrorKind, GenerateOptions, Provider,
)
from work_facilitator.prompts import PromptStyle, build_prompt


class OpenAIProvider(Provider):
    """OpenAI chat completions client. Requires an 'sk-' API key."""

    DEFAULT_MODEL = "gpt-4"
    DEFAULT_BASE_URL = "https://api.openai.com/v1"
    DEFAULT_TIMEOUT = 30.0

    def __init__(self, api_key: str, model: str | None = None, timeout: float | None = None,
                 base_url: str | None = None, prompt_style: PromptStyle | str = PromptStyle.STRICT):
        super().__init__(model or self.DEFAULT_MODEL, timeout)
        self.api_key = api_key or ""
        self.base_url = (base_url or self.DEFAULT_BASE_URL).rstrip('/')
        self.prompt_style = PromptStyle(prompt_style)

    @property
    def name(self) -> str:
        return "openai"

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/chat/completions"

    def validate(self) -> None:
        if not self.api_key:
            raise self.error("API key is required", kind=ErrorKind.CONFIGURATION)
        if not self.api_key.startswith("sk-"):
            raise self.error("invalid API key format", kind=ErrorKind.CONFIGURATION)

    def generate_commit_message(self, diff: str, options: GenerateOptions,
                                deadline: Deadline | None = None) -> str:
        self.validate()
        timeout = self._effective_timeout(deadline)

        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": DEFAULT_SYSTEM_PROMPT},
                {"role": "user", "content": build_prompt(diff, options, self.prompt_style)},
            ],
            "temperature": options.temperature,
        }
        if options.max_tokens:
            payload["max_tokens"] = options.max_tokens

        result = self._post_json(
            self.endpoint, payload, {"Authorization": f"Bearer {self.api_key}"}, timeout,
        )
        if result.status != 200:
            raise self._status_error(result)

        return self._chat_completion_text(self._decode(result), "no response from API")
