"""Claude (Anthropic) Provider"""

import logging

import anthropic

from work_facilitator.ai.base import Deadline, ErrorKind, GenerateOptions, Provider
from work_facilitator.prompts import PromptStyle, build_prompt

logger = logging.getLogger(__name__)


class ClaudeProvider(Provider):
    """Anthropic Messages API client."""

    DEFAULT_MODEL = "claude-sonnet-4-5-20250929"
    DEFAULT_MAX_TOKENS = 1024
    DEFAULT_TIMEOUT = 30.0

    def __init__(self, api_key: str, model: str | None = None, timeout: float | None = None,
                 base_url: str | None = None, prompt_style: PromptStyle | str = PromptStyle.STRICT):
        super().__init__(model or self.DEFAULT_MODEL, timeout)
        self.api_key = api_key or ""
        self.base_url = base_url
        self.prompt_style = PromptStyle(prompt_style)
        self._client: anthropic.Anthropic | None = None

    @property
    def name(self) -> str:
        return "claude"

    def validate(self) -> None:
        if not self.api_key:
            raise self.error("API key is required", kind=ErrorKind.CONFIGURATION)
        if not self.api_key.startswith("sk-ant-"):
            logger.warning("Claude API key should typically start with 'sk-ant-'")

    def _get_client(self) -> anthropic.Anthropic:
        # No SDK retries: failures surface to the caller immediately
        if self._client is None:
            self._client = anthropic.Anthropic(
                api_key=self.api_key,
                base_url=self.base_url,
                timeout=self.timeout,
                max_retries=0,
            )
        return self._client

    def generate_commit_message(self, diff: str, options: GenerateOptions,
                                deadline: Deadline | None = None) -> str:
        self.validate()
        timeout = self._effective_timeout(deadline)

        request = {
            "model": self.model,
            "max_tokens": options.max_tokens or self.DEFAULT_MAX_TOKENS,
            "messages": [{"role": "user", "content": build_prompt(diff, options, self.prompt_style)}],
        }
        # Current SDK releases have no temperature keyword on messages.create
        if options.temperature:
            request["extra_body"] = {"temperature": options.temperature}

        try:
            response = self._get_client().messages.create(**request, timeout=timeout)
        except anthropic.APITimeoutError as e:
            raise self.error(f"request timed out after {timeout:g}s", e, ErrorKind.TIMEOUT) from e
        except anthropic.APIConnectionError as e:
            raise self.error("API request failed", e, ErrorKind.TRANSPORT) from e
        except anthropic.APIStatusError as e:
            raise self.error(f"API error ({e.status_code}): {_status_message(e)}") from e
        except anthropic.APIError as e:
            raise self.error("failed to parse response", e, ErrorKind.DECODE) from e

        if not response.content:
            raise self.error("no response from API", kind=ErrorKind.EMPTY_RESULT)

        text = next((block.text for block in response.content if block.type == "text"), "")
        message = self._final_message(text)
        if response.usage is not None:
            logger.debug("Tokens used - input: %s output: %s",
                         response.usage.input_tokens, response.usage.output_tokens)
        return message


def _status_message(e: anthropic.APIStatusError) -> str:
    """Vendor error.message when the body is structured, raw body text otherwise."""
    body = e.body
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
    return e.response.text or e.message
