"""Google Vertex AI (Gemini) Provider"""

import logging
from enum import Enum

from work_facilitator import VERTEX_LOCATIONS
from work_facilitator.ai.base import Deadline, ErrorKind, GenerateOptions, Provider, ProviderError
from work_facilitator.ai.google_auth import (
    AccessTokenExchanger, ServiceAccountKey, load_service_account_key,
)
from work_facilitator.prompts import PromptStyle, build_prompt

logger = logging.getLogger(__name__)


class VertexLocation(str, Enum):
    """Regions that serve the Gemini publisher models."""
    US_CENTRAL1 = "us-central1"
    US_EAST4 = "us-east4"
    EUROPE_WEST1 = "europe-west1"
    ASIA_SOUTHEAST1 = "asia-southeast1"
    GLOBAL = "global"


class VertexAIProvider(Provider):
    """Vertex AI generateContent client authenticated with a service account key."""

    DEFAULT_MODEL = "gemini-2.5-flash"
    DEFAULT_LOCATION = "us-central1"
    DEFAULT_TIMEOUT = 30.0

    def __init__(self, key: ServiceAccountKey, project_id: str | None = None,
                 location: str | None = None, model: str | None = None,
                 timeout: float | None = None, endpoint: str | None = None,
                 prompt_style: PromptStyle | str = PromptStyle.STRICT,
                 exchanger: AccessTokenExchanger | None = None):
        super().__init__(model or self.DEFAULT_MODEL, timeout)
        self.key = key
        self.project_id = project_id or key.project_id
        self.location = location or self.DEFAULT_LOCATION
        self.prompt_style = PromptStyle(prompt_style)
        self._endpoint = endpoint
        self.exchanger = exchanger or AccessTokenExchanger(key, timeout=self.timeout)

    @classmethod
    def from_key_file(cls, key_path: str, **kwargs) -> 'VertexAIProvider':
        try:
            key = load_service_account_key(key_path)
        except ProviderError as e:
            raise ProviderError("vertexai", "failed to load service account key", e,
                                ErrorKind.CONFIGURATION) from e
        return cls(key, **kwargs)

    @property
    def name(self) -> str:
        return "vertexai"

    @property
    def endpoint(self) -> str:
        return self._endpoint or self.build_endpoint()

    def build_endpoint(self) -> str:
        path = (f"v1/projects/{self.project_id}/locations/{self.location}"
                f"/publishers/google/models/{self.model}:generateContent")
        if self.location == VertexLocation.GLOBAL:
            return f"https://aiplatform.googleapis.com/{path}"
        return f"https://{self.location}-aiplatform.googleapis.com/{path}"

    def validate(self) -> None:
        if not self.project_id:
            raise self.error("project ID is required", kind=ErrorKind.CONFIGURATION)
        if not self.location:
            raise self.error("location is required", kind=ErrorKind.CONFIGURATION)
        if not self.key.private_key:
            raise self.error("service account private key is missing", kind=ErrorKind.CONFIGURATION)
        if not self.key.client_email:
            raise self.error("service account client email is missing", kind=ErrorKind.CONFIGURATION)
        try:
            VertexLocation(self.location)
        except ValueError:
            raise self.error(
                f"invalid location '{self.location}', must be one of: {', '.join(VERTEX_LOCATIONS)}",
                kind=ErrorKind.CONFIGURATION,
            )

    def get_access_token(self, timeout: float | None = None) -> str:
        try:
            return self.exchanger.get_access_token(timeout)
        except ProviderError as e:
            kind = ErrorKind.TIMEOUT if e.is_timeout else ErrorKind.CREDENTIAL
            raise self.error("failed to get access token", e, kind) from e

    def generate_commit_message(self, diff: str, options: GenerateOptions,
                                deadline: Deadline | None = None) -> str:
        self.validate()
        # The deadline covers the token exchange and the generation request
        token = self.get_access_token(self._effective_timeout(deadline))
        timeout = self._effective_timeout(deadline)

        generation_config = {}
        if options.temperature:
            generation_config["temperature"] = options.temperature
        if options.max_tokens:
            generation_config["maxOutputTokens"] = options.max_tokens

        payload = {
            "contents": [
                {"role": "user", "parts": [{"text": build_prompt(diff, options, self.prompt_style)}]},
            ],
            "generationConfig": generation_config,
        }

        logger.debug("Vertex AI endpoint: %s", self.endpoint)
        result = self._post_json(self.endpoint, payload, {"Authorization": f"Bearer {token}"}, timeout)
        if result.status != 200:
            raise self._status_error(result)

        data = self._decode(result)
        message = self._final_message(self._first_part(data).get("text"))
        usage = data.get("usageMetadata")
        if isinstance(usage, dict) and usage.get("totalTokenCount"):
            logger.debug("Tokens used: %s", usage["totalTokenCount"])
        return message

    def _first_part(self, data: dict) -> dict:
        """candidates[0].content.parts[0], checking the shape at every level."""
        candidates = data.get("candidates") or []
        if not isinstance(candidates, list):
            raise self._schema_error()
        parts = []
        if candidates:
            candidate = candidates[0]
            if not isinstance(candidate, dict):
                raise self._schema_error()
            content = candidate.get("content") or {}
            if not isinstance(content, dict):
                raise self._schema_error()
            parts = content.get("parts") or []
            if not isinstance(parts, list):
                raise self._schema_error()
        if not parts:
            raise self.error("no response from API", kind=ErrorKind.EMPTY_RESULT)
        if not isinstance(parts[0], dict):
            raise self._schema_error()
        return parts[0]
