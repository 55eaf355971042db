"""AI Provider Base Classes and Shared Code"""

import http.client
import json
import logging
import socket
import time
import urllib.error
import urllib.request
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)


DEFAULT_SYSTEM_PROMPT = (
    "You are a helpful assistant that generates concise, meaningful git commit "
    "messages based on code changes. Follow conventional commit format when specified."
)


class ErrorKind(Enum):
    """Where a provider failure came from."""
    CONFIGURATION = "configuration"
    TRANSPORT = "transport"
    TIMEOUT = "timeout"
    PROTOCOL = "protocol"
    DECODE = "decode"
    EMPTY_RESULT = "empty_result"
    CREDENTIAL = "credential"


class ProviderError(Exception):
    """Raised when an AI provider is misconfigured or a generation call fails."""

    def __init__(self, provider: str, message: str, cause: BaseException | None = None,
                 kind: ErrorKind = ErrorKind.PROTOCOL):
        self.provider = provider
        self.message = message
        self.cause = cause
        self.kind = kind
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.cause is not None:
            return f"{self.provider}: {self.message}: {self.cause}"
        return f"{self.provider}: {self.message}"

    @property
    def is_timeout(self) -> bool:
        return self.kind is ErrorKind.TIMEOUT


@dataclass(frozen=True)
class GenerateOptions:
    """Per-request generation settings."""
    max_tokens: int = 0
    temperature: float = 0.0
    commit_standard: str | None = None
    branch_name: str | None = None
    additional_context: str | None = None


@dataclass(frozen=True)
class Deadline:
    """Absolute point in time (monotonic clock) after which a call is abandoned."""
    at: float

    @classmethod
    def after(cls, seconds: float) -> 'Deadline':
        return cls(time.monotonic() + seconds)

    def remaining(self) -> float:
        return self.at - time.monotonic()

    @property
    def expired(self) -> bool:
        return self.remaining() <= 0


@dataclass
class HTTPResult:
    """Status and raw body of a completed HTTP exchange."""
    status: int
    body: bytes

    @property
    def text(self) -> str:
        return self.body.decode('utf-8', errors='replace')


class Provider(ABC):
    """Abstract base for commit message providers."""

    DEFAULT_TIMEOUT = 30.0

    def __init__(self, model: str, timeout: float | None = None):
        self.model = model
        self.timeout = timeout or self.DEFAULT_TIMEOUT

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @abstractmethod
    def validate(self) -> None:
        """Raise ProviderError if the provider cannot be used. Never touches the network."""

    @abstractmethod
    def generate_commit_message(self, diff: str, options: GenerateOptions,
                                deadline: Deadline | None = None) -> str:
        pass

    def error(self, message: str, cause: BaseException | None = None,
              kind: ErrorKind = ErrorKind.PROTOCOL) -> ProviderError:
        return ProviderError(self.name, message, cause, kind)

    def _effective_timeout(self, deadline: Deadline | None) -> float:
        """Shorter of the provider timeout and what is left of the caller's deadline."""
        if deadline is None:
            return self.timeout
        remaining = deadline.remaining()
        if remaining <= 0:
            raise self.error("deadline exceeded before request was sent", kind=ErrorKind.TIMEOUT)
        return min(self.timeout, remaining)

    def _post(self, url: str, data: bytes, headers: dict[str, str], timeout: float) -> HTTPResult:
        """POST and return status + body. Non-2xx statuses are returned, not raised."""
        req = urllib.request.Request(url, data=data, headers=headers, method='POST')
        try:
            with urllib.request.urlopen(req, timeout=timeout) as response:
                return HTTPResult(status=response.status, body=response.read())
        except urllib.error.HTTPError as e:
            try:
                body = e.read()
            finally:
                e.close()
            return HTTPResult(status=e.code, body=body)
        except urllib.error.URLError as e:
            if isinstance(e.reason, (socket.timeout, TimeoutError)):
                raise self.error(f"request timed out after {timeout:g}s", e, ErrorKind.TIMEOUT) from e
            raise self._transport_error(e) from e
        except (socket.timeout, TimeoutError) as e:
            raise self.error(f"request timed out after {timeout:g}s", e, ErrorKind.TIMEOUT) from e
        except http.client.HTTPException as e:
            raise self.error("incomplete response from API", e, ErrorKind.TRANSPORT) from e
        except OSError as e:
            raise self._transport_error(e) from e

    def _post_json(self, url: str, payload: dict, headers: dict[str, str],
                   timeout: float) -> HTTPResult:
        data = json.dumps(payload).encode('utf-8')
        logger.debug("%s request payload size: %d", self.name, len(data))
        return self._post(url, data, {"Content-Type": "application/json", **headers}, timeout)

    def _transport_error(self, cause: BaseException) -> ProviderError:
        """Hook for providers that want a friendlier message on connection failures."""
        return self.error("API request failed", cause, ErrorKind.TRANSPORT)

    def _status_error(self, result: HTTPResult) -> ProviderError:
        """Build the error for a non-200 response, preferring the vendor's message."""
        message = vendor_error_message(result.body) or result.text
        return self.error(f"API error ({result.status}): {message}", kind=ErrorKind.PROTOCOL)

    def _decode(self, result: HTTPResult) -> dict:
        try:
            data = json.loads(result.body)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise self.error("failed to parse response", e, ErrorKind.DECODE) from e
        if not isinstance(data, dict):
            raise self._schema_error()
        return data

    def _schema_error(self) -> ProviderError:
        """Valid JSON that does not have the vendor's response shape."""
        return self.error("failed to parse response", kind=ErrorKind.DECODE)

    def _chat_completion_text(self, data: dict, empty_message: str) -> str:
        """Message of the first choice of an OpenAI-style chat completion."""
        choices = data.get("choices") or []
        if not isinstance(choices, list):
            raise self._schema_error()
        if not choices:
            raise self.error(empty_message, kind=ErrorKind.EMPTY_RESULT)

        choice = choices[0]
        if not isinstance(choice, dict):
            raise self._schema_error()
        message = choice.get("message") or {}
        if not isinstance(message, dict):
            raise self._schema_error()

        text = self._final_message(message.get("content"))
        usage = data.get("usage")
        if isinstance(usage, dict):
            logger.debug("Tokens used: %s", usage.get("total_tokens", 0))
        return text

    def _final_message(self, text: str | None) -> str:
        if text is not None and not isinstance(text, str):
            raise self._schema_error()
        message = (text or "").strip()
        if not message:
            raise self.error("empty message in response", kind=ErrorKind.EMPTY_RESULT)
        logger.debug("%s generated message: %s", self.name, message)
        return message


def vendor_error_message(body: bytes) -> str:
    """Extract error.message from an OpenAI/Anthropic/Google style error body."""
    try:
        data = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        return ""
    if not isinstance(data, dict):
        return ""
    error = data.get("error")
    if isinstance(error, dict):
        return str(error.get("message") or "")
    return ""
