"""
Google Service Account Authentication

Turns a service-account key file into short-lived OAuth2 access tokens
using the JWT-bearer grant (RFC 7523). Tokens are cached per exchanger
until 60 seconds before the server-declared expiry.
"""

import json
import logging
import os
import threading
import time
import urllib.error
import urllib.parse
import urllib.request
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Callable

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from jose import jwt
from jose.exceptions import JOSEError

from work_facilitator.ai.base import ErrorKind, ProviderError

logger = logging.getLogger(__name__)

PROVIDER_NAME = "vertexai"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
CLOUD_PLATFORM_SCOPE = "https://www.googleapis.com/auth/cloud-platform"
JWT_BEARER_GRANT = "urn:ietf:params:oauth:grant-type:jwt-bearer"

ASSERTION_LIFETIME = 3600
EXPIRY_MARGIN = 60


def _credential_error(message: str, cause: BaseException | None = None) -> ProviderError:
    return ProviderError(PROVIDER_NAME, message, cause, ErrorKind.CREDENTIAL)


def _timeout_error(timeout: float, cause: BaseException) -> ProviderError:
    return ProviderError(PROVIDER_NAME, f"token exchange timed out after {timeout:g}s",
                         cause, ErrorKind.TIMEOUT)


@dataclass(frozen=True)
class ServiceAccountKey:
    """Google Cloud service account key file contents."""
    type: str = ""
    project_id: str = ""
    private_key_id: str = ""
    private_key: str = ""
    client_email: str = ""
    client_id: str = ""
    auth_uri: str = ""
    token_uri: str = ""
    auth_provider_x509_cert_url: str = ""
    client_x509_cert_url: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> 'ServiceAccountKey':
        valid_keys = {f.name for f in fields(cls)}
        return cls(**{k: str(v) for k, v in data.items() if k in valid_keys and v is not None})


def resolve_key_path(path: str) -> Path:
    """Expand '$ENV_VAR' indirection and a leading '~/'."""
    if path.startswith("$"):
        env_var = path[1:]
        path = os.environ.get(env_var, "")
        if not path:
            raise _credential_error(f"environment variable {env_var} is not set")
    return Path(path).expanduser()


def load_service_account_key(path: str) -> ServiceAccountKey:
    key_path = resolve_key_path(path)
    try:
        data = json.loads(key_path.read_text(encoding='utf-8'))
    except OSError as e:
        raise _credential_error("failed to read service account key file", e) from e
    except json.JSONDecodeError as e:
        raise _credential_error("failed to parse service account key", e) from e
    if not isinstance(data, dict):
        raise _credential_error("failed to parse service account key")
    return ServiceAccountKey.from_dict(data)


def parse_private_key(pem_key: str) -> rsa.RSAPrivateKey:
    """Load a PKCS#1 or PKCS#8 PEM private key, rejecting anything that isn't RSA."""
    if "-----BEGIN" not in pem_key:
        raise _credential_error("failed to decode PEM block")
    try:
        key = serialization.load_pem_private_key(pem_key.encode('utf-8'), password=None)
    except (ValueError, TypeError) as e:
        raise _credential_error("failed to parse private key", e) from e
    if not isinstance(key, rsa.RSAPrivateKey):
        raise _credential_error("private key is not RSA")
    return key


class TokenCache:
    """Last acquired access token and the instant it stops being reused."""

    def __init__(self, clock: Callable[[], float] = time.time):
        self.token = ""
        self.expiry = 0.0
        self.lock = threading.Lock()
        self._clock = clock

    def get(self) -> str | None:
        if self.token and self._clock() < self.expiry:
            return self.token
        return None

    def store(self, token: str, expiry: float) -> None:
        self.token = token
        self.expiry = expiry


class AccessTokenExchanger:
    """Exchanges signed JWT assertions for OAuth2 access tokens."""

    def __init__(self, key: ServiceAccountKey, timeout: float = 30.0,
                 scope: str = CLOUD_PLATFORM_SCOPE, clock: Callable[[], float] = time.time):
        self.key = key
        self.timeout = timeout
        self.scope = scope
        self.token_uri = key.token_uri or GOOGLE_TOKEN_URL
        self._clock = clock
        self.cache = TokenCache(clock)

    def get_access_token(self, timeout: float | None = None) -> str:
        """Cached token, or a fresh one. timeout bounds the exchange request."""
        with self.cache.lock:
            cached = self.cache.get()
            if cached:
                logger.debug("Using cached Vertex AI access token")
                return cached

            logger.debug("Generating new Vertex AI access token")
            now = self._clock()
            assertion = self.sign_assertion(now)
            access_token, expires_in = self._exchange(assertion, timeout or self.timeout)
            self.cache.store(access_token, now + expires_in - EXPIRY_MARGIN)
            return access_token

    def sign_assertion(self, now: float) -> str:
        issued_at = int(now)
        claims = {
            "iss": self.key.client_email,
            "sub": self.key.client_email,
            "aud": self.token_uri,
            "iat": issued_at,
            "exp": issued_at + ASSERTION_LIFETIME,
            "scope": self.scope,
        }
        private_key = parse_private_key(self.key.private_key)
        pem = private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        ).decode('ascii')
        try:
            return jwt.encode(claims, pem, algorithm="RS256")
        except JOSEError as e:
            raise _credential_error("failed to sign JWT", e) from e

    def _exchange(self, assertion: str, timeout: float) -> tuple[str, int]:
        data = urllib.parse.urlencode({
            "grant_type": JWT_BEARER_GRANT,
            "assertion": assertion,
        }).encode('ascii')
        req = urllib.request.Request(
            self.token_uri,
            data=data,
            headers={"Content-Type": "application/x-www-form-urlencoded"},
            method='POST',
        )

        try:
            with urllib.request.urlopen(req, timeout=timeout) as response:
                body = response.read()
        except urllib.error.HTTPError as e:
            try:
                detail = e.read().decode('utf-8', errors='replace')
            finally:
                e.close()
            raise _credential_error(f"token exchange failed ({e.code}): {detail}") from e
        except urllib.error.URLError as e:
            if isinstance(e.reason, TimeoutError):
                raise _timeout_error(timeout, e) from e
            raise _credential_error("failed to exchange JWT for token", e) from e
        except TimeoutError as e:
            raise _timeout_error(timeout, e) from e
        except OSError as e:
            raise _credential_error("failed to exchange JWT for token", e) from e

        try:
            token_response = json.loads(body)
            access_token = token_response["access_token"]
            expires_in = int(token_response.get("expires_in", ASSERTION_LIFETIME))
        except (json.JSONDecodeError, UnicodeDecodeError, KeyError, TypeError, ValueError) as e:
            raise _credential_error("failed to decode token response", e) from e

        if not access_token:
            raise _credential_error("token response has no access_token")
        return access_token, expires_in
