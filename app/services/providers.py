"""
PROVIDER ADAPTERS MODULE
========================

One adapter per call shape. AIService only ever calls attempt(), which
never raises for provider-side problems: it returns an AttemptOutcome that is
either a ChatResult or a classified failure.

CALL SHAPES:
  ChatCompletionProvider  - POST <base>/chat/completions with a bearer token
                            (OpenRouter and any OpenAI-compatible endpoint).
  GenerateContentProvider - POST <base>/models/<model>:generateContent?key=<key>
                            (direct Google Gemini).

FAILURE CLASSIFICATION (from the HTTP status):
  401 / 403 -> UNAUTHORIZED
  429       -> RATE_LIMITED
  400       -> BAD_REQUEST
  other     -> UNAVAILABLE (also transport errors and unparseable bodies)
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

import requests

import config


logger = logging.getLogger("VillageVault")


# ==============================================================================
# RESULT AND FAILURE TYPES
# ==============================================================================

class FailureKind(str, Enum):
    UNAUTHORIZED = "unauthorized"
    RATE_LIMITED = "rate_limited"
    BAD_REQUEST = "bad_request"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class TokenUsage:
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


@dataclass(frozen=True)
class ChatResult:
    """
    Provider-neutral answer. provider is None and degraded is True for
    answers synthesized locally when no provider responded.
    """
    content: str
    usage: Optional[TokenUsage] = None
    provider: Optional[str] = None
    degraded: bool = False


@dataclass(frozen=True)
class AttemptOutcome:
    """Either result is set (success) or failure/error_message are set."""
    result: Optional[ChatResult] = None
    failure: Optional[FailureKind] = None
    error_message: str = ""

    @property
    def ok(self) -> bool:
        return self.result is not None

    @classmethod
    def success(cls, result: ChatResult) -> "AttemptOutcome":
        return cls(result=result)

    @classmethod
    def failed(cls, failure: FailureKind, error_message: str) -> "AttemptOutcome":
        return cls(failure=failure, error_message=error_message)


class ProviderError(Exception):
    """Raised inside an adapter when the provider answers with a non-2xx status."""

    def __init__(self, kind: FailureKind, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.kind = kind
        self.status_code = status_code


def classify_status(status_code: int) -> FailureKind:
    """Map an HTTP status to a FailureKind."""
    if status_code in (401, 403):
        return FailureKind.UNAUTHORIZED
    if status_code == 429:
        return FailureKind.RATE_LIMITED
    if status_code == 400:
        return FailureKind.BAD_REQUEST
    return FailureKind.UNAVAILABLE


# ==============================================================================
# BASE ADAPTER
# ==============================================================================

class ChatProvider(ABC):
    """
    Common capability shared by both adapters: build the request, send it,
    parse the body. Subclasses implement _send() and return a ChatResult or
    raise ProviderError.
    """

    def __init__(self, provider_id: str, session: Optional[requests.Session] = None,
                 timeout: float = config.REQUEST_TIMEOUT_SECONDS):
        self.provider_id = provider_id
        self.session = session or requests.Session()
        self.timeout = timeout

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.provider_id!r})"

    def attempt(self, message: str, context: Optional[str] = None) -> AttemptOutcome:
        """Call the provider once and classify any failure. Never raises for provider errors."""
        try:
            return AttemptOutcome.success(self._send(message, context))
        except ProviderError as e:
            return AttemptOutcome.failed(e.kind, str(e))
        except requests.RequestException as e:
            return AttemptOutcome.failed(
                FailureKind.UNAVAILABLE, f"Network error for model {self.provider_id}: {e}"
            )
        except (ValueError, KeyError, IndexError, TypeError, AttributeError) as e:
            # Body was not JSON or did not have the expected shape.
            return AttemptOutcome.failed(
                FailureKind.UNAVAILABLE, f"Unreadable response from model {self.provider_id}: {e}"
            )

    @abstractmethod
    def _send(self, message: str, context: Optional[str]) -> ChatResult:
        """Send one request and return the parsed answer, or raise ProviderError."""

    def _raise_for_status(self, response: requests.Response) -> None:
        if response.ok:
            return
        status = response.status_code
        kind = classify_status(status)
        logger.error("Model %s failed with status %s", self.provider_id, status)
        if kind is FailureKind.RATE_LIMITED:
            text = f"Rate limit exceeded (429) for model {self.provider_id}"
        elif kind is FailureKind.BAD_REQUEST:
            text = f"Bad request (400) for model {self.provider_id} - model may not be available"
        elif kind is FailureKind.UNAUTHORIZED:
            text = f"Unauthorized ({status}) - API key issue for model {self.provider_id}"
        else:
            text = f"API request failed: {status} for model {self.provider_id}"
        raise ProviderError(kind, text, status_code=status)


# ==============================================================================
# CHAT-COMPLETION ADAPTER (OpenRouter)
# ==============================================================================

class ChatCompletionProvider(ChatProvider):
    """OpenAI-compatible chat completion over a bearer-token endpoint."""

    def __init__(self, model: str, api_key: str = config.OPENROUTER_API_KEY,
                 base_url: str = config.OPENROUTER_BASE_URL,
                 max_tokens: int = config.MAX_TOKENS,
                 temperature: float = config.TEMPERATURE,
                 **kwargs):
        super().__init__(model, **kwargs)
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.max_tokens = max_tokens
        self.temperature = temperature

    def build_payload(self, message: str, context: Optional[str] = None) -> Dict[str, Any]:
        return {
            "model": self.provider_id,
            "messages": [
                {"role": "system", "content": config.build_system_prompt(context)},
                {"role": "user", "content": message},
            ],
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
        }

    def _send(self, message: str, context: Optional[str]) -> ChatResult:
        response = self.session.post(
            f"{self.base_url}/chat/completions",
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
                "HTTP-Referer": config.APP_REFERER,
                "X-Title": config.APP_TITLE,
            },
            json=self.build_payload(message, context),
            timeout=self.timeout,
        )
        self._raise_for_status(response)
        data = response.json()
        return ChatResult(
            content=_require_text(data["choices"][0]["message"]["content"]),
            usage=_usage_from_openai(data.get("usage")),
            provider=self.provider_id,
        )


def _require_text(value: Any) -> str:
    # A 2xx with no usable text is treated like an unreadable body so the
    # next provider gets a chance.
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"empty answer text: {value!r}")
    return value


def _usage_from_openai(raw: Optional[Dict[str, Any]]) -> Optional[TokenUsage]:
    if not raw:
        return None
    return TokenUsage(
        prompt_tokens=int(raw.get("prompt_tokens", 0) or 0),
        completion_tokens=int(raw.get("completion_tokens", 0) or 0),
        total_tokens=int(raw.get("total_tokens", 0) or 0),
    )


# ==============================================================================
# SINGLE-PROMPT ADAPTER (direct Gemini)
# ==============================================================================

class GenerateContentProvider(ChatProvider):
    """
    Google generateContent API. There is no separate system role here, so the
    system prompt and the question are sent as one text part.
    """

    def __init__(self, provider_id: str = config.GEMINI_DIRECT_MODEL,
                 model_name: str = config.GEMINI_MODEL_NAME,
                 api_key: str = config.GEMINI_API_KEY,
                 base_url: str = config.GEMINI_BASE_URL,
                 **kwargs):
        super().__init__(provider_id, **kwargs)
        self.model_name = model_name
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")

    def build_payload(self, message: str, context: Optional[str] = None) -> Dict[str, Any]:
        prompt = f"{config.build_system_prompt(context)}\n\nUser question: {message}"
        return {"contents": [{"parts": [{"text": prompt}]}]}

    def _send(self, message: str, context: Optional[str]) -> ChatResult:
        response = self.session.post(
            f"{self.base_url}/models/{self.model_name}:generateContent",
            params={"key": self.api_key},
            headers={"Content-Type": "application/json"},
            json=self.build_payload(message, context),
            timeout=self.timeout,
        )
        self._raise_for_status(response)
        data = response.json()
        return ChatResult(
            content=_gemini_text(data),
            usage=_usage_from_gemini(data.get("usageMetadata") if isinstance(data, dict) else None),
            provider=self.provider_id,
        )


def _gemini_text(data: Any) -> str:
    if isinstance(data, str):
        return _require_text(data)
    candidates = data.get("candidates")
    if candidates and candidates[0].get("content"):
        return _require_text(candidates[0]["content"]["parts"][0]["text"])
    if "response" in data:
        return _require_text(data["response"])
    raise ValueError("no candidates or response field in generateContent body")


def _usage_from_gemini(raw: Optional[Dict[str, Any]]) -> Optional[TokenUsage]:
    if not raw:
        return None
    return TokenUsage(
        prompt_tokens=int(raw.get("promptTokenCount", 0) or 0),
        completion_tokens=int(raw.get("candidatesTokenCount", 0) or 0),
        total_tokens=int(raw.get("totalTokenCount", 0) or 0),
    )


# ==============================================================================
# FACTORY
# ==============================================================================

def build_default_providers(session: Optional[requests.Session] = None) -> List[ChatProvider]:
    """
    Build the providers in preference order from config: direct Gemini first
    (when GEMINI_DIRECT_ENABLED), then every ALTERNATIVE_MODELS entry.
    One requests.Session is shared so connections are pooled.
    """
    session = session or requests.Session()
    providers: List[ChatProvider] = []
    if config.GEMINI_DIRECT_ENABLED:
        providers.append(GenerateContentProvider(session=session))
    for model in config.ALTERNATIVE_MODELS:
        providers.append(ChatCompletionProvider(model, session=session))
    if not config.OPENROUTER_API_KEY:
        logger.warning("OPENROUTER_API_KEY not set. OpenRouter models will answer 401.")
    if config.GEMINI_DIRECT_ENABLED and not config.GEMINI_API_KEY:
        logger.warning("GEMINI_API_KEY not set. Direct Gemini will fail until it is configured.")
    return providers
