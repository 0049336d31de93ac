"""Text-generation client for repository analysis.

Gemini is called directly through its generateContent REST endpoint; Claude,
Ollama and Bedrock go through LiteLLM. Each call is a single request with a
fixed generation configuration and no retry. Expected failures come back
from `analyze` as a failure signal; anything else propagates.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import litellm
import requests

from gitfolio.errors import MalformedResponseError, TransportError
from gitfolio.models.llm_config import LLMConfig

logger = logging.getLogger(__name__)

# LiteLLM exceptions that mean the request did not produce a usable reply
_LITELLM_TRANSPORT_ERRORS: tuple[type[Exception], ...] = (
    litellm.exceptions.APIConnectionError,
    litellm.exceptions.APIError,
    litellm.exceptions.AuthenticationError,
    litellm.exceptions.BadRequestError,
    litellm.exceptions.InternalServerError,
    litellm.exceptions.NotFoundError,
    litellm.exceptions.RateLimitError,
    litellm.exceptions.ServiceUnavailableError,
    litellm.exceptions.Timeout,
)


class FailureKind(Enum):
    """Why a generation call produced no text."""

    TRANSPORT = "transport"
    MALFORMED_RESPONSE = "malformed_response"


@dataclass
class LLMResponse:
    """Response from a generation call.

    Attributes:
        content: Generated text
        model: Model that generated the response
        usage: Token usage statistics
        finish_reason: Reason for completion (STOP, MAX_TOKENS, ...)
    """

    content: str
    model: str
    usage: dict[str, int] = field(default_factory=dict)
    finish_reason: str | None = None


@dataclass
class AnalysisReply:
    """Outcome of one `AnalysisClient.analyze` call.

    Exactly one of `text` and `failure` is set.
    """

    text: str | None = None
    failure: FailureKind | None = None
    error: str | None = None
    usage: dict[str, int] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.text is not None and self.failure is None


class AnalysisClient:
    """Sends analysis prompts to the configured text-generation provider."""

    def __init__(self, config: LLMConfig, session: requests.Session | None = None) -> None:
        """Initialize the client.

        Args:
            config: Provider, model and sampling configuration
            session: HTTP session for the Gemini REST endpoint (mainly for tests)
        """
        self.config = config
        self.session = session or requests.Session()

    @property
    def requires_api_key(self) -> bool:
        """Return True if requests must carry an API key."""
        return self.config.requires_api_key

    def analyze(self, prompt: str, api_key: str | None = None) -> AnalysisReply:
        """Generate text for a prompt, returning a failure signal instead of raising.

        Only TransportError and MalformedResponseError are converted into a
        failure reply.

        Args:
            prompt: Prompt text
            api_key: Overrides the configured API key for this call

        Returns:
            AnalysisReply with text or a failure kind
        """
        try:
            response = self.complete(prompt, api_key=api_key)
        except TransportError as e:
            logger.warning("Generation request failed: %s", e)
            return AnalysisReply(failure=FailureKind.TRANSPORT, error=str(e))
        except MalformedResponseError as e:
            logger.warning("Generation response malformed: %s", e)
            return AnalysisReply(failure=FailureKind.MALFORMED_RESPONSE, error=str(e))

        return AnalysisReply(text=response.content, usage=response.usage)

    def complete(self, prompt: str, api_key: str | None = None) -> LLMResponse:
        """Issue one generation request.

        Raises:
            TransportError: On non-success status or network fault
            MalformedResponseError: If the reply text is missing
        """
        key = api_key or self.config.api_key
        if self.config.provider == "gemini":
            return self._complete_gemini(prompt, key)
        return self._complete_litellm(prompt, key)

    # -------------------------------------------------------------------------
    # Gemini REST
    # -------------------------------------------------------------------------

    def build_gemini_payload(self, prompt: str) -> dict[str, Any]:
        """Build the generateContent request body."""
        return {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": self.config.temperature,
                "topK": self.config.top_k,
                "topP": self.config.top_p,
                "maxOutputTokens": self.config.max_tokens,
            },
        }

    @property
    def gemini_url(self) -> str:
        base = (self.config.api_base or "").rstrip("/")
        return f"{base}/models/{self.config.model}:generateContent"

    def _complete_gemini(self, prompt: str, api_key: str | None) -> LLMResponse:
        headers = {"Content-Type": "application/json"}
        if api_key:
            headers["x-goog-api-key"] = api_key

        try:
            resp = self.session.post(
                self.gemini_url,
                json=self.build_gemini_payload(prompt),
                headers=headers,
                timeout=self.config.timeout,
            )
        except requests.RequestException as e:
            raise TransportError(f"Gemini request failed: {e}") from e

        if not 200 <= resp.status_code < 300:
            raise TransportError(
                f"Gemini API error: {_gemini_error_message(resp)}",
                status_code=resp.status_code,
            )

        try:
            data = resp.json()
        except ValueError as e:
            raise MalformedResponseError("Gemini response is not JSON") from e

        text = extract_gemini_text(data)
        candidate = data["candidates"][0]
        usage_meta = data.get("usageMetadata")
        if not isinstance(usage_meta, dict):
            usage_meta = {}
        usage = {
            "prompt_tokens": int(usage_meta.get("promptTokenCount") or 0),
            "completion_tokens": int(usage_meta.get("candidatesTokenCount") or 0),
            "total_tokens": int(usage_meta.get("totalTokenCount") or 0),
        }

        logger.debug("Gemini reply: %d chars, %d tokens", len(text), usage["total_tokens"])

        return LLMResponse(
            content=text,
            model=str(data.get("modelVersion") or self.config.model),
            usage=usage,
            finish_reason=candidate.get("finishReason"),
        )

    # -------------------------------------------------------------------------
    # LiteLLM
    # -------------------------------------------------------------------------

    def _complete_litellm(self, prompt: str, api_key: str | None) -> LLMResponse:
        completion_kwargs: dict[str, Any] = {
            "model": self.config.get_litellm_model_name(),
            "messages": [{"role": "user", "content": prompt}],
            "temperature": self.config.temperature,
            "top_p": self.config.top_p,
            "max_tokens": self.config.max_tokens,
            "timeout": self.config.timeout,
        }
        if api_key:
            completion_kwargs["api_key"] = api_key

        if self.config.provider == "ollama":
            completion_kwargs["api_base"] = self.config.api_base
            completion_kwargs["top_k"] = self.config.top_k
        elif self.config.provider == "claude":
            completion_kwargs["top_k"] = self.config.top_k

        try:
            response = litellm.completion(**completion_kwargs)
        except litellm.exceptions.AuthenticationError as e:
            raise TransportError(
                f"Authentication failed for {self.config.provider}: {e}", status_code=401
            ) from e
        except litellm.exceptions.RateLimitError as e:
            raise TransportError(
                f"Rate limit exceeded for {self.config.provider}: {e}", status_code=429
            ) from e
        except _LITELLM_TRANSPORT_ERRORS as e:
            raise TransportError(
                f"Request to {self.config.provider} failed: {e}",
                status_code=getattr(e, "status_code", None),
            ) from e

        try:
            choice = response.choices[0]
            content = choice.message.content
        except (AttributeError, IndexError, TypeError) as e:
            raise MalformedResponseError(
                f"Unexpected {self.config.provider} response structure"
            ) from e

        if not isinstance(content, str) or not content:
            raise MalformedResponseError(f"{self.config.provider} response has no text")

        usage: dict[str, int] = {}
        if getattr(response, "usage", None):
            usage = {
                "prompt_tokens": response.usage.prompt_tokens or 0,
                "completion_tokens": response.usage.completion_tokens or 0,
                "total_tokens": response.usage.total_tokens or 0,
            }

        return LLMResponse(
            content=content,
            model=getattr(response, "model", None) or self.config.model,
            usage=usage,
            finish_reason=getattr(choice, "finish_reason", None),
        )


def extract_gemini_text(data: Any) -> str:
    """Return `candidates[0].content.parts[0].text` from a Gemini payload.

    Raises:
        MalformedResponseError: If any step of the path is missing
    """
    try:
        text = data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError) as e:
        raise MalformedResponseError("Unexpected Gemini API response structure") from e
    if not isinstance(text, str) or not text:
        raise MalformedResponseError("Gemini response part has no text")
    return text


def _gemini_error_message(resp: requests.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return str(resp.reason or resp.status_code)
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    return str(resp.reason or resp.status_code)


def create_client(config: LLMConfig, session: requests.Session | None = None) -> AnalysisClient:
    """Create an analysis client from configuration."""
    return AnalysisClient(config, session=session)
