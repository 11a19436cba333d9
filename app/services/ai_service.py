"""
AI SERVICE MODULE
=================

Best-effort chat over several AI providers. chat() always returns a
ChatResult for a non-empty message: the real answer when some provider
responds, or a locally written degraded-mode answer when none does.

FLOW (chat):
  1. Pace: wait until PACE_INTERVAL_SECONDS have passed since the last call.
  2. Try the active model.
  3. On failure, walk the other models in preference order (at most
     MAX_FALLBACK_ATTEMPTS of them), pausing FALLBACK_DELAY_SECONDS before
     every attempt after the first, plus RATE_LIMIT_BACKOFF_SECONDS after a
     429 from a fallback model.
  4. Failover is sticky: the active model follows each fallback as it is
     tried, so whichever model answered stays active for the next call.
  5. If every attempt failed, answer from fallback_responses, choosing the
     notice by what went wrong (401 > 429 > anything else).
"""

import logging
import time
from typing import Callable, Dict, List, Optional, Sequence

import config
from app.services.client_state import ClientState
from app.services.fallback_responses import build_degraded_response
from app.services.providers import (
    AttemptOutcome,
    ChatProvider,
    ChatResult,
    FailureKind,
    build_default_providers,
)


logger = logging.getLogger("VillageVault")


# ==============================================================================
# AI SERVICE CLASS
# ==============================================================================

class AIService:
    """
    Owns the ordered providers and the shared ClientState. One instance is
    created at startup (see app.main) and used by every request.
    """

    def __init__(
        self,
        providers: Sequence[ChatProvider],
        state: Optional[ClientState] = None,
        pace_interval: float = config.PACE_INTERVAL_SECONDS,
        fallback_delay: float = config.FALLBACK_DELAY_SECONDS,
        rate_limit_backoff: float = config.RATE_LIMIT_BACKOFF_SECONDS,
        max_fallback_attempts: int = config.MAX_FALLBACK_ATTEMPTS,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if not providers:
            raise ValueError("AIService needs at least one provider")
        self._providers: Dict[str, ChatProvider] = {}
        for provider in providers:
            if provider.provider_id in self._providers:
                raise ValueError(f"Duplicate provider id: {provider.provider_id}")
            self._providers[provider.provider_id] = provider

        self.state = state or ClientState(self._providers.keys())
        unknown = [m for m in self.state.known_models if m not in self._providers]
        if unknown:
            raise ValueError(f"ClientState lists models with no provider: {unknown}")

        self.pace_interval = pace_interval
        self.fallback_delay = fallback_delay
        self.rate_limit_backoff = rate_limit_backoff
        self.max_fallback_attempts = max_fallback_attempts
        self._sleep = sleep

    @classmethod
    def from_config(cls) -> "AIService":
        """Build the service with providers from config.py (used at app startup)."""
        return cls(build_default_providers())

    # --------------------------------------------------------------------------
    # MODEL SELECTION
    # --------------------------------------------------------------------------

    def list_providers(self) -> List[str]:
        """Provider ids in preference order (direct Gemini first when enabled)."""
        return self.state.known_models

    def current_provider(self) -> str:
        return self.state.active_model

    def switch_provider(self, provider_id: str) -> bool:
        """Make provider_id the active model. Unknown ids are ignored and return False."""
        if not self.state.set_active_model(provider_id):
            logger.warning("Refusing to switch to unknown model: %s", provider_id)
            return False
        logger.info("Switched to model: %s", provider_id)
        return True

    # --------------------------------------------------------------------------
    # CHAT
    # --------------------------------------------------------------------------

    def chat(
        self,
        message: str,
        context: Optional[str] = None,
        fallback_topic: Optional[str] = None,
    ) -> ChatResult:
        """
        Answer message, trying providers in order. Raises ValueError only for an
        empty or oversized message; every provider failure is handled here.

        fallback_topic, when given, picks the canned block of a degraded answer
        instead of message (task prompts carry boilerplate that would match
        the wrong keywords).
        """
        if message is None or not message.strip():
            raise ValueError("Message cannot be empty")
        if len(message) > config.MAX_MESSAGE_LENGTH:
            raise ValueError(f"Message exceeds {config.MAX_MESSAGE_LENGTH} characters")

        self._pace()

        first_model = self.state.active_model
        outcome = self._attempt(first_model, message, context)
        if outcome.ok:
            return outcome.result

        failures: List[FailureKind] = [outcome.failure]
        logger.warning("Model %s failed: %s, trying fallback models...", first_model, outcome.error_message)

        models = self.list_providers()
        max_attempts = min(self.max_fallback_attempts, len(models) - 1)
        attempts = 0

        for model in models:
            if attempts >= max_attempts:
                break
            if model == first_model:
                continue

            attempts += 1
            self.state.set_active_model(model)
            logger.info("Trying fallback model: %s (attempt %s/%s)", model, attempts, max_attempts)

            if attempts > 1:
                self._sleep(self.fallback_delay)

            outcome = self._attempt(model, message, context)
            if outcome.ok:
                logger.info("Fallback successful with %s", model)
                return outcome.result

            failures.append(outcome.failure)
            logger.warning("Fallback model %s also failed: %s", model, outcome.error_message)

            if outcome.failure is FailureKind.RATE_LIMITED and attempts < max_attempts:
                logger.warning("Rate limit detected, waiting %.1fs...", self.rate_limit_backoff)
                self._sleep(self.rate_limit_backoff)

        logger.error(
            "All models failed, using fallback response. Failures: %s",
            ", ".join(f.value for f in failures),
        )
        return ChatResult(content=build_degraded_response(fallback_topic or message, failures), degraded=True)

    def _pace(self) -> None:
        wait = self.state.reserve_request_slot(self.pace_interval)
        if wait > 0:
            logger.debug("Pacing: waiting %.2fs before the next AI request", wait)
            self._sleep(wait)

    def _attempt(self, model: str, message: str, context: Optional[str]) -> AttemptOutcome:
        return self._providers[model].attempt(message, context)
