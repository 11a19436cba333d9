"""
CONFIGURATION MODULE
====================

PURPOSE:
  Central place for all VillageVault assistant settings: API keys, provider
  endpoints, model names, fallback/pacing timings, and the assistant system
  prompt. One process serves one village deployment; each deployment keeps
  its own .env next to this file.

WHAT THIS FILE DOES:
  - Loads environment variables from .env (so API keys stay out of code).
  - Exposes OPENROUTER_* and GEMINI_* settings for the two provider families.
  - Defines the ordered list of alternative models used for fallback.
  - Defines pacing and back-off delays used by AIService between attempts.
  - Holds the system prompt that defines the assistant's persona.

USAGE:
  Import what you need: `from config import OPENROUTER_API_KEY, ALTERNATIVE_MODELS`
  All services import from here so behaviour is consistent.
"""

import os
import logging
from dotenv import load_dotenv


# -----------------------------------------------------------------------------
# LOGGING
# -----------------------------------------------------------------------------
logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# ENVIRONMENT
# -----------------------------------------------------------------------------
# Load environment variables from .env file (if it exists).
load_dotenv()

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


def _env_bool(name: str, default: bool) -> bool:
    """Read a boolean flag such as GEMINI_DIRECT_ENABLED=false from the environment."""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring invalid value for %s: %r (using %s)", name, raw, default)
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring invalid value for %s: %r (using %s)", name, raw, default)
        return default


# ============================================================================
# OPENROUTER CONFIGURATION (chat-completion providers)
# ============================================================================
# Every alternative model is reached through OpenRouter's OpenAI-compatible
# /chat/completions endpoint with a bearer token.

OPENROUTER_API_KEY = os.getenv("OPENROUTER_API_KEY", "").strip()
OPENROUTER_BASE_URL = os.getenv("OPENROUTER_BASE_URL", "https://openrouter.ai/api/v1").rstrip("/")

# Sent as HTTP-Referer so OpenRouter can attribute traffic to the deployment.
APP_REFERER = os.getenv("APP_REFERER", "http://localhost:5173")
APP_TITLE = "VillageVault"

# Alternative free models, ordered by preference. Override with a
# comma-separated ALTERNATIVE_MODELS value in .env.
_DEFAULT_ALTERNATIVE_MODELS = [
    "deepseek/deepseek-v3.1:free",
    "z-ai/glm-4.5-air:free",
    "nvidia/nemotron-nano-9b-v2:free",
    "alibaba/tongyi-deepresearch-30b-a3b:free",
]


def _load_alternative_models() -> list:
    """
    Return the ordered list of OpenRouter model ids.
    Blank entries and duplicates are dropped; order of first appearance wins.
    """
    raw = os.getenv("ALTERNATIVE_MODELS", "").strip()
    if not raw:
        return list(_DEFAULT_ALTERNATIVE_MODELS)
    models = []
    for item in raw.split(","):
        model = item.strip()
        if model and model not in models:
            models.append(model)
    return models or list(_DEFAULT_ALTERNATIVE_MODELS)


ALTERNATIVE_MODELS = _load_alternative_models()

# ============================================================================
# DIRECT GEMINI CONFIGURATION (single-prompt provider)
# ============================================================================
# When enabled, the direct Gemini provider is tried first. GEMINI_DIRECT_MODEL
# is the provider id shown to users; GEMINI_MODEL_NAME is the actual model
# in the generateContent URL (gemini-2.0-flash-lite has the best RPM on the
# free tier).

GEMINI_DIRECT_ENABLED = _env_bool("GEMINI_DIRECT_ENABLED", True)
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY", "").strip()
GEMINI_BASE_URL = os.getenv(
    "GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1"
).rstrip("/").replace("/v1beta", "/v1")
GEMINI_DIRECT_MODEL = "gemini-pro-direct"
GEMINI_MODEL_NAME = os.getenv("GEMINI_MODEL_NAME", "gemini-2.0-flash-lite")

# ============================================================================
# GENERATION SETTINGS
# ============================================================================

MAX_TOKENS = _env_int("MAX_TOKENS", 1000)
TEMPERATURE = _env_float("TEMPERATURE", 0.7)

# Transport timeout for a single provider call. A hung provider is only cut
# off by this value.
REQUEST_TIMEOUT_SECONDS = _env_float("REQUEST_TIMEOUT_SECONDS", 60.0)

# Maximum length (characters) for a single user message.
MAX_MESSAGE_LENGTH = 32_000

# ============================================================================
# PACING AND FALLBACK
# ============================================================================
# Tuned by hand against free-tier quotas, not derived from documented limits.
#   PACE_INTERVAL_SECONDS      - minimum gap between two chat calls
#   FALLBACK_DELAY_SECONDS     - pause before every fallback attempt after the first
#   RATE_LIMIT_BACKOFF_SECONDS - extra pause after a 429 from a fallback model
#   MAX_FALLBACK_ATTEMPTS      - alternates tried after the active model fails

PACE_INTERVAL_SECONDS = _env_float("PACE_INTERVAL_SECONDS", 3.0)
FALLBACK_DELAY_SECONDS = _env_float("FALLBACK_DELAY_SECONDS", 2.0)
RATE_LIMIT_BACKOFF_SECONDS = _env_float("RATE_LIMIT_BACKOFF_SECONDS", 5.0)
MAX_FALLBACK_ATTEMPTS = _env_int("MAX_FALLBACK_ATTEMPTS", 3)

# ============================================================================
# ASSISTANT PERSONALITY CONFIGURATION
# ============================================================================

VILLAGEVAULT_SYSTEM_PROMPT = (
    "You are a helpful AI assistant for VillageVault, a village communication system. "
    "You help villagers with information, emergency guidance, and general queries. "
    "Be friendly, helpful, and culturally sensitive to Indian village context."
)


def build_system_prompt(context: str = None) -> str:
    """Return the system prompt, with a Context section appended when context is given."""
    if context:
        return f"{VILLAGEVAULT_SYSTEM_PROMPT}\n\nContext: {context}"
    return VILLAGEVAULT_SYSTEM_PROMPT
