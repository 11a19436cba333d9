"""
DATA MODELS MODULE
==================

Pydantic models for API requests and responses. FastAPI uses these to
validate incoming JSON and to serialize responses.

MODELS:
  ChatRequest        - Body of POST /chat (message + optional context).
  ChatResponse       - Reply of every AI endpoint (content, usage, model, degraded).
  TokenUsageModel    - Token counts reported by the provider, when any.
  ModelsResponse     - Body of GET /chat/models (active model + preference order).
  SwitchModelRequest - Body of POST /chat/models.
  EmergencyAnalysisRequest, WeatherInsightsRequest, VillageDataRequest,
  EmergencyAlertRequest, HealthAdviceRequest - bodies of the /ai/* endpoints.
"""

from pydantic import BaseModel, Field
from typing import Any, List, Optional

from app.services.providers import ChatResult
from config import MAX_MESSAGE_LENGTH

# ==============================================================================
# CHAT
# ==============================================================================

class ChatRequest(BaseModel):
    """
    Request body for POST /chat.

    - message: Required, 1-32,000 characters (empty or too long returns 422).
    - context: Optional extra context appended to the system prompt.
    """
    message: str = Field(..., min_length=1, max_length=MAX_MESSAGE_LENGTH)
    context: Optional[str] = None


class TokenUsageModel(BaseModel):
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class ChatResponse(BaseModel):
    """
    Response body for POST /chat and every /ai/* endpoint.

    - content: The assistant's reply (or the fallback text when degraded).
    - usage: Token counts when the provider reported them.
    - model: Model that answered; None for fallback text.
    - degraded: True when no AI provider answered.
    """
    content: str
    usage: Optional[TokenUsageModel] = None
    model: Optional[str] = None
    degraded: bool = False

    @classmethod
    def from_result(cls, result: ChatResult) -> "ChatResponse":
        usage = None
        if result.usage is not None:
            usage = TokenUsageModel(
                prompt_tokens=result.usage.prompt_tokens,
                completion_tokens=result.usage.completion_tokens,
                total_tokens=result.usage.total_tokens,
            )
        return cls(content=result.content, usage=usage, model=result.provider, degraded=result.degraded)


# ==============================================================================
# MODEL SELECTION
# ==============================================================================

class ModelsResponse(BaseModel):
    current: str
    available: List[str]


class SwitchModelRequest(BaseModel):
    model: str = Field(..., min_length=1)


# ==============================================================================
# VILLAGE ASSISTANT TASKS
# ==============================================================================

class EmergencyAnalysisRequest(BaseModel):
    description: str = Field(..., min_length=1)
    location: str = Field(..., min_length=1)


class WeatherInsightsRequest(BaseModel):
    # Whatever the weather widget received from the weather backend.
    weather_data: Any
    location: str = Field(..., min_length=1)


class VillageDataRequest(BaseModel):
    data: Any


class EmergencyAlertRequest(BaseModel):
    emergency_type: str = Field(..., min_length=1)
    details: str = Field(..., min_length=1)


class HealthAdviceRequest(BaseModel):
    topic: str = Field(..., min_length=1)
    context: Optional[str] = None
