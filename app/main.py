"""
VILLAGEVAULT AI ASSISTANT API
=============================

This module defines the FastAPI application and all HTTP endpoints used by
the VillageVault frontend for AI features. One server instance serves one
village deployment.

ENDPOINTS:
  GET  /                        - Returns API name and list of endpoints.
  GET  /health                  - Service status and the active model.
  POST /chat                    - Chat with the assistant (fallback across models).
  GET  /chat/models             - Active model and all models in preference order.
  POST /chat/models             - Switch the active model.
  POST /ai/emergency-analysis   - Assess an SOS report.
  POST /ai/weather-insights     - Village-oriented reading of weather data.
  POST /ai/village-analysis     - Insights on village admin data.
  POST /ai/emergency-alert      - Draft a broadcast alert.
  POST /ai/health-advice        - Health and safety advice on a topic.

FAILURES:
  AI endpoints never fail because a provider is down or rate-limited: the
  response then carries fallback text and "degraded": true. Only invalid
  input (422/400) or an unknown model (404) produce error statuses; an
  unexpected server error is logged and returned as 500.

STARTUP:
  The lifespan function builds AIService from config.py (providers in
  preference order) and the VillageAssistantService on top of it.
"""


from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import uvicorn
import logging
from typing import Callable

from app.models import (
    ChatRequest,
    ChatResponse,
    EmergencyAlertRequest,
    EmergencyAnalysisRequest,
    HealthAdviceRequest,
    ModelsResponse,
    SwitchModelRequest,
    VillageDataRequest,
    WeatherInsightsRequest,
)
from app.services.ai_service import AIService
from app.services.assistant_service import VillageAssistantService
from app.services.providers import ChatResult
from config import LOG_LEVEL


# -----------------------------------------------------------------------------
# LOGGING
# -----------------------------------------------------------------------------
logging.basicConfig(
    level=LOG_LEVEL,
    format='%(asctime)s | %(levelname)-8s | %(name)-20s | %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
logger = logging.getLogger("VillageVault")


# -----------------------------------------------------------------------------
# GLOBAL SERVICE REFERENCES
# -----------------------------------------------------------------------------
# Set during startup (lifespan) and used by all route handlers.
ai_service: AIService = None
assistant_service: VillageAssistantService = None


# -------------------------------------------------------------------------
# LIFESPAN (STARTUP / SHUTDOWN)
# -------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Build the services on startup. AIService must exist before
    VillageAssistantService, which sends all of its prompts through it.
    """
    global ai_service, assistant_service

    logger.info("=" * 60)
    logger.info("VillageVault AI Assistant - Starting Up...")
    logger.info("=" * 60)

    try:
        ai_service = AIService.from_config()
        assistant_service = VillageAssistantService(ai_service)

        logger.info("Models (preference order): %s", ", ".join(ai_service.list_providers()))
        logger.info("Active model: %s", ai_service.current_provider())
        logger.info("VillageVault AI Assistant is online and ready!")
        logger.info("=" * 60)

        yield

        logger.info("Shutting down VillageVault AI Assistant...")

    except Exception as e:
        logger.error(f"Fatal error during startup: {e}", exc_info=True)
        raise


# -------------------------------------------------------------------------
# FASTAPI APP AND CORS
# -------------------------------------------------------------------------
app = FastAPI(
    title="VillageVault AI Assistant API",
    description="AI chat, emergency guidance and advisory for village communities",
    lifespan=lifespan
)

# The frontend is served from a different origin (Vite dev server or CDN).
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _require_ai_service() -> AIService:
    if not ai_service:
        raise HTTPException(status_code=503, detail="AI service not initialized")
    return ai_service


def _require_assistant_service() -> VillageAssistantService:
    if not assistant_service:
        raise HTTPException(status_code=503, detail="Assistant service not initialized")
    return assistant_service


# =========================================================================
# API ENDPOINTS
# =========================================================================
# Chat handlers are plain `def`: AIService sleeps between attempts, so FastAPI
# must run them in its threadpool instead of on the event loop.

@app.get("/")
async def root():
    """Return the API name and a short description of each endpoint (for discovery)."""
    return {
        "message": "VillageVault AI Assistant API",
        "endpoints": {
            "/chat": "Chat with the assistant (automatic model fallback)",
            "/chat/models": "List models (GET) or switch the active model (POST)",
            "/ai/emergency-analysis": "Analyze an SOS report",
            "/ai/weather-insights": "Weather insights for villagers and farmers",
            "/ai/village-analysis": "Insights on village data",
            "/ai/emergency-alert": "Draft an emergency broadcast",
            "/ai/health-advice": "Health and safety advice",
            "/health": "System health check"
        }
    }


@app.get("/health")
async def health():
    """Return 'healthy', whether the services are initialized, and the active model."""
    return {
        "status": "healthy",
        "ai_service": ai_service is not None,
        "assistant_service": assistant_service is not None,
        "current_model": ai_service.current_provider() if ai_service else None,
    }


@app.post("/chat", response_model=ChatResponse)
def chat(request: ChatRequest):
    """
    Send a message to the assistant.

    The active model is tried first, then up to three other models. If none
    answers, the reply is a topic-matched fallback with "degraded": true.

    REQUEST BODY:
    {
        "message": "When should I sow wheat?",
        "context": "optional extra context"
    }
    """
    service = _require_ai_service()
    try:
        result = service.chat(request.message, request.context)
    except ValueError as e:
        # Whitespace-only message passes pydantic's min_length but not the service.
        logger.warning(f"Rejected chat message: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error processing chat: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error processing chat: {str(e)}")
    return ChatResponse.from_result(result)


@app.get("/chat/models", response_model=ModelsResponse)
async def list_models():
    service = _require_ai_service()
    return ModelsResponse(current=service.current_provider(), available=service.list_providers())


@app.post("/chat/models", response_model=ModelsResponse)
async def switch_model(request: SwitchModelRequest):
    """Switch the model tried first on the next chat. Unknown models return 404."""
    service = _require_ai_service()
    if not service.switch_provider(request.model):
        raise HTTPException(status_code=404, detail=f"Unknown model: {request.model}")
    return ModelsResponse(current=service.current_provider(), available=service.list_providers())




def _run_task(name: str, task: Callable[..., ChatResult], *args) -> ChatResponse:
    """Run one assistant task with the same error mapping as /chat."""
    try:
        result = task(*args)
    except ValueError as e:
        # Prompt built from the request is empty or longer than MAX_MESSAGE_LENGTH.
        logger.warning(f"Rejected {name} request: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error processing {name}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error processing {name}: {str(e)}")
    return ChatResponse.from_result(result)


@app.post("/ai/emergency-analysis", response_model=ChatResponse)
def emergency_analysis(request: EmergencyAnalysisRequest):
    service = _require_assistant_service()
    return _run_task("emergency analysis", service.analyze_emergency, request.description, request.location)


@app.post("/ai/weather-insights", response_model=ChatResponse)
def weather_insights(request: WeatherInsightsRequest):
    service = _require_assistant_service()
    return _run_task("weather insights", service.get_weather_insights, request.weather_data, request.location)


@app.post("/ai/village-analysis", response_model=ChatResponse)
def village_analysis(request: VillageDataRequest):
    service = _require_assistant_service()
    return _run_task("village analysis", service.analyze_village_data, request.data)


@app.post("/ai/emergency-alert", response_model=ChatResponse)
def emergency_alert(request: EmergencyAlertRequest):
    service = _require_assistant_service()
    return _run_task("emergency alert", service.generate_emergency_alert, request.emergency_type, request.details)


@app.post("/ai/health-advice", response_model=ChatResponse)
def health_advice(request: HealthAdviceRequest):
    service = _require_assistant_service()
    return _run_task("health advice", service.get_health_advice, request.topic, request.context)


# -------------------------------------------------------------------------
# STANDALONE RUN (python -m app.main)
# -------------------------------------------------------------------------
def run():
    """Start the uvicorn server (same as run.py); used if someone does python -m app.main"""
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info"
    )

if __name__ == "__main__":
    run()
