"""
VILLAGEVAULT AI ASSISTANT PACKAGE
=================================

Main Python package for the VillageVault AI assistant backend:

  from app.main import app
  from app.models import ChatRequest
  from app.services.ai_service import AIService

FILE STRUCTURE:
  app/
    __init__.py   - This file; marks 'app' as a package.
    main.py       - FastAPI app and all HTTP endpoints (/chat, /chat/models, /ai/*, /health).
    models.py     - Pydantic models for API requests and responses.
    services/     - AI providers, fallback chat, canned responses, village assistant prompts.
"""
