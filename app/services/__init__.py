"""
SERVICES PACKAGE
=================

Business logic lives here. The API layer (app.main) calls these services;
they don't handle HTTP routing, only provider calls, fallback and prompts.

MODULES:
    providers          - Provider adapters (OpenRouter chat completions, direct Gemini).
    client_state       - Active model and request pacing shared by all chat calls.
    ai_service         - chat() with ordered fallback and degraded-mode answers.
    fallback_responses - Canned topic answers and degraded-mode notices.
    assistant_service  - Emergency, weather, village-data, alert and health prompts.
"""
