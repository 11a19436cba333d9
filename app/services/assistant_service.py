"""
VILLAGE ASSISTANT SERVICE MODULE
================================

Task-specific prompts for the VillageVault screens (SOS, weather, admin
dashboard, alerts, health). Each method builds one prompt and hands it to
AIService.chat() with a short context line, so each inherits chat()'s
fallback and degraded-mode behaviour.
"""

import json
import logging
from typing import Any, Optional

from app.services.ai_service import AIService
from app.services.providers import ChatResult


logger = logging.getLogger("VillageVault")


def _to_json(data: Any) -> str:
    # Weather and village payloads come straight from the frontend; anything
    # json can't encode is stringified rather than rejected.
    return json.dumps(data, ensure_ascii=False, default=str)


class VillageAssistantService:
    """Prompt builders on top of AIService.chat()."""

    def __init__(self, ai_service: AIService):
        self.ai_service = ai_service

    def analyze_emergency(self, sos_description: str, location: str) -> ChatResult:
        """Assess an SOS report: severity, first actions, who to call."""
        prompt = f"""Analyze this emergency report and provide immediate guidance:

Emergency: {sos_description}
Location: {location}

Please provide:
1. Emergency level assessment (Low/Medium/High/Critical)
2. Immediate actions to take
3. Who to contact first
4. Safety precautions
5. Estimated response time needed

Keep response concise and actionable."""
        logger.info("Emergency analysis requested for location: %s", location)
        return self.ai_service.chat(
            prompt, "Emergency analysis for village SOS system", fallback_topic=f"emergency: {sos_description}"
        )

    def get_weather_insights(self, weather_data: Any, location: str) -> ChatResult:
        prompt = f"""Analyze this weather data for {location} and provide insights:

Weather: {_to_json(weather_data)}

Please provide:
1. Weather summary and conditions
2. Health recommendations based on weather
3. Agricultural advice for farmers
4. Safety warnings if any
5. Clothing/activity suggestions

Keep it relevant for village life and farming."""
        return self.ai_service.chat(prompt, "Weather analysis for village community", fallback_topic="weather")

    def analyze_village_data(self, data: Any) -> ChatResult:
        prompt = f"""Analyze this village data and provide insights:

Data: {_to_json(data)}

Please provide:
1. Key trends and patterns
2. Areas of concern
3. Recommendations for improvement
4. Community health insights
5. Suggestions for village development

Focus on actionable insights for village administration."""
        return self.ai_service.chat(prompt, "Village data analysis for administration")

    def generate_emergency_alert(self, emergency_type: str, details: str) -> ChatResult:
        """Draft an SMS/WhatsApp-ready alert for all villagers."""
        prompt = f"""Generate an emergency alert message for villagers:

Emergency Type: {emergency_type}
Details: {details}

Create a clear, urgent message that:
1. Explains the emergency clearly
2. Provides immediate safety instructions
3. Tells villagers what to do
4. Includes contact information
5. Is written in simple, understandable language

Make it suitable for SMS/WhatsApp broadcast to all villagers."""
        return self.ai_service.chat(
            prompt, "Emergency alert generation for village communication", fallback_topic=f"emergency: {emergency_type}"
        )

    def get_health_advice(self, topic: str, context: Optional[str] = None) -> ChatResult:
        context_line = f"Context: {context}" if context else ""
        prompt = f"""Provide health and safety advice for villagers on: {topic}

{context_line}

Please provide:
1. Clear, simple explanations
2. Practical steps to take
3. When to seek medical help
4. Prevention tips
5. Local resources if available

Keep it relevant for rural Indian villages."""
        return self.ai_service.chat(prompt, "Health advice for village community", fallback_topic=f"health: {topic}")
