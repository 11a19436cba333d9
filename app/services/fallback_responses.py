"""
FALLBACK RESPONSES MODULE
=========================

Static text used when no AI provider answers. Nothing here does I/O, so the
degraded-mode wording can be checked without any network setup.

  get_fallback_response(message) - topic-matched advisory block.
  build_degraded_response(...)   - notice explaining why AI is unavailable,
                                   with the topic block embedded.
"""

from typing import Iterable, Tuple

from app.services.providers import FailureKind


EMERGENCY_GUIDE = """🚨 **Emergency Response Guide:**

**Immediate Actions:**
1. **Stay Calm** - Take deep breaths
2. **Assess Safety** - Are you in immediate danger?
3. **Call Emergency Services:**
   - Police: 100
   - Medical: 108
   - Fire: 101
4. **Contact Village Sarpanch** - Use the SOS feature
5. **Alert Neighbors** - Get help from nearby villagers

**For Medical Emergencies:**
- Keep the person still and comfortable
- Don't move them unless necessary
- Apply pressure to stop bleeding
- Keep airways clear

**For Natural Disasters:**
- Move to higher ground if flooding
- Stay indoors during storms
- Have emergency supplies ready

*Note: AI is temporarily unavailable due to high usage. This is a pre-written emergency guide.*"""

WEATHER_TIPS = """🌤️ **Weather Information:**

**Current Weather Tips:**
- Check the Weather Widget on your dashboard
- Stay hydrated in hot weather
- Wear appropriate clothing
- Be cautious during storms

**Seasonal Advice:**
- **Summer**: Drink plenty of water, avoid direct sun
- **Monsoon**: Be careful of flooding, check drainage
- **Winter**: Keep warm, check on elderly neighbors

**Farming Weather:**
- Monitor soil moisture
- Plan irrigation accordingly
- Protect crops from extreme weather

*Note: AI is temporarily unavailable. Check the Weather Widget for real-time data.*"""

HEALTH_TIPS = """🏥 **Health Tips for Village Life:**

**General Health:**
- Drink clean, boiled water
- Wash hands regularly
- Eat fresh, local vegetables
- Get regular exercise

**Common Village Health Issues:**
- **Water-borne diseases**: Boil water, maintain hygiene
- **Mosquito-borne**: Use mosquito nets, clear standing water
- **Heat stroke**: Stay hydrated, avoid midday sun
- **Snake bites**: Stay calm, immobilize limb, seek help

**When to Seek Medical Help:**
- High fever (above 102°F)
- Severe pain
- Difficulty breathing
- Unconsciousness
- Severe bleeding

**Emergency Contacts:**
- Village Health Center
- Nearest Hospital
- Emergency: 108

*Note: AI is temporarily unavailable. Contact local health workers for specific advice.*"""

FARMING_ADVICE = """🌾 **Farming Advice:**

**Seasonal Farming Tips:**
- **Kharif Season**: Rice, maize, cotton
- **Rabi Season**: Wheat, barley, mustard
- **Summer**: Vegetables, fruits

**Soil Health:**
- Test soil pH regularly
- Use organic compost
- Rotate crops
- Maintain proper drainage

**Water Management:**
- Plan irrigation schedules
- Use drip irrigation for efficiency
- Harvest rainwater
- Monitor water quality

**Pest Control:**
- Use natural pesticides
- Companion planting
- Regular field inspection
- Integrated pest management

*Note: AI is temporarily unavailable. Consult local agricultural extension officers.*"""

HELP_MENU = """🤖 **VillageVault Assistant**

I'm temporarily experiencing high demand, but I can still help you with:

**Quick Help Topics:**
- 🚨 **Emergency Help** - Safety and emergency procedures
- 🌤️ **Weather Info** - Weather tips and precautions
- 🏥 **Health Tips** - Village health and medical advice
- 🌾 **Farming Advice** - Agricultural guidance and tips

**Alternative Help:**
- Use the **SOS feature** for emergencies
- Check the **Weather Widget** for current conditions
- Contact your **Village Sarpanch** for urgent matters
- Visit the **Village Info** section for resources

*I'll be back to full AI assistance soon!*"""

# Checked in order; the first family with a keyword in the message wins.
TOPIC_RESPONSES: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("emergency", "help"), EMERGENCY_GUIDE),
    (("weather",), WEATHER_TIPS),
    (("health", "medical"), HEALTH_TIPS),
    (("farming", "crop"), FARMING_ADVICE),
)


def get_fallback_response(message: str) -> str:
    """Return the canned block for the first keyword family found in message, else the help menu."""
    lower_message = message.lower()
    for keywords, response in TOPIC_RESPONSES:
        if any(keyword in lower_message for keyword in keywords):
            return response
    return HELP_MENU


# ==============================================================================
# DEGRADED-MODE NOTICES
# ==============================================================================

CONFIGURATION_ERROR_NOTICE = """⚠️ **API Configuration Issue**

I'm currently unable to connect to AI services due to API key authentication issues (401 Unauthorized).

**Possible Causes:**
- OpenRouter API key is missing or invalid
- Gemini API key is missing or invalid
- API key has expired or been revoked

**To Fix:**
1. Check environment variables: `OPENROUTER_API_KEY` and `GEMINI_API_KEY`
2. Verify the keys in the server's .env file
3. Contact the administrator to update API credentials

**Temporary Response:**
{fallback}

*Note: This is a fallback response while API issues are resolved.*"""

RATE_LIMIT_NOTICE = """⏱️ **Rate Limit Exceeded**

AI services are currently rate-limited (429 Too Many Requests). Please try again in a few minutes.

**Why this happened:**
- Free tier limits have been reached
- Too many requests in a short time

**Temporary Response:**
{fallback}

*Note: This is a fallback response. Please wait a few minutes and try again.*"""

UNAVAILABLE_NOTICE = """⚠️ **Service Temporarily Unavailable**

All AI services are currently unavailable. Please try again later.

**Temporary Response:**
{fallback}

*Note: This is a fallback response while services are restored.*"""


def build_degraded_response(message: str, failures: Iterable[FailureKind]) -> str:
    """
    Pick the notice for the observed failures and embed the topic block.
    Credential problems take precedence over rate limits, which take
    precedence over everything else.
    """
    seen = set(failures)
    if FailureKind.UNAUTHORIZED in seen:
        template = CONFIGURATION_ERROR_NOTICE
    elif FailureKind.RATE_LIMITED in seen:
        template = RATE_LIMIT_NOTICE
    else:
        template = UNAVAILABLE_NOTICE
    return template.format(fallback=get_fallback_response(message))
