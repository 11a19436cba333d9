from app.services.assistant_service import VillageAssistantService


def test_emergency_prompt_and_context(make_service):
    service, (a,) = make_service(("a", ["Level: HIGH"]))
    assistant = VillageAssistantService(service)

    result = assistant.analyze_emergency("Flooding near school", "Ward 2")

    assert result.content == "Level: HIGH"
    prompt, context = a.calls[0]
    assert "Emergency: Flooding near school" in prompt
    assert "Location: Ward 2" in prompt
    assert context == "Emergency analysis for village SOS system"


def test_weather_insights_serializes_payload(make_service):
    service, (a,) = make_service(("a", ["ok"]))
    assistant = VillageAssistantService(service)

    assistant.get_weather_insights({"temp": 31, "condition": "Clear"}, "Rampur")

    prompt, context = a.calls[0]
    assert 'Weather: {"temp": 31, "condition": "Clear"}' in prompt
    assert "for Rampur" in prompt
    assert context == "Weather analysis for village community"


def test_village_data_and_alert_prompts(make_service):
    service, (a,) = make_service(("a", ["one", "two"]))
    assistant = VillageAssistantService(service)

    assistant.analyze_village_data({"households": 120})
    assistant.generate_emergency_alert("Flood", "River above danger mark")

    assert 'Data: {"households": 120}' in a.calls[0][0]
    assert "Emergency Type: Flood" in a.calls[1][0]
    assert a.calls[1][1] == "Emergency alert generation for village communication"


def test_health_advice_optional_context(make_service):
    service, (a,) = make_service(("a", ["x", "y"]))
    assistant = VillageAssistantService(service)

    assistant.get_health_advice("dengue", "monsoon season")
    assistant.get_health_advice("heat stroke")

    assert "Context: monsoon season" in a.calls[0][0]
    assert "Context:" not in a.calls[1][0]


def test_task_degrades_like_chat(make_service):
    service, _ = make_service(("a", [500]), ("b", [500]))
    assistant = VillageAssistantService(service)

    result = assistant.get_health_advice("clean drinking water")

    assert result.degraded is True
    assert "Service Temporarily Unavailable" in result.content
    # The prompt's "When to seek medical help" line must not pull in the emergency guide.
    assert "Health Tips for Village Life" in result.content
    assert "Emergency Response Guide" not in result.content


def test_weather_task_degrades_to_weather_tips(make_service):
    service, _ = make_service(("a", [429]))
    assistant = VillageAssistantService(service)

    result = assistant.get_weather_insights({"temp": 41}, "Rampur")

    assert "Weather Information" in result.content
