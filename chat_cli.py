"""
VILLAGEVAULT CHAT CLI - Manual test client
==========================================

PURPOSE:
Command-line client for trying the assistant against a running server
without the VillageVault frontend. Shows which model answered and whether
the reply was fallback text, which makes provider problems easy to spot.

USAGE:
    python chat_cli.py

    Make sure the server is running first: python run.py

COMMANDS:
    /models        - List models (active one marked with *)
    /model <id>    - Switch the active model
    /quit or /exit - Exit
"""

import requests


# -----------------------------------------------------------------------------
# CONFIGURATION
# -----------------------------------------------------------------------------
BASE_URL = "http://localhost:8000"
# Worst case is pacing + four attempts + back-off waits, so allow plenty of time.
CHAT_TIMEOUT = 300


def print_header():
    print("\n" + "=" * 60)
    print("🏡 VillageVault Assistant - Chat CLI")
    print("=" * 60)
    print("\nCommands:")
    print("  /models      - List models")
    print("  /model <id>  - Switch active model")
    print("  /quit        - Exit")
    print("=" * 60 + "\n")


def _error_text(response):
    try:
        err = response.json()
    except ValueError:
        return f"❌ Error: {response.status_code} - {response.text}"
    detail = err.get("detail") if isinstance(err, dict) else None
    if isinstance(detail, str):
        return f"❌ {detail}"
    return f"❌ Error: {response.status_code} - {err}"


# -----------------------------------------------------------------------------
# API CALLS
# -----------------------------------------------------------------------------

def send_message(message):
    """POST /chat and return a printable reply with the answering model."""
    try:
        response = requests.post(f"{BASE_URL}/chat", json={"message": message}, timeout=CHAT_TIMEOUT)
    except requests.exceptions.ConnectionError:
        return "❌ Cannot connect to backend. Start it with: python run.py"
    except requests.exceptions.Timeout:
        return "❌ Request timed out."

    if response.status_code != 200:
        return _error_text(response)

    data = response.json()
    source = "fallback" if data.get("degraded") else data.get("model", "?")
    return f"[{source}]\n{data.get('content', '')}"


def list_models():
    try:
        response = requests.get(f"{BASE_URL}/chat/models", timeout=10)
    except requests.exceptions.RequestException as e:
        return f"❌ Error: {e}"
    if response.status_code != 200:
        return _error_text(response)
    data = response.json()
    lines = []
    for model in data.get("available", []):
        marker = "*" if model == data.get("current") else " "
        lines.append(f" {marker} {model}")
    return "\n".join(lines)


def switch_model(model):
    try:
        response = requests.post(f"{BASE_URL}/chat/models", json={"model": model}, timeout=10)
    except requests.exceptions.RequestException as e:
        return f"❌ Error: {e}"
    if response.status_code != 200:
        return _error_text(response)
    return f"✅ Active model: {response.json().get('current')}"


# -----------------------------------------------------------------------------
# MAIN LOOP
# -----------------------------------------------------------------------------

def main():
    print_header()

    while True:
        try:
            user_input = input("\nYou: ").strip()
        except (KeyboardInterrupt, EOFError):
            print("\n👋 Goodbye!")
            break

        if not user_input:
            continue
        if user_input in ["/quit", "/exit"]:
            print("\n👋 Goodbye!")
            break
        if user_input == "/models":
            print(list_models())
            continue
        if user_input.startswith("/model "):
            print(switch_model(user_input[len("/model "):].strip()))
            continue
        if user_input.startswith("/"):
            print(f"❌ Unknown command: {user_input}")
            continue

        print("🤖 Assistant: ", end="", flush=True)
        print(send_message(user_input))


if __name__ == "__main__":
    main()
