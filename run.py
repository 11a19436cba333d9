"""
RUN SCRIPT - Start the VillageVault AI assistant server
=======================================================

PURPOSE:
  Single entry point to start the backend.

WHAT IT DOES:
  - Runs app.main:app with uvicorn on host 0.0.0.0 and port 8000 (PORT overrides it).
  - reload=True restarts the server when Python files change (development).

USAGE:
  python run.py

  API docs: http://localhost:8000/docs

NOTE:
  Before running, set OPENROUTER_API_KEY and GEMINI_API_KEY in .env. Without
  them every chat answer is the fallback text.
"""

import os

import uvicorn

# ------------------------------------------------------------------------------
# ENTRY POINT
# ------------------------------------------------------------------------------
if __name__ == "__main__":
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "8000")),
        reload=True
    )
