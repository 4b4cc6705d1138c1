"""
RUN SCRIPT - Start the Markdown Chatbot server
==============================================

PURPOSE:
  Single entry point to start the backend. Run this once per user/machine;
  the server then holds one chat session for the page that talks to it.

WHAT IT DOES:
  - Imports the FastAPI app from chatbot.main.
  - Runs it with uvicorn on CHATBOT_HOST:CHATBOT_PORT (default 0.0.0.0:8000).
  - reload=True means any change to Python files will restart the server (handy for development).

USAGE:
  python run.py

  API docs: http://localhost:8000/docs

NOTE:
  Set OPENAI_API_KEY in .env to get real answers. Without it every reply is a
  notice asking you to configure the key.
"""

import uvicorn

from config import CHATBOT_HOST, CHATBOT_PORT

# ------------------------------------------------------------------------------
# ENTRY POINT
# ------------------------------------------------------------------------------
# Only run uvicorn when this file is executed directly (python run.py),
# not when it is imported by another module.
if __name__ == "__main__":
    uvicorn.run(
        "chatbot.main:app",  # String path to the FastAPI app instance (module:variable).
        host=CHATBOT_HOST,   # 0.0.0.0 listens on all network interfaces.
        port=CHATBOT_PORT,   # HTTP port; change CHATBOT_PORT if 8000 is already in use.
        reload=True          # Auto-restart when .py files change (useful during development).
    )
