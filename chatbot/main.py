"""
MARKDOWN CHATBOT MAIN API
=========================

This module defines the FastAPI application and all HTTP endpoints. It is
designed for single-user use: one person runs one server (e.g. python run.py)
and the page they open talks to the one chat session that server holds.

ENDPOINTS:
  GET   /           - Returns API name and list of endpoints.
  GET   /health     - Returns status of the services (for monitoring).
  GET   /session    - Everything the page draws: rendered messages, pending flag,
                      settings and the knowledge-base indicator.
  POST  /chat       - Send a message and wait for the reply.
  POST  /knowledge  - Upload a markdown (.md) file as the knowledge base.
  PATCH /config     - Change temperature, max_tokens and/or system_prompt.
  POST  /reset      - Clear the conversation back to the greeting.

SESSION:
  There is exactly one session per process. It lives in memory and is gone
  when the server stops; nothing is written to disk.

STARTUP:
  The lifespan function creates the CompletionGateway and the ChatSession,
  handing the session the API key resolved by config.py.
"""


from fastapi import FastAPI, File, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from typing import Any, Dict
import uvicorn
import logging

from chatbot.models import ChatRequest, ChatResponse, SessionConfig, SessionSnapshot
from chatbot.services.completion_gateway import CompletionGateway
from chatbot.services.chat_session import ChatSession, message_view
from config import CHAT_MODEL, CHATBOT_HOST, CHATBOT_PORT, OPENAI_API_KEY


# -----------------------------------------------------------------------------
# LOGGING
# -----------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s | %(levelname)-8s | %(name)-20s | %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
logger = logging.getLogger("Chatbot")


# -----------------------------------------------------------------------------
# GLOBAL SERVICE REFERENCES
# -----------------------------------------------------------------------------
# Set during startup (lifespan) and used by all route handlers.
completion_gateway: CompletionGateway = None
chat_session: ChatSession = None


def print_title():
    """Print the chatbot banner to the console when the server starts."""
    CYAN  = "\033[96m"
    WHITE = "\033[97m"
    BOLD  = "\033[1m"
    RESET = "\033[0m"

    banner = f"""
{BOLD}{CYAN}  💬  Markdown Chatbot{RESET}
      {WHITE}Chat with a model about your own markdown notes{RESET}
"""
    print(banner)

# -------------------------------------------------------------------------
# LIFESPAN (STARTUP / SHUTDOWN)
# -------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager - handles startup and shutdown.

    - STARTUP: creates the CompletionGateway, then the ChatSession that uses it.
      The API key is read once (config.py) and passed to the session here.
    - SHUTDOWN: nothing to save; the conversation lives only in memory.
    """
    global completion_gateway, chat_session

    print_title()
    logger.info("=" * 60)
    logger.info("Markdown Chatbot - Starting Up...")
    logger.info("=" * 60)

    try:
        completion_gateway = CompletionGateway()
        chat_session = ChatSession(completion_gateway, credential=OPENAI_API_KEY)

        logger.info("Service Status:")
        logger.info("    - Completion endpoint: %s", completion_gateway.endpoint_url)
        logger.info("    - Model: %s", CHAT_MODEL)
        if OPENAI_API_KEY:
            logger.info("    - API key: configured")
        else:
            logger.warning("    - API key: NOT SET (replies will ask you to configure OPENAI_API_KEY)")
        logger.info("=" * 60)
        logger.info("Chatbot is ready! API: http://localhost:%s", CHATBOT_PORT)
        logger.info("=" * 60)

        yield

        logger.info("Shutting down chatbot. Goodbye!")

    except Exception as e:
        logger.error(f"Fatal error during startup: {e}", exc_info=True)
        raise


# -------------------------------------------------------------------------
# FASTAPI APP AND CORS
# -------------------------------------------------------------------------
app = FastAPI(
    title="Markdown Chatbot API",
    description="Chat with a language model grounded in an uploaded markdown file",
    lifespan=lifespan
)

# Allow any origin so a page served from another port can call this API.
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _require_session() -> ChatSession:
    if not chat_session:
        raise HTTPException(status_code=503, detail="Chat session not initialized")
    return chat_session


# =========================================================================
# API ENDPOINTS
# =========================================================================

@app.get("/")
async def root():
    """Return the API name and a short description of each endpoint (for discovery)."""
    return {
        "message": "Markdown Chatbot API",
        "endpoints": {
            "/session": "Current conversation, settings and knowledge base status",
            "/chat": "Send a message and get the reply",
            "/knowledge": "Upload a markdown (.md) knowledge base",
            "/config": "Change temperature, max_tokens, system_prompt",
            "/reset": "Clear the chat",
            "/health": "System health check"
        }
    }


@app.get("/health")
async def health():
    """Return 'healthy', whether the services exist, and whether a reply is pending."""
    return {
        "status": "healthy",
        "completion_gateway": completion_gateway is not None,
        "chat_session": chat_session is not None,
        "api_key_configured": bool(OPENAI_API_KEY),
        "awaiting_reply": bool(chat_session and chat_session.awaiting_reply),
    }


@app.get("/session", response_model=SessionSnapshot)
async def get_session():
    """
    Return the whole session for drawing the page.

    Message bodies are rendered markup (safe to insert as HTML); the raw text is
    never sent. awaiting_reply is true while a reply is on its way.
    """
    return _require_session().snapshot()


@app.post("/chat", response_model=ChatResponse)
async def chat(request: ChatRequest):
    """
    Send a message and wait for the reply.

    HOW IT WORKS:
    1. Rejects blank messages (400) and messages sent while a reply is pending (409).
    2. Appends the message, builds the prompt (system prompt + knowledge base + history).
    3. Calls the completion endpoint (or returns the no-key notice).
    4. Appends the reply and returns it with the updated session.

    Endpoint failures are not HTTP errors: they come back as an assistant
    message explaining what went wrong.
    """
    session = _require_session()

    if not request.message.strip():
        raise HTTPException(status_code=400, detail="Message cannot be empty")

    try:
        reply = await session.submit(request.message)
    except Exception as e:
        logger.error(f"Error processing chat: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error processing chat: {str(e)}")

    if reply is None:
        raise HTTPException(status_code=409, detail="Still waiting for the previous reply")
    return ChatResponse(reply=message_view(reply), session=session.snapshot())


@app.post("/knowledge", response_model=SessionSnapshot)
async def upload_knowledge(file: UploadFile = File(...)):
    """
    Upload a markdown file to use as the knowledge base.

    Only names ending in .md are accepted (400 otherwise, before the file is read).
    Replaces any earlier knowledge base. Allowed while a reply is pending; the new
    file is used from the next message on.
    """
    session = _require_session()

    try:
        await session.ingest_document(file.filename or "", file.read)
    except ValueError as e:
        # Wrong extension or a file that isn't UTF-8 text.
        logger.warning(f"Knowledge upload rejected: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    return session.snapshot()


@app.patch("/config", response_model=SessionConfig)
async def update_config(updates: Dict[str, Any]):
    """
    Change one or more settings, e.g. {"temperature": "0.3", "max_tokens": 512}.

    Unknown setting names and non-numeric numbers return 400 and nothing is changed.
    Numbers outside the slider ranges are accepted as given.
    """
    session = _require_session()
    previous = session.config.model_copy()

    try:
        for field, value in updates.items():
            session.update_config(field, value)
    except ValueError as e:
        session.config = previous
        logger.warning(f"Invalid settings update: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    return session.config


@app.post("/reset", response_model=SessionSnapshot)
async def reset_chat():
    """Clear the conversation back to the greeting. Settings and knowledge base are kept."""
    session = _require_session()
    session.reset()
    return session.snapshot()


# -------------------------------------------------------------------------
# STANDALONE RUN (python -m chatbot.main)
# -------------------------------------------------------------------------
def run():
    """Start the uvicorn server (same as run.py); used if someone does python -m chatbot.main"""
    uvicorn.run(
        "chatbot.main:app",
        host=CHATBOT_HOST,
        port=CHATBOT_PORT,
        reload=True,
        log_level="info"
    )

if __name__ == "__main__":
    run()
