import pytest
from fastapi.testclient import TestClient

from chatbot import main
from chatbot.services.chat_session import ChatSession
from chatbot.services.completion_gateway import NO_CREDENTIAL_REPLY, CompletionGateway
from config import GREETING_MESSAGE


class FixedGateway:
    def __init__(self, reply: str) -> None:
        self.reply = reply

    async def complete(self, credential, system_text, turns, temperature, max_tokens):
        return self.reply


@pytest.fixture
def client():
    with TestClient(main.app) as test_client:
        # Replace the session built at startup so no test depends on the local .env.
        main.chat_session = ChatSession(CompletionGateway(), credential="")
        yield test_client


def test_root_lists_endpoints(client):
    data = client.get("/").json()
    assert "/chat" in data["endpoints"]
    assert "/knowledge" in data["endpoints"]


def test_health(client):
    data = client.get("/health").json()
    assert data["status"] == "healthy"
    assert data["chat_session"] is True
    assert data["awaiting_reply"] is False


def test_session_starts_with_rendered_greeting(client):
    data = client.get("/session").json()
    assert len(data["messages"]) == 1
    assert data["messages"][0]["label"] == "Bot"
    assert data["awaiting_reply"] is False
    assert data["knowledge_loaded"] is False
    assert data["config"]["max_tokens"] == main.chat_session.config.max_tokens


def test_session_reports_settings_ranges(client):
    data = client.get("/session").json()
    assert data["temperature_range"] == [0.0, 1.0]
    assert data["max_tokens_range"] == [64, 2048]


def test_chat_without_api_key(client):
    response = client.post("/chat", json={"message": "hello"})

    assert response.status_code == 200
    data = response.json()
    assert data["reply"]["label"] == "Bot"
    assert [m["html"] for m in data["session"]["messages"][1:]] == ["hello", NO_CREDENTIAL_REPLY]


def test_chat_reply_is_rendered_markup(client):
    main.chat_session = ChatSession(FixedGateway("use `x` <now>"), credential="sk-test")

    data = client.post("/chat", json={"message": "hi"}).json()

    assert data["reply"]["html"] == "use <code>x</code> &lt;now&gt;"
    assert main.chat_session.messages[-1].content == "use `x` <now>"


@pytest.mark.parametrize("message", ["", "   ", "\n\t"])
def test_blank_chat_message_rejected(client, message):
    response = client.post("/chat", json={"message": message})
    assert response.status_code == 400
    assert len(main.chat_session.messages) == 1


def test_chat_rejected_while_reply_pending(client):
    main.chat_session.awaiting_reply = True

    response = client.post("/chat", json={"message": "again"})

    assert response.status_code == 409
    assert len(main.chat_session.messages) == 1


def test_markdown_upload(client):
    response = client.post("/knowledge", files={"file": ("notes.md", b"# Notes\nX", "text/markdown")})

    assert response.status_code == 200
    data = response.json()
    assert data["knowledge_loaded"] is True
    assert data["knowledge_filename"] == "notes.md"
    assert data["messages"][-1]["html"] == (
        "📂 Uploaded markdown knowledge base: <strong>notes.md</strong>"
    )
    assert main.chat_session.knowledge_document == "# Notes\nX"


def test_non_markdown_upload_rejected(client):
    response = client.post("/knowledge", files={"file": ("notes.txt", b"X", "text/plain")})

    assert response.status_code == 400
    assert ".md" in response.json()["detail"]
    assert main.chat_session.knowledge_document is None
    assert len(main.chat_session.messages) == 1


def test_upload_that_is_not_utf8_rejected(client):
    response = client.post("/knowledge", files={"file": ("a.md", b"\xff\xfe", "text/markdown")})

    assert response.status_code == 400
    assert main.chat_session.knowledge_document is None
    assert main.chat_session.knowledge_filename is None
    assert len(main.chat_session.messages) == 1


def test_update_config(client):
    response = client.patch(
        "/config", json={"temperature": "0.3", "max_tokens": 512, "system_prompt": "Be brief."}
    )

    assert response.status_code == 200
    assert response.json() == {"temperature": 0.3, "max_tokens": 512, "system_prompt": "Be brief."}


def test_update_config_rejects_unknown_field_and_changes_nothing(client):
    before = main.chat_session.config.model_dump()

    response = client.patch("/config", json={"temperature": 0.1, "theme": "dark"})

    assert response.status_code == 400
    assert main.chat_session.config.model_dump() == before


def test_update_config_rejects_non_numeric(client):
    response = client.patch("/config", json={"max_tokens": "lots"})
    assert response.status_code == 400


@pytest.mark.parametrize("value", ["nan", "inf", "1e400"])
def test_update_config_rejects_non_finite_temperature(client, value):
    before = main.chat_session.config.model_dump()

    response = client.patch("/config", json={"temperature": value})

    assert response.status_code == 400
    assert main.chat_session.config.model_dump() == before
    assert client.get("/session").json()["config"]["temperature"] == before["temperature"]


def test_reset_keeps_knowledge(client):
    client.post("/knowledge", files={"file": ("kb.md", b"K", "text/markdown")})
    client.post("/chat", json={"message": "hello"})

    data = client.post("/reset").json()

    assert len(data["messages"]) == 1
    assert main.chat_session.messages[0].content == GREETING_MESSAGE
    assert data["knowledge_loaded"] is True
