from chatbot.models import Message, SessionConfig, Turn
from chatbot.services.prompt_composer import compose_prompt, outgoing_messages


def _log():
    return [
        Message(role="assistant", content="Hi!", timestamp="1:00:00 PM"),
        Message(role="user", content="hello", timestamp="1:00:05 PM"),
        Message(role="assistant", content="hey", timestamp="1:00:06 PM"),
    ]


def test_system_text_combines_prompt_and_knowledge_base():
    config = SessionConfig(system_prompt="Be brief.")
    prompt = compose_prompt(config, "# Notes\nX", _log())
    assert prompt.system_text == "Be brief.\nKnowledge Base:\n# Notes\nX"


def test_system_text_without_knowledge_base():
    prompt = compose_prompt(SessionConfig(system_prompt="Be brief."), None, _log())
    assert prompt.system_text == "Be brief."


def test_knowledge_base_without_system_prompt():
    prompt = compose_prompt(SessionConfig(system_prompt=""), "X", _log())
    assert prompt.system_text == "\nKnowledge Base:\nX"
    assert prompt.system_text.endswith("Knowledge Base:\nX")


def test_system_text_empty_when_nothing_configured():
    prompt = compose_prompt(SessionConfig(system_prompt=""), None, _log())
    assert prompt.system_text == ""


def test_turns_follow_log_order_without_timestamps():
    prompt = compose_prompt(SessionConfig(), None, _log())
    assert prompt.turns == [
        Turn(role="assistant", content="Hi!"),
        Turn(role="user", content="hello"),
        Turn(role="assistant", content="hey"),
    ]


def test_compose_does_not_modify_inputs():
    log = _log()
    config = SessionConfig(system_prompt="S")
    before_log = list(log)
    before_config = config.model_dump()

    compose_prompt(config, "K", log)

    assert log == before_log
    assert config.model_dump() == before_config


def test_outgoing_messages_lead_with_system_message():
    turns = [Turn(role="user", content="hi")]
    assert outgoing_messages("S", turns) == [
        {"role": "system", "content": "S"},
        {"role": "user", "content": "hi"},
    ]


def test_outgoing_messages_omit_empty_system_message():
    turns = [Turn(role="user", content="hi")]
    assert outgoing_messages("", turns) == [{"role": "user", "content": "hi"}]
