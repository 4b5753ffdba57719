import json
from unittest.mock import MagicMock, patch

from myflex.llm.config import LLMConfig
from myflex.llm.groq_client import complete, complete_json

ENABLED_CONFIG = LLMConfig(api_key="test-key", enabled=True)
DISABLED_CONFIG = LLMConfig(api_key="test-key", enabled=False)
NO_KEY_CONFIG = LLMConfig(api_key="", enabled=True)


def _mock_groq_response(content: str) -> MagicMock:
    message = MagicMock()
    message.content = content
    choice = MagicMock()
    choice.message = message
    response = MagicMock()
    response.choices = [choice]
    return response


@patch("myflex.llm.groq_client.Groq")
def test_complete_returns_stripped_answer(mock_groq_cls):
    mock_groq_cls.return_value.chat.completions.create.return_value = _mock_groq_response(
        "  Ratatouille \n"
    )

    assert complete("Pick a dish", config=ENABLED_CONFIG) == "Ratatouille"


@patch("myflex.llm.groq_client.Groq")
def test_complete_sends_system_and_user_messages(mock_groq_cls):
    create = mock_groq_cls.return_value.chat.completions.create
    create.return_value = _mock_groq_response("ok")

    complete("system text", "user text", temperature=0.2, config=ENABLED_CONFIG)

    kwargs = create.call_args.kwargs
    assert kwargs["messages"] == [
        {"role": "system", "content": "system text"},
        {"role": "user", "content": "user text"},
    ]
    assert kwargs["temperature"] == 0.2
    assert kwargs["model"] == ENABLED_CONFIG.model
    assert "response_format" not in kwargs


@patch("myflex.llm.groq_client.Groq")
def test_complete_fallback_on_api_error(mock_groq_cls):
    mock_groq_cls.return_value.chat.completions.create.side_effect = Exception("API timeout")

    assert complete("Pick a dish", config=ENABLED_CONFIG) is None


@patch("myflex.llm.groq_client.Groq")
def test_complete_empty_answer_is_none(mock_groq_cls):
    mock_groq_cls.return_value.chat.completions.create.return_value = _mock_groq_response("   ")

    assert complete("Pick a dish", config=ENABLED_CONFIG) is None


@patch("myflex.llm.groq_client.Groq")
def test_complete_disabled_or_unconfigured(mock_groq_cls):
    assert complete("Pick a dish", config=DISABLED_CONFIG) is None
    assert complete("Pick a dish", config=NO_KEY_CONFIG) is None
    mock_groq_cls.assert_not_called()


@patch("myflex.llm.groq_client.Groq")
def test_complete_json_parses_object_in_json_mode(mock_groq_cls):
    create = mock_groq_cls.return_value.chat.completions.create
    create.return_value = _mock_groq_response(json.dumps({"breakfast": "Porridge"}))

    result = complete_json("Plan my day", config=ENABLED_CONFIG)

    assert result == {"breakfast": "Porridge"}
    assert create.call_args.kwargs["response_format"] == {"type": "json_object"}


@patch("myflex.llm.groq_client.Groq")
def test_complete_json_fallback_on_bad_json(mock_groq_cls):
    mock_groq_cls.return_value.chat.completions.create.return_value = _mock_groq_response(
        "not valid json{{{"
    )

    assert complete_json("Plan my day", config=ENABLED_CONFIG) is None


@patch("myflex.llm.groq_client.Groq")
def test_complete_json_rejects_non_object(mock_groq_cls):
    mock_groq_cls.return_value.chat.completions.create.return_value = _mock_groq_response(
        json.dumps(["Porridge", "Salade"])
    )

    assert complete_json("Plan my day", config=ENABLED_CONFIG) is None
