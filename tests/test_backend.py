"""OllamaBackend translates ollama client responses into ModelInfo and Fragment."""

from types import SimpleNamespace
from unittest.mock import MagicMock

from ollachat.backend import Fragment, ModelInfo, OllamaBackend


def chunk(content, done=False, **stats):
    fields = {
        "eval_count": None,
        "eval_duration": None,
        "load_duration": None,
        "prompt_eval_duration": None,
        "prompt_eval_count": None,
    }
    fields.update(stats)
    return SimpleNamespace(
        message=SimpleNamespace(role="assistant", content=content),
        done=done,
        **fields,
    )


def test_list_models():
    client = MagicMock()
    client.list.return_value = SimpleNamespace(
        models=[
            SimpleNamespace(
                model="llama3.2:latest",
                details=SimpleNamespace(family="llama", parameter_size="3.2B"),
            ),
            SimpleNamespace(model="custom:latest", details=None),
        ]
    )
    backend = OllamaBackend("http://localhost:11434", client=client)

    assert backend.list_models() == [
        ModelInfo("llama3.2:latest", "llama", "3.2B"),
        ModelInfo("custom:latest", "", ""),
    ]


def test_stream_chat_yields_fragments():
    client = MagicMock()
    client.chat.return_value = iter(
        [
            chunk("Bonjour"),
            chunk(None),
            chunk("", done=True, eval_count=2, eval_duration=2_000_000_000),
        ]
    )
    backend = OllamaBackend("http://localhost:11434", client=client)
    messages = [{"role": "user", "content": "Hello"}]

    fragments = list(
        backend.stream_chat("llama3.2:latest", messages, {"temperature": 0.7})
    )

    client.chat.assert_called_once_with(
        model="llama3.2:latest",
        messages=messages,
        options={"temperature": 0.7},
        stream=True,
    )
    assert fragments[0] == Fragment("Bonjour")
    assert fragments[1].content == ""
    assert fragments[2].done is True
    assert fragments[2].eval_count == 2
    assert fragments[2].eval_duration == 2_000_000_000


def test_stream_chat_is_lazy():
    client = MagicMock()
    backend = OllamaBackend("http://localhost:11434", client=client)

    backend.stream_chat("m", [], {})
    client.chat.assert_not_called()
