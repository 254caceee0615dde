"""Shared fakes: an in-memory backend and a fully wired app."""

import pytest

from ollachat.app import ChatApp
from ollachat.backend import Fragment, ModelInfo
from ollachat.chat_store import ChatStore
from ollachat.config import Config


class FakeBackend:
    """Stands in for OllamaBackend. Optionally fails mid-stream."""

    def __init__(self, models=None, fragments=None, fail_after=None, list_error=None):
        self.models = models if models is not None else []
        self.fragments = fragments or []
        self.fail_after = fail_after
        self.list_error = list_error
        self.calls = []

    def list_models(self):
        if self.list_error:
            raise self.list_error
        return list(self.models)

    def stream_chat(self, model, messages, options):
        self.calls.append({"model": model, "messages": messages, "options": options})
        for i, fragment in enumerate(self.fragments):
            if self.fail_after is not None and i == self.fail_after:
                raise ConnectionError("connection dropped")
            yield fragment


def french_fragments():
    return [
        Fragment("Bonjour"),
        Fragment("!"),
        Fragment(
            "",
            done=True,
            eval_count=2,
            eval_duration=2_000_000_000,
            load_duration=500_000_000,
            prompt_eval_duration=250_000_000,
            prompt_eval_count=20,
        ),
    ]


@pytest.fixture
def backend():
    return FakeBackend(
        models=[
            ModelInfo("llama3.2:latest", "llama", "3.2B"),
            ModelInfo("qwen2.5:7b", "qwen2", "7.6B"),
        ],
        fragments=french_fragments(),
    )


@pytest.fixture
def app(tmp_path, backend):
    return ChatApp(Config(), backend=backend, store=ChatStore(str(tmp_path / "chats")))
