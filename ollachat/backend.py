"""Ollama backend adapter. Model enumeration and streamed chat completions."""

from collections.abc import Iterator
from dataclasses import dataclass

from ollama import Client


@dataclass(frozen=True)
class ModelInfo:
    name: str
    family: str = ""
    parameter_size: str = ""


@dataclass(frozen=True)
class Fragment:
    """One streamed piece of a reply. Durations are in nanoseconds."""

    content: str
    done: bool = False
    eval_count: int | None = None
    eval_duration: int | None = None
    load_duration: int | None = None
    prompt_eval_duration: int | None = None
    prompt_eval_count: int | None = None


class OllamaBackend:
    """Wraps ollama.Client behind the two calls the chat loop needs"""

    def __init__(self, host: str, client: Client | None = None):
        self.host = host
        self.client = client or Client(host=host)

    def list_models(self) -> list[ModelInfo]:
        response = self.client.list()
        models: list[ModelInfo] = []
        for m in response.models:
            details = m.details
            models.append(
                ModelInfo(
                    name=m.model or "",
                    family=(details.family or "") if details else "",
                    parameter_size=(details.parameter_size or "") if details else "",
                )
            )
        return models

    def stream_chat(
        self, model: str, messages: list[dict], options: dict
    ) -> Iterator[Fragment]:
        """Lazily yields fragments until the backend sends done=True"""
        stream = self.client.chat(
            model=model,
            messages=messages,
            options=options,
            stream=True,
        )
        for chunk in stream:
            yield Fragment(
                content=chunk.message.content or "",
                done=bool(chunk.done),
                eval_count=chunk.eval_count,
                eval_duration=chunk.eval_duration,
                load_duration=chunk.load_duration,
                prompt_eval_duration=chunk.prompt_eval_duration,
                prompt_eval_count=chunk.prompt_eval_count,
            )
