"""Session state and history management."""

import math
from dataclasses import dataclass, replace

ROLES = ("system", "user", "assistant")


@dataclass(frozen=True)
class Message:
    """A single transcript entry. Never mutated once appended."""

    role: str
    content: str

    def __post_init__(self):
        if self.role not in ROLES:
            raise ValueError(f"Unknown message role: {self.role!r}")
        if not isinstance(self.content, str):
            raise ValueError("Message content must be a string.")

    def to_dict(self) -> dict:
        return {"role": self.role, "content": self.content}

    @classmethod
    def from_dict(cls, data) -> "Message":
        if not isinstance(data, dict):
            raise ValueError("Message entries must be JSON objects.")
        return cls(data.get("role"), data.get("content"))


@dataclass
class GenerationParams:
    temperature: float = 0.7
    context_window: int = 2048

    def as_options(self) -> dict:
        """Ollama option names for the current values"""
        return {"temperature": self.temperature, "num_ctx": self.context_window}


def parse_temperature(value) -> float:
    """Parses and range-checks a temperature. Raises ValueError."""
    error = "Invalid temperature. Please provide a value between 0 and 1."
    if isinstance(value, bool):
        raise ValueError(error)
    try:
        temperature = float(value)
    except (TypeError, ValueError):
        raise ValueError(error)
    # NaN fails the range check on its own, inf does not
    if not math.isfinite(temperature) or not 0 <= temperature <= 1:
        raise ValueError(error)
    return temperature


def parse_context_window(value) -> int:
    """Parses a positive integer context window. Raises ValueError."""
    error = "Invalid context window. Please provide a positive integer."
    if isinstance(value, bool) or isinstance(value, float):
        raise ValueError(error)
    try:
        context_window = int(value.strip() if isinstance(value, str) else value)
    except (TypeError, ValueError):
        raise ValueError(error)
    if context_window <= 0:
        raise ValueError(error)
    return context_window


class Session:
    """Single source of truth for the conversation sent to the backend"""

    def __init__(
        self,
        model: str,
        system_prompt: str,
        defaults: GenerationParams | None = None,
    ):
        self.defaults: GenerationParams = defaults or GenerationParams()
        self.model: str = model
        self.system_prompt: Message = Message("system", system_prompt)
        self.history: list[Message] = [self.system_prompt]
        self.params: GenerationParams = replace(self.defaults)

    def reset_history(self):
        """Drops every turn, keeping only the live system prompt"""
        self.history = [self.system_prompt]

    def set_system_prompt(self, text: str):
        """Replaces the system prompt and resets history."""
        if not text or not text.strip():
            raise ValueError("Specify valid content for the system prompt.")
        self.system_prompt = Message("system", text.strip())
        self.reset_history()

    def clear(self):
        """Resets history and generation parameters."""
        self.reset_history()
        self.params = replace(self.defaults)

    def set_model(self, identifier: str):
        """Switches model. Context from another model is discarded."""
        if not identifier:
            raise ValueError("Model identifier must not be empty.")
        self.model = identifier
        self.reset_history()

    def set_params(self, temperature=None, context_window=None) -> dict[str, str]:
        """
        Validates and applies each parameter on its own.\n
        Returns a mapping of rejected parameter names to the reason.
        """
        errors: dict[str, str] = {}
        if temperature is not None:
            try:
                self.params.temperature = parse_temperature(temperature)
            except ValueError as e:
                errors["temperature"] = str(e)
        if context_window is not None:
            try:
                self.params.context_window = parse_context_window(context_window)
            except ValueError as e:
                errors["context_window"] = str(e)
        return errors

    def append_turn(self, user_text: str, assistant_text: str) -> bool:
        """Commits a full turn. An empty reply counts as a failed turn."""
        if not assistant_text:
            return False
        self.history.append(Message("user", user_text))
        self.history.append(Message("assistant", assistant_text))
        return True

    def request_messages(self, user_text: str) -> list[dict]:
        """History plus the pending user message, in backend format"""
        messages = [m.to_dict() for m in self.history]
        messages.append({"role": "user", "content": user_text})
        return messages

    def count_turns(self) -> int:
        return sum(1 for m in self.history if m.role == "user")

    def snapshot(self) -> dict:
        return {"model": self.model, "messages": [m.to_dict() for m in self.history]}

    def restore(self, model: str, messages: list):
        """
        Replaces model and transcript from a saved snapshot.\n
        Everything is validated before the live session is touched.
        """
        if not isinstance(model, str) or not model:
            raise ValueError("Saved chat has no model.")
        if not isinstance(messages, list):
            raise ValueError("Saved chat messages must be a list.")
        restored = [Message.from_dict(m) for m in messages]

        system_prompt = self.system_prompt
        if restored and restored[0].role == "system":
            system_prompt = restored[0]
            restored = restored[1:]
        if any(m.role == "system" for m in restored):
            raise ValueError("Saved chat contains more than one system message.")

        self.model = model
        self.system_prompt = system_prompt
        self.history = [system_prompt, *restored]
