"""Streams one chat turn and reconciles it into the session history."""

from dataclasses import dataclass

from rich.text import Text

from ollachat.backend import Fragment
from ollachat.globals import CONSOLE, log_exception

NANOSECONDS = 1_000_000_000

# Styles for streamed output
AI_LABEL = Text("AI: ", style="bold cyan")
RESPONSE_TEXT_STYLE = "yellow"


@dataclass
class TurnStats:
    """Performance metadata carried by the final fragment"""

    eval_count: int = 0
    eval_duration: int = 0
    load_duration: int = 0
    prompt_eval_duration: int = 0
    prompt_eval_count: int = 0

    @classmethod
    def from_fragment(cls, fragment: Fragment) -> "TurnStats":
        return cls(
            eval_count=fragment.eval_count or 0,
            eval_duration=fragment.eval_duration or 0,
            load_duration=fragment.load_duration or 0,
            prompt_eval_duration=fragment.prompt_eval_duration or 0,
            prompt_eval_count=fragment.prompt_eval_count or 0,
        )

    @property
    def tokens_per_second(self) -> float:
        if not self.eval_duration:
            return 0.0
        return self.eval_count / self.eval_duration * NANOSECONDS

    @property
    def load_seconds(self) -> float:
        return self.load_duration / NANOSECONDS

    @property
    def prompt_eval_seconds(self) -> float:
        return self.prompt_eval_duration / NANOSECONDS

    @property
    def context_tokens(self) -> int:
        return self.prompt_eval_count + self.eval_count


class StreamEngine:
    """Issues the streaming request for a user turn and commits the result"""

    def __init__(self, session, backend, panel):
        self.session = session
        self.backend = backend
        self.panel = panel

        # Collector for the streamed reply
        self.full_response_content: str = ""
        # Set once the done fragment arrives
        self.stats: TurnStats | None = None

    def reset_turn_state(self):
        """Little helper that resets the turn state."""
        self.full_response_content = ""
        self.stats = None

    def stream_response(self, user_text: str) -> bool:
        """
        Facilitates the entire streaming process, including:
        - The backend request (full history + the new user message)
        - The streaming loop, printing each fragment as it arrives
        - Committing the turn once the stream is exhausted

        Returns True only if the turn was committed to history.
        """
        self.reset_turn_state()
        messages = self.session.request_messages(user_text)
        options = self.session.params.as_options()

        try:
            CONSOLE.print(AI_LABEL, end="")
            for fragment in self.backend.stream_chat(
                self.session.model, messages, options
            ):
                self.chunk_parse(fragment)
        # Ctrl+C mid-stream aborts the turn
        except KeyboardInterrupt:
            CONSOLE.print()
            CONSOLE.print("[dim]Stream canceled. The turn was discarded.[/dim]\n")
            self.reset_turn_state()
            return False
        except Exception as e:
            CONSOLE.print()
            log_exception(e, "Error in stream_response()")
            self.panel.spawn_error_panel("API ERROR", f"{e}")
            self.reset_turn_state()
            return False

        if self.stats is None:
            CONSOLE.print()
        committed = self.session.append_turn(user_text, self.full_response_content)
        if not committed:
            CONSOLE.print("[dim]Empty response. Nothing was added to history.[/dim]\n")
        return committed

    def chunk_parse(self, fragment: Fragment):
        """Writes a fragment out immediately and feeds the collector"""
        if fragment.content:
            self.full_response_content += fragment.content
            CONSOLE.print(
                Text(fragment.content, style=RESPONSE_TEXT_STYLE),
                end="",
                soft_wrap=True,
            )
        if fragment.done:
            self.stats = TurnStats.from_fragment(fragment)
            CONSOLE.print()
            self.panel.spawn_status_panel(self.stats)
