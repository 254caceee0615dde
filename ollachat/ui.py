"""Builds and spawns UI objects. UIConstructor and GlobalPanels live here."""

import textwrap

from rich import box
from rich.markdown import Markdown
from rich.panel import Panel
from rich.text import Text

from ollachat import __version__
from ollachat.globals import CONFIG_FILE, CONSOLE, LOG_DIR

# Role labels used by /history
ROLE_LABELS = {"system": "System", "user": "User", "assistant": "AI"}


class UIConstructor:
    """Constructs and returns various UI objects"""

    def __init__(self, config, session):
        self.config = config
        self.session = session

    def status_panel_constructor(self, stats) -> Panel:
        turns = self.session.count_turns() + 1
        context_percentage = round(
            (stats.context_tokens / self.session.params.context_window) * 100, 1
        )

        # Colorize context percentage based on context consumption
        context_color: str = "dim"
        if context_percentage >= 50 and context_percentage < 80:
            context_color = "yellow"
        elif context_percentage >= 80:
            context_color = "red"

        status_text = Text.assemble(
            ("Token/s: ", "magenta"),
            (f"{stats.tokens_per_second:.2f}"),
            (" | Load model: ", "magenta"),
            (f"{stats.load_seconds:.2f}s"),
            (" | Prompt eval: ", "magenta"),
            (f"{stats.prompt_eval_seconds:.2f}s"),
            (" | Context: "),
            (f"{context_percentage}%", context_color),
            (f" | Turn: {turns}"),
        )
        return Panel(
            status_text,
            border_style="dim",
            style="dim",
            expand=False,
        )

    def intro_panel_constructor(self) -> Panel:
        intro_text = Text.assemble(
            ("Model: ", "bold sandy_brown"),
            (f"{self.session.model}"),
            ("\nEndpoint: ", "bold sandy_brown"),
            (f"{self.config.host}"),
            ("\nSystem Prompt: ", "bold sandy_brown"),
            (f"{self.session.system_prompt.content}", "italic"),
        )
        return Panel(
            intro_text,
            title=Text(f"🦙 OllaChat {__version__}", "bold medium_orchid"),
            title_align="left",
            border_style="medium_orchid",
            box=box.HORIZONTALS,
            padding=(0, 0),
        )

    @staticmethod
    def error_panel_constructor(error: str, exception: str) -> Panel:
        return Panel(
            exception,
            title=Text(f"❌ {error}", style="bold red"),
            title_align="left",
            border_style="red",
            expand=False,
        )

    def history_constructor(self) -> Text:
        history_text = Text()
        for i, message in enumerate(self.session.history, start=1):
            if i > 1:
                history_text.append("\n")
            history_text.append(f"{i}. ")
            history_text.append(
                f"{ROLE_LABELS[message.role]}: ", style="bold sandy_brown"
            )
            history_text.append(message.content)
        return history_text

    def help_chart_constructor(self) -> Markdown:
        return Markdown(
            textwrap.dedent("""
            | **Command** | *Description* |
            | --- | ----------- |
            | `/help` | Show available commands. |
            | `/list` | Show available models and select one. Resets the chat history. |
            | `/system <text>` | Set the content of the system prompt and reset the chat history. |
            | `/save <name>` | Save the current chat with the specified name. |
            | `/load` | Load a saved chat. |
            | `/current` | Show the currently used model. |
            | `/clear` | Reset the chat history and the generation parameters. |
            | `/history` | Show the chat history. |
            | `/params` | Set the temperature and context window interactively. |
            | `/bye` or `exit` | Exit the chat. |
            | | |
            | `Ctrl + C` | Abort mid-stream. The turn is discarded. |
            """)
        )

    def settings_chart_constructor(self) -> Markdown:
        return Markdown(
            textwrap.dedent(f"""
            - Your configuration file is located at: `{CONFIG_FILE}`
            - Your saved chats are located at:       `{self.config.chats_dir}`
            - Your error logs are located at:        `{LOG_DIR}`
            """)
        )


class GlobalPanels:
    """Global panel spawner"""

    def __init__(self, session, config, ui: UIConstructor):
        self.session = session
        self.config = config
        self.ui: UIConstructor = ui

    def spawn_intro_panel(self):
        """Simple welcome panel, prints on application launch."""
        CONSOLE.print(self.ui.intro_panel_constructor())
        CONSOLE.print(self.ui.settings_chart_constructor())
        CONSOLE.print("Here are the available commands:")

    def spawn_status_panel(self, stats):
        """Prints the per-turn performance panel."""
        CONSOLE.print(self.ui.status_panel_constructor(stats))
        CONSOLE.print()

    def spawn_error_panel(self, error: str, exception: str):
        """Error panel template, used by the controller, the stream, and main()"""
        CONSOLE.print(self.ui.error_panel_constructor(error, exception))
        CONSOLE.print()

    def spawn_history(self):
        CONSOLE.print("[blue]Chat history:[/blue]")
        CONSOLE.print(self.ui.history_constructor(), highlight=False)
        CONSOLE.print()

    def spawn_help_chart(self):
        """Markdown usage chart."""
        CONSOLE.print(self.ui.help_chart_constructor())
        CONSOLE.print()
