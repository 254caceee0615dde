"""Command interactivity logic lives here."""

import json
import re
from collections.abc import Callable
from dataclasses import dataclass

from prompt_toolkit import prompt
from prompt_toolkit.formatted_text import HTML
from rich.markup import escape

from ollachat.globals import CONSOLE, log_exception

# Leading integer of a selection answer
INDEX_PATTERN = re.compile(r"([+-]?\d+)")


@dataclass(frozen=True)
class Command:
    """A slash command: its handler and whether it reads an argument"""

    handler: Callable[[str], None]
    takes_argument: bool = False


class CLIController:
    """Classifies every input line and routes it to a command or a chat turn"""

    def __init__(
        self,
        config,
        session,
        backend,
        store,
        engine,
        panel,
    ):
        self.config = config
        self.session = session
        self.backend = backend
        self.store = store
        self.engine = engine
        self.panel = panel
        self.exited: bool = False

        # Command dict
        self.commands: dict[str, Command] = {
            "/bye": Command(self.quit),
            "/help": Command(self.spawn_help_chart),
            "/history": Command(self.show_history),
            "/list": Command(self.list_models),
            "/save": Command(self.save_chat, takes_argument=True),
            "/load": Command(self.load_chat),
            "/current": Command(self.show_current_model),
            "/clear": Command(self.clear_chat),
            "/system": Command(self.set_system_prompt, takes_argument=True),
            "/params": Command(self.set_params),
        }

    # <~~HELPERS~~>
    def _prompt_wrapper(
        self, prefix, cancel_msg="Canceled.", allow_empty=False, **kwargs
    ) -> str | None:
        """Prompt_toolkit wrapper for validating input."""
        try:
            # **kwargs passes defaults, completers, styles, etc automatically
            user_input = prompt(prefix, **kwargs)
            stripped = user_input.strip()
            if not stripped and not allow_empty:
                CONSOLE.print("[dim]No input detected.[/dim]")
                return None
            return stripped
        except (KeyboardInterrupt, EOFError):
            CONSOLE.print(f"[dim]{cancel_msg}[/dim]")
            return None

    def _select_index(self, count: int, prefix) -> int | None:
        """Prompts for a 1-based selection. Returns a 0-based index or None."""
        choice = self._prompt_wrapper(prefix)
        if not choice:
            return None
        # Leading digits count, so "1." and "2 please" still select
        match = INDEX_PATTERN.match(choice)
        if not match:
            return None
        index = int(match.group(1)) - 1
        if 0 <= index < count:
            return index
        return None

    # <~~DISPATCH~~>
    def dispatch(self, user_input: str):
        """Handles one line of input: a command, a chat turn, or an error."""
        if not user_input or not user_input.strip():
            CONSOLE.print("[red]Invalid input. Try again.[/red]\n")
            return
        if not self.handle_input(user_input):
            CONSOLE.print()
            self.engine.stream_response(user_input)

    def handle_input(self, user_input: str) -> bool:
        """Parse user input for a command & handle it"""
        stripped = user_input.strip()
        if stripped.upper() == "EXIT":
            self.quit()
            return True

        parts = stripped.split(maxsplit=1)
        command = self.commands.get(parts[0])
        if command is None:
            return False  # No command detected
        args = parts[1].strip() if len(parts) > 1 else ""

        if args and not command.takes_argument:
            CONSOLE.print(f"[red]{parts[0]} does not take arguments.[/red]\n")
            return True
        command.handler(args)
        return True

    def quit(self, _args: str = ""):
        self.exited = True

    # <~~CHARTS~~>
    def spawn_help_chart(self, _args: str = ""):
        self.panel.spawn_help_chart()

    def show_history(self, _args: str = ""):
        self.panel.spawn_history()

    def show_current_model(self, _args: str = ""):
        CONSOLE.print(
            f"[blue]Currently used model:[/blue] {escape(self.session.model)}\n"
        )

    # <~~SESSION STATE~~>
    def clear_chat(self, _args: str = ""):
        """Resets history and generation parameters."""
        self.session.clear()
        CONSOLE.print(
            "[blue]Chat history and generation parameters have been reset.[/blue]\n"
        )

    def set_system_prompt(self, text: str = ""):
        """Sets a new system prompt for the active session."""
        try:
            self.session.set_system_prompt(text)
        except ValueError as e:
            CONSOLE.print(f"[red]Error:[/red] {e}\n")
            return
        CONSOLE.print("[green]System prompt successfully updated![/green]\n")

    def set_params(self, _args: str = ""):
        """Prompts for temperature and context window, applied independently."""
        params = self.session.params
        temperature = self._prompt_wrapper(
            HTML(
                "Enter temperature (0-1, default is "
                f"{self.session.defaults.temperature})<seagreen>:</seagreen> "
            ),
            default=str(params.temperature),
        )
        errors = self.session.set_params(temperature=temperature or "")
        if "temperature" in errors:
            CONSOLE.print(f"[red]{errors['temperature']}[/red]")
        else:
            CONSOLE.print(
                f"[green]Temperature successfully set to[/green] {params.temperature}"
            )

        context_window = self._prompt_wrapper(
            HTML(
                "Enter context window (positive integer, default is "
                f"{self.session.defaults.context_window})<seagreen>:</seagreen> "
            ),
            default=str(params.context_window),
        )
        errors = self.session.set_params(context_window=context_window or "")
        if "context_window" in errors:
            CONSOLE.print(f"[red]{errors['context_window']}[/red]\n")
        else:
            CONSOLE.print(
                "[green]Context window successfully set to[/green] "
                f"{params.context_window}\n"
            )

    # <~~MODEL MANAGEMENT~~>
    def list_models(self, _args: str = ""):
        """Lists backend models and switches to the selected one."""
        try:
            with CONSOLE.status(
                "[bold medium_orchid]Fetching models...[/bold medium_orchid]",
                spinner="moon",
            ):
                models = self.backend.list_models()
        except KeyboardInterrupt:
            CONSOLE.print("[dim]Canceled.[/dim]\n")
            return
        except Exception as e:
            log_exception(e, "Error in list_models()")
            self.panel.spawn_error_panel("ERROR RETRIEVING MODELS", f"{e}")
            return

        if models:
            CONSOLE.print("[blue]Available models:[/blue]")
            for i, m in enumerate(models, start=1):
                CONSOLE.print(
                    f"{i}. {escape(m.name)} - {escape(m.family)} - {escape(m.parameter_size)}",
                    highlight=False,
                )
            selected = self._select_index(
                len(models),
                HTML("Select a model by entering the corresponding number<seagreen>:</seagreen> "),
            )
        else:
            CONSOLE.print("[dim]No models available.[/dim]")
            selected = None

        if selected is None:
            CONSOLE.print(
                f"[red]Invalid selection. Model retained:[/red] {escape(self.session.model)}\n"
            )
            # A completed listing always starts a fresh conversation
            self.session.reset_history()
            return
        self.session.set_model(models[selected].name)
        CONSOLE.print(f"[green]Selected model:[/green] {escape(self.session.model)}\n")

    # <~~CHAT STORAGE~~>
    def save_chat(self, args: str = ""):
        """Saves the current chat to <name>.json"""
        name = args.split()[0] if args.split() else ""
        if not name:
            CONSOLE.print("[red]Error: specify a name for the save file.[/red]\n")
            return
        try:
            file_path = self.store.save(name, self.session.snapshot())
        except (OSError, ValueError) as e:
            log_exception(e, f"Error in save_chat() - name: {name}")
            self.panel.spawn_error_panel("ERROR SAVING", f"{e}")
            return
        CONSOLE.print(f"[yellow]Chat successfully saved in:[/yellow] {escape(file_path)}\n")

    def load_chat(self, _args: str = ""):
        """Loads a saved chat, replacing the model and transcript"""
        try:
            names = self.store.list_keys()
        except OSError as e:
            log_exception(e, "Error in load_chat()")
            self.panel.spawn_error_panel("ERROR LOADING", f"{e}")
            return

        if not names:
            CONSOLE.print("[red]No saved chats found.[/red]\n")
            return

        CONSOLE.print("[blue]Available saved chats:[/blue]")
        for i, name in enumerate(names, start=1):
            CONSOLE.print(f"{i}. {escape(name)}", highlight=False)
        selected = self._select_index(
            len(names),
            HTML("Select a chat by entering the corresponding number<seagreen>:</seagreen> "),
        )
        if selected is None:
            CONSOLE.print("[red]Invalid selection.[/red]\n")
            return

        name = names[selected]
        try:
            snapshot = self.store.load(name)
            self.session.restore(snapshot["model"], snapshot["messages"])
        except FileNotFoundError:
            CONSOLE.print(f"[red]No chat file found:[/red] {escape(name)}\n")
            return
        except json.JSONDecodeError:
            CONSOLE.print(f"[red]Corrupted chat file:[/red] {escape(name)}\n")
            return
        except (OSError, ValueError) as e:
            log_exception(e, f"Error in load_chat() - name: {name}")
            self.panel.spawn_error_panel("ERROR LOADING", f"{e}")
            return
        CONSOLE.print(f"[green]Chat successfully loaded from:[/green] {escape(name)}\n")
