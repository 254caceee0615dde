#!/usr/bin/env python3

# <~~~~~~~~>
#  OLLACHAT
# <~~~~~~~~>

import sys

from rich.live import Live

from ollachat.backend import OllamaBackend
from ollachat.chat_store import ChatStore
from ollachat.cli_controller import CLIController
from ollachat.config import Config
from ollachat.globals import (
    CONSOLE,
    init_logger,
    log_exception,
    root_prompt,
    spinner_constructor,
)
from ollachat.session import (
    GenerationParams,
    Session,
    parse_context_window,
    parse_temperature,
)
from ollachat.streaming import StreamEngine
from ollachat.ui import GlobalPanels, UIConstructor


def generation_defaults(config: Config) -> GenerationParams:
    """Checks the configured parameters, falling back per value when invalid"""
    params = GenerationParams()
    try:
        params.temperature = parse_temperature(config.temperature)
    except ValueError as e:
        CONSOLE.print(
            f"[red]Settings:[/red] {e} Using {params.temperature} instead."
        )
    try:
        params.context_window = parse_context_window(config.context_window)
    except ValueError as e:
        CONSOLE.print(
            f"[red]Settings:[/red] {e} Using {params.context_window} instead."
        )
    return params


class ChatApp:
    """Wires the session, backend, and chat store into the input loop"""

    def __init__(self, config: Config, backend=None, store=None):
        self.config = config
        self.session = Session(
            config.default_model,
            config.system_prompt,
            generation_defaults(config),
        )
        self.backend = backend or OllamaBackend(config.host)
        self.store = store or ChatStore(config.chats_dir)
        self.ui = UIConstructor(config, self.session)
        self.panel = GlobalPanels(self.session, config, self.ui)
        self.engine = StreamEngine(self.session, self.backend, self.panel)
        self.controller = CLIController(
            config,
            self.session,
            self.backend,
            self.store,
            self.engine,
            self.panel,
        )

    # <~~RUN~~>
    def run(self):
        """Helper function for running the application"""
        self.panel.spawn_intro_panel()
        self.panel.spawn_help_chart()
        # Initial model pick; a failure keeps the configured default model
        self.controller.list_models()

        while not self.controller.exited:
            try:
                user_input = root_prompt()
            except (KeyboardInterrupt, EOFError):
                break
            self.controller.dispatch(user_input)
        CONSOLE.print("[blue]Goodbye![/blue]\n")


# <~~MAIN FLOW~~>
def main():
    try:
        # Start a spinner, mostly for cold starts
        with Live(
            spinner_constructor("Launching OllaChat..."),
            refresh_per_second=8,
            console=CONSOLE,
        ):
            init_logger()
            config = Config()
            config.load()
            app = ChatApp(config)
        app.run()
    except (KeyboardInterrupt, EOFError):
        CONSOLE.print("[blue]Goodbye![/blue]\n")
    except Exception as e:
        log_exception(e, "Critical startup error")
        CONSOLE.print(UIConstructor.error_panel_constructor("CRITICAL ERROR", f"{e}"))
        sys.exit(1)


if __name__ == "__main__":
    main()
