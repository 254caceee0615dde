"""Global functions and variables, used across various modules."""

import logging
import os
from datetime import datetime
from logging.handlers import RotatingFileHandler

from platformdirs import user_data_dir
from prompt_toolkit import prompt
from prompt_toolkit.completion import (
    WordCompleter,
)
from prompt_toolkit.formatted_text import HTML
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.styles import Style
from rich.console import Console
from rich.spinner import Spinner

# Default directories
APP_DIR = user_data_dir("OllaChat")
CONFIG_DIR = os.path.join(APP_DIR, "config")
CHATS_DIR = os.path.join(APP_DIR, "chats")
LOG_DIR = os.path.join(APP_DIR, "logs")
CONFIG_FILE = os.path.join(CONFIG_DIR, "settings.json")

# The chats directory is created on first save
os.makedirs(CONFIG_DIR, exist_ok=True)
os.makedirs(LOG_DIR, exist_ok=True)

# Terminal integration
CONSOLE = Console()

# Main prompt prefix
PROMPT_PREFIX = HTML("<seagreen>User: </seagreen>")

# Dark style for all prompt_toolkit completers
COMPLETER_STYLER = Style.from_dict(
    {
        # Completions
        "completion-menu.completion": "bg:#202020 #ffffff",
        "completion-menu.completion.current": "bg:#024a1a #000000",
        # Tooltips
        "completion-menu.meta.completion": "bg:#202020 #aaaaaa",
        "completion-menu.meta.completion.current": "bg:#024a1a #000000",
    }
)

# Main prompt command completer
COMMAND_COMPLETER = WordCompleter(
    [
        "/bye",
        "/clear",
        "/current",
        "/help",
        "/history",
        "/list",
        "/load",
        "/params",
        "/save",
        "/system",
    ],
    match_middle=True,
    WORD=True,
)

# In-memory history for the root prompt, must mutate
main_history = InMemoryHistory()


def init_logger():
    """Initializes the logging system."""
    date_str = datetime.now().strftime("%Y%m%d")
    # Output example: ollachat_20261019.log
    log_path = os.path.join(LOG_DIR, f"ollachat_{date_str}.log")
    # Max of 3 backups, max size of 1MB
    handler = RotatingFileHandler(
        log_path, maxBytes=1_000_000, backupCount=3, encoding="utf-8"
    )
    logging.basicConfig(
        level=logging.ERROR,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[handler],
    )


def log_exception(e: BaseException, context: str = ""):
    """Creates a full formatted traceback string and writes it to a log file"""
    import traceback

    tb = "".join(traceback.format_exception(type(e), e, e.__traceback__))
    msg = f"{context}\n{tb}" if context else tb
    logging.error(msg)


def spinner_constructor(content: str) -> Spinner:
    return Spinner(
        "moon",
        text=f"[bold medium_orchid]{content}[/bold medium_orchid]",
    )


def root_prompt() -> str:
    return prompt(
        PROMPT_PREFIX,
        completer=COMMAND_COMPLETER,
        style=COMPLETER_STYLER,
        complete_while_typing=False,
        history=main_history,
    )
