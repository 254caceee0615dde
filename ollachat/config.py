"""Handles all user-facing configuration."""

import json
import os

from ollachat.globals import CHATS_DIR, CONFIG_FILE


class Config:
    """User-facing configuration variables"""

    def __init__(self):
        # Default values
        self.host: str = "http://localhost:11434"
        self.default_model: str = "llama3.2:latest"
        self.system_prompt: str = (
            "You are a helpful AI assistant called MAX. Reply from now on in "
            "Italian even if the requests are in other languages."
        )
        self.temperature: float = 0.7
        self.context_window: int = 2048
        self.chats_dir: str = CHATS_DIR

    def save(self):
        """Saves any config changes to the config file."""
        with open(CONFIG_FILE, "w", encoding="utf-8") as f:
            json.dump(self.__dict__, f, indent=2)

    def load(self):
        """Loads the config file, writing the defaults first if it is missing."""
        if not os.path.exists(CONFIG_FILE):
            self.save()
        with open(CONFIG_FILE, "r", encoding="utf-8") as f:
            data = json.load(f)
        for key, val in data.items():
            # Stale keys from older settings files are ignored
            if hasattr(self, key):
                setattr(self, key, val)
