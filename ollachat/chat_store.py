"""Saved chat I/O. One pretty-printed JSON file per chat name."""

import json
import os


class ChatStore:
    """Key/value store for saved chats, keyed by user-given name"""

    def __init__(self, directory: str):
        self.directory = directory

    def _json_helper(self, name: str) -> str:
        """Validates a chat name and maps it to its file path"""
        # Always appends the suffix, so list_keys() stems map back 1:1
        name = name.strip()
        if not name or name in (".", "..") or "/" in name or os.sep in name:
            raise ValueError(f"Invalid chat name: {name!r}")
        return os.path.join(self.directory, f"{name}.json")

    def save(self, name: str, snapshot: dict) -> str:
        """Writes a chat to disk, creating the directory if needed"""
        file_path = self._json_helper(name)
        os.makedirs(self.directory, exist_ok=True)
        with open(file_path, "w", encoding="utf-8") as f:
            json.dump(snapshot, f, indent=2, ensure_ascii=False)
        return file_path

    def list_keys(self) -> list[str]:
        """Lists all chat names that exist within the chats directory"""
        if not os.path.isdir(self.directory):
            return []
        return sorted(
            f[: -len(".json")]
            for f in os.listdir(self.directory)
            if f.endswith(".json") and os.path.isfile(os.path.join(self.directory, f))
        )

    def load(self, name: str) -> dict:
        """
        Reads a saved chat.\n
        Raises FileNotFoundError, json.JSONDecodeError, or ValueError for a bad shape.
        """
        file_path = self._json_helper(name)
        with open(file_path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if (
            not isinstance(data, dict)
            or not isinstance(data.get("model"), str)
            or not isinstance(data.get("messages"), list)
        ):
            raise ValueError(f"Corrupted chat file: {file_path}")
        return data
