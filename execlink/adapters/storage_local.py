from __future__ import annotations
import json, os
from typing import Dict, Optional
from execlink.domain.ports import StoragePort


class StorageLocal(StoragePort):
    """Local filesystem storage for user settings (JSON)."""

    SETTINGS_FILE = "user_settings.json"

    def __init__(self, root_dir: str = ".") -> None:
        self.root = root_dir

    @property
    def settings_path(self) -> str:
        return os.path.join(self.root, self.SETTINGS_FILE)

    def save_user_settings(self, payload: Dict) -> None:
        os.makedirs(self.root, exist_ok=True)
        # write to a sibling temp file first so a crash never leaves half a file
        tmp_path = self.settings_path + ".tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(payload, f, ensure_ascii=False, indent=2, sort_keys=True)
        os.replace(tmp_path, self.settings_path)

    def load_user_settings(self) -> Optional[Dict]:
        if not os.path.exists(self.settings_path):
            return None
        with open(self.settings_path, "r", encoding="utf-8") as f:
            payload = json.load(f)
        if not isinstance(payload, dict):
            raise ValueError(f"{self.settings_path} does not contain a settings object.")
        return payload
