"""Persisted endpoint configuration.

The only persisted setting is the Apps Script endpoint URL, stored under
a fixed key in a small JSON file.  A missing file or key means no remote
store is configured.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict

log = logging.getLogger(__name__)

STORAGE_KEY = "church_admin_script_url"


class SettingsStore:
    def __init__(self, path: str):
        self.path = path

    def _read(self) -> Dict[str, Any]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, json.JSONDecodeError):
            log.exception("Could not read settings file %s; treating as empty", self.path)
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: Dict[str, Any]) -> None:
        os.makedirs(os.path.dirname(os.path.abspath(self.path)), exist_ok=True)
        tmp_path = f"{self.path}.tmp"
        with open(tmp_path, "w", encoding="utf-8") as fh:
            json.dump(data, fh, ensure_ascii=False, indent=2)
        os.replace(tmp_path, self.path)

    def get_script_url(self) -> str:
        return str(self._read().get(STORAGE_KEY) or "").strip()

    def set_script_url(self, url: str) -> None:
        data = self._read()
        url = (url or "").strip()
        if url:
            data[STORAGE_KEY] = url
        else:
            data.pop(STORAGE_KEY, None)
        self._write(data)
        log.info("Spreadsheet endpoint %s", "updated" if url else "cleared")

    def clear_script_url(self) -> None:
        self.set_script_url("")
