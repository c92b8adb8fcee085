"""JSON source - the same payload the sheet's sync script posts."""

from __future__ import annotations

import json
from typing import Any, Dict, List

from savings.core.logging import get_logger
from .base import BaseSource

log = get_logger("ingestion.json")


class JSONSource(BaseSource):
    """Reads either a bare list of records or ``{"payments": [...]}`` / ``{"records": [...]}``."""

    name = "json"

    def fetch(self) -> List[Dict[str, Any]]:
        if not self.file_path.exists():
            log.warning(f"JSON file not found: {self.file_path}")
            return []

        with self.file_path.open("r", encoding="utf-8") as f:
            data = json.load(f)

        if isinstance(data, dict):
            data = data.get("payments", data.get("records", []))
        if not isinstance(data, list):
            log.warning(f"Unexpected JSON layout in {self.file_path.name}; expected a list of records")
            return []

        log.info(f"Loaded {len(data)} records from {self.file_path.name}")
        return data
