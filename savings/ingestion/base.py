"""Abstract source interface for offline sync files."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List


class BaseSource(ABC):
    """Reads raw sync records (one dict per spreadsheet row) from a file."""

    name: str

    def __init__(self, file_path: str | Path):
        self.file_path = Path(file_path)

    @abstractmethod
    def fetch(self) -> List[Dict[str, Any]]:
        """Return raw records, unvalidated; the sync service checks each row."""
