from pathlib import Path

from savings.ingestion.base import BaseSource
from savings.ingestion.csv_source import CSVSource
from savings.ingestion.json_source import JSONSource


def source_for(file_path: str | Path) -> BaseSource:
    """Pick a reader from the file extension."""
    if Path(file_path).suffix.lower() == ".json":
        return JSONSource(file_path)
    return CSVSource(file_path)


__all__ = ["BaseSource", "CSVSource", "JSONSource", "source_for"]
