"""CSV source - a "Download as CSV" export of the savings sheet."""

from __future__ import annotations

import csv
from typing import Any, Dict, List

from savings.core.logging import get_logger
from .base import BaseSource

log = get_logger("ingestion.csv")

# Sheet header -> sync record key
COLUMN_ALIASES = {
    "date": "date",
    "transaction_date": "date",
    "amount": "amount",
    "asset": "asset",
    "asset_symbol": "asset",
    "thb_price": "thb_price",
    "usd_value": "usd_value",
    "usd_value_at_tx": "usd_value",
    "usd_cum": "usd_cum",
    "usd_cumulative": "usd_cum",
    "reason": "reason",
    "status": "status",
    "usdthb_rate": "usdthb_rate",
}


class CSVSource(BaseSource):
    """Reads a CSV with columns: date,amount,asset,thb_price,usd_value,usd_cum,reason,status,usdthb_rate.

    Headers are matched case-insensitively with spaces read as underscores;
    unknown columns are ignored.
    Thousands separators are stripped from numeric cells.
    """

    name = "csv"

    def fetch(self) -> List[Dict[str, Any]]:
        if not self.file_path.exists():
            log.warning(f"CSV file not found: {self.file_path}")
            return []

        records: List[Dict[str, Any]] = []
        with self.file_path.open("r", newline="", encoding="utf-8-sig") as f:
            reader = csv.DictReader(f)
            for row in reader:
                record = self._map_row(row)
                if record:
                    records.append(record)
        log.info(f"Loaded {len(records)} records from {self.file_path.name}")
        return records

    @classmethod
    def _map_row(cls, row: Dict[str, Any]) -> Dict[str, Any]:
        record: Dict[str, Any] = {}
        for header, value in row.items():
            if header is None:
                continue
            key = COLUMN_ALIASES.get(header.strip().lower().replace(" ", "_"))
            if key is None:
                continue
            record[key] = cls._clean(key, value)
        # Fully blank lines at the bottom of a sheet export
        if not any(v not in (None, "") for v in record.values()):
            return {}
        return record

    @staticmethod
    def _clean(key: str, value: Any) -> Any:
        if value is None:
            return None
        value = str(value).strip()
        if key in {"amount", "thb_price", "usd_value", "usd_cum", "usdthb_rate"}:
            value = value.replace(",", "").replace("$", "").replace("฿", "")
        return value
