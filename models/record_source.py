"""CSV loading into records with stable ids."""

import csv
import io
import logging
from typing import Any, Dict, List

logger = logging.getLogger(__name__)

Record = Dict[str, Any]


class RecordSource:
    """Loads a CSV file and exposes its rows as records.

    Every record carries an ``id``; when the file has no ``id`` column the
    rows are numbered from 1 in file order.
    """

    def __init__(self):
        self.headers: List[str] = []
        self.rows: List[Record] = []
        self.file_name: str = ""

    def load(self, path: str) -> None:
        """Load CSV with utf-8-sig (handles BOM), fallback to latin-1."""
        for encoding in ("utf-8-sig", "latin-1"):
            try:
                with open(path, "r", encoding=encoding, newline="") as f:
                    self.load_text(f.read())
                self.file_name = path
                return
            except UnicodeDecodeError:
                continue
        raise ValueError(f"Could not read CSV file: {path}")

    def load_text(self, text: str) -> None:
        reader = csv.DictReader(io.StringIO(text))
        headers = list(reader.fieldnames or [])
        rows = [dict(row) for row in reader]
        if "id" not in headers:
            for number, row in enumerate(rows, start=1):
                row["id"] = number
            headers.append("id")
        self.headers = headers
        self.rows = rows
        logger.info("Loaded %d records with columns %s", len(rows), headers)

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def is_loaded(self) -> bool:
        return len(self.headers) > 0

    def records(self) -> List[Record]:
        """Full record set, as handed to the change listeners."""
        return [dict(row) for row in self.rows]
