# utils/payload_loader.py - CSV/TSV loader that yields payload specs for batch uploads
import csv
import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from .log import get_logger

logger = get_logger("simple_relevance.loader")


def _parse_cell(value: str) -> Any:
    # Nested fields such as variants are written as JSON inside the cell
    if value[:1] in ("[", "{"):
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            logger.warning("Cell looks like JSON but does not parse, keeping raw text: %.60s", value)
    return value


def parse_row(row: Dict[str, Optional[str]]) -> Dict[str, Any]:
    out = {}
    for key, value in row.items():
        if key is None or value is None:
            continue
        key = key.strip()
        value = value.strip()
        if key and value:
            out[key] = _parse_cell(value)
    return out


def load_payload_from_csv(csv_path, delimiter: Optional[str] = None) -> List[Dict[str, Any]]:
    """Read one payload spec per row; .tsv files default to tab-delimited."""
    path = Path(csv_path)
    if delimiter is None:
        delimiter = '\t' if path.suffix.lower() in (".tsv", ".tab") else ','
    rows = []
    with path.open(newline='', encoding='utf-8') as fh:
        reader = csv.DictReader(fh, delimiter=delimiter)
        for r in reader:
            parsed = parse_row(r)
            if parsed:
                rows.append(parsed)
    logger.info("Loaded %d row(s) from %s", len(rows), path)
    return rows
