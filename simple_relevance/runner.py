#!/usr/bin/env python3
"""
CSV-driven bulk uploader for the SimpleRelevance API.

- Reads users, items or events from a CSV/TSV file (one payload per row;
  JSON cells such as variants are parsed)
- Sends them in batches through the matching batch_add_* call
- Keeps going when a batch fails, recording the failure
- Writes timestamped JSON and CSV reports into --reports-dir

Credentials come from SIMPLE_RELEVANCE_USERNAME / SIMPLE_RELEVANCE_API_KEY
unless given on the command line.
"""

import argparse
import csv
import json
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Sequence

from requests import exceptions as req_exceptions

from .api_client import SimpleRelevanceClient, set_debug
from .config import ClientConfig
from .dispatch import HANDLERS, Operation
from .errors import SimpleRelevanceError
from .utils.log import get_logger
from .utils.payload_loader import load_payload_from_csv

logger = get_logger("simple_relevance.runner")

KINDS = {
    "users": Operation.BATCH_ADD_USERS,
    "items": Operation.BATCH_ADD_ITEMS,
    "clicks": Operation.BATCH_ADD_CLICKS,
    "purchases": Operation.BATCH_ADD_PURCHASES,
    "email_opens": Operation.BATCH_ADD_EMAIL_OPENS,
    "email_clicks": Operation.BATCH_ADD_EMAIL_CLICKS,
    "item_views": Operation.BATCH_ADD_ITEM_VIEWS,
}

FIELDNAMES = ["batch", "start", "size", "status", "date", "timestamp", "body"]


def chunked(iterable: List[Any], n: int) -> Iterator[List[Any]]:
    for i in range(0, len(iterable), n):
        yield iterable[i:i+n]


def failed(status: Any) -> bool:
    return not isinstance(status, int) or status >= 400


def send_batch(client: SimpleRelevanceClient, operation: Operation, rows: List[Dict[str, Any]]):
    """Returns (status, body); status is the HTTP code or an error sentinel."""
    try:
        resp = HANDLERS[operation](client, rows)
    except SimpleRelevanceError as e:
        logger.error("Batch rejected before sending: %s", e.message)
        return "VALIDATION_ERROR", e.message
    except req_exceptions.RequestException as e:
        logger.error("Request failed: %s", str(e))
        return "REQUEST_ERROR", str(e)

    try:
        body = resp.json()
    except ValueError:
        body = resp.text
    return resp.status_code, body


def run(client: SimpleRelevanceClient, kind: str, rows: List[Dict[str, Any]], batch_size: int) -> List[Dict[str, Any]]:
    operation = KINDS[kind]
    results = []
    for idx, batch in enumerate(chunked(rows, batch_size)):
        start = idx * batch_size
        logger.info("Sending %s batch %d (rows %d-%d)", kind, idx, start, start + len(batch) - 1)
        status, body = send_batch(client, operation, batch)
        logger.info("Batch %d -> %s", idx, status)
        ts = time.time()
        results.append({
            "batch": idx,
            "start": start,
            "size": len(batch),
            "status": status,
            "body": body,
            "timestamp": ts,
            "date": datetime.fromtimestamp(ts, timezone.utc).isoformat(),
        })
    return results


def write_json(results: List[Dict[str, Any]], path: Path) -> None:
    path.write_text(json.dumps(results, indent=2, ensure_ascii=False), encoding="utf-8")
    logger.info("Wrote JSON: %s (entries=%d)", path, len(results))


def write_csv(results: List[Dict[str, Any]], path: Path) -> None:
    with path.open("w", newline="", encoding="utf-8") as csvfh:
        writer = csv.DictWriter(csvfh, fieldnames=FIELDNAMES)
        writer.writeheader()
        for r in results:
            body = r.get("body", "")
            if not isinstance(body, str):
                body = json.dumps(body, ensure_ascii=False)
            writer.writerow({
                "batch": r["batch"],
                "start": r["start"],
                "size": r["size"],
                "status": r["status"],
                "date": r["date"],
                "timestamp": datetime.fromtimestamp(r["timestamp"], timezone.utc).strftime("%Y-%m-%d %H:%M:%S"),
                "body": body,
            })
    logger.info("Wrote CSV: %s (entries=%d)", path, len(results))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Bulk upload a CSV/TSV file to SimpleRelevance")
    parser.add_argument("csv_path", type=Path, help="CSV or TSV file, one payload per row")
    parser.add_argument("--kind", required=True, choices=sorted(KINDS), help="What the rows describe")
    parser.add_argument("--batch-size", type=int, default=100, help="Rows per request (default: 100)")
    parser.add_argument("--delimiter", default=None, help="Field delimiter (default: by file extension)")
    parser.add_argument("--reports-dir", type=Path, default=Path("reports"), help="Where reports are written")
    parser.add_argument("--username", default=None, help="Overrides SIMPLE_RELEVANCE_USERNAME")
    parser.add_argument("--api-key", default=None, help="Overrides SIMPLE_RELEVANCE_API_KEY")
    parser.add_argument("--sync", action="store_true", help="Ask the service to process requests inline (async=0)")
    parser.add_argument("--debug", action="store_true", help="Trace every request and response")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.batch_size < 1:
        logger.error("--batch-size must be at least 1")
        return 2
    if not args.csv_path.exists():
        logger.error("CSV file not found: %s", args.csv_path)
        return 1

    if args.debug:
        set_debug(True)

    try:
        config = ClientConfig.from_env(
            username=args.username,
            api_key=args.api_key,
            async_mode=0 if args.sync else None,
        )
    except SimpleRelevanceError as e:
        logger.error("%s", e.message)
        return 2

    rows = load_payload_from_csv(args.csv_path, delimiter=args.delimiter)
    if not rows:
        logger.warning("No rows found in %s", args.csv_path)
        return 0

    with SimpleRelevanceClient(config) as client:
        results = run(client, args.kind, rows, args.batch_size)

    args.reports_dir.mkdir(parents=True, exist_ok=True)
    stamp = time.strftime("%Y%m%d-%H%M%S")
    write_json(results, args.reports_dir / f"{args.kind}_upload_results_{stamp}.json")
    write_csv(results, args.reports_dir / f"{args.kind}_upload_results_{stamp}.csv")

    n_failed = sum(1 for r in results if failed(r["status"]))
    logger.info("Done. %d batch(es) sent, %d failed.", len(results), n_failed)
    return 1 if n_failed else 0


if __name__ == "__main__":
    raise SystemExit(main())
