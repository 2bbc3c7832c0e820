"""Tests for the CSV/TSV payload loader."""

import csv
import json

from simple_relevance.utils.payload_loader import load_payload_from_csv, parse_row


def write_rows(path, rows, delimiter=","):
    with path.open("w", newline="", encoding="utf-8") as fh:
        writer = csv.writer(fh, delimiter=delimiter)
        writer.writerows(rows)


def test_csv_rows_drop_empty_cells_and_parse_json(tmp_path):
    path = tmp_path / "items.csv"
    variants = json.dumps([{"name": "Red", "price": 10}])
    write_rows(path, [
        ["item_id", "item_name", "variants", "price"],
        ["42", " Desk Lamp ", variants, ""],
        ["43", "Chair", "", "15"],
    ])

    rows = load_payload_from_csv(path)

    assert rows == [
        {"item_id": "42", "item_name": "Desk Lamp", "variants": [{"name": "Red", "price": 10}]},
        {"item_id": "43", "item_name": "Chair", "price": "15"},
    ]


def test_tsv_is_detected_by_extension(tmp_path):
    path = tmp_path / "users.tsv"
    write_rows(path, [["email", "user_id"], ["a@b.com", "1"]], delimiter="\t")

    assert load_payload_from_csv(path) == [{"email": "a@b.com", "user_id": "1"}]


def test_blank_rows_are_skipped(tmp_path):
    path = tmp_path / "users.csv"
    write_rows(path, [["email", "user_id"], ["", ""], ["a@b.com", "1"]])

    assert load_payload_from_csv(path) == [{"email": "a@b.com", "user_id": "1"}]


def test_broken_json_cell_is_kept_as_text():
    assert parse_row({"note": "[not json"}) == {"note": "[not json"}
