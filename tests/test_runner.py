"""Tests for the bulk upload runner."""

import csv
import json

import pytest

from simple_relevance.runner import chunked, main


@pytest.fixture(autouse=True)
def credentials(monkeypatch):
    monkeypatch.setenv("SIMPLE_RELEVANCE_USERNAME", "shop")
    monkeypatch.setenv("SIMPLE_RELEVANCE_API_KEY", "k3y")


def write_csv(path, rows):
    with path.open("w", newline="", encoding="utf-8") as fh:
        csv.writer(fh).writerows(rows)


def test_chunked():
    assert list(chunked([1, 2, 3, 4, 5], 2)) == [[1, 2], [3, 4], [5]]


def test_purchases_are_sent_in_batches(tmp_path, patched_session):
    src = tmp_path / "purchases.csv"
    write_csv(src, [["item_id", "user_id", "price"], ["a", "1", "3"], ["b", "1", "4"], ["c", "2", "5"]])
    reports = tmp_path / "reports"

    code = main([str(src), "--kind", "purchases", "--batch-size", "2", "--reports-dir", str(reports)])

    assert code == 0
    assert len(patched_session.sent) == 2
    first = patched_session.json_body(0)
    assert [a["item_id"] for a in first["batch"]] == ["a", "b"]
    assert {a["action_type"] for a in first["batch"]} == {1}
    assert len(patched_session.json_body(1)["batch"]) == 1

    json_reports = list(reports.glob("purchases_upload_results_*.json"))
    csv_reports = list(reports.glob("purchases_upload_results_*.csv"))
    assert len(json_reports) == 1 and len(csv_reports) == 1
    results = json.loads(json_reports[0].read_text(encoding="utf-8"))
    assert [r["status"] for r in results] == [200, 200]
    assert results[0]["body"] == {"ok": True}


def test_bad_batch_is_recorded_and_run_continues(tmp_path, patched_session):
    src = tmp_path / "users.csv"
    write_csv(src, [["email", "user_id"], ["a@b.com", ""], ["c@d.com", "2"]])
    reports = tmp_path / "reports"

    code = main([str(src), "--kind", "users", "--batch-size", "1", "--reports-dir", str(reports)])

    assert code == 1
    assert len(patched_session.sent) == 1
    results = json.loads(next(reports.glob("*.json")).read_text(encoding="utf-8"))
    assert results[0]["status"] == "VALIDATION_ERROR"
    assert results[0]["body"] == "users[0].user_id is required"
    assert results[1]["status"] == 200


def test_error_status_fails_the_run(tmp_path, monkeypatch, transport_factory):
    import requests

    failing = transport_factory(status=401, body=b'{"error": "bad credentials"}')
    monkeypatch.setattr(requests.Session, "send", lambda self, prepared, **kw: failing(prepared, **kw))
    src = tmp_path / "items.csv"
    write_csv(src, [
        ["item_id", "item_name", "item_url", "image_url"],
        ["42", "Lamp", "https://shop/42", "https://shop/42.jpg"],
    ])

    code = main([str(src), "--kind", "items", "--reports-dir", str(tmp_path / "reports")])

    assert code == 1
    assert failing.json_body()["batch"][0]["item_type"] == "product"


def test_sync_flag_sets_async_zero(tmp_path, patched_session):
    src = tmp_path / "users.csv"
    write_csv(src, [["email", "user_id"], ["a@b.com", "1"]])

    main([str(src), "--kind", "users", "--sync", "--reports-dir", str(tmp_path / "reports")])

    assert patched_session.json_body()["async"] == 0


def test_missing_file(tmp_path, patched_session):
    assert main([str(tmp_path / "nope.csv"), "--kind", "users"]) == 1
    assert patched_session.sent == []


def test_report_date_and_timestamp_share_utc(tmp_path, patched_session):
    src = tmp_path / "users.csv"
    write_csv(src, [["email", "user_id"], ["a@b.com", "1"]])
    reports = tmp_path / "reports"

    main([str(src), "--kind", "users", "--reports-dir", str(reports)])

    result = json.loads(next(reports.glob("*.json")).read_text(encoding="utf-8"))[0]
    with next(reports.glob("*.csv")).open(newline="", encoding="utf-8") as fh:
        row = next(csv.DictReader(fh))
    assert result["date"].endswith("+00:00")
    assert row["timestamp"] == result["date"][:19].replace("T", " ")
