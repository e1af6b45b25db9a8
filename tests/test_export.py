"""Tests for export and HTML archiving."""

import csv
import json

from conftest import make_view

from gmail_unsubscriber.export import archive_views, export_results, sanitize_filename, save_html_body
from gmail_unsubscriber.models import (
    BodyPart,
    DetectionMethod,
    MailtoUnsubscribe,
    MessageView,
    ScanReport,
    UnsubscribeResult,
    WebUnsubscribe,
)


def _report() -> ScanReport:
    return ScanReport(
        total_messages=3,
        admitted=3,
        results=[
            UnsubscribeResult(
                message_id="m1",
                is_newsletter=True,
                method=DetectionMethod.HEADER,
                action=WebUnsubscribe(url="https://x.com/u"),
                subject="Deals",
                sender="Shop <news@shop.example>",
                raw_header="<https://x.com/u>",
            ),
            UnsubscribeResult(
                message_id="m2",
                is_newsletter=True,
                method=DetectionMethod.HEADER,
                action=MailtoUnsubscribe(address="unsub@x.com"),
            ),
            UnsubscribeResult(message_id="m3", is_newsletter=False, method=DetectionMethod.NONE),
        ],
    )


def test_export_csv(tmp_path):
    out = tmp_path / "out.csv"
    export_results(_report(), format="csv", output_path=str(out))

    with open(out, newline="") as f:
        rows = list(csv.DictReader(f))
    assert [r["message_id"] for r in rows] == ["m1", "m2", "m3"]
    assert rows[0]["method"] == "HEADER"
    assert rows[0]["action"] == "https://x.com/u"
    assert rows[1]["action"] == "mailto:unsub@x.com"
    assert rows[2]["is_newsletter"] == "False"


def test_export_json(tmp_path):
    out = tmp_path / "out.json"
    export_results(_report(), format="json", output_path=str(out))

    rows = json.loads(out.read_text())
    assert rows[0]["list_unsubscribe"] == "<https://x.com/u>"
    assert rows[0]["from"] == "Shop <news@shop.example>"
    assert rows[2]["action"] is None


def test_sanitize_filename():
    assert sanitize_filename('50% off: "Deals" / today?') == "50% off_ _Deals_ _ today_"
    assert sanitize_filename("a\tb\nc") == "a_b_c"
    assert sanitize_filename("") == "untitled"
    assert sanitize_filename(None) == "untitled"
    assert sanitize_filename("...") == "untitled"
    assert len(sanitize_filename("x" * 500)) == 120


def test_sanitize_keeps_unicode():
    assert sanitize_filename("セール開催中") == "セール開催中"


def test_save_html_body(tmp_path):
    view = make_view(headers=[("Subject", "Weekly/Deals")], html="<p>hi</p>")
    path = save_html_body(view, tmp_path / "data")
    assert path.name == "Weekly_Deals.html"
    assert path.read_text(encoding="utf-8") == "<p>hi</p>"

    second = save_html_body(view, tmp_path / "data")
    assert second.name == "Weekly_Deals (1).html"


def test_save_html_body_without_html(tmp_path, plain_view):
    assert save_html_body(plain_view, tmp_path) is None
    assert list(tmp_path.iterdir()) == []


def test_archive_views_skips_undecodable(tmp_path):
    good = make_view(message_id="good", headers=[("Subject", "Good")], html="<p>ok</p>")
    bad = MessageView(
        message_id="bad",
        headers=(("Subject", "Bad"),),
        body_parts=(BodyPart(mime_type="text/html", data="%%%"),),
    )
    written, errors = archive_views([bad, good], tmp_path)
    assert [p.name for p in written] == ["Good.html"]
    assert list(errors) == ["bad"]
