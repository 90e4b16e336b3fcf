"""Tests for the append-only moderation log."""

import json
import tempfile
from pathlib import Path

import pytest

from reportguard.audit import ModerationLog, record_safely
from reportguard.audit.moderation_log import PREVIEW_LENGTH


def _seed(log: ModerationLog):
    log.record(kind="moderation", action="approved", confidence=85, content="Broken window", user_id="u1")
    log.record(
        kind="moderation",
        action="rejected",
        violation_type="harassment",
        confidence=30,
        content="rude text",
        user_id="u2",
    )
    log.record(kind="moderation", action="blocked", violation_type="spam", content="aaaa", user_id="u1")


def test_record_appends_jsonl_lines():
    with tempfile.TemporaryDirectory() as tmp:
        log = ModerationLog(tmp)
        _seed(log)
        files = list(Path(tmp).glob("*.jsonl"))
        assert len(files) == 1
        lines = files[0].read_text().splitlines()
        assert len(lines) == 3
        assert json.loads(lines[1])["action"] == "rejected"


def test_get_entries_filters_and_orders_newest_first():
    with tempfile.TemporaryDirectory() as tmp:
        log = ModerationLog(tmp)
        _seed(log)

        entries = log.get_entries()
        assert [e.action for e in entries] == ["blocked", "rejected", "approved"]

        assert [e.action for e in log.get_entries(user_id="u1")] == ["blocked", "approved"]
        assert [e.action for e in log.get_entries(violation_type="harassment")] == ["rejected"]
        assert len(log.get_entries(limit=1)) == 1
        assert log.get_entries(kind="risk") == []


def test_content_preview_truncated():
    with tempfile.TemporaryDirectory() as tmp:
        entry = ModerationLog(tmp).record(kind="moderation", action="approved", content="x" * 1000)
        assert len(entry.content_preview) == PREVIEW_LENGTH


def test_stats():
    with tempfile.TemporaryDirectory() as tmp:
        log = ModerationLog(tmp)
        _seed(log)
        stats = log.stats()
        assert stats["total"] == 3
        assert stats["by_action"] == {"approved": 1, "rejected": 1, "blocked": 1}
        assert stats["by_violation_type"] == {"harassment": 1, "spam": 1}


def test_export_formats():
    with tempfile.TemporaryDirectory() as tmp:
        log = ModerationLog(tmp)
        _seed(log)

        exported = json.loads(log.export("json", action="approved"))
        assert len(exported) == 1
        assert exported[0]["user_id"] == "u1"

        csv_text = log.export("csv")
        assert csv_text.splitlines()[0].startswith("id,timestamp,kind,action")
        assert len(csv_text.strip().splitlines()) == 4

        with pytest.raises(ValueError):
            log.export("xml")


def test_unreadable_lines_are_skipped():
    with tempfile.TemporaryDirectory() as tmp:
        log = ModerationLog(tmp)
        log.record(kind="moderation", action="approved")
        path = next(Path(tmp).glob("*.jsonl"))
        with path.open("a") as fh:
            fh.write("{not json\n")
        assert len(log.get_entries()) == 1


class BrokenLog:
    def record(self, **kwargs):
        raise OSError("disk full")


def test_record_safely_swallows_write_errors():
    assert record_safely(BrokenLog(), kind="moderation", action="approved") is None


def test_record_safely_without_log():
    assert record_safely(None, kind="moderation", action="approved") is None


def test_record_safely_returns_entry():
    with tempfile.TemporaryDirectory() as tmp:
        entry = record_safely(ModerationLog(tmp), kind="risk", action="analyzed")
        assert entry.kind == "risk"


def test_directory_created_on_first_write():
    with tempfile.TemporaryDirectory() as tmp:
        base = Path(tmp) / "nested" / "logs"
        log = ModerationLog(base)
        assert not base.exists()
        assert log.get_entries() == []
        log.record(kind="moderation", action="approved")
        assert len(list(base.glob("*.jsonl"))) == 1


def test_unusable_directory_fails_only_on_write():
    with tempfile.TemporaryDirectory() as tmp:
        blocker = Path(tmp) / "not-a-dir"
        blocker.write_text("")
        log = ModerationLog(blocker / "logs")
        assert log.get_entries() == []
        with pytest.raises(OSError):
            log.record(kind="moderation", action="approved")
        assert record_safely(log, kind="moderation", action="approved") is None
