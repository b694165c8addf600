# LinkGuard
# Copyright (C) 2025 Phoenix Link (Pty) Ltd. All Rights Reserved.
"""Tests for the navigation decision audit trail."""

import json

from linkguard.navigation.audit import AuditEntry, AuditLogger


def _entry(outcome="allow", classification="allow", host="example.com"):
    return AuditEntry.decision(
        url=f"https://{host}/",
        host=host,
        scheme="https",
        main_frame=True,
        classification=classification,
        outcome=outcome,
        rule_matched="default",
    )


class TestAuditEntry:
    """Tests for AuditEntry construction."""

    def test_event_types(self):
        assert _entry().event_type == "allowed"
        assert _entry("allow", "confirm").event_type == "confirmed"
        assert _entry("deny", "confirm").event_type == "denied"
        assert _entry("deny", "").event_type == "denied"

    def test_malformed(self):
        entry = AuditEntry.malformed(None, True, "empty")
        assert entry.event_type == "malformed"
        assert entry.url == ""
        assert entry.outcome == "allow"

    def test_to_json(self):
        data = json.loads(_entry().to_json())
        assert data["event_type"] == "allowed"
        assert data["host"] == "example.com"


class TestAuditLogger:
    """Tests for AuditLogger."""

    def test_in_memory_only(self):
        audit = AuditLogger()
        audit.log(_entry())
        assert audit.path is None
        assert audit.entry_count == 1
        assert audit.read_recent()[0].host == "example.com"
        assert audit.read_file() == []

    def test_writes_json_lines(self, tmp_path):
        path = tmp_path / "logs" / "audit.log"
        with AuditLogger(path) as audit:
            audit.log(_entry(host="a.com"))
            audit.log(_entry("deny", "confirm", host="b.com"))

        lines = path.read_text().splitlines()
        assert len(lines) == 2
        assert json.loads(lines[1])["event_type"] == "denied"

        reread = AuditLogger(path).read_file()
        assert [e.host for e in reread] == ["a.com", "b.com"]

    def test_read_file_skips_garbage(self, tmp_path):
        path = tmp_path / "audit.log"
        path.write_text("not json\n" + _entry().to_json() + "\n")
        assert len(AuditLogger(path).read_file()) == 1

    def test_ring_is_bounded(self):
        audit = AuditLogger(max_recent=3)
        for i in range(5):
            audit.log(_entry(host=f"h{i}.com"))
        assert [e.host for e in audit.read_recent(10)] == ["h2.com", "h3.com", "h4.com"]
        assert audit.entry_count == 5

    def test_stats(self):
        audit = AuditLogger()
        audit.log(_entry(host="a.com"))
        audit.log(_entry("allow", "confirm", host="b.com"))
        audit.log(_entry("deny", "confirm", host="b.com"))
        audit.log(AuditEntry.malformed("", True, "empty"))

        stats = audit.get_stats()
        assert stats == {
            "total": 4,
            "allowed": 1,
            "confirmed": 1,
            "denied": 1,
            "malformed": 1,
            "unique_hosts": 2,
        }

    def test_read_file_tail_across_sessions(self, tmp_path):
        path = tmp_path / "audit.log"
        with AuditLogger(path) as first:
            for i in range(3):
                first.log(_entry(host=f"old{i}.com"))
        with AuditLogger(path) as second:
            second.log(_entry(host="new.com"))
            assert [e.host for e in second.read_file(2)] == ["old2.com", "new.com"]
            assert second.read_file(0) == []

    def test_history_prefers_file(self, tmp_path):
        path = tmp_path / "audit.log"
        with AuditLogger(path) as earlier:
            earlier.log(_entry(host="earlier.com"))
        with AuditLogger(path) as audit:
            audit.log(_entry(host="now.com"))
            assert [e.host for e in audit.history()] == ["earlier.com", "now.com"]

        memory_only = AuditLogger()
        memory_only.log(_entry(host="now.com"))
        assert [e.host for e in memory_only.history()] == ["now.com"]
