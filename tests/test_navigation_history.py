# LinkGuard
# Copyright (C) 2025 Phoenix Link (Pty) Ltd. All Rights Reserved.
"""Tests for the navigation log."""

import threading

from linkguard.navigation.history import NavigationLog
from linkguard.navigation.url import parse_url

A = parse_url("https://a.example.com/")
B = parse_url("https://b.example.com/")
C = parse_url("https://c.example.com/")


class TestNavigationLog:
    """Tests for NavigationLog ordering and dedup."""

    def test_dedup_keeps_first_seen_order(self):
        log = NavigationLog()
        for url in (A, B, A, C):
            log.record(url)
        assert log.snapshot() == [A, B, C]

    def test_record_reports_append(self):
        log = NavigationLog()
        assert log.record(A) is True
        assert log.record(A) is False

    def test_blank_page_never_recorded(self):
        log = NavigationLog()
        assert log.record(parse_url("about:blank")) is False
        assert log.snapshot() == []
        assert len(log) == 0

    def test_same_host_different_path_are_distinct(self):
        log = NavigationLog()
        log.record(parse_url("https://a.example.com/one"))
        log.record(parse_url("https://a.example.com/two"))
        assert len(log) == 2

    def test_contains(self):
        log = NavigationLog()
        log.record(A)
        assert A in log
        assert A.raw in log
        assert B not in log

    def test_snapshot_is_a_copy(self):
        log = NavigationLog()
        log.record(A)
        snap = log.snapshot()
        snap.append(B)
        assert log.snapshot() == [A]

    def test_clear(self):
        log = NavigationLog()
        log.record(A)
        log.clear()
        assert log.snapshot() == []
        assert log.record(A) is True

    def test_concurrent_records(self):
        log = NavigationLog()
        urls = [parse_url(f"https://h{i}.example.com/") for i in range(50)]

        def _record():
            for url in urls:
                log.record(url)

        threads = [threading.Thread(target=_record) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(log) == 50
        assert set(log.snapshot()) == set(urls)
