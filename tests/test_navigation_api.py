# LinkGuard
# Copyright (C) 2025 Phoenix Link (Pty) Ltd. All Rights Reserved.
"""Tests for the navigation API routes."""

import asyncio

import httpx
import pytest
from fastapi.testclient import TestClient

from linkguard import __version__
from linkguard.api.server import create_app
from linkguard.navigation.config import GuardConfig
from linkguard.navigation.gate import Outcome, PendingDecision
from linkguard.navigation.guard import NavigationGuard
from linkguard.navigation.presenters import WebPresenter
from linkguard.navigation.rules import RuleSet
from linkguard.navigation.url import parse_url


def _guard(timeout_s=5.0):
    config = GuardConfig(
        rules=RuleSet.build(whitelist_patterns=["partner.app.link"], restricted_patterns=["*all.app.link"]),
        confirmation_timeout_s=timeout_s,
    )
    return NavigationGuard(config, presenter=WebPresenter())


@pytest.fixture
def guard():
    return _guard()


@pytest.fixture
def client(guard):
    return TestClient(create_app(guard=guard))


class TestSimpleEndpoints:
    """Endpoints that never wait on a prompt."""

    def test_health(self, client):
        resp = client.get("/api/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok", "version": __version__}

    def test_classify(self, client):
        resp = client.post("/api/navigation/classify", json={"url": "https://promo.app.link/x"})
        assert resp.status_code == 200
        data = resp.json()
        assert data["classification"] == "confirm"
        assert data["rule_kind"] == "restricted_pattern"
        assert data["rule_value"] == "*all.app.link"

    def test_classify_whitelisted(self, client):
        data = client.post("/api/navigation/classify", json={"url": "https://partner.app.link/"}).json()
        assert data["classification"] == "allow"
        assert data["rule_kind"] == "whitelist_pattern"

    def test_classify_does_not_record(self, client, guard):
        client.post("/api/navigation/classify", json={"url": "https://example.com/"})
        assert guard.log_snapshot() == []

    def test_allowed_attempt_and_log(self, client):
        resp = client.post("/api/navigation/attempt", json={"url": "https://example.com/"})
        assert resp.json() == {
            "url": "https://example.com/",
            "classification": "allow",
            "outcome": "allow",
        }
        client.post("/api/navigation/attempt", json={"url": "https://example.com/"})
        client.post("/api/navigation/attempt", json={"url": "https://sub.example.com/", "main_frame": False})

        log = client.get("/api/navigation/log").json()
        assert log == {"urls": ["https://example.com/"], "count": 1}

    def test_attempt_classifies_once(self, client, guard, monkeypatch):
        def no_second_pass(url):
            raise AssertionError("attempt must not re-evaluate the URL")

        monkeypatch.setattr(guard, "evaluate", no_second_pass)
        data = client.post("/api/navigation/attempt", json={"url": "https://partner.app.link/"}).json()
        assert data["classification"] == "allow"
        assert data["outcome"] == "allow"

    def test_audit_from_memory(self, client):
        client.post("/api/navigation/attempt", json={"url": "https://example.com/"})
        data = client.get("/api/navigation/audit").json()
        assert data["source"] == "memory"
        assert data["count"] == 1
        assert data["entries"][0]["event_type"] == "allowed"
        assert data["entries"][0]["rule_matched"] == "default"
        assert data["stats"]["allowed"] == 1

    def test_audit_from_file(self, tmp_path):
        config = GuardConfig(rules=RuleSet(), audit_log_path=str(tmp_path / "audit.log"))
        guard = NavigationGuard(config)
        client = TestClient(create_app(guard=guard))
        for host in ("a.com", "b.com", "c.com"):
            client.post("/api/navigation/attempt", json={"url": f"https://{host}/"})

        data = client.get("/api/navigation/audit", params={"limit": 2}).json()
        assert data["source"] == "file"
        assert [e["host"] for e in data["entries"]] == ["b.com", "c.com"]

    def test_attempt_requires_url(self, client):
        assert client.post("/api/navigation/attempt", json={}).status_code == 422

    def test_status(self, client):
        data = client.get("/api/navigation/status").json()
        assert data["rules"]["restricted_patterns"] == 1
        assert data["rules"]["whitelist_patterns"] == 1
        assert data["confirmation_timeout_s"] == 5.0
        assert data["gate"]["pending"] == 0
        assert data["log_size"] == 0

    def test_reset(self, client, guard):
        client.post("/api/navigation/attempt", json={"url": "https://example.com/"})
        data = client.post("/api/navigation/reset").json()
        assert data == {"reset": True, "denied_pending": 0}
        assert guard.log_snapshot() == []

    def test_answer_unknown_decision(self, client):
        resp = client.post("/api/navigation/pending/nope", json={"allow": True})
        assert resp.status_code == 404

    def test_answer_already_resolved(self, client, guard, monkeypatch):
        decision = PendingDecision("done", parse_url("https://promo.app.link/x"))
        decision.resolve(Outcome.DENY)
        monkeypatch.setattr(guard.gate, "get_pending", lambda _id: decision)

        resp = client.post("/api/navigation/pending/done", json={"allow": True})
        assert resp.status_code == 409

    def test_unconfigured_app(self):
        app = create_app(guard=_guard())
        app.state.guard = None
        resp = TestClient(app).get("/api/navigation/log")
        assert resp.status_code == 503


class TestConfirmationFlow:
    """A gated attempt answered through the pending endpoints."""

    @staticmethod
    async def _wait_for_pending(client):
        for _ in range(200):
            data = (await client.get("/api/navigation/pending")).json()
            if data["count"]:
                return data["pending"]
            await asyncio.sleep(0.01)
        raise AssertionError("no pending decision")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("allow, expected", [(True, "allow"), (False, "deny")])
    async def test_answer_pending(self, allow, expected):
        guard = _guard()
        transport = httpx.ASGITransport(app=create_app(guard=guard))
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
            attempt = asyncio.create_task(
                client.post("/api/navigation/attempt", json={"url": "https://promo.app.link/x"})
            )
            pending = await self._wait_for_pending(client)
            assert pending[0]["host"] == "promo.app.link"
            assert pending[0]["message"] == "Do you really want to visit promo.app.link?"
            assert pending[0]["stay_label"] == "Stay"

            answer = await client.post(
                f"/api/navigation/pending/{pending[0]['id']}", json={"allow": allow}
            )
            assert answer.status_code == 200
            assert answer.json()["outcome"] == expected

            resp = await attempt
            assert resp.json() == {
                "url": "https://promo.app.link/x",
                "classification": "confirm",
                "outcome": expected,
            }

        assert [u.raw for u in guard.log_snapshot()] == ["https://promo.app.link/x"]

    @pytest.mark.asyncio
    async def test_reset_denies_pending(self):
        guard = _guard(timeout_s=None)
        transport = httpx.ASGITransport(app=create_app(guard=guard))
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
            attempt = asyncio.create_task(
                client.post("/api/navigation/attempt", json={"url": "https://promo.app.link/x"})
            )
            await self._wait_for_pending(client)

            reset = (await client.post("/api/navigation/reset")).json()
            assert reset["denied_pending"] == 1
            assert (await attempt).json()["outcome"] == "deny"
