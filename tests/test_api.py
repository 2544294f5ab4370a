"""Tests for the HTTP and WebSocket surface, with fake oracles."""

from __future__ import annotations

import asyncio
import json

import pytest
from fastapi.testclient import TestClient

from bimasathi.api.ws_session import dispatch_action
from bimasathi.catalog.policies import DEFAULT_CATALOG
from bimasathi.core.controller import SessionBusyError, SessionController, SessionPhaseError
from bimasathi.domain.enums import SessionPhase
from bimasathi.graph.runner import AnalysisRunner
from bimasathi.main import create_app

from tests.fakes import FakeQuestionOracle, FakeRecommendationOracle, analysis, reply


def _client(*replies, analyses=None) -> TestClient:
    app = create_app(
        question_oracle=FakeQuestionOracle(*replies),
        recommendation_oracle=FakeRecommendationOracle(analyses or []),
    )
    return TestClient(app)


@pytest.fixture
def client() -> TestClient:
    return _client(
        reply("What is your age?", ["18-30", "31-45"]),
        reply(complete=True),
        analyses=[analysis("pol_002", 80), analysis("pol_001", 95), analysis("pol_999", 99)],
    )


def _new_session(client: TestClient) -> str:
    response = client.post("/api/sessions")
    assert response.status_code == 201
    return response.json()["session_id"]


class TestCatalogEndpoint:
    def test_list_policies(self, client: TestClient) -> None:
        body = client.get("/api/policies").json()
        assert body["count"] == 5
        assert body["policies"][0]["policyName"] == "Optima Secure"


class TestSessionEndpoints:
    def test_create_and_get(self, client: TestClient) -> None:
        sid = _new_session(client)
        body = client.get(f"/api/sessions/{sid}").json()
        assert body["phase"] == "landing"
        assert body["messages"] == []

    def test_unknown_session_is_404(self, client: TestClient) -> None:
        assert client.get("/api/sessions/nope").status_code == 404
        assert client.post("/api/sessions/nope/start").status_code == 404

    def test_start_twice_conflicts(self, client: TestClient) -> None:
        sid = _new_session(client)
        assert client.post(f"/api/sessions/{sid}/start").status_code == 200
        assert client.post(f"/api/sessions/{sid}/start").status_code == 409

    def test_submit_before_start_conflicts(self, client: TestClient) -> None:
        sid = _new_session(client)
        response = client.post(f"/api/sessions/{sid}/messages", json={"text": "Myself"})
        assert response.status_code == 409

    def test_blank_submit_leaves_session_unchanged(self, client: TestClient) -> None:
        sid = _new_session(client)
        started = client.post(f"/api/sessions/{sid}/start").json()
        body = client.post(f"/api/sessions/{sid}/messages", json={"text": "   "}).json()
        assert body["messages"] == started["messages"]

    def test_full_flow(self, client: TestClient) -> None:
        sid = _new_session(client)
        body = client.post(f"/api/sessions/{sid}/start").json()
        assert body["phase"] == "assessment"
        assert body["quick_replies"] == ["Myself", "My Family (Wife & Kids)", "Parents", "Everyone"]

        body = client.post(f"/api/sessions/{sid}/quick-replies", json={"option": "Myself"}).json()
        assert body["phase"] == "assessment"
        assert body["messages"][-1]["content"] == "What is your age?"
        assert body["quick_replies"] == ["18-30", "31-45"]

        body = client.post(f"/api/sessions/{sid}/messages", json={"text": "29"}).json()
        assert body["phase"] == "results"
        assert [r["policy"]["id"] for r in body["recommendations"]] == ["pol_001", "pol_002"]
        assert body["recommendations"][0]["analysis"]["matchScore"] == 95

        text = client.get(f"/api/sessions/{sid}/results/text").text
        assert "#1 Optima Secure" in text

        body = client.post(f"/api/sessions/{sid}/reset").json()
        assert body["phase"] == "landing"
        assert body["messages"] == []
        assert body["recommendations"] == []

    def test_draft_is_recorded_and_cleared(self, client: TestClient) -> None:
        sid = _new_session(client)
        client.post(f"/api/sessions/{sid}/start")
        body = client.put(f"/api/sessions/{sid}/draft", json={"text": "My"}).json()
        assert body["pending_input"] == "My"

        body = client.post(f"/api/sessions/{sid}/messages", json={"text": "Myself"}).json()
        assert body["pending_input"] == ""

        client.put(f"/api/sessions/{sid}/draft", json={"text": "half typed"})
        body = client.post(f"/api/sessions/{sid}/reset").json()
        assert body["pending_input"] == ""

    def test_delete(self, client: TestClient) -> None:
        sid = _new_session(client)
        assert client.delete(f"/api/sessions/{sid}").status_code == 204
        assert client.delete(f"/api/sessions/{sid}").status_code == 404

    def test_health(self, client: TestClient) -> None:
        _new_session(client)
        body = client.get("/health").json()
        assert body["status"] == "ok"
        assert body["policies"] == 5
        assert body["total_sessions"] == 1


class TestLiveSession:
    def test_websocket_flow(self) -> None:
        client = _client(reply(complete=True), analyses=[analysis("pol_005", 88)])
        with client.websocket_connect("/ws/session") as ws:
            first = ws.receive_json()
            assert first["type"] == "session_snapshot"
            assert first["session"]["phase"] == "landing"

            ws.send_json({"action": "start"})
            assert ws.receive_json()["session"]["phase"] == "assessment"

            ws.send_json({"action": "submit", "text": "Myself"})
            phases = [ws.receive_json()["session"]["phase"] for _ in range(3)]
            assert phases == ["assessment", "analysis", "results"]

            ws.send_text("ping")
            assert ws.receive_text() == "pong"

    def test_websocket_rejects_unknown_action(self) -> None:
        client = _client()
        with client.websocket_connect("/ws/session") as ws:
            ws.receive_json()
            ws.send_json({"action": "dance"})
            body = ws.receive_json()
            assert body["status"] == "error"

    def test_websocket_submit_before_start(self) -> None:
        client = _client()
        with client.websocket_connect("/ws/session") as ws:
            ws.receive_json()
            ws.send_json({"action": "submit", "text": "hello"})
            assert ws.receive_json()["status"] == "error"


class TestDispatchAction:
    @staticmethod
    async def _started(oracle: FakeQuestionOracle) -> SessionController:
        runner = AnalysisRunner(FakeRecommendationOracle(), DEFAULT_CATALOG)
        controller = SessionController(question_oracle=oracle, analysis_runner=runner)
        await controller.start()
        return controller

    @pytest.mark.asyncio
    async def test_answer_runs_in_background_and_refuses_overlap(self) -> None:
        oracle = FakeQuestionOracle(reply("What is your age?"))
        oracle.gate = asyncio.Event()
        controller = await self._started(oracle)

        task = await dispatch_action(controller, json.dumps({"action": "submit", "text": "Myself"}))
        assert task is not None
        assert controller.busy is True

        with pytest.raises(SessionBusyError):
            await dispatch_action(controller, json.dumps({"action": "quick_reply", "text": "Parents"}))

        oracle.gate.set()
        assert await task is True
        assert controller.busy is False
        assert controller.snapshot().messages[-1].content == "What is your age?"

    @pytest.mark.asyncio
    async def test_reset_while_answer_in_flight(self) -> None:
        oracle = FakeQuestionOracle(reply("What is your age?"))
        oracle.gate = asyncio.Event()
        controller = await self._started(oracle)

        task = await dispatch_action(controller, json.dumps({"action": "submit", "text": "Myself"}))
        assert await dispatch_action(controller, json.dumps({"action": "reset"})) is None
        oracle.gate.set()
        await task

        snap = controller.snapshot()
        assert snap.phase == SessionPhase.LANDING
        assert snap.messages == []
        assert snap.busy is False

    @pytest.mark.asyncio
    async def test_answer_outside_assessment_rejected(self) -> None:
        runner = AnalysisRunner(FakeRecommendationOracle(), DEFAULT_CATALOG)
        controller = SessionController(question_oracle=FakeQuestionOracle(), analysis_runner=runner)
        with pytest.raises(SessionPhaseError):
            await dispatch_action(controller, json.dumps({"action": "submit", "text": "hi"}))

    @pytest.mark.asyncio
    async def test_blank_answer_is_ignored(self) -> None:
        controller = await self._started(FakeQuestionOracle())
        assert await dispatch_action(controller, json.dumps({"action": "submit", "text": "  "})) is None
        assert len(controller.snapshot().messages) == 2
