"""Tests for the SonarQube Web API client."""

from __future__ import annotations

import time
from dataclasses import replace

import httpx
import pytest

from src.quality_gates.exceptions import GateQueryError
from src.quality_gates.sonar_client import SonarClient


def _status_response(status: str) -> httpx.Response:
    return httpx.Response(200, json={"projectStatus": {"status": status, "conditions": []}})


def _client(instance, handler, sleeps=None, **overrides) -> SonarClient:
    if overrides:
        instance = replace(instance, **overrides)
    return SonarClient(
        instance,
        transport=httpx.MockTransport(handler),
        sleep=(sleeps.append if sleeps is not None else (lambda _s: None)),
    )


class TestGetProjectStatus:
    def test_returns_raw_status(self, sonar_instance) -> None:
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return _status_response("OK")

        with _client(sonar_instance, handler) as client:
            assert client.get_project_status("org:app") == "OK"

        assert len(requests) == 1
        assert requests[0].url.path == "/api/qualitygates/project_status"
        assert requests[0].url.params["projectKey"] == "org:app"

    def test_token_sent_as_basic_auth_user(self, sonar_instance) -> None:
        seen: dict[str, str] = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["auth"] = request.headers.get("authorization", "")
            return _status_response("WARN")

        with _client(sonar_instance, handler, token="t") as client:
            client.get_project_status("org:app")
        assert seen["auth"] == "Basic dDo="

    def test_anonymous_sends_no_auth(self, sonar_instance) -> None:
        seen: dict[str, bool] = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["has_auth"] = "authorization" in request.headers
            return _status_response("OK")

        with _client(sonar_instance, handler, token="") as client:
            client.get_project_status("org:app")
        assert seen["has_auth"] is False

    def test_trailing_slash_in_url(self, sonar_instance) -> None:
        paths: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            paths.append(request.url.path)
            return _status_response("OK")

        with _client(sonar_instance, handler, url="https://sonar.test/") as client:
            client.get_project_status("k")
        assert paths == ["/api/qualitygates/project_status"]


class TestErrorTranslation:
    @pytest.mark.parametrize("code", [401, 403])
    def test_auth_failure(self, sonar_instance, code) -> None:
        with _client(sonar_instance, lambda r: httpx.Response(code)) as client:
            with pytest.raises(GateQueryError, match="Authentication"):
                client.get_project_status("org:app")

    def test_unknown_project(self, sonar_instance) -> None:
        with _client(sonar_instance, lambda r: httpx.Response(404, json={"errors": []})) as client:
            with pytest.raises(GateQueryError, match="not found") as excinfo:
                client.get_project_status("org:missing")
        assert excinfo.value.project_key == "org:missing"
        assert isinstance(excinfo.value.__cause__, httpx.HTTPStatusError)

    def test_server_error(self, sonar_instance) -> None:
        with _client(sonar_instance, lambda r: httpx.Response(500)) as client:
            with pytest.raises(GateQueryError, match="HTTP 500"):
                client.get_project_status("org:app")

    def test_connection_error(self, sonar_instance) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Connection refused", request=request)

        with _client(sonar_instance, handler) as client:
            with pytest.raises(GateQueryError, match="Could not reach"):
                client.get_project_status("org:app")

    def test_non_json_body(self, sonar_instance) -> None:
        with _client(sonar_instance, lambda r: httpx.Response(200, text="<html>login</html>")) as client:
            with pytest.raises(GateQueryError, match="non-JSON"):
                client.get_project_status("org:app")

    def test_missing_project_status(self, sonar_instance) -> None:
        with _client(sonar_instance, lambda r: httpx.Response(200, json={"unexpected": 1})) as client:
            with pytest.raises(GateQueryError, match="Malformed"):
                client.get_project_status("org:app")


class TestWaitForAnalysis:
    def test_no_wait_when_disabled(self, sonar_instance) -> None:
        paths: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            paths.append(request.url.path)
            return _status_response("OK")

        with _client(sonar_instance, handler, max_wait_time=0) as client:
            client.get_project_status("org:app")
        assert paths == ["/api/qualitygates/project_status"]

    def test_polls_until_queue_empty(self, sonar_instance) -> None:
        ce_responses = [
            {"queue": [{"id": "t1", "status": "PENDING"}]},
            {"queue": [], "current": {"id": "t1", "status": "IN_PROGRESS"}},
            {"queue": [], "current": {"id": "t1", "status": "SUCCESS"}},
        ]
        paths: list[str] = []
        sleeps: list[float] = []

        def handler(request: httpx.Request) -> httpx.Response:
            paths.append(request.url.path)
            if request.url.path == "/api/ce/component":
                assert request.url.params["component"] == "org:app"
                return httpx.Response(200, json=ce_responses.pop(0))
            return _status_response("ERROR")

        with _client(
            sonar_instance, handler, sleeps, max_wait_time=60000, time_to_wait=250
        ) as client:
            assert client.get_project_status("org:app") == "ERROR"

        assert sleeps == [0.25, 0.25]
        assert paths == [
            "/api/ce/component",
            "/api/ce/component",
            "/api/ce/component",
            "/api/qualitygates/project_status",
        ]

    def test_no_task_history_is_not_pending(self, sonar_instance) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/api/ce/component":
                return httpx.Response(200, json={"queue": []})
            return _status_response("OK")

        with _client(sonar_instance, handler, max_wait_time=1000) as client:
            assert client.get_project_status("org:app") == "OK"

    def test_gives_up_after_max_wait_time(self, sonar_instance) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"queue": [{"id": "t1", "status": "PENDING"}]})

        client = SonarClient(
            replace(sonar_instance, max_wait_time=5, time_to_wait=2),
            transport=httpx.MockTransport(handler),
            sleep=time.sleep,
        )
        with client:
            with pytest.raises(GateQueryError, match="did not finish"):
                client.get_project_status("org:app")
