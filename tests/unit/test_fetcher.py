"""Tests for PipelineFetcher — served by httpx.MockTransport."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import httpx
import pytest
from pydantic import SecretStr

from buildlight.bridge.fetcher import PipelineFetcher, TransportError
from buildlight.config import MonitorSettings
from buildlight.core.classifier import classify
from buildlight.models.status import BuildStatus

API = "https://gitlab.example.com/api/v4"


def _pipeline(ref: str, status: str, sha: str = "a" * 40, name: str = "Ada") -> dict[str, Any]:
    return {"id": 1, "ref": ref, "status": status, "sha": sha, "user": {"name": name}}


def _fetcher(
    handler: Callable[[httpx.Request], httpx.Response],
    project_id: str = "1234",
) -> PipelineFetcher:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return PipelineFetcher(API, project_id, "s3cret", client=client)


def _respond(status_code: int = 200, **kwargs: Any) -> Callable[[httpx.Request], httpx.Response]:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, **kwargs)

    return handler


# ---------------------------------------------------------------------------
# Test: request shape
# ---------------------------------------------------------------------------


class TestRequest:
    def test_sends_token_header_and_ref(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=[])

        _fetcher(handler).fetch("develop")

        assert len(seen) == 1
        request = seen[0]
        assert request.method == "GET"
        assert request.headers["PRIVATE-TOKEN"] == "s3cret"
        assert request.url.path == "/api/v4/projects/1234/pipelines"
        assert request.url.params["ref"] == "develop"

    def test_project_path_is_url_encoded(self):
        fetcher = _fetcher(_respond(json=[]), project_id="group/sub/project")
        assert fetcher.pipelines_url == f"{API}/projects/group%2Fsub%2Fproject/pipelines"

    def test_trailing_slash_on_api_url(self):
        fetcher = PipelineFetcher(API + "/", "7", "t", client=httpx.Client())
        assert fetcher.pipelines_url == f"{API}/projects/7/pipelines"

    def test_from_settings(self):
        settings = MonitorSettings(
            gitlab_api_private_token=SecretStr("tok"),
            gitlab_project_id="99",
            _env_file=None,
        )
        fetcher = PipelineFetcher.from_settings(settings, client=httpx.Client())
        assert fetcher.pipelines_url == "https://gitlab.com/api/v4/projects/99/pipelines"


# ---------------------------------------------------------------------------
# Test: selection
# ---------------------------------------------------------------------------


class TestSelection:
    def test_picks_first_matching_ref(self):
        body = [
            _pipeline("feature/x", "failed"),
            _pipeline("develop", "running", sha="1" * 40, name="Newest"),
            _pipeline("develop", "success", sha="2" * 40, name="Older"),
        ]
        record = _fetcher(_respond(json=body)).fetch("develop")

        assert record is not None
        assert record.status == "running"
        assert record.author == "Newest"
        assert record.sha == "1" * 40

    def test_no_match_is_none(self):
        body = [_pipeline("main", "success")]
        assert _fetcher(_respond(json=body)).fetch("develop") is None

    def test_empty_list_is_none(self):
        assert _fetcher(_respond(json=[])).fetch("develop") is None

    def test_null_status_is_kept_and_classified_pending(self):
        body = [{"ref": "develop", "status": None, "sha": "abc"}]
        record = _fetcher(_respond(json=body)).fetch("develop")

        assert record is not None
        assert record.status is None
        assert classify(record) == BuildStatus.PENDING


# ---------------------------------------------------------------------------
# Test: failures surface as TransportError
# ---------------------------------------------------------------------------


class TestTransportErrors:
    def test_non_2xx_carries_reason_code_and_body(self):
        fetcher = _fetcher(_respond(401, text='{"message":"401 Unauthorized"}'))
        with pytest.raises(TransportError) as excinfo:
            fetcher.fetch("develop")
        message = str(excinfo.value)
        assert "Unauthorized (401)" in message
        assert "401 Unauthorized" in message

    def test_server_error(self):
        with pytest.raises(TransportError, match=r"\(503\)"):
            _fetcher(_respond(503, text="down")).fetch("develop")

    def test_network_failure(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Name or service not known", request=request)

        with pytest.raises(TransportError, match="ConnectError"):
            _fetcher(handler).fetch("develop")

    def test_timeout(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(TransportError, match="ReadTimeout"):
            _fetcher(handler).fetch("develop")

    def test_body_not_json(self):
        with pytest.raises(TransportError, match="Malformed"):
            _fetcher(_respond(text="<html>maintenance</html>")).fetch("develop")

    def test_body_not_a_list(self):
        with pytest.raises(TransportError, match="expected a list"):
            _fetcher(_respond(json={"message": "nope"})).fetch("develop")

    def test_entry_not_an_object(self):
        with pytest.raises(TransportError, match="not an object"):
            _fetcher(_respond(json=["develop"])).fetch("develop")

    def test_matching_entry_missing_fields(self):
        body = [{"ref": "develop", "status": "success"}]
        with pytest.raises(TransportError, match="Malformed pipeline entry"):
            _fetcher(_respond(json=body)).fetch("develop")

    def test_error_is_a_runtime_error(self):
        assert issubclass(TransportError, RuntimeError)


# ---------------------------------------------------------------------------
# Test: client ownership
# ---------------------------------------------------------------------------


class TestClientOwnership:
    def test_injected_client_left_open(self):
        client = httpx.Client(transport=httpx.MockTransport(_respond(json=[])))
        with PipelineFetcher(API, "1", "t", client=client):
            pass
        assert client.is_closed is False

    def test_owned_client_closed(self):
        fetcher = PipelineFetcher(API, "1", "t")
        fetcher.close()
        assert fetcher._client.is_closed is True
