from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from codebox import Dispatcher, ExecutionResult, ExecutorSettings, Language
from codebox.api import create_app
from codebox.execution.types import NO_OUTPUT_SENTINEL

AUTH = {"Authorization": "Bearer secret"}


class _ExplodingEngine:
    def execute(self, code: str, stdin: str = "") -> ExecutionResult:
        raise RuntimeError("workspace allocation failed")


@pytest.fixture
def temp_dir(tmp_path: Path) -> Path:
    return tmp_path


@pytest.fixture
def client(temp_dir: Path) -> TestClient:
    settings = ExecutorSettings(timeout_seconds=5, temp_dir=str(temp_dir), api_tokens=["secret"])
    return TestClient(create_app(settings))


def test_execute_python_success(client: TestClient) -> None:
    response = client.post(
        "/api/execute",
        json={"code": "print(input().upper())", "language": "python", "input": "shout"},
        headers=AUTH,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["output"] == "SHOUT"
    assert "error" not in body
    assert isinstance(body["executionTime"], int)


def test_execute_silent_program_returns_sentinel(client: TestClient) -> None:
    response = client.post("/api/execute", json={"code": "x = 1", "language": "python"}, headers=AUTH)

    assert response.json()["output"] == NO_OUTPUT_SENTINEL


def test_execution_failure_is_still_200(client: TestClient) -> None:
    response = client.post("/api/execute", json={"code": "1 / 0", "language": "Python"}, headers=AUTH)

    assert response.status_code == 200
    assert "ZeroDivisionError" in response.json()["error"]


def test_unsupported_language_is_200(client: TestClient) -> None:
    response = client.post("/api/execute", json={"code": "puts 1", "language": "ruby"}, headers=AUTH)

    assert response.status_code == 200
    body = response.json()
    assert body["output"] == ""
    assert body["error"] == "Execution for ruby is not supported yet"


@pytest.mark.parametrize(
    "payload",
    [{"language": "python"}, {"code": "print(1)"}, {"code": "", "language": "python"}, {}],
)
def test_missing_fields_are_400_and_spawn_nothing(client: TestClient, temp_dir: Path, payload: dict) -> None:
    response = client.post("/api/execute", json=payload, headers=AUTH)

    assert response.status_code == 400
    assert response.json() == {"output": "", "error": "Code and language are required", "executionTime": 0}
    assert list(temp_dir.iterdir()) == []


def test_malformed_body_is_400(client: TestClient) -> None:
    response = client.post(
        "/api/execute",
        content=b"{not json",
        headers={**AUTH, "Content-Type": "application/json"},
    )

    assert response.status_code == 400


@pytest.mark.parametrize("headers", [{}, {"Authorization": "Bearer wrong"}, {"Authorization": "Basic secret"}])
def test_unauthenticated_caller_is_401(client: TestClient, headers: dict) -> None:
    response = client.post("/api/execute", json={"code": "print(1)", "language": "python"}, headers=headers)

    assert response.status_code == 401
    assert response.json()["error"] == "Unauthorized"


@pytest.mark.parametrize("method", ["get", "put", "delete"])
def test_non_post_is_405(client: TestClient, method: str) -> None:
    response = getattr(client, method)("/api/execute", headers=AUTH)

    assert response.status_code == 405
    assert response.json() == {"output": "", "error": "Method not allowed", "executionTime": 0}


def test_internal_error_is_500(temp_dir: Path) -> None:
    settings = ExecutorSettings(temp_dir=str(temp_dir))
    dispatcher = Dispatcher(settings, engines={Language.PYTHON: _ExplodingEngine()})
    client = TestClient(create_app(dispatcher=dispatcher))

    response = client.post("/api/execute", json={"code": "print(1)", "language": "python"})

    assert response.status_code == 500
    assert response.json() == {"output": "", "error": "workspace allocation failed", "executionTime": 0}


def test_auth_disabled_without_tokens(temp_dir: Path) -> None:
    client = TestClient(create_app(ExecutorSettings(temp_dir=str(temp_dir))))

    response = client.post("/api/execute", json={"code": "print('open')", "language": "python"})

    assert response.status_code == 200
    assert response.json()["output"] == "open"


def test_custom_prefix(temp_dir: Path) -> None:
    client = TestClient(create_app(ExecutorSettings(temp_dir=str(temp_dir), api_prefix="/v1")))

    assert client.get("/v1/health").json() == {"ok": True}
    assert client.get("/api/health").status_code == 404


def test_languages_report(client: TestClient) -> None:
    response = client.get("/api/languages")

    assert response.status_code == 200
    rows = {row["language"]: row for row in response.json()}
    assert set(rows) == {"javascript", "python", "java"}
    assert rows["java"]["commands"] == ["javac", "java"]
    assert rows["python"]["extension"] == "py"
    assert rows["python"]["available"] is True
