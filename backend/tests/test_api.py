import json

import httpx
import pytest
from fastapi.testclient import TestClient

from testflow.main import app
from testflow.routers import imports

PETSTORE = {
    "swagger": "2.0",
    "info": {"title": "Petstore"},
    "host": "petstore.example.com",
    "paths": {"/pets": {"get": {}, "post": {}}, "/pets/{id}": {"get": {}}},
}


@pytest.fixture
def client():
    return TestClient(app)


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


class TestImportPlaywright:
    def test_returns_parsed_and_suite(self, client):
        code = "await page.goto('https://shop.test/home');\nawait page.getByText('Buy').click();"
        response = client.post("/import/playwright", json={"code": code, "suite_name": "Shop smoke"})
        assert response.status_code == 200
        body = response.json()
        assert body["parsed"]["baseUrl"] == "https://shop.test"
        assert body["step_count"] == 2
        suite = body["test_suite"]
        assert suite["id"].startswith("playwright-suite-")
        assert suite["suiteName"] == "Shop smoke"
        assert suite["type"] == "UI"
        assert len(suite["testCases"][0]["testSteps"]) == 2

    def test_nothing_recognized_is_not_an_error(self, client):
        response = client.post("/import/playwright", json={"code": "console.log('hi');"})
        assert response.status_code == 200
        assert response.json()["step_count"] == 0

    def test_blank_code(self, client):
        assert client.post("/import/playwright", json={"code": "   "}).status_code == 400


class TestImportCurl:
    def test_valid_command(self, client):
        response = client.post(
            "/import/curl", json={"command": "curl -d '{\"a\":1}' https://api.example.com/items"}
        )
        assert response.status_code == 200
        suite = response.json()["test_suite"]
        assert suite["id"].startswith("curl-suite-")
        data = suite["testCases"][0]["testData"][0]
        assert data["method"] == "POST"
        assert data["body"] == {"a": 1}

    def test_invalid_command(self, client):
        response = client.post("/import/curl", json={"command": "wget https://x.test"})
        assert response.status_code == 400


class TestImportSwagger:
    def test_inline_text(self, client):
        response = client.post("/import/swagger", json={"swagger_text": json.dumps(PETSTORE)})
        assert response.status_code == 200
        body = response.json()
        assert body["test_count"] == 2
        assert body["source"] == "inline spec"
        assert body["test_suite"]["id"].startswith("generated_")
        assert body["test_suite"]["baseUrl"] == "https://petstore.example.com"

    def test_not_a_spec(self, client):
        response = client.post("/import/swagger", json={"swagger_text": '{"hello": "world"}'})
        assert response.status_code == 400
        assert "swagger or openapi" in response.json()["detail"]

    def test_nothing_given(self, client):
        assert client.post("/import/swagger", json={}).status_code == 400

    def test_fetch_from_url(self, client, monkeypatch):
        def handler(request):
            assert str(request.url) == "https://petstore.example.com/swagger.json"
            return httpx.Response(200, json=PETSTORE)

        real_client = httpx.AsyncClient
        monkeypatch.setattr(
            imports.httpx,
            "AsyncClient",
            lambda **kwargs: real_client(transport=httpx.MockTransport(handler), **kwargs),
        )
        response = client.post(
            "/import/swagger", json={"swagger_url": "https://petstore.example.com/swagger.json"}
        )
        assert response.status_code == 200
        assert response.json()["source"] == "https://petstore.example.com/swagger.json"

    def test_fetch_failure(self, client, monkeypatch):
        real_client = httpx.AsyncClient
        monkeypatch.setattr(
            imports.httpx,
            "AsyncClient",
            lambda **kwargs: real_client(
                transport=httpx.MockTransport(lambda request: httpx.Response(404)), **kwargs
            ),
        )
        response = client.post("/import/swagger", json={"swagger_url": "https://x.test/missing.json"})
        assert response.status_code == 502


class TestAssertions:
    def test_paths_with_filter(self, client):
        response = client.post(
            "/assertions/paths", json={"data": {"user": {"email": "a@b.c", "id": 1}}, "filter": "mail"}
        )
        assert response.json() == {"paths": ["$.user.email"]}

    def test_suggest(self, client):
        response = client.post(
            "/assertions/suggest",
            json={
                "data": {"id": 7, "tags": ["a", "b"], "email": "x@y.com"},
                "selected_paths": ["$.id", "$.tags", "$.email"],
                "status_code": 200,
            },
        )
        assert response.json()["assertions"] == [
            {"type": "statusCode", "jsonPath": "$.", "expected": 200},
            {"type": "equals", "jsonPath": "$.id", "expected": 7},
            {"type": "length", "jsonPath": "$.tags", "expected": 2},
            {"type": "contains", "jsonPath": "$.email", "expected": "@"},
        ]


def test_validate_suite(client):
    response = client.post("/suites/validate", json={"suiteName": "X", "type": "SOAP", "testCases": "nope"})
    assert response.status_code == 200
    body = response.json()
    assert body["type"] == "API"
    assert body["testCases"] == []


def test_run_serves_app_with_configured_address(monkeypatch):
    from testflow import main

    calls = []
    monkeypatch.setattr(main.uvicorn, "run", lambda target, **kwargs: calls.append((target, kwargs)))
    monkeypatch.setattr(main.settings, "api_host", "0.0.0.0")
    monkeypatch.setattr(main.settings, "api_port", 9001)
    monkeypatch.setattr(main.settings, "log_level", "INFO")

    main.run()

    assert calls == [("testflow.main:app", {"host": "0.0.0.0", "port": 9001, "log_level": "info"})]
