import json

import pytest

from testflow.translators.swagger_translator import (
    SwaggerImportError,
    SwaggerTranslator,
    to_placeholder_path,
)

PETSTORE_V2 = {
    "swagger": "2.0",
    "info": {"title": "Petstore", "version": "1.0"},
    "host": "petstore.example.com",
    "basePath": "/v2",
    "schemes": ["http"],
    "consumes": ["application/xml"],
    "paths": {
        "/pets": {
            "get": {"summary": "List pets"},
            "post": {"operationId": "createPet", "consumes": ["application/x-www-form-urlencoded"]},
            "parameters": [{"name": "limit", "in": "query"}],
        },
        "/pets/{petId}": {
            "get": {},
            "delete": {"summary": "Delete pet"},
            "put": {"summary": "Update pet"},
        },
    },
}

ORDERS_V3_YAML = """
openapi: 3.0.1
info:
  title: Orders
servers:
  - url: https://orders.example.com/api
paths:
  /users/{id}/orders/{orderId}:
    get:
      summary: Get order
    patch:
      requestBody:
        content:
          application/merge-patch+json: {}
"""


@pytest.fixture
def translator():
    return SwaggerTranslator()


class TestTranslate:
    def test_counts(self, translator):
        suite = translator.translate(PETSTORE_V2)
        assert len(suite.test_cases) == 2
        assert sum(len(case.test_data) for case in suite.test_cases) == 5

    def test_every_request_asserts_200(self, translator):
        suite = translator.translate(PETSTORE_V2)
        for case in suite.test_cases:
            for data in case.test_data:
                assert [a.to_document() for a in data.assertions] == [
                    {"type": "statusCode", "jsonPath": "$.", "expected": 200}
                ]

    def test_case_and_request_names(self, translator):
        suite = translator.translate(PETSTORE_V2)
        pets, pet = suite.test_cases
        assert pets.name == "Test /pets"
        assert pets.type == "REST"
        assert pets.status == "Not Started"
        assert [(d.method, d.name) for d in pets.test_data] == [("GET", "List pets"), ("POST", "createPet")]
        assert [d.name for d in pet.test_data] == ["GET /pets/{petId}", "Delete pet", "Update pet"]
        assert pet.test_data[0].endpoint == "/pets/{{petId}}"

    def test_content_type_precedence(self, translator):
        pets = translator.translate(PETSTORE_V2).test_cases[0]
        assert pets.test_data[0].headers == {"Content-Type": "application/xml"}
        assert pets.test_data[1].headers == {"Content-Type": "application/x-www-form-urlencoded"}

    def test_default_content_type_is_configurable(self):
        document = {"openapi": "3.0.0", "info": {"title": "T"}, "paths": {"/a": {"get": {}}}}
        assert SwaggerTranslator().translate(document).test_cases[0].test_data[0].headers == {
            "Content-Type": "application/json"
        }
        custom = SwaggerTranslator(default_content_type="text/plain").translate(document)
        assert custom.test_cases[0].test_data[0].headers == {"Content-Type": "text/plain"}

    def test_suite_metadata(self, translator):
        suite = translator.translate(PETSTORE_V2)
        assert suite.suite_name == "Petstore Auto Suite"
        assert suite.application_name == "Petstore"
        assert suite.type == "API"
        assert suite.status == "Not Started"
        assert suite.base_url == "http://petstore.example.com/v2"
        assert suite.tags == [{"swaggerVersion": "2.0"}, {"suiteType": "@generated"}]

    def test_swagger2_base_url_defaults(self):
        assert SwaggerTranslator.base_url({"swagger": "2.0"}) == "https://localhost"

    def test_ref_is_passed_through(self, translator):
        document = {
            "openapi": "3.0.0",
            "info": {"title": "Refs"},
            "paths": {"/a": {"$ref": "#/components/pathItems/A"}, "/b": {"get": {"$ref": "#/x"}}},
        }
        suite = translator.translate(document)
        assert [len(case.test_data) for case in suite.test_cases] == [0, 1]


class TestLoadText:
    def test_yaml_openapi3(self, translator):
        suite = translator.translate_text(ORDERS_V3_YAML)
        case = suite.test_cases[0]
        assert suite.base_url == "https://orders.example.com/api"
        assert suite.tags[0] == {"swaggerVersion": "3.0.1"}
        assert case.test_data[0].endpoint == "/users/{{id}}/orders/{{orderId}}"
        assert case.test_data[1].name == "PATCH /users/{id}/orders/{orderId}"
        assert case.test_data[1].headers == {"Content-Type": "application/merge-patch+json"}

    def test_json_text(self, translator):
        suite = translator.translate_text(json.dumps(PETSTORE_V2))
        assert len(suite.test_cases) == 2

    @pytest.mark.parametrize(
        "text",
        [
            "",
            "{not json: [",
            "just a string",
            "[1, 2, 3]",
            json.dumps({"info": {"title": "x"}, "paths": {}}),
            json.dumps({"openapi": "3.0.0", "info": {"title": "x"}}),
            json.dumps({"swagger": "2.0", "paths": ["not", "a", "map"]}),
        ],
    )
    def test_hard_failures(self, translator, text):
        with pytest.raises(SwaggerImportError):
            translator.translate_text(text)


def test_placeholder_path():
    assert to_placeholder_path("/users/{id}/orders/{orderId}") == "/users/{{id}}/orders/{{orderId}}"
    assert to_placeholder_path("/already/{{id}}") == "/already/{{id}}"
