import json
import logging
import re
from typing import Any, Dict, List

import yaml

from testflow.models import Assertion, TestCase, TestData, TestSuite

logger = logging.getLogger(__name__)

HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")
PATH_PARAMETER = re.compile(r"(?<!\{)\{([^{}]+)\}(?!\})")
GENERATED_SUITE_MARKER = "@generated"


class SwaggerImportError(ValueError):
    pass


def to_placeholder_path(path: str) -> str:
    """``/users/{id}`` -> ``/users/{{id}}`` so variable injection can fill it in."""
    return PATH_PARAMETER.sub(r"{{\1}}", path)


class SwaggerTranslator:
    """
    Generates an API suite from a Swagger 2.0 / OpenAPI 3.x document: one test
    case per path, one request per operation, each asserting status 200.
    ``$ref`` indirection is left as-is.
    """

    def __init__(self, default_content_type: str = "application/json"):
        self.default_content_type = default_content_type

    def load_document(self, text: str) -> Dict[str, Any]:
        """Parse spec text as JSON, falling back to YAML."""
        if not text or not text.strip():
            raise SwaggerImportError("Empty OpenAPI/Swagger document")

        try:
            document = json.loads(text)
            logger.debug("Parsed spec as JSON")
        except json.JSONDecodeError:
            try:
                document = yaml.safe_load(text)
                logger.debug("Parsed spec as YAML")
            except yaml.YAMLError as e:
                raise SwaggerImportError(f"Invalid OpenAPI spec format: {e}")

        if not isinstance(document, dict):
            raise SwaggerImportError("Invalid OpenAPI spec format: expected a JSON/YAML object")
        return document

    def validate_document(self, document: Any) -> None:
        if not isinstance(document, dict):
            raise SwaggerImportError("Invalid OpenAPI spec format: expected a JSON/YAML object")
        if not document.get("swagger") and not document.get("openapi"):
            raise SwaggerImportError(
                "Not a valid Swagger/OpenAPI specification. Missing swagger or openapi field."
            )
        if not isinstance(document.get("paths"), dict):
            raise SwaggerImportError("Not a valid Swagger/OpenAPI specification. Missing paths field.")

    def translate(self, document: Dict[str, Any]) -> TestSuite:
        self.validate_document(document)

        info = document.get("info") if isinstance(document.get("info"), dict) else {}
        title = str(info.get("title") or "API")
        version = str(document.get("swagger") or document.get("openapi"))

        test_cases: List[TestCase] = []
        for path, path_item in document["paths"].items():
            if not isinstance(path_item, dict):
                logger.debug("Skipping path %s: not an object", path)
                continue
            test_data = [
                self._test_data(document, str(path), str(method), operation)
                for method, operation in path_item.items()
                if str(method).lower() in HTTP_METHODS
            ]
            test_cases.append(
                TestCase(name=f"Test {path}", status="Not Started", type="REST", test_data=test_data)
            )

        logger.debug("Generated %d test cases from %s %s", len(test_cases), title, version)
        return TestSuite(
            suite_name=f"{title} Auto Suite",
            application_name=title,
            type="API",
            base_url=self.base_url(document),
            status="Not Started",
            tags=[{"swaggerVersion": version}, {"suiteType": GENERATED_SUITE_MARKER}],
            test_cases=test_cases,
        )

    def translate_text(self, text: str) -> TestSuite:
        return self.translate(self.load_document(text))

    @staticmethod
    def base_url(document: Dict[str, Any]) -> str:
        servers = document.get("servers")
        if isinstance(servers, list) and servers and isinstance(servers[0], dict):
            return str(servers[0].get("url", ""))

        if document.get("swagger"):
            schemes = document.get("schemes") or ["https"]
            host = document.get("host") or "localhost"
            base_path = document.get("basePath") or ""
            return f"{schemes[0]}://{host}{base_path}"
        return ""

    def _test_data(self, document: Dict[str, Any], path: str, method: str, operation: Any) -> TestData:
        operation = operation if isinstance(operation, dict) else {}
        name = operation.get("summary") or operation.get("operationId") or f"{method.upper()} {path}"
        return TestData(
            name=str(name),
            method=method.upper(),
            endpoint=to_placeholder_path(path),
            headers={"Content-Type": self._content_type(document, operation)},
            assertions=[Assertion(type="statusCode", json_path="$.", expected=200)],
            store={},
        )

    def _content_type(self, document: Dict[str, Any], operation: Dict[str, Any]) -> str:
        for consumes in (operation.get("consumes"), document.get("consumes")):
            if isinstance(consumes, list) and consumes:
                return str(consumes[0])

        request_body = operation.get("requestBody")
        if isinstance(request_body, dict) and isinstance(request_body.get("content"), dict):
            for content_type in request_body["content"]:
                return str(content_type)

        return self.default_content_type
