from typing import Any, Dict, List, Literal, Optional, Union, get_args

from pydantic import BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel

SuiteType = Literal["API", "UI"]
TestCaseType = Literal["REST", "SOAP", "UI"]
TestStatus = Literal["Not Started", "Running", "Passed", "Failed"]

LocatorStrategy = Literal[
    "role", "text", "label", "placeholder", "altText", "title", "testId", "css", "xpath"
]
FilterType = Literal["hasText", "hasNotText", "has", "hasNot", "visible", "hidden"]
LocatorIndex = Union[Literal["first", "last"], int]

StepKeyword = Literal[
    "goto",
    "click",
    "dblClick",
    "rightClick",
    "fill",
    "hover",
    "check",
    "uncheck",
    "select",
    "press",
    "screenshot",
    "waitForElement",
    "waitForTimeout",
    "assertVisible",
    "assertHidden",
    "assertText",
    "assertContainsText",
    "assertCount",
    "assertEnabled",
    "assertDisabled",
    "assertChecked",
    "assertUnchecked",
    "assertValue",
    "assertUrl",
    "assertTitle",
]

AssertionType = Literal[
    "equals",
    "notEquals",
    "contains",
    "startsWith",
    "endsWith",
    "greaterThan",
    "lessThan",
    "in",
    "notIn",
    "includesAll",
    "length",
    "size",
    "statusCode",
    "type",
    "exists",
    "regex",
    "arrayObjectMatch",
]


class CanonicalModel(BaseModel):
    """Base for every document type: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    # TestCase / TestData / ... are not pytest classes
    __test__ = False

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class Locator(CanonicalModel):
    strategy: LocatorStrategy
    value: str
    options: Optional[Dict[str, Any]] = None
    filter: Optional["LocatorFilter"] = None
    filters: Optional[List["LocatorFilter"]] = None
    chain: Optional[List["Locator"]] = None
    index: Optional[LocatorIndex] = None

    @model_validator(mode="after")
    def _single_or_plural_filter(self) -> "Locator":
        # one filter lives in `filter`, several only in `filters`
        if self.filters:
            if len(self.filters) == 1:
                if self.filter is None:
                    self.filter = self.filters[0]
                self.filters = None
            else:
                self.filter = None
        elif self.filters is not None:
            self.filters = None
        return self


class LocatorFilter(CanonicalModel):
    type: FilterType
    value: Optional[str] = None
    locator: Optional[Locator] = None


Locator.model_rebuild()


class Assertion(CanonicalModel):
    type: AssertionType
    json_path: str = "$"
    xpath_expression: Optional[str] = None
    expected: Any = None
    match_field: Optional[str] = None
    match_value: Optional[str] = None
    assert_field: Optional[str] = None


class TestData(CanonicalModel):
    name: str = ""
    method: str = "GET"
    endpoint: str = "/"
    headers: Dict[str, str] = {}
    pre_process: Any = None
    body: Any = None
    body_file: Optional[str] = None
    assertions: List[Assertion] = []
    response_schema: Any = None
    response_schema_file: Optional[str] = None
    store: Dict[str, str] = {}


class TestStep(CanonicalModel):
    id: str = ""
    keyword: StepKeyword = "click"
    target: Optional[str] = None
    locator: Optional[Locator] = None
    value: Optional[str] = None
    options: Any = None
    assertions: List[Assertion] = []
    store: Dict[str, str] = {}
    skip_on_failure: bool = False


class TestCase(CanonicalModel):
    id: Optional[str] = None
    name: str = ""
    status: TestStatus = "Not Started"
    type: TestCaseType = "REST"
    priority: Optional[int] = None
    depends_on: Optional[List[str]] = None
    test_data: List[TestData] = []
    test_steps: List[TestStep] = []


class TestSuite(CanonicalModel):
    id: str = ""
    suite_name: str = ""
    application_name: str = ""
    type: SuiteType = "API"
    base_url: str = ""
    tags: List[Dict[str, str]] = []
    test_cases: List[TestCase] = []
    status: Optional[TestStatus] = None


# Validation layer: coerce loosely typed input into a well-formed document.
# None of these functions raise.


def _as_dict(raw: Any) -> Dict[str, Any]:
    if isinstance(raw, BaseModel):
        return raw.model_dump(by_alias=True, exclude_none=True)
    return raw if isinstance(raw, dict) else {}


def _get(data: Dict[str, Any], alias: str, name: Optional[str] = None) -> Any:
    if alias in data:
        return data[alias]
    if name is not None:
        return data.get(name)
    return None


def _text(value: Any, default: str = "") -> str:
    if isinstance(value, bool):
        return default
    if isinstance(value, str):
        return value or default
    if isinstance(value, (int, float)):
        return str(value)
    return default


def _optional_text(value: Any) -> Optional[str]:
    text = _text(value)
    return text or None


def _choice(value: Any, allowed: Any, default: Any) -> Any:
    return value if isinstance(value, str) and value in get_args(allowed) else default


def _string_map(value: Any) -> Dict[str, str]:
    if not isinstance(value, dict):
        return {}
    return {str(key): _text(item) for key, item in value.items()}


def _list(value: Any) -> list:
    return value if isinstance(value, list) else []


def validate_locator(raw: Any) -> Optional[Locator]:
    data = _as_dict(raw)
    if not data:
        return None

    options = data.get("options")
    if not isinstance(options, dict) or not options:
        options = None

    filters = [f for f in (validate_filter(item) for item in _list(data.get("filters"))) if f]
    chain = [step for step in (validate_locator(item) for item in _list(data.get("chain"))) if step]

    index = data.get("index")
    if isinstance(index, bool) or not (
        index in ("first", "last") or (isinstance(index, int) and index >= 0)
    ):
        index = None

    return Locator(
        strategy=_choice(data.get("strategy"), LocatorStrategy, "css"),
        value=_text(data.get("value")),
        options=options,
        filter=validate_filter(data.get("filter")),
        filters=filters or None,
        chain=chain or None,
        index=index,
    )


def validate_filter(raw: Any) -> Optional[LocatorFilter]:
    data = _as_dict(raw)
    filter_type = _choice(data.get("type"), FilterType, None)
    if filter_type is None:
        return None

    locator = validate_locator(data.get("locator"))
    if filter_type in ("has", "hasNot") and locator is None:
        return None

    value = data.get("value")
    return LocatorFilter(
        type=filter_type,
        value=value if isinstance(value, str) else None,
        locator=locator,
    )


def validate_assertion(raw: Any) -> Assertion:
    data = _as_dict(raw)
    return Assertion(
        type=_choice(data.get("type"), AssertionType, "equals"),
        json_path=_text(_get(data, "jsonPath", "json_path"), "$"),
        xpath_expression=_optional_text(_get(data, "xpathExpression", "xpath_expression")),
        expected=data.get("expected"),
        match_field=_optional_text(_get(data, "matchField", "match_field")),
        match_value=_optional_text(_get(data, "matchValue", "match_value")),
        assert_field=_optional_text(_get(data, "assertField", "assert_field")),
    )


def _assertions(value: Any) -> List[Assertion]:
    return [validate_assertion(item) for item in _list(value) if isinstance(item, (dict, Assertion))]


def validate_test_data(raw: Any) -> TestData:
    data = _as_dict(raw)
    return TestData(
        name=_text(data.get("name")),
        method=_text(data.get("method"), "GET").upper(),
        endpoint=_text(data.get("endpoint"), "/"),
        headers=_string_map(data.get("headers")),
        pre_process=_get(data, "preProcess", "pre_process") or None,
        body=data.get("body"),
        body_file=_optional_text(_get(data, "bodyFile", "body_file")),
        assertions=_assertions(data.get("assertions")),
        response_schema=_get(data, "responseSchema", "response_schema"),
        response_schema_file=_optional_text(_get(data, "responseSchemaFile", "response_schema_file")),
        store=_string_map(data.get("store")),
    )


def validate_test_step(raw: Any) -> TestStep:
    data = _as_dict(raw)
    value = data.get("value")
    return TestStep(
        id=_text(data.get("id")),
        keyword=_choice(data.get("keyword"), StepKeyword, "click"),
        target=_optional_text(data.get("target")),
        locator=validate_locator(data.get("locator")),
        value=value if isinstance(value, str) else _optional_text(value),
        options=data.get("options"),
        assertions=_assertions(data.get("assertions")),
        store=_string_map(data.get("store")),
        skip_on_failure=bool(_get(data, "skipOnFailure", "skip_on_failure")),
    )


def validate_test_case(raw: Any) -> TestCase:
    data = _as_dict(raw)
    priority = data.get("priority")
    depends_on = _get(data, "dependsOn", "depends_on")
    return TestCase(
        id=_optional_text(data.get("id")),
        name=_text(data.get("name")),
        status=_choice(data.get("status"), TestStatus, "Not Started"),
        type=_choice(data.get("type"), TestCaseType, "REST"),
        priority=priority if isinstance(priority, int) and not isinstance(priority, bool) else None,
        depends_on=[_text(item) for item in depends_on] if isinstance(depends_on, list) else None,
        test_data=[validate_test_data(item) for item in _list(_get(data, "testData", "test_data"))],
        test_steps=[validate_test_step(item) for item in _list(_get(data, "testSteps", "test_steps"))],
    )


def validate_test_suite(raw: Any) -> TestSuite:
    data = _as_dict(raw)
    return TestSuite(
        id=_text(data.get("id")),
        suite_name=_text(_get(data, "suiteName", "suite_name")),
        application_name=_text(_get(data, "applicationName", "application_name")),
        type="UI" if data.get("type") == "UI" else "API",
        base_url=_text(_get(data, "baseUrl", "base_url")),
        tags=[_string_map(tag) for tag in _list(data.get("tags")) if isinstance(tag, dict)],
        test_cases=[validate_test_case(item) for item in _list(_get(data, "testCases", "test_cases"))],
        status=_choice(data.get("status"), TestStatus, None),
    )
