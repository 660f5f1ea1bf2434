import re
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional

from testflow.models import Assertion

PATH_TOKEN = re.compile(r"\.([^.\[\]]+)|\[(\d+)\]")


@dataclass
class AssertionSuggestion:
    type: str
    expected: Any = None


def extract_json_paths(data: Any, prefix: str = "$") -> List[str]:
    """
    Every addressable path in a JSON value. Objects contribute ``.key``,
    arrays are listed themselves and sampled through their first element.
    """
    paths: List[str] = []
    if isinstance(data, dict):
        for key, value in data.items():
            path = f"{prefix}.{key}"
            paths.append(path)
            paths.extend(extract_json_paths(value, path))
    elif isinstance(data, list):
        paths.append(prefix)
        if data:
            paths.append(f"{prefix}[0]")
            paths.extend(extract_json_paths(data[0], f"{prefix}[0]"))
    else:
        paths.append(prefix)
    return list(dict.fromkeys(paths))


def filter_paths(paths: Iterable[str], query: str) -> List[str]:
    needle = (query or "").lower()
    return [path for path in paths if needle in path.lower()]


def value_at_path(data: Any, path: str) -> Any:
    """Look up ``$.a.b[0].c``; None when any step is missing."""
    if not path.startswith("$"):
        return None
    current = data
    for key, index in PATH_TOKEN.findall(path[1:]):
        if key:
            current = current.get(key) if isinstance(current, dict) else None
        else:
            position = int(index)
            current = current[position] if isinstance(current, list) and position < len(current) else None
        if current is None:
            return None
    return current


def suggest(value: Any) -> AssertionSuggestion:
    if value is None:
        return AssertionSuggestion("exists")
    if isinstance(value, str):
        if "@" in value:
            return AssertionSuggestion("contains", "@")
        return AssertionSuggestion("equals", value)
    if isinstance(value, (bool, int, float)):
        return AssertionSuggestion("equals", value)
    if isinstance(value, list):
        return AssertionSuggestion("length", len(value))
    return AssertionSuggestion("exists")


def build_assertions(
    data: Any,
    selected_paths: Iterable[str],
    status_code: Optional[int] = None,
) -> List[Assertion]:
    assertions: List[Assertion] = []
    if status_code:
        assertions.append(Assertion(type="statusCode", json_path="$.", expected=status_code))

    for path in selected_paths:
        suggestion = suggest(value_at_path(data, path))
        assertions.append(
            Assertion(
                type=suggestion.type,
                json_path=path,
                expected=None if suggestion.type == "exists" else suggestion.expected,
            )
        )
    return assertions
