import logging
from typing import Any, Dict, List, Optional

from testflow.models import Locator, LocatorFilter, LocatorIndex
from testflow.translators.script_syntax import (
    CallSegment,
    int_literal,
    literal,
    object_entries,
    parse_call_chain,
    string_literal,
)

logger = logging.getLogger(__name__)

LOCATOR_METHODS = {
    "getByRole": "role",
    "getByText": "text",
    "getByLabel": "label",
    "getByPlaceholder": "placeholder",
    "getByAltText": "altText",
    "getByTitle": "title",
    "getByTestId": "testId",
    "locator": "css",
}

TEXT_FILTERS = ("hasText", "hasNotText")
LOCATOR_FILTERS = ("has", "hasNot")


def selector_locator(
    selector: str,
    options: Optional[Dict[str, Any]] = None,
    index: Optional[LocatorIndex] = None,
) -> Locator:
    """css/xpath locator for a raw ``locator()`` / ``waitForSelector()`` selector."""
    if selector.startswith("xpath="):
        return Locator(strategy="xpath", value=selector[len("xpath="):], options=options, index=index)
    if selector.startswith("//") or selector.startswith("(//"):
        return Locator(strategy="xpath", value=selector, options=options, index=index)
    return Locator(strategy="css", value=selector, options=options, index=index)


class LocatorResolver:
    """
    Turns a Playwright locator chain into a Locator.

    Simple chains (one constructor, optionally ``.first()``/``.last()``) are
    handled directly. Anything carrying ``.filter()``, ``.nth()`` or a second
    constructor goes through the composite path, which reuses the simple path
    for the base locator and for locators nested in ``has``/``hasNot``.
    """

    def resolve(self, chain_text: str) -> Optional[Locator]:
        return self.resolve_segments(parse_call_chain(chain_text).calls)

    def resolve_segments(self, calls: List[CallSegment]) -> Optional[Locator]:
        if not calls or calls[0].name not in LOCATOR_METHODS:
            return None
        if self._is_composite(calls):
            return self.resolve_composite(calls)
        return self.resolve_simple(calls)

    def resolve_simple(self, calls: List[CallSegment]) -> Optional[Locator]:
        if not calls or self._is_composite(calls):
            return None
        index = None
        for call in calls[1:]:
            if call.name in ("first", "last"):
                index = call.name
        return self._constructor(calls[0], index)

    def resolve_composite(self, calls: List[CallSegment]) -> Optional[Locator]:
        base = self._constructor(calls[0]) if calls else None
        if base is None:
            logger.debug("Unresolvable base locator in %s", [c.render() for c in calls])
            return None

        filters: List[LocatorFilter] = []
        chain: List[Locator] = []
        index = None
        for call in calls[1:]:
            if call.name == "filter":
                filters.extend(self._filters(call))
            elif call.name in LOCATOR_METHODS:
                step = self._constructor(call)
                if step is not None:
                    chain.append(step)
            elif call.name in ("first", "last"):
                index = call.name
            elif call.name == "nth":
                position = int_literal(call.arg(0))
                if position is not None and position >= 0:
                    index = position

        return Locator(
            strategy=base.strategy,
            value=base.value,
            options=base.options,
            filters=filters or None,
            chain=chain or None,
            index=index,
        )

    @staticmethod
    def _is_composite(calls: List[CallSegment]) -> bool:
        return any(
            call.name in ("filter", "nth") or call.name in LOCATOR_METHODS
            for call in calls[1:]
        )

    def _constructor(self, call: CallSegment, index=None) -> Optional[Locator]:
        if call.name not in LOCATOR_METHODS:
            return None
        value = string_literal(call.arg(0))
        if value is None:
            return None

        options = self._options(call.arg(1))
        if call.name == "locator":
            return selector_locator(value, options, index)
        return Locator(strategy=LOCATOR_METHODS[call.name], value=value, options=options, index=index)

    @staticmethod
    def _options(raw: Optional[str]) -> Optional[Dict[str, Any]]:
        entries = object_entries(raw)
        if not entries:
            return None
        options: Dict[str, Any] = {}
        for key, value in entries.items():
            try:
                options[key] = literal(value)
            except ValueError:
                # nested locators and other expressions are not options
                continue
        return options or None

    def _filters(self, call: CallSegment) -> List[LocatorFilter]:
        entries = object_entries(call.arg(0))
        if not entries:
            return []

        filters: List[LocatorFilter] = []
        for key, raw in entries.items():
            if key in TEXT_FILTERS:
                text = string_literal(raw)
                if text is not None:
                    filters.append(LocatorFilter(type=key, value=text))
            elif key in LOCATOR_FILTERS:
                nested = self.resolve_simple(parse_call_chain(raw).calls)
                if nested is not None:
                    filters.append(LocatorFilter(type=key, locator=nested))
                else:
                    logger.debug("Dropping %s filter with unresolvable locator %r", key, raw)
            elif key == "visible":
                try:
                    visible = literal(raw)
                except ValueError:
                    continue
                if isinstance(visible, bool):
                    filters.append(LocatorFilter(type="visible" if visible else "hidden"))
        return filters
