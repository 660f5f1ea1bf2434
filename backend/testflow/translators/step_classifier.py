import logging
from typing import List, Optional

from testflow.models import Locator, TestStep
from testflow.translators.locator_resolver import LocatorResolver, selector_locator
from testflow.translators.script_syntax import (
    CallChain,
    CallSegment,
    int_literal,
    literal,
    object_entries,
    parse_call_chain,
    split_top_level,
    string_literal,
)

logger = logging.getLogger(__name__)

ASSERTION_MARKERS = ("expect(", "expect.soft(")

LOCATOR_ACTIONS = {
    "click": "click",
    "dblclick": "dblClick",
    "fill": "fill",
    "type": "fill",
    "pressSequentially": "fill",
    "hover": "hover",
    "check": "check",
    "uncheck": "uncheck",
    "selectOption": "select",
    "press": "press",
    "screenshot": "screenshot",
}
VALUE_ACTIONS = ("fill", "type", "pressSequentially", "press")

LOCATOR_ASSERTIONS = {
    "toBeVisible": "assertVisible",
    "toBeHidden": "assertHidden",
    "toHaveText": "assertText",
    "toContainText": "assertContainsText",
    "toHaveCount": "assertCount",
    "toBeEnabled": "assertEnabled",
    "toBeDisabled": "assertDisabled",
    "toBeChecked": "assertChecked",
    "toHaveValue": "assertValue",
}
NEGATED_ASSERTIONS = {
    "toBeVisible": "assertHidden",
    "toBeHidden": "assertVisible",
    "toBeEnabled": "assertDisabled",
    "toBeDisabled": "assertEnabled",
    "toBeChecked": "assertUnchecked",
}
TEXT_ASSERTIONS = ("toHaveText", "toContainText", "toHaveValue")
PAGE_ASSERTIONS = {
    "toHaveURL": "assertUrl",
    "toHaveTitle": "assertTitle",
}


class StepClassifier:
    """Maps one resolved statement to a TestStep, or None when nothing matches."""

    def __init__(self, resolver: Optional[LocatorResolver] = None) -> None:
        self.resolver = resolver or LocatorResolver()

    def classify(self, statement: str, step_number: int) -> Optional[TestStep]:
        text = statement.strip().rstrip(";").strip()
        if text.startswith("await "):
            text = text[len("await "):].lstrip()
        step_id = f"step-{step_number}"

        if any(marker in text for marker in ASSERTION_MARKERS):
            step = self._assertion(text, step_id)
        else:
            step = self._action(text, step_id)

        if step is None:
            logger.debug("Unrecognized statement dropped: %s", text[:80])
        return step

    # assertions

    def _assertion(self, text: str, step_id: str) -> Optional[TestStep]:
        chain = parse_call_chain(text)
        segments = chain.segments
        if not segments:
            return None
        # expect(x)... parses with an empty root, expect.soft(x)... with root "expect"
        wrapper = "soft" if chain.root == "expect" else "expect" if chain.root == "" else None
        if segments[0].name != wrapper:
            return None

        target = segments[0].arg(0)
        matchers = [segment for segment in segments[1:] if segment.is_call]
        if target is None or not matchers:
            return None
        matcher = matchers[-1]
        negated = any(segment.name == "not" for segment in segments[1:] if not segment.is_call)

        if matcher.name in PAGE_ASSERTIONS:
            if negated:
                return None
            expected = string_literal(matcher.arg(0))
            if expected is None:
                return None
            return TestStep(id=step_id, keyword=PAGE_ASSERTIONS[matcher.name], value=expected)

        if matcher.name not in LOCATOR_ASSERTIONS:
            return None
        if negated and matcher.name not in NEGATED_ASSERTIONS:
            return None

        locator = self.resolver.resolve(target)
        if locator is None:
            return None

        keyword = NEGATED_ASSERTIONS[matcher.name] if negated else LOCATOR_ASSERTIONS[matcher.name]
        value = None
        if matcher.name in TEXT_ASSERTIONS:
            value = string_literal(matcher.arg(0))
            if value is None:
                return None
        elif matcher.name == "toHaveCount":
            count = int_literal(matcher.arg(0))
            if count is None:
                return None
            value = str(count)

        return TestStep(id=step_id, keyword=keyword, locator=locator, value=value)

    # actions

    def _action(self, text: str, step_id: str) -> Optional[TestStep]:
        chain = parse_call_chain(text)
        calls = chain.calls
        if not calls or len(calls) != len(chain.segments):
            return None

        if len(calls) == 1:
            return self._page_action(chain, calls[0], step_id)

        action = calls[-1]
        if action.name not in LOCATOR_ACTIONS:
            return None
        locator = self.resolver.resolve_segments(calls[:-1])
        if locator is None:
            return None
        return self._locator_action(action, locator, action.args, step_id)

    def _page_action(self, chain: CallChain, call: CallSegment, step_id: str) -> Optional[TestStep]:
        if chain.root.endswith("keyboard"):
            if call.name != "press":
                return None
            key = string_literal(call.arg(0))
            return TestStep(id=step_id, keyword="press", value=key) if key is not None else None

        if call.name == "goto":
            url = string_literal(call.arg(0))
            return TestStep(id=step_id, keyword="goto", value=url) if url is not None else None

        if call.name == "waitForTimeout":
            timeout = int_literal(call.arg(0))
            if timeout is None:
                return None
            return TestStep(id=step_id, keyword="waitForTimeout", value=str(timeout))

        if call.name == "waitForSelector":
            selector = string_literal(call.arg(0))
            if selector is None:
                return None
            return TestStep(id=step_id, keyword="waitForElement", locator=selector_locator(selector))

        if call.name == "screenshot":
            return TestStep(id=step_id, keyword="screenshot", value=self._screenshot_path(call.arg(0)))

        # legacy selector API: page.click('#id'), page.fill('#id', 'text')
        if call.name in LOCATOR_ACTIONS:
            args = call.args
            selector = string_literal(args[0]) if args else None
            if selector is None:
                return None
            return self._locator_action(call, selector_locator(selector), args[1:], step_id)

        return None

    def _locator_action(
        self, action: CallSegment, locator: Locator, args: List[str], step_id: str
    ) -> Optional[TestStep]:
        keyword = LOCATOR_ACTIONS[action.name]
        first = args[0] if args else None

        if action.name in VALUE_ACTIONS:
            value = string_literal(first)
            if value is None:
                return None
            return TestStep(id=step_id, keyword=keyword, locator=locator, value=value)

        if action.name == "selectOption":
            value = self._option_value(first)
            if value is None:
                return None
            return TestStep(id=step_id, keyword=keyword, locator=locator, value=value)

        if action.name == "click":
            keyword = self._click_variant(first)
        elif action.name == "screenshot":
            return TestStep(id=step_id, keyword=keyword, locator=locator, value=self._screenshot_path(first))

        return TestStep(id=step_id, keyword=keyword, locator=locator)

    @staticmethod
    def _click_variant(raw_options: Optional[str]) -> str:
        entries = object_entries(raw_options) or {}
        try:
            if literal(entries.get("button", "''")) == "right":
                return "rightClick"
            if literal(entries.get("clickCount", "1")) == 2:
                return "dblClick"
        except ValueError:
            pass
        return "click"

    @staticmethod
    def _option_value(raw: Optional[str]) -> Optional[str]:
        value = string_literal(raw)
        if value is not None:
            return value
        if raw is None:
            return None

        raw = raw.strip()
        if raw.startswith("["):
            items = split_top_level(raw[1:-1])
            return StepClassifier._option_value(items[0]) if items else None

        entries = object_entries(raw) or {}
        for key in ("label", "value"):
            if key in entries:
                return string_literal(entries[key])
        if "index" in entries:
            index = int_literal(entries["index"])
            return str(index) if index is not None else None
        return None

    @staticmethod
    def _screenshot_path(raw_options: Optional[str]) -> Optional[str]:
        entries = object_entries(raw_options) or {}
        return string_literal(entries.get("path"))
