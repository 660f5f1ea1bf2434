import logging
import re
from typing import List, Optional

from testflow.models import CanonicalModel, TestCase, TestStep, TestSuite
from testflow.translators.statement_extractor import StatementExtractor
from testflow.translators.step_classifier import StepClassifier
from testflow.translators.url_helpers import application_name_from_url, url_origin

logger = logging.getLogger(__name__)

TEST_TITLE = re.compile(r"""\btest(?:\.only|\.skip|\.fixme)?\(\s*(['"`])(.+?)\1""")


class ParsedPlaywright(CanonicalModel):
    test_name: str
    base_url: str = ""
    test_steps: List[TestStep] = []


class PlaywrightTranslator:
    """
    Converts a recorded Playwright test (TypeScript/JavaScript) into a UI
    suite: statements are extracted with aliases resolved, then classified
    one by one into numbered steps.
    """

    def __init__(
        self,
        extractor: Optional[StatementExtractor] = None,
        classifier: Optional[StepClassifier] = None,
        default_test_name: str = "Playwright Test",
        default_application_name: str = "Web Application",
    ):
        self.extractor = extractor or StatementExtractor()
        self.classifier = classifier or StepClassifier()
        self.default_test_name = default_test_name
        self.default_application_name = default_application_name

    def parse(self, source: str) -> ParsedPlaywright:
        title = TEST_TITLE.search(source)
        test_name = title.group(2) if title else self.default_test_name

        steps: List[TestStep] = []
        for statement in self.extractor.extract(source):
            step = self.classifier.classify(statement, len(steps) + 1)
            if step is not None:
                steps.append(step)

        first_goto = next((step for step in steps if step.keyword == "goto"), None)
        base_url = url_origin(first_goto.value) if first_goto else ""

        logger.debug("Parsed Playwright test %r: %d steps, base_url=%r", test_name, len(steps), base_url)
        return ParsedPlaywright(test_name=test_name, base_url=base_url, test_steps=steps)

    def generate_test_suite(
        self,
        parsed: ParsedPlaywright,
        suite_name: Optional[str] = None,
        application_name: Optional[str] = None,
    ) -> TestSuite:
        return TestSuite(
            suite_name=suite_name or f"{parsed.test_name} Suite",
            application_name=application_name
            or application_name_from_url(parsed.base_url, self.default_application_name),
            type="UI",
            base_url=parsed.base_url,
            test_cases=[
                TestCase(
                    name=parsed.test_name,
                    type="UI",
                    test_data=[],
                    test_steps=parsed.test_steps,
                )
            ],
        )

    def translate(
        self,
        source: str,
        suite_name: Optional[str] = None,
        application_name: Optional[str] = None,
    ) -> TestSuite:
        return self.generate_test_suite(self.parse(source), suite_name, application_name)
