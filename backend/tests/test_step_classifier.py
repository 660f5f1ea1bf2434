import pytest

from testflow.translators.step_classifier import StepClassifier


@pytest.fixture
def classify():
    classifier = StepClassifier()
    return lambda statement: classifier.classify(statement, 1)


class TestPageActions:
    def test_goto(self, classify):
        step = classify("await page.goto('https://shop.test/home')")
        assert step.to_document()["keyword"] == "goto"
        assert step.value == "https://shop.test/home"
        assert step.id == "step-1"
        assert step.locator is None

    def test_keyboard_press(self, classify):
        step = classify("await page.keyboard.press('Enter')")
        assert (step.keyword, step.value, step.locator) == ("press", "Enter", None)

    def test_wait_for_timeout(self, classify):
        step = classify("await page.waitForTimeout(500)")
        assert (step.keyword, step.value) == ("waitForTimeout", "500")

    def test_wait_for_selector(self, classify):
        step = classify("await page.waitForSelector('#results')")
        assert step.keyword == "waitForElement"
        assert step.locator.to_document() == {"strategy": "css", "value": "#results"}

    def test_page_screenshot(self, classify):
        step = classify("await page.screenshot({ path: 'shots/home.png', fullPage: true })")
        assert (step.keyword, step.value) == ("screenshot", "shots/home.png")

    def test_legacy_selector_api(self, classify):
        step = classify("await page.fill('#email', 'a@b.test')")
        assert step.keyword == "fill"
        assert step.value == "a@b.test"
        assert step.locator.to_document() == {"strategy": "css", "value": "#email"}


class TestLocatorActions:
    def test_click_with_role(self, classify):
        step = classify("await page.getByRole('button', { name: 'Buy' }).click()")
        assert step.keyword == "click"
        assert step.locator.to_document() == {
            "strategy": "role",
            "value": "button",
            "options": {"name": "Buy"},
        }

    @pytest.mark.parametrize(
        "action, keyword",
        [
            ("click({ button: 'right' })", "rightClick"),
            ("click({ clickCount: 2 })", "dblClick"),
            ("dblclick()", "dblClick"),
            ("hover()", "hover"),
            ("check()", "check"),
            ("uncheck()", "uncheck"),
        ],
    )
    def test_valueless_actions(self, classify, action, keyword):
        step = classify(f"await page.getByTestId('row').{action}")
        assert step.keyword == keyword
        assert step.value is None

    @pytest.mark.parametrize("method", ["fill", "type", "pressSequentially"])
    def test_typing_actions_become_fill(self, classify, method):
        step = classify(f"await page.getByLabel('Email').{method}('ann@shop.test')")
        assert (step.keyword, step.value) == ("fill", "ann@shop.test")

    def test_press_on_locator(self, classify):
        step = classify("await page.getByPlaceholder('Search').press('Enter')")
        assert (step.keyword, step.value) == ("press", "Enter")
        assert step.locator.strategy == "placeholder"

    @pytest.mark.parametrize(
        "argument, value",
        [
            ("'CA'", "CA"),
            ("{ label: 'Canada' }", "Canada"),
            ("{ value: 'ca' }", "ca"),
            ("{ index: 3 }", "3"),
            ("['red', 'blue']", "red"),
        ],
    )
    def test_select_option_values(self, classify, argument, value):
        step = classify(f"await page.getByLabel('Country').selectOption({argument})")
        assert (step.keyword, step.value) == ("select", value)

    def test_composite_locator(self, classify):
        step = classify(
            "await page.getByRole('listitem').filter({ hasText: 'A' }).filter({ hasText: 'B' }).nth(2).click()"
        )
        assert len(step.locator.filters) == 2
        assert step.locator.index == 2

    def test_fill_without_literal_is_dropped(self, classify):
        assert classify("await page.getByLabel('Email').fill(user.email)") is None

    def test_unresolvable_locator_drops_step(self, classify):
        assert classify("await page.getByMagic('x').click()") is None


class TestAssertions:
    def test_visible(self, classify):
        step = classify("await expect(page.getByText('Thanks')).toBeVisible()")
        assert step.keyword == "assertVisible"
        assert step.locator.to_document() == {"strategy": "text", "value": "Thanks"}

    def test_soft_expect(self, classify):
        step = classify("await expect.soft(page.getByRole('alert')).toBeHidden()")
        assert step.keyword == "assertHidden"

    @pytest.mark.parametrize(
        "matcher, keyword, value",
        [
            ("toHaveText('Total: 3')", "assertText", "Total: 3"),
            ("toContainText('3')", "assertContainsText", "3"),
            ("toHaveValue('ann')", "assertValue", "ann"),
            ("toHaveCount(3)", "assertCount", "3"),
            ("toBeEnabled()", "assertEnabled", None),
            ("toBeDisabled()", "assertDisabled", None),
            ("toBeChecked()", "assertChecked", None),
        ],
    )
    def test_locator_matchers(self, classify, matcher, keyword, value):
        step = classify(f"await expect(page.locator('.cart')).{matcher}")
        assert (step.keyword, step.value) == (keyword, value)

    @pytest.mark.parametrize(
        "matcher, keyword",
        [
            ("toBeVisible()", "assertHidden"),
            ("toBeHidden()", "assertVisible"),
            ("toBeEnabled()", "assertDisabled"),
            ("toBeChecked()", "assertUnchecked"),
        ],
    )
    def test_negated_matchers(self, classify, matcher, keyword):
        step = classify(f"await expect(page.getByRole('dialog')).not.{matcher}")
        assert step.keyword == keyword

    def test_negated_text_is_dropped(self, classify):
        assert classify("await expect(page.getByRole('dialog')).not.toHaveText('x')") is None

    def test_page_matchers(self, classify):
        url = classify("await expect(page).toHaveURL('https://shop.test/done')")
        title = classify("await expect(page).toHaveTitle('Done')")
        assert (url.keyword, url.value, url.locator) == ("assertUrl", "https://shop.test/done", None)
        assert (title.keyword, title.value) == ("assertTitle", "Done")

    def test_unknown_matcher_is_dropped(self, classify):
        assert classify("await expect(page.getByText('x')).toMatchSnapshot()") is None


class TestUnrecognized:
    @pytest.mark.parametrize(
        "statement",
        [
            "await login(page, user)",
            "await page.locator('helper').doSomething()",
            "await page.waitForLoadState('networkidle')",
            "await Promise.all([])",
        ],
    )
    def test_dropped(self, classify, statement):
        assert classify(statement) is None
