import pytest
from estimation_rpa.automation.forms import FormFiller, SegmentReport
from estimation_rpa.automation.matcher import FieldKind, MatchStrategy
from estimation_rpa.automation.resolver import NodeResolver
from estimation_rpa.automation.selectors import NUMERIC_PATTERN, FieldSpec, InputKind
from fakes import QUALITY_OPTIONS, FakeDriver

HEIGHT = FieldSpec("height", ("#SizeHeight",), required=True, validation_pattern=NUMERIC_PATTERN)
QUALITY = FieldSpec("quality", ("#ItemPlanQuality",), kind=InputKind.SEARCH_DROPDOWN, match_kind=FieldKind.QUALITY)

@pytest.mark.unit
class TestFormFiller:
    @pytest.fixture
    def driver(self):
        return FakeDriver()

    @pytest.fixture
    def forms(self, driver):
        return FormFiller(driver, NodeResolver(driver), field_delay_ms=0, dropdown_timeout_ms=500)

    @pytest.mark.asyncio
    async def test_fill_input_verifies_value(self, driver, forms):
        node = driver.add("#SizeHeight")
        outcome = await forms.fill(HEIGHT, 100)
        assert outcome.ok
        assert outcome.status == "filled"
        assert node.value == "100"

    @pytest.mark.asyncio
    async def test_absent_value_is_skipped(self, forms):
        outcome = await forms.fill(HEIGHT, None)
        assert outcome.status == "skipped"
        assert outcome.ok

    @pytest.mark.asyncio
    async def test_non_numeric_value_rejected(self, driver, forms):
        node = driver.add("#SizeHeight")
        outcome = await forms.fill(HEIGHT, "12cm")
        assert outcome.status == "invalid"
        assert not outcome.ok
        assert node.value == ""

    @pytest.mark.asyncio
    async def test_disabled_field_is_an_error(self, driver, forms):
        driver.add("#SizeHeight", enabled=False)
        outcome = await forms.fill(HEIGHT, 100)
        assert outcome.status == "disabled"
        assert outcome.error == "field is disabled"

    @pytest.mark.asyncio
    async def test_failed_verification(self, driver, forms):
        driver.add("#SizeHeight", accepts_input=False)
        outcome = await forms.fill(HEIGHT, 100)
        assert outcome.status == "unverified"
        assert not outcome.ok

    @pytest.mark.asyncio
    async def test_dropdown_picks_best_option(self, driver, forms):
        field = driver.add("#ItemPlanQuality", options=QUALITY_OPTIONS)
        outcome = await forms.fill(QUALITY, "Real Art Paper")
        assert outcome.ok
        assert outcome.value == "120 GSM Art Paper Gloss"
        assert outcome.match.strategy == MatchStrategy.SCORED
        assert field.selected == "120 GSM Art Paper Gloss"
        assert driver.pressed == []

    @pytest.mark.asyncio
    async def test_dropdown_without_options_keeps_typed_text(self, driver, forms):
        driver.add("#ItemPlanQuality", options=[])
        outcome = await forms.fill(QUALITY, "Real Art Paper")
        assert outcome.ok
        assert outcome.match.strategy == MatchStrategy.TYPED_TEXT
        assert driver.pressed == ["Enter"]

@pytest.mark.unit
def test_segment_report_only_required_errors_fail():
    from estimation_rpa.automation.forms import FieldOutcome

    report = SegmentReport("size")
    report.add(FieldOutcome("mill", "missing", "JK", error="field not found"))
    assert report.success
    assert report.errors == ["mill: field not found"]

    report.add(FieldOutcome("height", "missing", "100", required=True, error="field not found"))
    assert not report.success
    assert report.required_errors == ["height: field not found"]
