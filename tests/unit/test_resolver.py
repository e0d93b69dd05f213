import pytest
from estimation_rpa.automation.driver import ElementNotFoundError
from estimation_rpa.automation.resolver import NodeResolver
from fakes import FakeDriver

@pytest.mark.unit
class TestNodeResolver:
    @pytest.fixture
    def driver(self):
        return FakeDriver()

    @pytest.mark.asyncio
    async def test_returns_first_present_candidate(self, driver):
        """Order is preference: a later candidate is used when earlier ones are absent."""
        third = driver.add("#third")
        driver.add("#fourth")
        node = await NodeResolver(driver).resolve(["#first", "#second", "#third", "#fourth"])
        assert node is third

    @pytest.mark.asyncio
    async def test_none_when_nothing_present(self, driver):
        assert await NodeResolver(driver).resolve(["#a", "#b"]) is None

    @pytest.mark.asyncio
    async def test_unsupported_selector_treated_as_absent(self, driver):
        driver.unsupported.add("div:weird(1)")
        target = driver.add("#ok")
        node = await NodeResolver(driver).resolve(["div:weird(1)", "#ok"])
        assert node is target

    @pytest.mark.asyncio
    async def test_retry_sweeps_without_trailing_wait(self, driver):
        resolver = NodeResolver(driver)
        node = await resolver.resolve_with_retry(["#missing"], retries=3, delay_ms=500)
        assert node is None
        assert driver.waits == [500, 500]
        assert driver.queries.count("#missing") == 3

    @pytest.mark.asyncio
    async def test_require_raises_not_found(self, driver):
        with pytest.raises(ElementNotFoundError) as exc_info:
            await NodeResolver(driver).require("show_cost", ["#showCost", ".show-cost-button"])
        assert exc_info.value.field == "show_cost"
        assert exc_info.value.candidates == ["#showCost", ".show-cost-button"]

    @pytest.mark.asyncio
    async def test_optional_returns_none(self, driver):
        assert await NodeResolver(driver).optional("panel", ["#panel"]) is None

    @pytest.mark.asyncio
    async def test_resolve_usable_skips_hidden_and_disabled(self, driver):
        driver.add("#hidden", visible=False)
        driver.add("#disabled", enabled=False)
        usable = driver.add("#usable")
        resolution = await NodeResolver(driver).resolve_usable("field", ["#hidden", "#disabled", "#usable"])
        assert resolution.usable
        assert resolution.node is usable
        assert resolution.selector == "#usable"

    @pytest.mark.asyncio
    async def test_resolve_usable_reports_last_unusable(self, driver):
        driver.add("#disabled", enabled=False)
        resolution = await NodeResolver(driver).resolve_usable("field", ["#disabled", "#gone"])
        assert resolution.present
        assert resolution.visible
        assert not resolution.enabled
        assert not resolution.usable

    @pytest.mark.asyncio
    async def test_resolve_usable_rechecks_every_candidate_each_sweep(self, driver):
        """A node hidden on the first sweep is picked up once it shows."""
        late = driver.add("#late", visible=False)
        driver.add("#disabled", enabled=False)
        record_wait = driver.wait

        async def wait(ms):
            late.visible = True
            await record_wait(ms)

        driver.wait = wait
        resolution = await NodeResolver(driver).resolve_usable(
            "field", ["#late", "#disabled"], retries=3, delay_ms=250
        )
        assert resolution.usable
        assert resolution.node is late
        assert resolution.selector == "#late"
        assert driver.waits == [250]
        assert driver.queries.count("#late") == 2
