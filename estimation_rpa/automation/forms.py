"""Field fillers for the planning sheet.

A field absent from the payload is skipped silently. A field that is present
but cannot be filled is recorded as an error on the segment report; only
errors on required fields fail the segment.
"""
import logging
import re
from dataclasses import dataclass, field
from typing import Any, List, Optional

from estimation_rpa.automation import selectors
from estimation_rpa.automation.driver import UIDriver, UINode
from estimation_rpa.automation.matcher import MatchOutcome, select_best_match
from estimation_rpa.automation.resolver import NodeResolver
from estimation_rpa.automation.selectors import FieldSpec, InputKind
from estimation_rpa.core.config import DROPDOWN_LIST_TIMEOUT_MS

logger = logging.getLogger(__name__)

DROPDOWN_POLL_MS = 250


@dataclass
class FieldOutcome:
    field: str
    status: str
    value: Optional[str] = None
    selector: Optional[str] = None
    required: bool = False
    error: Optional[str] = None
    match: Optional[MatchOutcome] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class SegmentReport:
    """Per-segment tally of filled, skipped and failed fields."""
    name: str
    outcomes: List[FieldOutcome] = field(default_factory=list)

    def add(self, outcome: FieldOutcome) -> FieldOutcome:
        self.outcomes.append(outcome)
        return outcome

    @property
    def filled(self) -> List[str]:
        return [o.field for o in self.outcomes if o.status == "filled"]

    @property
    def errors(self) -> List[str]:
        return [f"{o.field}: {o.error}" for o in self.outcomes if o.error]

    @property
    def required_errors(self) -> List[str]:
        return [f"{o.field}: {o.error}" for o in self.outcomes if o.error and o.required]

    @property
    def fallbacks(self) -> List[str]:
        return [
            f"{o.field}: {o.match.strategy.value} '{o.match.chosen}'"
            for o in self.outcomes
            if o.match is not None and o.match.is_fallback
        ]

    @property
    def success(self) -> bool:
        return not self.required_errors

    def as_data(self) -> dict:
        return {
            "filledFields": self.filled,
            "fieldErrors": self.errors,
            "matchFallbacks": self.fallbacks,
        }


def _as_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class FormFiller:
    def __init__(
        self,
        driver: UIDriver,
        resolver: NodeResolver,
        field_delay_ms: int = 200,
        dropdown_timeout_ms: int = DROPDOWN_LIST_TIMEOUT_MS,
    ):
        self.driver = driver
        self.resolver = resolver
        self.field_delay_ms = field_delay_ms
        self.dropdown_timeout_ms = dropdown_timeout_ms

    async def fill(self, spec: FieldSpec, value: Any) -> FieldOutcome:
        if spec.kind == InputKind.SEARCH_DROPDOWN:
            return await self.fill_search_dropdown(spec, value)
        if spec.kind == InputKind.TEXTAREA:
            return await self.fill_textarea(spec, value)
        return await self.fill_input(spec, value)

    async def _locate(self, spec: FieldSpec, text: str):
        resolution = await self.resolver.resolve_usable(spec.name, spec.selectors)
        if not resolution.present:
            return None, FieldOutcome(spec.name, "missing", text, required=spec.required, error="field not found")
        if not resolution.usable:
            state = "hidden" if not resolution.visible else "disabled"
            return None, FieldOutcome(
                spec.name, state, text, resolution.selector, spec.required, error=f"field is {state}"
            )
        return resolution, None

    async def fill_input(self, spec: FieldSpec, value: Any) -> FieldOutcome:
        text = _as_text(value)
        if text is None:
            return FieldOutcome(spec.name, "skipped", required=spec.required)
        if spec.validation_pattern and not re.match(spec.validation_pattern, text):
            logger.warning(f"{spec.name}: value {text!r} fails validation")
            return FieldOutcome(spec.name, "invalid", text, required=spec.required, error=f"invalid value {text!r}")

        resolution, failure = await self._locate(spec, text)
        if failure:
            logger.warning(f"{spec.name}: {failure.error}")
            return failure

        node = resolution.node
        await node.fill(text)
        await self.driver.wait(self.field_delay_ms)

        actual = await node.input_value()
        if actual != text:
            logger.warning(f"{spec.name}: expected {text!r} after fill, found {actual!r}")
            return FieldOutcome(
                spec.name, "unverified", text, resolution.selector, spec.required,
                error=f"value verification failed (found {actual!r})",
            )
        logger.info(f"Filled {spec.name} = {text}")
        return FieldOutcome(spec.name, "filled", text, resolution.selector, spec.required)

    async def fill_textarea(self, spec: FieldSpec, value: Any) -> FieldOutcome:
        text = _as_text(value)
        if text is None:
            return FieldOutcome(spec.name, "skipped", required=spec.required)
        node = await self.resolver.resolve(spec.selectors)
        if node is None:
            return FieldOutcome(spec.name, "missing", text, required=spec.required, error="field not found")
        await node.fill(text)
        await self.driver.wait(self.field_delay_ms)
        return FieldOutcome(spec.name, "filled", text, required=spec.required)

    async def _list_options(self) -> List[UINode]:
        waited = 0
        while True:
            for selector in selectors.SELECTORS["dropdown_items"]:
                items = await self.driver.query_all(selector)
                if items:
                    return items
            if waited >= self.dropdown_timeout_ms:
                return []
            await self.driver.wait(DROPDOWN_POLL_MS)
            waited += DROPDOWN_POLL_MS

    async def fill_search_dropdown(self, spec: FieldSpec, value: Any) -> FieldOutcome:
        """Type into a server-backed dropdown and pick the best listed option."""
        text = _as_text(value)
        if text is None:
            return FieldOutcome(spec.name, "skipped", required=spec.required)

        resolution, failure = await self._locate(spec, text)
        if failure:
            logger.warning(f"{spec.name}: {failure.error}")
            return failure

        node = resolution.node
        await node.click()
        await node.fill(text)

        items = await self._list_options()
        texts = []
        for item in items:
            texts.append((await item.text_content() or "").strip())
        outcome = select_best_match(text, texts, spec.match_kind)

        if outcome.index is not None:
            await items[outcome.index].click()
        else:
            await self.driver.press("Enter")
        await self.driver.wait(self.field_delay_ms)

        if outcome.is_fallback:
            logger.warning(f"{spec.name}: fell back to {outcome.strategy.value} '{outcome.chosen}'")
        else:
            logger.info(f"Selected {spec.name} = {outcome.chosen} ({outcome.strategy.value}, {outcome.score})")
        return FieldOutcome(spec.name, "filled", outcome.chosen, resolution.selector, spec.required, match=outcome)
