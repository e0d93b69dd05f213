import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from estimation_rpa.automation.driver import (
    ContextClosedError,
    ElementNotFoundError,
    UIDriver,
    UINode,
)

logger = logging.getLogger(__name__)


@dataclass
class FieldResolution:
    """What a resolution attempt found for one field."""
    field: str
    selector: Optional[str] = None
    node: Optional[UINode] = None
    present: bool = False
    visible: bool = False
    enabled: bool = False

    @property
    def usable(self) -> bool:
        return self.present and self.visible and self.enabled


class NodeResolver:
    """Find UI nodes through ordered candidate selector chains."""

    def __init__(self, driver: UIDriver, retries: int = 1, delay_ms: int = 0):
        self.driver = driver
        self.retries = retries
        self.delay_ms = delay_ms

    async def _query(self, selector: str, scope=None) -> Optional[UINode]:
        try:
            return await (scope or self.driver).query(selector)
        except ContextClosedError:
            raise
        except Exception as e:
            # Unsupported selector syntax on this snapshot counts as "absent".
            logger.debug(f"Selector {selector!r} raised {type(e).__name__}: {e}")
            return None

    async def resolve(self, candidates: Sequence[str], scope=None) -> Optional[UINode]:
        """Return the first present node, trying candidates in order."""
        for selector in candidates:
            node = await self._query(selector, scope)
            if node is not None:
                logger.debug(f"Resolved {selector!r}")
                return node
        return None

    async def resolve_with_retry(
        self,
        candidates: Sequence[str],
        retries: Optional[int] = None,
        delay_ms: Optional[int] = None,
        scope=None,
    ) -> Optional[UINode]:
        """Repeat the full candidate sweep; no wait after the last sweep."""
        retries = self.retries if retries is None else retries
        delay_ms = self.delay_ms if delay_ms is None else delay_ms
        for sweep in range(1, max(retries, 1) + 1):
            node = await self.resolve(candidates, scope)
            if node is not None:
                return node
            if sweep < retries:
                await self._sleep(delay_ms)
        return None

    async def resolve_usable(
        self,
        field: str,
        candidates: Sequence[str],
        retries: Optional[int] = None,
        delay_ms: Optional[int] = None,
    ) -> FieldResolution:
        """Find the first candidate that is present, visible and enabled.

        The returned record describes the usable node, or the last present
        one when none was usable.
        """
        retries = self.retries if retries is None else retries
        delay_ms = self.delay_ms if delay_ms is None else delay_ms
        last = FieldResolution(field=field)
        for sweep in range(1, max(retries, 1) + 1):
            for selector in candidates:
                node = await self._query(selector)
                if node is None:
                    continue
                resolution = FieldResolution(
                    field=field,
                    selector=selector,
                    node=node,
                    present=True,
                    visible=await node.is_visible(),
                    enabled=await node.is_enabled(),
                )
                if resolution.usable:
                    return resolution
                logger.debug(
                    f"{field}: {selector!r} present but "
                    f"{'hidden' if not resolution.visible else 'disabled'}"
                )
                last = resolution
            if sweep < retries:
                await self._sleep(delay_ms)
        return last

    async def require(
        self,
        field: str,
        candidates: Sequence[str],
        retries: Optional[int] = None,
        delay_ms: Optional[int] = None,
    ) -> UINode:
        """Resolve a node the step cannot do without."""
        node = await self.resolve_with_retry(candidates, retries, delay_ms)
        if node is None:
            logger.error(f"Required node '{field}' not found")
            raise ElementNotFoundError(field, candidates)
        return node

    async def optional(self, field: str, candidates: Sequence[str], **kwargs) -> Optional[UINode]:
        node = await self.resolve_with_retry(candidates, **kwargs)
        if node is None:
            logger.info(f"Optional node '{field}' not present")
        return node

    async def _sleep(self, delay_ms: int) -> None:
        if delay_ms > 0:
            await self.driver.wait(delay_ms)
