"""Primitive UI-automation surface the workflow is written against.

Everything above this module talks to a `UIDriver` and the `UINode`s it
returns; `playwright_driver` provides the real implementation and the tests
provide an in-memory one.
"""
from typing import List, Optional, Protocol, Sequence, Union


class AutomationError(Exception):
    """Base class for failures raised by the automation layer."""


class NavigationTimeoutError(AutomationError):
    """The target did not answer within the navigation timeout."""


class ContextClosedError(AutomationError):
    """The page, context or browser went away under an in-flight operation."""


class ElementNotFoundError(AutomationError):
    """A required UI node was absent after every candidate sweep."""

    def __init__(self, field: str, candidates: Sequence[str]):
        self.field = field
        self.candidates = list(candidates)
        super().__init__(f"{field} not found (tried {len(self.candidates)} selectors)")


class UINode(Protocol):
    async def click(self, force: bool = False) -> None: ...

    async def dblclick(self) -> None: ...

    async def fill(self, text: str) -> None: ...

    async def select_option(self, value: Union[str, Sequence[str]]) -> None: ...

    async def is_visible(self) -> bool: ...

    async def is_enabled(self) -> bool: ...

    async def text_content(self) -> Optional[str]: ...

    async def get_attribute(self, name: str) -> Optional[str]: ...

    async def input_value(self) -> str: ...

    async def query(self, selector: str) -> Optional["UINode"]: ...

    async def query_all(self, selector: str) -> List["UINode"]: ...


class UIDriver(Protocol):
    @property
    def url(self) -> str: ...

    async def navigate(self, url: str, timeout_ms: int) -> None: ...

    async def query(self, selector: str) -> Optional[UINode]: ...

    async def query_all(self, selector: str) -> List[UINode]: ...

    async def wait(self, ms: int) -> None: ...

    async def screenshot(self, full_page: bool = True) -> bytes: ...

    async def evaluate(self, script: str) -> object: ...

    async def press(self, key: str) -> None: ...

    async def click(self, selector: str, force: bool = False) -> None: ...

    async def title(self) -> str: ...

    def is_closed(self) -> bool: ...
