from .driver import (
    AutomationError,
    ContextClosedError,
    ElementNotFoundError,
    NavigationTimeoutError,
    UIDriver,
    UINode,
)
from .resolver import FieldResolution, NodeResolver
from .matcher import FieldKind, MatchOutcome, score_candidate, select_best_match

__all__ = [
    "AutomationError", "ContextClosedError", "ElementNotFoundError", "NavigationTimeoutError",
    "UIDriver", "UINode", "FieldResolution", "NodeResolver",
    "FieldKind", "MatchOutcome", "score_candidate", "select_best_match",
]
