import logging
from typing import Dict, List, Tuple

from estimation_rpa.models.payload import ProcessDefinition, ProcessSelection

logger = logging.getLogger(__name__)


def _defs(*rows: Tuple[str, str, bool, int]) -> List[ProcessDefinition]:
    return [
        ProcessDefinition(name=name, category=category, is_required=required, display_order=order)
        for name, category, required, order in rows
    ]


BASE_PROCESSES = _defs(
    ("Die Cutting", "Cutting", True, 1),
    ("Creasing", "Cutting", True, 2),
    ("Gluing", "Assembly", True, 3),
)

CONTENT_PROCESSES: Dict[str, List[ProcessDefinition]] = {
    "reverse tuck in": _defs(
        ("Window Patching", "Special", False, 10),
        ("UV Coating", "Finishing", False, 11),
    ),
    "straight tuck": _defs(
        ("Perforation", "Cutting", False, 10),
        ("Folding", "Assembly", False, 11),
    ),
    "auto bottom": _defs(
        ("Stitching", "Assembly", True, 10),
        ("Handle Attachment", "Special", False, 11),
    ),
    "pillow box": _defs(
        ("Ribbon Attachment", "Special", False, 10),
        ("Embossing", "Finishing", False, 11),
    ),
}

CLIENT_PROCESSES: Dict[str, List[ProcessDefinition]] = {
    "akrati offset": _defs(
        ("UV Coating", "Finishing", False, 20),
        ("Lamination", "Finishing", False, 21),
    ),
}


class ProcessSelectionService:
    """Default production processes for a content type and client."""

    def processes_for(self, content_type: str, client: str = "") -> ProcessSelection:
        content_key = (content_type or "").strip().lower()
        client_key = (client or "").strip().lower()
        selection = ProcessSelection(
            required_processes=[p for p in BASE_PROCESSES if p.is_required],
            content_based_processes=list(CONTENT_PROCESSES.get(content_key, [])),
            optional_processes=list(CLIENT_PROCESSES.get(client_key, [])),
        )
        logger.info(
            f"Selected {len(selection.required_processes)} required, "
            f"{len(selection.content_based_processes)} content-based, "
            f"{len(selection.optional_processes)} optional processes "
            f"for content '{content_type}', client '{client}'"
        )
        return selection

