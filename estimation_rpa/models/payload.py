"""Structured input of one ERP estimation run.

The payload is produced upstream (e-mail extraction) and arrives in job
metadata as camelCase JSON; snake_case names are accepted as well.
"""
from typing import List, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

Margins = Tuple[int, int, int, int]
ZERO_MARGINS: Margins = (0, 0, 0, 0)


class PayloadModel(BaseModel):
    """Base for all payload sections: frozen, camelCase aliases."""
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class CompanyLogin(PayloadModel):
    company_name: str = ""
    password: str = ""


class UserLogin(PayloadModel):
    username: str = ""
    password: str = ""


class JobDetails(PayloadModel):
    client: str = ""
    content: str = ""
    quantity: Optional[int] = None


class JobSize(PayloadModel):
    height: Optional[int] = None
    length: Optional[int] = None
    width: Optional[int] = None
    o_flap: Optional[int] = Field(None, alias="oFlap")
    p_flap: Optional[int] = Field(None, alias="pFlap")


class Material(PayloadModel):
    quality: str = ""
    gsm: Optional[int] = None
    mill: str = ""
    finish: str = ""


class PrintingDetails(PayloadModel):
    front_colors: Optional[int] = None
    back_colors: Optional[int] = None
    special_front: Optional[int] = None
    special_back: Optional[int] = None
    style: str = ""
    plate: str = ""


def parse_margins(value) -> Margins:
    """Parse a top/bottom/left/right margin set.

    Accepts a 4-sequence or the "T/B/L/R" wire string. Anything malformed
    falls back to all zeros.
    """
    if value is None or value == "":
        return ZERO_MARGINS
    try:
        parts = value.split("/") if isinstance(value, str) else list(value)
        if len(parts) != 4:
            return ZERO_MARGINS
        return tuple(int(str(p).strip()) for p in parts)
    except (TypeError, ValueError):
        return ZERO_MARGINS


class WastageFinishing(PayloadModel):
    make_ready_sheets: Optional[int] = None
    wastage_type: str = ""
    grain_direction: str = ""
    online_coating: str = ""
    trimming: Margins = ZERO_MARGINS
    striping: Margins = ZERO_MARGINS

    @field_validator("trimming", "striping", mode="before")
    def split_margins(cls, v):
        return parse_margins(v)


class ProcessDefinition(PayloadModel):
    name: str
    category: str = ""
    is_required: bool = False
    display_order: int = 0


class ProcessSelection(PayloadModel):
    required_processes: List[ProcessDefinition] = Field(default_factory=list)
    content_based_processes: List[ProcessDefinition] = Field(default_factory=list)
    optional_processes: List[ProcessDefinition] = Field(default_factory=list)

    def ordered(self) -> List[Tuple[str, ProcessDefinition]]:
        """Return (group, process) pairs, required first, each group by display order."""
        groups = (
            ("required", self.required_processes),
            ("content_based", self.content_based_processes),
            ("optional", self.optional_processes),
        )
        ordered = []
        for group, processes in groups:
            for process in sorted(processes, key=lambda p: p.display_order):
                ordered.append((group, process))
        return ordered

    @property
    def is_empty(self) -> bool:
        return not (self.required_processes or self.content_based_processes or self.optional_processes)


class JobPayload(PayloadModel):
    """Immutable input to one workflow run."""
    company_login: Optional[CompanyLogin] = None
    user_login: Optional[UserLogin] = None
    job_details: Optional[JobDetails] = None
    job_size: Optional[JobSize] = None
    material: Optional[Material] = None
    printing_details: Optional[PrintingDetails] = None
    wastage_finishing: Optional[WastageFinishing] = None
    process_selection: Optional[ProcessSelection] = None
