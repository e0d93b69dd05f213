"""Selector catalog for the estimation screens.

Every UI node the workflow touches is described by an ordered tuple of
candidate selectors; order is preference. Markup on the target drifts, so
deployments can prepend their own candidates from a YAML file
(`SELECTOR_OVERRIDES_FILE`) without touching code:

    company_name:
      - "#NewCompanyField"
    planning.quality:
      - "#ddl_QualityV2"
"""
import logging
from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path
from typing import Dict, Optional, Tuple

import yaml

from estimation_rpa.automation.matcher import FieldKind

logger = logging.getLogger(__name__)

Candidates = Tuple[str, ...]

NUMERIC_PATTERN = r"^\d+$"


SELECTORS: Dict[str, Candidates] = {
    # Company login
    "company_name": ("#inputEmail", "[name='inputEmail']", "[placeholder='Company Name']"),
    "company_password": ("#inputPassword", "[name='inputPassword']", "[type='password']"),
    "company_login_button": ("#BtnLogin", "[name='BtnLogin']", "[value='Login']"),
    # User login
    "financial_year": ("#SelFYearList", "[name='cars']"),
    "username": ("#txt_user", "[name='txt_user']", "[placeholder='Username']"),
    "user_password": ("#txt_password", "[name='txt_password']", "[placeholder='Password']"),
    "user_login_button": ("#btnlogin", "[name='btnlogin']", "[value='Sign in']"),
    # Navigation
    "sidebar_menu": ("#Customleftsidebar1_Span", ".fa-bars", "i.fa.fa-bars"),
    "estimation_link": (
        "a[href='DYnamicQty.aspx']",
        ".nav-item a:has-text('Estimation')",
        "text=Estimation",
    ),
    # Overlays
    "tour_skip": (".introjs-skipbutton", "a[role='button']:has-text('Skip')"),
    "quotation_panel_close": (
        "span[onclick='closeNavLeft()']",
        "[onclick*='closeNavLeft']",
    ),
    # Quantity / content
    "add_quantity": (
        "#Add_Quantity_Button",
        "a.myButton:has-text('Add Quantity')",
        ".myButton:has-text('Add Quantity')",
        "a[id='Add_Quantity_Button']",
    ),
    "quantity_input": (
        "#txtqty1",
        "input[id='txtqty1']",
        "[placeholder='Enter Qty1']",
        ".forTextBox[placeholder*='Qty']",
    ),
    "add_content": (
        "#Add_Content_Button",
        "a.myButton:has-text('Add Content')",
        "[data-target='#largeModal']",
        "a[id='Add_Content_Button']",
    ),
    "content_container": ("#AllContents", "#largeModal"),
    "content_items": ("div.addcontentsize",),
    # Plan row ids depend on which content row the ERP created
    "plan_button": (
        "#Plan41", "#Plan21", "#Plan31", "#Plan11", "#Plan51",
        "#ConRecord41 #Plan41", "#ConRecord21 #Plan21", "#ConRecord31 #Plan31",
        "div.planWindow.planme_btn[onclick='allQuantity(this);']",
        ".planWindow.planme_btn",
        "td[id*='ConRecord'] div[onclick*='allQuantity']",
        "[onclick='allQuantity(this);']",
    ),
    "planning_sheet": ("#planJob_Size1",),
    # Processes grid
    "process_grid": ("#GridOperation", ".dx-datagrid"),
    "process_filter": (
        ".dx-datagrid-filter-row .dx-texteditor-input",
        "#process_search",
        "[placeholder*='Search Process']",
    ),
    # Costing
    "show_cost": (
        "button:has-text('Show Cost')",
        "#showCost",
        ".show-cost-button",
        "[data-action='show-cost']",
    ),
    # Search-dropdown popup
    "dropdown_items": (
        ".dx-popup-content .dx-list .dx-list-item",
        ".dx-selectbox-popup .dx-list .dx-list-item",
        ".dx-overlay .dx-list .dx-item",
    ),
}


def quote_text(value: str) -> str:
    """Escape a value for use inside a single-quoted selector string."""
    return value.replace("\\", "\\\\").replace("'", "\\'")


def content_selectors(content: str) -> Candidates:
    """Candidate selectors for one content tile in the Add Content dialog."""
    content = quote_text(content)
    return (
        f"div.addcontentsize[title='{content}']",
        f".addcontentsize[title='{content}']",
        f"#AllContents .addcontentsize[title='{content}']",
        f"[title='{content}'].addcontentsize",
        f".addcontentsize:has-text('{content}')",
        f"#AllContents .addcontentsize:has-text('{content}')",
    )


def process_row_selectors(name: str) -> Candidates:
    name = quote_text(name)
    return (
        f".dx-datagrid-rowsview tr:has-text('{name}')",
        f"#GridOperation tr:has-text('{name}')",
    )


PROCESS_ADD_CONTROL: Candidates = ("td:first-child", ".dx-datagrid-action", ".dx-icon-add")


class InputKind(str, Enum):
    INPUT = "input"
    SEARCH_DROPDOWN = "search_dropdown"
    TEXTAREA = "textarea"


@dataclass(frozen=True)
class FieldSpec:
    """One planning-sheet field: where it lives and how it is filled."""
    name: str
    selectors: Candidates
    kind: InputKind = InputKind.INPUT
    required: bool = False
    validation_pattern: Optional[str] = None
    match_kind: FieldKind = FieldKind.GENERIC


def _numeric(name, selectors, required=False) -> FieldSpec:
    return FieldSpec(name, selectors, required=required, validation_pattern=NUMERIC_PATTERN)


def _dropdown(name, selectors, match_kind=FieldKind.GENERIC) -> FieldSpec:
    return FieldSpec(name, selectors, kind=InputKind.SEARCH_DROPDOWN, match_kind=match_kind)


SIZE_FIELDS: Dict[str, FieldSpec] = {
    "height": _numeric("height", ("#SizeHeight", "[name='H']", "[placeholder*='Height']"), required=True),
    "length": _numeric("length", ("#SizeLength", "[name='L']", "[placeholder*='Length']"), required=True),
    "width": _numeric("width", ("#SizeWidth", "[name='W']", "[placeholder*='Width']"), required=True),
    "o_flap": _numeric("o_flap", ("#SizeOpenflap", "[name='OF']", "[placeholder*='Openflap']"), required=True),
    "p_flap": _numeric("p_flap", ("#SizePastingflap", "[name='PF']", "[placeholder*='Pastingflap']"), required=True),
}

# Shown by the ERP only for some content types
FOLDED_FIELDS: Dict[str, FieldSpec] = {
    "folded_h": _numeric("folded_h", ("#JobFoldedH", "[name='FH']", "[placeholder*='Folded H']")),
    "folded_l": _numeric("folded_l", ("#JobFoldedL", "[name='FL']", "[placeholder*='Folded L']")),
}

SEAL_FIELDS: Dict[str, FieldSpec] = {
    "center_seal": _numeric("center_seal", ("#SizeCenterSeal",)),
    "side_seal": _numeric("side_seal", ("#SizeSideSeal",)),
}
SEAL_DEFAULT = 0

SIZE_SUMMARY = FieldSpec(
    "job_size_summary",
    ("#JobPrePlan", "[placeholder*='Job Size']"),
    kind=InputKind.TEXTAREA,
)

MATERIAL_FIELDS: Dict[str, FieldSpec] = {
    "quality": _dropdown("quality", ("#ItemPlanQuality", "#ddl_Quality", "[name*='quality']"), FieldKind.QUALITY),
    "gsm": _dropdown("gsm", ("#ItemPlanGsm", "#txt_GSM", "[name*='gsm']", "[placeholder*='GSM']"), FieldKind.GSM),
    "mill": _dropdown("mill", ("#ItemPlanMill", "#ddl_Mill", "[name*='mill']"), FieldKind.MILL),
    "finish": _dropdown("finish", ("#ItemPlanFinish", "#ddl_Finish", "[name*='finish']"), FieldKind.FINISH),
}

PRINTING_FIELDS: Dict[str, FieldSpec] = {
    "front_colors": _numeric("front_colors", ("#PlanFColor", "#txt_FrontColors", "[placeholder*='Front Color']")),
    "back_colors": _numeric("back_colors", ("#PlanBColor", "#txt_BackColors", "[placeholder*='Back Color']")),
    "special_front": _numeric("special_front", ("#PlanSpeFColor", "#txt_SpecialFront", "[placeholder*='Special Front']")),
    "special_back": _numeric("special_back", ("#PlanSpeBColor", "#txt_SpecialBack", "[placeholder*='Special Back']")),
    "style": _dropdown("style", ("#PlanPrintingStyle", "[placeholder*='Printing Style']")),
    "plate": _dropdown("plate", ("#PlanPlateType", "[placeholder*='Plate Type']")),
}

WASTAGE_FIELDS: Dict[str, FieldSpec] = {
    "make_ready_sheets": _numeric("make_ready_sheets", ("#PlanMakeReadyWastage", "#txt_MakeReady", "[placeholder*='Make Ready']")),
    "wastage_type": _dropdown("wastage_type", ("#PlanWastageType", "[placeholder*='Select Type']")),
    "grain_direction": _dropdown("grain_direction", ("#PlanPrintingGrain", "[placeholder*='Grain Direction']")),
    "online_coating": _dropdown("online_coating", ("#PlanOnlineCoating", "[placeholder*='coating']")),
}

MARGIN_SIDES = ("top", "bottom", "left", "right")

TRIMMING_FIELDS: Tuple[FieldSpec, ...] = tuple(
    _numeric(f"trimming_{side}", (f"#Trimming{side}", f"[name='Trimming{side}']")) for side in MARGIN_SIDES
)
STRIPING_FIELDS: Tuple[FieldSpec, ...] = tuple(
    _numeric(f"striping_{side}", (f"#Striping{side}", f"[name='Striping{side}']")) for side in MARGIN_SIDES
)


def load_selector_overrides(path) -> Dict[str, Candidates]:
    """Read a YAML mapping of node name -> list of extra candidate selectors."""
    path = Path(path)
    if not path.exists():
        logger.warning(f"Selector overrides file not found: {path}")
        return {}
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Selector overrides in {path} must be a mapping")
    overrides = {}
    for name, candidates in data.items():
        if isinstance(candidates, str):
            candidates = [candidates]
        overrides[str(name)] = tuple(str(c) for c in candidates or ())
    logger.info(f"Loaded selector overrides for {len(overrides)} nodes from {path}")
    return overrides


def apply_overrides(overrides: Dict[str, Candidates]) -> None:
    """Prepend override candidates to the built-in catalog, in place.

    Plain names address `SELECTORS`; "planning.<field>" addresses a planning
    sheet field.
    """
    field_tables = (SIZE_FIELDS, FOLDED_FIELDS, MATERIAL_FIELDS, PRINTING_FIELDS, WASTAGE_FIELDS)
    for name, extra in overrides.items():
        if name.startswith("planning."):
            field = name.split(".", 1)[1]
            table = next((t for t in field_tables if field in t), None)
            if table is None:
                logger.warning(f"Unknown planning field in overrides: {field}")
                continue
            spec = table[field]
            table[field] = replace(spec, selectors=tuple(extra) + spec.selectors)
        elif name in SELECTORS:
            SELECTORS[name] = tuple(extra) + SELECTORS[name]
        else:
            logger.warning(f"Unknown selector name in overrides: {name}")
