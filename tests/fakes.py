"""In-memory stand-ins for the UI driver, used by unit and integration tests."""
from typing import Callable, Dict, Iterable, List, Optional

from estimation_rpa.automation.driver import NavigationTimeoutError
from estimation_rpa.automation.selectors import SELECTORS, process_row_selectors

FAKE_PNG = b"\x89PNG\r\n\x1a\nfake-screenshot"


class FakeNode:
    def __init__(
        self,
        driver: Optional["FakeDriver"] = None,
        text: str = "",
        attributes: Optional[Dict[str, str]] = None,
        visible: bool = True,
        enabled: bool = True,
        accepts_input: bool = True,
        options: Optional[List[str]] = None,
        children: Optional[Dict[str, "FakeNode"]] = None,
        on_click: Optional[Callable[[], None]] = None,
        on_dblclick: Optional[Callable[[], None]] = None,
    ):
        self.driver = driver
        self.text = text
        self.attributes = dict(attributes or {})
        self.visible = visible
        self.enabled = enabled
        self.accepts_input = accepts_input
        self.options = options
        self.children = dict(children or {})
        self.on_click = on_click
        self.on_dblclick = on_dblclick
        self.value = ""
        self.selected = None
        self.clicks = 0
        self.dblclicks = 0

    async def click(self, force: bool = False) -> None:
        self.clicks += 1
        if self.on_click:
            self.on_click()

    async def dblclick(self) -> None:
        self.dblclicks += 1
        if self.on_dblclick:
            self.on_dblclick()

    async def fill(self, text: str) -> None:
        if self.accepts_input:
            self.value = text
        if self.options is not None and self.driver is not None:
            self.driver.open_dropdown(self, self.options)

    async def select_option(self, value) -> None:
        self.selected = value

    async def is_visible(self) -> bool:
        return self.visible

    async def is_enabled(self) -> bool:
        return self.enabled

    async def text_content(self) -> Optional[str]:
        return self.text

    async def get_attribute(self, name: str) -> Optional[str]:
        return self.attributes.get(name)

    async def input_value(self) -> str:
        return self.value

    async def query(self, selector: str) -> Optional["FakeNode"]:
        return self.children.get(selector)

    async def query_all(self, selector: str) -> List["FakeNode"]:
        node = self.children.get(selector)
        return [node] if node else []


class FakeDriver:
    """A page made of selector -> node entries; no real DOM matching."""

    def __init__(self, title: str = "Indus ERP"):
        self.nodes: Dict[str, FakeNode] = {}
        self.groups: Dict[str, List[FakeNode]] = {}
        self.unsupported: set = set()
        self.navigate_errors: Dict[str, Exception] = {}
        self.page_title = title
        self.closed = False
        self.current_url = "about:blank"
        self.dropdown_items: List[FakeNode] = []
        self.navigations: List[str] = []
        self.waits: List[int] = []
        self.pressed: List[str] = []
        self.clicked_selectors: List[str] = []
        self.scripts: List[str] = []
        self.queries: List[str] = []

    def add(self, selector: str, **kwargs) -> FakeNode:
        node = FakeNode(self, **kwargs)
        self.nodes[selector] = node
        return node

    def add_all(self, selectors: Iterable[str], **kwargs) -> None:
        for selector in selectors:
            self.add(selector, **kwargs)

    def remove(self, selector: str) -> None:
        self.nodes.pop(selector, None)

    def open_dropdown(self, field: FakeNode, options: List[str]) -> None:
        def choose(text):
            def _choose():
                field.selected = text
                self.dropdown_items = []
            return _choose

        self.dropdown_items = [FakeNode(self, text=o, on_click=choose(o)) for o in options]

    @property
    def url(self) -> str:
        return self.current_url

    async def navigate(self, url: str, timeout_ms: int) -> None:
        self.navigations.append(url)
        if url in self.navigate_errors:
            raise self.navigate_errors[url]
        self.current_url = url

    async def query(self, selector: str) -> Optional[FakeNode]:
        self.queries.append(selector)
        if selector in self.unsupported:
            raise ValueError(f"Unsupported selector: {selector}")
        return self.nodes.get(selector)

    async def query_all(self, selector: str) -> List[FakeNode]:
        if selector == SELECTORS["dropdown_items"][0]:
            return list(self.dropdown_items)
        if selector in self.groups:
            return list(self.groups[selector])
        node = self.nodes.get(selector)
        return [node] if node else []

    async def wait(self, ms: int) -> None:
        self.waits.append(ms)

    async def screenshot(self, full_page: bool = True) -> bytes:
        return FAKE_PNG

    async def evaluate(self, script: str) -> object:
        self.scripts.append(script)
        return True

    async def press(self, key: str) -> None:
        self.pressed.append(key)

    async def click(self, selector: str, force: bool = False) -> None:
        self.clicked_selectors.append(selector)

    async def title(self) -> str:
        return self.page_title

    def is_closed(self) -> bool:
        return self.closed


def timeout(url: str) -> NavigationTimeoutError:
    return NavigationTimeoutError(f"Timed out loading {url}")


QUALITY_OPTIONS = ["120 GSM Art Paper Gloss", "Art Board 300gsm", "Duplex Paper"]


def build_erp_page(processes: Iterable[str] = ("Die Cutting", "Creasing", "Gluing")) -> FakeDriver:
    """A fake ERP that lets the whole estimation workflow through."""
    driver = FakeDriver()
    for selector in (
        "#inputEmail", "#inputPassword", "#BtnLogin",
        "#SelFYearList", "#txt_user", "#txt_password", "#btnlogin",
        "#Customleftsidebar1_Span", "a[href='DYnamicQty.aspx']",
        ".introjs-skipbutton", "span[onclick='closeNavLeft()']",
        "#Add_Quantity_Button", "#txtqty1", "#Add_Content_Button", "#AllContents",
        "div.addcontentsize[title='Reverse Tuck In']",
        "#planJob_Size1",
        "#SizeHeight", "#SizeLength", "#SizeWidth", "#SizeOpenflap", "#SizePastingflap", "#JobPrePlan",
        "#PlanFColor", "#PlanBColor", "#PlanSpeFColor", "#PlanSpeBColor", "#PlanMakeReadyWastage",
        "#Trimmingtop", "#Trimmingbottom", "#Trimmingleft", "#Trimmingright",
        "#Stripingtop", "#Stripingbottom", "#Stripingleft", "#Stripingright",
        "#GridOperation", ".dx-datagrid-filter-row .dx-texteditor-input",
        "button:has-text('Show Cost')",
    ):
        driver.add(selector)

    driver.add("#Plan41", attributes={"id": "Plan41"})
    driver.add("#ItemPlanQuality", options=QUALITY_OPTIONS)
    driver.add("#ItemPlanGsm", options=["100", "120", "130"])
    driver.add("#ItemPlanMill", options=["JK Paper Mill", "ITC Mill"])
    driver.add("#ItemPlanFinish", options=["Gloss", "Matt"])
    driver.add("#PlanPrintingStyle", options=["Single Side", "Work & Turn"])
    driver.add("#PlanPlateType", options=["CTP Plate", "PS Plate"])
    driver.add("#PlanWastageType", options=["Standard", "Custom"])
    driver.add("#PlanPrintingGrain", options=["Across", "Along"])
    driver.add("#PlanOnlineCoating", options=["None", "Aqueous"])

    for name in processes:
        add_process_row(driver, name)
    return driver


def add_process_row(driver: FakeDriver, name: str) -> FakeNode:
    control = FakeNode(driver)
    return driver.add(process_row_selectors(name)[0], text=name, children={"td:first-child": control})


SAMPLE_PAYLOAD = {
    "companyLogin": {"companyName": "indusweb", "password": "123"},
    "userLogin": {"username": "Admin", "password": "99811"},
    "jobDetails": {"client": "Akrati Offset", "content": "Reverse Tuck In", "quantity": 10000},
    "jobSize": {"height": 100, "length": 150, "width": 50, "oFlap": 20, "pFlap": 15},
    "material": {"quality": "Real Art Paper", "gsm": 120, "mill": "JK", "finish": "Gloss"},
    "printingDetails": {
        "frontColors": 4, "backColors": 0, "specialFront": 0, "specialBack": 0,
        "style": "Single Side", "plate": "CTP Plate",
    },
    "wastageFinishing": {
        "makeReadySheets": 100, "wastageType": "Standard", "grainDirection": "Across",
        "onlineCoating": "None", "trimming": "5/5/5/5", "striping": "0/0/0/0",
    },
}
