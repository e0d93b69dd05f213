import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from estimation_rpa.automation.driver import UIDriver
from estimation_rpa.automation.forms import FormFiller
from estimation_rpa.automation.resolver import NodeResolver
from estimation_rpa.config import Settings
from estimation_rpa.config import settings as default_settings
from estimation_rpa.models.payload import JobPayload
from estimation_rpa.services.process_selection import ProcessSelectionService

logger = logging.getLogger(__name__)


@dataclass
class StepContext:
    """Everything a step may touch during one run."""
    driver: UIDriver
    payload: JobPayload
    resolver: NodeResolver
    forms: FormFiller
    settings: Settings = field(default_factory=lambda: default_settings)
    data: Dict[str, Any] = field(default_factory=dict)
    logger: logging.Logger = logger
    processes: ProcessSelectionService = field(default_factory=ProcessSelectionService)

    @classmethod
    def create(
        cls,
        driver: UIDriver,
        payload: JobPayload,
        config: Settings = default_settings,
        job_logger: Optional[logging.Logger] = None,
    ) -> "StepContext":
        resolver = NodeResolver(driver)
        return cls(
            driver=driver,
            payload=payload,
            resolver=resolver,
            forms=FormFiller(driver, resolver, field_delay_ms=config.FIELD_DELAY_MS),
            settings=config,
            logger=job_logger or logger,
        )

    async def pause(self, ms: int) -> None:
        await self.driver.wait(ms)
