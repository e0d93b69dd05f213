import logging
from datetime import datetime
from estimation_rpa.config import settings
from estimation_rpa.core.config import LOGS_DIR
from pythonjsonlogger.json import JsonFormatter

def setup_job_logger(job_id: str) -> logging.Logger:
    """Setup a dedicated logger for a single job run."""
    logger = logging.getLogger(f"job_{job_id}")
    if not logger.handlers:  # Only add handler if none exists
        safe_name = "".join(c if c.isalnum() else "_" for c in str(job_id))
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = LOGS_DIR / f"job_{safe_name}_{timestamp}.log"

        logger.setLevel(logging.INFO)
        logger.propagate = False

        # create a json formatter for structured logging
        formatter = JsonFormatter('%(asctime)s - %(levelname)s - %(message)s')

        fh = logging.FileHandler(log_file)
        fh.setLevel(logging.INFO)
        fh.setFormatter(formatter)
        logger.addHandler(fh)

        ch = logging.StreamHandler()
        ch.setLevel(logging.INFO)
        ch.setFormatter(formatter)
        logger.addHandler(ch)

    return logger

def release_job_logger(logger: logging.Logger) -> None:
    """Close and detach the handlers of a per-job logger."""
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)

# Setup root logger
logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
