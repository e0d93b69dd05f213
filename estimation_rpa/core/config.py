import os
from pathlib import Path
from dotenv import load_dotenv
from cachetools import TTLCache

# Load environment variables
load_dotenv()

# Global Constants
JOB_TYPE_ERP_ESTIMATION = "erp-estimation-workflow"
MAX_RETRY_ATTEMPTS = 3
RETRY_BASE_MINUTES = 2  # delay before retry n is RETRY_BASE_MINUTES ** n minutes

# Timeouts (milliseconds)
NAVIGATION_TIMEOUT_MS = 30000
DROPDOWN_LIST_TIMEOUT_MS = 5000

# In-flight job ids, guards against the same job being delivered twice
# while a worker slot is still running it.
IN_FLIGHT_JOBS = TTLCache(maxsize=1000, ttl=3600)

# Directory Configuration
BASE_DIR = Path(__file__).parent.parent.parent
GENERATED_DIR = Path(os.getenv("GENERATED_DIR", BASE_DIR / "generated"))
LOGS_DIR = GENERATED_DIR / "logs"
SCREENSHOTS_DIR = GENERATED_DIR / "screenshots"

# Ensure directories exist
GENERATED_DIR.mkdir(exist_ok=True, parents=True)
LOGS_DIR.mkdir(exist_ok=True)
SCREENSHOTS_DIR.mkdir(exist_ok=True)
