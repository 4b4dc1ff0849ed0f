# --- Standard library imports ---
import os
from pathlib import Path

# --- Third-party imports ---
from dotenv import load_dotenv


# Load .env once
load_dotenv()

def _env_path(name: str, home: Path, default_name: str) -> Path:
    value = os.getenv(name)
    return Path(value) if value else home / default_name

class Config:
    """Centralized config for the portal endpoint, data files and timing policy"""

    # --- Portal ---
    LOGIN_URL = os.getenv("HOTSPOT_LOGIN_URL", "http://hotspot2.stymsta.sch.id/login")

    # --- Data files ---
    HOME = Path(os.getenv("HOTSPOT_HOME", "."))
    CONFIG_FILE = _env_path("HOTSPOT_CONFIG_FILE", HOME, "config.json")
    SESSION_FILE = _env_path("HOTSPOT_SESSION_FILE", HOME, "session.json")
    LOG_FILE = _env_path("HOTSPOT_LOG_FILE", HOME, "login.log")

    # --- Retry Policy (NOT user configurable) ---
    MAX_RETRIES = 3
    RETRY_DELAY_S = 5
    LOGIN_TIMEOUT_S = 15   # seconds per POST

    # --- Connectivity Probe (NOT user configurable) ---
    PROBE_URL = "http://www.google.com"
    PROBE_TIMEOUT_S = 10

    # --- Scheduling Policy (NOT user configurable) ---
    RELOGIN_INTERVAL_S = 15 * 60
    CONNECTIVITY_INTERVAL_S = 5 * 60
    RESTART_PAUSE_S = 2

    USER_AGENT = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/120.0.0.0 Safari/537.36"
    )

    # --- Observability Policy ---
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    LOG_TIMING = os.getenv("LOG_TIMING", "false").lower() == "true"
