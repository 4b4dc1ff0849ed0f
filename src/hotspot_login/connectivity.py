# --- Third-party imports ---
import requests

# --- Project imports ---
from .config import Config
from .logger import get_logger


logger = get_logger("connectivity")

class ConnectivityProbe:
    """
    Lightweight outbound HTTP check for working internet access.

    Redirects are followed, so a portal that bounces the probe to its
    own login page still reads as reachable; only a dead network or a
    non-2xx final response reads as offline.
    """

    def __init__(
        self,
        url: str = Config.PROBE_URL,
        timeout: float = Config.PROBE_TIMEOUT_S,
    ):
        self.url = url
        self.timeout = timeout

    def is_connected(self) -> bool:
        """
        Returns:
            True on a 2xx response, False on any error, timeout or other status.
        """
        try:
            resp = requests.get(self.url, timeout=self.timeout)
        except requests.RequestException as e:
            logger.debug(f"Probe failed via {self.url} ({e.__class__.__name__})")
            return False

        if 200 <= resp.status_code < 300:
            return True

        logger.debug(f"Probe returned HTTP {resp.status_code} from {self.url}")
        return False
