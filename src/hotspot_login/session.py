# --- Standard library imports ---
import json
from pathlib import Path
from dataclasses import dataclass
from datetime import datetime

# --- Project imports ---
from .logger import get_logger
from .time_service import TimeService


logger = get_logger("session")

NEVER_LOGGED_IN = "Never logged in"

@dataclass(frozen=True)
class SessionRecord:
    username: str
    login_time: datetime
    attempt: int
    last_login: datetime | None = None   # set by SessionStore.save()

class SessionStore:
    """
    Single-file record of the most recent successful login.

    The file is fully replaced on every save. A missing or corrupt
    file reads as "never logged in", not as an error.
    """

    def __init__(self, path: Path, time_service: TimeService | None = None):
        self.path = Path(path)
        self.time = time_service or TimeService()

    def save(self, record: SessionRecord) -> None:
        """Overwrite the session file; failures are logged, never raised."""
        payload = {
            "username": record.username,
            "loginTime": self.time.to_iso(record.login_time),
            "attempt": record.attempt,
            "lastLogin": self.time.to_iso(self.time.now()),
        }
        try:
            self.path.write_text(json.dumps(payload, indent=2))
        except OSError as e:
            logger.error(f"Failed to save session: {e}")

    def load(self) -> SessionRecord | None:
        try:
            data = json.loads(self.path.read_text())
            last_login = data.get("lastLogin")
            return SessionRecord(
                username=data["username"],
                login_time=self.time.parse_iso(data["loginTime"]),
                attempt=int(data["attempt"]),
                last_login=self.time.parse_iso(last_login) if last_login else None,
            )
        except FileNotFoundError:
            return None
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning(f"Ignoring unreadable session file {self.path} ({e.__class__.__name__})")
            return None

    def describe(self) -> str:
        """
        Human-readable "when did I last log in" answer.

        Elapsed minutes are floored and measured from the wall clock
        at call time.
        """
        record = self.load()
        if record is None:
            return NEVER_LOGGED_IN

        last_login = record.last_login or record.login_time
        elapsed_s = (self.time.now() - last_login).total_seconds()
        minutes = int(elapsed_s // 60)
        return (
            f"Last login: {self.time.format_local(last_login)} "
            f"({minutes} minutes ago)"
        )
