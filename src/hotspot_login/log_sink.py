# --- Standard library imports ---
import logging
from pathlib import Path

# --- Project imports ---
from .logger import get_logger
from .time_service import TimeService


logger = get_logger("log_sink")

class LogSink:
    """
    Append-only, human-readable event file.

    Best-effort only: write failures are logged to the console
    and otherwise dropped.
    """

    def __init__(self, path: Path, time_service: TimeService | None = None):
        self.path = Path(path)
        self.time = time_service or TimeService()

    def append(self, line: str) -> None:
        """Append one already-prefixed line."""
        try:
            with self.path.open("a", encoding="utf-8") as fh:
                fh.write(f"{line}\n")
        except OSError as e:
            logger.warning(f"Failed to write log file {self.path}: {e}")

    def stamp(self, message: str) -> str:
        return f"[{self.time.format_local(self.time.now())}] {message}"

    def read(self) -> str | None:
        """Return the whole file, or None when there is nothing to show."""
        try:
            return self.path.read_text(encoding="utf-8")
        except OSError:
            return None

class EventReporter:
    """
    Routes service events to the console logger and, when the user's
    `logToFile` setting is on, to the LogSink file.
    """

    def __init__(self, sink: LogSink, name: str = "events"):
        self.sink = sink
        self.logger = get_logger(name)

    def __call__(
        self,
        message: str,
        log_to_file: bool,
        level: int = logging.INFO,
    ) -> None:
        self.logger.log(level, message, stacklevel=2)
        if log_to_file:
            self.sink.append(self.sink.stamp(message))
