# --- Standard library imports ---
import time
import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Callable

# --- Third-party imports ---
import requests

# --- Project imports ---
from .config import Config
from .logger import get_logger
from .telemetry import tlog
from .account import Credentials, Settings
from .connectivity import ConnectivityProbe
from .session import SessionRecord, SessionStore
from .log_sink import EventReporter
from .time_service import TimeService


@dataclass(frozen=True)
class LoginOutcome:
    success: bool
    message: str
    attempt: int
    timestamp: datetime

class _Flight:
    """One in-progress login that concurrent callers can join."""

    def __init__(self):
        self.done = threading.Event()
        self.outcome: LoginOutcome | None = None

class LoginExecutor:
    """
    Submits the portal login form with a bounded, fixed-delay retry loop.

    Failures are returned as LoginOutcome values, never raised.
    Calls are single-flight: while one login is in progress, other
    callers wait for it and receive the same outcome.
    """

    def __init__(
        self,
        session_store: SessionStore,
        reporter: EventReporter,
        probe: ConnectivityProbe | None = None,
        login_url: str = Config.LOGIN_URL,
        max_retries: int = Config.MAX_RETRIES,
        retry_delay: float = Config.RETRY_DELAY_S,
        timeout: float = Config.LOGIN_TIMEOUT_S,
        time_service: TimeService | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.session_store = session_store
        self.report = reporter
        self.probe = probe or ConnectivityProbe()
        self.login_url = login_url
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.timeout = timeout
        self.time = time_service or TimeService()
        self.sleep = sleep
        self.logger = get_logger("login")

        self._lock = threading.Lock()
        self._flight: _Flight | None = None

    # ──────────────────────────────────────────────────────────────
    # Public API
    # ──────────────────────────────────────────────────────────────

    def login(self, credentials: Credentials, settings: Settings) -> LoginOutcome:
        with self._lock:
            flight = self._flight
            leader = flight is None
            if leader:
                flight = self._flight = _Flight()

        if not leader:
            self.logger.info("Login already in progress; waiting for its result")
            flight.done.wait()
            return flight.outcome

        try:
            flight.outcome = self._login(credentials, settings)
        except Exception as e:
            self.logger.exception("Unexpected error during login")
            flight.outcome = self._outcome(False, f"❌ Login aborted: {e}", 0)
        finally:
            with self._lock:
                self._flight = None
            flight.done.set()

        return flight.outcome

    # ──────────────────────────────────────────────────────────────
    # Internals
    # ──────────────────────────────────────────────────────────────

    def _login(self, credentials: Credentials, settings: Settings) -> LoginOutcome:
        if settings.check_connection and not self.probe.is_connected():
            self.report("❌ No internet connection", settings.log_to_file, logging.ERROR)
            return self._outcome(False, "❌ No internet connection; login skipped", 0)

        attempts = self.max_retries if settings.auto_retry else 1
        last_error = "no attempt made"

        for attempt in range(1, attempts + 1):
            self.report(
                f"🔐 Trying to login... (Attempt {attempt}/{attempts})",
                settings.log_to_file,
            )

            start = time.perf_counter()
            error = self._submit(credentials)
            elapsed_ms = (time.perf_counter() - start) * 1000
            self.logger.timing(f"Timing | login attempt {attempt:<3} [{elapsed_ms:8.1f} ms]")

            if error is None:
                self.session_store.save(SessionRecord(
                    username=credentials.username,
                    login_time=self.time.now(),
                    attempt=attempt,
                ))
                tlog(self.logger, "🟢", "LOGIN", "SUCCESS", credentials.username, f"attempt={attempt}")
                return self._finish(True, "✅ Login successful!", attempt, settings)

            last_error = error
            self.report(
                f"❌ Login attempt {attempt} failed: {error}",
                settings.log_to_file,
                logging.WARNING,
            )

            if attempt < attempts:
                self.report(
                    f"⏳ Waiting {self.retry_delay:g} seconds before retrying...",
                    settings.log_to_file,
                )
                self.sleep(self.retry_delay)

        tlog(self.logger, "🔴", "LOGIN", "FAILED", credentials.username,
             f"attempts={attempts}", level=logging.WARNING)
        return self._finish(
            False, f"❌ All login attempts failed: {last_error}", attempts, settings
        )

    def _submit(self, credentials: Credentials) -> str | None:
        """
        POST the login form once.

        Returns:
            None on HTTP 200, otherwise a short error description.
        """
        try:
            resp = requests.post(
                self.login_url,
                data={
                    "username": credentials.username,
                    "password": credentials.password,
                },
                headers={"User-Agent": Config.USER_AGENT},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            return f"{e.__class__.__name__}: {e}"

        if resp.status_code == 200:
            return None
        return f"HTTP {resp.status_code}: {resp.reason}"

    def _finish(
        self, success: bool, message: str, attempt: int, settings: Settings
    ) -> LoginOutcome:
        self.report(
            message,
            settings.log_to_file,
            logging.INFO if success else logging.ERROR,
        )
        return self._outcome(success, message, attempt)

    def _outcome(self, success: bool, message: str, attempt: int) -> LoginOutcome:
        return LoginOutcome(
            success=success,
            message=message,
            attempt=attempt,
            timestamp=self.time.now(),
        )
