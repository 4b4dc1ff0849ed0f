# --- Standard library imports ---
import time
import logging
import threading
from enum import Enum, auto
from pathlib import Path
from dataclasses import replace
from typing import Callable

# --- Project imports ---
from .config import Config
from .logger import get_logger
from .telemetry import tlog
from .errors import ConfigError
from .account import AccountConfig, Settings, load_account
from .connectivity import ConnectivityProbe
from .login import LoginExecutor, LoginOutcome
from .log_sink import EventReporter, LogSink
from .session import SessionStore


class ServiceState(Enum):
    STOPPED = auto()
    RUNNING = auto()

    def __str__(self) -> str:
        return self.name

class RepeatingTimer:
    """
    Fires `callback` every `interval` seconds on a daemon thread until cancelled.

    Ticks on one timer are serialized. Cancelling stops future ticks
    but never interrupts a callback that is already running.
    """

    def __init__(self, interval: float, callback: Callable[[], None], name: str):
        self.interval = interval
        self.callback = callback
        self.name = name
        self._cancelled = threading.Event()
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)
        self.logger = get_logger("timer")

    def start(self) -> None:
        self._thread.start()

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def active(self) -> bool:
        return self._thread.is_alive() and not self._cancelled.is_set()

    def _run(self) -> None:
        while not self._cancelled.wait(self.interval):
            try:
                self.callback()
            except Exception:
                self.logger.exception(f"Unhandled exception in {self.name} tick")

TimerFactory = Callable[[float, Callable[[], None], str], RepeatingTimer]

class Scheduler:
    """
    Owns the service lifecycle and its two repeating timers.

    Transitions:
        STOPPED --start()--> RUNNING   (immediate login, timers armed)
        RUNNING --start()--> RUNNING   (no-op, warning)
        RUNNING --stop()---> STOPPED   (timers cancelled)
        STOPPED --stop()---> STOPPED   (no-op)

    A login already in flight when stop() is called runs to completion.
    """

    def __init__(
        self,
        config_path: Path,
        executor: LoginExecutor,
        session_store: SessionStore,
        reporter: EventReporter,
        probe: ConnectivityProbe | None = None,
        timer_factory: TimerFactory = RepeatingTimer,
        relogin_interval: float = Config.RELOGIN_INTERVAL_S,
        connectivity_interval: float = Config.CONNECTIVITY_INTERVAL_S,
        restart_pause: float = Config.RESTART_PAUSE_S,
        sleep: Callable[[float], None] = time.sleep,
    ):
        # ─── Dependencies / Configuration ───
        self.config_path = Path(config_path)
        self.executor = executor
        self.session_store = session_store
        self.report = reporter
        self.probe = probe or executor.probe
        self.timer_factory = timer_factory
        self.relogin_interval = relogin_interval
        self.connectivity_interval = connectivity_interval
        self.restart_pause = restart_pause
        self.sleep = sleep
        self.logger = get_logger("scheduler")

        # ─── Runtime State ───
        self._state = ServiceState.STOPPED
        self._account: AccountConfig | None = None
        self._login_timer: RepeatingTimer | None = None
        self._connectivity_timer: RepeatingTimer | None = None
        self._run_id = 0   # bumped by every successful start()
        self._lock = threading.RLock()
        self._stopped = threading.Event()
        self._stopped.set()

    @classmethod
    def from_config(cls) -> "Scheduler":
        """Wire the service from the operational Config."""
        session_store = SessionStore(Config.SESSION_FILE)
        reporter = EventReporter(LogSink(Config.LOG_FILE))
        executor = LoginExecutor(session_store, reporter)
        return cls(Config.CONFIG_FILE, executor, session_store, reporter)

    # ──────────────────────────────────────────────────────────────
    # State
    # ──────────────────────────────────────────────────────────────

    @property
    def state(self) -> ServiceState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state is ServiceState.RUNNING

    @property
    def _log_to_file(self) -> bool:
        return self._account is not None and self._account.settings.log_to_file

    # ──────────────────────────────────────────────────────────────
    # Lifecycle
    # ──────────────────────────────────────────────────────────────

    def start(self) -> bool:
        """
        Load the account, log in once and arm the timers.

        Returns:
            False if the service was already running.

        Raises:
            ConfigError: the account could not be loaded; the service stays STOPPED.
        """
        with self._lock:
            if self.is_running:
                self.report("Service already running", self._log_to_file, logging.WARNING)
                return False

            self.report("🚀 Starting Auto Login Service...", self._log_to_file)
            try:
                account = load_account(self.config_path)
            except ConfigError as e:
                self.report(f"❌ Failed to start service: {e}", self._log_to_file, logging.ERROR)
                raise

            self._account = account
            self._run_id += 1
            run_id = self._run_id
            self._state = ServiceState.RUNNING
            self._stopped.clear()
            self.report("✅ Config loaded successfully", self._log_to_file)
            self.report(f"📊 {self.session_store.describe()}", self._log_to_file)

        self.login_now()

        with self._lock:
            # stop(), or stop() + start() from another thread, may have
            # landed while the first login was in flight
            if not self.is_running or self._run_id != run_id:
                return True

            self._login_timer = self.timer_factory(
                self.relogin_interval, self._on_relogin_tick, "relogin-timer"
            )
            self._login_timer.start()

            if account.settings.check_connection:
                self._connectivity_timer = self.timer_factory(
                    self.connectivity_interval, self._on_connectivity_tick, "connectivity-timer"
                )
                self._connectivity_timer.start()

            tlog(self.logger, "🟢", "SERVICE", str(self._state),
                 account.credentials.username,
                 f"relogin={self.relogin_interval:g}s | "
                 f"connectivity={'on' if self._connectivity_timer else 'off'}")
            self.report(
                f"✅ Service running. Auto login every {self.relogin_interval / 60:g} minutes",
                self._log_to_file,
            )
        return True

    def stop(self) -> None:
        """Cancel both timers. Idempotent."""
        with self._lock:
            if not self.is_running:
                self.logger.debug("Stop requested while already stopped")
                return

            for timer in (self._login_timer, self._connectivity_timer):
                if timer is not None:
                    timer.cancel()
            self._login_timer = None
            self._connectivity_timer = None
            self._state = ServiceState.STOPPED
            self._stopped.set()

            tlog(self.logger, "🔴", "SERVICE", str(self._state))
            self.report("🛑 Service stopped", self._log_to_file)

    def restart(self) -> bool:
        self.report("🔄 Restarting service...", self._log_to_file)
        self.stop()
        self.sleep(self.restart_pause)
        return self.start()

    def wait(self, poll: float = 1.0) -> None:
        """Block the calling thread until the service is stopped."""
        while not self._stopped.wait(poll):
            pass

    # ──────────────────────────────────────────────────────────────
    # Login actions
    # ──────────────────────────────────────────────────────────────

    def login_now(self) -> LoginOutcome:
        """
        Run one login with the current settings and notify about the result.

        Raises:
            ConfigError: only when the service is not running and the
                         account file cannot be loaded.
        """
        if self.is_running and self._account is not None:
            account = self._account
            settings = self._current_settings(account.settings)
        else:
            account = load_account(self.config_path)
            settings = account.settings

        self.report("--- Starting login process ---", settings.log_to_file)
        outcome = self.executor.login(account.credentials, settings)

        if settings.enable_notifications:
            self._notify(outcome, settings)
        return outcome

    def test_login(self) -> LoginOutcome:
        """One login with the stored account, kept out of the log file."""
        account = load_account(self.config_path)
        settings = replace(account.settings, log_to_file=False)
        return self.executor.login(account.credentials, settings)

    def status(self) -> str:
        return self.session_store.describe()

    # ──────────────────────────────────────────────────────────────
    # Internals
    # ──────────────────────────────────────────────────────────────

    def _current_settings(self, fallback: Settings) -> Settings:
        """Re-read settings from the account file; keep the last good ones on error."""
        try:
            settings = load_account(self.config_path).settings
        except ConfigError as e:
            self.logger.warning(f"Using previous settings; account reload failed: {e}")
            return fallback

        with self._lock:
            if self._account is not None:
                self._account = replace(self._account, settings=settings)
        return settings

    def _notify(self, outcome: LoginOutcome, settings: Settings) -> None:
        if outcome.success:
            self.report("📢 Notification: Login successful!", settings.log_to_file)
        else:
            self.report(
                "🚨 Notification: Login failed! Please check manually.",
                settings.log_to_file,
                logging.WARNING,
            )

    def _on_relogin_tick(self) -> None:
        self.login_now()

    def _on_connectivity_tick(self) -> None:
        if self.probe.is_connected():
            self.logger.debug("Connectivity OK")
            return

        self.report(
            "🌐 Internet connection lost, retrying login...",
            self._log_to_file,
            logging.WARNING,
        )
        self.login_now()
