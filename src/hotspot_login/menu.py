# --- Standard library imports ---
import os
import sys
import platform
from dataclasses import replace
from typing import Callable

# --- Project imports ---
from .config import Config
from .logger import get_logger
from .errors import ConfigError
from .log_sink import LogSink
from .preflight import PreflightReport, run_preflight
from .scheduler import Scheduler
from .account import (
    AccountConfig,
    Credentials,
    Settings,
    delete_account,
    load_account,
    mask,
    save_account,
)


logger = get_logger("menu")

RULE = "=" * 50

MAIN_OPTIONS = (
    "Start Service",
    "Stop Service",
    "Restart Service",
    "Login Status",
    "Login Now",
    "Configuration Settings",
    "View Logs",
    "System Info",
    "Test Login",
    "Help & Tutorial",
    "Exit",
)

# Config submenu choice → (Settings attribute, label)
TOGGLES = {
    "3": ("auto_retry", "Auto Retry"),
    "4": ("check_connection", "Connection Check"),
    "5": ("log_to_file", "Log to File"),
    "6": ("enable_notifications", "Notifications"),
}

def _yes_no(flag: bool) -> str:
    return "Yes" if flag else "No"

class Menu:
    """
    Interactive front end over a Scheduler.

    Reads choices through `input_fn` and writes through `output_fn`
    so the whole loop can be driven from tests.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        log_sink: LogSink,
        input_fn: Callable[[str], str] = input,
        output_fn: Callable[[str], None] = print,
        preflight: Callable[[], PreflightReport] = run_preflight,
    ):
        self.scheduler = scheduler
        self.log_sink = log_sink
        self.ask = input_fn
        self.say = output_fn
        self.preflight = preflight
        self._exit = False

    @property
    def config_path(self):
        return self.scheduler.config_path

    # ──────────────────────────────────────────────────────────────
    # Main loop
    # ──────────────────────────────────────────────────────────────

    def run(self) -> int:
        """Run until the user exits; returns the process exit status."""
        if not self.show_requirements():
            self.say("Please fix the requirements and restart the application.")
            return 1

        while not self._exit:
            try:
                self.show_main_menu()
            except EOFError:
                self.exit_app()
        return 0

    def show_requirements(self) -> bool:
        self.say("AUTO LOGIN HOTSPOT")
        self.say("CHECKING REQUIREMENTS...")
        report = self.preflight()
        for line in report.lines():
            self.say(line)

        if report.ok:
            self.say("ALL REQUIREMENTS MET")
        else:
            self.say("SOME REQUIREMENTS ARE NOT MET")
        return report.ok

    def show_main_menu(self) -> None:
        self.say(RULE)
        self.say(f"CURRENT STATUS: {self.scheduler.state}")
        self.say(RULE)
        for number, label in enumerate(MAIN_OPTIONS, start=1):
            self.say(f"{number}. {label}")
        self.say(RULE)

        choice = self.ask(f"Choose option (1-{len(MAIN_OPTIONS)}): ").strip()
        match choice:
            case "1":
                self.start_service()
            case "2":
                self.scheduler.stop()
            case "3":
                self._guarded(self.scheduler.restart)
            case "4":
                self.say(f"📊 {self.scheduler.status()}")
            case "5":
                self.login_now()
            case "6":
                self.show_config_menu()
            case "7":
                self.show_logs()
            case "8":
                self.show_system_info()
            case "9":
                self.test_login()
            case "10":
                self.show_help()
            case "11":
                self.exit_app()
            case _:
                self.say("❌ Invalid option")

    # ──────────────────────────────────────────────────────────────
    # Actions
    # ──────────────────────────────────────────────────────────────

    def start_service(self) -> None:
        if not self.config_path.exists() and self.setup_wizard() is None:
            return
        self._guarded(self.scheduler.start)

    def login_now(self) -> None:
        if not self.config_path.exists() and self.setup_wizard() is None:
            return
        outcome = self._guarded(self.scheduler.login_now)
        if outcome is not None:
            self.say(outcome.message)

    def test_login(self) -> None:
        if not self.config_path.exists() and self.setup_wizard() is None:
            return
        self.say("Testing login...")
        outcome = self._guarded(self.scheduler.test_login)
        if outcome is None:
            return
        self.say("Login test successful!" if outcome.success else "Login test failed!")

    def exit_app(self) -> None:
        self.scheduler.stop()
        self.say("Thank you for using Auto Login Hotspot!")
        self._exit = True

    def show_logs(self) -> None:
        logs = self.log_sink.read()
        self.say("LOGS")
        self.say(logs or "No logs available")

    def show_help(self) -> None:
        self.say("HELP & TUTORIAL")
        self.say("HOW TO USE:")
        self.say("1. Configure your username/password in Configuration Settings")
        self.say(f"2. Start the service - it will auto login every {Config.RELOGIN_INTERVAL_S / 60:g} minutes")
        self.say("3. The service keeps running while this menu is open")
        self.say("4. Use 'Test Login' to verify credentials")
        self.say("BATCH MODE:")
        self.say("hotspot-login start | stop | restart | status | login")

    def show_system_info(self) -> None:
        self.say("SYSTEM INFO")
        self.say(f"Python Version: {platform.python_version()}")
        self.say(f"Platform: {sys.platform}")
        self.say(f"Architecture: {platform.machine()}")
        self.say(f"Current Directory: {os.getcwd()}")
        self.say(f"Service Status: {self.scheduler.state}")
        try:
            account = load_account(self.config_path)
        except ConfigError:
            self.say("Config: Not loaded")
            return
        self.say(f"Username: {account.credentials.username}")
        self.say(f"Auto Retry: {_yes_no(account.settings.auto_retry)}")

    # ──────────────────────────────────────────────────────────────
    # Configuration
    # ──────────────────────────────────────────────────────────────

    def setup_wizard(self) -> AccountConfig | None:
        """Prompt for credentials and save them with default settings."""
        self.say("SETUP WIZARD")
        self.say("Let's configure your auto login system...")
        username = self.ask("Enter your hotspot username: ").strip()
        password = self.ask("Enter your hotspot password: ")

        if not username or not password:
            self.say("Username and password are required")
            return None

        account = AccountConfig(Credentials(username, password))
        self.say("SETTINGS SUMMARY:")
        self._describe_account(account)

        if self.ask("Save this configuration? (y/n): ").strip().lower() != "y":
            self.say("Configuration cancelled")
            return None

        if not save_account(self.config_path, account):
            self.say("Failed to save configuration")
            return None
        self.say("Configuration saved successfully")
        return account

    def show_config_menu(self) -> None:
        while True:
            if not self.config_path.exists():
                self.say("No configuration found. Starting setup wizard...")
                if self.setup_wizard() is None:
                    return
            try:
                account = load_account(self.config_path)
            except ConfigError as e:
                self.say(f"Error loading configuration: {e}")
                return

            self.say("CONFIGURATION")
            self._describe_account(account)
            self.say("1. Edit Username")
            self.say("2. Edit Password")
            for number, (_, label) in TOGGLES.items():
                self.say(f"{number}. Toggle {label}")
            self.say("7. Reset Configuration")
            self.say("8. Back to Main Menu")

            choice = self.ask("Select an option (1-8): ").strip()
            if choice == "8":
                return
            if not self._apply_config_choice(choice, account):
                return

    def _apply_config_choice(self, choice: str, account: AccountConfig) -> bool:
        """Returns False when the submenu should close."""
        credentials = account.credentials

        if choice == "1":
            username = self.ask("New username: ").strip()
            if username:
                self._save(replace(account, credentials=replace(credentials, username=username)))
                self.say("Username updated!")
        elif choice == "2":
            password = self.ask("New password: ")
            if password:
                self._save(replace(account, credentials=replace(credentials, password=password)))
                self.say("Password updated!")
        elif choice in TOGGLES:
            attr, label = TOGGLES[choice]
            flag = not getattr(account.settings, attr)
            self._save(replace(account, settings=replace(account.settings, **{attr: flag})))
            self.say(f"{label}: {'Enabled' if flag else 'Disabled'}")
        elif choice == "7":
            confirm = self.ask("Are you sure you want to reset configuration? (y/n): ")
            if confirm.strip().lower() == "y":
                self.scheduler.stop()
                delete_account(self.config_path)
                self.say("Configuration reset.")
                return False
        else:
            self.say("❌ Invalid option")
        return True

    def _save(self, account: AccountConfig) -> None:
        if not save_account(self.config_path, account):
            self.say("Failed to save configuration")

    def _describe_account(self, account: AccountConfig) -> None:
        settings: Settings = account.settings
        self.say(f"Username: {account.credentials.username}")
        self.say(f"Password: {mask(account.credentials.password)}")
        self.say(f"Auto Retry: {_yes_no(settings.auto_retry)}")
        self.say(f"Check Connection: {_yes_no(settings.check_connection)}")
        self.say(f"Log to File: {_yes_no(settings.log_to_file)}")
        self.say(f"Notifications: {_yes_no(settings.enable_notifications)}")

    def _guarded(self, action: Callable):
        """Run a service action, reporting configuration errors instead of raising."""
        try:
            return action()
        except ConfigError as e:
            self.say(f"❌ {e}")
            return None
