# --- Standard library imports ---
import json
from pathlib import Path
from dataclasses import dataclass, asdict, field

# --- Project imports ---
from .logger import get_logger
from .errors import ConfigError, ConfigMissingError


logger = get_logger("account")

PLACEHOLDER_USERNAME = "your_username_here"
PLACEHOLDER_PASSWORD = "your_password_here"

@dataclass(frozen=True)
class Credentials:
    username: str
    password: str

@dataclass(frozen=True)
class Settings:
    """
    Per-user behavior switches from the account file.

    Re-read before every scheduled login, so edits made while the
    service runs take effect on the next tick.
    """
    enable_notifications: bool = True
    auto_retry: bool = True
    check_connection: bool = True
    log_to_file: bool = True

    # JSON key ↔ attribute
    KEYS = {
        "enableNotifications": "enable_notifications",
        "autoRetry": "auto_retry",
        "checkConnection": "check_connection",
        "logToFile": "log_to_file",
    }

    @classmethod
    def from_dict(cls, data: dict) -> "Settings":
        values = {}
        for key, attr in cls.KEYS.items():
            if key not in data:
                continue
            if not isinstance(data[key], bool):
                raise ConfigError(f"settings.{key} must be true or false")
            values[attr] = data[key]
        return cls(**values)

    def to_dict(self) -> dict:
        return {key: getattr(self, attr) for key, attr in self.KEYS.items()}

@dataclass(frozen=True)
class AccountConfig:
    credentials: Credentials
    settings: Settings = field(default_factory=Settings)

    def to_dict(self) -> dict:
        return {
            **asdict(self.credentials),
            "settings": self.settings.to_dict(),
        }

def mask(password: str) -> str:
    return "*" * len(password)

def create_template(path: Path) -> None:
    """Write an account file with placeholder credentials and default settings."""
    template = AccountConfig(
        Credentials(PLACEHOLDER_USERNAME, PLACEHOLDER_PASSWORD)
    )
    path.write_text(json.dumps(template.to_dict(), indent=2))
    logger.info(f"📁 Account template created at {path}")

def load_account(path: Path) -> AccountConfig:
    """
    Load and validate the account file.

    Raises:
        ConfigMissingError: file did not exist (a template was written)
        ConfigError: file unreadable, malformed or missing credentials
    """
    try:
        data = json.loads(path.read_text())
    except FileNotFoundError:
        try:
            create_template(path)
        except OSError as e:
            logger.error(f"Could not create account template at {path}: {e}")
        raise ConfigMissingError(
            f"{path.name} has been created. Please fill in your username and password."
        ) from None
    except json.JSONDecodeError as e:
        raise ConfigError(f"{path.name} is not valid JSON: {e}") from e
    except OSError as e:
        raise ConfigError(f"Could not read {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"{path.name} must contain a JSON object")

    username = data.get("username")
    password = data.get("password")
    if not username or not password:
        raise ConfigError("Username or password not found in config")

    settings = data.get("settings") or {}
    if not isinstance(settings, dict):
        raise ConfigError("'settings' must be a JSON object")

    return AccountConfig(
        credentials=Credentials(str(username), str(password)),
        settings=Settings.from_dict(settings),
    )

def save_account(path: Path, account: AccountConfig) -> bool:
    """
    Persist the account file.

    Best-effort: failures are logged and reported as False.
    """
    try:
        path.write_text(json.dumps(account.to_dict(), indent=2))
        return True
    except OSError as e:
        logger.error(f"Failed to save account file {path}: {e}")
        return False

def delete_account(path: Path) -> bool:
    try:
        path.unlink()
        return True
    except FileNotFoundError:
        return True
    except OSError as e:
        logger.error(f"Failed to delete account file {path}: {e}")
        return False
