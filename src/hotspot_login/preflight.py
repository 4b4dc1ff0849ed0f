# --- Standard library imports ---
import sys
import importlib
from pathlib import Path
from dataclasses import dataclass, field

# --- Project imports ---
from .config import Config
from .logger import get_logger
from .connectivity import ConnectivityProbe


logger = get_logger("preflight")

MIN_PYTHON = (3, 10)
REQUIRED_MODULES = {
    "requests": "requests",
    "dotenv": "python-dotenv",
}

@dataclass(frozen=True)
class CheckResult:
    name: str
    passed: bool
    fatal: bool = True
    detail: str = ""

@dataclass
class PreflightReport:
    checks: list[CheckResult] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return all(check.passed or not check.fatal for check in self.checks)

    def lines(self) -> list[str]:
        out = []
        for check in self.checks:
            if check.passed:
                verdict = "PASS"
            else:
                verdict = "FAIL" if check.fatal else "WARN"
            line = f"{verdict} - {check.name}"
            if check.detail:
                line += f" ({check.detail})"
            out.append(line)
        return out

def check_python() -> CheckResult:
    version = ".".join(str(part) for part in sys.version_info[:3])
    return CheckResult(
        "Python interpreter",
        sys.version_info[:2] >= MIN_PYTHON,
        detail=version,
    )

def check_internet(probe: ConnectivityProbe | None = None) -> CheckResult:
    probe = probe or ConnectivityProbe()
    return CheckResult("Internet connection", probe.is_connected(), fatal=False)

def check_storage(directory: Path) -> CheckResult:
    """Confirm the data directory accepts writes."""
    probe_file = Path(directory) / ".write-test"
    try:
        Path(directory).mkdir(parents=True, exist_ok=True)
        probe_file.write_text("test")
        probe_file.unlink()
        return CheckResult("Storage permission", True, detail=str(directory))
    except OSError as e:
        return CheckResult("Storage permission", False, detail=str(e))

def check_dependencies() -> CheckResult:
    missing = []
    for module, dist in REQUIRED_MODULES.items():
        try:
            importlib.import_module(module)
        except ImportError:
            missing.append(dist)

    if missing:
        return CheckResult(
            "Dependencies installed",
            False,
            detail=f"pip install {' '.join(missing)}",
        )
    return CheckResult("Dependencies installed", True)

def run_preflight(
    directory: Path = Config.HOME,
    probe: ConnectivityProbe | None = None,
) -> PreflightReport:
    """
    Environment checks for the interactive front end.

    The login service itself never depends on these results.
    """
    report = PreflightReport([
        check_python(),
        check_internet(probe),
        check_storage(directory),
        check_dependencies(),
    ])
    for line in report.lines():
        logger.debug(line)
    return report
