import logging
import os
import tempfile
from dataclasses import dataclass, replace
from typing import List, Optional

from dotenv import load_dotenv

from core.errors import ConfigError

logger = logging.getLogger(__name__)

# Kaspersky Security Cloud 21.3 command line scanner, 32 and 64 bit installs
DEFAULT_SCANNER_PATH = r"C:\Program Files (x86)\Kaspersky Lab\Kaspersky Security Cloud 21.3\avp.com"
DEFAULT_ALT_SCANNER_PATH = r"C:\Program Files\Kaspersky Lab\Kaspersky Security Cloud 21.3\avp.com"

DEFAULT_SCAN_TIMEOUT = 120.0
DEFAULT_BUDGET = 3600.0
DEFAULT_PROGRESS_INTERVAL = 2.0
DEFAULT_MAX_RETRIES = 2

INCONCLUSIVE_POLICIES = ("retry", "abort", "clean")


@dataclass
class BisectConfig:
    primary_path: str = DEFAULT_SCANNER_PATH
    alternate_path: str = DEFAULT_ALT_SCANNER_PATH
    scan_timeout: float = DEFAULT_SCAN_TIMEOUT
    budget: Optional[float] = DEFAULT_BUDGET
    progress_interval: float = DEFAULT_PROGRESS_INTERVAL
    on_inconclusive: str = "retry"
    max_retries: int = DEFAULT_MAX_RETRIES
    scratch_dir: Optional[str] = None
    debug: bool = False

    def __post_init__(self):
        if self.on_inconclusive not in INCONCLUSIVE_POLICIES:
            raise ConfigError(
                f"Unknown inconclusive policy '{self.on_inconclusive}' "
                f"(expected one of: {', '.join(INCONCLUSIVE_POLICIES)})"
            )
        if self.scan_timeout is not None and self.scan_timeout <= 0:
            raise ConfigError(f"Scan timeout must be positive, got {self.scan_timeout}")
        if self.progress_interval <= 0:
            raise ConfigError(f"Progress interval must be positive, got {self.progress_interval}")
        if self.max_retries < 0:
            raise ConfigError(f"Retry count cannot be negative, got {self.max_retries}")
        if self.budget is not None and self.budget < 0:
            raise ConfigError(f"Budget cannot be negative, got {self.budget}")
        # 0 means "no overall budget"
        if self.budget == 0:
            self.budget = None

    @property
    def scanner_candidates(self) -> List[str]:
        """Probe order used by scanner discovery."""
        return [path for path in (self.primary_path, self.alternate_path) if path]

    @property
    def scratch_root(self) -> str:
        return self.scratch_dir or tempfile.gettempdir()

    def override(self, **changes):
        """Copy with every non-None keyword applied (command line flags)."""
        applied = {k: v for k, v in changes.items() if v is not None}
        return replace(self, **applied)

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None):
        load_dotenv(dotenv_path)

        config = cls(
            primary_path=os.getenv("THREATSLICE_SCANNER_PATH", DEFAULT_SCANNER_PATH),
            alternate_path=os.getenv("THREATSLICE_ALT_SCANNER_PATH", DEFAULT_ALT_SCANNER_PATH),
            scan_timeout=_float_env("THREATSLICE_SCAN_TIMEOUT", DEFAULT_SCAN_TIMEOUT),
            budget=_float_env("THREATSLICE_BUDGET", DEFAULT_BUDGET),
            progress_interval=_float_env("THREATSLICE_PROGRESS_INTERVAL", DEFAULT_PROGRESS_INTERVAL),
            on_inconclusive=os.getenv("THREATSLICE_ON_INCONCLUSIVE", "retry").strip().lower(),
            max_retries=_int_env("THREATSLICE_MAX_RETRIES", DEFAULT_MAX_RETRIES),
            scratch_dir=os.getenv("THREATSLICE_SCRATCH_DIR") or None,
        )
        logger.debug(f"Loaded configuration: {config}")
        return config


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got '{raw}'")


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got '{raw}'")
