# scanner.py wraps the external antivirus command line scanner.
# The scanner is an opaque oracle: we hand it a path and keep whatever it prints.

import logging
import os
import subprocess
import time
from dataclasses import dataclass
from typing import Iterable, Optional, Protocol

from core.errors import ScannerNotFoundError

logger = logging.getLogger(__name__)

SCAN_COMMAND = "SCAN"
QUIET_FLAG = "/i0"


@dataclass
class ScanReport:
    raw_text: str
    returncode: Optional[int] = None
    error: Optional[str] = None
    duration: float = 0.0


class Scanner(Protocol):
    name: str

    def scan(self, path: str) -> ScanReport:
        ...


class KasperskyScanner:
    """
    Runs `avp.com SCAN <target> /i0` and captures its standard output.

    Exit status is never used as a success signal; a failing process just
    yields whatever (possibly empty) text it printed. Spawn failures and
    timeouts are recorded on the report instead of being raised.
    """

    name = "Kaspersky"

    def __init__(self, executable: str, quiet_flag: str = QUIET_FLAG, timeout: Optional[float] = None):
        self.executable = executable
        self.quiet_flag = quiet_flag
        self.timeout = timeout

    def command(self, path: str):
        return [self.executable, SCAN_COMMAND, path, self.quiet_flag]

    def scan(self, path: str) -> ScanReport:
        started = time.monotonic()
        try:
            result = subprocess.run(
                self.command(path),
                capture_output=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as e:
            # subprocess.run has already killed the child at this point
            logger.warning(f"Scanner timed out after {self.timeout}s on {path}")
            return ScanReport(
                raw_text=_decode(e.stdout),
                error=f"timeout after {self.timeout}s",
                duration=time.monotonic() - started,
            )
        except OSError as e:
            logger.error(f"Failed to start scanner {self.executable}: {e}")
            return ScanReport(raw_text="", error=f"spawn failed: {e}", duration=time.monotonic() - started)

        if result.returncode != 0:
            logger.debug(f"Scanner exited with status {result.returncode} for {path}")

        return ScanReport(
            raw_text=_decode(result.stdout),
            returncode=result.returncode,
            duration=time.monotonic() - started,
        )


def _decode(output) -> str:
    if not output:
        return ""
    if isinstance(output, str):
        return output
    return output.decode("utf-8", errors="replace")


def find_scanner(candidates: Iterable[str]) -> Optional[str]:
    """Return the first candidate path that exists, or None."""
    for path in candidates:
        if path and os.path.exists(path):
            logger.debug(f"Scanner found at {path}")
            return path
        logger.debug(f"No scanner at {path}")
    return None


def resolve_scanner(explicit: Optional[str], candidates: Iterable[str]) -> str:
    if explicit:
        if not os.path.exists(explicit):
            raise ScannerNotFoundError(f"Scanner not found at {explicit}")
        return explicit

    candidates = list(candidates)
    found = find_scanner(candidates)
    if not found:
        raise ScannerNotFoundError(
            "Scanner not found in any configured location: " + ", ".join(candidates)
        )
    return found
