# engine.py drives the search: it feeds shrinking prefixes of the target to the
# scanner and narrows the window until the verdict flips on a single byte.

import logging
import os
import shutil
import tempfile
import time
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from core.config import BisectConfig
from core.errors import BudgetExceededError, FatalIOError, InconclusiveScanError
from core.progress import LatestValue, ProgressEvent, ProgressReporter, print_event
from core.threats import ThreatCollector
from core.verdict import Verdict, VerdictStatus, classify

logger = logging.getLogger(__name__)

SCRATCH_NAME = "testfile.exe"
DUMP_CONTEXT = 32


@dataclass
class SearchWindow:
    last_good: int
    upper_bound: int
    threat_found: bool = False
    iterations: int = 0
    history: List[Tuple[int, str]] = field(default_factory=list)


@dataclass
class BisectionResult:
    malicious: bool
    size: int
    localized_offset: int = 0
    upper_bound: int = 0
    signatures: List[str] = field(default_factory=list)
    window_start: int = 0
    window_dump: bytes = b""
    iterations: int = 0
    elapsed: float = 0.0
    history: List[Tuple[int, str]] = field(default_factory=list)

    def to_dict(self):
        return {
            "malicious": self.malicious,
            "size_bytes": self.size,
            "localized_offset": self.localized_offset,
            "localized_offset_hex": f"0x{self.localized_offset:X}",
            "upper_bound": self.upper_bound,
            "signatures": list(self.signatures),
            "window_start": self.window_start,
            "window_dump": self.window_dump.hex(),
            "iterations": self.iterations,
            "elapsed_seconds": round(self.elapsed, 3),
            "history": [{"length": length, "verdict": status} for length, status in self.history],
        }


class BisectionEngine:
    """
    Localizes the shortest prefix of a file that the scanner still flags.

    The scanned slice always starts at offset 0, so the result is a prefix
    length (how much of the file must be present), not an interior window.
    """

    def __init__(self, scanner, config: Optional[BisectConfig] = None, emit=print_event):
        self.scanner = scanner
        self.config = config or BisectConfig()
        self.emit = emit
        self.scan_count = 0
        # --debug promotes the per-iteration trace to INFO
        self._trace_level = logging.INFO if self.config.debug else logging.DEBUG

    def load(self, file_path: str) -> bytes:
        try:
            with open(file_path, "rb") as f:
                return f.read()
        except OSError as e:
            raise FatalIOError(f"Could not read {file_path}: {e}") from e

    def run(self, file_path: str) -> BisectionResult:
        """Scan the whole file, then bisect if the scanner flags it."""
        started = time.monotonic()
        buffer = self.load(file_path)

        logger.info(f"Scanning original file {file_path} ({len(buffer)} bytes) with {self.scanner.name}")
        verdict = self.scan(file_path, len(buffer))
        return self.bisect(buffer, verdict, started=started)

    def scan(self, path: str, length: int, window: Optional[SearchWindow] = None,
             started: Optional[float] = None) -> Verdict:
        """One classified scan, applying the inconclusive policy.

        With a window and start time, the budget is checked before every
        attempt, retries included.
        """
        attempts = 0
        while True:
            if window is not None:
                self._check_budget(window, started)
            self.scan_count += 1
            verdict = classify(self.scanner.scan(path))
            if not verdict.inconclusive:
                return verdict

            policy = self.config.on_inconclusive
            if policy == "clean":
                logger.warning(f"Inconclusive scan of {length} bytes ({verdict.reason}), treating as clean")
                return Verdict(VerdictStatus.CLEAN, reason=verdict.reason)

            if policy == "retry" and attempts < self.config.max_retries:
                attempts += 1
                logger.warning(
                    f"Inconclusive scan of {length} bytes ({verdict.reason}), "
                    f"retry {attempts}/{self.config.max_retries}"
                )
                continue

            raise InconclusiveScanError(
                f"Scanner gave no usable verdict for {length} bytes: {verdict.reason}",
                length=length,
                reason=verdict.reason,
            )

    def bisect(self, buffer: bytes, initial_verdict: Verdict, started: Optional[float] = None) -> BisectionResult:
        started = time.monotonic() if started is None else started

        channel = LatestValue()
        reporter = ProgressReporter(channel, interval=self.config.progress_interval, emit=self.emit,
                                    started=started)
        collector = ThreatCollector()
        reporter.start()
        collector.start()

        try:
            window = self._search(buffer, initial_verdict, channel, collector, started)
        finally:
            channel.close()
            collector.close()
            reporter.join()
            collector.join()

        return self._assemble(buffer, window, collector.signatures(), time.monotonic() - started)

    def _search(self, buffer, initial_verdict, channel, collector, started) -> SearchWindow:
        size = len(buffer)
        if not initial_verdict.malicious:
            logger.info("No threat detected in the original file")
            return SearchWindow(last_good=0, upper_bound=size)

        logger.info("Threat detected in the original file, beginning binary search...")
        if initial_verdict.signature:
            collector.submit(initial_verdict.signature)

        scratch_dir = self._make_scratch_dir()
        scratch_path = os.path.join(scratch_dir, SCRATCH_NAME)

        window = SearchWindow(last_good=0, upper_bound=size)
        mid = window.upper_bound // 2

        try:
            while window.upper_bound - window.last_good > 1:
                self._write_prefix(scratch_path, buffer[0:mid])

                logger.log(self._trace_level, f"Scanning from 0 to {mid} bytes")
                verdict = self.scan(scratch_path, mid, window=window, started=started)
                window.iterations += 1
                window.history.append((mid, verdict.status))

                channel.put(ProgressEvent(low=0, high=mid, malicious=verdict.malicious,
                                          elapsed=time.monotonic() - started))

                if verdict.malicious:
                    logger.log(self._trace_level, f"Threat detected in the range 0 to {mid} bytes")
                    if verdict.signature:
                        collector.submit(verdict.signature)
                    window.threat_found = True
                    window.upper_bound = mid
                else:
                    logger.log(self._trace_level, f"No threat detected in the range 0 to {mid} bytes")
                    window.last_good = mid

                mid = (window.last_good + window.upper_bound) // 2
        finally:
            shutil.rmtree(scratch_dir, ignore_errors=True)

        return window

    def _assemble(self, buffer, window: SearchWindow, signatures, elapsed) -> BisectionResult:
        size = len(buffer)
        if not window.threat_found:
            return BisectionResult(
                malicious=False,
                size=size,
                localized_offset=window.last_good,
                upper_bound=window.upper_bound,
                iterations=window.iterations,
                elapsed=elapsed,
                history=window.history,
            )

        start = max(0, window.last_good - DUMP_CONTEXT)
        end = min(size, window.upper_bound + DUMP_CONTEXT)
        logger.info(f"Isolated bad bytes at offset 0x{window.last_good:X} after {window.iterations} scans")
        return BisectionResult(
            malicious=True,
            size=size,
            localized_offset=window.last_good,
            upper_bound=window.upper_bound,
            signatures=signatures,
            window_start=start,
            window_dump=bytes(buffer[start:end]),
            iterations=window.iterations,
            elapsed=elapsed,
            history=window.history,
        )

    def _make_scratch_dir(self) -> str:
        try:
            return tempfile.mkdtemp(prefix="threatslice-", dir=self.config.scratch_root)
        except OSError as e:
            raise FatalIOError(f"Could not create scratch directory in {self.config.scratch_root}: {e}") from e

    def _write_prefix(self, path: str, data: bytes):
        try:
            with open(path, "wb") as f:
                f.write(data)
        except OSError as e:
            raise FatalIOError(f"Could not write scratch file {path}: {e}") from e

    def _check_budget(self, window: SearchWindow, started: float):
        budget = self.config.budget
        if not budget:
            return
        elapsed = time.monotonic() - started
        if elapsed > budget:
            raise BudgetExceededError(
                f"Search budget of {budget}s exhausted with window "
                f"0x{window.last_good:X}..0x{window.upper_bound:X} still open",
                last_good=window.last_good,
                upper_bound=window.upper_bound,
                elapsed=elapsed,
            )
