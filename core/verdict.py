from dataclasses import dataclass
from typing import Optional

# Markers in avp.com's human readable report
SUSPICION_MARKER = "suspicion"
HEURISTIC_MARKER = "HEUR:"
NO_SIGNATURE = "No signature found"


class VerdictStatus:
    MALICIOUS = "MALICIOUS"
    CLEAN = "CLEAN"
    INCONCLUSIVE = "INCONCLUSIVE"


@dataclass(frozen=True)
class Verdict:
    status: str
    signature: Optional[str] = None
    reason: Optional[str] = None

    @property
    def malicious(self) -> bool:
        return self.status == VerdictStatus.MALICIOUS

    @property
    def clean(self) -> bool:
        return self.status == VerdictStatus.CLEAN

    @property
    def inconclusive(self) -> bool:
        return self.status == VerdictStatus.INCONCLUSIVE


def is_malicious(raw_text: str) -> bool:
    for line in raw_text.splitlines():
        if SUSPICION_MARKER in line:
            return True
    return False


def extract_signature(raw_text: str) -> str:
    """First token carrying the heuristic prefix, e.g. HEUR:Trojan.Win32.Generic"""
    for line in raw_text.splitlines():
        if HEURISTIC_MARKER not in line:
            continue
        for part in line.split():
            if HEURISTIC_MARKER in part:
                return part
    return NO_SIGNATURE


def classify(report) -> Verdict:
    """
    Turn a ScanReport into a three-way verdict.

    A suspicion marker wins even when the process errored, since it is
    positive evidence. Otherwise a failed or silent scanner is inconclusive
    rather than clean.
    """
    text = report.raw_text or ""

    if is_malicious(text):
        signature = extract_signature(text)
        return Verdict(VerdictStatus.MALICIOUS, signature=None if signature == NO_SIGNATURE else signature)

    if report.error:
        return Verdict(VerdictStatus.INCONCLUSIVE, reason=report.error)

    if not text.strip():
        return Verdict(VerdictStatus.INCONCLUSIVE, reason="empty scanner output")

    return Verdict(VerdictStatus.CLEAN)
