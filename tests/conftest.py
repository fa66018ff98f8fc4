"""Shared fakes: a deterministic scanner oracle keyed on prefix length."""

import os

import pytest

from core.config import BisectConfig
from core.scanner import ScanReport

SIGNATURE = "HEUR:Trojan.Win32.Generic"

CLEAN_OUTPUT = (
    "Kaspersky Security Cloud 21.3\n"
    "Scan_Objects$0001        starting   1%\n"
    "Processed objects: 1\n"
    "Total detected:    0\n"
)

FLAGGED_OUTPUT = (
    "Kaspersky Security Cloud 21.3\n"
    "Scan_Objects$0001        starting   1%\n"
    "{path}\tdetected suspicion {signature}\n"
    "Total detected:    1\n"
)


class ThresholdScanner:
    """malicious(k) = k >= threshold, where k is the scanned file's length."""

    name = "Fake"

    def __init__(self, threshold, signature=SIGNATURE):
        self.threshold = threshold
        self.signature = signature
        self.lengths = []
        self.heads = []

    def scan(self, path):
        with open(path, "rb") as f:
            data = f.read()
        self.lengths.append(len(data))
        self.heads.append(data[:4])
        if len(data) >= self.threshold:
            return ScanReport(raw_text=FLAGGED_OUTPUT.format(path=path, signature=self.signature), returncode=0)
        return ScanReport(raw_text=CLEAN_OUTPUT, returncode=0)


class ScriptedScanner:
    """Replays a fixed list of reports, one per call."""

    name = "Scripted"

    def __init__(self, reports):
        self.reports = list(reports)
        self.calls = 0

    def scan(self, path):
        report = self.reports[min(self.calls, len(self.reports) - 1)]
        self.calls += 1
        return report


@pytest.fixture
def config(tmp_path):
    scratch = tmp_path / "scratch"
    scratch.mkdir()
    return BisectConfig(
        primary_path="",
        alternate_path="",
        progress_interval=60.0,
        scratch_dir=str(scratch),
    )


@pytest.fixture
def sample(tmp_path):
    def _write(size, name="sample.exe"):
        path = tmp_path / name
        path.write_bytes(bytes(i % 251 for i in range(size)))
        return str(path)
    return _write


@pytest.fixture
def quiet():
    events = []
    return events.append, events


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch):
    for name in list(os.environ):
        if name.startswith("THREATSLICE_"):
            monkeypatch.delenv(name, raising=False)
