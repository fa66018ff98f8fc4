import os

import pytest

from core.config import DEFAULT_ALT_SCANNER_PATH, DEFAULT_SCANNER_PATH, BisectConfig
from core.errors import ConfigError


def test_defaults(tmp_path):
    config = BisectConfig.from_env(str(tmp_path / "missing.env"))

    assert config.scanner_candidates == [DEFAULT_SCANNER_PATH, DEFAULT_ALT_SCANNER_PATH]
    assert config.progress_interval == 2.0
    assert config.on_inconclusive == "retry"
    assert config.budget == 3600.0


def test_environment_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("THREATSLICE_SCANNER_PATH", "/opt/avp/avp.com")
    monkeypatch.setenv("THREATSLICE_ALT_SCANNER_PATH", "")
    monkeypatch.setenv("THREATSLICE_SCAN_TIMEOUT", "15")
    monkeypatch.setenv("THREATSLICE_ON_INCONCLUSIVE", "Abort")
    monkeypatch.setenv("THREATSLICE_MAX_RETRIES", "4")
    monkeypatch.setenv("THREATSLICE_SCRATCH_DIR", str(tmp_path))

    config = BisectConfig.from_env(str(tmp_path / "missing.env"))

    assert config.scanner_candidates == ["/opt/avp/avp.com"]
    assert config.scan_timeout == 15.0
    assert config.on_inconclusive == "abort"
    assert config.max_retries == 4
    assert config.scratch_root == str(tmp_path)


def test_dotenv_file_loaded(monkeypatch, tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("THREATSLICE_PROGRESS_INTERVAL=0.5\nTHREATSLICE_BUDGET=0\n")
    monkeypatch.setenv("THREATSLICE_SCAN_TIMEOUT", "30")

    try:
        config = BisectConfig.from_env(str(env_file))
    finally:
        # load_dotenv writes straight into os.environ
        os.environ.pop("THREATSLICE_PROGRESS_INTERVAL", None)
        os.environ.pop("THREATSLICE_BUDGET", None)

    assert config.progress_interval == 0.5
    assert config.budget is None
    assert config.scan_timeout == 30.0


def test_invalid_number(monkeypatch, tmp_path):
    monkeypatch.setenv("THREATSLICE_SCAN_TIMEOUT", "soon")
    with pytest.raises(ConfigError):
        BisectConfig.from_env(str(tmp_path / "missing.env"))


def test_invalid_policy():
    with pytest.raises(ConfigError):
        BisectConfig(on_inconclusive="ignore")


@pytest.mark.parametrize("changes", [
    {"scan_timeout": 0},
    {"progress_interval": -1},
    {"max_retries": -1},
])
def test_invalid_values(changes):
    with pytest.raises(ConfigError):
        BisectConfig(**changes)


def test_override_skips_unset_flags():
    config = BisectConfig(scan_timeout=60.0)
    changed = config.override(scan_timeout=None, budget=0, max_retries=5)

    assert changed.scan_timeout == 60.0
    assert changed.budget is None
    assert changed.max_retries == 5
    assert config.max_retries == 2


def test_negative_budget_rejected():
    with pytest.raises(ConfigError):
        BisectConfig(budget=-5)


def test_negative_budget_from_command_line_rejected():
    with pytest.raises(ConfigError):
        BisectConfig().override(budget=-1.0)


def test_zero_budget_disables():
    assert BisectConfig(budget=0).budget is None
