from colors import SliceColors as SC
from core.verdict import VerdictStatus


def test_verdict_palette():
    assert SC.for_verdict(VerdictStatus.MALICIOUS) == SC.CRITICAL
    assert SC.for_verdict(VerdictStatus.CLEAN) == SC.SUCCESS
    assert SC.for_verdict(VerdictStatus.INCONCLUSIVE) == SC.WARNING
    assert SC.for_verdict("UNKNOWN") == SC.INFO


def test_for_flag():
    assert SC.for_flag(True) == SC.CRITICAL
    assert SC.for_flag(False) == SC.SUCCESS


def test_paint_resets():
    assert SC.paint(SC.WARNING, "retry") == f"{SC.WARNING}retry{SC.RESET}"
