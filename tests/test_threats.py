import pytest

from core.threats import ThreatCollector


def test_collector_terminates_without_submissions():
    collector = ThreatCollector()
    collector.start()
    collector.close()
    collector.join(timeout=5)

    assert not collector.is_alive()
    assert collector.signatures() == []


def test_duplicates_collapse():
    collector = ThreatCollector()
    collector.start()
    for name in ("HEUR:Trojan.Win32.Generic", "HEUR:Exploit.Win32.Agent", "HEUR:Trojan.Win32.Generic"):
        collector.submit(name)
    collector.close()
    collector.join(timeout=5)

    assert collector.reported == [
        "HEUR:Trojan.Win32.Generic",
        "HEUR:Exploit.Win32.Agent",
        "HEUR:Trojan.Win32.Generic",
    ]
    assert sorted(collector.signatures()) == ["HEUR:Exploit.Win32.Agent", "HEUR:Trojan.Win32.Generic"]


def test_submit_after_close_rejected():
    collector = ThreatCollector()
    collector.start()
    collector.close()
    collector.join(timeout=5)

    with pytest.raises(RuntimeError):
        collector.submit("HEUR:Trojan.Win32.Generic")


def test_close_is_idempotent():
    collector = ThreatCollector()
    collector.start()
    collector.close()
    collector.close()
    collector.join(timeout=5)

    assert not collector.is_alive()
