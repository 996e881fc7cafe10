"""
Tests for the diagnostic cache.

Run: python3 -m pytest tests/test_diagnostic_cache.py -v
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

from mesh.tlv import DiagnosticTlv, DiagTlvType
from rest.diagnostics import DIAG_RESET_TIMEOUT, DiagnosticCache, DiagnosticRecord


def tlvs_for(rloc16, battery=100):
    return [
        DiagnosticTlv(int(DiagTlvType.SHORT_ADDRESS), rloc16),
        DiagnosticTlv(int(DiagTlvType.BATTERY_LEVEL), battery),
    ]


class TestDiagnosticRecord:
    """Test record age"""

    def test_age(self):
        record = DiagnosticRecord(key="0x1200", tlvs=[], received_at=1.5)
        assert record.age(4.0) == 2.5


class TestDiagnosticCachePut:
    """Test insertion semantics"""

    def test_default_threshold(self):
        assert DiagnosticCache().eviction_threshold == DIAG_RESET_TIMEOUT == 3.0

    def test_put_and_get(self):
        cache = DiagnosticCache()
        cache.put("0x1200", tlvs_for(0x1200), now=0.1)

        record = cache.get("0x1200")
        assert record is not None
        assert record.received_at == 0.1
        assert len(cache) == 1
        assert "0x1200" in cache

    def test_put_overwrites_without_merging(self):
        """Second reply replaces the first entirely"""
        cache = DiagnosticCache()
        cache.put("0x1200", tlvs_for(0x1200, battery=90), now=0.1)
        cache.put("0x1200", [DiagnosticTlv(int(DiagTlvType.SHORT_ADDRESS), 0x1200)], now=1.9)

        record = cache.get("0x1200")
        assert len(cache) == 1
        assert record.received_at == 1.9
        assert [t.type for t in record.tlvs] == [int(DiagTlvType.SHORT_ADDRESS)]

    def test_put_copies_tlv_list(self):
        cache = DiagnosticCache()
        tlvs = tlvs_for(0x1200)
        cache.put("0x1200", tlvs, now=0.0)
        tlvs.clear()

        assert len(cache.get("0x1200").tlvs) == 2


class TestDiagnosticCacheEvict:
    """Test stale record eviction"""

    def test_evict_at_exact_threshold(self):
        """A record exactly threshold old is stale"""
        cache = DiagnosticCache()
        cache.put("0x1200", tlvs_for(0x1200), now=1.0)

        assert cache.evict(now=4.0) == 1
        assert len(cache) == 0

    def test_evict_keeps_fresh_records(self):
        cache = DiagnosticCache()
        cache.put("0x1200", tlvs_for(0x1200), now=0.0)
        cache.put("0x3400", tlvs_for(0x3400), now=2.0)

        removed = cache.evict(now=3.5)

        assert removed == 1
        assert cache.keys() == ["0x3400"]

    def test_evict_empty_cache(self):
        assert DiagnosticCache().evict(now=100.0) == 0

    def test_custom_threshold(self):
        cache = DiagnosticCache(eviction_threshold=0.5)
        cache.put("0x1200", tlvs_for(0x1200), now=0.0)

        assert cache.evict(now=0.4) == 0
        assert cache.evict(now=0.5) == 1


class TestDiagnosticCacheSnapshot:
    """Test snapshot views"""

    def test_snapshot_contents(self):
        cache = DiagnosticCache()
        cache.put("0x1200", tlvs_for(0x1200), now=0.0)
        cache.put("0x3400", tlvs_for(0x3400), now=0.0)

        snapshot = cache.snapshot()

        assert len(snapshot) == 2
        rlocs = sorted(tlvs[0].value for tlvs in snapshot)
        assert rlocs == [0x1200, 0x3400]

    def test_snapshot_is_a_copy(self):
        cache = DiagnosticCache()
        cache.put("0x1200", tlvs_for(0x1200), now=0.0)

        snapshot = cache.snapshot()
        snapshot[0].clear()

        assert len(cache.get("0x1200").tlvs) == 2

    def test_clear(self):
        cache = DiagnosticCache()
        cache.put("0x1200", tlvs_for(0x1200), now=0.0)
        cache.clear()
        assert cache.snapshot() == []
