import json
import logging

import pytest

from Stealth.Stealth_Address import get_meta_address, generate_stealth_address
from Stealth.Stealth_KeyGen import derive_stealth_keys_from_seed
from Stealth.Stealth_Scanner import (
    CachedPayment, EphemeralKeyCache, InMemoryEphemeralKeyCache, ScanCandidate, ScanStats,
    extract_ephemeral_key, scan_candidates,
)

RECEIVER = derive_stealth_keys_from_seed(b"\x21" * 32)
OTHER = derive_stealth_keys_from_seed(b"\x22" * 32)

KEY = "7xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJosgAsU"


def test_extract_ephemeral_key():
    """Test memo parsing"""
    print("Testing memo extraction...")

    assert extract_ephemeral_key(f"stealth:{KEY}") == KEY
    assert extract_ephemeral_key(f"Program log: Memo (len 52): \"stealth:{KEY}\"") == KEY
    print("✓ Tag form")

    assert extract_ephemeral_key(json.dumps({"type": "payment", "ephemeralPubKey": KEY})) == KEY
    assert extract_ephemeral_key(json.dumps({"ephemeralPubKey": 5})) is None
    print("✓ JSON form")

    for memo in (None, "", "hello", "stealth:", "{not json", json.dumps([KEY]), 42):
        assert extract_ephemeral_key(memo) is None
    print("✓ No key present")


def test_in_memory_cache():
    cache = InMemoryEphemeralKeyCache()
    assert isinstance(cache, EphemeralKeyCache)
    assert cache.get("sig") is None

    cache.put(CachedPayment("sig2", KEY, "addr2", timestamp=20))
    cache.put(CachedPayment("sig1", KEY, "addr1", timestamp=10))
    assert len(cache) == 2
    assert cache.get("sig1").stealth_address == "addr1"
    assert [e.signature for e in cache.entries()] == ["sig1", "sig2"]
    assert cache.get("sig1").to_dict()["ephemeralPubKey"] == KEY

    with pytest.raises(NotImplementedError):
        EphemeralKeyCache().get("sig")
    print("✓ Ephemeral key cache")


def test_scan_stats():
    stats = ScanStats()
    stats.record(matched=True)
    stats.record()
    stats.record(error=True)
    stats.record(matched=True, cache_hit=True)
    assert stats.to_dict() == {'scanned': 4, 'matches': 2, 'misses': 1, 'errors': 1, 'cache_hits': 1}


def _candidates():
    meta = get_meta_address(RECEIVER)
    other_meta = get_meta_address(OTHER)

    mine_a = generate_stealth_address(meta)
    mine_b = generate_stealth_address(meta, output_index=3)
    theirs = generate_stealth_address(other_meta)

    return [
        ScanCandidate(mine_a.address, mine_a.ephemeral_pub_key, tx_id="tx-a", timestamp=1),
        ScanCandidate(theirs.stealth_address, theirs.ephemeral_pub_key, tx_id="tx-other"),
        ScanCandidate(mine_a.stealth_address, "short-ephemeral-key", tx_id="tx-bad"),
        ScanCandidate(mine_b.stealth_address, mine_b.ephemeral_pub_key, tx_id="tx-b", output_index=3),
    ]


def test_scan_candidates(caplog):
    candidates = _candidates()
    cache = InMemoryEphemeralKeyCache()
    stats = ScanStats()

    with caplog.at_level(logging.INFO, logger="Stealth.Stealth_Scanner"):
        owned = scan_candidates(candidates, RECEIVER.view_key.private_key, RECEIVER.spend_key.public_key,
                                max_workers=2, cache=cache, stats=stats)

    assert [c.tx_id for c in owned] == ["tx-a", "tx-b"]
    assert stats.to_dict() == {'scanned': 4, 'matches': 2, 'misses': 1, 'errors': 1, 'cache_hits': 0}
    assert cache.get("tx-a").stealth_address == candidates[0].address_base58()
    assert cache.get("tx-other") is None
    print("✓ Batch scan finds owned payments")

    # Log chỉ chứa counters
    view_hex = bytes(RECEIVER.view_key.private_key).hex()
    assert "matches=2" in caplog.text
    assert view_hex not in caplog.text

    second = ScanStats()
    owned = scan_candidates(candidates, RECEIVER.view_key.private_key, RECEIVER.spend_key.public_key,
                            max_workers=1, cache=cache, stats=second)
    assert [c.tx_id for c in owned] == ["tx-a", "tx-b"]
    assert second.cache_hits == 2
    print("✓ Cache hits on repeat scan")


def test_scan_candidates_edge_cases():
    assert scan_candidates([], RECEIVER.view_key.private_key, RECEIVER.spend_key.public_key) == []

    with pytest.raises(ValueError):
        scan_candidates(_candidates(), RECEIVER.view_key.private_key, RECEIVER.spend_key.public_key,
                        max_workers=0)

    # Scan bằng keys của người khác
    owned = scan_candidates(_candidates(), OTHER.view_key.private_key, OTHER.spend_key.public_key)
    assert [c.tx_id for c in owned] == ["tx-other"]


def test_candidate_from_memo():
    result = generate_stealth_address(get_meta_address(RECEIVER))

    candidate = ScanCandidate.from_memo(result.address, f"stealth:{result.ephemeral_pub_key}", tx_id="tx")
    assert candidate.ephemeral_pub_key == result.ephemeral_pub_key
    assert candidate.address_base58() == result.address
    assert ScanCandidate.from_memo(result.address, "plain memo") is None

    owned = scan_candidates([candidate], RECEIVER.view_key.private_key, RECEIVER.spend_key.public_key)
    assert owned == [candidate]


def test_scan_counts_invalid_points_as_errors():
    """Ephemeral key 32 bytes nhưng không dùng được → error, không phải miss"""
    result = generate_stealth_address(get_meta_address(RECEIVER))

    non_canonical = b"\xff" * 31 + b"\x7f"  # y >= p
    small_order = bytes(32)                # y = 0, order 4

    candidates = [
        ScanCandidate(result.stealth_address, non_canonical, tx_id="tx-non-canonical"),
        ScanCandidate(result.stealth_address, small_order, tx_id="tx-small-order"),
        ScanCandidate(result.stealth_address, result.ephemeral_pub_key, tx_id="tx-good"),
    ]

    stats = ScanStats()
    owned = scan_candidates(candidates, RECEIVER.view_key.private_key, RECEIVER.spend_key.public_key,
                            max_workers=1, stats=stats)

    assert [c.tx_id for c in owned] == ["tx-good"]
    assert stats.to_dict() == {'scanned': 3, 'matches': 1, 'misses': 0, 'errors': 2, 'cache_hits': 0}
    print("✓ Invalid curve points counted as errors")
