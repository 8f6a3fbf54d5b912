"""
Stealth Payment Scanner
Các collaborator phía host quanh ownership test:

- extract_ephemeral_key: lấy ephemeral key từ memo của transaction
- EphemeralKeyCache: cache các payment đã tìm thấy (chỉ là optimization)
- scan_candidates: scan song song, giới hạn số worker
- ScanStats: counters không chứa secret (matches/misses/errors)

Không có network I/O ở đây; việc lấy transactions từ ledger là của caller.
"""

import hmac
import json
import logging
import re
import threading
import time
from concurrent.futures import ThreadPoolExecutor

from .Stealth_Address import compute_stealth_address
from .Stealth_Config import MEMO_TAG, MEMO_JSON_FIELD, load_settings
from .Stealth_Encoding import encode_base58, as_key_bytes
from .Stealth_Errors import StealthError

logger = logging.getLogger(__name__)

_BASE58_CHARS = "1-9A-HJ-NP-Za-km-z"
_MEMO_TAG_RE = re.compile(re.escape(MEMO_TAG) + f"([{_BASE58_CHARS}]+)")


def extract_ephemeral_key(memo):
    """
    Lấy ephemeral public key (base58) từ memo

    Hỗ trợ hai dạng:
    - tag "stealth:<key>" ở bất kỳ đâu trong text
    - JSON object có field "ephemeralPubKey"

    Returns:
        str hoặc None
    """
    if not isinstance(memo, str) or not memo:
        return None

    stripped = memo.strip()
    if stripped.startswith("{"):
        try:
            payload = json.loads(stripped)
        except ValueError:
            payload = None
        if isinstance(payload, dict):
            value = payload.get(MEMO_JSON_FIELD)
            if isinstance(value, str) and value:
                return value

    match = _MEMO_TAG_RE.search(memo)
    if match:
        return match.group(1)

    return None


class CachedPayment:
    """
    Payment đã tìm thấy trước đó

    Attributes:
        signature: transaction id
        ephemeral_pub_key: base58
        stealth_address: base58
        timestamp: block time (giây)
    """

    def __init__(self, signature, ephemeral_pub_key, stealth_address, timestamp=0):
        self.signature = signature
        self.ephemeral_pub_key = ephemeral_pub_key
        self.stealth_address = stealth_address
        self.timestamp = timestamp

    def to_dict(self):
        return {
            'signature': self.signature,
            'ephemeralPubKey': self.ephemeral_pub_key,
            'stealthAddress': self.stealth_address,
            'timestamp': self.timestamp,
        }

    def __repr__(self):
        return f"CachedPayment(signature={self.signature!r}, stealth_address={self.stealth_address!r})"


class EphemeralKeyCache:
    """
    Interface cho cache; implement get/put/entries
    """

    def get(self, signature):
        raise NotImplementedError

    def put(self, entry):
        raise NotImplementedError

    def entries(self):
        raise NotImplementedError


class InMemoryEphemeralKeyCache(EphemeralKeyCache):
    """Cache trong process, thread-safe"""

    def __init__(self):
        self._entries = {}
        self._lock = threading.Lock()

    def get(self, signature):
        with self._lock:
            return self._entries.get(signature)

    def put(self, entry):
        with self._lock:
            self._entries[entry.signature] = entry

    def entries(self):
        with self._lock:
            return sorted(self._entries.values(), key=lambda e: e.timestamp)

    def __len__(self):
        with self._lock:
            return len(self._entries)


class ScanStats:
    """
    Counters cho diagnostics, không chứa secret material
    """

    def __init__(self):
        self.scanned = 0
        self.matches = 0
        self.misses = 0
        self.errors = 0
        self.cache_hits = 0
        self._lock = threading.Lock()

    def record(self, matched=False, error=False, cache_hit=False):
        with self._lock:
            self.scanned += 1
            if cache_hit:
                self.cache_hits += 1
            if error:
                self.errors += 1
            elif matched:
                self.matches += 1
            else:
                self.misses += 1

    def to_dict(self):
        with self._lock:
            return {
                'scanned': self.scanned,
                'matches': self.matches,
                'misses': self.misses,
                'errors': self.errors,
                'cache_hits': self.cache_hits,
            }

    def __repr__(self):
        return f"ScanStats({self.to_dict()})"


class ScanCandidate:
    """
    Một (address, ephemeral key) lấy từ ledger cần kiểm tra

    Attributes:
        tx_id: transaction signature (dùng làm cache key, có thể None)
        stealth_address: base58 hoặc 32 bytes
        ephemeral_pub_key: base58
        output_index: 0-255
        timestamp: block time
    """

    def __init__(self, stealth_address, ephemeral_pub_key, tx_id=None, output_index=0, timestamp=0):
        self.stealth_address = stealth_address
        self.ephemeral_pub_key = ephemeral_pub_key
        self.tx_id = tx_id
        self.output_index = output_index
        self.timestamp = timestamp

    @staticmethod
    def from_memo(stealth_address, memo, tx_id=None, timestamp=0):
        """
        Tạo candidate từ memo; None nếu memo không chứa ephemeral key
        """
        ephemeral_pub_key = extract_ephemeral_key(memo)
        if ephemeral_pub_key is None:
            return None
        return ScanCandidate(stealth_address, ephemeral_pub_key, tx_id=tx_id, timestamp=timestamp)

    def address_base58(self):
        if isinstance(self.stealth_address, str):
            return self.stealth_address
        return encode_base58(self.stealth_address)

    def __repr__(self):
        return f"ScanCandidate(tx_id={self.tx_id!r}, output_index={self.output_index})"


def _cache_hit(cache, candidate):
    if cache is None or candidate.tx_id is None:
        return False

    entry = cache.get(candidate.tx_id)
    if entry is None:
        return False

    try:
        return (entry.ephemeral_pub_key == candidate.ephemeral_pub_key
                and entry.stealth_address == candidate.address_base58())
    except (StealthError, ValueError, TypeError):
        return False


def _expected_address(candidate, view_private_key, spend_public_key):
    """
    (candidate address bytes, expected address bytes), hoặc None nếu candidate hỏng:
    sai base58, sai độ dài, ephemeral key không phải điểm hợp lệ hoặc có small order
    """
    try:
        address = as_key_bytes(candidate.stealth_address)
        expected = compute_stealth_address(candidate.ephemeral_pub_key, view_private_key,
                                           spend_public_key, candidate.output_index)
    except (StealthError, ValueError, TypeError):
        return None
    return address, expected


def scan_candidates(candidates, view_private_key, spend_public_key, max_workers=None, cache=None, stats=None):
    """
    Scan nhiều candidates song song

    Args:
        candidates: iterable của ScanCandidate
        view_private_key: 32 bytes
        spend_public_key: 32 bytes
        max_workers: giới hạn concurrency (mặc định Settings.scan_workers)
        cache: EphemeralKeyCache (tùy chọn)
        stats: ScanStats để cập nhật (tùy chọn)

    Returns:
        list các ScanCandidate thuộc về receiver, theo thứ tự input
    """
    candidates = list(candidates)
    if stats is None:
        stats = ScanStats()
    if max_workers is None:
        max_workers = load_settings().scan_workers
    if max_workers < 1:
        raise ValueError("max_workers must be >= 1")

    def check(candidate):
        if _cache_hit(cache, candidate):
            stats.record(matched=True, cache_hit=True)
            return True

        addresses = _expected_address(candidate, view_private_key, spend_public_key)
        if addresses is None:
            stats.record(error=True)
            return False

        owned = hmac.compare_digest(*addresses)
        stats.record(matched=owned)

        if owned and cache is not None and candidate.tx_id is not None:
            cache.put(CachedPayment(
                candidate.tx_id,
                candidate.ephemeral_pub_key,
                candidate.address_base58(),
                candidate.timestamp or int(time.time()),
            ))
        return owned

    if not candidates:
        return []

    with ThreadPoolExecutor(max_workers=min(max_workers, len(candidates))) as executor:
        results = list(executor.map(check, candidates))

    owned = [candidate for candidate, is_ours in zip(candidates, results) if is_ours]

    summary = stats.to_dict()
    logger.info("Stealth scan finished: scanned=%d matches=%d misses=%d errors=%d cache_hits=%d",
                summary['scanned'], summary['matches'], summary['misses'],
                summary['errors'], summary['cache_hits'])
    return owned
