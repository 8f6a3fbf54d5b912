import hashlib

from Stealth.Stealth_Address import (
    get_meta_address, format_meta_address, parse_meta_address, generate_stealth_address,
    is_stealth_address_for_us, derive_stealth_spending_key,
)
from Stealth.Stealth_KeyGen import derive_stealth_keys_from_seed, generate_stealth_keys
from Stealth.Stealth_Scanner import ScanCandidate, ScanStats, scan_candidates
from Stealth.Stealth_Serialization import serialize_stealth_keys, deserialize_stealth_keys


def demo_key_generation():
    """Demo tạo stealth keys và meta-address"""
    print("\n" + "=" * 60)
    print("Stealth Key Generation Demo")
    print("=" * 60)

    print("\n1. Deriving keys from seed SHA-256('demo-seed')...")
    keys = derive_stealth_keys_from_seed(hashlib.sha256(b"demo-seed").digest())
    meta_address = format_meta_address(get_meta_address(keys))

    print(f"\nView public key:  {keys.view_key.public_key.hex()}")
    print(f"Spend public key: {keys.spend_key.public_key.hex()}")
    print(f"Meta-address:     {meta_address}")

    print("\n2. Serialization round trip...")
    restored = deserialize_stealth_keys(serialize_stealth_keys(keys))
    print(f"Keys match: {restored == keys}")

    return keys


def demo_payment_flow(keys):
    """Demo sender → receiver"""
    print("\n" + "=" * 60)
    print("Stealth Payment Demo")
    print("=" * 60)

    meta = parse_meta_address(format_meta_address(get_meta_address(keys)))

    print("\n1. Sender generates stealth address...")
    result = generate_stealth_address(meta)
    print(f"Stealth address:   {result.address}")
    print(f"Ephemeral pub key: {result.ephemeral_pub_key}")

    print("\n2. Receiver scans...")
    is_ours = is_stealth_address_for_us(result.stealth_address, result.ephemeral_pub_key,
                                        keys.view_key.private_key, keys.spend_key.public_key)
    print(f"Payment is ours: {is_ours}")

    stranger = generate_stealth_keys()
    print(f"Stranger detects payment: "
          f"{is_stealth_address_for_us(result.stealth_address, result.ephemeral_pub_key, stranger.view_key.private_key, stranger.spend_key.public_key)}")

    print("\n3. Receiver derives spending key...")
    with derive_stealth_spending_key(result.stealth_address, result.ephemeral_pub_key,
                                     keys.view_key.private_key, keys.spend_key.public_key) as keypair:
        print(f"Spending key address matches: {keypair.address == result.address}")

    print("\n4. Batch scan with memos...")
    candidates = [
        ScanCandidate.from_memo(result.address, f"stealth:{result.ephemeral_pub_key}", tx_id="tx-1"),
        ScanCandidate.from_memo(generate_stealth_address(get_meta_address(stranger)).address,
                                "stealth:11111111111111111111111111111111", tx_id="tx-2"),
    ]
    stats = ScanStats()
    owned = scan_candidates(candidates, keys.view_key.private_key, keys.spend_key.public_key, stats=stats)
    print(f"Owned transactions: {[c.tx_id for c in owned]}")
    print(f"Stats: {stats.to_dict()}")

    print("\n" + "=" * 60)
    return is_ours


if __name__ == "__main__":
    demo_payment_flow(demo_key_generation())
