"""
Stealth addresses trên Ed25519 / X25519
"""

from .Stealth_Errors import (
    StealthError, InvalidFormat, InvalidKeyLength, InvalidCurvePoint,
    InvalidSeedLength, InvalidOutputIndex, DerivationMismatch,
)
from .Stealth_KeyGen import (
    KeyPair, StealthKeyPair, generate_stealth_keys, derive_stealth_keys_from_seed,
    derive_stealth_keys_from_signer, derive_stealth_keys_from_wallet,
)
from .Stealth_ECDH import compute_shared_secret
from .Stealth_Address import (
    MetaAddress, StealthAddressResult, SpendingKeyPair, get_meta_address, format_meta_address,
    parse_meta_address, generate_stealth_address, compute_stealth_address, is_stealth_address_for_us,
    derive_stealth_spending_key,
)
from .Stealth_Serialization import (
    SerializedStealthKeys, serialize_stealth_keys, deserialize_stealth_keys, export_keys,
)
