"""
Stealth Address Module
Meta-address, sinh stealth address (sender), scan và derive spending key (receiver)

Flow:
1. Receiver publish meta-address "st:<viewPub>:<spendPub>"
2. Sender sinh ephemeral keypair, derive stealth address
3. Sender gửi funds tới stealth address và publish ephemeral public key
4. Receiver scan bằng view key, derive spending key cho address của mình

Derivation:
    secret      = SHA-256(X25519(ephemeral, view))
    stealthSeed = SHA-256(secret || spendPub || outputIndex)
    address     = Ed25519 public key của stealthSeed
"""

import hashlib
import hmac
import logging

from .Stealth_Config import META_ADDRESS_PREFIX, META_ADDRESS_SEPARATOR, MAX_OUTPUT_INDEX
from .Stealth_ECDH import compute_shared_secret
from .Stealth_Encoding import encode_base58, as_key_bytes
from .Stealth_Errors import StealthError, InvalidFormat, InvalidOutputIndex, DerivationMismatch
from .Stealth_KeyGen import KeyPair, StealthKeyPair, derive_public_key

logger = logging.getLogger(__name__)


class MetaAddress:
    """
    Stealth meta-address: hai public key base58 (view, spend)
    An toàn để publish.
    """

    __slots__ = ("_view_pub_key", "_spend_pub_key")

    def __init__(self, view_pub_key, spend_pub_key):
        """
        Args:
            view_pub_key: base58 string
            spend_pub_key: base58 string
        """
        self._view_pub_key = view_pub_key
        self._spend_pub_key = spend_pub_key

    @property
    def view_pub_key(self):
        return self._view_pub_key

    @property
    def spend_pub_key(self):
        return self._spend_pub_key

    def view_public_key_bytes(self):
        return as_key_bytes(self._view_pub_key)

    def spend_public_key_bytes(self):
        return as_key_bytes(self._spend_pub_key)

    def __eq__(self, other):
        if not isinstance(other, MetaAddress):
            return False
        return (self._view_pub_key == other._view_pub_key
                and self._spend_pub_key == other._spend_pub_key)

    def __hash__(self):
        return hash((self._view_pub_key, self._spend_pub_key))

    def __repr__(self):
        return f"MetaAddress({format_meta_address(self)!r})"

    def __str__(self):
        return format_meta_address(self)


def get_meta_address(keys):
    """
    Meta-address từ public halves của StealthKeyPair
    """
    if not isinstance(keys, StealthKeyPair):
        raise TypeError("keys must be StealthKeyPair")

    return MetaAddress(
        encode_base58(keys.view_key.public_key),
        encode_base58(keys.spend_key.public_key),
    )


def format_meta_address(meta):
    """Format: "st:<viewPubKey>:<spendPubKey>" """
    return META_ADDRESS_SEPARATOR.join((META_ADDRESS_PREFIX, meta.view_pub_key, meta.spend_pub_key))


def parse_meta_address(text):
    """
    Parse chuỗi meta-address

    Chỉ kiểm tra shape; các key được validate khi sử dụng.

    Raises:
        InvalidFormat: không đúng dạng st:<viewPubKey>:<spendPubKey>
    """
    if not isinstance(text, str):
        raise InvalidFormat("Meta-address must be a string")

    parts = text.split(META_ADDRESS_SEPARATOR)
    if len(parts) != 3 or parts[0] != META_ADDRESS_PREFIX or not parts[1] or not parts[2]:
        raise InvalidFormat("Invalid stealth meta-address format. Expected: st:<viewPubKey>:<spendPubKey>")

    return MetaAddress(parts[1], parts[2])


def _check_output_index(output_index):
    if isinstance(output_index, bool) or not isinstance(output_index, int):
        raise InvalidOutputIndex("Output index must be an integer")
    if not 0 <= output_index <= MAX_OUTPUT_INDEX:
        raise InvalidOutputIndex(f"Output index must be in [0, {MAX_OUTPUT_INDEX}]")


def derive_stealth_seed(shared_secret, spend_public_key, output_index=0):
    """
    stealthSeed = SHA-256(secret || spendPub || outputIndex byte)
    """
    _check_output_index(output_index)
    return hashlib.sha256(bytes(shared_secret) + bytes(spend_public_key) + bytes([output_index])).digest()


class StealthAddressResult:
    """
    Kết quả phía sender

    Attributes:
        stealth_address: 32 bytes public key
        ephemeral_pub_key: base58, phải được publish cùng transaction
        output_index: index đã dùng
    """

    def __init__(self, stealth_address, ephemeral_pub_key, output_index=0):
        self.stealth_address = stealth_address
        self.ephemeral_pub_key = ephemeral_pub_key
        self.output_index = output_index

    @property
    def address(self):
        """Stealth address dạng base58 (ledger encoding)"""
        return encode_base58(self.stealth_address)

    def __iter__(self):
        return iter((self.stealth_address, self.ephemeral_pub_key))

    def __repr__(self):
        return (f"StealthAddressResult(address={self.address!r}, "
                f"ephemeral_pub_key={self.ephemeral_pub_key!r}, output_index={self.output_index})")


def generate_stealth_address(meta_address, output_index=0):
    """
    Sinh stealth address cho một payment (sender)

    Mỗi lần gọi tạo ephemeral keypair mới; không bao giờ tái sử dụng
    ephemeral key giữa các payments.

    Args:
        meta_address: MetaAddress hoặc chuỗi "st:..."
        output_index: 0-255

    Returns:
        StealthAddressResult

    Raises:
        InvalidFormat, InvalidKeyLength, InvalidCurvePoint, InvalidOutputIndex
    """
    if isinstance(meta_address, str):
        meta_address = parse_meta_address(meta_address)
    _check_output_index(output_index)

    view_pub = meta_address.view_public_key_bytes()
    spend_pub = meta_address.spend_public_key_bytes()

    with KeyPair.generate() as ephemeral:
        shared_secret = compute_shared_secret(ephemeral.private_key, view_pub)
        ephemeral_pub = ephemeral.public_key

    stealth_seed = derive_stealth_seed(shared_secret, spend_pub, output_index)
    stealth_pub = derive_public_key(stealth_seed)

    logger.debug("Generated stealth address (output_index=%d)", output_index)
    return StealthAddressResult(stealth_pub, encode_base58(ephemeral_pub), output_index)


def _recompute_stealth_seed(ephemeral_pub_key, view_private_key, spend_public_key, output_index):
    ephemeral_pub = as_key_bytes(ephemeral_pub_key)
    spend_pub = as_key_bytes(spend_public_key)
    view_priv = as_key_bytes(view_private_key)

    shared_secret = compute_shared_secret(view_priv, ephemeral_pub)
    return derive_stealth_seed(shared_secret, spend_pub, output_index)


def compute_stealth_address(ephemeral_pub_key, view_private_key, spend_public_key, output_index=0):
    """
    Tính lại stealth address (32 bytes) phía receiver từ ephemeral key

    Raises:
        InvalidFormat, InvalidKeyLength, InvalidCurvePoint, InvalidOutputIndex
    """
    stealth_seed = _recompute_stealth_seed(ephemeral_pub_key, view_private_key, spend_public_key, output_index)
    return derive_public_key(stealth_seed)


def is_stealth_address_for_us(stealth_address, ephemeral_pub_key, view_private_key, spend_public_key,
                              output_index=0):
    """
    Kiểm tra stealth address có phải của mình không (receiver scan)

    Pure function, không bao giờ raise: input lỗi → False,
    để một candidate hỏng không làm dừng cả batch scan.

    Args:
        stealth_address: 32 bytes hoặc base58
        ephemeral_pub_key: base58 hoặc 32 bytes
        view_private_key: 32 bytes (view seed)
        spend_public_key: 32 bytes
        output_index: 0-255

    Returns:
        bool
    """
    try:
        candidate = as_key_bytes(stealth_address)
        expected = compute_stealth_address(ephemeral_pub_key, view_private_key, spend_public_key, output_index)
    except (StealthError, ValueError, TypeError) as e:
        logger.debug("Scan rejected malformed candidate: %s", type(e).__name__)
        return False

    return hmac.compare_digest(candidate, expected)


class SpendingKeyPair(KeyPair):
    """
    Keypair để spend từ đúng một stealth address
    """

    @property
    def secret_key(self):
        """64 bytes seed || public (dạng secret key của ledger wallet)"""
        return bytes(self.private_key) + self.public_key

    @property
    def address(self):
        return encode_base58(self.public_key)

    def __repr__(self):
        return f"SpendingKeyPair(address={self.address!r})"


def derive_stealth_spending_key(stealth_address, ephemeral_pub_key, view_private_key, spend_public_key,
                                output_index=0):
    """
    Derive keypair để spend từ stealth address (receiver)

    Chỉ gọi sau khi is_stealth_address_for_us trả về True.

    Returns:
        SpendingKeyPair với public_key == stealth_address

    Raises:
        DerivationMismatch: public key derive ra khác stealth_address
        InvalidFormat, InvalidKeyLength, InvalidCurvePoint, InvalidOutputIndex
    """
    target = as_key_bytes(stealth_address)
    stealth_seed = _recompute_stealth_seed(ephemeral_pub_key, view_private_key, spend_public_key, output_index)

    keypair = SpendingKeyPair.from_seed(stealth_seed)
    if not hmac.compare_digest(keypair.public_key, target):
        keypair.wipe()
        raise DerivationMismatch("Derived public key does not match the stealth address")

    return keypair
