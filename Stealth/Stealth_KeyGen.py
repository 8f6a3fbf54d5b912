"""
Stealth Key Generation Module
Tạo cặp khóa Ed25519 và bộ stealth keys (view + spend)

Key Generation Process (RFC 8032):
1. Private key: 32 bytes seed
2. Hash seed với SHA-512 → 64 bytes
3. Clamp 32 bytes đầu thành scalar 'a'
4. Public key A = a * B (B là base point)
5. Encode A thành 32 bytes

Stealth keys gồm hai cặp khóa độc lập:
- view key: dùng để scan payments
- spend key: kết hợp với shared secret để derive spending key

Deterministic derivation (wire contract):
- view seed  = SHA-256(seed || "stealth:view")
- spend seed = SHA-256(seed || "stealth:spend")
"""

import hashlib
import logging
import secrets

from .Stealth_CurveArithmetic import EdwardsPoint, get_base_point_table
from .Stealth_Montgomery import clamp_scalar
from .Stealth_Config import VIEW_DOMAIN, SPEND_DOMAIN, MIN_SEED_LENGTH, KEY_LENGTH, SIGNATURE_MESSAGE
from .Stealth_Errors import InvalidKeyLength, InvalidCurvePoint, InvalidSeedLength

logger = logging.getLogger(__name__)


def _wipe(buffer):
    for i in range(len(buffer)):
        buffer[i] = 0


class Ed25519PrivateKey:
    """
    Ed25519 Private Key
    Lưu trữ 32-byte seed (bytearray để có thể wipe) và scalar derived
    """

    def __init__(self, seed=None):
        """
        Args:
            seed: 32 bytes (nếu None, sẽ generate random)
        """
        if seed is None:
            self.seed = bytearray(secrets.token_bytes(KEY_LENGTH))
        else:
            if len(seed) != KEY_LENGTH:
                raise InvalidKeyLength("Private key seed must be 32 bytes")
            self.seed = bytearray(seed)

        self._derive_key_data()

    def _derive_key_data(self):
        """
        h = SHA-512(seed), a = clamp(h[0:32])
        """
        h = hashlib.sha512(bytes(self.seed)).digest()
        self.scalar = int.from_bytes(clamp_scalar(h[:32]), byteorder='little')

    def get_public_key(self):
        """
        Public key A = a * B (qua precomputed table)

        Returns:
            Ed25519PublicKey
        """
        A = get_base_point_table().scalar_mul(self.scalar)
        return Ed25519PublicKey(A)

    def to_bytes(self):
        """Export private key seed (32 bytes)"""
        return bytes(self.seed)

    @staticmethod
    def from_bytes(data):
        return Ed25519PrivateKey(seed=data)

    def wipe(self):
        """Ghi đè seed bằng 0 và bỏ scalar"""
        _wipe(self.seed)
        self.scalar = 0

    def __repr__(self):
        return "Ed25519PrivateKey(<redacted>)"


class Ed25519PublicKey:
    """
    Ed25519 Public Key
    Lưu trữ điểm A trên curve
    """

    def __init__(self, point):
        if not isinstance(point, EdwardsPoint):
            raise TypeError("Point must be EdwardsPoint")

        self.point = point

    def to_bytes(self):
        """Encode point A (32 bytes)"""
        return self.point.encode()

    @staticmethod
    def from_bytes(data):
        """
        Import public key từ 32 bytes

        Raises:
            InvalidKeyLength, InvalidCurvePoint
        """
        if len(data) != KEY_LENGTH:
            raise InvalidKeyLength("Public key must be 32 bytes")

        point = EdwardsPoint.decode(bytes(data))
        if point is None:
            raise InvalidCurvePoint("Invalid public key encoding")

        return Ed25519PublicKey(point)

    def __repr__(self):
        return f"Ed25519PublicKey({self.to_bytes().hex()})"

    def __eq__(self, other):
        if not isinstance(other, Ed25519PublicKey):
            return False
        return self.point == other.point

    def __hash__(self):
        return hash(self.to_bytes())


def derive_public_key(private_key):
    """
    Derive public key bytes từ 32-byte seed

    Args:
        private_key: Ed25519PrivateKey hoặc 32 bytes

    Returns:
        bytes: 32-byte encoded public key
    """
    if not isinstance(private_key, Ed25519PrivateKey):
        private_key = Ed25519PrivateKey(seed=private_key)

    return private_key.get_public_key().to_bytes()


class KeyPair:
    """
    Một cặp (private seed, public key) dạng bytes
    private_key là bytearray để có thể wipe
    """

    def __init__(self, private_key, public_key):
        if len(private_key) != KEY_LENGTH:
            raise InvalidKeyLength("Private key must be 32 bytes")
        if len(public_key) != KEY_LENGTH:
            raise InvalidKeyLength("Public key must be 32 bytes")

        self.private_key = bytearray(private_key)
        self.public_key = bytes(public_key)

    @classmethod
    def from_seed(cls, seed):
        return cls(seed, derive_public_key(bytes(seed)))

    @classmethod
    def generate(cls):
        return cls.from_seed(secrets.token_bytes(KEY_LENGTH))

    def wipe(self):
        _wipe(self.private_key)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.wipe()
        return False

    def __eq__(self, other):
        if not isinstance(other, KeyPair):
            return False
        return self.private_key == other.private_key and self.public_key == other.public_key

    def __repr__(self):
        return f"KeyPair(public_key={self.public_key.hex()})"


class StealthKeyPair:
    """
    Bộ stealth keys của receiver

    Attributes:
        view_key: KeyPair dùng để scan
        spend_key: KeyPair dùng để spend
    """

    def __init__(self, view_key, spend_key):
        if not isinstance(view_key, KeyPair) or not isinstance(spend_key, KeyPair):
            raise TypeError("view_key and spend_key must be KeyPair")

        self.view_key = view_key
        self.spend_key = spend_key

    def wipe(self):
        self.view_key.wipe()
        self.spend_key.wipe()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.wipe()
        return False

    def __eq__(self, other):
        if not isinstance(other, StealthKeyPair):
            return False
        return self.view_key == other.view_key and self.spend_key == other.spend_key

    def __repr__(self):
        return (f"StealthKeyPair(view_public={self.view_key.public_key.hex()}, "
                f"spend_public={self.spend_key.public_key.hex()})")


def generate_stealth_keys():
    """
    Generate bộ stealth keys ngẫu nhiên (hai seed độc lập)

    Returns:
        StealthKeyPair
    """
    return StealthKeyPair(KeyPair.generate(), KeyPair.generate())


def derive_stealth_keys_from_seed(seed):
    """
    Derive stealth keys deterministically từ master seed

    Args:
        seed: bytes, tối thiểu 32 bytes

    Returns:
        StealthKeyPair

    Raises:
        InvalidSeedLength: nếu seed ngắn hơn 32 bytes
    """
    if len(seed) < MIN_SEED_LENGTH:
        raise InvalidSeedLength(f"Seed must be at least {MIN_SEED_LENGTH} bytes")

    seed = bytes(seed)
    view_seed = hashlib.sha256(seed + VIEW_DOMAIN).digest()
    spend_seed = hashlib.sha256(seed + SPEND_DOMAIN).digest()

    return StealthKeyPair(KeyPair.from_seed(view_seed), KeyPair.from_seed(spend_seed))


def derive_stealth_keys_from_signer(sign, message=SIGNATURE_MESSAGE):
    """
    Derive stealth keys từ chữ ký của wallet

    Process:
    1. signature = sign(message)
    2. seed = SHA-256(signature)
    3. derive_stealth_keys_from_seed(seed)

    Args:
        sign: callable(bytes) -> bytes do host cung cấp
        message: str hoặc bytes cần ký

    Returns:
        StealthKeyPair
    """
    if isinstance(message, str):
        message = message.encode('utf-8')

    signature = sign(message)
    if not signature:
        raise InvalidSeedLength("Signer returned an empty signature")

    logger.debug("Deriving stealth keys from wallet signature")
    return derive_stealth_keys_from_seed(hashlib.sha256(bytes(signature)).digest())


def derive_stealth_keys_from_wallet(secret_key):
    """
    Derive stealth keys từ secret key của wallet (64 bytes: seed || public)
    Chỉ dùng 32 bytes đầu làm seed
    """
    if len(secret_key) < MIN_SEED_LENGTH:
        raise InvalidSeedLength("Wallet secret key must be at least 32 bytes")

    return derive_stealth_keys_from_seed(bytes(secret_key[:32]))
