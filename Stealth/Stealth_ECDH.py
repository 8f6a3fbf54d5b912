"""
Stealth ECDH Module
Shared secret qua X25519 trên các khóa Ed25519

- Sender:   S = ephemeralPrivate * viewPublic
- Receiver: S = viewPrivate * ephemeralPublic
Hai phía cho cùng kết quả do ECDH giao hoán.

secret = SHA-256(raw shared point)
"""

import hashlib

from .Stealth_Montgomery import to_montgomery_scalar, to_montgomery_point, x25519
from .Stealth_Errors import InvalidCurvePoint

_ZERO_POINT = bytes(32)


def compute_shared_secret(private_key, public_key):
    """
    Tính shared secret 32 bytes

    Args:
        private_key: 32-byte Ed25519 seed
        public_key: 32-byte Ed25519 public key của phía bên kia

    Returns:
        bytes: SHA-256 của shared point

    Raises:
        InvalidKeyLength: key không đúng 32 bytes
        InvalidCurvePoint: public key không hợp lệ hoặc có small order
    """
    x_private = to_montgomery_scalar(private_key)
    x_public = to_montgomery_point(public_key)

    shared_point = x25519(x_private, x_public)
    if shared_point == _ZERO_POINT:
        raise InvalidCurvePoint("Shared point is zero (small-order public key)")

    return hashlib.sha256(shared_point).digest()
