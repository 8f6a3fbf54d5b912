"""
Stealth Curve Conversion Module
Chuyển đổi Edwards (Ed25519) → Montgomery (X25519) và X25519 ladder

Conversion:
1. Private: h = SHA-512(seed), clamp h[0:32] (RFC 8032 §5.1.5)
2. Public:  u = (1 + y) / (1 - y) mod p (birational map, RFC 7748 §4.1)

X25519 (RFC 7748 §5):
- decodeScalar25519: clamp scalar
- decodeUCoordinate: bỏ bit cao nhất
- Montgomery ladder với a24 = 121665
"""

import hashlib

from .Stealth_FieldArithmetic import FieldElement, ONE, P, A24
from .Stealth_CurveArithmetic import EdwardsPoint
from .Stealth_Errors import InvalidCurvePoint, InvalidKeyLength

# u-coordinate của base point Curve25519
X25519_BASE_U = (9).to_bytes(32, byteorder='little')


def clamp_scalar(k):
    """
    Clamp 32 bytes theo RFC 7748 / RFC 8032

    - k[0] &= 248  (clear bits 0,1,2)
    - k[31] &= 127 (clear bit 255)
    - k[31] |= 64  (set bit 254)

    Args:
        k: 32 bytes

    Returns:
        bytes: clamped scalar
    """
    k = bytearray(k)
    k[0] &= 0b11111000
    k[31] &= 0b01111111
    k[31] |= 0b01000000
    return bytes(k)


def to_montgomery_scalar(edwards_private):
    """
    Ed25519 private key (32-byte seed) → X25519 private scalar

    Cùng scalar dùng cho public key A = a * B, nên
    X25519(a, 9) == to_montgomery_point(A).

    Args:
        edwards_private: 32 bytes seed

    Returns:
        bytes: 32-byte clamped X25519 scalar
    """
    if len(edwards_private) != 32:
        raise InvalidKeyLength("Edwards private key must be 32 bytes")

    h = hashlib.sha512(bytes(edwards_private)).digest()
    return clamp_scalar(h[:32])


def to_montgomery_point(edwards_public):
    """
    Ed25519 public key → X25519 u-coordinate

    Args:
        edwards_public: 32 bytes encoded Edwards point

    Returns:
        bytes: 32-byte u-coordinate (little-endian)

    Raises:
        InvalidKeyLength: nếu không đúng 32 bytes
        InvalidCurvePoint: nếu không phải điểm hợp lệ, hoặc là identity (y = 1)
    """
    if len(edwards_public) != 32:
        raise InvalidKeyLength("Edwards public key must be 32 bytes")

    point = EdwardsPoint.decode(bytes(edwards_public))
    if point is None:
        raise InvalidCurvePoint("Public key is not a valid Ed25519 point")

    _, y = point.to_affine()

    denominator = ONE.sub(y)
    if denominator.is_zero():
        raise InvalidCurvePoint("Public key is the identity point")

    u = ONE.add(y).mul(denominator.invert())
    return u.to_bytes()


def x25519(k, u):
    """
    X25519 scalar multiplication (RFC 7748 §5)

    Args:
        k: 32-byte scalar (sẽ được clamp)
        u: 32-byte u-coordinate

    Returns:
        bytes: 32-byte u-coordinate của k * u
    """
    if len(k) != 32 or len(u) != 32:
        raise InvalidKeyLength("X25519 inputs must be 32 bytes")

    scalar = int.from_bytes(clamp_scalar(k), byteorder='little')

    u_bytes = bytearray(u)
    u_bytes[31] &= 0x7F
    x_1 = FieldElement(int.from_bytes(bytes(u_bytes), byteorder='little'))

    x_2, z_2 = ONE, FieldElement(0)
    x_3, z_3 = x_1, ONE
    swap = 0

    for t in range(254, -1, -1):
        k_t = (scalar >> t) & 1
        swap ^= k_t
        if swap:
            x_2, x_3 = x_3, x_2
            z_2, z_3 = z_3, z_2
        swap = k_t

        A = x_2.add(z_2)
        AA = A.square()
        B = x_2.sub(z_2)
        BB = B.square()
        E = AA.sub(BB)
        C = x_3.add(z_3)
        D_val = x_3.sub(z_3)
        DA = D_val.mul(A)
        CB = C.mul(B)

        x_3 = DA.add(CB).square()
        z_3 = x_1.mul(DA.sub(CB).square())
        x_2 = AA.mul(BB)
        z_2 = E.mul(AA.add(E.mul_small(A24)))

    if swap:
        x_2, x_3 = x_3, x_2
        z_2, z_3 = z_3, z_2

    # z_2^(p-2) = 0 khi z_2 = 0 (small-order input)
    return x_2.mul(z_2.pow(P - 2)).to_bytes()
