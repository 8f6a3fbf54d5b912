import hashlib

import pytest

from Stealth.Stealth_Errors import InvalidCurvePoint, InvalidKeyLength
from Stealth.Stealth_KeyGen import derive_public_key
from Stealth.Stealth_Montgomery import (
    X25519_BASE_U, clamp_scalar, to_montgomery_scalar, to_montgomery_point, x25519,
)

# RFC 7748 §5.2
X25519_VECTORS = [
    (
        "a546e36bf0527c9d3b16154b82465edd62144c0ac1fc5a18506a2244ba449ac4",
        "e6db6867583030db3594c1a424b15f7c726624ec26b3353b10a903a6d0ab1c4c",
        "c3da55379de9c6908e94ea4df28d084f32eccf03491c71f754b4075577a28552",
    ),
    (
        "4b66e9d4d1b4673c5ad22691957d6af5c11b6421e0ea01d42ca4169e7918ba0d",
        "e5210f12786811d3f4b7959d0538ae2c31dbe7106fc03c3efc4cd549c715a493",
        "95cbde9476e8907d7ade45cb4b873f88b595a68799fa152e6f8f7647aac7957c",
    ),
]

# RFC 7748 §6.1
ALICE_PRIVATE = bytes.fromhex("77076d0a7318a57d3c16c17251b26645df4c2f87ebc0992ab177fba51db92c2a")
ALICE_PUBLIC = bytes.fromhex("8520f0098930a754748b7ddcb43ef75a0dbf3a0d26381af4eba4a98eaa9b4e6a")
BOB_PRIVATE = bytes.fromhex("5dab087e624a8a4b79e17f8b83800ee66f3bb1292618b6fd1c2f8b27ff88e0eb")
BOB_PUBLIC = bytes.fromhex("de9edb7d7b7dc1b4d35b61c2ece435373f8343c85b78674dadfc7e146f882b4f")
SHARED = bytes.fromhex("4a5d9d5ba4ce2de1728e3bf480350f25e07e21c947d19e3376f09b3c1e161742")

ED25519_BASE_POINT = bytes.fromhex("5866666666666666666666666666666666666666666666666666666666666666")


def test_x25519_vectors():
    """RFC 7748 conformance"""
    print("Testing X25519...")

    for scalar_hex, u_hex, expected_hex in X25519_VECTORS:
        assert x25519(bytes.fromhex(scalar_hex), bytes.fromhex(u_hex)) == bytes.fromhex(expected_hex)
    print("✓ RFC 7748 §5.2 vectors")

    assert x25519(ALICE_PRIVATE, X25519_BASE_U) == ALICE_PUBLIC
    assert x25519(BOB_PRIVATE, X25519_BASE_U) == BOB_PUBLIC
    assert x25519(ALICE_PRIVATE, BOB_PUBLIC) == SHARED
    assert x25519(BOB_PRIVATE, ALICE_PUBLIC) == SHARED
    print("✓ RFC 7748 §6.1 Diffie-Hellman")

    with pytest.raises(InvalidKeyLength):
        x25519(b"\x01" * 31, X25519_BASE_U)


def test_clamp_scalar():
    clamped = clamp_scalar(b"\xff" * 32)
    assert clamped[0] == 0xF8
    assert clamped[31] == 0x7F
    assert clamp_scalar(b"\x00" * 32)[31] == 0x40
    assert clamp_scalar(clamped) == clamped
    print("✓ Clamping idempotent")


def test_edwards_to_montgomery():
    # Ed25519 base point (y = 4/5) ↦ u = 9
    assert to_montgomery_point(ED25519_BASE_POINT) == X25519_BASE_U
    print("✓ Base point maps to u = 9")

    for i in range(8):
        seed = hashlib.sha256(b"conversion-%d" % i).digest()
        public = derive_public_key(seed)
        # u(a * B) == X25519(a, 9)
        assert to_montgomery_point(public) == x25519(to_montgomery_scalar(seed), X25519_BASE_U)
    print("✓ Conversion consistent with X25519 base multiplication")

    expected = clamp_scalar(hashlib.sha512(b"\x11" * 32).digest()[:32])
    assert to_montgomery_scalar(b"\x11" * 32) == expected
    print("✓ Private scalar conversion")


def test_conversion_errors():
    with pytest.raises(InvalidKeyLength):
        to_montgomery_scalar(b"\x00" * 16)
    with pytest.raises(InvalidKeyLength):
        to_montgomery_point(b"\x00" * 33)
    with pytest.raises(InvalidCurvePoint):
        to_montgomery_point(b"\xff" * 31 + b"\x7f")
    # identity (y = 1) không có u hữu hạn
    with pytest.raises(InvalidCurvePoint):
        to_montgomery_point(b"\x01" + b"\x00" * 31)
    print("✓ Invalid points rejected")
