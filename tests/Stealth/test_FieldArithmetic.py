import pytest

from Stealth.Stealth_FieldArithmetic import FieldElement, P, ZERO, ONE, SQRT_M1, D


def test_field_arithmetic():
    """Test các phép toán cơ bản"""
    print("Testing Field Arithmetic...")

    assert ZERO.is_zero()
    assert not ONE.is_zero()
    print("✓ Zero và One")

    a = FieldElement(12345)
    b = FieldElement(67890)
    c = a.add(b)
    assert c.to_int() == (12345 + 67890) % P
    print("✓ Addition")

    assert c.sub(b) == a
    assert b.sub(c).to_int() == P - 12345
    print("✓ Subtraction")

    assert a.mul(b).to_int() == (12345 * 67890) % P
    assert a.square().to_int() == (12345 * 12345) % P
    assert a.mul_small(121665).to_int() == (12345 * 121665) % P
    print("✓ Multiplication")

    assert a.mul(a.invert()) == ONE
    print("✓ Inversion")

    assert FieldElement(P - 1).add(ONE).is_zero()
    assert FieldElement(-1).to_int() == P - 1
    print("✓ Modulo reduction")

    original = FieldElement(123456789)
    assert FieldElement.from_bytes(original.to_bytes()) == original
    print("✓ Bytes conversion")

    assert FieldElement(4).sqrt().square().to_int() == 4
    assert SQRT_M1.square() == ONE.neg()
    print("✓ Square root")


def test_field_constants_and_errors():
    # d = -121665/121666
    assert D.mul(FieldElement(121666)) == FieldElement(-121665)
    assert FieldElement(7).pow(P - 1) == ONE
    assert FieldElement(3).is_negative() == 1
    assert FieldElement(4).is_negative() == 0

    with pytest.raises(ValueError):
        ZERO.invert()

    with pytest.raises(ValueError):
        FieldElement.from_bytes(b"\x00" * 31)

    # 2 là non-residue mod p
    with pytest.raises(ValueError):
        FieldElement(2).sqrt()
    print("✓ Constants và error cases")
