import threading

import pytest

import Stealth.Stealth_CurveArithmetic as curve
from Stealth.Stealth_CurveArithmetic import EdwardsPoint, BASE_POINT, L, get_base_point_table, PrecomputedTable

BASE_POINT_ENCODING = bytes.fromhex("5866666666666666666666666666666666666666666666666666666666666666")


def test_curve_arithmetic():
    """Test các phép toán trên curve"""
    print("Testing Curve Arithmetic...")

    O = EdwardsPoint.zero()
    assert O.is_identity()
    print("✓ Identity point")

    assert BASE_POINT.is_on_curve()
    assert BASE_POINT.encode() == BASE_POINT_ENCODING
    print("✓ Base point on curve")

    assert BASE_POINT.add(O) == BASE_POINT
    print("✓ Addition with identity")

    B2 = BASE_POINT.double()
    assert B2.is_on_curve()
    assert B2 == BASE_POINT.add(BASE_POINT)
    print("✓ Point doubling")

    assert BASE_POINT.scalar_mul(3) == BASE_POINT.add(BASE_POINT).add(BASE_POINT)
    print("✓ Scalar multiplication")

    assert BASE_POINT.add(BASE_POINT.neg()).is_identity()
    assert BASE_POINT.scalar_mul(-2) == B2.neg()
    print("✓ Negation")

    assert BASE_POINT.scalar_mul(L).is_identity()
    print("✓ Base point order l")


def test_encode_decode():
    for scalar in (1, 2, 12345, L - 1):
        point = BASE_POINT.scalar_mul(scalar)
        decoded = EdwardsPoint.decode(point.encode())
        assert decoded == point
    print("✓ Encode/decode")

    # y = 2^255 - 1 >= p: non-canonical
    assert EdwardsPoint.decode(b"\xff" * 31 + b"\x7f") is None
    # y = 1, x = 0 với sign bit = 1
    assert EdwardsPoint.decode(b"\x01" + b"\x00" * 30 + b"\x80") is None
    print("✓ Invalid encodings rejected")

    with pytest.raises(ValueError):
        EdwardsPoint.decode(b"\x00" * 31)


def test_precomputed_table():
    table = get_base_point_table()
    assert table is get_base_point_table()

    for scalar in (0, 1, 8, 9, 12345, 2 ** 254 + 8 * 77777, L - 1, 2 ** 255 - 8):
        assert table.scalar_mul(scalar) == BASE_POINT.scalar_mul(scalar)
    print("✓ Precomputed table matches double-and-add")

    # scalar ngoài [0, 2^255) đi đường thường
    assert table.scalar_mul(2 ** 256 + 5) == BASE_POINT.scalar_mul(2 ** 256 + 5)

    other = PrecomputedTable(BASE_POINT.double())
    assert other.scalar_mul(3) == BASE_POINT.scalar_mul(6)


def test_base_point_table_built_once(monkeypatch):
    builds = []
    real_table = curve.PrecomputedTable

    def counting_table(point):
        builds.append(point)
        return real_table(point)

    monkeypatch.setattr(curve, "_BASE_POINT_TABLE", None)
    monkeypatch.setattr(curve, "PrecomputedTable", counting_table)

    tables = []
    barrier = threading.Barrier(8)

    def worker():
        barrier.wait()
        tables.append(curve.get_base_point_table())

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(builds) == 1
    assert len(tables) == 8
    assert all(table is tables[0] for table in tables)
    assert tables[0].scalar_mul(9) == BASE_POINT.scalar_mul(9)
    print("✓ Base point table built once under concurrent access")
