"""
Stealth Curve Arithmetic Module
Các phép toán trên đường cong twisted Edwards: -x^2 + y^2 = 1 + dx^2y^2

Sử dụng Extended Coordinates (X:Y:Z:T) với XY = ZT
- Point (x, y) được biểu diễn là (X:Y:Z:T) với x = X/Z, y = Y/Z
- Extended coordinates cho phép complete addition law

Mọi public key (view, spend, ephemeral, stealth address) đều là
điểm trên đường cong này, encode theo RFC 8032 thành 32 bytes.
"""

import logging
import threading

from .Stealth_FieldArithmetic import FieldElement, P, D, ZERO, ONE, SQRT_M1

logger = logging.getLogger(__name__)

# Base point B có order l = 2^252 + 27742317777372353535851937790883648493
L = 2 ** 252 + 27742317777372353535851937790883648493


class EdwardsPoint:
    """
    Điểm trên đường cong twisted Edwards
    Sử dụng Extended Coordinates (X:Y:Z:T) với XY = ZT
    """

    __slots__ = ("X", "Y", "Z", "T")

    def __init__(self, X, Y, Z, T):
        """
        Args:
            X, Y, Z, T: FieldElement objects
        """
        if not all(isinstance(coord, FieldElement) for coord in (X, Y, Z, T)):
            raise TypeError("Coordinates must be FieldElement")

        self.X = X
        self.Y = Y
        self.Z = Z
        self.T = T

    @staticmethod
    def zero():
        """Điểm trung tính (identity): (0, 1)"""
        return EdwardsPoint(ZERO.copy(), ONE.copy(), ONE.copy(), ZERO.copy())

    @staticmethod
    def from_affine(x, y):
        """
        Tạo point từ affine coordinates (x, y)
        Extended: (X:Y:Z:T) = (x:y:1:xy)
        """
        if not isinstance(x, FieldElement) or not isinstance(y, FieldElement):
            raise TypeError("x and y must be FieldElement")

        return EdwardsPoint(x.copy(), y.copy(), ONE.copy(), x.mul(y))

    def to_affine(self):
        """
        Convert về affine coordinates (x, y)
        x = X/Z, y = Y/Z
        """
        if self.Z.is_zero():
            raise ValueError("Point has no affine representation")

        Z_inv = self.Z.invert()
        return self.X.mul(Z_inv), self.Y.mul(Z_inv)

    def is_on_curve(self):
        """
        Kiểm tra -x^2 + y^2 = 1 + dx^2y^2
        """
        x, y = self.to_affine()

        x2 = x.square()
        y2 = y.square()

        left = y2.sub(x2)
        right = ONE.add(D.mul(x2).mul(y2))

        return left == right

    def __eq__(self, other):
        """
        (X1:Y1:Z1:T1) == (X2:Y2:Z2:T2) nếu X1*Z2 == X2*Z1 và Y1*Z2 == Y2*Z1
        """
        if not isinstance(other, EdwardsPoint):
            return False

        return (self.X.mul(other.Z) == other.X.mul(self.Z)
                and self.Y.mul(other.Z) == other.Y.mul(self.Z))

    def __hash__(self):
        return hash(self.encode())

    def __repr__(self):
        try:
            x, y = self.to_affine()
            return f"EdwardsPoint(x={x.to_int()}, y={y.to_int()})"
        except ValueError:
            return "EdwardsPoint(at infinity)"

    def add(self, other):
        """
        Cộng hai điểm sử dụng complete addition law (Hisil et al.)

        Cost: 9 multiplications
        """
        A = self.X.mul(other.X)
        B = self.Y.mul(other.Y)
        C = self.T.mul(D).mul(other.T)
        D_val = self.Z.mul(other.Z)

        # E = (X1+Y1) * (X2+Y2) - A - B
        E = self.X.add(self.Y).mul(other.X.add(other.Y)).sub(A).sub(B)
        F = D_val.sub(C)
        G = D_val.add(C)
        # H = B - a*A với a = -1
        H = B.add(A)

        return EdwardsPoint(E.mul(F), G.mul(H), F.mul(G), E.mul(H))

    def double(self):
        """
        Nhân đôi điểm (Hisil et al. doubling formula)

        Cost: 4 multiplications + 4 squarings
        """
        A = self.X.square()
        B = self.Y.square()
        Z2 = self.Z.square()
        C = Z2.add(Z2)

        H = A.add(B)
        E = H.sub(self.X.add(self.Y).square())
        G = A.sub(B)
        F = C.add(G)

        return EdwardsPoint(E.mul(F), G.mul(H), F.mul(G), E.mul(H))

    def scalar_mul(self, scalar):
        """
        Nhân vô hướng: scalar * Point (double-and-add)

        Args:
            scalar: integer
        """
        if scalar == 0:
            return EdwardsPoint.zero()

        if scalar < 0:
            return self.neg().scalar_mul(-scalar)

        result = EdwardsPoint.zero()
        temp = self

        while scalar > 0:
            if scalar & 1:
                result = result.add(temp)
            temp = temp.double()
            scalar >>= 1

        return result

    def neg(self):
        """
        -P = (-x, y); extended: (-X, Y, Z, -T)
        """
        return EdwardsPoint(self.X.neg(), self.Y.copy(), self.Z.copy(), self.T.neg())

    def encode(self):
        """
        Encode điểm thành 32 bytes
        Format: y-coordinate (255 bits) + sign bit của x (1 bit)
        """
        x, y = self.to_affine()

        y_bytes = bytearray(y.to_bytes())
        if x.is_negative():
            y_bytes[31] |= 0x80
        else:
            y_bytes[31] &= 0x7F

        return bytes(y_bytes)

    @staticmethod
    def decode(data):
        """
        Decode 32 bytes thành điểm

        Args:
            data: bytes (32 bytes)

        Returns:
            EdwardsPoint hoặc None nếu encoding không hợp lệ

        Raises:
            ValueError: nếu data không đúng 32 bytes
        """
        if len(data) != 32:
            raise ValueError("Point encoding must be 32 bytes")

        data = bytearray(data)
        x_sign = (data[31] & 0x80) != 0
        data[31] &= 0x7F

        y_int = int.from_bytes(bytes(data), byteorder='little')
        # Non-canonical y (y >= p) bị từ chối
        if y_int >= P:
            return None
        y = FieldElement(y_int)

        # x^2 = (y^2 - 1) / (d*y^2 + 1)
        y2 = y.square()
        u = y2.sub(ONE)
        v = D.mul(y2).add(ONE)

        try:
            x = compute_sqrt_ratio(u, v)
        except ValueError:
            return None

        if x.is_zero() and x_sign:
            return None

        if bool(x.is_negative()) != x_sign:
            x = x.neg()

        point = EdwardsPoint.from_affine(x, y)
        if not point.is_on_curve():
            return None

        return point

    def is_identity(self):
        return self == EdwardsPoint.zero()


def compute_sqrt_ratio(u, v):
    """
    Tính sqrt(u/v) cho p ≡ 5 (mod 8)
    x = u*v^3 * (u*v^7)^((p-5)/8), nhân thêm sqrt(-1) nếu cần

    Raises:
        ValueError: nếu u/v không phải quadratic residue
    """
    v3 = v.square().mul(v)
    v7 = v3.square().mul(v)
    uv7 = u.mul(v7)

    candidate = u.mul(v3).mul(uv7.pow((P - 5) // 8))

    if v.mul(candidate.square()) == u:
        return candidate

    candidate = candidate.mul(SQRT_M1)
    if v.mul(candidate.square()) == u:
        return candidate

    raise ValueError("No square root exists")


def get_base_point():
    """
    Base point B của Ed25519: y = 4/5, x dương
    """
    y = FieldElement(4).mul(FieldElement(5).invert())

    y2 = y.square()
    u = y2.sub(ONE)
    v = D.mul(y2).add(ONE)
    x = compute_sqrt_ratio(u, v)

    if x.is_negative():
        x = x.neg()

    return EdwardsPoint.from_affine(x, y)


BASE_POINT = get_base_point()


class PrecomputedTable:
    """
    Bảng precomputed cho fixed-base scalar multiplication
    Radix-16 với 8 multiples cho mỗi vị trí

    Lưu trữ: [16^i * B for i in 0..63], mỗi entry có [1P, 2P, ..., 8P]
    """

    def __init__(self, base_point):
        self.base_point = base_point
        self.table = []

        current = base_point
        for _ in range(64):
            multiples = [current]
            for _ in range(7):
                multiples.append(multiples[-1].add(current))
            self.table.append(multiples)

            for _ in range(4):
                current = current.double()

    def scalar_mul(self, scalar):
        """
        scalar * base_point qua bảng precomputed

        Scalar ngoài [0, 2^255) đi đường double-and-add thông thường.
        """
        if scalar == 0:
            return EdwardsPoint.zero()
        if scalar < 0 or scalar >> 255:
            return self.base_point.scalar_mul(scalar)

        result = EdwardsPoint.zero()
        for i, digit in enumerate(self._scalar_to_radix16(scalar)):
            if digit == 0:
                continue

            point = self.table[i][abs(digit) - 1]
            if digit < 0:
                point = point.neg()

            result = result.add(point)

        return result

    @staticmethod
    def _scalar_to_radix16(scalar):
        """
        Signed radix-16: mỗi digit ∈ {-8, ..., 8}
        """
        digits = []
        carry = 0

        for _ in range(64):
            digit = (scalar & 0xF) + carry
            scalar >>= 4
            carry = 0

            if digit > 8:
                digit -= 16
                carry = 1

            digits.append(digit)

        return digits


_BASE_POINT_TABLE = None
_BASE_POINT_TABLE_LOCK = threading.Lock()


def get_base_point_table():
    """Lấy hoặc tạo precomputed table cho BASE_POINT (chỉ build một lần, kể cả khi gọi từ nhiều thread)"""
    global _BASE_POINT_TABLE
    if _BASE_POINT_TABLE is None:
        with _BASE_POINT_TABLE_LOCK:
            if _BASE_POINT_TABLE is None:
                logger.debug("Building precomputed table for BASE_POINT")
                _BASE_POINT_TABLE = PrecomputedTable(BASE_POINT)
    return _BASE_POINT_TABLE
