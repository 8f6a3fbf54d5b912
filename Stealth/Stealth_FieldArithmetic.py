"""
Stealth Field Arithmetic Module
Các phép toán trên trường hữu hạn F_{2^255-19}

Dùng chung cho cả hai dạng đường cong:
- Twisted Edwards (Ed25519) cho key generation
- Montgomery (Curve25519) cho X25519 ECDH

Mỗi FieldElement giữ một gmpy2.mpz đã reduce về [0, p).
gmpy2 xử lý phép nhân/lũy thừa 255-bit nhanh hơn int thuần.
"""

import gmpy2
from gmpy2 import mpz

# Số nguyên tố của trường: p = 2^255 - 19
P = (1 << 255) - 19
_P = mpz(P)


class FieldElement:
    """
    Biểu diễn một phần tử trong F_{2^255-19}
    """

    __slots__ = ("value",)

    def __init__(self, value=0):
        """
        Args:
            value: int hoặc mpz, sẽ được reduce mod p
        """
        self.value = mpz(value) % _P

    def to_int(self):
        """Convert về Python int"""
        return int(self.value)

    def to_bytes(self):
        """Convert sang 32 bytes (little-endian)"""
        return self.to_int().to_bytes(32, byteorder='little')

    @staticmethod
    def from_bytes(data):
        """
        Tạo FieldElement từ 32 bytes (little-endian)

        Args:
            data: bytes object (32 bytes)
        """
        if len(data) != 32:
            raise ValueError("Field element encoding must be 32 bytes")
        return FieldElement(int.from_bytes(data, byteorder='little'))

    def __repr__(self):
        return f"FieldElement({self.to_int()})"

    def __eq__(self, other):
        if not isinstance(other, FieldElement):
            return False
        return self.value == other.value

    def __hash__(self):
        return hash(int(self.value))

    def copy(self):
        return FieldElement(self.value)

    def add(self, other):
        return FieldElement(self.value + other.value)

    def sub(self, other):
        return FieldElement(self.value - other.value)

    def mul(self, other):
        return FieldElement(self.value * other.value)

    def mul_small(self, n):
        """Nhân với hằng số nhỏ (ví dụ a24 = 121665 trong ladder)"""
        return FieldElement(self.value * n)

    def square(self):
        return FieldElement(self.value * self.value)

    def neg(self):
        """Phủ định: -x"""
        return FieldElement(-self.value)

    def invert(self):
        """
        Nghịch đảo: x^(-1) mod p

        Raises:
            ValueError: nếu x = 0
        """
        if self.value == 0:
            raise ValueError("Cannot invert zero")
        return FieldElement(gmpy2.invert(self.value, _P))

    def pow(self, exp):
        """Lũy thừa: self^exp mod p"""
        return FieldElement(gmpy2.powmod(self.value, exp, _P))

    def is_zero(self):
        return self.value == 0

    def sqrt(self):
        """
        Tính căn bậc hai modulo p
        Vì p ≡ 5 (mod 8): sqrt(x) = x^((p+3)/8) hoặc x^((p+3)/8) * sqrt(-1)

        Raises:
            ValueError: nếu x không phải quadratic residue
        """
        candidate = self.pow((P + 3) // 8)
        if candidate.square() == self:
            return candidate

        candidate = candidate.mul(SQRT_M1)
        if candidate.square() == self:
            return candidate

        raise ValueError("No square root exists")

    def is_negative(self):
        """
        Element là negative nếu bit thấp nhất = 1 (RFC 8032 encoding)
        """
        return int(self.value & 1)


# Các constants quan trọng
ZERO = FieldElement(0)
ONE = FieldElement(1)
D = FieldElement((-121665 * pow(121666, P - 2, P)) % P)  # -121665/121666 mod p
SQRT_M1 = FieldElement(pow(2, (P - 1) // 4, P))  # sqrt(-1) mod p

# (A - 2) / 4 với A = 486662 của Curve25519 (RFC 7748)
A24 = 121665
