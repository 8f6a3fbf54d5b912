"""
Stealth Error Types

Mọi lỗi đều kế thừa ValueError để code gọi bắt ValueError
(như với các module arithmetic) vẫn hoạt động.
"""


class StealthError(ValueError):
    """Base class cho mọi lỗi của stealth core"""

    kind = "StealthError"


class InvalidFormat(StealthError):
    """Meta-address hoặc chuỗi base58 sai định dạng"""

    kind = "InvalidFormat"


class InvalidKeyLength(StealthError):
    """Key sau khi decode không đúng 32 bytes"""

    kind = "InvalidKeyLength"


class InvalidCurvePoint(StealthError):
    """Public key không decode được thành điểm hợp lệ trên curve"""

    kind = "InvalidCurvePoint"


class InvalidSeedLength(StealthError):
    """Seed ngắn hơn 32 bytes"""

    kind = "InvalidSeedLength"


class InvalidOutputIndex(StealthError):
    """Output index nằm ngoài [0, 255]"""

    kind = "InvalidOutputIndex"


class DerivationMismatch(StealthError):
    """Spending key derive ra không khớp với stealth address mong đợi"""

    kind = "DerivationMismatch"
